"""Reference data: roles, permissions, the starter drill catalogue and the avatar shop.

Seeding is idempotent: rows are looked up by their natural key and only
missing ones are inserted, so it is safe to run on every startup.
"""

from __future__ import annotations

import re
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jgp.db.models import AgeBand, AvatarItem, Drill, ItemType, Permission, Rarity, Role, RolePermission

logger = structlog.get_logger()

ADMIN_ROLE = "admin"
PARENT_ROLE = "parent"
ADMIN_PERMISSION = "admin:all"

PERMISSIONS: dict[str, str] = {
    ADMIN_PERMISSION: "Full administrative access",
    "children:read": "View child profiles",
    "children:write": "Create and update child profiles",
    "children:delete": "Delete child profiles",
    "drills:read": "Browse the drill catalogue",
    "drills:write": "Manage the drill catalogue",
    "sessions:read": "View practice sessions",
    "sessions:write": "Start and complete practice sessions",
    "settings:read": "View settings",
    "settings:write": "Update settings",
    "avatar:read": "View avatar and shop",
    "avatar:write": "Purchase and equip avatar items",
}

ROLE_PERMISSIONS: dict[str, list[str]] = {
    ADMIN_ROLE: [ADMIN_PERMISSION],
    PARENT_ROLE: [p for p in PERMISSIONS if p not in (ADMIN_PERMISSION, "drills:write")],
}


def slugify(*parts: str) -> str:
    """'Putt to the Cup', 'AGE_4_6' -> 'putt-to-the-cup-age-4-6'."""
    text = "-".join(parts).lower()
    return re.sub(r"[^a-z0-9]+", "-", text).strip("-")


DRILL_SEED_DATA: list[dict[str, Any]] = [
    # Ages 4-6
    {
        "title": "Putt to a Cone",
        "age_band": AgeBand.AGE_4_6,
        "skill_category": "Putting",
        "duration_minutes": 5,
        "setup": "Place a cone or target 3 feet away from the starting position.",
        "child_action": "Roll the ball to try and hit the cone!",
        "parent_cue": "Encourage a smooth back-and-forth motion like a pendulum.",
        "common_mistakes": "Lifting head before contact, gripping too tight.",
        "success_criteria": "Ball stops within 1 foot of the target.",
    },
    {
        "title": "Happy Feet Balance",
        "age_band": AgeBand.AGE_4_6,
        "skill_category": "Balance",
        "duration_minutes": 3,
        "setup": "Find a flat grassy area.",
        "child_action": "Stand on one foot like a flamingo for 10 seconds!",
        "parent_cue": "Count together and cheer them on.",
        "common_mistakes": "Looking down instead of ahead.",
        "success_criteria": "Balance for 10 seconds without putting foot down.",
    },
    {
        "title": "Putt to the Cup",
        "age_band": AgeBand.AGE_4_6,
        "skill_category": "Putting",
        "duration_minutes": 5,
        "setup": "Place ball 3 feet from cup on flat surface.",
        "child_action": "Roll the ball into the cup using putter.",
        "parent_cue": 'Say "Keep your eyes on the ball!"',
        "common_mistakes": "Lifting head too early, hitting too hard.",
        "success_criteria": "Make 3 out of 5 putts.",
    },
    {
        "title": "Chip and Chase",
        "age_band": AgeBand.AGE_4_6,
        "skill_category": "Chipping",
        "duration_minutes": 5,
        "setup": "Place ball on grass 10 feet from target.",
        "child_action": "Chip ball toward target, then chase and retrieve.",
        "parent_cue": 'Encourage them to "pop" the ball up gently.',
        "common_mistakes": "Scooping instead of hitting down.",
        "success_criteria": "Get 3 chips within 5 feet of target.",
    },
    {
        "title": "Golf Ball Bowling",
        "age_band": AgeBand.AGE_4_6,
        "skill_category": "Coordination",
        "duration_minutes": 5,
        "setup": "Set up plastic bottles as pins, ball 6 feet away.",
        "child_action": "Roll ball with putter to knock down pins.",
        "parent_cue": "Count pins together, celebrate success!",
        "common_mistakes": "Hitting too soft, not aiming.",
        "success_criteria": "Knock down 3+ pins in one roll.",
    },
    # Ages 6-8
    {
        "title": "Chip and Land",
        "age_band": AgeBand.AGE_6_8,
        "skill_category": "Chipping",
        "duration_minutes": 7,
        "setup": "Set up a hula hoop or circle marker 10 yards away.",
        "child_action": "Chip the ball and try to land it inside the circle!",
        "parent_cue": "Watch for a descending strike and follow through.",
        "common_mistakes": "Scooping the ball instead of hitting down.",
        "success_criteria": "Land 3 out of 5 balls in the target area.",
    },
    {
        "title": "Ladder Putts",
        "age_band": AgeBand.AGE_6_8,
        "skill_category": "Putting",
        "duration_minutes": 5,
        "setup": "Place 5 balls at 2, 4, 6, 8, 10 feet from hole.",
        "child_action": "Putt each ball starting from closest.",
        "parent_cue": "Watch their tempo - smooth stroke!",
        "common_mistakes": "Rushing, inconsistent stance.",
        "success_criteria": "Make 3 of 5 putts.",
    },
    {
        "title": "Target Practice",
        "age_band": AgeBand.AGE_6_8,
        "skill_category": "Iron Play",
        "duration_minutes": 10,
        "setup": "Place hula hoop 20 yards away as target.",
        "child_action": "Hit 5 balls trying to land in the hoop.",
        "parent_cue": "Focus on smooth swing, not power.",
        "common_mistakes": "Swinging too hard, head movement.",
        "success_criteria": "Land 2 of 5 balls in or near hoop.",
    },
    {
        "title": "Bunker Splash",
        "age_band": AgeBand.AGE_6_8,
        "skill_category": "Sand Play",
        "duration_minutes": 5,
        "setup": "Place ball in sand bunker, rake smooth.",
        "child_action": "Splash the sand and ball out of bunker.",
        "parent_cue": 'Say "Hit the sand, not the ball!"',
        "common_mistakes": "Trying to pick ball clean.",
        "success_criteria": "Get ball out of bunker 3 of 5 times.",
    },
    # Ages 8-10
    {
        "title": "Clock Drill",
        "age_band": AgeBand.AGE_8_10,
        "skill_category": "Putting",
        "duration_minutes": 10,
        "setup": "Place 8 balls in circle 4 feet from hole.",
        "child_action": "Make all putts around the clock.",
        "parent_cue": "Encourage consistent routine for each putt.",
        "common_mistakes": "Speeding up, breaking routine.",
        "success_criteria": "Make full circle without missing.",
    },
    {
        "title": "Driver Challenge",
        "age_band": AgeBand.AGE_8_10,
        "skill_category": "Driving",
        "duration_minutes": 10,
        "setup": "Tee up ball on driving range or open area.",
        "child_action": "Hit 5 drives focusing on tempo.",
        "parent_cue": "Watch balance - finish facing target.",
        "common_mistakes": "Overswinging, loss of balance.",
        "success_criteria": "Hit 3 straight drives with good balance.",
    },
    {
        "title": "Up and Down",
        "age_band": AgeBand.AGE_8_10,
        "skill_category": "Short Game",
        "duration_minutes": 10,
        "setup": "Drop ball 15 yards from green, hole cut in middle.",
        "child_action": "Chip onto green and putt to hole.",
        "parent_cue": "Read the green together before putting.",
        "common_mistakes": "Poor club selection, rushing putt.",
        "success_criteria": "Complete up-and-down 2 of 5 times.",
    },
]

AVATAR_ITEM_SEED_DATA: list[dict[str, Any]] = [
    # Starter items (free)
    {"type": ItemType.HAT, "name": "Golf Cap", "unlock_stars": 0, "rarity": Rarity.COMMON},
    {"type": ItemType.SHIRT, "name": "Green Polo", "unlock_stars": 0, "rarity": Rarity.COMMON},
    {"type": ItemType.SHOES, "name": "White Sneakers", "unlock_stars": 0, "rarity": Rarity.COMMON},
    {"type": ItemType.CLUB_SKIN, "name": "Classic Putter", "unlock_stars": 0, "rarity": Rarity.COMMON},
    # Low tier
    {"type": ItemType.ACCESSORY, "name": "Golf Glove", "unlock_stars": 10, "rarity": Rarity.COMMON},
    {"type": ItemType.HAT, "name": "Bucket Hat", "unlock_stars": 15, "rarity": Rarity.COMMON},
    # Mid tier
    {"type": ItemType.SHIRT, "name": "Striped Polo", "unlock_stars": 20, "rarity": Rarity.UNCOMMON},
    {"type": ItemType.HAT, "name": "Sun Visor", "unlock_stars": 25, "rarity": Rarity.UNCOMMON},
    {"type": ItemType.SHOES, "name": "Golf Shoes", "unlock_stars": 25, "rarity": Rarity.UNCOMMON},
    # High tier
    {"type": ItemType.ACCESSORY, "name": "Cool Sunglasses", "unlock_stars": 35, "rarity": Rarity.RARE},
    {"type": ItemType.SHIRT, "name": "Pro Jersey", "unlock_stars": 40, "rarity": Rarity.RARE},
    {"type": ItemType.HAT, "name": "Champion Cap", "unlock_stars": 50, "rarity": Rarity.RARE},
    {"type": ItemType.SHOES, "name": "Rocket Spikes", "unlock_stars": 75, "rarity": Rarity.EPIC},
    # Premium tier
    {"type": ItemType.CLUB_SKIN, "name": "Golden Putter", "unlock_stars": 100, "rarity": Rarity.LEGENDARY},
]


async def seed_permissions(db: AsyncSession) -> int:
    """Insert the permission set and the built-in roles. Returns rows inserted."""
    inserted = 0

    existing = {p.name: p for p in (await db.execute(select(Permission))).scalars()}
    for name, description in PERMISSIONS.items():
        if name not in existing:
            existing[name] = Permission(name=name, description=description)
            db.add(existing[name])
            inserted += 1

    roles = {r.name: r for r in (await db.execute(select(Role))).scalars()}
    for role_name in ROLE_PERMISSIONS:
        if role_name not in roles:
            roles[role_name] = Role(name=role_name, description=f"Built-in {role_name} role")
            db.add(roles[role_name])
            inserted += 1
    await db.flush()

    rows = await db.execute(select(RolePermission.role_id, RolePermission.permission_id))
    links = {(row.role_id, row.permission_id) for row in rows}
    for role_name, perm_names in ROLE_PERMISSIONS.items():
        role_id = roles[role_name].id
        for perm_name in perm_names:
            perm_id = existing[perm_name].id
            if (role_id, perm_id) not in links:
                db.add(RolePermission(role_id=role_id, permission_id=perm_id))
                inserted += 1
    await db.flush()
    return inserted


async def seed_drills(db: AsyncSession) -> int:
    """Insert missing catalogue drills, keyed by title + age band."""
    known = set((await db.execute(select(Drill.id))).scalars())
    inserted = 0
    for data in DRILL_SEED_DATA:
        drill_id = slugify(data["title"], data["age_band"].value)
        if drill_id in known:
            continue
        db.add(Drill(id=drill_id, **{**data, "age_band": data["age_band"].value}))
        inserted += 1
    await db.flush()
    return inserted


async def seed_avatar_items(db: AsyncSession) -> int:
    """Insert missing shop items, keyed by slugified name."""
    known = set((await db.execute(select(AvatarItem.id))).scalars())
    inserted = 0
    for data in AVATAR_ITEM_SEED_DATA:
        item_id = slugify(data["name"])
        if item_id in known:
            continue
        item_type = data["type"].value
        db.add(
            AvatarItem(
                id=item_id,
                name=data["name"],
                type=item_type,
                image_url=f"/assets/avatar/{item_type.lower()}/{item_id}.png",
                unlock_stars=data["unlock_stars"],
                rarity=data["rarity"].value,
            )
        )
        inserted += 1
    await db.flush()
    return inserted


async def seed_reference_data(db: AsyncSession) -> dict[str, int]:
    """Seed everything and commit."""
    counts = {
        "permissions": await seed_permissions(db),
        "drills": await seed_drills(db),
        "avatar_items": await seed_avatar_items(db),
    }
    await db.commit()
    logger.info("reference_data_seeded", **counts)
    return counts
