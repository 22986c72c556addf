"""Practice session endpoints — /api/v1/sessions/*."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from jgp.auth.dependencies import get_current_parent
from jgp.auth.permissions import require_permission
from jgp.database import get_session as get_db
from jgp.db.models import Parent, SessionStatus
from jgp.dependencies import Page, pagination
from jgp.schemas import envelope
from jgp.sessions import service
from jgp.sessions.schemas import CompleteDrillRequest, GenerateSessionRequest, SessionListOut, SessionOut

router = APIRouter(prefix="/api/v1/sessions", tags=["Sessions"])

_read = [Depends(require_permission("sessions:read"))]
_write = [Depends(require_permission("sessions:write"))]


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=_write)
async def generate_session(
    body: GenerateSessionRequest,
    parent: Parent = Depends(get_current_parent),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Start a new session with drills picked for the child's age band."""
    session = await service.generate_session(db, parent.id, body.child_id, body.duration_minutes)
    await db.commit()
    return envelope({"session": SessionOut.model_validate(session)})


@router.get("", dependencies=_read)
async def list_sessions(
    child_id: str | None = Query(None, alias="childId"),
    session_status: SessionStatus | None = Query(None, alias="status"),
    page: Page = Depends(pagination),
    parent: Parent = Depends(get_current_parent),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    sessions, total = await service.list_sessions(
        db,
        parent.id,
        child_id=child_id,
        status=session_status.value if session_status else None,
        limit=page.limit,
        offset=page.offset,
    )
    return envelope(
        SessionListOut(
            sessions=[SessionOut.model_validate(s) for s in sessions],
            total=total,
            limit=page.limit,
            offset=page.offset,
        )
    )


@router.get("/{session_id}", dependencies=_read)
async def get_session(
    session_id: str,
    parent: Parent = Depends(get_current_parent),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    session = await service.get_session(db, parent.id, session_id)
    return envelope({"session": SessionOut.model_validate(session)})


@router.patch("/{session_id}/drills/{session_drill_id}", dependencies=_write)
async def complete_drill(
    session_id: str,
    session_drill_id: str,
    body: CompleteDrillRequest | None = Body(None),  # noqa: ARG001
    parent: Parent = Depends(get_current_parent),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Mark a drill done. Any starsEarned in the body is ignored."""
    session = await service.complete_drill(db, parent.id, session_id, session_drill_id)
    await db.commit()
    return envelope({"session": SessionOut.model_validate(session)})


@router.post("/{session_id}/complete", dependencies=_write)
async def complete_session(
    session_id: str,
    parent: Parent = Depends(get_current_parent),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Close the session and credit its stars to the child."""
    session = await service.complete_session(db, parent.id, session_id)
    await db.commit()
    return envelope({"session": SessionOut.model_validate(session)})
