"""Parent PIN: a 4-digit secondary gate, hashed like a password."""

from __future__ import annotations

import structlog

from jgp.auth.password import hash_pin, verify_pin
from jgp.db.models import Parent
from jgp.errors import IncorrectPin, InvalidPin, PinAlreadySet, PinNotSet

logger = structlog.get_logger()


def has_pin(parent: Parent) -> bool:
    return parent.pin_hash is not None


def set_pin(parent: Parent, pin: str) -> None:
    """Set the first PIN. Raises PinAlreadySet if one exists."""
    if has_pin(parent):
        raise PinAlreadySet
    parent.pin_hash = hash_pin(pin)
    logger.info("pin_set", parent_id=parent.id)


def check_pin(parent: Parent, pin: str) -> None:
    """Raise PinNotSet or InvalidPin unless ``pin`` matches."""
    if parent.pin_hash is None:
        raise PinNotSet
    if not verify_pin(pin, parent.pin_hash):
        logger.info("pin_verification_failed", parent_id=parent.id)
        raise InvalidPin


def change_pin(parent: Parent, current_pin: str, new_pin: str) -> None:
    """Replace the PIN after checking the current one."""
    if parent.pin_hash is None:
        raise PinNotSet
    if not verify_pin(current_pin, parent.pin_hash):
        raise IncorrectPin
    parent.pin_hash = hash_pin(new_pin)
    logger.info("pin_changed", parent_id=parent.id)
