"""Shared FastAPI dependencies."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Query


@dataclass(frozen=True)
class Page:
    """Bounded limit/offset pagination window."""

    limit: int
    offset: int


def pagination(
    limit: int = Query(20, ge=1, le=50),
    offset: int = Query(0, ge=0),
) -> Page:
    """Parse ?limit=&offset= (1-50, >= 0; defaults 20/0)."""
    return Page(limit=limit, offset=offset)
