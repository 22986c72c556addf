"""Shared wire conventions: camelCase models and the response envelope."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads snake_case or camelCase and writes camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _meta(**extra: Any) -> dict[str, Any]:  # noqa: ANN401
    meta: dict[str, Any] = {"timestamp": datetime.now(timezone.utc).isoformat()}
    request_id = structlog.contextvars.get_contextvars().get("request_id")
    if request_id:
        meta["requestId"] = request_id
    meta.update(extra)
    return meta


def _dump(value: Any) -> Any:  # noqa: ANN401
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, dict):
        return {k: _dump(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_dump(v) for v in value]
    return value


def envelope(data: Any, **meta: Any) -> dict[str, Any]:  # noqa: ANN401
    """Wrap a success payload: {success, data, meta}."""
    return {"success": True, "data": _dump(data), "meta": _meta(**meta)}


def error_envelope(code: str, message: str, details: Any = None) -> dict[str, Any]:  # noqa: ANN401
    """Build the failure body: {success: false, error: {code, message, details?}, meta}."""
    error: dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return {"success": False, "error": error, "meta": _meta()}
