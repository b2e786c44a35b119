# api/_resp.py
from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional

from fastapi import Request


def _meta(request: Optional[Request], **extras) -> dict:
    meta = {
        "request_id": getattr(request.state, "request_id", None) if request else None,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    meta.update(extras)
    return meta


def ok(
    request: Optional[Request] = None,
    data: dict | list | str | int | float | None = None,
    **extras,
):
    payload = {"status": "success"}
    if data is not None:
        payload["data"] = data
    payload["meta"] = _meta(request, **extras)
    return payload


def fail(request: Optional[Request], code: str, message: str) -> dict:
    return {
        "status": "error",
        "error": {"code": code, "message": message},
        "meta": _meta(request),
    }
