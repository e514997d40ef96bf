"""Request inspection helpers."""
from __future__ import annotations

from fastapi import Request

from .rate_limiter import UNKNOWN_CLIENT


def client_identity(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    first_hop = forwarded.split(",")[0].strip()
    if first_hop:
        return first_hop
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT


def origin_allowed(request: Request, allowed_origin: str | None) -> bool:
    if not allowed_origin or allowed_origin == "*":
        return True
    origin = request.headers.get("origin", "")
    referer = request.headers.get("referer", "")
    return origin.startswith(allowed_origin) or referer.startswith(allowed_origin)
