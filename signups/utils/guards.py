"""FastAPI dependencies guarding the public submission endpoints."""
from __future__ import annotations

from fastapi import Depends, Request

from ..config import Settings, get_settings
from ..errors import OriginRejected, RateLimited
from ..logging_config import logger
from .ip_tools import client_identity, origin_allowed
from .rate_limiter import AdmissionGate


def get_admission_gate(request: Request) -> AdmissionGate:
    return request.app.state.admission_gate


async def require_allowed_origin(request: Request, settings: Settings = Depends(get_settings)) -> None:
    if not origin_allowed(request, settings.allowed_origin):
        logger.info(
            "origin.rejected",
            path=request.url.path,
            origin=request.headers.get("origin"),
            referer=request.headers.get("referer"),
        )
        raise OriginRejected()


async def enforce_rate_limit(request: Request, gate: AdmissionGate = Depends(get_admission_gate)) -> None:
    identity = client_identity(request)
    if not await gate.allow(identity):
        logger.info("ratelimit.rejected", client=identity, path=request.url.path)
        raise RateLimited()
