"""Liveness probe and service descriptor."""
from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from ..config import Settings, get_settings
from ..models.schemas import HealthStatus, ServiceDescriptor

router = APIRouter(tags=["health"])

ENDPOINTS = {
    "health": "/health",
    "betaSignups": "/api/beta-signups",
    "competitionSignups": "/api/competition-signups",
    "competitionSubmissions": "/api/competition-submissions",
    "goalpostBeta": "/api/goalpost-beta",
}


@router.get("/health", response_model=HealthStatus)
async def health(settings: Settings = Depends(get_settings)) -> HealthStatus:
    return HealthStatus(status="OK", timestamp=datetime.now(timezone.utc), environment=settings.environment)


@router.get("/", response_model=ServiceDescriptor)
async def root(settings: Settings = Depends(get_settings)) -> ServiceDescriptor:
    return ServiceDescriptor(name=settings.app_name, version=settings.app_version, endpoints=ENDPOINTS)
