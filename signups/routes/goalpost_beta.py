"""GoalPost mobile beta signups, one per email and platform."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.schemas import GoalpostBetaRequest, PlatformCountResponse, SignupCreated
from ..services.emailer import EmailNotifier
from ..services.notifications import get_notifier
from ..services.signups import GoalpostBetaService

router = APIRouter(prefix="/api/goalpost-beta", tags=["goalpost-beta"])


def get_service(notifier: EmailNotifier = Depends(get_notifier)) -> GoalpostBetaService:
    return GoalpostBetaService(notifier=notifier.send)


@router.post("", response_model=SignupCreated, status_code=201)
async def create_goalpost_signup(
    payload: GoalpostBetaRequest,
    db: AsyncSession = Depends(get_db),
    service: GoalpostBetaService = Depends(get_service),
) -> SignupCreated:
    signup = await service.register(db, payload.model_dump())
    return SignupCreated(
        id=signup.id,
        created_at=signup.created_at,
        message=f"Registered for the GoalPost {signup.platform} beta",
    )


@router.get("", response_model=PlatformCountResponse)
async def count_goalpost_signups(
    platform: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    service: GoalpostBetaService = Depends(get_service),
) -> PlatformCountResponse:
    counts = await service.platform_counts(db)
    total = sum(counts.values())
    selected = platform if platform in counts else None
    return PlatformCountResponse(
        ios=counts["ios"],
        android=counts["android"],
        total=total,
        platform=selected or "all",
        count=counts[selected] if selected else total,
    )
