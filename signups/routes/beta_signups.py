"""Beta access signups."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.schemas import BetaSignupRequest, BetaStats, CountResponse, SignupCreated
from ..services.emailer import EmailNotifier
from ..services.notifications import get_notifier
from ..services.signups import BetaSignupService

router = APIRouter(prefix="/api/beta-signups", tags=["beta-signups"])


def get_service(notifier: EmailNotifier = Depends(get_notifier)) -> BetaSignupService:
    return BetaSignupService(notifier=notifier.send)


@router.post("", response_model=SignupCreated, status_code=201)
async def create_beta_signup(
    payload: BetaSignupRequest,
    db: AsyncSession = Depends(get_db),
    service: BetaSignupService = Depends(get_service),
) -> SignupCreated:
    signup = await service.register(db, payload.model_dump())
    return SignupCreated(id=signup.id, created_at=signup.created_at, message="Successfully signed up for beta access")


@router.get("", response_model=CountResponse)
async def count_beta_signups(
    db: AsyncSession = Depends(get_db),
    service: BetaSignupService = Depends(get_service),
) -> CountResponse:
    count = await service.count(db)
    return CountResponse(count=count, message=f"Total beta signups: {count}")


@router.get("/stats", response_model=BetaStats)
async def beta_signup_stats(
    db: AsyncSession = Depends(get_db),
    service: BetaSignupService = Depends(get_service),
) -> BetaStats:
    # Unauthenticated: deploy behind an access-control layer.
    return BetaStats.model_validate(await service.stats(db))
