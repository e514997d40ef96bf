"""Competition entries. Origin-checked and rate limited."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings, get_settings
from ..database import get_db
from ..models.schemas import CampaignCountResponse, CompetitionSignupRequest, CompetitionStats, SignupCreated
from ..services.emailer import EmailNotifier
from ..services.notifications import get_notifier
from ..services.signups import CompetitionSignupService
from ..utils.guards import enforce_rate_limit, require_allowed_origin

router = APIRouter(prefix="/api/competition-signups", tags=["competition-signups"])


def get_service(
    settings: Settings = Depends(get_settings),
    notifier: EmailNotifier = Depends(get_notifier),
) -> CompetitionSignupService:
    return CompetitionSignupService(settings, notifier=notifier.send)


@router.post(
    "",
    response_model=SignupCreated,
    status_code=201,
    dependencies=[Depends(require_allowed_origin), Depends(enforce_rate_limit)],
)
async def create_competition_signup(
    payload: CompetitionSignupRequest,
    db: AsyncSession = Depends(get_db),
    service: CompetitionSignupService = Depends(get_service),
) -> SignupCreated:
    signup = await service.register(db, payload.model_dump())
    return SignupCreated(
        id=signup.id,
        created_at=signup.created_at,
        message="Successfully registered for the competition!",
    )


@router.get("", response_model=CampaignCountResponse)
async def count_competition_signups(
    campaign: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    service: CompetitionSignupService = Depends(get_service),
) -> CampaignCountResponse:
    count = await service.count(db, campaign=campaign or None)
    return CampaignCountResponse(
        count=count,
        campaign=campaign or "all",
        message=f"Total competition signups: {count}",
    )


@router.get("/stats", response_model=CompetitionStats)
async def competition_signup_stats(
    db: AsyncSession = Depends(get_db),
    service: CompetitionSignupService = Depends(get_service),
) -> CompetitionStats:
    # Unauthenticated: deploy behind an access-control layer.
    return CompetitionStats.model_validate(await service.stats(db))
