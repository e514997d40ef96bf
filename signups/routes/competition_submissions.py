"""Competition project submissions."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings, get_settings
from ..database import get_db
from ..models.schemas import (
    CampaignCountResponse,
    CompetitionSubmissionRequest,
    RecentSubmission,
    RecentSubmissions,
    SubmissionCreated,
)
from ..services.emailer import EmailNotifier
from ..services.notifications import get_notifier
from ..services.signups import CompetitionSubmissionService
from ..utils.guards import enforce_rate_limit

router = APIRouter(prefix="/api/competition-submissions", tags=["competition-submissions"])

DEFAULT_RECENT_LIMIT = 10
MAX_RECENT_LIMIT = 100


def get_service(
    settings: Settings = Depends(get_settings),
    notifier: EmailNotifier = Depends(get_notifier),
) -> CompetitionSubmissionService:
    return CompetitionSubmissionService(settings, notifier=notifier.send)


@router.post("", response_model=SubmissionCreated, status_code=201, dependencies=[Depends(enforce_rate_limit)])
async def create_competition_submission(
    payload: CompetitionSubmissionRequest,
    db: AsyncSession = Depends(get_db),
    service: CompetitionSubmissionService = Depends(get_service),
) -> SubmissionCreated:
    submission = await service.register(db, payload.model_dump())
    return SubmissionCreated(
        id=submission.id,
        created_at=submission.created_at,
        submitted_at=submission.submitted_at,
        message="Project submitted successfully!",
    )


@router.get("", response_model=CampaignCountResponse)
async def count_competition_submissions(
    campaign: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    service: CompetitionSubmissionService = Depends(get_service),
) -> CampaignCountResponse:
    selected = campaign or service.campaign
    count = await service.count(db, campaign=selected)
    return CampaignCountResponse(count=count, campaign=selected, message=f"Total competition submissions: {count}")


@router.get("/recent", response_model=RecentSubmissions)
async def recent_competition_submissions(
    limit: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    service: CompetitionSubmissionService = Depends(get_service),
) -> RecentSubmissions:
    # Unauthenticated: deploy behind an access-control layer.
    rows = await service.recent(db, limit=_parse_limit(limit))
    submissions = [RecentSubmission.model_validate(row) for row in rows]
    return RecentSubmissions(submissions=submissions, count=len(submissions))


def _parse_limit(raw: str | None) -> int:
    try:
        value = int(raw) if raw is not None else DEFAULT_RECENT_LIMIT
    except ValueError:
        return DEFAULT_RECENT_LIMIT
    if value < 1:
        return DEFAULT_RECENT_LIMIT
    return min(value, MAX_RECENT_LIMIT)
