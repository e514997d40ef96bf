"""Signup services, one per form.

A service validates and persists through its :class:`RecordStore`, turns
store errors into the form's user-facing messages, and hands the
confirmation email to :func:`dispatch_detached` once the record exists.
"""
from __future__ import annotations

from datetime import timedelta
from typing import Any, ClassVar, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings
from ..errors import DuplicateRecord, InvalidSubmission
from ..logging_config import logger
from ..models.tables import BetaSignup, CompetitionSignup, CompetitionSubmission, GoalpostBetaSignup
from ..utils.record_store import RecordStore, utcnow
from . import templates
from .emailer import OutboundEmail
from .notifications import Sender, dispatch_detached
from .validation import (
    PLATFORMS,
    ViolationReason,
    validate_beta_signup,
    validate_competition_signup,
    validate_competition_submission,
    validate_goalpost_signup,
)

RECENT_SUBMISSION_FIELDS = ("email", "project_url", "project_title", "submitted_at")


class SignupService:
    form: ClassVar[str] = "signup"
    duplicate_message: ClassVar[str] = "A record with this information already exists"
    # (field, reason) -> message; reason None matches any reason for that field.
    violation_messages: ClassVar[dict[tuple[str, ViolationReason | None], str]] = {
        ("email", ViolationReason.REQUIRED): "Email is required",
    }
    fallback_message: ClassVar[str] = "Invalid email format"

    def __init__(self, store: RecordStore[Any], notifier: Sender | None = None) -> None:
        self.store = store
        self.notifier = notifier

    def describe(self, exc: InvalidSubmission) -> str:
        for violation in exc.violations:
            for key in ((violation.field, violation.reason), (violation.field, None)):
                if key in self.violation_messages:
                    return self.violation_messages[key]
        return self.fallback_message

    def confirmation(self, record: Any) -> OutboundEmail | None:
        return None

    async def register(self, db: AsyncSession, payload: Mapping[str, Any]) -> Any:
        try:
            record = await self.store.create(db, payload)
        except InvalidSubmission as exc:
            logger.info("signup.invalid", form=self.form, field=exc.field)
            raise InvalidSubmission(self.describe(exc), violations=exc.violations) from exc
        except DuplicateRecord as exc:
            raise DuplicateRecord(self.duplicate_message, fields=exc.fields) from exc

        logger.info("signup.created", form=self.form, record_id=record.id)
        message = self.confirmation(record)
        if message is not None and self.notifier is not None:
            dispatch_detached(self.notifier, message, label=self.form)
        return record

    async def count(self, db: AsyncSession, **filters: Any) -> int:
        return await self.store.count(db, **filters)


beta_store: RecordStore[BetaSignup] = RecordStore(BetaSignup, validate_beta_signup)
goalpost_store: RecordStore[GoalpostBetaSignup] = RecordStore(GoalpostBetaSignup, validate_goalpost_signup)


class BetaSignupService(SignupService):
    form = "beta"
    duplicate_message = "This email is already registered for beta access"

    def __init__(self, notifier: Sender | None = None) -> None:
        super().__init__(beta_store, notifier)

    def confirmation(self, record: BetaSignup) -> OutboundEmail:
        return templates.beta_welcome(record.email)

    async def stats(self, db: AsyncSession) -> dict[str, Any]:
        return {
            "total": await self.store.count(db),
            "byReferrer": await self.store.group_count(db, "referrer"),
            "byExperience": await self.store.group_count(db, "experience"),
            "byGoal": await self.store.group_count(db, "goal"),
        }


class CompetitionSignupService(SignupService):
    form = "competition-signup"
    duplicate_message = "You have already entered with this email."
    violation_messages = {
        ("email", ViolationReason.REQUIRED): "Email is required",
        ("accepted_rules", None): "You must accept the rules",
        ("campaign", None): "Invalid campaign",
    }

    def __init__(self, settings: Settings, notifier: Sender | None = None) -> None:
        campaign = settings.competition_campaign

        def validator(payload: Mapping[str, Any]) -> Any:
            return validate_competition_signup(payload, default_campaign=campaign)

        super().__init__(RecordStore(CompetitionSignup, validator), notifier)

    def confirmation(self, record: CompetitionSignup) -> OutboundEmail:
        return templates.competition_confirmation(record.email)

    async def stats(self, db: AsyncSession) -> dict[str, Any]:
        now = utcnow()
        return {
            "total": await self.store.count(db),
            "recentCount": await self.store.count_since(db, now - timedelta(hours=24)),
            "byCampaign": await self.store.group_count(db, "campaign"),
            "dailySignups": await self.store.daily_counts(db, now - timedelta(days=7)),
        }


class CompetitionSubmissionService(SignupService):
    form = "competition-submission"
    duplicate_message = "You have already submitted a project with this email."
    violation_messages = {
        ("email", ViolationReason.REQUIRED): "Email is required",
        ("project_url", ViolationReason.REQUIRED): "Project URL is required",
    }
    fallback_message = "Invalid submission data. Please check your email and URL format."

    def __init__(self, settings: Settings, notifier: Sender | None = None) -> None:
        self.campaign = settings.submission_campaign
        campaign = self.campaign

        def validator(payload: Mapping[str, Any]) -> Any:
            return validate_competition_submission(payload, campaign=campaign)

        super().__init__(
            RecordStore(CompetitionSubmission, validator, timestamp_fields=("created_at", "submitted_at")),
            notifier,
        )

    def confirmation(self, record: CompetitionSubmission) -> OutboundEmail:
        return templates.submission_confirmation(record.email, record.project_url, record.project_title)

    async def recent(self, db: AsyncSession, limit: int = 10) -> list[dict[str, Any]]:
        return await self.store.recent(db, limit, RECENT_SUBMISSION_FIELDS, campaign=self.campaign)


class GoalpostBetaService(SignupService):
    form = "goalpost-beta"
    duplicate_message = "Already registered for this platform."
    violation_messages = {
        ("email", ViolationReason.REQUIRED): "Email is required",
        ("platform", None): "Invalid platform",
    }
    fallback_message = "Invalid payload"

    def __init__(self, notifier: Sender | None = None) -> None:
        super().__init__(goalpost_store, notifier)

    def confirmation(self, record: GoalpostBetaSignup) -> OutboundEmail:
        return templates.goalpost_beta_ack(record.email, record.platform)

    async def platform_counts(self, db: AsyncSession) -> dict[str, int]:
        return {platform: await self.store.count(db, platform=platform) for platform in sorted(PLATFORMS)}
