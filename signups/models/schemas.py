"""Request and response bodies. Wire names are camelCase."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base schema accepting both camelCase and snake_case keys."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True, alias_generator=to_camel)


# Requests are deliberately loose; field rules live in services.validation.


class BetaSignupRequest(BaseSchema):
    email: Optional[str] = None
    experience: Optional[str] = None
    goal: Optional[str] = None
    referrer: Optional[str] = None
    referrer_other: Optional[str] = None


class CompetitionSignupRequest(BaseSchema):
    email: Optional[str] = None
    accepted_rules: Optional[bool] = None
    campaign: Optional[str] = None


class CompetitionSubmissionRequest(BaseSchema):
    email: Optional[str] = None
    project_url: Optional[str] = None
    project_title: Optional[str] = None
    description: Optional[str] = None


class GoalpostBetaRequest(BaseSchema):
    email: Optional[str] = None
    platform: Optional[str] = None


class SignupCreated(BaseSchema):
    id: str
    created_at: datetime
    message: str


class SubmissionCreated(SignupCreated):
    submitted_at: datetime


class CountResponse(BaseSchema):
    count: int
    message: str


class CampaignCountResponse(CountResponse):
    campaign: str


class PlatformCountResponse(BaseSchema):
    ios: int
    android: int
    total: int
    platform: str
    count: int


class GroupCount(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, alias="_id")
    count: int


class BetaStats(BaseSchema):
    total: int
    by_referrer: List[GroupCount] = Field(default_factory=list)
    by_experience: List[GroupCount] = Field(default_factory=list)
    by_goal: List[GroupCount] = Field(default_factory=list)


class CompetitionStats(BaseSchema):
    total: int
    recent_count: int
    by_campaign: List[GroupCount] = Field(default_factory=list)
    daily_signups: List[GroupCount] = Field(default_factory=list)


class RecentSubmission(BaseSchema):
    email: str
    project_url: str
    project_title: Optional[str] = None
    submitted_at: datetime


class RecentSubmissions(BaseSchema):
    submissions: List[RecentSubmission] = Field(default_factory=list)
    count: int


class HealthStatus(BaseSchema):
    status: str
    timestamp: datetime
    environment: str


class ServiceDescriptor(BaseSchema):
    name: str
    version: str
    endpoints: Dict[str, Any] = Field(default_factory=dict)
