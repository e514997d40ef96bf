"""Per-entity validation and normalization.

Each ``validate_*`` function takes a plain mapping of snake_case fields and
returns a :class:`ValidationResult`: either the normalized values ready to be
stored, or the list of violations. Nothing here touches the database.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
URL_PATTERN = re.compile(r"^(https?://)?([\da-z.-]+)\.([a-z.]{2,6})([/\w .-]*)/?$")

PLATFORMS = frozenset({"ios", "android"})
MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 1000
MAX_CAMPAIGN_LENGTH = 100
MAX_EMAIL_LENGTH = 320
MAX_URL_LENGTH = 2048


class ViolationReason(str, Enum):
    REQUIRED = "required"
    INVALID_FORMAT = "invalid_format"
    NOT_ACCEPTED = "not_accepted"
    TOO_LONG = "too_long"
    NOT_ALLOWED = "not_allowed"


@dataclass(frozen=True)
class Violation:
    field: str
    reason: ViolationReason


@dataclass
class ValidationResult:
    value: dict[str, Any] = field(default_factory=dict)
    violations: list[Violation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations

    def first(self, field_name: str) -> Violation | None:
        return next((v for v in self.violations if v.field == field_name), None)


def _clean_text(raw: Any) -> str | None:
    if raw is None:
        return None
    text = str(raw).strip()
    return text or None


def normalize_email(raw: Any) -> str | Violation:
    if not isinstance(raw, str) or not raw.strip():
        return Violation("email", ViolationReason.REQUIRED)
    email = raw.strip().lower()
    if len(email) > MAX_EMAIL_LENGTH:
        return Violation("email", ViolationReason.TOO_LONG)
    if not EMAIL_PATTERN.match(email):
        return Violation("email", ViolationReason.INVALID_FORMAT)
    return email


def normalize_project_url(raw: Any) -> str | Violation:
    if not isinstance(raw, str) or not raw.strip():
        return Violation("project_url", ViolationReason.REQUIRED)
    url = raw.strip()
    if not url.startswith(("http://", "https://")):
        url = "https://" + url
    if len(url) > MAX_URL_LENGTH:
        return Violation("project_url", ViolationReason.TOO_LONG)
    if not URL_PATTERN.match(url):
        return Violation("project_url", ViolationReason.INVALID_FORMAT)
    return url


def _apply(result: ValidationResult, name: str, outcome: Any) -> None:
    if isinstance(outcome, Violation):
        result.violations.append(outcome)
    else:
        result.value[name] = outcome


def _limit(result: ValidationResult, name: str, raw: Any, max_length: int) -> None:
    text = _clean_text(raw)
    if text is not None and len(text) > max_length:
        result.violations.append(Violation(name, ViolationReason.TOO_LONG))
        return
    result.value[name] = text


def validate_beta_signup(payload: Mapping[str, Any]) -> ValidationResult:
    result = ValidationResult()
    _apply(result, "email", normalize_email(payload.get("email")))
    for name in ("experience", "goal", "referrer", "referrer_other"):
        result.value[name] = _clean_text(payload.get(name))
    return result


def validate_competition_signup(payload: Mapping[str, Any], default_campaign: str = "1k-subs") -> ValidationResult:
    result = ValidationResult()
    _apply(result, "email", normalize_email(payload.get("email")))
    if payload.get("accepted_rules") is not True:
        result.violations.append(Violation("accepted_rules", ViolationReason.NOT_ACCEPTED))
    else:
        result.value["accepted_rules"] = True
    campaign = _clean_text(payload.get("campaign")) or default_campaign
    if len(campaign) > MAX_CAMPAIGN_LENGTH:
        result.violations.append(Violation("campaign", ViolationReason.TOO_LONG))
    else:
        result.value["campaign"] = campaign
    return result


def validate_competition_submission(
    payload: Mapping[str, Any], campaign: str = "1k-subs-competition"
) -> ValidationResult:
    result = ValidationResult()
    _apply(result, "email", normalize_email(payload.get("email")))
    _apply(result, "project_url", normalize_project_url(payload.get("project_url")))
    _limit(result, "project_title", payload.get("project_title"), MAX_TITLE_LENGTH)
    _limit(result, "description", payload.get("description"), MAX_DESCRIPTION_LENGTH)
    result.value["campaign"] = campaign
    return result


def validate_goalpost_signup(payload: Mapping[str, Any]) -> ValidationResult:
    result = ValidationResult()
    _apply(result, "email", normalize_email(payload.get("email")))
    platform = payload.get("platform")
    if platform is None or platform == "":
        result.violations.append(Violation("platform", ViolationReason.REQUIRED))
    elif not isinstance(platform, str) or platform not in PLATFORMS:
        result.violations.append(Violation("platform", ViolationReason.NOT_ALLOWED))
    else:
        result.value["platform"] = platform
    return result
