"""ORM tables. Uniqueness is enforced here, by the database, not by lookups."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class BetaSignup(Base):
    __tablename__ = "beta_signups"
    __table_args__ = (UniqueConstraint("email", name="uq_beta_signups_email"),)
    unique_fields = ("email",)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), index=True)
    experience: Mapped[str | None] = mapped_column(Text, nullable=True)
    goal: Mapped[str | None] = mapped_column(Text, nullable=True)
    referrer: Mapped[str | None] = mapped_column(Text, nullable=True)
    referrer_other: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)


class CompetitionSignup(Base):
    __tablename__ = "competition_signups"
    __table_args__ = (UniqueConstraint("email", "campaign", name="uq_competition_signups_email_campaign"),)
    unique_fields = ("email", "campaign")

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), index=True)
    accepted_rules: Mapped[bool] = mapped_column(Boolean)
    campaign: Mapped[str] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)


class CompetitionSubmission(Base):
    __tablename__ = "competition_submissions"
    __table_args__ = (UniqueConstraint("email", "campaign", name="uq_competition_submissions_email_campaign"),)
    unique_fields = ("email", "campaign")

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), index=True)
    project_url: Mapped[str] = mapped_column(String(2048))
    project_title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    campaign: Mapped[str] = mapped_column(String(100))
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)


class GoalpostBetaSignup(Base):
    __tablename__ = "goalpost_beta_signups"
    __table_args__ = (UniqueConstraint("email", "platform", name="uq_goalpost_beta_signups_email_platform"),)
    unique_fields = ("email", "platform")

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), index=True)
    platform: Mapped[str] = mapped_column(String(16))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
