"""Create-once record store on top of the ORM tables."""
from __future__ import annotations

import uuid
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Callable, Generic, Mapping, Sequence, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import DuplicateRecord, InvalidSubmission
from ..logging_config import logger
from ..models.tables import Base
from ..services.validation import ValidationResult

ModelT = TypeVar("ModelT", bound=Base)

UNIQUE_VIOLATION_SQLSTATE = "23505"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    for attr in ("sqlstate", "pgcode"):
        if getattr(orig, attr, None) == UNIQUE_VIOLATION_SQLSTATE:
            return True
    return "UNIQUE constraint failed" in str(orig) or "duplicate key value" in str(orig)


class RecordStore(Generic[ModelT]):
    def __init__(
        self,
        model: type[ModelT],
        validator: Callable[[Mapping[str, Any]], ValidationResult],
        timestamp_fields: Sequence[str] = ("created_at",),
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.model = model
        self.validator = validator
        self.timestamp_fields = tuple(timestamp_fields)
        self.unique_fields: tuple[str, ...] = tuple(getattr(model, "unique_fields", ()))
        self._clock = clock

    @property
    def name(self) -> str:
        return self.model.__tablename__

    async def create(self, db: AsyncSession, payload: Mapping[str, Any]) -> ModelT:
        result = self.validator(payload)
        if not result.ok:
            raise InvalidSubmission(violations=result.violations)

        now = self._clock()
        values = dict(result.value)
        for name in self.timestamp_fields:
            values[name] = now
        record = self.model(id=str(uuid.uuid4()), **values)
        db.add(record)
        try:
            await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            if not is_unique_violation(exc):
                raise
            logger.info("store.duplicate", collection=self.name, fields=list(self.unique_fields))
            raise DuplicateRecord(fields=self.unique_fields) from exc
        return record

    def _column(self, name: str) -> Any:
        return getattr(self.model, name)

    def _filtered(self, statement: Any, filters: Mapping[str, Any]) -> Any:
        for name, value in filters.items():
            if value is not None:
                statement = statement.where(self._column(name) == value)
        return statement

    async def count(self, db: AsyncSession, **filters: Any) -> int:
        statement = self._filtered(select(func.count()).select_from(self.model), filters)
        return int((await db.execute(statement)).scalar_one())

    async def count_since(self, db: AsyncSession, since: datetime) -> int:
        statement = select(func.count()).select_from(self.model).where(self._column("created_at") >= since)
        return int((await db.execute(statement)).scalar_one())

    async def group_count(self, db: AsyncSession, field_name: str) -> list[dict[str, Any]]:
        """Counts per distinct value, largest first.

        Ties keep whatever order the database returns them in.
        """
        column = self._column(field_name)
        total = func.count().label("count")
        statement = select(column, total).group_by(column).order_by(total.desc())
        rows = (await db.execute(statement)).all()
        return [{"_id": value, "count": int(count)} for value, count in rows]

    async def daily_counts(self, db: AsyncSession, since: datetime) -> list[dict[str, Any]]:
        # Bucketed here by UTC day: SQLite and PostgreSQL truncate dates differently
        # and PostgreSQL's date() follows the session time zone.
        column = self._column("created_at")
        statement = select(column).where(column >= since)
        stamps = (await db.execute(statement)).scalars().all()
        days = Counter(_as_utc(stamp).strftime("%Y-%m-%d") for stamp in stamps)
        return [{"_id": day, "count": days[day]} for day in sorted(days)]

    async def recent(
        self,
        db: AsyncSession,
        limit: int,
        fields: Sequence[str],
        **filters: Any,
    ) -> list[dict[str, Any]]:
        columns = [self._column(name) for name in fields]
        statement = self._filtered(select(*columns), filters)
        statement = statement.order_by(self._column("created_at").desc()).limit(limit)
        rows = (await db.execute(statement)).all()
        return [dict(zip(fields, row)) for row in rows]


def _as_utc(stamp: datetime) -> datetime:
    # SQLite hands back naive datetimes; values are always written in UTC.
    if stamp.tzinfo is None:
        return stamp.replace(tzinfo=timezone.utc)
    return stamp.astimezone(timezone.utc)
