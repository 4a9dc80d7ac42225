"""Diary sync and per-day macro aggregation."""

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Protocol
from uuid import UUID

from fitmetrics.domain.diary import DiaryEntryRecord, MacroTotals, MealInput
from fitmetrics.domain.periods import parse_day, to_day
from fitmetrics.domain.upserts import SyncResult, UpsertResult
from fitmetrics.errors import InvalidInput
from fitmetrics.services.accounts import AccountService

logger = logging.getLogger(__name__)

_MACROS = ("protein", "fat", "carbs", "fiber")


class DiaryRepository(Protocol):
    """Persistence interface for diary entries and their meals."""

    def sync_day(
        self,
        client_id: UUID,
        day: date,
        totals: MacroTotals,
        meals: list[MealInput],
    ) -> UpsertResult:
        """Upsert the day row, replace all its meals and set totals atomically."""

    def list_entries(
        self,
        client_id: UUID,
        start: date | None = None,
        end: date | None = None,
        with_meals: bool = True,
    ) -> list[DiaryEntryRecord]:
        """Return entries within ``[start, end]``, newest first."""


@dataclass
class DiaryService:
    """Reconciles device day snapshots with the server-of-record."""

    accounts: AccountService
    repository: DiaryRepository

    def sync(
        self, user_id: UUID, raw_date: str | date, meals: list[MealInput]
    ) -> SyncResult:
        """Replace the caller's diary for a day with the given meal list."""
        client = self.accounts.require_client(user_id)
        day = parse_day(raw_date) if isinstance(raw_date, str) else to_day(raw_date)
        _validate_meals(meals)
        totals = MacroTotals.sum_of(meals)
        result = self.repository.sync_day(client.id, day, totals, meals)
        logger.info(
            "Diary synced",
            extra={
                "client_id": str(client.id),
                "day": day.isoformat(),
                "meals": len(meals),
                "row_created": result.created,
            },
        )
        return SyncResult(id=result.id, created=result.created)

    def list_entries(
        self,
        user_id: UUID,
        raw_from: str | None = None,
        raw_to: str | None = None,
    ) -> list[DiaryEntryRecord]:
        """Return the caller's diary entries with meals, newest first."""
        client = self.accounts.require_client(user_id)
        start = parse_day(raw_from, "from") if raw_from else None
        end = parse_day(raw_to, "to") if raw_to else None
        return self.repository.list_entries(client.id, start, end)


def _validate_meals(meals: list[MealInput]) -> None:
    errors: dict[str, str] = {}
    for index, meal in enumerate(meals):
        if not meal.name or not meal.name.strip():
            errors[f"meals.{index}.name"] = "Name is required"
        for macro in _MACROS:
            value = getattr(meal, macro)
            if not isinstance(value, int | float) or isinstance(value, bool):
                errors[f"meals.{index}.{macro}"] = "Must be a number"
            elif not math.isfinite(value) or value < 0:
                errors[f"meals.{index}.{macro}"] = "Must be a non-negative number"
    if errors:
        raise InvalidInput("Validation error", errors)
