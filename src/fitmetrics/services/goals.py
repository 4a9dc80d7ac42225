"""Trainer-authored nutrition goals."""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID

from fitmetrics.domain.goals import GoalTargets, NutritionGoal
from fitmetrics.domain.periods import utc_today
from fitmetrics.errors import InvalidInput
from fitmetrics.services.accounts import AccountService

logger = logging.getLogger(__name__)


class GoalRepository(Protocol):
    """Persistence interface for goal intervals."""

    def list_goals(
        self,
        client_id: UUID,
        starts_on_or_before: date | None = None,
        open_after: date | None = None,
    ) -> list[NutritionGoal]:
        """Return goals ordered by start date, newest first.

        ``starts_on_or_before`` keeps goals with ``start_date <= value``;
        ``open_after`` keeps goals with no end date or ``end_date > value``.
        """

    def set_goal(
        self,
        client_id: UUID,
        trainer_id: UUID,
        start_date: date,
        targets: GoalTargets,
    ) -> NutritionGoal:
        """Start a goal interval at ``start_date`` in one transaction.

        An existing goal with the same start date gets the new targets in
        place and keeps its original trainer;
        otherwise every open interval starting earlier is closed at
        ``start_date`` before the new one is inserted.
        """


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class GoalService:
    """Maintains non-overlapping goal intervals per client."""

    accounts: AccountService
    repository: GoalRepository
    clock: Callable[[], datetime] = field(default=_utc_now)

    def update_goals(
        self, trainer_user_id: UUID, client_id: UUID, targets: GoalTargets
    ) -> NutritionGoal:
        """Set the client's goal starting today."""
        _validate_targets(targets)
        trainer = self.accounts.require_trainer(trainer_user_id)
        client = self.accounts.require_current_client(trainer, client_id)
        today = utc_today(self.clock())
        goal = self.repository.set_goal(client.id, trainer.id, today, targets)
        logger.info(
            "Nutrition goal set",
            extra={"client_id": str(client.id), "start_date": today.isoformat()},
        )
        return goal

    def history(self, client_id: UUID) -> list[NutritionGoal]:
        """Return every goal of a client, newest first."""
        return self.repository.list_goals(client_id)


def _validate_targets(targets: GoalTargets) -> None:
    errors: dict[str, str] = {}
    for name in ("protein", "fat", "carbs", "fiber"):
        value = getattr(targets, name)
        if value is None and name == "fiber":
            continue
        if value is None or not math.isfinite(value) or value < 0:
            errors[f"daily_{name}"] = "Must be a non-negative number"
    if errors:
        raise InvalidInput("Validation error", errors)


def serialize_goal(goal: NutritionGoal) -> dict[str, object]:
    return {
        "id": str(goal.id),
        "start_date": goal.start_date.isoformat(),
        "end_date": goal.end_date.isoformat() if goal.end_date else None,
        "protein": goal.targets.protein,
        "fat": goal.targets.fat,
        "carbs": goal.targets.carbs,
        "fiber": goal.targets.fiber or 0,
    }
