"""Nutrition goal intervals and goal resolution."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from fitmetrics.domain.periods import period_key


@dataclass(frozen=True)
class GoalTargets:
    """Daily macro targets in grams; fiber is optional."""

    protein: float
    fat: float
    carbs: float
    fiber: float | None = None


@dataclass(frozen=True)
class NutritionGoal:
    """Goal applying over the half-open interval ``[start_date, end_date)``.

    An empty ``end_date`` means the interval is still open.
    """

    id: UUID
    client_id: UUID
    trainer_id: UUID
    start_date: date
    end_date: date | None
    targets: GoalTargets
    created_at: datetime | None = None

    def covers(self, day: date | datetime) -> bool:
        """Return whether the goal applies on ``day``."""
        key = period_key(day)
        if period_key(self.start_date) > key:
            return False
        return self.end_date is None or key < period_key(self.end_date)


def resolve_goal(goals: Iterable[NutritionGoal], day: date | datetime) -> NutritionGoal | None:
    """Return the goal covering ``day`` with the latest start, if any.

    Intervals of one client do not overlap, so at most one goal normally
    matches. If two share a start date the first one in ``goals`` wins.
    """
    resolved: NutritionGoal | None = None
    for goal in goals:
        if not goal.covers(day):
            continue
        if resolved is None or period_key(goal.start_date) > period_key(
            resolved.start_date
        ):
            resolved = goal
    return resolved
