"""Nutrition compliance scoring.

A day scores between 0 and 7. Each macro with a positive target contributes
``min(1, actual / target)``; fiber counts only when its target is set. The
day's score is the average contribution times 7, rounded to one decimal.
Scores are computed at read time from stored day totals and the goal interval
covering that day.
"""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date

from fitmetrics.domain.diary import DiaryEntryRecord, MacroTotals
from fitmetrics.domain.goals import GoalTargets, NutritionGoal, resolve_goal
from fitmetrics.domain.periods import day_window

MAX_SCORE = 7

WEEKDAY_LABELS: dict[str, tuple[str, ...]] = {
    "en": ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"),
    "ru": ("Пн", "Вт", "Ср", "Чт", "Пт", "Сб", "Вс"),
}


@dataclass(frozen=True)
class CompliancePoint:
    """Score of a single day in a compliance history."""

    day: date
    label: str
    value: float


def round_one(value: float) -> float:
    """Round half away from zero to one decimal place."""
    return math.floor(value * 10 + 0.5) / 10


def score_day(totals: MacroTotals, goal: NutritionGoal | GoalTargets | None) -> float:
    """Return the 0-7 compliance score of one day's totals against a goal."""
    if goal is None:
        return 0.0
    targets = goal.targets if isinstance(goal, NutritionGoal) else goal
    pairs = [
        (totals.protein, targets.protein),
        (totals.fat, targets.fat),
        (totals.carbs, targets.carbs),
    ]
    if targets.fiber:
        pairs.append((totals.fiber, targets.fiber))
    ratios = [min(1.0, actual / target) for actual, target in pairs if target > 0]
    if not ratios:
        return 0.0
    return round_one(sum(ratios) / len(ratios) * MAX_SCORE)


def weekday_label(day: date, locale: str = "en") -> str:
    labels = WEEKDAY_LABELS.get(locale, WEEKDAY_LABELS["en"])
    return labels[day.weekday()]


def weekly_history(
    entries: Iterable[DiaryEntryRecord],
    goals: list[NutritionGoal],
    today: date,
    days: int = 7,
    locale: str = "en",
) -> list[CompliancePoint]:
    """Score each of the ``days`` days ending today, oldest first.

    Days without a diary entry score 0; each day is scored against the goal
    that covered that specific date.
    """
    by_day: Mapping[date, DiaryEntryRecord] = {entry.day: entry for entry in entries}
    history = []
    for day in day_window(today, days):
        entry = by_day.get(day)
        value = score_day(entry.totals, resolve_goal(goals, day)) if entry else 0.0
        history.append(
            CompliancePoint(day=day, label=weekday_label(day, locale), value=value)
        )
    return history


def summary_score(history: list[CompliancePoint], has_entries: bool) -> float:
    """Return the mean daily score, or 0 when the window holds no diary entry."""
    if not has_entries or not history:
        return 0.0
    return round_one(sum(point.value for point in history) / len(history))
