"""Domain models for the food diary."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from uuid import UUID


@dataclass(frozen=True)
class MacroTotals:
    """Protein, fat, carbs and fiber in grams."""

    protein: float
    fat: float
    carbs: float
    fiber: float

    @classmethod
    def zero(cls) -> "MacroTotals":
        return cls(0.0, 0.0, 0.0, 0.0)

    @classmethod
    def sum_of(cls, meals: Iterable["MealInput"]) -> "MacroTotals":
        """Return the elementwise sum of the meals' macros."""
        total = cls.zero()
        for meal in meals:
            total = cls(
                protein=total.protein + meal.protein,
                fat=total.fat + meal.fat,
                carbs=total.carbs + meal.carbs,
                fiber=total.fiber + meal.fiber,
            )
        return total


@dataclass(frozen=True)
class MealInput:
    """A meal recorded on a device, as sent in a day snapshot."""

    name: str
    protein: float
    fat: float
    carbs: float
    fiber: float
    time: datetime | None = None


@dataclass(frozen=True)
class MealEntryRecord:
    """Persisted meal row owned by a diary entry."""

    id: UUID
    diary_entry_id: UUID
    name: str
    time: datetime | None
    protein: float
    fat: float
    carbs: float
    fiber: float


@dataclass(frozen=True)
class DiaryEntryRecord:
    """One authoritative diary row per client and day."""

    id: UUID
    client_id: UUID
    day: date
    totals: MacroTotals
    synced: bool
    meals: list[MealEntryRecord] = field(default_factory=list)
