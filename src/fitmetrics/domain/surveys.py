"""Domain models for the daily well-being survey.

Answers arrive as bucketed strings. Ordinal answers are stored as small
integers and sleep/water buckets as the representative midpoint of the bucket.
Every mapping table must cover its enum completely; this is checked when the
module is imported.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum, StrEnum
from typing import TypeVar
from uuid import UUID

from fitmetrics.errors import InvalidInput


class Level(StrEnum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class Hunger(StrEnum):
    NO_APPETITE = "no_appetite"
    MODERATE = "moderate"
    CONSTANT = "constant"


class SleepBucket(StrEnum):
    UNDER_4 = "0-4"
    FROM_4_TO_6 = "4-6"
    FROM_6_TO_8 = "6-8"
    OVER_8 = "8+"


class WaterBucket(StrEnum):
    UNDER_1 = "0-1"
    FROM_1_TO_2 = "1-2"
    FROM_2_TO_3 = "2-3"
    OVER_2 = "2+"


class Digestion(StrEnum):
    NONE = "0"
    ONCE = "1"
    TWICE_OR_MORE = "2+"


LEVEL_SCALE: dict[Level, int] = {
    Level.LOW: 1,
    Level.MODERATE: 2,
    Level.HIGH: 3,
}

HUNGER_SCALE: dict[Hunger, int] = {
    Hunger.NO_APPETITE: 1,
    Hunger.MODERATE: 2,
    Hunger.CONSTANT: 3,
}

SLEEP_HOURS: dict[SleepBucket, float] = {
    SleepBucket.UNDER_4: 3.0,
    SleepBucket.FROM_4_TO_6: 5.0,
    SleepBucket.FROM_6_TO_8: 7.0,
    SleepBucket.OVER_8: 8.5,
}

WATER_LITRES: dict[WaterBucket, float] = {
    WaterBucket.UNDER_1: 0.5,
    WaterBucket.FROM_1_TO_2: 1.5,
    WaterBucket.FROM_2_TO_3: 2.5,
    WaterBucket.OVER_2: 3.0,
}

# Legacy rows stored digestion as words.
_LEGACY_DIGESTION = {
    "bad": Digestion.NONE,
    "good": Digestion.ONCE,
    "excellent": Digestion.TWICE_OR_MORE,
}

E = TypeVar("E", bound=Enum)


def _require_complete(enum_cls: type[Enum], table: dict) -> None:
    missing = set(enum_cls) - set(table)
    if missing:
        names = ", ".join(sorted(member.name for member in missing))
        raise RuntimeError(f"Mapping for {enum_cls.__name__} is missing {names}")


for _enum_cls, _table in (
    (Level, LEVEL_SCALE),
    (Hunger, HUNGER_SCALE),
    (SleepBucket, SLEEP_HOURS),
    (WaterBucket, WATER_LITRES),
):
    _require_complete(_enum_cls, _table)


@dataclass(frozen=True)
class SurveyInput:
    """Survey answers recorded on a device for one day."""

    day: date
    weight: float | None = None
    motivation: Level | None = None
    sleep: SleepBucket | None = None
    stress: Level | None = None
    digestion: Digestion | None = None
    water: WaterBucket | None = None
    hunger: Hunger | None = None
    libido: Level | None = None
    comment: str | None = None


@dataclass(frozen=True)
class SurveyRecord:
    """One authoritative survey row per client and day, in stored form."""

    id: UUID
    client_id: UUID
    day: date
    weight: float | None
    motivation: int | None
    sleep_hours: float | None
    stress: int | None
    digestion: str | None
    water: float | None
    hunger: int | None
    libido: int | None
    comment: str | None
    viewed_by_trainer: bool = False


def parse_bucket(enum_cls: type[E], raw: object, field: str) -> E | None:
    """Return the enum member for ``raw`` or raise ``InvalidInput``."""
    if raw is None:
        return None
    try:
        return enum_cls(raw)
    except ValueError as exc:
        raise InvalidInput.for_field(field, f"Invalid value: {raw}") from exc


def survey_from_answers(day: date, answers: dict[str, object]) -> SurveyInput:
    """Build a survey snapshot from raw bucket strings."""
    weight = answers.get("weight")
    comment = answers.get("comment")
    return SurveyInput(
        day=day,
        weight=float(weight) if weight is not None else None,
        motivation=parse_bucket(Level, answers.get("motivation"), "motivation"),
        sleep=parse_bucket(SleepBucket, answers.get("sleep"), "sleep"),
        stress=parse_bucket(Level, answers.get("stress"), "stress"),
        digestion=parse_bucket(Digestion, answers.get("digestion"), "digestion"),
        water=parse_bucket(WaterBucket, answers.get("water"), "water"),
        hunger=parse_bucket(Hunger, answers.get("hunger"), "hunger"),
        libido=parse_bucket(Level, answers.get("libido"), "libido"),
        comment=str(comment) if comment is not None else None,
    )


def encode_survey(survey: SurveyInput) -> dict[str, object]:
    """Return the stored column values for a survey snapshot."""
    return {
        "weight": survey.weight,
        "motivation": _lookup(LEVEL_SCALE, survey.motivation),
        "sleep_hours": _lookup(SLEEP_HOURS, survey.sleep),
        "sleep_quality": None,
        "stress": _lookup(LEVEL_SCALE, survey.stress),
        "digestion": survey.digestion.value if survey.digestion else None,
        "water": _lookup(WATER_LITRES, survey.water),
        "hunger": _lookup(HUNGER_SCALE, survey.hunger),
        "libido": _lookup(LEVEL_SCALE, survey.libido),
        "comment": survey.comment,
        "synced": True,
    }


def decode_level(value: int | None) -> Level | None:
    return _reverse(LEVEL_SCALE, value)


def decode_hunger(value: int | None) -> Hunger | None:
    return _reverse(HUNGER_SCALE, value)


def decode_sleep(hours: float | None) -> SleepBucket | None:
    """Map stored hours back to their bucket, tolerating off-midpoint values."""
    if hours is None:
        return None
    if hours < 4:  # noqa: PLR2004
        return SleepBucket.UNDER_4
    if hours < 6:  # noqa: PLR2004
        return SleepBucket.FROM_4_TO_6
    if hours < 8:  # noqa: PLR2004
        return SleepBucket.FROM_6_TO_8
    return SleepBucket.OVER_8


def decode_water(litres: float | None) -> WaterBucket | None:
    """Map stored litres back to their bucket, tolerating off-midpoint values."""
    if litres is None:
        return None
    if litres <= 1:
        return WaterBucket.UNDER_1
    if litres <= 2:  # noqa: PLR2004
        return WaterBucket.FROM_1_TO_2
    if litres < 3:  # noqa: PLR2004
        return WaterBucket.FROM_2_TO_3
    return WaterBucket.OVER_2


def decode_digestion(value: str | None) -> Digestion | None:
    if not value:
        return None
    if value in _LEGACY_DIGESTION:
        return _LEGACY_DIGESTION[value]
    try:
        return Digestion(value)
    except ValueError:
        return None


def _lookup(table: dict, key: Enum | None) -> float | int | None:
    if key is None:
        return None
    return table[key]


def _reverse(table: dict, value: float | int | None):  # type: ignore[no-untyped-def]
    if value is None:
        return None
    for key, stored in table.items():
        if stored == value:
            return key
    return None
