"""Domain models for weekly body measurements."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID


@dataclass(frozen=True)
class MeasurementInput:
    """Circumferences recorded on a device, in centimetres."""

    day: date
    chest: float | None = None
    waist: float | None = None
    hips: float | None = None
    left_arm: float | None = None
    right_arm: float | None = None
    left_leg: float | None = None
    right_leg: float | None = None


@dataclass(frozen=True)
class MeasurementRecord:
    """One authoritative measurement row per client and Monday-anchored week."""

    id: UUID
    client_id: UUID
    week_start_date: date
    arms: float | None
    legs: float | None
    waist: float | None
    chest: float | None
    hips: float | None


def pair_average(left: float | None, right: float | None) -> float | None:
    """Collapse a left/right pair into a single circumference."""
    if left is not None and right is not None:
        return (left + right) / 2
    if left is not None:
        return left
    return right
