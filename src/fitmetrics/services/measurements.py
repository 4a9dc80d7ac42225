"""Weekly measurement sync."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from fitmetrics.domain.measurements import (
    MeasurementInput,
    MeasurementRecord,
    pair_average,
)
from fitmetrics.domain.periods import week_start
from fitmetrics.domain.upserts import SyncResult
from fitmetrics.errors import InvalidInput
from fitmetrics.services.accounts import AccountService
from fitmetrics.services.upserts import PeriodUpsertStore

logger = logging.getLogger(__name__)

_FIELDS = (
    "chest",
    "waist",
    "hips",
    "left_arm",
    "right_arm",
    "left_leg",
    "right_leg",
)


class MeasurementRepository(Protocol):
    """Read interface for measurement rows."""

    def list_for_client(self, client_id: UUID) -> list[MeasurementRecord]:
        """Return measurements ordered by week, newest first."""


@dataclass
class MeasurementService:
    """Stores one measurement row per client and week."""

    accounts: AccountService
    store: PeriodUpsertStore
    repository: MeasurementRepository

    def sync(self, user_id: UUID, measurement: MeasurementInput) -> SyncResult:
        """Create or replace the caller's measurement for the input's week."""
        client = self.accounts.require_client(user_id)
        _validate(measurement)
        period = week_start(measurement.day)
        payload: dict[str, object] = {
            "chest_circumference": measurement.chest,
            "waist_circumference": measurement.waist,
            "hip_circumference": measurement.hips,
            "arm_circumference": pair_average(
                measurement.left_arm, measurement.right_arm
            ),
            "leg_circumference": pair_average(
                measurement.left_leg, measurement.right_leg
            ),
            "synced": True,
        }
        result = self.store.upsert(client.id, period, payload)
        logger.info(
            "Measurement synced",
            extra={"client_id": str(client.id), "week": period.isoformat()},
        )
        return SyncResult(id=result.id, created=result.created)

    def list_entries(self, user_id: UUID) -> list[MeasurementRecord]:
        """Return the caller's measurements, newest week first."""
        client = self.accounts.require_client(user_id)
        return self.repository.list_for_client(client.id)


def _validate(measurement: MeasurementInput) -> None:
    errors = {
        name: "Must be a non-negative number"
        for name in _FIELDS
        if (value := getattr(measurement, name)) is not None and value < 0
    }
    if errors:
        raise InvalidInput("Validation error", errors)


def serialize_measurement(measurement: MeasurementRecord) -> dict[str, object]:
    return {
        "id": str(measurement.id),
        "week_start_date": measurement.week_start_date.isoformat(),
        "arms": measurement.arms,
        "legs": measurement.legs,
        "waist": measurement.waist,
        "chest": measurement.chest,
        "hips": measurement.hips,
    }
