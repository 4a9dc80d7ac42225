"""Daily survey sync."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Protocol
from uuid import UUID

from fitmetrics.domain.periods import to_day
from fitmetrics.domain.surveys import (
    SurveyInput,
    SurveyRecord,
    decode_digestion,
    decode_hunger,
    decode_level,
    decode_sleep,
    decode_water,
    encode_survey,
)
from fitmetrics.domain.upserts import SyncResult
from fitmetrics.services.accounts import AccountService
from fitmetrics.services.upserts import PeriodUpsertStore

logger = logging.getLogger(__name__)


class SurveyRepository(Protocol):
    """Read/update interface for survey rows."""

    def list_for_client(
        self,
        client_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[SurveyRecord]:
        """Return surveys within ``[start, end]``, newest first."""

    def count_unreviewed(self, client_id: UUID) -> int:
        """Return how many surveys the trainer has not reviewed yet."""

    def get_survey(self, survey_id: UUID) -> SurveyRecord | None:
        """Return a survey by id."""

    def mark_reviewed(self, survey_id: UUID) -> None:
        """Flag a survey as reviewed by the trainer."""


@dataclass
class SurveyService:
    """Stores one survey row per client and day."""

    accounts: AccountService
    store: PeriodUpsertStore
    repository: SurveyRepository

    def sync(self, user_id: UUID, survey: SurveyInput) -> SyncResult:
        """Create or replace the caller's survey for the input's day."""
        client = self.accounts.require_client(user_id)
        day = to_day(survey.day)
        result = self.store.upsert(client.id, day, encode_survey(survey))
        logger.info(
            "Survey synced",
            extra={"client_id": str(client.id), "day": day.isoformat()},
        )
        return SyncResult(id=result.id, created=result.created)

    def list_entries(self, user_id: UUID) -> list[dict[str, object]]:
        """Return the caller's surveys as bucketed answers, newest first."""
        client = self.accounts.require_client(user_id)
        return [
            serialize_survey(survey)
            for survey in self.repository.list_for_client(client.id)
        ]


def serialize_survey(survey: SurveyRecord) -> dict[str, object]:
    return {
        "id": str(survey.id),
        "date": survey.day.isoformat(),
        "weight": survey.weight,
        "motivation": decode_level(survey.motivation),
        "sleep": decode_sleep(survey.sleep_hours),
        "stress": decode_level(survey.stress),
        "digestion": decode_digestion(survey.digestion),
        "water": decode_water(survey.water),
        "hunger": decode_hunger(survey.hunger),
        "libido": decode_level(survey.libido),
        "comment": survey.comment,
        "reviewed": survey.viewed_by_trainer,
    }
