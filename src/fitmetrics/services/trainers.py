"""Trainer dashboard, archive and unarchive."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from uuid import UUID

from fitmetrics.domain.accounts import ClientRecord, TrainerRecord
from fitmetrics.domain.goals import resolve_goal
from fitmetrics.domain.measurements import MeasurementRecord
from fitmetrics.domain.periods import to_day, utc_today
from fitmetrics.errors import NotFound
from fitmetrics.services.accounts import AccountService, serialize_client
from fitmetrics.services.compliance import (
    CompliancePoint,
    summary_score,
    weekly_history,
)
from fitmetrics.services.diary import DiaryRepository
from fitmetrics.services.goals import GoalRepository, serialize_goal
from fitmetrics.services.measurements import (
    MeasurementRepository,
    serialize_measurement,
)
from fitmetrics.services.notifications import client_archived
from fitmetrics.services.surveys import SurveyRepository, serialize_survey

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class _ComplianceWindow:
    history: list[CompliancePoint]
    score: float
    survey_days: int


@dataclass
class TrainerService:
    """Aggregates client data for the trainer dashboard."""

    accounts: AccountService
    diary_repository: DiaryRepository
    goal_repository: GoalRepository
    survey_repository: SurveyRepository
    measurement_repository: MeasurementRepository
    window_days: int = 7
    survey_history_days: int = 30
    weekday_locale: str = "en"
    clock: Callable[[], datetime] = field(default=_utc_now)

    def list_clients(self, trainer_user_id: UUID) -> list[dict[str, object]]:
        """Return compliance summaries for every client visible to the trainer."""
        trainer = self.accounts.require_trainer(trainer_user_id)
        today = utc_today(self.clock())
        summaries = []
        for client in self.accounts.repository.list_trainer_clients(trainer.id):
            window = self._compliance_window(client, today)
            measurements = self.measurement_repository.list_for_client(client.id)
            summaries.append(
                {
                    **serialize_client(client),
                    "compliance_score": window.score,
                    "compliance_days": self.window_days,
                    "survey_adherence_count": window.survey_days,
                    "survey_adherence_days": self.window_days,
                    "unreviewed_surveys": self.survey_repository.count_unreviewed(
                        client.id
                    ),
                    **_last_measurement(measurements, today),
                }
            )
        return summaries

    def get_client_detail(
        self, trainer_user_id: UUID, client_id: UUID
    ) -> dict[str, object]:
        """Return the full dashboard view of a single client."""
        trainer = self.accounts.require_trainer(trainer_user_id)
        client = self.accounts.require_visible_client(trainer, client_id)
        today = utc_today(self.clock())
        window = self._compliance_window(client, today)
        current_goal = resolve_goal(
            self.goal_repository.list_goals(client.id, starts_on_or_before=today),
            today,
        )
        surveys = self.survey_repository.list_for_client(
            client.id,
            start=today - timedelta(days=self.survey_history_days - 1),
            end=today,
        )
        measurements = self.measurement_repository.list_for_client(client.id)
        return {
            **serialize_client(client),
            "compliance_score": window.score,
            "compliance_days": self.window_days,
            "compliance_history": [
                {"date": point.day.isoformat(), "day": point.label, "value": point.value}
                for point in window.history
            ],
            "survey_adherence_count": window.survey_days,
            "survey_adherence_days": self.window_days,
            "goals": serialize_goal(current_goal) if current_goal else None,
            "goals_history": [
                serialize_goal(goal)
                for goal in self.goal_repository.list_goals(client.id)
            ],
            "surveys": [serialize_survey(survey) for survey in surveys],
            "measurements": [serialize_measurement(item) for item in measurements],
            **_last_measurement(measurements, today),
        }

    def archive(self, trainer_user_id: UUID, client_id: UUID) -> ClientRecord:
        """Archive one of the trainer's current clients; repeat calls are no-ops."""
        trainer = self.accounts.require_trainer(trainer_user_id)
        client = self._archivable_client(trainer, client_id)
        if client.is_archived:
            return client
        archived = self.accounts.repository.archive_client(
            client.id, trainer.id, self.clock(), client_archived(trainer.id, client)
        )
        if archived is None:
            # Lost a race: another request archived or reassigned the client.
            return self._archivable_client(trainer, client_id)
        logger.info(
            "Client archived",
            extra={"client_id": str(client.id), "trainer_id": str(trainer.id)},
        )
        return archived

    def unarchive(self, trainer_user_id: UUID, client_id: UUID) -> ClientRecord:
        """Restore an archived client to the calling trainer."""
        trainer = self.accounts.require_trainer(trainer_user_id)
        client = self._unarchivable_client(trainer, client_id)
        if not client.is_archived:
            return client
        restored = self.accounts.repository.unarchive_client(client.id, trainer.id)
        if restored is None:
            # Lost a race: the client was restored or moved to another trainer.
            return self._unarchivable_client(trainer, client_id)
        logger.info(
            "Client unarchived",
            extra={"client_id": str(client.id), "trainer_id": str(trainer.id)},
        )
        return restored

    def mark_survey_reviewed(self, trainer_user_id: UUID, survey_id: UUID) -> None:
        """Flag one of a visible client's surveys as reviewed."""
        trainer = self.accounts.require_trainer(trainer_user_id)
        survey = self.survey_repository.get_survey(survey_id)
        if survey is None:
            raise NotFound("Survey not found")
        self.accounts.require_visible_client(trainer, survey.client_id)
        self.survey_repository.mark_reviewed(survey.id)

    def _archivable_client(
        self, trainer: TrainerRecord, client_id: UUID
    ) -> ClientRecord:
        client = self.accounts.repository.get_client(client_id)
        if client is None:
            raise NotFound("Client not found")
        if client.current_trainer_id == trainer.id:
            return client
        if client.is_archived and client.archived_by_trainer_id == trainer.id:
            return client
        raise NotFound("Client not found")

    def _unarchivable_client(
        self, trainer: TrainerRecord, client_id: UUID
    ) -> ClientRecord:
        client = self.accounts.repository.get_client(client_id)
        if client is None or not _can_unarchive(self.accounts, trainer, client):
            raise NotFound("Client not found")
        return client

    def _compliance_window(
        self, client: ClientRecord, today: date
    ) -> _ComplianceWindow:
        start = today - timedelta(days=self.window_days - 1)
        goals = self.goal_repository.list_goals(
            client.id, starts_on_or_before=today, open_after=start
        )
        entries = self.diary_repository.list_entries(
            client.id, start, today, with_meals=False
        )
        history = weekly_history(
            entries,
            goals,
            today,
            days=self.window_days,
            locale=self.weekday_locale,
        )
        surveys = self.survey_repository.list_for_client(client.id, start, today)
        return _ComplianceWindow(
            history=history,
            score=summary_score(history, has_entries=bool(entries)),
            survey_days=len({survey.day for survey in surveys}),
        )


def _can_unarchive(
    accounts: AccountService, trainer: TrainerRecord, client: ClientRecord
) -> bool:
    if client.archived_by_trainer_id == trainer.id:
        return True
    if client.archived_by_trainer_id is None:
        if not client.is_archived:
            return client.current_trainer_id == trainer.id
        return accounts.repository.has_redeemed_invite(trainer.id, client.id)
    return False


def _last_measurement(
    measurements: list[MeasurementRecord], today: date
) -> dict[str, object]:
    if not measurements:
        return {"last_measurement_date": None, "last_measurement_days": None}
    latest = max(measurements, key=lambda item: item.week_start_date)
    return {
        "last_measurement_date": latest.week_start_date.isoformat(),
        "last_measurement_days": (today - to_day(latest.week_start_date)).days,
    }
