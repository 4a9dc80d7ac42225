"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from fitmetrics.adapters.supabase_account_repository import SupabaseAccountRepository
from fitmetrics.adapters.supabase_diary_repository import SupabaseDiaryRepository
from fitmetrics.adapters.supabase_goal_repository import SupabaseGoalRepository
from fitmetrics.adapters.supabase_invite_repository import SupabaseInviteRepository
from fitmetrics.adapters.supabase_measurement_repository import (
    SupabaseMeasurementRepository,
)
from fitmetrics.adapters.supabase_period_store import SupabasePeriodUpsertStore
from fitmetrics.adapters.supabase_survey_repository import SupabaseSurveyRepository
from fitmetrics.config import Settings
from fitmetrics.services.accounts import AccountService
from fitmetrics.services.diary import DiaryService
from fitmetrics.services.goals import GoalService
from fitmetrics.services.invites import InviteService
from fitmetrics.services.measurements import MeasurementService
from fitmetrics.services.surveys import SurveyService
from fitmetrics.services.trainers import TrainerService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    diary_service: DiaryService
    measurement_service: MeasurementService
    survey_service: SurveyService
    goal_service: GoalService
    invite_service: InviteService
    trainer_service: TrainerService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    diary_repository = SupabaseDiaryRepository(supabase_client)
    goal_repository = SupabaseGoalRepository(supabase_client)
    survey_repository = SupabaseSurveyRepository(supabase_client)
    measurement_repository = SupabaseMeasurementRepository(supabase_client)
    account_service = AccountService(SupabaseAccountRepository(supabase_client))
    diary_service = DiaryService(
        accounts=account_service,
        repository=diary_repository,
    )
    measurement_service = MeasurementService(
        accounts=account_service,
        store=SupabasePeriodUpsertStore(supabase_client, "upsert_measurement"),
        repository=measurement_repository,
    )
    survey_service = SurveyService(
        accounts=account_service,
        store=SupabasePeriodUpsertStore(supabase_client, "upsert_daily_survey"),
        repository=survey_repository,
    )
    goal_service = GoalService(accounts=account_service, repository=goal_repository)
    invite_service = InviteService(
        accounts=account_service,
        repository=SupabaseInviteRepository(supabase_client),
        ttl_hours=resolved_settings.invite_ttl_hours,
    )
    trainer_service = TrainerService(
        accounts=account_service,
        diary_repository=diary_repository,
        goal_repository=goal_repository,
        survey_repository=survey_repository,
        measurement_repository=measurement_repository,
        window_days=resolved_settings.compliance_window_days,
        survey_history_days=resolved_settings.survey_history_days,
        weekday_locale=resolved_settings.weekday_locale,
    )

    async def close_resources() -> None:
        supabase_client.postgrest.session.close()

    return AppContainer(
        settings=resolved_settings,
        diary_service=diary_service,
        measurement_service=measurement_service,
        survey_service=survey_service,
        goal_service=goal_service,
        invite_service=invite_service,
        trainer_service=trainer_service,
        close_resources=close_resources,
    )
