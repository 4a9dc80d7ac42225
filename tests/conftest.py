"""Shared test fixtures."""

import copy
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from fitmetrics.config import Settings
from fitmetrics.containers import AppContainer
from fitmetrics.domain.accounts import ClientRecord, NewClientAccount, TrainerRecord
from fitmetrics.domain.diary import (
    DiaryEntryRecord,
    MacroTotals,
    MealEntryRecord,
    MealInput,
)
from fitmetrics.domain.goals import GoalTargets, NutritionGoal
from fitmetrics.domain.invites import InviteCode, InviteStatus
from fitmetrics.domain.measurements import MeasurementRecord
from fitmetrics.domain.surveys import SurveyRecord
from fitmetrics.domain.upserts import UpsertResult
from fitmetrics.errors import AlreadyExists, InviteNotActive
from fitmetrics.services.accounts import AccountRepository, AccountService
from fitmetrics.services.diary import DiaryRepository, DiaryService
from fitmetrics.services.goals import GoalRepository, GoalService
from fitmetrics.services.invites import InviteRepository, InviteService
from fitmetrics.services.measurements import MeasurementRepository, MeasurementService
from fitmetrics.services.notifications import Notification
from fitmetrics.services.surveys import SurveyRepository, SurveyService
from fitmetrics.services.trainers import TrainerService
from fitmetrics.services.upserts import PeriodUpsertStore

# Wednesday.
NOW = datetime(2024, 3, 13, 9, 0, tzinfo=UTC)
TODAY = NOW.date()

SERVICE_TOKEN = "service-token"

_TABLES = (
    "users",
    "trainers",
    "clients",
    "diary_entries",
    "measurements",
    "surveys",
    "goals",
    "invites",
    "notifications",
)


def fixed_clock() -> datetime:
    return NOW


@dataclass
class InMemoryDatabase:
    """Tables shared by the in-memory repositories.

    ``transaction`` serializes writers and restores every table when the
    block raises, mirroring a Postgres function call.
    """

    users: dict[UUID, str] = field(default_factory=dict)
    trainers: dict[UUID, TrainerRecord] = field(default_factory=dict)
    clients: dict[UUID, ClientRecord] = field(default_factory=dict)
    diary_entries: dict[UUID, DiaryEntryRecord] = field(default_factory=dict)
    measurements: dict[UUID, MeasurementRecord] = field(default_factory=dict)
    surveys: dict[UUID, SurveyRecord] = field(default_factory=dict)
    goals: dict[UUID, NutritionGoal] = field(default_factory=dict)
    invites: dict[UUID, InviteCode] = field(default_factory=dict)
    notifications: list[Notification] = field(default_factory=list)
    lock: threading.RLock = field(default_factory=threading.RLock)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self.lock:
            snapshot = {name: copy.deepcopy(getattr(self, name)) for name in _TABLES}
            try:
                yield
            except Exception:
                for name, value in snapshot.items():
                    setattr(self, name, value)
                raise

    def add_user(self, email: str | None = None) -> UUID:
        user_id = uuid4()
        self.users[user_id] = email or f"{user_id}@example.com"
        return user_id

    def add_trainer(self, name: str = "Coach") -> TrainerRecord:
        trainer = TrainerRecord(id=uuid4(), user_id=self.add_user(), name=name)
        self.trainers[trainer.id] = trainer
        return trainer

    def add_client(
        self,
        trainer: TrainerRecord | None,
        name: str = "Client",
        created_at: datetime = NOW,
    ) -> ClientRecord:
        client = ClientRecord(
            id=uuid4(),
            user_id=self.add_user(),
            name=name,
            current_trainer_id=trainer.id if trainer else None,
            created_at=created_at,
        )
        self.clients[client.id] = client
        return client

    def add_goal(
        self,
        client: ClientRecord,
        start_date: date,
        end_date: date | None,
        targets: GoalTargets,
    ) -> NutritionGoal:
        goal = NutritionGoal(
            id=uuid4(),
            client_id=client.id,
            trainer_id=client.current_trainer_id or uuid4(),
            start_date=start_date,
            end_date=end_date,
            targets=targets,
        )
        self.goals[goal.id] = goal
        return goal

    def add_invite(
        self,
        trainer: TrainerRecord,
        code: str = "123456",
        status: InviteStatus = InviteStatus.NEW,
        expires_at: datetime | None = None,
        client_id: UUID | None = None,
    ) -> InviteCode:
        invite = InviteCode(
            id=uuid4(),
            code=code,
            trainer_id=trainer.id,
            status=status,
            expires_at=expires_at or NOW + timedelta(hours=48),
            created_at=NOW,
            client_id=client_id,
        )
        self.invites[invite.id] = invite
        return invite


@dataclass
class InMemoryAccountRepository(AccountRepository):
    """In-memory account repository; ``fail_on_notification`` breaks archiving."""

    db: InMemoryDatabase
    fail_on_notification: bool = False

    def get_client_by_user(self, user_id: UUID) -> ClientRecord | None:
        return next(
            (c for c in self.db.clients.values() if c.user_id == user_id), None
        )

    def get_trainer_by_user(self, user_id: UUID) -> TrainerRecord | None:
        return next(
            (t for t in self.db.trainers.values() if t.user_id == user_id), None
        )

    def get_client(self, client_id: UUID) -> ClientRecord | None:
        return self.db.clients.get(client_id)

    def email_exists(self, email: str) -> bool:
        with self.db.lock:
            return email in self.db.users.values()

    def list_trainer_clients(self, trainer_id: UUID) -> list[ClientRecord]:
        clients = [
            client
            for client in self.db.clients.values()
            if client.current_trainer_id == trainer_id
            or client.archived_by_trainer_id == trainer_id
            or (
                client.is_archived
                and client.archived_by_trainer_id is None
                and self.has_redeemed_invite(trainer_id, client.id)
            )
        ]
        return sorted(clients, key=lambda item: item.created_at or NOW, reverse=True)

    def has_redeemed_invite(self, trainer_id: UUID, client_id: UUID) -> bool:
        return any(
            invite.trainer_id == trainer_id
            and invite.client_id == client_id
            and invite.status == InviteStatus.USED
            for invite in self.db.invites.values()
        )

    def archive_client(
        self,
        client_id: UUID,
        trainer_id: UUID,
        archived_at: datetime,
        notification: Notification,
    ) -> ClientRecord | None:
        with self.db.transaction():
            client = self.db.clients.get(client_id)
            if client is None or client.current_trainer_id != trainer_id:
                return None
            archived = replace(
                client,
                current_trainer_id=None,
                archived_at=archived_at,
                archived_by_trainer_id=trainer_id,
            )
            self.db.clients[client_id] = archived
            if self.fail_on_notification:
                raise RuntimeError("notification insert failed")
            self.db.notifications.append(notification)
            return archived

    def unarchive_client(
        self, client_id: UUID, trainer_id: UUID
    ) -> ClientRecord | None:
        with self.db.transaction():
            client = self.db.clients.get(client_id)
            if client is None or not client.is_archived:
                return None
            if client.archived_by_trainer_id not in (None, trainer_id):
                return None
            restored = replace(
                client,
                current_trainer_id=trainer_id,
                archived_at=None,
                archived_by_trainer_id=None,
            )
            self.db.clients[client_id] = restored
            return restored


@dataclass
class InMemoryMeasurementRepository(PeriodUpsertStore, MeasurementRepository):
    """Measurement store keyed by (client, week)."""

    db: InMemoryDatabase
    payloads: list[dict[str, object]] = field(default_factory=list)

    def upsert(
        self, owner_id: UUID, period: date, payload: dict[str, object]
    ) -> UpsertResult:
        with self.db.transaction():
            self.payloads.append(payload)
            existing = next(
                (
                    row
                    for row in self.db.measurements.values()
                    if row.client_id == owner_id and row.week_start_date == period
                ),
                None,
            )
            row_id = existing.id if existing else uuid4()
            self.db.measurements[row_id] = MeasurementRecord(
                id=row_id,
                client_id=owner_id,
                week_start_date=period,
                arms=payload["arm_circumference"],  # type: ignore[arg-type]
                legs=payload["leg_circumference"],  # type: ignore[arg-type]
                waist=payload["waist_circumference"],  # type: ignore[arg-type]
                chest=payload["chest_circumference"],  # type: ignore[arg-type]
                hips=payload["hip_circumference"],  # type: ignore[arg-type]
            )
            return UpsertResult(id=row_id, created=existing is None)

    def list_for_client(self, client_id: UUID) -> list[MeasurementRecord]:
        rows = [row for row in self.db.measurements.values() if row.client_id == client_id]
        return sorted(rows, key=lambda row: row.week_start_date, reverse=True)


@dataclass
class InMemorySurveyRepository(PeriodUpsertStore, SurveyRepository):
    """Survey store keyed by (client, day)."""

    db: InMemoryDatabase

    def upsert(
        self, owner_id: UUID, period: date, payload: dict[str, object]
    ) -> UpsertResult:
        with self.db.transaction():
            existing = next(
                (
                    row
                    for row in self.db.surveys.values()
                    if row.client_id == owner_id and row.day == period
                ),
                None,
            )
            row_id = existing.id if existing else uuid4()
            self.db.surveys[row_id] = SurveyRecord(
                id=row_id,
                client_id=owner_id,
                day=period,
                weight=payload["weight"],  # type: ignore[arg-type]
                motivation=payload["motivation"],  # type: ignore[arg-type]
                sleep_hours=payload["sleep_hours"],  # type: ignore[arg-type]
                stress=payload["stress"],  # type: ignore[arg-type]
                digestion=payload["digestion"],  # type: ignore[arg-type]
                water=payload["water"],  # type: ignore[arg-type]
                hunger=payload["hunger"],  # type: ignore[arg-type]
                libido=payload["libido"],  # type: ignore[arg-type]
                comment=payload["comment"],  # type: ignore[arg-type]
                viewed_by_trainer=existing.viewed_by_trainer if existing else False,
            )
            return UpsertResult(id=row_id, created=existing is None)

    def list_for_client(
        self,
        client_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[SurveyRecord]:
        rows = [
            row
            for row in self.db.surveys.values()
            if row.client_id == client_id
            and (start is None or row.day >= start)
            and (end is None or row.day <= end)
        ]
        return sorted(rows, key=lambda row: row.day, reverse=True)

    def count_unreviewed(self, client_id: UUID) -> int:
        return sum(
            1
            for row in self.db.surveys.values()
            if row.client_id == client_id and not row.viewed_by_trainer
        )

    def get_survey(self, survey_id: UUID) -> SurveyRecord | None:
        return self.db.surveys.get(survey_id)

    def mark_reviewed(self, survey_id: UUID) -> None:
        with self.db.transaction():
            self.db.surveys[survey_id] = replace(
                self.db.surveys[survey_id], viewed_by_trainer=True
            )


@dataclass
class InMemoryDiaryRepository(DiaryRepository):
    """Diary repository; ``fail_on_meal`` makes a meal insert fail."""

    db: InMemoryDatabase
    fail_on_meal: str | None = None

    def sync_day(
        self,
        client_id: UUID,
        day: date,
        totals: MacroTotals,
        meals: list[MealInput],
    ) -> UpsertResult:
        with self.db.transaction():
            existing = next(
                (
                    row
                    for row in self.db.diary_entries.values()
                    if row.client_id == client_id and row.day == day
                ),
                None,
            )
            entry_id = existing.id if existing else uuid4()
            entry = DiaryEntryRecord(
                id=entry_id, client_id=client_id, day=day, totals=totals, synced=True
            )
            self.db.diary_entries[entry_id] = entry
            for meal in meals:
                if meal.name == self.fail_on_meal:
                    raise RuntimeError("meal insert failed")
                entry.meals.append(
                    MealEntryRecord(
                        id=uuid4(),
                        diary_entry_id=entry_id,
                        name=meal.name,
                        time=meal.time,
                        protein=meal.protein,
                        fat=meal.fat,
                        carbs=meal.carbs,
                        fiber=meal.fiber,
                    )
                )
            return UpsertResult(id=entry_id, created=existing is None)

    def list_entries(
        self,
        client_id: UUID,
        start: date | None = None,
        end: date | None = None,
        with_meals: bool = True,
    ) -> list[DiaryEntryRecord]:
        rows = [
            row if with_meals else replace(row, meals=[])
            for row in self.db.diary_entries.values()
            if row.client_id == client_id
            and (start is None or row.day >= start)
            and (end is None or row.day <= end)
        ]
        return sorted(rows, key=lambda row: row.day, reverse=True)


@dataclass
class InMemoryGoalRepository(GoalRepository):
    """Goal repository keeping intervals non-overlapping."""

    db: InMemoryDatabase

    def list_goals(
        self,
        client_id: UUID,
        starts_on_or_before: date | None = None,
        open_after: date | None = None,
    ) -> list[NutritionGoal]:
        rows = [
            goal
            for goal in self.db.goals.values()
            if goal.client_id == client_id
            and (starts_on_or_before is None or goal.start_date <= starts_on_or_before)
            and (
                open_after is None
                or goal.end_date is None
                or goal.end_date > open_after
            )
        ]
        return sorted(rows, key=lambda goal: goal.start_date, reverse=True)

    def set_goal(
        self,
        client_id: UUID,
        trainer_id: UUID,
        start_date: date,
        targets: GoalTargets,
    ) -> NutritionGoal:
        with self.db.transaction():
            for goal in list(self.db.goals.values()):
                if goal.client_id != client_id:
                    continue
                if goal.start_date == start_date:
                    updated = replace(goal, targets=targets)
                    self.db.goals[goal.id] = updated
                    return updated
            for goal in list(self.db.goals.values()):
                if (
                    goal.client_id == client_id
                    and goal.end_date is None
                    and goal.start_date < start_date
                ):
                    self.db.goals[goal.id] = replace(goal, end_date=start_date)
            created = NutritionGoal(
                id=uuid4(),
                client_id=client_id,
                trainer_id=trainer_id,
                start_date=start_date,
                end_date=None,
                targets=targets,
            )
            self.db.goals[created.id] = created
            return created


@dataclass
class InMemoryInviteRepository(InviteRepository):
    """Invite repository with a conditional NEW -> USED flip.

    ``read_barrier`` holds every ``get_by_code`` caller until all parties
    have read the invite, forcing concurrent redemptions to race.
    """

    db: InMemoryDatabase
    read_barrier: threading.Barrier | None = None

    def code_exists(self, code: str) -> bool:
        return any(invite.code == code for invite in self.db.invites.values())

    def create_invite(
        self,
        trainer_id: UUID,
        code: str,
        expires_at: datetime,
        client_name: str | None,
    ) -> InviteCode:
        with self.db.transaction():
            if self.code_exists(code):
                raise AlreadyExists("Invite code already exists")
            invite = InviteCode(
                id=uuid4(),
                code=code,
                trainer_id=trainer_id,
                status=InviteStatus.NEW,
                expires_at=expires_at,
                created_at=NOW,
                client_name=client_name,
            )
            self.db.invites[invite.id] = invite
            return invite

    def get_invite(self, invite_id: UUID) -> InviteCode | None:
        return self.db.invites.get(invite_id)

    def get_by_code(self, code: str) -> InviteCode | None:
        with self.db.lock:
            invite = next(
                (item for item in self.db.invites.values() if item.code == code), None
            )
        if self.read_barrier is not None:
            self.read_barrier.wait(timeout=5)
        return invite

    def list_for_trainer(self, trainer_id: UUID) -> list[InviteCode]:
        rows = [item for item in self.db.invites.values() if item.trainer_id == trainer_id]
        return sorted(rows, key=lambda item: item.created_at or NOW, reverse=True)

    def expire_invite(self, invite_id: UUID) -> InviteCode | None:
        with self.db.transaction():
            invite = self.db.invites.get(invite_id)
            if invite is None or invite.status != InviteStatus.NEW:
                return None
            expired = replace(invite, status=InviteStatus.EXPIRED)
            self.db.invites[invite_id] = expired
            return expired

    def register_client(
        self, invite_id: UUID, account: NewClientAccount, now: datetime
    ) -> ClientRecord:
        with self.db.transaction():
            if account.email in self.db.users.values():
                raise AlreadyExists("User already exists")
            user_id = self.db.add_user(account.email)
            client = ClientRecord(
                id=uuid4(),
                user_id=user_id,
                name=account.name,
                current_trainer_id=self.db.invites[invite_id].trainer_id,
                created_at=now,
            )
            self.db.clients[client.id] = client
            self._use_invite(invite_id, client.id, now)
            return client

    def assign_client(
        self, invite_id: UUID, client_id: UUID, now: datetime
    ) -> ClientRecord:
        with self.db.transaction():
            trainer_id = self._use_invite(invite_id, client_id, now)
            client = replace(
                self.db.clients[client_id],
                current_trainer_id=trainer_id,
                archived_at=None,
                archived_by_trainer_id=None,
            )
            self.db.clients[client_id] = client
            return client

    def create_trainer_client(
        self, invite_id: UUID, user_id: UUID, name: str, now: datetime
    ) -> ClientRecord:
        with self.db.transaction():
            client = ClientRecord(
                id=uuid4(),
                user_id=user_id,
                name=name,
                current_trainer_id=self.db.invites[invite_id].trainer_id,
                created_at=now,
            )
            self.db.clients[client.id] = client
            self._use_invite(invite_id, client.id, now)
            return client

    def _use_invite(self, invite_id: UUID, client_id: UUID, now: datetime) -> UUID:
        invite = self.db.invites[invite_id]
        if invite.status != InviteStatus.NEW or invite.expires_at < now:
            raise InviteNotActive()
        self.db.invites[invite_id] = replace(
            invite, status=InviteStatus.USED, client_id=client_id, used_at=now
        )
        return invite.trainer_id


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        service_token=SERVICE_TOKEN,
    )


@pytest.fixture
def database() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def diary_repository(database: InMemoryDatabase) -> InMemoryDiaryRepository:
    return InMemoryDiaryRepository(database)


@pytest.fixture
def invite_repository(database: InMemoryDatabase) -> InMemoryInviteRepository:
    return InMemoryInviteRepository(database)


@pytest.fixture
def account_repository(database: InMemoryDatabase) -> InMemoryAccountRepository:
    return InMemoryAccountRepository(database)


@pytest.fixture
def container(
    settings: Settings,
    database: InMemoryDatabase,
    diary_repository: InMemoryDiaryRepository,
    invite_repository: InMemoryInviteRepository,
    account_repository: InMemoryAccountRepository,
) -> AppContainer:
    account_service = AccountService(account_repository)
    measurement_repository = InMemoryMeasurementRepository(database)
    survey_repository = InMemorySurveyRepository(database)
    goal_repository = InMemoryGoalRepository(database)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        diary_service=DiaryService(account_service, diary_repository),
        measurement_service=MeasurementService(
            account_service, measurement_repository, measurement_repository
        ),
        survey_service=SurveyService(
            account_service, survey_repository, survey_repository
        ),
        goal_service=GoalService(account_service, goal_repository, clock=fixed_clock),
        invite_service=InviteService(
            account_service,
            invite_repository,
            ttl_hours=settings.invite_ttl_hours,
            clock=fixed_clock,
        ),
        trainer_service=TrainerService(
            accounts=account_service,
            diary_repository=diary_repository,
            goal_repository=goal_repository,
            survey_repository=survey_repository,
            measurement_repository=measurement_repository,
            clock=fixed_clock,
        ),
        close_resources=close_resources,
    )
