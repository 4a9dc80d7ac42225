"""Account domain models."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID


@dataclass(frozen=True)
class TrainerRecord:
    """Trainer profile attached to a user."""

    id: UUID
    user_id: UUID
    name: str


@dataclass(frozen=True)
class ClientRecord:
    """Client profile with its trainer association.

    A non-archived client has exactly one ``current_trainer_id``. An archived
    client has none; ``archived_by_trainer_id`` is empty for orphan archives.
    """

    id: UUID
    user_id: UUID
    name: str
    current_trainer_id: UUID | None
    archived_at: datetime | None = None
    archived_by_trainer_id: UUID | None = None
    created_at: datetime | None = None
    avatar_url: str | None = None

    @property
    def is_archived(self) -> bool:
        return self.archived_at is not None


@dataclass(frozen=True)
class NewClientAccount:
    """Registration data for a client joining through an invite code.

    ``password_hash`` is produced by the authentication layer.
    """

    email: str
    password_hash: str
    name: str
    phone: str | None = None
    birth_date: date | None = None
