"""Caller identity resolution and trainer/client visibility."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID

from fitmetrics.domain.accounts import ClientRecord, TrainerRecord
from fitmetrics.errors import NotFound
from fitmetrics.services.notifications import Notification


class AccountRepository(Protocol):
    """Persistence interface for client and trainer profiles."""

    def get_client_by_user(self, user_id: UUID) -> ClientRecord | None:
        """Return the client profile owned by a user, if present."""

    def get_trainer_by_user(self, user_id: UUID) -> TrainerRecord | None:
        """Return the trainer profile owned by a user, if present."""

    def get_client(self, client_id: UUID) -> ClientRecord | None:
        """Return a client by id."""

    def email_exists(self, email: str) -> bool:
        """Return whether a user with this email is already registered."""

    def list_trainer_clients(self, trainer_id: UUID) -> list[ClientRecord]:
        """Return current, archived-by and orphan-archived clients, newest first."""

    def has_redeemed_invite(self, trainer_id: UUID, client_id: UUID) -> bool:
        """Return whether the client ever redeemed an invite of the trainer."""

    def archive_client(
        self,
        client_id: UUID,
        trainer_id: UUID,
        archived_at: datetime,
        notification: Notification,
    ) -> ClientRecord | None:
        """Archive a client still assigned to the trainer and store the notification.

        Both writes commit together. Returns None when the client was no longer
        assigned to the trainer.
        """

    def unarchive_client(
        self, client_id: UUID, trainer_id: UUID
    ) -> ClientRecord | None:
        """Reassign a client archived by the trainer, or orphan-archived, to it.

        Returns None when the client is no longer in such an archive.
        """


@dataclass
class AccountService:
    """Resolves authenticated users to their client or trainer profile."""

    repository: AccountRepository

    def require_client(self, user_id: UUID) -> ClientRecord:
        """Return the caller's client profile or raise ``NotFound``."""
        client = self.repository.get_client_by_user(user_id)
        if client is None:
            raise NotFound("Client not found")
        return client

    def require_trainer(self, user_id: UUID) -> TrainerRecord:
        """Return the caller's trainer profile or raise ``NotFound``."""
        trainer = self.repository.get_trainer_by_user(user_id)
        if trainer is None:
            raise NotFound("Trainer profile not found")
        return trainer

    def can_view(self, trainer: TrainerRecord, client: ClientRecord) -> bool:
        """Return whether a trainer may read a client's data."""
        if client.current_trainer_id == trainer.id:
            return True
        if client.archived_by_trainer_id == trainer.id:
            return True
        if client.is_archived and client.archived_by_trainer_id is None:
            return self.repository.has_redeemed_invite(trainer.id, client.id)
        return False

    def require_visible_client(
        self, trainer: TrainerRecord, client_id: UUID
    ) -> ClientRecord:
        """Return a client visible to the trainer or raise ``NotFound``."""
        client = self.repository.get_client(client_id)
        if client is None or not self.can_view(trainer, client):
            raise NotFound("Client not found")
        return client

    def require_current_client(
        self, trainer: TrainerRecord, client_id: UUID
    ) -> ClientRecord:
        """Return a client currently assigned to the trainer or raise ``NotFound``."""
        client = self.repository.get_client(client_id)
        if client is None or client.current_trainer_id != trainer.id:
            raise NotFound("Client not found")
        return client


def serialize_client(client: ClientRecord) -> dict[str, object]:
    return {
        "id": str(client.id),
        "name": client.name,
        "avatar_url": client.avatar_url,
        "created_at": client.created_at.isoformat() if client.created_at else None,
        "archived": client.is_archived,
        "archived_at": client.archived_at.isoformat() if client.archived_at else None,
    }
