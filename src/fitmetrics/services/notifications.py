"""Trainer-facing notifications."""

from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID

from fitmetrics.domain.accounts import ClientRecord


class NotificationType(StrEnum):
    CLIENT_ARCHIVED = "CLIENT_ARCHIVED"


@dataclass(frozen=True)
class Notification:
    """Notification row written together with the change it reports."""

    trainer_id: UUID
    client_id: UUID
    type: NotificationType
    message: str


def client_archived(trainer_id: UUID, client: ClientRecord) -> Notification:
    """Build the notification recorded when a trainer archives a client."""
    return Notification(
        trainer_id=trainer_id,
        client_id=client.id,
        type=NotificationType.CLIENT_ARCHIVED,
        message=f"Client {client.name} was archived",
    )
