"""Invite code records and their state machine."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class InviteStatus(StrEnum):
    NEW = "NEW"
    USED = "USED"
    EXPIRED = "EXPIRED"


# USED and EXPIRED are terminal.
TRANSITIONS: dict[InviteStatus, frozenset[InviteStatus]] = {
    InviteStatus.NEW: frozenset({InviteStatus.USED, InviteStatus.EXPIRED}),
    InviteStatus.USED: frozenset(),
    InviteStatus.EXPIRED: frozenset(),
}


def can_transition(current: InviteStatus, target: InviteStatus) -> bool:
    return target in TRANSITIONS[current]


@dataclass(frozen=True)
class InviteCode:
    """Single-use code binding a prospective client to a trainer."""

    id: UUID
    code: str
    trainer_id: UUID
    status: InviteStatus
    expires_at: datetime
    created_at: datetime | None = None
    client_id: UUID | None = None
    used_at: datetime | None = None
    client_name: str | None = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at < now

    def is_active(self, now: datetime) -> bool:
        """Lazy expiry: NEW codes past their deadline are inactive."""
        return self.status == InviteStatus.NEW and self.expires_at > now
