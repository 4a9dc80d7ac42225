"""Invite code lifecycle: issue, deactivate and redeem."""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol
from uuid import UUID

from fitmetrics.domain.accounts import ClientRecord, NewClientAccount
from fitmetrics.domain.invites import InviteCode, InviteStatus, can_transition
from fitmetrics.errors import AlreadyExists, InvalidInput, InviteNotActive, NotFound
from fitmetrics.services.accounts import AccountService

logger = logging.getLogger(__name__)

CODE_LENGTH = 6


class InviteRepository(Protocol):
    """Persistence interface for invite codes and their redemption."""

    def code_exists(self, code: str) -> bool:
        """Return whether a code was ever issued."""

    def create_invite(
        self,
        trainer_id: UUID,
        code: str,
        expires_at: datetime,
        client_name: str | None,
    ) -> InviteCode:
        """Insert a NEW invite; raises ``AlreadyExists`` on a duplicate code."""

    def get_invite(self, invite_id: UUID) -> InviteCode | None:
        """Return an invite by id."""

    def get_by_code(self, code: str) -> InviteCode | None:
        """Return an invite by code."""

    def list_for_trainer(self, trainer_id: UUID) -> list[InviteCode]:
        """Return a trainer's invites, newest first."""

    def expire_invite(self, invite_id: UUID) -> InviteCode | None:
        """Move a NEW invite to EXPIRED; None if it was no longer NEW."""

    def register_client(
        self, invite_id: UUID, account: NewClientAccount, now: datetime
    ) -> ClientRecord:
        """Create user and client and mark the invite USED in one transaction.

        Raises ``InviteNotActive`` and rolls everything back if the invite was
        not NEW and unexpired at the moment of the conditional update.
        """

    def assign_client(
        self, invite_id: UUID, client_id: UUID, now: datetime
    ) -> ClientRecord:
        """Move an existing client to the invite's trainer and mark it USED."""

    def create_trainer_client(
        self, invite_id: UUID, user_id: UUID, name: str, now: datetime
    ) -> ClientRecord:
        """Create a client profile for a trainer redeeming their own invite."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def random_code() -> str:
    """Return a random 6-digit code without a leading zero."""
    return str(100000 + secrets.randbelow(900000))


@dataclass
class InviteService:
    """Drives invite codes through NEW -> USED / EXPIRED."""

    accounts: AccountService
    repository: InviteRepository
    ttl_hours: int = 48
    clock: Callable[[], datetime] = field(default=_utc_now)
    code_factory: Callable[[], str] = field(default=random_code)

    def create_invite(
        self, trainer_user_id: UUID, client_name: str | None = None
    ) -> InviteCode:
        """Issue a fresh code for the calling trainer."""
        trainer = self.accounts.require_trainer(trainer_user_id)
        expires_at = self.clock() + timedelta(hours=self.ttl_hours)
        # The keyspace is large relative to issued codes; retries are unbounded.
        while True:
            code = self.code_factory()
            if self.repository.code_exists(code):
                continue
            try:
                invite = self.repository.create_invite(
                    trainer.id, code, expires_at, client_name
                )
            except AlreadyExists:
                logger.info("Invite code collided on insert, drawing again")
                continue
            logger.info(
                "Invite created",
                extra={"trainer_id": str(trainer.id), "invite_id": str(invite.id)},
            )
            return invite

    def list_invites(self, trainer_user_id: UUID) -> list[dict[str, object]]:
        """Return the trainer's invites with their lazily computed activity."""
        trainer = self.accounts.require_trainer(trainer_user_id)
        now = self.clock()
        return [
            serialize_invite(invite, now)
            for invite in self.repository.list_for_trainer(trainer.id)
        ]

    def deactivate_invite(self, trainer_user_id: UUID, invite_id: UUID) -> InviteCode:
        """Expire one of the trainer's NEW invites."""
        trainer = self.accounts.require_trainer(trainer_user_id)
        invite = self.repository.get_invite(invite_id)
        if invite is None or invite.trainer_id != trainer.id:
            raise NotFound("Invite not found")
        if not can_transition(invite.status, InviteStatus.EXPIRED):
            raise InviteNotActive()
        expired = self.repository.expire_invite(invite.id)
        if expired is None:
            raise InviteNotActive()
        logger.info("Invite deactivated", extra={"invite_id": str(invite.id)})
        return expired

    def register_client(
        self, account: NewClientAccount, code: str
    ) -> ClientRecord:
        """Create a client account bound to the trainer owning ``code``."""
        now = self.clock()
        invite = self._require_redeemable(code, now)
        if self.accounts.repository.email_exists(account.email):
            raise AlreadyExists("User already exists")
        try:
            client = self.repository.register_client(invite.id, account, now)
        except InviteNotActive:
            logger.warning(
                "Invite redemption lost a race", extra={"invite_id": str(invite.id)}
            )
            raise
        logger.info(
            "Client registered",
            extra={"client_id": str(client.id), "trainer_id": str(invite.trainer_id)},
        )
        return client

    def change_trainer(self, user_id: UUID, code: str) -> ClientRecord:
        """Move the calling client to the trainer owning ``code``."""
        now = self.clock()
        invite = self._require_redeemable(code, now)
        client = self.accounts.repository.get_client_by_user(user_id)
        try:
            if client is not None:
                updated = self.repository.assign_client(invite.id, client.id, now)
            else:
                updated = self._redeem_as_trainer(user_id, invite, now)
        except InviteNotActive:
            logger.warning(
                "Invite redemption lost a race", extra={"invite_id": str(invite.id)}
            )
            raise
        logger.info(
            "Client changed trainer",
            extra={"client_id": str(updated.id), "trainer_id": str(invite.trainer_id)},
        )
        return updated

    def _redeem_as_trainer(
        self, user_id: UUID, invite: InviteCode, now: datetime
    ) -> ClientRecord:
        trainer = self.accounts.repository.get_trainer_by_user(user_id)
        if trainer is None:
            raise NotFound("Client profile not found")
        if invite.trainer_id != trainer.id:
            raise InviteNotActive("Invite code belongs to another trainer")
        return self.repository.create_trainer_client(
            invite.id, user_id, trainer.name, now
        )

    def _require_redeemable(self, code: str, now: datetime) -> InviteCode:
        cleaned = code.strip()
        if len(cleaned) != CODE_LENGTH or not cleaned.isdigit():
            raise InvalidInput.for_field("invite_code", "Invite code must be 6 digits")
        invite = self.repository.get_by_code(cleaned)
        if invite is None:
            raise InviteNotActive("Invalid invite code")
        if invite.status != InviteStatus.NEW or invite.is_expired(now):
            raise InviteNotActive()
        return invite


def serialize_invite(invite: InviteCode, now: datetime) -> dict[str, object]:
    return {
        "id": str(invite.id),
        "code": invite.code,
        "client_name": invite.client_name,
        "status": invite.status.value,
        "is_active": invite.is_active(now),
        "created_at": invite.created_at.isoformat() if invite.created_at else None,
        "expires_at": invite.expires_at.isoformat(),
        "used_at": invite.used_at.isoformat() if invite.used_at else None,
        "client_id": str(invite.client_id) if invite.client_id else None,
    }
