"""Supabase repository for invite codes."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from postgrest.exceptions import APIError
from supabase import Client

from fitmetrics.adapters.supabase_account_repository import (
    parse_client,
    parse_optional_datetime,
    parse_optional_uuid,
)
from fitmetrics.adapters.supabase_errors import raise_translated
from fitmetrics.domain.accounts import ClientRecord, NewClientAccount
from fitmetrics.domain.invites import InviteCode, InviteStatus
from fitmetrics.services.invites import InviteRepository

INVITE_COLUMNS = (
    "id, code, trainer_id, client_id, client_name, status, expires_at, used_at, "
    "created_at"
)


@dataclass
class SupabaseInviteRepository(InviteRepository):
    """Supabase implementation for invite codes and redemption."""

    client: Client

    def code_exists(self, code: str) -> bool:
        """Return whether a code was ever issued."""
        response = (
            self.client.table("invite_codes")
            .select("id")
            .eq("code", code)
            .limit(1)
            .execute()
        )
        return bool(response.data)

    def create_invite(
        self,
        trainer_id: UUID,
        code: str,
        expires_at: datetime,
        client_name: str | None,
    ) -> InviteCode:
        """Insert a NEW invite row."""
        try:
            response = (
                self.client.table("invite_codes")
                .insert(
                    {
                        "code": code,
                        "trainer_id": str(trainer_id),
                        "client_name": client_name,
                        "status": InviteStatus.NEW.value,
                        "expires_at": expires_at.isoformat(),
                    }
                )
                .execute()
            )
        except APIError as exc:
            raise_translated(exc)
        if not response.data:
            raise RuntimeError("Failed to create invite code")
        return _parse_invite(response.data[0])

    def get_invite(self, invite_id: UUID) -> InviteCode | None:
        """Return an invite by id."""
        return self._find_one("id", str(invite_id))

    def get_by_code(self, code: str) -> InviteCode | None:
        """Return an invite by code."""
        return self._find_one("code", code)

    def list_for_trainer(self, trainer_id: UUID) -> list[InviteCode]:
        """Return a trainer's invites, newest first."""
        response = (
            self.client.table("invite_codes")
            .select(INVITE_COLUMNS)
            .eq("trainer_id", str(trainer_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_invite(row) for row in response.data or []]

    def expire_invite(self, invite_id: UUID) -> InviteCode | None:
        """Move a NEW invite to EXPIRED with a conditional update."""
        response = (
            self.client.table("invite_codes")
            .update({"status": InviteStatus.EXPIRED.value})
            .eq("id", str(invite_id))
            .eq("status", InviteStatus.NEW.value)
            .execute()
        )
        if not response.data:
            return None
        return _parse_invite(response.data[0])

    def register_client(
        self, invite_id: UUID, account: NewClientAccount, now: datetime
    ) -> ClientRecord:
        """Run the transactional ``register_client_with_invite`` function."""
        return self._redeem(
            "register_client_with_invite",
            {
                "p_invite_id": str(invite_id),
                "p_email": account.email,
                "p_password_hash": account.password_hash,
                "p_name": account.name,
                "p_phone": account.phone,
                "p_birth_date": (
                    account.birth_date.isoformat() if account.birth_date else None
                ),
                "p_now": now.isoformat(),
            },
        )

    def assign_client(
        self, invite_id: UUID, client_id: UUID, now: datetime
    ) -> ClientRecord:
        """Run the transactional ``assign_client_with_invite`` function."""
        return self._redeem(
            "assign_client_with_invite",
            {
                "p_invite_id": str(invite_id),
                "p_client_id": str(client_id),
                "p_now": now.isoformat(),
            },
        )

    def create_trainer_client(
        self, invite_id: UUID, user_id: UUID, name: str, now: datetime
    ) -> ClientRecord:
        """Run the transactional ``create_trainer_client_with_invite`` function."""
        return self._redeem(
            "create_trainer_client_with_invite",
            {
                "p_invite_id": str(invite_id),
                "p_user_id": str(user_id),
                "p_name": name,
                "p_now": now.isoformat(),
            },
        )

    def _redeem(self, function: str, params: dict[str, object]) -> ClientRecord:
        try:
            response = self.client.rpc(function, params).execute()
        except APIError as exc:
            raise_translated(exc)
        if not response.data:
            raise RuntimeError(f"{function} returned no client")
        return parse_client(response.data[0])

    def _find_one(self, column: str, value: str) -> InviteCode | None:
        response = (
            self.client.table("invite_codes")
            .select(INVITE_COLUMNS)
            .eq(column, value)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_invite(response.data[0])


def _parse_invite(row: dict[str, object]) -> InviteCode:
    return InviteCode(
        id=UUID(str(row["id"])),
        code=str(row["code"]),
        trainer_id=UUID(str(row["trainer_id"])),
        status=InviteStatus(str(row["status"])),
        expires_at=datetime.fromisoformat(str(row["expires_at"])),
        created_at=parse_optional_datetime(row.get("created_at")),
        client_id=parse_optional_uuid(row.get("client_id")),
        used_at=parse_optional_datetime(row.get("used_at")),
        client_name=row.get("client_name"),  # type: ignore[arg-type]
    )
