"""Supabase-backed client and trainer repository."""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from uuid import UUID

from postgrest.exceptions import APIError
from supabase import Client

from fitmetrics.adapters.supabase_errors import raise_translated
from fitmetrics.domain.accounts import ClientRecord, TrainerRecord
from fitmetrics.domain.invites import InviteStatus
from fitmetrics.services.accounts import AccountRepository
from fitmetrics.services.notifications import Notification

_EPOCH = datetime.min.replace(tzinfo=UTC)

CLIENT_COLUMNS = (
    "id, user_id, name, current_trainer_id, archived_at, archived_by_trainer_id, "
    "created_at, avatar_url"
)


@dataclass
class SupabaseAccountRepository(AccountRepository):
    """Supabase implementation for client and trainer profiles."""

    client: Client

    def get_client_by_user(self, user_id: UUID) -> ClientRecord | None:
        """Return the client profile owned by a user, if present."""
        response = (
            self.client.table("clients")
            .select(CLIENT_COLUMNS)
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_client(response.data[0])

    def get_trainer_by_user(self, user_id: UUID) -> TrainerRecord | None:
        """Return the trainer profile owned by a user, if present."""
        response = (
            self.client.table("trainers")
            .select("id, user_id, name")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return TrainerRecord(
            id=UUID(row["id"]), user_id=UUID(row["user_id"]), name=row["name"]
        )

    def get_client(self, client_id: UUID) -> ClientRecord | None:
        """Return a client by id."""
        response = (
            self.client.table("clients")
            .select(CLIENT_COLUMNS)
            .eq("id", str(client_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_client(response.data[0])

    def email_exists(self, email: str) -> bool:
        """Return whether a user with this email is registered."""
        response = (
            self.client.table("users")
            .select("id")
            .eq("email", email)
            .limit(1)
            .execute()
        )
        return bool(response.data)

    def list_trainer_clients(self, trainer_id: UUID) -> list[ClientRecord]:
        """Return current, archived-by and orphan-archived clients."""
        current = (
            self.client.table("clients")
            .select(CLIENT_COLUMNS)
            .eq("current_trainer_id", str(trainer_id))
            .execute()
        )
        archived = (
            self.client.table("clients")
            .select(CLIENT_COLUMNS)
            .eq("archived_by_trainer_id", str(trainer_id))
            .execute()
        )
        rows = list(current.data or []) + list(archived.data or [])
        orphan_ids = self._redeemed_client_ids(trainer_id)
        if orphan_ids:
            orphans = (
                self.client.table("clients")
                .select(CLIENT_COLUMNS)
                .in_("id", orphan_ids)
                .not_.is_("archived_at", "null")
                .is_("archived_by_trainer_id", "null")
                .execute()
            )
            rows.extend(orphans.data or [])
        unique = {row["id"]: parse_client(row) for row in rows}
        return sorted(
            unique.values(),
            key=lambda client: client.created_at or _EPOCH,
            reverse=True,
        )

    def has_redeemed_invite(self, trainer_id: UUID, client_id: UUID) -> bool:
        """Return whether the client redeemed one of the trainer's invites."""
        response = (
            self.client.table("invite_codes")
            .select("id")
            .eq("trainer_id", str(trainer_id))
            .eq("client_id", str(client_id))
            .limit(1)
            .execute()
        )
        return bool(response.data)

    def archive_client(
        self,
        client_id: UUID,
        trainer_id: UUID,
        archived_at: datetime,
        notification: Notification,
    ) -> ClientRecord | None:
        """Run the transactional ``archive_client_with_notification`` function."""
        try:
            response = self.client.rpc(
                "archive_client_with_notification",
                {
                    "p_client_id": str(client_id),
                    "p_trainer_id": str(trainer_id),
                    "p_archived_at": archived_at.isoformat(),
                    "p_type": notification.type.value,
                    "p_message": notification.message,
                },
            ).execute()
        except APIError as exc:
            raise_translated(exc)
        if not response.data:
            return None
        return parse_client(response.data[0])

    def unarchive_client(
        self, client_id: UUID, trainer_id: UUID
    ) -> ClientRecord | None:
        """Restore the client only while it is archived by the trainer or orphaned."""
        response = (
            self.client.table("clients")
            .update(
                {
                    "archived_at": None,
                    "archived_by_trainer_id": None,
                    "current_trainer_id": str(trainer_id),
                }
            )
            .eq("id", str(client_id))
            .not_.is_("archived_at", "null")
            .or_(
                f"archived_by_trainer_id.eq.{trainer_id},"
                "archived_by_trainer_id.is.null"
            )
            .execute()
        )
        if not response.data:
            return None
        return parse_client(response.data[0])

    def _redeemed_client_ids(self, trainer_id: UUID) -> list[str]:
        response = (
            self.client.table("invite_codes")
            .select("client_id")
            .eq("trainer_id", str(trainer_id))
            .eq("status", InviteStatus.USED.value)
            .execute()
        )
        return [row["client_id"] for row in response.data or [] if row.get("client_id")]


def parse_client(row: dict[str, object]) -> ClientRecord:
    return ClientRecord(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        name=str(row.get("name") or ""),
        current_trainer_id=parse_optional_uuid(row.get("current_trainer_id")),
        archived_at=parse_optional_datetime(row.get("archived_at")),
        archived_by_trainer_id=parse_optional_uuid(row.get("archived_by_trainer_id")),
        created_at=parse_optional_datetime(row.get("created_at")),
        avatar_url=row.get("avatar_url"),  # type: ignore[arg-type]
    )


def parse_date(value: object) -> date:
    return date.fromisoformat(str(value)[:10])


def parse_optional_uuid(value: object) -> UUID | None:
    return UUID(str(value)) if value else None


def parse_optional_datetime(value: object) -> datetime | None:
    return datetime.fromisoformat(str(value)) if value else None
