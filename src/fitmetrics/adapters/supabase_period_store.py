"""Supabase-backed period upsert store."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from postgrest.exceptions import APIError
from supabase import Client

from fitmetrics.adapters.supabase_errors import raise_translated
from fitmetrics.domain.upserts import UpsertResult
from fitmetrics.services.upserts import PeriodUpsertStore


@dataclass
class SupabasePeriodUpsertStore(PeriodUpsertStore):
    """Calls a Postgres ``insert ... on conflict`` function for one table."""

    client: Client
    function: str

    def upsert(
        self, owner_id: UUID, period: date, payload: dict[str, object]
    ) -> UpsertResult:
        """Create or replace the row for ``(owner_id, period)``."""
        try:
            response = self.client.rpc(
                self.function,
                {
                    "p_client_id": str(owner_id),
                    "p_period": period.isoformat(),
                    "p_payload": payload,
                },
            ).execute()
        except APIError as exc:
            raise_translated(exc)
        return parse_upsert_result(response.data, self.function)


def parse_upsert_result(data: object, function: str) -> UpsertResult:
    rows = data if isinstance(data, list) else [data]
    if not rows or not rows[0]:
        raise RuntimeError(f"{function} returned no row")
    row = rows[0]
    return UpsertResult(id=UUID(str(row["id"])), created=bool(row["created"]))
