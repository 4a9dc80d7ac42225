"""Create-or-replace persistence keyed by owner and period."""

from datetime import date
from typing import Protocol
from uuid import UUID

from fitmetrics.domain.upserts import UpsertResult


class PeriodUpsertStore(Protocol):
    """Keeps exactly one authoritative row per (owner, period).

    Implementations must be atomic: concurrent calls for the same owner and
    period leave a single row holding one caller's complete payload.
    """

    def upsert(
        self, owner_id: UUID, period: date, payload: dict[str, object]
    ) -> UpsertResult:
        """Create or replace the row for ``(owner_id, period)``."""
