"""Results of period-keyed create-or-replace writes."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class UpsertResult:
    """Identifier of the authoritative row and whether it was just created."""

    id: UUID
    created: bool


@dataclass(frozen=True)
class SyncResult:
    """Acknowledgement returned to a syncing device."""

    id: UUID
    created: bool
    synced: bool = True
