"""Supabase repository for measurements."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from fitmetrics.adapters.supabase_account_repository import parse_date
from fitmetrics.domain.measurements import MeasurementRecord
from fitmetrics.services.measurements import MeasurementRepository


@dataclass
class SupabaseMeasurementRepository(MeasurementRepository):
    """Supabase implementation for reading measurements."""

    client: Client

    def list_for_client(self, client_id: UUID) -> list[MeasurementRecord]:
        """Return measurements ordered by week, newest first."""
        response = (
            self.client.table("measurements")
            .select(
                "id, client_id, week_start_date, arm_circumference, "
                "leg_circumference, waist_circumference, chest_circumference, "
                "hip_circumference"
            )
            .eq("client_id", str(client_id))
            .order("week_start_date", desc=True)
            .execute()
        )
        return [
            MeasurementRecord(
                id=UUID(str(row["id"])),
                client_id=UUID(str(row["client_id"])),
                week_start_date=parse_date(row["week_start_date"]),
                arms=row.get("arm_circumference"),
                legs=row.get("leg_circumference"),
                waist=row.get("waist_circumference"),
                chest=row.get("chest_circumference"),
                hips=row.get("hip_circumference"),
            )
            for row in response.data or []
        ]
