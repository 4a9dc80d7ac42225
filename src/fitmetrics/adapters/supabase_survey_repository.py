"""Supabase repository for daily surveys."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from fitmetrics.adapters.supabase_account_repository import parse_date
from fitmetrics.domain.surveys import SurveyRecord
from fitmetrics.services.surveys import SurveyRepository

SURVEY_COLUMNS = (
    "id, client_id, date, weight, motivation, sleep_hours, stress, digestion, "
    "water, hunger, libido, comment, viewed_by_trainer"
)


@dataclass
class SupabaseSurveyRepository(SurveyRepository):
    """Supabase implementation for reading and reviewing surveys."""

    client: Client

    def list_for_client(
        self,
        client_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[SurveyRecord]:
        """Return surveys within ``[start, end]``, newest first."""
        query = (
            self.client.table("daily_surveys")
            .select(SURVEY_COLUMNS)
            .eq("client_id", str(client_id))
        )
        if start is not None:
            query = query.gte("date", start.isoformat())
        if end is not None:
            query = query.lte("date", end.isoformat())
        response = query.order("date", desc=True).execute()
        return [_parse_survey(row) for row in response.data or []]

    def count_unreviewed(self, client_id: UUID) -> int:
        """Return how many surveys the trainer has not reviewed yet."""
        response = (
            self.client.table("daily_surveys")
            .select("id", count="exact")
            .eq("client_id", str(client_id))
            .eq("viewed_by_trainer", False)
            .execute()
        )
        if response.count is not None:
            return response.count
        return len(response.data or [])

    def get_survey(self, survey_id: UUID) -> SurveyRecord | None:
        """Return a survey by id."""
        response = (
            self.client.table("daily_surveys")
            .select(SURVEY_COLUMNS)
            .eq("id", str(survey_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_survey(response.data[0])

    def mark_reviewed(self, survey_id: UUID) -> None:
        """Flag a survey as reviewed by the trainer."""
        self.client.table("daily_surveys").update({"viewed_by_trainer": True}).eq(
            "id", str(survey_id)
        ).execute()


def _parse_survey(row: dict[str, object]) -> SurveyRecord:
    return SurveyRecord(
        id=UUID(str(row["id"])),
        client_id=UUID(str(row["client_id"])),
        day=parse_date(row["date"]),
        weight=row.get("weight"),  # type: ignore[arg-type]
        motivation=row.get("motivation"),  # type: ignore[arg-type]
        sleep_hours=row.get("sleep_hours"),  # type: ignore[arg-type]
        stress=row.get("stress"),  # type: ignore[arg-type]
        digestion=row.get("digestion"),  # type: ignore[arg-type]
        water=row.get("water"),  # type: ignore[arg-type]
        hunger=row.get("hunger"),  # type: ignore[arg-type]
        libido=row.get("libido"),  # type: ignore[arg-type]
        comment=row.get("comment"),  # type: ignore[arg-type]
        viewed_by_trainer=bool(row.get("viewed_by_trainer")),
    )
