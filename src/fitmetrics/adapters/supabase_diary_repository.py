"""Supabase repository for diary entries."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from postgrest.exceptions import APIError
from supabase import Client

from fitmetrics.adapters.supabase_account_repository import parse_date
from fitmetrics.adapters.supabase_errors import raise_translated
from fitmetrics.adapters.supabase_period_store import parse_upsert_result
from fitmetrics.domain.diary import (
    DiaryEntryRecord,
    MacroTotals,
    MealEntryRecord,
    MealInput,
)
from fitmetrics.domain.upserts import UpsertResult
from fitmetrics.services.diary import DiaryRepository

ENTRY_COLUMNS = (
    "id, client_id, date, total_protein, total_fat, total_carbs, total_fiber, synced"
)
MEAL_COLUMNS = "id, diary_entry_id, position, name, time, protein, fat, carbs, fiber"


@dataclass
class SupabaseDiaryRepository(DiaryRepository):
    """Supabase implementation for diary entries and meals."""

    client: Client

    def sync_day(
        self,
        client_id: UUID,
        day: date,
        totals: MacroTotals,
        meals: list[MealInput],
    ) -> UpsertResult:
        """Run the transactional ``sync_diary_entry`` function."""
        try:
            response = self.client.rpc(
                "sync_diary_entry",
                {
                    "p_client_id": str(client_id),
                    "p_period": day.isoformat(),
                    "p_totals": {
                        "protein": totals.protein,
                        "fat": totals.fat,
                        "carbs": totals.carbs,
                        "fiber": totals.fiber,
                    },
                    "p_meals": [
                        {
                            "name": meal.name,
                            "time": meal.time.isoformat() if meal.time else None,
                            "protein": meal.protein,
                            "fat": meal.fat,
                            "carbs": meal.carbs,
                            "fiber": meal.fiber,
                        }
                        for meal in meals
                    ],
                },
            ).execute()
        except APIError as exc:
            raise_translated(exc)
        return parse_upsert_result(response.data, "sync_diary_entry")

    def list_entries(
        self,
        client_id: UUID,
        start: date | None = None,
        end: date | None = None,
        with_meals: bool = True,
    ) -> list[DiaryEntryRecord]:
        """Return entries within ``[start, end]``, newest first."""
        query = (
            self.client.table("diary_entries")
            .select(ENTRY_COLUMNS)
            .eq("client_id", str(client_id))
        )
        if start is not None:
            query = query.gte("date", start.isoformat())
        if end is not None:
            query = query.lte("date", end.isoformat())
        response = query.order("date", desc=True).execute()
        rows = response.data or []
        meals_by_entry = self._meals_for(rows) if with_meals and rows else {}
        return [
            _parse_entry(row, meals_by_entry.get(str(row["id"]), [])) for row in rows
        ]

    def _meals_for(
        self, rows: list[dict[str, object]]
    ) -> dict[str, list[MealEntryRecord]]:
        response = (
            self.client.table("meal_entries")
            .select(MEAL_COLUMNS)
            .in_("diary_entry_id", [str(row["id"]) for row in rows])
            .order("position", desc=False)
            .execute()
        )
        grouped: dict[str, list[MealEntryRecord]] = {}
        for row in response.data or []:
            grouped.setdefault(str(row["diary_entry_id"]), []).append(_parse_meal(row))
        return grouped


def _parse_entry(
    row: dict[str, object], meals: list[MealEntryRecord]
) -> DiaryEntryRecord:
    return DiaryEntryRecord(
        id=UUID(str(row["id"])),
        client_id=UUID(str(row["client_id"])),
        day=parse_date(row["date"]),
        totals=MacroTotals(
            protein=float(row.get("total_protein") or 0.0),
            fat=float(row.get("total_fat") or 0.0),
            carbs=float(row.get("total_carbs") or 0.0),
            fiber=float(row.get("total_fiber") or 0.0),
        ),
        synced=bool(row.get("synced")),
        meals=meals,
    )


def _parse_meal(row: dict[str, object]) -> MealEntryRecord:
    return MealEntryRecord(
        id=UUID(str(row["id"])),
        diary_entry_id=UUID(str(row["diary_entry_id"])),
        name=str(row.get("name", "")),
        time=datetime.fromisoformat(str(row["time"])) if row.get("time") else None,
        protein=float(row.get("protein") or 0.0),
        fat=float(row.get("fat") or 0.0),
        carbs=float(row.get("carbs") or 0.0),
        fiber=float(row.get("fiber") or 0.0),
    )
