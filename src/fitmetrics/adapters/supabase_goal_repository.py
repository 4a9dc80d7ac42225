"""Supabase repository for nutrition goals."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from postgrest.exceptions import APIError
from supabase import Client

from fitmetrics.adapters.supabase_account_repository import (
    parse_date,
    parse_optional_datetime,
)
from fitmetrics.adapters.supabase_errors import raise_translated
from fitmetrics.domain.goals import GoalTargets, NutritionGoal
from fitmetrics.services.goals import GoalRepository

GOAL_COLUMNS = (
    "id, client_id, trainer_id, daily_protein, daily_fat, daily_carbs, daily_fiber, "
    "start_date, end_date, created_at"
)


@dataclass
class SupabaseGoalRepository(GoalRepository):
    """Supabase implementation for goal intervals."""

    client: Client

    def list_goals(
        self,
        client_id: UUID,
        starts_on_or_before: date | None = None,
        open_after: date | None = None,
    ) -> list[NutritionGoal]:
        """Return goals ordered by start date, newest first."""
        query = (
            self.client.table("nutrition_goals")
            .select(GOAL_COLUMNS)
            .eq("client_id", str(client_id))
        )
        if starts_on_or_before is not None:
            query = query.lte("start_date", starts_on_or_before.isoformat())
        if open_after is not None:
            query = query.or_(
                f"end_date.is.null,end_date.gt.{open_after.isoformat()}"
            )
        response = query.order("start_date", desc=True).execute()
        return [parse_goal(row) for row in response.data or []]

    def set_goal(
        self,
        client_id: UUID,
        trainer_id: UUID,
        start_date: date,
        targets: GoalTargets,
    ) -> NutritionGoal:
        """Run the transactional ``set_nutrition_goal`` function."""
        try:
            response = self.client.rpc(
                "set_nutrition_goal",
                {
                    "p_client_id": str(client_id),
                    "p_trainer_id": str(trainer_id),
                    "p_start_date": start_date.isoformat(),
                    "p_protein": targets.protein,
                    "p_fat": targets.fat,
                    "p_carbs": targets.carbs,
                    "p_fiber": targets.fiber,
                },
            ).execute()
        except APIError as exc:
            raise_translated(exc)
        if not response.data:
            raise RuntimeError("Failed to set nutrition goal")
        return parse_goal(response.data[0])


def parse_goal(row: dict[str, object]) -> NutritionGoal:
    fiber = row.get("daily_fiber")
    return NutritionGoal(
        id=UUID(str(row["id"])),
        client_id=UUID(str(row["client_id"])),
        trainer_id=UUID(str(row["trainer_id"])),
        start_date=parse_date(row["start_date"]),
        end_date=parse_date(row["end_date"]) if row.get("end_date") else None,
        targets=GoalTargets(
            protein=float(row.get("daily_protein") or 0.0),
            fat=float(row.get("daily_fat") or 0.0),
            carbs=float(row.get("daily_carbs") or 0.0),
            fiber=float(fiber) if fiber is not None else None,
        ),
        created_at=parse_optional_datetime(row.get("created_at")),
    )
