"""Client-facing sync endpoints for diary, measurements and surveys."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Query, Request

from fitmetrics.api.dependencies import caller_id
from fitmetrics.api.schemas import (  # noqa: TC001
    DiarySyncRequest,
    MeasurementSyncRequest,
    SurveySyncRequest,
)
from fitmetrics.domain.periods import parse_day
from fitmetrics.domain.surveys import survey_from_answers
from fitmetrics.services.measurements import serialize_measurement

if TYPE_CHECKING:
    from fitmetrics.containers import AppContainer
    from fitmetrics.domain.diary import DiaryEntryRecord
    from fitmetrics.domain.upserts import SyncResult

router = APIRouter(tags=["sync"])


@router.get("/diary")
def list_diary(
    request: Request,
    date_from: str | None = Query(default=None, alias="from"),
    date_to: str | None = Query(default=None, alias="to"),
    user_id: UUID = Depends(caller_id),
) -> dict[str, object]:
    """Return the caller's diary entries, newest first."""
    container: AppContainer = request.app.state.container
    entries = container.diary_service.list_entries(user_id, date_from, date_to)
    return {"entries": [_serialize_entry(entry) for entry in entries]}


@router.post("/diary/sync")
def sync_diary(
    request: Request,
    body: DiarySyncRequest,
    user_id: UUID = Depends(caller_id),
) -> dict[str, object]:
    """Replace the caller's diary day with the submitted meals."""
    container: AppContainer = request.app.state.container
    result = container.diary_service.sync(
        user_id, body.date, [meal.to_domain() for meal in body.meals]
    )
    return _sync_response(result)


@router.get("/measurements")
def list_measurements(
    request: Request,
    user_id: UUID = Depends(caller_id),
) -> dict[str, object]:
    """Return the caller's weekly measurements, newest first."""
    container: AppContainer = request.app.state.container
    measurements = container.measurement_service.list_entries(user_id)
    return {"measurements": [serialize_measurement(item) for item in measurements]}


@router.post("/measurements/sync")
def sync_measurement(
    request: Request,
    body: MeasurementSyncRequest,
    user_id: UUID = Depends(caller_id),
) -> dict[str, object]:
    """Create or replace the caller's measurement for the week of ``date``."""
    container: AppContainer = request.app.state.container
    day = parse_day(body.date)
    result = container.measurement_service.sync(user_id, body.to_domain(day))
    return _sync_response(result)


@router.get("/surveys")
def list_surveys(
    request: Request,
    user_id: UUID = Depends(caller_id),
) -> dict[str, object]:
    """Return the caller's surveys, newest first."""
    container: AppContainer = request.app.state.container
    return {"surveys": container.survey_service.list_entries(user_id)}


@router.post("/surveys/sync")
def sync_survey(
    request: Request,
    body: SurveySyncRequest,
    user_id: UUID = Depends(caller_id),
) -> dict[str, object]:
    """Create or replace the caller's survey for ``date``."""
    container: AppContainer = request.app.state.container
    day = parse_day(body.date)
    survey = survey_from_answers(day, body.model_dump(exclude={"date"}))
    result = container.survey_service.sync(user_id, survey)
    return _sync_response(result)


def _sync_response(result: SyncResult) -> dict[str, object]:
    return {"id": str(result.id), "created": result.created, "synced": result.synced}


def _serialize_entry(entry: DiaryEntryRecord) -> dict[str, object]:
    return {
        "id": str(entry.id),
        "date": entry.day.isoformat(),
        "protein": entry.totals.protein,
        "fat": entry.totals.fat,
        "carbs": entry.totals.carbs,
        "fiber": entry.totals.fiber,
        "synced": entry.synced,
        "meals": [
            {
                "id": str(meal.id),
                "name": meal.name,
                "time": meal.time.isoformat() if meal.time else None,
                "protein": meal.protein,
                "fat": meal.fat,
                "carbs": meal.carbs,
                "fiber": meal.fiber,
            }
            for meal in entry.meals
        ],
    }
