"""Trainer dashboard endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request

from fitmetrics.api.dependencies import caller_id
from fitmetrics.api.schemas import GoalsRequest  # noqa: TC001
from fitmetrics.services.accounts import serialize_client
from fitmetrics.services.goals import serialize_goal

if TYPE_CHECKING:
    from fitmetrics.containers import AppContainer

router = APIRouter(prefix="/trainer", tags=["trainer"])


@router.get("/clients")
def list_clients(
    request: Request, user_id: UUID = Depends(caller_id)
) -> dict[str, object]:
    """Return compliance summaries for the trainer's clients."""
    container: AppContainer = request.app.state.container
    return {"clients": container.trainer_service.list_clients(user_id)}


@router.get("/clients/{client_id}")
def client_detail(
    request: Request, client_id: UUID, user_id: UUID = Depends(caller_id)
) -> dict[str, object]:
    """Return the full dashboard view of one client."""
    container: AppContainer = request.app.state.container
    return container.trainer_service.get_client_detail(user_id, client_id)


@router.put("/clients/{client_id}/goals")
def update_goals(
    request: Request,
    client_id: UUID,
    body: GoalsRequest,
    user_id: UUID = Depends(caller_id),
) -> dict[str, object]:
    """Set the client's nutrition goal starting today."""
    container: AppContainer = request.app.state.container
    goal = container.goal_service.update_goals(user_id, client_id, body.to_domain())
    return serialize_goal(goal)


@router.post("/clients/{client_id}/archive")
def archive_client(
    request: Request, client_id: UUID, user_id: UUID = Depends(caller_id)
) -> dict[str, object]:
    """Move a client to the trainer's archive."""
    container: AppContainer = request.app.state.container
    return serialize_client(container.trainer_service.archive(user_id, client_id))


@router.post("/clients/{client_id}/unarchive")
def unarchive_client(
    request: Request, client_id: UUID, user_id: UUID = Depends(caller_id)
) -> dict[str, object]:
    """Restore an archived client to the trainer."""
    container: AppContainer = request.app.state.container
    return serialize_client(container.trainer_service.unarchive(user_id, client_id))


@router.post("/surveys/{survey_id}/review")
def review_survey(
    request: Request, survey_id: UUID, user_id: UUID = Depends(caller_id)
) -> dict[str, str]:
    """Mark a client's survey as reviewed."""
    container: AppContainer = request.app.state.container
    container.trainer_service.mark_survey_reviewed(user_id, survey_id)
    return {"status": "ok"}


@router.get("/invites")
def list_invites(
    request: Request, user_id: UUID = Depends(caller_id)
) -> dict[str, object]:
    """Return the trainer's invite codes, newest first."""
    container: AppContainer = request.app.state.container
    return {"invites": container.invite_service.list_invites(user_id)}
