"""Invite issuing and redemption endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request, status

from fitmetrics.api.dependencies import caller_id, require_service_token
from fitmetrics.api.schemas import (  # noqa: TC001
    ChangeTrainerRequest,
    InviteCreateRequest,
    RegisterClientRequest,
)
from fitmetrics.services.accounts import serialize_client
from fitmetrics.services.invites import serialize_invite

if TYPE_CHECKING:
    from fitmetrics.containers import AppContainer

router = APIRouter(tags=["invites"])


@router.post("/invites", status_code=status.HTTP_201_CREATED)
def create_invite(
    request: Request,
    body: InviteCreateRequest,
    user_id: UUID = Depends(caller_id),
) -> dict[str, object]:
    """Issue a new invite code for the calling trainer."""
    container: AppContainer = request.app.state.container
    invite_service = container.invite_service
    invite = invite_service.create_invite(user_id, body.client_name)
    return serialize_invite(invite, invite_service.clock())


@router.post("/invites/{invite_id}/deactivate")
def deactivate_invite(
    request: Request,
    invite_id: UUID,
    user_id: UUID = Depends(caller_id),
) -> dict[str, object]:
    """Expire one of the calling trainer's unused invites."""
    container: AppContainer = request.app.state.container
    invite_service = container.invite_service
    invite = invite_service.deactivate_invite(user_id, invite_id)
    return serialize_invite(invite, invite_service.clock())


@router.post(
    "/auth/register-client",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_service_token)],
)
def register_client(
    request: Request, body: RegisterClientRequest
) -> dict[str, object]:
    """Create a client account bound to the trainer who issued the code."""
    container: AppContainer = request.app.state.container
    client = container.invite_service.register_client(
        body.to_domain(), body.invite_code
    )
    return serialize_client(client)


@router.post("/users/me/change-trainer")
def change_trainer(
    request: Request,
    body: ChangeTrainerRequest,
    user_id: UUID = Depends(caller_id),
) -> dict[str, object]:
    """Move the caller to the trainer owning the invite code."""
    container: AppContainer = request.app.state.container
    client = container.invite_service.change_trainer(user_id, body.invite_code)
    return serialize_client(client)
