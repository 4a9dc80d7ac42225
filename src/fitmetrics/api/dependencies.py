"""Gateway token and caller identity dependencies."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from fitmetrics.containers import AppContainer


def _get_service_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.service_token


async def require_service_token(
    x_service_token: str | None = Header(default=None),
    service_token: str = Depends(_get_service_token),
) -> None:
    """Ensure requests come through the authenticating gateway."""
    if not x_service_token or x_service_token != service_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


async def caller_id(
    x_user_id: str | None = Header(default=None),
    _: None = Depends(require_service_token),
) -> UUID:
    """Return the authenticated user id forwarded by the gateway."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    try:
        return UUID(x_user_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED) from exc
