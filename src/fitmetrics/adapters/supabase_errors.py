"""Translation of PostgREST errors into domain failures."""

from typing import NoReturn

from postgrest.exceptions import APIError

from fitmetrics.errors import AlreadyExists, FitmetricsError, InviteNotActive

UNIQUE_VIOLATION = "23505"
INVITE_NOT_ACTIVE = "invite_not_active"


def translate_api_error(exc: APIError) -> Exception:
    """Return the domain error for a failed PostgREST call, or ``exc`` itself."""
    if exc.message and INVITE_NOT_ACTIVE in exc.message:
        return InviteNotActive()
    if exc.code == UNIQUE_VIOLATION:
        return AlreadyExists("Record already exists")
    return exc


def raise_translated(exc: APIError) -> NoReturn:
    """Raise the domain error for ``exc``, or re-raise ``exc`` unchanged."""
    translated = translate_api_error(exc)
    if isinstance(translated, FitmetricsError):
        raise translated from exc
    raise exc
