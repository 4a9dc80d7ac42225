"""Typed failures raised by the core services.

Every failure carries the HTTP-equivalent status the request layer should
report. ``InvalidInput`` is always raised before storage is touched;
``Conflict`` failures are raised from inside a transaction that has already
been rolled back.
"""

from collections.abc import Mapping


class FitmetricsError(Exception):
    """Base class for expected, client-visible failures."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, object]:
        """Return the stable ``{status, message}`` error shape."""
        return {"status": "error", "message": self.message}


class InvalidInput(FitmetricsError):
    """Malformed date, non-numeric or negative field, unmapped enum value."""

    status_code = 400

    def __init__(
        self, message: str, errors: Mapping[str, str] | None = None
    ) -> None:
        super().__init__(message)
        self.errors = dict(errors or {})

    @classmethod
    def for_field(cls, field: str, message: str) -> "InvalidInput":
        return cls(message, {field: message})

    def to_payload(self) -> dict[str, object]:
        payload = super().to_payload()
        if self.errors:
            payload["errors"] = self.errors
        return payload


class NotFound(FitmetricsError):
    """Owner, trainer or entity does not exist or is not visible to the caller."""

    status_code = 404


class Conflict(FitmetricsError):
    """State changed under the caller; the transaction was rolled back."""

    status_code = 400


class InviteNotActive(Conflict):
    """Invite code is unknown, already used, expired or deactivated."""

    def __init__(self, message: str = "Invite code is not active") -> None:
        super().__init__(message)


class AlreadyExists(FitmetricsError):
    """Duplicate registration, detected before any row is written."""

    status_code = 400
