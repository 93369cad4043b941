"""Domain errors raised by services and mapped to HTTP responses by the error handler."""

from __future__ import annotations


class KingdomError(Exception):
    """Base class for classifiable domain failures."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(KingdomError):
    """A referenced player, event, alliance, user or feedback row does not exist."""

    status_code = 404


class ConflictError(KingdomError):
    """A uniqueness rule would be broken (duplicate link, taken username)."""

    status_code = 400


class ValidationError(KingdomError):
    """Input rejected before any store mutation."""

    status_code = 400


class ProvisioningError(KingdomError):
    """A tenant store could not be created or migrated."""

    status_code = 500
