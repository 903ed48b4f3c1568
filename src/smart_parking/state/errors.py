"""Domain errors raised by the slot registry and booking ledger.

Each error carries the HTTP status it maps to, so the API layer can translate
any of them into a response envelope without knowing the concrete type.
"""


class ParkingError(Exception):
    """Base class for expected, client-facing failures."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ParkingError):
    """Referenced slot or booking does not exist."""

    status_code = 404


class UnauthorizedError(ParkingError):
    """No authenticated identity on the request."""

    status_code = 401


class ForbiddenError(ParkingError):
    """Caller is authenticated but neither owner nor admin."""

    status_code = 403


class InvalidInputError(ParkingError):
    status_code = 400


class InvalidStateError(ParkingError):
    """Transition attempted from a state that does not allow it."""

    status_code = 400


class SlotUnavailableError(InvalidStateError):
    """Slot exists but is not empty."""


class DuplicateKeyError(InvalidInputError):
    """A unique field (slot number) is already taken."""
