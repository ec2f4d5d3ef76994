# backend/tandemboard/services/errors.py
"""
Error hierarchy for the board services.

Routers never build HTTP errors for these themselves: the handlers
registered in main map each class to a status code and a user-facing
message (shown by the UI as an error notification).

Packing infeasibility is not an error and has no class here.
"""


class BoardError(Exception):
    """Base exception for board service errors."""

    status_code = 500
    user_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.user_message)


class PersistenceError(BoardError):
    """A store write failed. Nothing was applied locally."""

    status_code = 503
    user_message = "Failed to save changes. Please try again."


class FetchError(BoardError):
    """The store or cache could not be read; the affected view shows an error state."""

    status_code = 503
    user_message = "Failed to load data. Please try again."


class SnapshotMappingError(FetchError):
    """A store row did not match the expected shape."""


class BookingNotFoundError(BoardError):
    status_code = 404
    user_message = "Booking not found."


class PilotNotFoundError(BoardError):
    status_code = 404
    user_message = "Pilot not found."


class NotAPilotError(BoardError):
    """Only pilots edit availability."""

    status_code = 403
    user_message = "Only pilots can edit availability."


class UnknownReferenceError(BoardError):
    """A booking names a pilot or tag that does not exist."""

    status_code = 422
    user_message = "Referenced pilot or tag does not exist."
