"""Error types raised by the event service and their HTTP status codes.

Routes never build error responses themselves. The service raises one of
these and the handlers registered in ``app.main`` render it as
``{"detail": message}`` with the matching status.
"""


class EventServiceError(Exception):
    """Base class for failures a caller can act on."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthenticated(EventServiceError):
    """Missing, malformed, or unverifiable credential."""

    status_code = 401


class InvalidInput(EventServiceError):
    """Malformed id, missing required field, or a request with nothing to do.

    Also used for join/cancel requests that would not change the attendee
    set, e.g. joining an event twice.
    """

    status_code = 400


class NotFound(EventServiceError):
    """No event matches the given id."""

    status_code = 404
