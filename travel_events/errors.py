from __future__ import annotations


class TravelEventsError(Exception):
    """Base error; ``status_code`` is the HTTP status the API answers with."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(TravelEventsError):
    status_code = 400


class NotFound(TravelEventsError):
    status_code = 404


class UpstreamUnavailable(TravelEventsError):
    """A likes/reviews store or the event catalog could not be read."""

    status_code = 503
