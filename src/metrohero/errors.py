"""Errors raised while talking to the MetroHero API."""

from typing import List, Optional


class MetroHeroError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(MetroHeroError):
    """Configuration is missing or invalid (e.g. no API key)."""


class ConnectivityError(MetroHeroError):
    """The request never produced an HTTP response."""


class APIError(MetroHeroError):
    """The MetroHero API answered with a non-success HTTP status."""

    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = status_code
        if message is None:
            message = "MetroHero API returned an unexpected response"
        super().__init__(f"{message} (HTTP {status_code})")


class InvalidRequestError(APIError):
    def __init__(self, message: str = "Request to MetroHero API was invalid"):
        super().__init__(400, message)


class InvalidStationError(InvalidRequestError):
    def __init__(self, station_code: str):
        self.station_code = station_code
        super().__init__(f"Station code '{station_code}' is not valid")


class InvalidItineraryError(InvalidRequestError):
    def __init__(self, origin_code: str, destination_code: str):
        self.origin_code = origin_code
        self.destination_code = destination_code
        super().__init__(
            f"No direct trip from {origin_code} to {destination_code}; "
            "trips that need a transfer must be split into segments"
        )


class InvalidTrainIdError(InvalidRequestError):
    def __init__(self, train_id: str):
        self.train_id = train_id
        super().__init__(f"Train ID '{train_id}' is not valid")


class AuthenticationError(APIError):
    def __init__(self):
        super().__init__(401, "Provided MetroHero API key is invalid")


class RateLimitedError(APIError):
    def __init__(self):
        super().__init__(503, "Too many requests, limit is: 10/s and 50k/24hr")


class ParseError(MetroHeroError, ValueError):
    """The response body did not have the expected shape."""


class StationResolutionError(MetroHeroError, ValueError):
    """A user-supplied station token could not be mapped to one station."""

    def __init__(self, token: str, message: str):
        self.token = token
        super().__init__(message)


class StationNotFoundError(StationResolutionError):
    def __init__(self, token: str, suggestions: Optional[List[str]] = None):
        self.suggestions = suggestions or []
        message = f"No station found matching '{token}'"
        if self.suggestions:
            message += f" (did you mean: {', '.join(self.suggestions)}?)"
        super().__init__(token, message)


class AmbiguousStationError(StationResolutionError):
    def __init__(self, token: str, candidates: List[str]):
        self.candidates = candidates
        super().__init__(
            token,
            f"Station name '{token}' is ambiguous; use one of the codes: "
            f"{', '.join(candidates)}",
        )
