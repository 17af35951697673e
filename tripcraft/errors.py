"""Domain errors raised by the itinerary engine and services."""


class TripcraftError(Exception):
    """Base class for all domain errors."""


class InvalidInputError(TripcraftError):
    """Rejected input (bad day number, deleting the primary version, ...).

    Never retryable: the caller must change the request.
    """


class NotFoundError(TripcraftError):
    """Unknown trip, version, segment or variant."""

    def __init__(self, resource: str, resource_id: str) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found: {resource_id}")


class AccessDeniedError(TripcraftError):
    """Missing or invalid share token for a client-facing action."""

    def __init__(self, message: str = "Access denied", *, requires_token: bool = True) -> None:
        self.requires_token = requires_token
        super().__init__(message)
