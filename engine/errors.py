"""Error taxonomy for allocation requests."""

from typing import Optional


class AllocationError(Exception):
    """Base class for every failure an allocation request can report."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_response(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class InvalidInputError(AllocationError):
    """Malformed request, missing or out-of-range field, duplicate id or negative budget."""


class UpstreamUnavailableError(AllocationError):
    """The language model call failed, timed out or returned an unusable response."""
