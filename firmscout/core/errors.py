"""
Domain errors raised by the firm search pipeline and the firm store.

Upstream HTTP failures live in firmscout.core.api_errors; these cover bad
input, unusable generation output and datastore failures.
"""

from typing import Optional


class InputValidationError(Exception):
    """A required request parameter is missing or invalid (HTTP 400)."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class MalformedGenerationOutput(Exception):
    """
    The generation service answered but its text holds no usable JSON.

    Kept apart from UpstreamServiceError so callers can tell "service
    reachable, result unusable" from "service unreachable".
    """

    def __init__(self, message: str, raw_text: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.raw_text = raw_text


class StoreError(Exception):
    """A datastore operation failed."""


class FirmNotFoundError(StoreError):
    """No firm row exists for the requested id."""

    def __init__(self, firm_id: int):
        super().__init__(f"Firm not found: {firm_id}")
        self.firm_id = firm_id
