"""
Relay error taxonomy.
Every error carries the HTTP status it is reported with.
"""

from typing import Optional


class RelayError(Exception):
    """Base class for errors surfaced to the client as {"error": message}."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequest(RelayError):
    status_code = 400


class PayloadTooLarge(RelayError):
    status_code = 413

    def __init__(self, message: str = "Image too large"):
        super().__init__(message)


class MissingCredential(RelayError):
    def __init__(self, message: str = "GEMINI_API_KEY is not configured on the server"):
        super().__init__(message)


class UpstreamTimeout(RelayError):
    def __init__(self, timeout: float):
        super().__init__(f"Gemini API request timed out after {timeout:g}s")
        self.timeout = timeout


class UpstreamError(RelayError):
    """Upstream answered with a non-success status."""

    def __init__(self, status: int, body: Optional[str]):
        super().__init__(f"Gemini API returned {status}: {body or ''}")
        self.status = status
        self.body = body
