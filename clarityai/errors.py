"""Exceptions raised by the gateway, parser and explorer client.

Route handlers are the only place these are caught and turned into HTTP
responses.
"""

from typing import Optional


class ClarityAIError(Exception):
    """Base class for all service errors."""


class InputValidationError(ClarityAIError):
    """A required request field is missing or malformed (HTTP 400)."""

    def __init__(self, message: str, route: Optional[str] = None) -> None:
        super().__init__(message)
        self.route = route


class GatewayError(ClarityAIError):
    """The chat-completion call could not produce a result."""


class ConfigurationError(GatewayError):
    """Provider credentials are missing; raised before any network attempt."""


class TransportError(GatewayError):
    """Network failure, timeout, non-2xx status or malformed provider body."""

    def __init__(self, message: str, status_code: Optional[int] = None, attempt: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.attempt = attempt


class ParseError(ClarityAIError):
    """Provider text did not contain extractable JSON."""


class UpstreamDataError(ClarityAIError):
    """The blockchain explorer returned no usable data."""
