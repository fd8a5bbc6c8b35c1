"""Error types raised while producing a game step."""

from __future__ import annotations

from typing import Optional


class AkinatorError(Exception):
    """Base exception for all step failures."""


class ConfigurationError(AkinatorError):
    """Raised when a required setting such as the API key is missing."""


class InferenceError(AkinatorError):
    """Raised when the completion API cannot produce a usable reply."""


class UpstreamTransportError(InferenceError):
    """Raised when the completion call fails at the network or HTTP level."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ParseError(InferenceError):
    """Raised when no JSON action could be recovered, even after the repair call."""

    def __init__(self, message: str = "Parse error") -> None:
        super().__init__(message)


class ActionError(AkinatorError):
    """Raised when the model returns valid JSON that is not a usable action."""


class MissingFieldError(ActionError):
    pass


class InvalidTypeError(ActionError):
    pass
