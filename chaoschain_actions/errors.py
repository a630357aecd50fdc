from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ErrorCode:
    code: str
    message: str


MALFORMED_COMMAND = ErrorCode("malformed_command", "malformed command data")
EXTRACTION_FAILED = ErrorCode("extraction_failed", "could not extract command data")
PROVIDER_FAILURE = ErrorCode("provider_failure", "ChaosChain request failed")


class ChaosChainError(Exception):
    """Base class for errors raised by this package."""

    code: ErrorCode = PROVIDER_FAILURE


class ExtractionError(ChaosChainError):
    """The generation service was unreachable, timed out, or failed."""

    code = EXTRACTION_FAILED


class ProviderError(ChaosChainError):
    """A ChaosChain API call failed. ``str(err)`` is the remote message verbatim."""

    code = PROVIDER_FAILURE

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UnknownActionError(ChaosChainError, LookupError):
    """Raised when an action name is not in the registry."""

    def __init__(self, name: str):
        super().__init__(f"Unknown action: {name}")
        self.name = name
