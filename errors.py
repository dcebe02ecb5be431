"""Exception hierarchy for Auto Docker.

Only provider invocation and file write-back can fail in a user-visible way.
Detection and template fallback are total functions and never raise.
"""

from typing import Optional


class AutoDockerError(Exception):
    """Base class for all Auto Docker errors."""


class ConfigurationError(AutoDockerError):
    """No usable provider configuration (missing credential, bad provider/mode)."""

    def __init__(self, message: str, remediation: Optional[str] = None):
        super().__init__(message)
        self.remediation = remediation


class ProviderError(AutoDockerError):
    """The model call failed: network, auth, rate limit, or retries exhausted."""

    def __init__(self, message: str, provider: str = "unknown", attempts: int = 1):
        super().__init__(message)
        self.provider = provider
        self.attempts = attempts


class ParseError(AutoDockerError):
    """Raw model output lacks the expected structure.

    Internal and non-fatal: always absorbed by template fallback.
    """


class WriteError(AutoDockerError):
    """A single artifact file could not be written."""

    def __init__(self, file_name: str, cause: str):
        super().__init__(f"Failed to write {file_name}: {cause}")
        self.file_name = file_name
        self.cause = cause
