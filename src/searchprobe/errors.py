"""Exception hierarchy for the search-quality harness.

Per-query faults (transport, malformed payloads) are captured into that
query's result and never abort a run. Configuration faults are fatal and are
raised before the first query executes.
"""

from typing import Any


class SearchProbeError(Exception):
    """Base exception carrying a message and optional debugging context."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({context})"


class TransportError(SearchProbeError):
    """Connection refused, reset or timed out while talking to the backend."""


class MalformedResponseError(SearchProbeError):
    """Backend payload matched none of the known response shapes."""


class ConfigurationError(SearchProbeError):
    """Missing connection details or unreachable backend before a run."""


class ArtifactError(SearchProbeError):
    """Base class for run artifact lookup and decoding failures."""


class ArtifactNotFoundError(ArtifactError):
    """No run artifact exists at the requested location."""


class ArtifactFormatError(ArtifactError):
    """A run artifact exists but cannot be decoded."""
