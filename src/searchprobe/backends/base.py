"""Abstract backend adapter interface for search engines."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from searchprobe.config import BackendConfig

if TYPE_CHECKING:
    from searchprobe.execution.strategies import QueryStrategy


class BackendAdapter(ABC):
    """
    Transport to one search engine family.

    Adapters only move query bodies and raw payloads; interpreting the
    payload belongs to the normalizer.
    """

    def __init__(self, config: BackendConfig):
        self.config = config

    @property
    def backend_id(self) -> str:
        return self.config.backend_id

    @abstractmethod
    def execute(self, query_body: dict, timeout_ms: int) -> Any:
        """
        Send one query body to the backend.

        Returns the raw payload. Raises TransportError on connection or
        timeout faults.
        """
        pass

    @abstractmethod
    def ping(self, timeout_ms: int = 5000):
        """Check that the backend is reachable. Raises TransportError."""
        pass

    @abstractmethod
    def default_strategies(self) -> list["QueryStrategy"]:
        """Return the query formulations suited to this engine, most specific first."""
        pass

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
