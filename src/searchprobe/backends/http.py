"""Manticore Search adapter over the HTTP JSON API."""

from typing import Any

import httpx
import structlog

from searchprobe.backends.base import BackendAdapter
from searchprobe.config import BackendConfig
from searchprobe.errors import TransportError
from searchprobe.execution.strategies import HTTP_STRATEGIES, QueryStrategy

logger = structlog.get_logger()


class ManticoreHttpAdapter(BackendAdapter):
    """
    Structured request/response adapter.

    Posts JSON query bodies to ``{base_url}/search``. Non-2xx responses are
    not transport faults: their body is handed back like any other payload.
    """

    def __init__(self, config: BackendConfig, client: httpx.Client | None = None):
        super().__init__(config)
        self._owns_client = client is None
        self._client = client or httpx.Client(
            headers={
                "Content-Type": "application/json",
                "User-Agent": "SearchProbe/0.1.0",
            }
        )

    def _url(self, path: str) -> str:
        return f"{self.config.base_url}{path}"

    def execute(self, query_body: dict, timeout_ms: int) -> Any:
        try:
            response = self._client.post(
                self._url("/search"),
                json=query_body,
                timeout=timeout_ms / 1000.0,
            )
        except httpx.TimeoutException as e:
            raise TransportError(
                "Backend request timed out",
                details={"backend": self.backend_id, "timeout_ms": timeout_ms},
            ) from e
        except httpx.TransportError as e:
            raise TransportError(
                f"Backend connection failed: {e}",
                details={"backend": self.backend_id},
            ) from e

        if response.status_code >= 400:
            logger.debug(
                "backend_error_status",
                backend=self.backend_id,
                status=response.status_code,
            )

        try:
            return response.json()
        except ValueError:
            return response.text

    def ping(self, timeout_ms: int = 5000):
        try:
            response = self._client.get(self._url("/"), timeout=timeout_ms / 1000.0)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"Backend health check returned HTTP {e.response.status_code}",
                details={"backend": self.backend_id},
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(
                f"Backend is not accessible: {e}",
                details={"backend": self.backend_id},
            ) from e

    def default_strategies(self) -> list[QueryStrategy]:
        return list(HTTP_STRATEGIES)

    def close(self):
        if self._owns_client:
            self._client.close()
