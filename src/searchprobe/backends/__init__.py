"""Backend adapters package."""

from searchprobe.backends.base import BackendAdapter
from searchprobe.backends.http import ManticoreHttpAdapter
from searchprobe.backends.sql import SphinxSqlAdapter
from searchprobe.config import BackendConfig


def create_adapter(config: BackendConfig) -> BackendAdapter:
    """Build the adapter for the configured engine family."""
    if config.kind == "manticore":
        return ManticoreHttpAdapter(config)
    return SphinxSqlAdapter(config)


__all__ = [
    "BackendAdapter",
    "ManticoreHttpAdapter",
    "SphinxSqlAdapter",
    "create_adapter",
]
