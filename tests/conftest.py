"""
Pytest configuration and fixtures for the harness tests.
"""

from typing import Any

import pytest
import structlog

from searchprobe.backends.base import BackendAdapter
from searchprobe.cli import configure_logging
from searchprobe.config import BackendConfig
from searchprobe.errors import TransportError
from searchprobe.execution.strategies import HTTP_STRATEGIES
from searchprobe.models import Query, QueryResult, Run, RunConfig


class FakeAdapter(BackendAdapter):
    """Adapter replaying scripted payloads or errors, one per execute call."""

    def __init__(self, responses: list[Any], reachable: bool = True):
        super().__init__(BackendConfig(kind="manticore", base_url="http://fake:9308"))
        self.responses = list(responses)
        self.reachable = reachable
        self.calls: list[dict] = []

    def execute(self, query_body: dict, timeout_ms: int) -> Any:
        self.calls.append(query_body)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def ping(self, timeout_ms: int = 5000):
        if not self.reachable:
            raise TransportError("connection refused")

    def default_strategies(self):
        return list(HTTP_STRATEGIES)


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Bind structlog to this test's stderr, as the CLI does, instead of a previous test's closed stream."""
    configure_logging()
    yield
    structlog.reset_defaults()


@pytest.fixture
def no_sleep():
    """Delays list whose ``append`` stands in for ``time.sleep``."""
    return []


@pytest.fixture
def manticore_payload() -> dict:
    """Manticore /search response with a nested hit list."""
    return {
        "took": 4,
        "timed_out": False,
        "hits": {
            "total": 3,
            "total_relation": "eq",
            "hits": [
                {
                    "_id": "101",
                    "_score": 0.61,
                    "_source": {
                        "title": "Настройка домена",
                        "url": "https://example.com/docs/domain_setup.html",
                        "content": "Как подключить собственный домен и FTP доступ.",
                    },
                },
                {
                    "_id": "102",
                    "_score": 0.42,
                    "_source": {"title": "", "url": "", "content": ""},
                },
                {"_id": "103", "_score": 0.1, "_source": {"title": "Тарифы"}},
            ],
        },
    }


def make_result(
    text: str,
    success: bool = True,
    relevance: int = 70,
    quality: str = "good",
    response_time: float = 100.0,
    total_results: int = 1,
    error: str = "",
) -> QueryResult:
    return QueryResult(
        query=Query(text=text),
        response_time_ms=response_time,
        search_time_ms=response_time,
        total_results=total_results if success else 0,
        top_score=0.4 if success else 0.0,
        quality=quality if success else "poor",
        relevance_score=relevance if success else 0,
        success=success,
        error=error,
    )


@pytest.fixture
def sample_run() -> Run:
    """Run with three successful queries and one failure."""
    run = Run(config=RunConfig(limit=10, timeout_ms=30_000, backend_id="manticore-http:test"))
    run.append(make_result("first query", relevance=70, quality="good", response_time=120.0, total_results=2))
    run.append(make_result("second query", relevance=90, quality="excellent", response_time=80.0, total_results=5))
    run.append(make_result("third query", success=False, response_time=6000.0, error="All search attempts failed"))
    run.append(make_result("fourth query", relevance=90, quality="excellent", response_time=100.0, total_results=3))
    return run
