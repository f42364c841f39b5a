from pathlib import Path

from prometheus_client import REGISTRY, Counter, Histogram, write_to_textfile

# Backend Metrics
BACKEND_CALLS = Counter(
    "searchprobe_backend_calls_total",
    "Total number of backend calls issued by the executor",
    ["backend", "strategy", "outcome"]
)

EXECUTION_RETRIES = Counter(
    "searchprobe_execution_retries_total",
    "Total number of retry rounds after every strategy failed",
    ["backend"]
)

# Query Metrics
QUERY_LATENCY = Histogram(
    "searchprobe_query_latency_seconds",
    "Executor wall-clock time per query, retries included",
    ["backend"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0]
)

QUERY_OUTCOMES = Counter(
    "searchprobe_query_outcomes_total",
    "Total number of scored queries",
    ["quality", "success"]
)


def write_metrics(path: Path):
    """Write the registry to a node-exporter style text file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    write_to_textfile(str(path), REGISTRY)
