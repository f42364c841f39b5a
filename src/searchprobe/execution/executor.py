"""Query executor driving a backend through strategies with fixed-delay retries."""

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Union

import structlog

from searchprobe.config import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY_SECONDS
from searchprobe.errors import MalformedResponseError, SearchProbeError, TransportError
from searchprobe.execution.strategies import QueryStrategy
from searchprobe.normalization.shapes import UnrecognizedPayload, decode_payload
from searchprobe.observability import BACKEND_CALLS, EXECUTION_RETRIES

if TYPE_CHECKING:
    from searchprobe.backends.base import BackendAdapter

logger = structlog.get_logger()


@dataclass(frozen=True)
class TryingStrategy:
    """About to issue strategy ``index`` within retry round ``attempt``."""

    index: int
    attempt: int


@dataclass(frozen=True)
class Retrying:
    """Every strategy of round ``attempt`` failed."""

    attempt: int


@dataclass(frozen=True)
class Succeeded:
    payload: Any
    strategy: str
    attempt: int


@dataclass(frozen=True)
class Failed:
    reason: str
    error_type: type[SearchProbeError]
    attempts: int

    def error(self) -> SearchProbeError:
        return self.error_type(self.reason, details={"attempts": self.attempts})


ExecutionState = Union[TryingStrategy, Retrying, Succeeded, Failed]
ExecutionOutcome = Union[Succeeded, Failed]


@dataclass(frozen=True)
class StrategyFault:
    attempt: int
    strategy: str
    transport: bool
    message: str


class QueryExecutor:
    """
    Issue one query against a backend until some strategy yields a payload
    with a recognizable shape.

    Each retry round walks the strategies in order and stops at the first
    recognized payload. A round in which every strategy fails is followed by
    a fixed sleep, up to ``max_retries`` rounds. Transitions are explicit:

        TryingStrategy(i, a) -> Succeeded | TryingStrategy(i+1, a) | Retrying(a)
        Retrying(a)          -> TryingStrategy(0, a+1) | Failed
    """

    def __init__(
        self,
        adapter: "BackendAdapter",
        limit: int = 10,
        timeout_ms: int = 30_000,
        strategies: list[QueryStrategy] | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.adapter = adapter
        self.limit = limit
        self.timeout_ms = timeout_ms
        self.strategies = list(strategies) if strategies is not None else adapter.default_strategies()
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._sleep = sleep

        if not self.strategies:
            raise ValueError("at least one query strategy is required")
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")

    def execute(self, text: str) -> ExecutionOutcome:
        """Run the state machine for one query text until it terminates."""
        state: ExecutionState = TryingStrategy(index=0, attempt=1)
        faults: list[StrategyFault] = []

        while not isinstance(state, (Succeeded, Failed)):
            state = self.transition(state, text, faults)

        return state

    def transition(
        self,
        state: ExecutionState,
        text: str,
        faults: list[StrategyFault],
    ) -> ExecutionState:
        """Compute the next state; faults observed so far are appended to ``faults``."""
        if isinstance(state, TryingStrategy):
            return self._try_strategy(state, text, faults)
        if isinstance(state, Retrying):
            return self._retry(state, faults)
        raise ValueError(f"{type(state).__name__} is terminal")

    def _next_after_fault(self, state: TryingStrategy) -> ExecutionState:
        if state.index + 1 < len(self.strategies):
            return TryingStrategy(index=state.index + 1, attempt=state.attempt)
        return Retrying(attempt=state.attempt)

    def _try_strategy(
        self,
        state: TryingStrategy,
        text: str,
        faults: list[StrategyFault],
    ) -> ExecutionState:
        strategy = self.strategies[state.index]
        body = strategy.body(text, self.limit, self.adapter.config.index_name)
        backend = self.adapter.backend_id

        try:
            payload = self.adapter.execute(body, self.timeout_ms)
        except TransportError as e:
            BACKEND_CALLS.labels(backend=backend, strategy=strategy.name, outcome="transport_error").inc()
            faults.append(StrategyFault(state.attempt, strategy.name, True, str(e)))
            logger.debug(
                "strategy_transport_error",
                strategy=strategy.name,
                attempt=state.attempt,
                error=str(e),
            )
            return self._next_after_fault(state)

        shape = decode_payload(payload)
        if isinstance(shape, UnrecognizedPayload):
            BACKEND_CALLS.labels(backend=backend, strategy=strategy.name, outcome="malformed").inc()
            faults.append(StrategyFault(state.attempt, strategy.name, False, shape.reason))
            logger.debug(
                "strategy_unrecognized_payload",
                strategy=strategy.name,
                attempt=state.attempt,
                reason=shape.reason,
            )
            return self._next_after_fault(state)

        BACKEND_CALLS.labels(backend=backend, strategy=strategy.name, outcome="success").inc()
        return Succeeded(payload=payload, strategy=strategy.name, attempt=state.attempt)

    def _retry(self, state: Retrying, faults: list[StrategyFault]) -> ExecutionState:
        if state.attempt >= self.max_retries:
            return self._failed(faults)

        EXECUTION_RETRIES.labels(backend=self.adapter.backend_id).inc()
        logger.warning(
            "search_attempt_failed",
            attempt=state.attempt,
            max_retries=self.max_retries,
            retry_in=f"{self.retry_delay}s",
        )
        self._sleep(self.retry_delay)
        return TryingStrategy(index=0, attempt=state.attempt + 1)

    def _failed(self, faults: list[StrategyFault]) -> Failed:
        transport_only = all(f.transport for f in faults)
        error_type = TransportError if transport_only else MalformedResponseError

        last = faults[-1] if faults else None
        reason = f"All search attempts failed after {self.max_retries} retries"
        if last is not None:
            kind = "transport error" if last.transport else "unrecognized response"
            reason = f"{reason}; last {kind} from '{last.strategy}': {last.message}"

        return Failed(reason=reason, error_type=error_type, attempts=self.max_retries)
