"""
Execution contexts: run a Result-returning computation with side effects around it.

    ctx = LoggingExecutionContext(operation="CertdataGenerate")
    result = ctx.execute(lambda: run_pipeline(source, parser, generator, writer))
"""

from __future__ import annotations

import time
from typing import Callable, Protocol, TypeVar, runtime_checkable

import structlog

from railway.failure import ErrorCode
from railway.result import Result

T = TypeVar("T")


@runtime_checkable
class ExecutionContext(Protocol):
    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]: ...


class NoOpExecutionContext:
    """Runs the computation as-is."""

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]:
        return computation()


class LoggingExecutionContext:
    """
    Logs execution.started / execution.completed with the elapsed time.

    Layered over an inner context (NoOpExecutionContext by default). An
    exception escaping the computation is logged as execution.crashed and
    returned as a TECHNICAL_ERROR failure.
    """

    def __init__(
        self,
        inner: ExecutionContext | None = None,
        operation: str = "unknown",
    ) -> None:
        self._inner = inner or NoOpExecutionContext()
        self._operation = operation

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]:
        log = structlog.get_logger("railway.execution").bind(operation=self._operation)
        log.info("execution.started")
        started = time.monotonic()

        def elapsed() -> float:
            return round(time.monotonic() - started, 3)

        try:
            result = self._inner.execute(computation)
        except Exception as e:
            log.error("execution.crashed", elapsed_seconds=elapsed(), error=str(e))
            return Result.failure(ErrorCode.TECHNICAL_ERROR, f"Execution failed: {e}", e)

        log.info(
            "execution.completed",
            elapsed_seconds=elapsed(),
            state="SUCCESS" if result.is_success() else "FAILURE",
        )
        return result
