"""
Railway-Oriented Programming (ROP) helpers.

Adapters turn exceptions into failures at their boundary; pipelines chain
stages with flat_map and stop at the first failure.

    from railway import Result, ErrorCode

    def require_begindata(lines: list[str]) -> Result[list[str]]:
        if "BEGINDATA" not in lines:
            return Result.failure(ErrorCode.VALIDATION_ERROR, "BEGINDATA line not found")
        return Result.success(lines)
"""

from railway.assertions import ResultAssertions
from railway.execution import ExecutionContext, LoggingExecutionContext, NoOpExecutionContext
from railway.failure import ErrorCode, FailureDescription
from railway.result import Failure, Result, Success

__all__ = [
    "ErrorCode",
    "ExecutionContext",
    "Failure",
    "FailureDescription",
    "LoggingExecutionContext",
    "NoOpExecutionContext",
    "Result",
    "ResultAssertions",
    "Success",
]

__version__ = "1.2.0"
