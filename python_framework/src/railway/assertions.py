"""
Test assertions for Result values.

    certs = ResultAssertions.assert_success(parser.parse(stream))
    error = ResultAssertions.assert_failure(result, ErrorCode.VALIDATION_ERROR)
    ResultAssertions.assert_failure_caused_by(result, MissingBeginDataError)
"""

from __future__ import annotations

from typing import TypeVar

from railway.failure import ErrorCode, FailureDescription
from railway.result import Result

T = TypeVar("T")
E = TypeVar("E", bound=BaseException)


def _describe(result: Result[T]) -> str:
    return result.either(
        lambda value: f"Success({value!r})",
        lambda error: f"Failure({error.code.value}: {error.message!r})",
    )


def _suffix(message: str) -> str:
    return f" — {message}" if message else ""


class ResultAssertions:
    """Expressive test assertions for Result values."""

    @staticmethod
    def assert_success(result: Result[T], message: str = "") -> T:
        """Assert the Result is a Success and return the value."""
        if not result.is_success():
            raise AssertionError(
                f"Expected Success but got {_describe(result)}{_suffix(message)}"
            )
        return result.value()

    @staticmethod
    def assert_failure(
        result: Result[T],
        expected_code: ErrorCode | None = None,
        message: str = "",
    ) -> FailureDescription:
        """Assert the Result is a Failure, optionally with a given code, and return it."""
        if not result.is_failure():
            raise AssertionError(
                f"Expected Failure but got {_describe(result)}{_suffix(message)}"
            )
        error = result.error()
        if expected_code is not None and error.code != expected_code:
            raise AssertionError(
                f"Expected error code {expected_code.value} "
                f"but got {error.code.value}: {error.message!r}{_suffix(message)}"
            )
        return error

    @staticmethod
    def assert_failure_message_contains(result: Result[T], substring: str) -> None:
        """Assert that the failure message contains the substring (case-insensitive)."""
        error = ResultAssertions.assert_failure(result)
        if substring.lower() not in error.message.lower():
            raise AssertionError(
                f"Expected failure message to contain {substring!r} "
                f"but message was: {error.message!r}"
            )

    @staticmethod
    def assert_failure_caused_by(result: Result[T], exception_type: type[E]) -> E:
        """Assert the Failure was caused by an exception of the given type and return it."""
        error = ResultAssertions.assert_failure(result)
        if not isinstance(error.exception, exception_type):
            raise AssertionError(
                f"Expected failure caused by {exception_type.__name__} "
                f"but cause was {error.exception!r}"
            )
        return error.exception
