"""
Result monad — the core of Railway-Oriented Programming.

A Result[T] is either Success(value: T) or Failure(error: FailureDescription).
Stages return Result instead of raising; failures travel down the failure
track and every later .map()/.flat_map() is skipped.

    ┌──────────┐  flat_map   ┌──────────┐  flat_map   ┌──────────┐
    │  source  │──Success────│  parse   │──Success────│  render  │──→ Result[T]
    └────┬─────┘             └────┬─────┘             └────┬─────┘
         │ Failure                │ Failure                │ Failure
         └────────────────────────┴────────────────────────┴──→ Result[T]

Each track implements the operators itself: Success applies the function,
Failure returns itself untouched. Both support structural pattern matching:

    match parser.parse(stream):
        case Success(certs): ...
        case Failure(error): ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, NoReturn, Optional, TypeVar

from railway.failure import ErrorCode, FailureDescription

T = TypeVar("T")
U = TypeVar("U")
R = TypeVar("R")


class Result(Generic[T]):
    """
    Railway-Oriented Programming Result monad.

        >>> Result.success(21).map(lambda x: x * 2).value()
        42
        >>> Result.failure(ErrorCode.VALIDATION_ERROR, "bad input").map(str).is_failure()
        True
    """

    __slots__ = ()

    def is_success(self) -> bool:
        return isinstance(self, Success)

    def is_failure(self) -> bool:
        return isinstance(self, Failure)

    # ─────────── track-specific operators (see Success / Failure) ───────────

    def value(self) -> T:
        """Extract the success value. Raises ValueError on a Failure."""
        raise NotImplementedError

    def error(self) -> FailureDescription:
        """Extract the failure description. Raises ValueError on a Success."""
        raise NotImplementedError

    def either(
        self,
        on_success: Callable[[T], R],
        on_failure: Callable[[FailureDescription], R],
    ) -> R:
        """Fold both tracks into one value."""
        raise NotImplementedError

    def map(self, mapper: Callable[[T], U]) -> Result[U]:
        """Transform the success value."""
        raise NotImplementedError

    def map_failure(self, mapper: Callable[[FailureDescription], FailureDescription]) -> Result[T]:
        """Transform the failure description, e.g. to reclassify an error code."""
        raise NotImplementedError

    def flat_map(self, mapper: Callable[[T], Result[U]]) -> Result[U]:
        """
        Chain a Result-returning stage.

            source.open().flat_map(parser.parse).flat_map(generator.render)
        """
        raise NotImplementedError

    def peek(self, action: Callable[[T], Any]) -> Result[T]:
        """Run a side effect (logging) on the success value."""
        return self

    def peek_failure(self, action: Callable[[FailureDescription], Any]) -> Result[T]:
        """Run a side effect on the failure description."""
        return self

    def get_or_else(self, default: T) -> T:
        raise NotImplementedError

    # ─────────── factories ───────────

    @staticmethod
    def success(value: T) -> Result[T]:
        return Success(value)

    @staticmethod
    def failure_from(error: FailureDescription) -> Result[T]:
        return Failure(error)

    @staticmethod
    def failure(
        code: ErrorCode,
        message: str,
        exception: Optional[BaseException] = None,
    ) -> Result[T]:
        """
        Create a failed Result.

            Result.failure(ErrorCode.TECHNICAL_ERROR, "Cannot open certdata.txt", exc)
        """
        return Failure(FailureDescription(code=code, message=message, exception=exception))

    @staticmethod
    def from_computation(
        computation: Callable[[], T],
        error_code: ErrorCode,
        error_message: str,
    ) -> Result[T]:
        """
        Run a computation that may raise and capture the outcome as a Result.

        This is the adapter-boundary helper: exceptions stop here and become
        failures carrying the original exception. A computation returning
        None is a failure too, since Success never holds None.

            return Result.from_computation(
                lambda: path.open("rb"),
                ErrorCode.TECHNICAL_ERROR,
                "Failed to open certdata source",
            )
        """
        try:
            return Success(computation())
        except Exception as e:
            return Result.failure(error_code, error_message, e)


@dataclass(frozen=True, slots=True, repr=False)
class Success(Result[T]):
    """The success track — wraps a value of type T (never None)."""

    _value: T

    def __post_init__(self) -> None:
        if self._value is None:
            raise TypeError("Success value must not be None")

    def value(self) -> T:
        return self._value

    def error(self) -> NoReturn:
        raise ValueError(f"Cannot get error from a Success: {self._value!r}")

    def either(
        self,
        on_success: Callable[[T], R],
        on_failure: Callable[[FailureDescription], R],
    ) -> R:
        return on_success(self._value)

    def map(self, mapper: Callable[[T], U]) -> Result[U]:
        return Success(mapper(self._value))

    def map_failure(self, mapper: Callable[[FailureDescription], FailureDescription]) -> Result[T]:
        return self

    def flat_map(self, mapper: Callable[[T], Result[U]]) -> Result[U]:
        return mapper(self._value)

    def peek(self, action: Callable[[T], Any]) -> Result[T]:
        action(self._value)
        return self

    def get_or_else(self, default: T) -> T:
        return self._value

    def __bool__(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Success({self._value!r})"


@dataclass(frozen=True, slots=True, repr=False, eq=False)
class Failure(Result[T]):
    """
    The failure track — wraps a FailureDescription.

    Two failures are equal when code and message match; the causing
    exception and timestamp are ignored.
    """

    _error: FailureDescription

    def __post_init__(self) -> None:
        if self._error is None:
            raise TypeError("Failure error must not be None")

    def value(self) -> NoReturn:
        raise ValueError(f"Cannot get value from a Failure: {self._error.message}")

    def error(self) -> FailureDescription:
        return self._error

    def either(
        self,
        on_success: Callable[[T], R],
        on_failure: Callable[[FailureDescription], R],
    ) -> R:
        return on_failure(self._error)

    def map(self, mapper: Callable[[T], U]) -> Result[U]:
        return Failure(self._error)

    def map_failure(self, mapper: Callable[[FailureDescription], FailureDescription]) -> Result[T]:
        return Failure(mapper(self._error))

    def flat_map(self, mapper: Callable[[T], Result[U]]) -> Result[U]:
        return Failure(self._error)

    def peek_failure(self, action: Callable[[FailureDescription], Any]) -> Result[T]:
        action(self._error)
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def _key(self) -> tuple[ErrorCode, str]:
        return self._error.code, self._error.message

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Failure):
            return self._key() == other._key()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(("Failure", *self._key()))

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Failure({self._error.code.value}: {self._error.message!r})"
