"""
Result<T> pattern for backend call outcomes.

Every gateway call ends in exactly one of three states:

- SUCCESS: the backend answered 2xx with a decodable body
- EMPTY: the backend answered 2xx with no content (e.g. 204 on delete)
- FAILURE: transport error, non-2xx response, or undecodable body

Keeping EMPTY separate from FAILURE means callers never have to guess
whether a missing value means "nothing to return" or "it did not happen".
"""

from dataclasses import dataclass
from typing import Optional, Generic, TypeVar, Callable
from enum import Enum


T = TypeVar('T')
U = TypeVar('U')


class ResultStatus(Enum):
    """Status of a Result."""
    SUCCESS = "success"
    EMPTY = "empty"
    FAILURE = "failure"


@dataclass
class Result(Generic[T]):
    """
    Tagged result wrapper: ``Ok(value) | Empty | Err(detail)``.

    Attributes:
        status: Result status (SUCCESS, EMPTY or FAILURE)
        value: The decoded value if successful (None otherwise)
        error: The exception that caused failure (None unless FAILURE)
        message: Optional message describing the result

    Examples:
        >>> result = Result.success([{"grade_id": 1, "grade_name": "G1"}])
        >>> if result.is_success:
        ...     print(len(result.value))

        >>> deleted = Result.empty("Deleted")
        >>> deleted.is_ok  # True: the operation happened
        True

        >>> failed = Result.failure("Not Found")
        >>> failed.is_ok
        False
    """

    status: ResultStatus
    value: Optional[T] = None
    error: Optional[Exception] = None
    message: Optional[str] = None

    @property
    def is_success(self) -> bool:
        """Check if the result carries a value."""
        return self.status == ResultStatus.SUCCESS

    @property
    def is_empty(self) -> bool:
        """Check if the operation succeeded without content."""
        return self.status == ResultStatus.EMPTY

    @property
    def is_failure(self) -> bool:
        """Check if the result represents failure."""
        return self.status == ResultStatus.FAILURE

    @property
    def is_ok(self) -> bool:
        """Check if the operation happened (SUCCESS or EMPTY)."""
        return self.status != ResultStatus.FAILURE

    @classmethod
    def success(cls, value: T, message: Optional[str] = None) -> 'Result[T]':
        """
        Create a successful result.

        Args:
            value: The result value
            message: Optional success message

        Returns:
            Result instance with SUCCESS status
        """
        return cls(
            status=ResultStatus.SUCCESS,
            value=value,
            message=message
        )

    @classmethod
    def empty(cls, message: Optional[str] = None) -> 'Result[T]':
        """
        Create a successful result with no content.

        Args:
            message: Optional message

        Returns:
            Result instance with EMPTY status
        """
        return cls(status=ResultStatus.EMPTY, message=message)

    @classmethod
    def failure(
        cls,
        message: str,
        error: Optional[Exception] = None
    ) -> 'Result[T]':
        """
        Create a failure result.

        Args:
            message: Error message describing the failure
            error: Optional exception that caused the failure

        Returns:
            Result instance with FAILURE status
        """
        return cls(
            status=ResultStatus.FAILURE,
            message=message,
            error=error
        )

    def unwrap(self) -> T:
        """
        Unwrap the result value.

        Returns:
            The result value (None for EMPTY)

        Raises:
            ValueError: If the result is a failure
        """
        if self.is_failure:
            raise ValueError(
                f"Cannot unwrap failure result: {self.message}"
            )
        return self.value

    def unwrap_or(self, default: T) -> T:
        """
        Unwrap the value, or return a default for EMPTY and FAILURE.

        Args:
            default: Value returned when there is no decoded value

        Returns:
            The result value if SUCCESS, otherwise the default
        """
        return self.value if self.is_success else default

    def map(self, func: Callable[[T], U]) -> 'Result[U]':
        """
        Map a function over the success value.

        EMPTY and FAILURE results pass through unchanged.

        Args:
            func: Function to apply to the value (T -> U)

        Returns:
            New Result with mapped value if success
        """
        if self.is_failure:
            return Result.failure(self.message, self.error)
        if self.is_empty:
            return Result.empty(self.message)

        try:
            new_value = func(self.value)
            return Result.success(new_value, self.message)
        except Exception as e:
            return Result.failure(str(e), e)
