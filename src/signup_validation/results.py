"""Validation result containers.

Explicit success/failure values returned by every rule and by the validator
combinator. Domain failures are carried as data, never raised.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

__all__ = [
    "EMAIL",
    "MAX",
    "MIN",
    "UNIQUE",
    "Failure",
    "Result",
    "Success",
    "ValidationFailure",
    "failure",
    "failure_from",
]

T = TypeVar("T")

# Constraint tags used by the sign-up rules
EMAIL = "email"
MIN = "min"
MAX = "max"
UNIQUE = "unique"


@dataclass(frozen=True)
class ValidationFailure:
    """A single field-labeled validation failure."""

    field: str
    constraint: str
    message: str

    def to_dict(self) -> dict[str, str]:
        """Plain mapping suitable for a JSON error response."""
        return {"field": self.field, "constraint": self.constraint, "message": self.message}


@dataclass(frozen=True)
class Success(Generic[T]):
    """A passing result wrapping the (possibly transformed) value.

    Example:
        match await validator.validate(record):
            case Success(value):
                create_account(value)
            case Failure(errors):
                reject(errors[0])
    """

    value: T

    @property
    def errors(self) -> tuple[ValidationFailure, ...]:
        """Always empty."""
        return ()

    @property
    def is_success(self) -> bool:
        return True

    @property
    def is_failure(self) -> bool:
        return False


@dataclass(frozen=True)
class Failure:
    """A failing result holding an ordered, non-empty sequence of failures.

    Attributes:
        errors: Failures in the order they were produced. Lists are
            stored as tuples so the result stays immutable.

    Raises:
        ValueError: If constructed without any errors.
    """

    errors: tuple[ValidationFailure, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.errors, tuple):
            object.__setattr__(self, "errors", tuple(self.errors))
        if not self.errors:
            raise ValueError("Failure requires at least one ValidationFailure")

    @property
    def first(self) -> ValidationFailure:
        """The failure a caller should surface to the user."""
        return self.errors[0]

    @property
    def is_success(self) -> bool:
        return False

    @property
    def is_failure(self) -> bool:
        return True


Result = Union[Success[T], Failure]


def failure(field: str, constraint: str, message: str) -> Failure:
    """Build a single-error Failure."""
    return Failure((ValidationFailure(field=field, constraint=constraint, message=message),))


def failure_from(errors: Sequence[ValidationFailure | dict[str, Any]]) -> Failure:
    """Build a Failure from failures or plain ``field/constraint/message`` mappings."""
    return Failure(
        tuple(e if isinstance(e, ValidationFailure) else ValidationFailure(**e) for e in errors)
    )
