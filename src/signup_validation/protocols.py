"""Protocols for the collaborators and rules the validator consumes.

Structural types only; anything with a matching shape satisfies them,
including plain test doubles.
"""

from __future__ import annotations

from collections.abc import Awaitable, Mapping
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from signup_validation.results import Result

__all__ = ["LookupStore", "Rule"]

T = TypeVar("T")


@runtime_checkable
class LookupStore(Protocol):
    """Read capability on a user-record store.

    Only truthiness of the returned value is interpreted: a truthy value
    means a matching record exists, ``None``/``False`` means it does not.
    """

    async def find_one(self, criteria: Mapping[str, Any]) -> Any:
        """Return a record matching ``criteria`` or a falsy value."""
        ...


@runtime_checkable
class Rule(Protocol[T]):
    """Protocol for a single named check.

    ``check`` may suspend (e.g. for a store lookup); the combinator awaits
    it to completion before running the next rule.
    """

    @property
    def name(self) -> str:
        """Name of this rule."""
        ...

    def check(self, record: T) -> Awaitable[Result[T]]:
        """Check a record."""
        ...
