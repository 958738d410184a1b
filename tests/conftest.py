"""Shared fixtures, test doubles and Hypothesis strategies for tests."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest
from hypothesis import strategies as st

from signup_validation import SignUpRecord
from signup_validation.events import ValidationEvent, ValidationEventType
from signup_validation.results import Result, Success, failure
from signup_validation.validators import BaseRule

# -----------------------------------------------------------------------------
# Hypothesis Strategies
# -----------------------------------------------------------------------------

# Usernames/passwords inside the default 5..255 bounds; too_short/too_long fall outside
valid_lengths = st.text(
    min_size=5,
    max_size=255,
    alphabet=st.characters(categories=("L", "N")),
)

too_short = st.text(max_size=4, alphabet=st.characters(categories=("L", "N")))

too_long = st.builds(
    lambda ch, n: ch * n,
    st.characters(categories=("L", "N")),
    st.integers(min_value=256, max_value=400),
)

valid_emails = st.sampled_from(
    [
        "a@b.com",
        "valid@x.com",
        "valid_email@email.com",
        "john.doe+signup@mail.company.org",
    ]
)

invalid_emails = st.sampled_from(
    [
        "invalid_email",
        "",
        "@b.com",
        "a@",
        "a b@c.com",
        "a@@b.com",
        "john@doe",
    ]
)


# -----------------------------------------------------------------------------
# Test Doubles
# -----------------------------------------------------------------------------


class InMemoryLookupStore:
    """Lookup store backed by a list of user dicts; records every query."""

    def __init__(self, users: list[dict[str, Any]] | None = None) -> None:
        self.users = users or []
        self.calls: list[dict[str, Any]] = []

    async def find_one(self, criteria: Mapping[str, Any]) -> dict[str, Any] | None:
        self.calls.append(dict(criteria))
        for user in self.users:
            if all(user.get(k) == v for k, v in criteria.items()):
                return user
        return None


class FixedLookupStore:
    """Lookup store that always answers with the same value."""

    def __init__(self, answer: Any) -> None:
        self.answer = answer
        self.calls = 0

    async def find_one(self, criteria: Mapping[str, Any]) -> Any:
        self.calls += 1
        return self.answer


class BrokenLookupStore:
    """Lookup store whose backend is unreachable."""

    async def find_one(self, criteria: Mapping[str, Any]) -> Any:
        raise ConnectionError("user store unavailable")


class RecordingObserver:
    """Observer that records all events for testing."""

    def __init__(self) -> None:
        self.events: list[ValidationEvent] = []

    def on_event(self, event: ValidationEvent) -> None:
        self.events.append(event)

    @property
    def event_types(self) -> list[ValidationEventType]:
        return [e.event_type for e in self.events]


class PassRule(BaseRule[Any]):
    """Rule that always passes and counts its calls."""

    def __init__(self, name: str = "pass") -> None:
        self._name = name
        self.calls = 0

    @property
    def name(self) -> str:
        return self._name

    async def check(self, record: Any) -> Result[Any]:
        self.calls += 1
        return Success(record)


class FailRule(BaseRule[Any]):
    """Rule that always fails with a configurable error and counts its calls."""

    def __init__(
        self,
        name: str = "fail",
        field: str = "test",
        constraint: str = "min",
        message: str = "Failed",
    ) -> None:
        self._name = name
        self._field = field
        self._constraint = constraint
        self._message = message
        self.calls = 0

    @property
    def name(self) -> str:
        return self._name

    async def check(self, record: Any) -> Result[Any]:
        self.calls += 1
        return failure(self._field, self._constraint, self._message)


# -----------------------------------------------------------------------------
# Pytest Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def valid_record() -> SignUpRecord:
    """A record that passes every sign-up rule."""
    return SignUpRecord(username="johndoe", email="a@b.com", password="123456")


@pytest.fixture
def empty_store() -> InMemoryLookupStore:
    """A store with no users."""
    return InMemoryLookupStore()


@pytest.fixture
def populated_store() -> InMemoryLookupStore:
    """A store already holding a@b.com."""
    return InMemoryLookupStore(
        [{"id": 1, "username": "existing", "email": "a@b.com", "password": "hashed"}]
    )


@pytest.fixture
def recording_observer() -> RecordingObserver:
    return RecordingObserver()
