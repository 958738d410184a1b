"""Field rules for the sign-up record and the assembled sign-up validator.

Each rule maps a SignUpRecord to ``Success(record)`` (unchanged) or to a
single-error Failure. Only the uniqueness rule suspends, on one store
lookup keyed by email.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from email_validator import EmailNotValidError, validate_email

from signup_validation.config import SignUpRuleConfig
from signup_validation.records import SignUpRecord
from signup_validation.results import EMAIL, MAX, MIN, UNIQUE, Result, Success, failure
from signup_validation.validators import BaseRule, SequentialValidator

if TYPE_CHECKING:
    from signup_validation.protocols import LookupStore

__all__ = [
    "EmailUniquenessRule",
    "LengthRule",
    "is_email_in_use",
    "is_email_valid",
    "is_password_long_enough",
    "is_password_not_too_long",
    "is_username_long_enough",
    "is_username_not_too_long",
    "make_sign_up_validator",
]

_DEFAULT_CONFIG = SignUpRuleConfig()


def is_email_valid(record: SignUpRecord) -> Result[SignUpRecord]:
    """Reject addresses that are not syntactically valid email addresses.

    No DNS lookup is made, but ``email_validator`` still refuses domains
    that can never be globally deliverable, so well-formed addresses on
    special-use names such as ``.test``, ``.local`` or ``localhost`` are
    rejected too.
    """
    try:
        validate_email(record.email, check_deliverability=False)
    except EmailNotValidError:
        return failure("email", EMAIL, "Email must be valid")
    return Success(record)


def is_username_long_enough(
    record: SignUpRecord, min_length: int = _DEFAULT_CONFIG.username_min_length
) -> Result[SignUpRecord]:
    if len(record.username) < min_length:
        return failure("username", MIN, f"Username must have at least {min_length} characters")
    return Success(record)


def is_username_not_too_long(
    record: SignUpRecord, max_length: int = _DEFAULT_CONFIG.username_max_length
) -> Result[SignUpRecord]:
    if len(record.username) > max_length:
        return failure("username", MAX, f"Username can't be longer than {max_length} characters")
    return Success(record)


def is_password_long_enough(
    record: SignUpRecord, min_length: int = _DEFAULT_CONFIG.password_min_length
) -> Result[SignUpRecord]:
    if len(record.password) < min_length:
        return failure(
            "password", MIN, f"Password must be at least {min_length} characters long"
        )
    return Success(record)


def is_password_not_too_long(
    record: SignUpRecord, max_length: int = _DEFAULT_CONFIG.password_max_length
) -> Result[SignUpRecord]:
    if len(record.password) > max_length:
        return failure("password", MAX, f"Password must be less {max_length} characters long")
    return Success(record)


async def is_email_in_use(
    record: SignUpRecord, lookup_store: LookupStore
) -> Result[SignUpRecord]:
    """Reject the record if the store already holds a user with this email.

    Issues exactly one ``find_one`` call; any truthy answer means "in use".
    Store errors are not caught.
    """
    existing = await lookup_store.find_one({"email": record.email})
    if existing:
        return failure("email", UNIQUE, "Email already in use")
    return Success(record)


class LengthRule(BaseRule[SignUpRecord]):
    """Binds one of the length checks to a configured bound."""

    def __init__(
        self,
        name: str,
        check: Callable[[SignUpRecord, int], Result[SignUpRecord]],
        bound: int,
    ) -> None:
        self._name = name
        self._check = check
        self._bound = bound

    @property
    def name(self) -> str:
        return self._name

    @property
    def bound(self) -> int:
        return self._bound

    async def check(self, record: SignUpRecord) -> Result[SignUpRecord]:
        return self._check(record, self._bound)


class EmailUniquenessRule(BaseRule[SignUpRecord]):
    """Uniqueness check with the lookup store injected at construction."""

    def __init__(self, lookup_store: LookupStore) -> None:
        self._lookup_store = lookup_store

    @property
    def name(self) -> str:
        return "is_email_in_use"

    async def check(self, record: SignUpRecord) -> Result[SignUpRecord]:
        return await is_email_in_use(record, self._lookup_store)


def make_sign_up_validator(
    lookup_store: LookupStore,
    config: SignUpRuleConfig | None = None,
) -> SequentialValidator[SignUpRecord]:
    """Build the sign-up validator.

    Rules run in this order and the first failure wins: email format,
    username minimum, username maximum, email uniqueness, password
    minimum, password maximum.

    Args:
        lookup_store: Store used to detect an email already in use.
        config: Length bounds. Defaults to 5..255 for both fields.

    Returns:
        A SequentialValidator whose ``validate`` returns Result[SignUpRecord].
    """
    config = config or _DEFAULT_CONFIG
    return SequentialValidator(
        [
            is_email_valid,
            LengthRule(
                "is_username_long_enough", is_username_long_enough, config.username_min_length
            ),
            LengthRule(
                "is_username_not_too_long", is_username_not_too_long, config.username_max_length
            ),
            EmailUniquenessRule(lookup_store),
            LengthRule(
                "is_password_long_enough", is_password_long_enough, config.password_min_length
            ),
            LengthRule(
                "is_password_not_too_long", is_password_not_too_long, config.password_max_length
            ),
        ],
        name="sign_up",
    )
