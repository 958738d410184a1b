"""Rule abstractions and the sequential validator combinator.

Provides a base class for rules, a wrapper turning plain (sync or async)
callables into rules, and a validator that threads a record through an
ordered list of rules, stopping at the first failure.
"""

from __future__ import annotations

import inspect
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Generic, TypeVar, Union

from signup_validation.events import (
    ObservableMixin,
    ValidationEvent,
    ValidationEventType,
)
from signup_validation.protocols import Rule
from signup_validation.results import Failure, Result, Success

__all__ = [
    "BaseRule",
    "FunctionRule",
    "SequentialValidator",
    "ValidatorPipelineBuilder",
    "build",
]

logger = logging.getLogger(__name__)

T = TypeVar("T")

RuleCallable = Callable[[Any], Union[Result[Any], Awaitable[Result[Any]]]]


class BaseRule(ABC, Generic[T]):
    """Abstract base class for rules.

    Generic over T, the type of record being checked. Subclass this when a
    rule needs injected collaborators; plain functions can be passed to the
    validator directly.

    Example:
        class NotBannedRule(BaseRule[SignUpRecord]):
            def __init__(self, banlist: BanList) -> None:
                self._banlist = banlist

            @property
            def name(self) -> str:
                return "not_banned"

            async def check(self, record: SignUpRecord) -> Result[SignUpRecord]:
                if await self._banlist.contains(record.email):
                    return failure("email", "banned", "Email is banned")
                return Success(record)
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of this rule for logging and event reporting."""
        ...

    @abstractmethod
    async def check(self, record: T) -> Result[T]:
        """Check a record.

        Args:
            record: Record to check.

        Returns:
            Success wrapping the record (unchanged or transformed), or a
            Failure describing why the record was rejected.
        """
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"


class FunctionRule(BaseRule[T], Generic[T]):
    """Adapts a callable ``record -> Result`` (or an awaitable of one) to a rule."""

    def __init__(self, func: RuleCallable, name: str | None = None) -> None:
        self._func = func
        self._name = name or getattr(func, "__name__", None) or repr(func)

    @property
    def name(self) -> str:
        return self._name

    async def check(self, record: T) -> Result[T]:
        outcome = self._func(record)
        if inspect.isawaitable(outcome):
            outcome = await outcome
        return outcome


def as_rule(rule: BaseRule[T] | Rule[T] | RuleCallable, name: str | None = None) -> Rule[T]:
    """Coerce a rule object or plain callable into a rule.

    Raises:
        TypeError: If ``rule`` is neither a rule nor callable.
    """
    if isinstance(rule, BaseRule) and name is None:
        return rule
    if isinstance(rule, Rule):
        if name is None:
            return rule
        return FunctionRule(rule.check, name=name)
    if callable(rule):
        return FunctionRule(rule, name=name)
    raise TypeError(f"Expected a rule or callable, got {type(rule).__name__}")


class SequentialValidator(ObservableMixin, Generic[T]):
    """Validator that runs rules one after another with fail-fast semantics.

    Each rule receives the value returned by the previous rule's Success.
    The first Failure is returned as-is and no later rule runs. Rules never
    run concurrently within a single ``validate`` call. Exceptions raised by
    a rule (e.g. a failing store lookup) propagate to the caller.

    Supports the Observer pattern - observers receive VALIDATION_STARTED,
    one RULE_PASSED/RULE_FAILED per rule invoked, and VALIDATION_COMPLETED.

    Example:
        validator = SequentialValidator([is_email_valid, is_username_long_enough])
        result = await validator.validate(record)
        if result.is_failure:
            return 422, result.first.to_dict()
    """

    def __init__(
        self,
        rules: Iterable[BaseRule[T] | Rule[T] | RuleCallable] | None = None,
        *,
        name: str = "validator",
    ) -> None:
        """Initialize the validator.

        Args:
            rules: Rules to run, in order. Plain callables are wrapped in
                FunctionRule. Defaults to no rules.
            name: Name for this validator. Defaults to "validator".
        """
        self._rules: list[Rule[T]] = [as_rule(r) for r in rules or []]
        self._name = name

    @property
    def name(self) -> str:
        """Name of this validator."""
        return self._name

    async def validate(self, record: T) -> Result[T]:
        """Run rules in order and return the first Failure or the final Success.

        Args:
            record: Record to validate.

        Returns:
            Success wrapping the value produced by the last rule, or the
            first Failure encountered.

        Raises:
            TypeError: If a rule returns something other than a Result.
        """
        start_time = time.perf_counter()

        self.notify(
            ValidationEvent(
                event_type=ValidationEventType.VALIDATION_STARTED,
                source=self,
                data={
                    "record": record,
                    "validator_name": self._name,
                    "rule_count": len(self._rules),
                },
            )
        )

        current = record
        outcome: Result[T] = Success(current)
        failed_rule: str | None = None

        for rule in self._rules:
            outcome = await rule.check(current)

            if isinstance(outcome, Failure):
                failed_rule = rule.name
                logger.debug(
                    "%s: rule %s failed on %s",
                    self._name,
                    rule.name,
                    outcome.first.field,
                )
                self.notify(
                    ValidationEvent(
                        event_type=ValidationEventType.RULE_FAILED,
                        source=self,
                        data={"rule": rule.name, "errors": list(outcome.errors)},
                    )
                )
                break

            if not isinstance(outcome, Success):
                raise TypeError(
                    f"Rule {rule.name!r} returned {type(outcome).__name__}, "
                    "expected Success or Failure"
                )

            logger.debug("%s: rule %s passed", self._name, rule.name)
            self.notify(
                ValidationEvent(
                    event_type=ValidationEventType.RULE_PASSED,
                    source=self,
                    data={"rule": rule.name},
                )
            )
            current = outcome.value

        duration_ms = (time.perf_counter() - start_time) * 1000

        self.notify(
            ValidationEvent(
                event_type=ValidationEventType.VALIDATION_COMPLETED,
                source=self,
                data={
                    "record": record,
                    "validator_name": self._name,
                    "is_valid": failed_rule is None,
                    "failed_rule": failed_rule,
                    "errors": list(outcome.errors),
                    "duration_ms": duration_ms,
                },
            )
        )

        return outcome

    def has_rule(self, name: str) -> bool:
        """Check if a rule with the given name exists."""
        return any(r.name == name for r in self._rules)

    @property
    def rules(self) -> list[Rule[T]]:
        """Get copy of rules list."""
        return self._rules.copy()

    @property
    def rule_names(self) -> list[str]:
        """Get list of rule names in order."""
        return [r.name for r in self._rules]

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        names = ", ".join(self.rule_names)
        return f"SequentialValidator(name={self._name!r}, rules=[{names}])"


class ValidatorPipelineBuilder(Generic[T]):
    """Fluent builder for sequential validators.

    Example:
        validator = (
            ValidatorPipelineBuilder[SignUpRecord]("sign_up")
            .add(is_email_valid)
            .add(EmailUniquenessRule(store))
            .build()
        )
    """

    def __init__(self, name: str = "validator") -> None:
        self._rules: list[Rule[T]] = []
        self._name = name

    def add(
        self,
        rule: BaseRule[T] | Rule[T] | RuleCallable,
        name: str | None = None,
    ) -> ValidatorPipelineBuilder[T]:
        """Append a rule; ``name`` overrides the rule's own name."""
        self._rules.append(as_rule(rule, name=name))
        return self

    def with_name(self, name: str) -> ValidatorPipelineBuilder[T]:
        """Set the name for the resulting validator."""
        self._name = name
        return self

    def build(self) -> SequentialValidator[T]:
        """Build the SequentialValidator."""
        return SequentialValidator(self._rules.copy(), name=self._name)

    def __repr__(self) -> str:
        return f"ValidatorPipelineBuilder(name={self._name!r}, rules={len(self._rules)})"


def build(
    rules: Iterable[BaseRule[T] | Rule[T] | RuleCallable],
    *,
    name: str = "validator",
) -> SequentialValidator[T]:
    """Build a fail-fast validator from an ordered sequence of rules."""
    return SequentialValidator(rules, name=name)
