"""Observers for logging and tracing validation runs."""

from __future__ import annotations

import logging

from signup_validation.events import ValidationEvent, ValidationEventType
from signup_validation.process_log import RuleEntry, ValidationTrace

__all__ = ["LoggingObserver", "TraceObserver"]


class LoggingObserver:
    """Write validation events to a standard library logger.

    Rule failures are logged at ``level``; passes, starts and completions
    at DEBUG.

    Example:
        validator.add_observer(LoggingObserver(logging.getLogger("signup")))
    """

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self._logger = logger or logging.getLogger("signup_validation")
        self._level = level

    def on_event(self, event: ValidationEvent) -> None:
        data = event.data
        if event.event_type == ValidationEventType.RULE_FAILED:
            first = data["errors"][0]
            self._logger.log(
                self._level,
                "rule %s rejected %s (%s): %s",
                data["rule"],
                first.field,
                first.constraint,
                first.message,
            )
        elif event.event_type == ValidationEventType.RULE_PASSED:
            self._logger.debug("rule %s passed", data["rule"])
        elif event.event_type == ValidationEventType.VALIDATION_STARTED:
            self._logger.debug("%s started", data.get("validator_name", "validation"))
        elif event.event_type == ValidationEventType.VALIDATION_COMPLETED:
            if "is_valid" in data:
                self._logger.debug(
                    "%s completed: valid=%s in %.2fms",
                    data.get("validator_name", "validation"),
                    data["is_valid"],
                    data.get("duration_ms", 0.0),
                )


class TraceObserver:
    """Record rule outcomes into a ValidationTrace.

    Example:
        observer = TraceObserver()
        validator.add_observer(observer)
        await validator.validate(record)
        observer.trace.rules_run  # ["is_email_valid", ...]
    """

    def __init__(self, trace: ValidationTrace | None = None) -> None:
        self.trace = trace if trace is not None else ValidationTrace()

    def on_event(self, event: ValidationEvent) -> None:
        validator = getattr(event.source, "name", type(event.source).__name__)
        if event.event_type == ValidationEventType.RULE_PASSED:
            self.trace.entries.append(
                RuleEntry(validator=validator, rule=event.data["rule"], outcome="passed")
            )
        elif event.event_type == ValidationEventType.RULE_FAILED:
            first = event.data["errors"][0]
            self.trace.entries.append(
                RuleEntry(
                    validator=validator,
                    rule=event.data["rule"],
                    outcome="failed",
                    field=first.field,
                    constraint=first.constraint,
                    message=first.message,
                )
            )
