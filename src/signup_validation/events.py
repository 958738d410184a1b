"""Observer pattern implementation for validation events.

Provides event types, observer protocol, and mixin for adding observer
support to validators and runners.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Protocol, runtime_checkable

__all__ = [
    "ValidationEventType",
    "ValidationEvent",
    "ValidationObserver",
    "ObservableMixin",
]


class ValidationEventType(Enum):
    """Types of validation events that can be observed."""

    VALIDATION_STARTED = auto()
    """Emitted when a validator or runner starts."""

    RULE_PASSED = auto()
    """Emitted when a single rule returns Success."""

    RULE_FAILED = auto()
    """Emitted when a single rule returns Failure (the run stops there)."""

    VALIDATION_COMPLETED = auto()
    """Emitted when a validator or runner finishes without raising."""

    ROW_PROCESSED = auto()
    """Emitted by the batch runner for each raw row."""


@dataclass
class ValidationEvent:
    """A validation event that can be observed.

    Attributes:
        event_type: The type of event that occurred.
        source: The object that emitted the event (validator or runner).
        data: Event-specific data dictionary.

    Example:
        event = ValidationEvent(
            event_type=ValidationEventType.RULE_FAILED,
            source=validator,
            data={"rule": "is_email_valid", "errors": [...]},
        )
    """

    event_type: ValidationEventType
    source: object
    data: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class ValidationObserver(Protocol):
    """Protocol for validation event observers.

    Implement this protocol to receive validation events, e.g. for
    logging, audit trails or console progress.
    """

    def on_event(self, event: ValidationEvent) -> None:
        """Handle a validation event."""
        ...


class ObservableMixin:
    """Observer registry shared by ``SequentialValidator`` and ``ValidationRunner``.

    Observers are called synchronously, in the order they were added, from
    inside the validation call. A failing observer is not isolated: its
    exception surfaces from ``validate`` or ``run`` like any rule error.
    """

    _observers: list[ValidationObserver]

    def _ensure_observers(self) -> None:
        if getattr(self, "_observers", None) is None:
            self._observers = []

    def add_observer(self, observer: ValidationObserver) -> None:
        """Register ``observer``; registering it again keeps its first position."""
        self._ensure_observers()
        if observer not in self._observers:
            self._observers.append(observer)

    def remove_observer(self, observer: ValidationObserver) -> None:
        """Unregister ``observer``; unknown observers are ignored."""
        self._ensure_observers()
        if observer in self._observers:
            self._observers.remove(observer)

    def notify(self, event: ValidationEvent) -> None:
        self._ensure_observers()
        for observer in self._observers:
            observer.on_event(event)

    @property
    def observers(self) -> list[ValidationObserver]:
        """Snapshot of the registered observers."""
        self._ensure_observers()
        return list(self._observers)

    def clear_observers(self) -> None:
        self._ensure_observers()
        self._observers.clear()
