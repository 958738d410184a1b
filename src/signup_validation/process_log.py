"""Audit trail of rule outcomes.

Provides Pydantic models recording which rules ran during validation and
what each one decided.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

__all__ = ["RuleEntry", "ValidationTrace"]


class RuleEntry(BaseModel):
    """Outcome of one rule invocation.

    Attributes:
        validator: Name of the validator that ran the rule.
        rule: Name of the rule.
        outcome: "passed" or "failed".
        field: Field of the first failure, if the rule failed.
        constraint: Constraint tag of the first failure, if the rule failed.
        message: Message of the first failure, if the rule failed.
        timestamp: ISO format timestamp of when the outcome was recorded.
    """

    validator: str
    rule: str
    outcome: Literal["passed", "failed"]
    field: str | None = None
    constraint: str | None = None
    message: str | None = None
    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())


class ValidationTrace(BaseModel):
    """Ordered rule outcomes across one or more validation runs.

    Attributes:
        entries: Rule outcomes in the order they were recorded.
    """

    entries: list[RuleEntry] = Field(default_factory=list)

    @property
    def failures(self) -> list[RuleEntry]:
        """Entries for rules that failed."""
        return [e for e in self.entries if e.outcome == "failed"]

    @property
    def rules_run(self) -> list[str]:
        """Names of the rules that ran, in order."""
        return [e.rule for e in self.entries]

    def audit_log(self, source: str | None = None) -> list[dict[str, Any]]:
        """Export entries as dicts suitable for ``pd.DataFrame()``.

        Args:
            source: Optional source identifier to add to each entry.
        """
        entries: list[dict[str, Any]] = []
        for entry in self.entries:
            d = entry.model_dump()
            if source:
                d["source"] = source
            entries.append(d)
        return entries

    def clear(self) -> None:
        """Drop all recorded entries."""
        self.entries.clear()
