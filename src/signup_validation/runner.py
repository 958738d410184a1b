"""Batch validation runner for raw sign-up submissions.

Parses raw mappings (e.g. rows of a CSV import) into records, runs each
through a validator, and streams per-row results while tracking
statistics. Rows can be validated concurrently in bounded chunks; each
row's own rules still run one at a time.
"""

from __future__ import annotations

import asyncio
import time
from collections import Counter
from dataclasses import dataclass, field
from itertools import islice
from typing import TYPE_CHECKING, Any, Generic, TypeVar, cast

from pydantic import BaseModel, ValidationError

from signup_validation.events import (
    ObservableMixin,
    ValidationEvent,
    ValidationEventType,
)
from signup_validation.records import SignUpRecord
from signup_validation.results import Failure, Success

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable, Iterator, Mapping

    from signup_validation.results import Result
    from signup_validation.validators import SequentialValidator

__all__ = ["RowResult", "RunnerStats", "ValidationRunner"]

T = TypeVar("T", bound=BaseModel)


@dataclass
class RowResult(Generic[T]):
    """Result for a single row.

    Attributes:
        row_index: Zero-based index of the row in the input data.
        raw_data: The original mapping for this row.
        record: The parsed record if schema parsing passed.
        schema_errors: Pydantic errors if the row could not be parsed.
        result: The validator's Result if the row was parsed.
    """

    row_index: int
    raw_data: dict[str, Any]
    record: T | None = None
    schema_errors: list[dict[str, Any]] = field(default_factory=list)
    result: Result[T] | None = None

    @property
    def is_valid(self) -> bool:
        """Check if the row parsed and passed every rule."""
        return not self.schema_errors and isinstance(self.result, Success)

    @property
    def error_summary(self) -> list[tuple[str, str]]:
        """Get (field, message) tuples for all errors on this row."""
        errors: list[tuple[str, str]] = []
        for schema_err in self.schema_errors:
            loc = schema_err.get("loc") or ("unknown",)
            msg = schema_err.get("msg", schema_err.get("type", "validation_error"))
            errors.append((str(loc[-1]), msg))
        if isinstance(self.result, Failure):
            errors.extend((e.field, e.message) for e in self.result.errors)
        return errors


@dataclass
class RunnerStats:
    """Counters for one call to ``ValidationRunner.run``.

    A fresh instance replaces the previous one at the start of every run.
    Rows rejected while parsing count as schema failures; rows that parsed
    but were refused by a sign-up rule count as rule failures. Each row
    contributes every (field, message) pair it failed on to ``error_counts``.
    """

    total_rows: int = 0
    valid_rows: int = 0
    schema_failures: int = 0
    rule_failures: int = 0
    start_time: float = 0.0
    end_time: float = 0.0

    error_counts: Counter[tuple[str, str]] = field(default_factory=Counter)
    failed_samples: list[dict[str, Any]] = field(default_factory=list)
    max_samples: int = 100

    @property
    def error_rows(self) -> int:
        """Rows that were rejected, for either reason."""
        return self.schema_failures + self.rule_failures

    @property
    def duration_ms(self) -> float:
        return (self.end_time - self.start_time) * 1000

    @property
    def success_rate(self) -> float:
        """Accepted rows as a percentage of rows seen; 0.0 before any row."""
        if not self.total_rows:
            return 0.0
        return 100.0 * self.valid_rows / self.total_rows

    def top_errors(self, n: int = 10) -> list[tuple[tuple[str, str], int, float]]:
        """The ``n`` most frequent rejections with their share of all rejections."""
        total_errors = sum(self.error_counts.values())
        return [
            (key, count, count / total_errors * 100)
            for key, count in self.error_counts.most_common(n)
        ]

    def record_error(self, field: str, message: str) -> None:
        self.error_counts[(field, message)] += 1

    def add_failed_sample(self, raw_data: dict[str, Any]) -> None:
        """Keep the raw row unless ``max_samples`` rows are already kept."""
        if len(self.failed_samples) < self.max_samples:
            self.failed_samples.append(raw_data)


class ValidationRunner(ObservableMixin, Generic[T]):
    """Streaming batch validator for sign-up submissions.

    Example:
        store = UserStore(session)
        runner = ValidationRunner(csv.DictReader(f), make_sign_up_validator(store))

        async for row in runner.run(concurrency=8):
            if row.is_valid:
                await create_account(row.record)

        print(runner.audit_report())

    Note:
        Rows validated concurrently share the lookup store; two rows with
        the same new email can both pass the uniqueness rule.
    """

    def __init__(
        self,
        data: Iterable[Mapping[str, Any]],
        validator: SequentialValidator[T],
        *,
        record_class: type[T] = cast("type[T]", SignUpRecord),
        fail_fast: bool = False,
        total_hint: int | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            data: Iterable of raw mappings. Consumed lazily.
            validator: Validator applied to each parsed record.
            record_class: Pydantic model used to parse each row.
            fail_fast: If True, stop after the first invalid row.
            total_hint: Optional total count for progress display.
        """
        self._data = data
        self._validator = validator
        self._record_class = record_class
        self._fail_fast = fail_fast
        self._total_hint = total_hint
        self._stats = RunnerStats()

    async def __aenter__(self) -> ValidationRunner[T]:
        return self

    async def __aexit__(self, *args: object) -> None:
        """Finalize stats if the run was abandoned mid-iteration."""
        if self._stats.end_time == 0 and self._stats.start_time > 0:
            self._stats.end_time = time.perf_counter()

    async def run(self, *, concurrency: int | None = None) -> AsyncIterator[RowResult[T]]:
        """Validate rows, yielding results in input order.

        Args:
            concurrency: Number of rows validated at once. None or 1 for
                one row at a time. Ignored when ``fail_fast`` is set, so no
                row after the first invalid one reaches the lookup store.

        Yields:
            RowResult for each row processed.

        Raises:
            Exception: Whatever the validator raises (e.g. a store error)
                propagates and ends the run. Rows still in flight in the
                same chunk are cancelled first.
        """
        self._stats = RunnerStats(start_time=time.perf_counter())

        self.notify(
            ValidationEvent(
                event_type=ValidationEventType.VALIDATION_STARTED,
                source=self,
                data={
                    "record_class": self._record_class.__name__,
                    "total_hint": self._total_hint,
                    "concurrency": concurrency or 1,
                },
            )
        )

        chunk_size = concurrency if concurrency and concurrency > 1 and not self._fail_fast else 1

        stopped = False
        for chunk in self._chunks(chunk_size):
            if chunk_size == 1:
                results = [await self._validate_row(*chunk[0])]
            else:
                results = await self._validate_chunk(chunk)

            for result in results:
                self._update_stats(result)
                self._emit_row_processed_event(result)
                yield result

                if self._fail_fast and not result.is_valid:
                    stopped = True
                    break

            if stopped:
                break

        self._stats.end_time = time.perf_counter()

        self.notify(
            ValidationEvent(
                event_type=ValidationEventType.VALIDATION_COMPLETED,
                source=self,
                data={"stats": self._stats, "stopped_early": stopped},
            )
        )

    async def run_collect_valid(self, *, concurrency: int | None = None) -> AsyncIterator[T]:
        """Convenience: yield only records that passed validation."""
        async for result in self.run(concurrency=concurrency):
            if result.is_valid and result.record is not None:
                yield result.record

    async def run_collect_failed(
        self, *, concurrency: int | None = None
    ) -> AsyncIterator[RowResult[T]]:
        """Convenience: yield only failed rows."""
        async for result in self.run(concurrency=concurrency):
            if not result.is_valid:
                yield result

    def _chunks(self, size: int) -> Iterator[list[tuple[int, Mapping[str, Any]]]]:
        rows = enumerate(self._data)
        while chunk := list(islice(rows, size)):
            yield chunk

    async def _validate_chunk(
        self, chunk: list[tuple[int, Mapping[str, Any]]]
    ) -> list[RowResult[T]]:
        """Validate a chunk concurrently; on error, cancel the rows still running."""
        tasks = [asyncio.ensure_future(self._validate_row(i, item)) for i, item in chunk]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _validate_row(self, row_index: int, item: Mapping[str, Any]) -> RowResult[T]:
        """Parse and validate a single row."""
        result: RowResult[T] = RowResult(row_index=row_index, raw_data=dict(item))

        try:
            record = self._record_class.model_validate(item)
        except ValidationError as e:
            result.schema_errors = cast("list[dict[str, Any]]", e.errors())
            return result

        result.record = record
        result.result = await self._validator.validate(record)
        return result

    def _update_stats(self, result: RowResult[T]) -> None:
        self._stats.total_rows += 1

        if result.is_valid:
            self._stats.valid_rows += 1
            return

        if result.schema_errors:
            self._stats.schema_failures += 1
        else:
            self._stats.rule_failures += 1

        for field_name, msg in result.error_summary:
            self._stats.record_error(field_name, msg)
        self._stats.add_failed_sample(result.raw_data)

    def _emit_row_processed_event(self, result: RowResult[T]) -> None:
        self.notify(
            ValidationEvent(
                event_type=ValidationEventType.ROW_PROCESSED,
                source=self,
                data={
                    "row_index": result.row_index,
                    "is_valid": result.is_valid,
                    "stats_snapshot": {
                        "total": self._stats.total_rows,
                        "valid": self._stats.valid_rows,
                        "failed": self._stats.error_rows,
                        "total_hint": self._total_hint,
                    },
                    "errors": result.error_summary if not result.is_valid else [],
                },
            )
        )

    @property
    def stats(self) -> RunnerStats:
        """Get current statistics."""
        return self._stats

    def audit_report(self) -> dict[str, Any]:
        """Summary statistics and error patterns for the last run.

        Returns:
            Dict with 'summary', 'top_errors', and 'failed_samples' keys.
        """
        return {
            "summary": {
                "total_rows": self._stats.total_rows,
                "valid_rows": self._stats.valid_rows,
                "error_rows": self._stats.error_rows,
                "success_rate": f"{self._stats.success_rate:.1f}%",
                "schema_failures": self._stats.schema_failures,
                "rule_failures": self._stats.rule_failures,
                "duration_ms": self._stats.duration_ms,
            },
            "top_errors": [
                {"field": f, "message": m, "count": c, "percentage": f"{p:.1f}%"}
                for (f, m), c, p in self._stats.top_errors(20)
            ],
            "failed_samples": self._stats.failed_samples,
        }
