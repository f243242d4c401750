"""Table name validation and the run-scoped diagnostics log."""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Iterator

logger = logging.getLogger(__name__)

MIN_TABLE_NAME_LENGTH = 3

_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
_CORRUPTION_PATTERNS = (
    ("single-letter", re.compile(r"^[A-Za-z]$")),
    ("two-letters", re.compile(r"^[A-Za-z]{2}$")),
    ("numeric", re.compile(r"^\d+$")),
)


def table_name_rejection(name: str | None) -> str | None:
    """Return the rule a candidate table name breaks, or ``None`` when valid."""

    if name is None or not str(name).strip():
        return "empty"
    if len(name) < MIN_TABLE_NAME_LENGTH:
        return "too-short"
    if not _IDENTIFIER_PATTERN.match(name):
        return "not-an-identifier"
    for label, pattern in _CORRUPTION_PATTERNS:
        if pattern.match(name):
            return label
    return None


def is_valid_table_name(name: str | None) -> bool:
    return table_name_rejection(name) is None


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal issue noticed during a run."""

    code: str
    message: str
    context: dict[str, Any] = field(default_factory=dict)
    recorded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
            "recorded_at": self.recorded_at.isoformat(),
        }


class DiagnosticLog:
    """Accumulates diagnostics for one run so they can be reported once at the end."""

    def __init__(self) -> None:
        self._records: list[Diagnostic] = []

    def add(self, code: str, message: str, **context: Any) -> Diagnostic:
        record = Diagnostic(code=code, message=message, context=context)
        self._records.append(record)
        logger.debug("diagnostic %s: %s", code, message)
        return record

    def counts(self) -> dict[str, int]:
        return dict(Counter(record.code for record in self._records))

    def of(self, code: str) -> list[Diagnostic]:
        return [record for record in self._records if record.code == code]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def summary_lines(self, *, per_code: int = 3) -> list[str]:
        lines: list[str] = []
        for code, count in self.counts().items():
            lines.append(f"{code}: {count}")
            for record in self.of(code)[:per_code]:
                lines.append(f"  - {record.message}")
        return lines


def filter_valid_tables(
    names: Iterable[str],
    *,
    diagnostics: DiagnosticLog | None = None,
    resource_type: str | None = None,
) -> list[str]:
    """Return the sorted, de-duplicated subset of ``names`` that pass validation."""

    accepted: set[str] = set()
    for name in names:
        reason = table_name_rejection(name)
        if reason is None:
            accepted.add(name)
            continue
        if diagnostics is not None:
            diagnostics.add(
                "invalid-table-name",
                f"Dropped table name {name!r} for {resource_type or 'unknown resource type'} ({reason})",
                table_name=name,
                resource_type=resource_type,
                rule=reason,
            )
    return sorted(accepted)


__all__ = [
    "MIN_TABLE_NAME_LENGTH",
    "Diagnostic",
    "DiagnosticLog",
    "filter_valid_tables",
    "is_valid_table_name",
    "table_name_rejection",
]
