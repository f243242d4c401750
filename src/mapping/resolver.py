"""Resolve a diagnostic category to the log table it lands in."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from src.parsing.validation import DiagnosticLog, is_valid_table_name

from .index import MappingIndex

logger = logging.getLogger(__name__)

METRICS_TABLE = "AzureMetrics"
METRICS_CATEGORY_TYPE = "Metrics"


class UnknownReason(str, Enum):
    INVALID_INPUT = "invalid input"
    RESOURCE_TYPE_NOT_DOCUMENTED = "resourceType not documented"
    CATEGORY_NOT_FOUND = "category not found"
    VALIDATION_FAILED = "validation failed"


class MatchKind(str, Enum):
    METRICS = "metrics"
    EXACT = "exact"
    CASE_INSENSITIVE = "case-insensitive"
    SUBSTRING = "substring"
    REVERSE_SUBSTRING = "reverse-substring"


@dataclass(frozen=True)
class ResolutionResult:
    """Either a concrete table name or an unknown outcome with its reason."""

    table_name: str | None = None
    reason: UnknownReason | None = None
    match: MatchKind | None = None

    @classmethod
    def found(cls, table_name: str, match: MatchKind) -> "ResolutionResult":
        return cls(table_name=table_name, match=match)

    @classmethod
    def unknown(cls, reason: UnknownReason) -> "ResolutionResult":
        return cls(reason=reason)

    @property
    def is_unknown(self) -> bool:
        return self.table_name is None

    def display(self) -> str:
        if self.table_name is not None:
            return self.table_name
        reason = self.reason.value if self.reason is not None else "unresolved"
        return f"Unknown ({reason})"


def _match_candidates(category_name: str, candidates: tuple[str, ...]) -> ResolutionResult | None:
    for table in candidates:
        if table == category_name:
            return ResolutionResult.found(table, MatchKind.EXACT)

    folded = category_name.lower()
    for table in candidates:
        if table.lower() == folded:
            return ResolutionResult.found(table, MatchKind.CASE_INSENSITIVE)

    containing = [table for table in candidates if folded in table.lower()]
    if containing:
        # Shortest wins; sorted candidates make equal lengths deterministic.
        return ResolutionResult.found(min(containing, key=len), MatchKind.SUBSTRING)

    contained = [table for table in candidates if table.lower() in folded]
    if len(contained) == 1:
        return ResolutionResult.found(contained[0], MatchKind.REVERSE_SUBSTRING)
    return None


class TableResolver:
    """Memoizing resolver over a :class:`MappingIndex` for one run."""

    def __init__(self, index: MappingIndex, *, diagnostics: DiagnosticLog | None = None) -> None:
        self.index = index
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
        self._memo: dict[tuple[str, str], ResolutionResult] = {}

    @property
    def memo_size(self) -> int:
        return len(self._memo)

    def resolve(self, resource_type: str, category_name: str, category_type: str) -> ResolutionResult:
        if category_type == METRICS_CATEGORY_TYPE:
            return ResolutionResult.found(METRICS_TABLE, MatchKind.METRICS)

        if not resource_type or not resource_type.strip() or not category_name or not category_name.strip():
            return ResolutionResult.unknown(UnknownReason.INVALID_INPUT)

        key = (resource_type, category_name)
        cached = self._memo.get(key)
        if cached is not None:
            return cached

        candidates = self.index.lookup(resource_type)
        if candidates is None:
            result = ResolutionResult.unknown(UnknownReason.RESOURCE_TYPE_NOT_DOCUMENTED)
        else:
            result = _match_candidates(category_name, candidates) or ResolutionResult.unknown(
                UnknownReason.CATEGORY_NOT_FOUND
            )

        if result.table_name is not None and not is_valid_table_name(result.table_name):
            self.diagnostics.add(
                "resolution-validation-failed",
                f"Resolved {resource_type}/{category_name} to invalid table {result.table_name!r}",
                resource_type=resource_type,
                category_name=category_name,
                table_name=result.table_name,
            )
            result = ResolutionResult.unknown(UnknownReason.VALIDATION_FAILED)

        logger.debug("Resolved %s/%s -> %s", resource_type, category_name, result.display())
        self._memo[key] = result
        return result


__all__ = [
    "METRICS_CATEGORY_TYPE",
    "METRICS_TABLE",
    "MatchKind",
    "ResolutionResult",
    "TableResolver",
    "UnknownReason",
]
