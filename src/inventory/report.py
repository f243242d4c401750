"""Tabular report of diagnostic categories and their log tables."""

from __future__ import annotations

import csv
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

REPORT_COLUMNS = (
    "SubscriptionName",
    "SubscriptionId",
    "ResourceName",
    "ResourceType",
    "ResourceGroup",
    "CategoryName",
    "CategoryType",
    "LogAnalyticsTable",
    "Enabled",
    "ResourceId",
)


@dataclass(frozen=True)
class ReportRow:
    subscription_name: str
    subscription_id: str
    resource_name: str
    resource_type: str
    resource_group: str
    category_name: str
    category_type: str
    log_analytics_table: str
    enabled: bool
    resource_id: str

    def as_row(self) -> list[str]:
        return [
            self.subscription_name,
            self.subscription_id,
            self.resource_name,
            self.resource_type,
            self.resource_group,
            self.category_name,
            self.category_type,
            self.log_analytics_table,
            "True" if self.enabled else "False",
            self.resource_id,
        ]


def write_report(rows: Iterable[ReportRow], path: Path, *, delimiter: str = ",") -> int:
    """Write ``rows`` as delimited text with a header; return the row count."""

    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle, delimiter=delimiter)
        writer.writerow(REPORT_COLUMNS)
        for row in rows:
            writer.writerow(row.as_row())
            count += 1
    return count


__all__ = ["REPORT_COLUMNS", "ReportRow", "write_report"]
