"""Resource inventory contract, snapshot source and report output."""

from .classify import PacingPolicy, classify_inventory, classify_subscription
from .models import AzureResource, DiagnosticCategory, InventoryError, ResourceInventory, Subscription
from .report import REPORT_COLUMNS, ReportRow, write_report
from .snapshot import SnapshotInventory

__all__ = [
    "AzureResource",
    "DiagnosticCategory",
    "InventoryError",
    "PacingPolicy",
    "REPORT_COLUMNS",
    "ReportRow",
    "ResourceInventory",
    "SnapshotInventory",
    "Subscription",
    "classify_inventory",
    "classify_subscription",
    "write_report",
]
