"""Tests for classifying an inventory snapshot into report rows."""

from __future__ import annotations

import csv
import json

import pytest

from src.inventory import (
    REPORT_COLUMNS,
    InventoryError,
    PacingPolicy,
    SnapshotInventory,
    classify_inventory,
    write_report,
)
from src.mapping.index import MappingIndex
from src.mapping.resolver import TableResolver

VAULT_ID = "/subscriptions/sub-1/resourceGroups/rg-sec/providers/Microsoft.KeyVault/vaults/kv-prod"
ACCOUNT_ID = "/subscriptions/sub-1/resourceGroups/rg-data/providers/Microsoft.Storage/storageAccounts/stprod"
QUIET_ID = "/subscriptions/sub-1/resourceGroups/rg-misc/providers/Microsoft.Network/publicIPAddresses/pip"
UNLISTED_ID = "/subscriptions/sub-2/resourceGroups/rg-x/providers/Microsoft.Unlisted/things/thing"


def _snapshot() -> dict:
    return {
        "subscriptions": [
            {
                "id": "sub-1",
                "name": "Production",
                "resources": [
                    {
                        "ResourceId": VAULT_ID,
                        "Name": "kv-prod",
                        "ResourceType": "Microsoft.KeyVault/vaults",
                        "ResourceGroup": "rg-sec",
                        "DiagnosticCategories": [
                            {"Name": "AuditEvent", "CategoryType": "Logs"},
                            {"Name": "AllMetrics", "CategoryType": "Metrics"},
                        ],
                        "EnabledCategories": ["AuditEvent"],
                    },
                    {
                        "ResourceId": QUIET_ID,
                        "Name": "pip",
                        "ResourceType": "Microsoft.Network/publicIPAddresses",
                        "ResourceGroup": "rg-misc",
                    },
                    {
                        "ResourceId": ACCOUNT_ID,
                        "Name": "stprod",
                        "ResourceType": "Microsoft.Storage/storageAccounts",
                        "ResourceGroup": "rg-data",
                        "DiagnosticCategories": [{"Name": "Blob", "CategoryType": "Logs"}],
                    },
                ],
            },
            {
                "id": "sub-2",
                "name": "Sandbox",
                "resources": [
                    {
                        "ResourceId": UNLISTED_ID,
                        "Name": "thing",
                        "ResourceType": "Microsoft.Unlisted/things",
                        "DiagnosticCategories": [{"Name": "Everything", "CategoryType": "Logs"}],
                    }
                ],
            },
        ]
    }


@pytest.fixture
def resolver() -> TableResolver:
    index = MappingIndex(
        {
            "Microsoft.KeyVault/vaults": ["AZKVAuditLogs", "AuditEvent"],
            "microsoft.storage/storageaccounts": ["StorageBlobLogs", "StorageQueueLogs"],
        }
    )
    return TableResolver(index)


class _SleepRecorder:
    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def test_classify_produces_one_row_per_category(resolver) -> None:
    rows = classify_inventory(SnapshotInventory(_snapshot()), resolver)

    assert [(row.resource_name, row.category_name, row.log_analytics_table, row.enabled) for row in rows] == [
        ("kv-prod", "AuditEvent", "AuditEvent", True),
        ("kv-prod", "AllMetrics", "AzureMetrics", False),
        ("stprod", "Blob", "StorageBlobLogs", False),
        ("thing", "Everything", "Unknown (resourceType not documented)", False),
    ]
    assert rows[0].subscription_name == "Production"
    assert rows[-1].resource_group == ""


def test_classify_filters_by_subscription_id_or_name(resolver) -> None:
    inventory = SnapshotInventory(_snapshot())

    by_name = classify_inventory(inventory, resolver, subscription_ids=["Sandbox"])
    by_id = classify_inventory(inventory, resolver, subscription_ids=["sub-1"])

    assert {row.subscription_id for row in by_name} == {"sub-2"}
    assert {row.subscription_id for row in by_id} == {"sub-1"}


def test_pacing_between_resources_and_before_enabled_lookup(resolver) -> None:
    sleep = _SleepRecorder()
    pacing = PacingPolicy(resource_delay_seconds=0.5, category_delay_seconds=0.1)

    classify_inventory(SnapshotInventory(_snapshot()), resolver, subscription_ids=["sub-1"], pacing=pacing, sleep=sleep)

    # kv-prod: category pause; pip: resource pause only; stprod: both.
    assert sleep.calls == [0.1, 0.5, 0.5, 0.1]


def test_snapshot_schema_errors_name_the_location() -> None:
    payload = _snapshot()
    payload["subscriptions"][0]["resources"][0]["DiagnosticCategories"][0]["CategoryType"] = "Traces"

    with pytest.raises(InventoryError) as excinfo:
        SnapshotInventory(payload)

    assert "subscriptions/0/resources/0/DiagnosticCategories/0/CategoryType" in str(excinfo.value)


def test_snapshot_from_path(tmp_path) -> None:
    path = tmp_path / "inventory.json"
    path.write_text(json.dumps(_snapshot()), encoding="utf-8")

    inventory = SnapshotInventory.from_path(path)

    assert [subscription.name for subscription in inventory.list_subscriptions()] == ["Production", "Sandbox"]
    assert inventory.list_enabled_categories(VAULT_ID) == ["AuditEvent"]
    assert inventory.list_diagnostic_categories(QUIET_ID) == []


def test_snapshot_from_missing_or_broken_path(tmp_path) -> None:
    with pytest.raises(InventoryError):
        SnapshotInventory.from_path(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(InventoryError):
        SnapshotInventory.from_path(broken)


def test_write_report_uses_fixed_column_order(tmp_path, resolver) -> None:
    rows = classify_inventory(SnapshotInventory(_snapshot()), resolver)
    path = tmp_path / "reports" / "tables.csv"

    written = write_report(rows, path)

    with path.open(newline="", encoding="utf-8") as handle:
        lines = list(csv.reader(handle))
    assert written == 4
    assert tuple(lines[0]) == REPORT_COLUMNS
    assert lines[1] == [
        "Production",
        "sub-1",
        "kv-prod",
        "Microsoft.KeyVault/vaults",
        "rg-sec",
        "AuditEvent",
        "Logs",
        "AuditEvent",
        "True",
        VAULT_ID,
    ]


def test_write_report_with_custom_delimiter(tmp_path, resolver) -> None:
    rows = classify_inventory(SnapshotInventory(_snapshot()), resolver, subscription_ids=["sub-2"])
    path = tmp_path / "tables.tsv"

    write_report(rows, path, delimiter="\t")

    header, row = path.read_text(encoding="utf-8").splitlines()
    assert header.split("\t")[0] == "SubscriptionName"
    assert row.split("\t")[7] == "Unknown (resourceType not documented)"
