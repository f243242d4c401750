from __future__ import annotations

from src.mapping.index import MappingIndex


def test_set_sorts_and_deduplicates() -> None:
    index = MappingIndex()
    index.set("Microsoft.Web/sites", ["AppServiceHTTPLogs", "AppServiceAppLogs", "AppServiceHTTPLogs"])

    assert index.get("Microsoft.Web/sites") == ("AppServiceAppLogs", "AppServiceHTTPLogs")
    assert index.table_count() == 2


def test_lookup_falls_back_to_case_insensitive_key() -> None:
    index = MappingIndex({"microsoft.storage/storageaccounts": ["StorageBlobLogs"]})

    assert index.get("Microsoft.Storage/storageAccounts") is None
    assert index.lookup("Microsoft.Storage/storageAccounts") == ("StorageBlobLogs",)
    assert "MICROSOFT.STORAGE/STORAGEACCOUNTS" in index
    assert index.lookup("Microsoft.Storage/other") is None


def test_exact_key_wins_over_folded_key() -> None:
    index = MappingIndex({"Microsoft.X/y": ["FirstTable"], "microsoft.x/y": ["SecondTable"]})

    assert index.lookup("microsoft.x/y") == ("SecondTable",)
    assert index.lookup("MICROSOFT.X/Y") == ("FirstTable",)


def test_to_dict_is_sorted_by_resource_type() -> None:
    index = MappingIndex({"Microsoft.Web/sites": ["AppServiceAppLogs"], "Microsoft.Cache/redis": ["ACRConnectedClientList"]})

    assert list(index.to_dict()) == ["Microsoft.Cache/redis", "Microsoft.Web/sites"]
    assert index.resource_types() == ["Microsoft.Web/sites", "Microsoft.Cache/redis"]
    assert repr(index) == "MappingIndex(2 resource types, 2 tables)"
