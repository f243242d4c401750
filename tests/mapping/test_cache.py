from __future__ import annotations

import json
import os
import time

from src.mapping.cache import MappingCache
from src.mapping.index import MappingIndex
from src.parsing.validation import DiagnosticLog


def _write(path, payload) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")


def _age(path, hours: float) -> None:
    stamp = time.time() - hours * 3600
    os.utime(path, (stamp, stamp))


def test_save_then_load(tmp_path) -> None:
    cache = MappingCache(tmp_path / "nested" / "cache.json")
    index = MappingIndex({"Microsoft.KeyVault/vaults": ["KeyVaultLogs", "AzureDiagnostics"]})

    cache.save(index)
    loaded = cache.load()

    assert loaded == index
    assert loaded.get("Microsoft.KeyVault/vaults") == ("AzureDiagnostics", "KeyVaultLogs")


def test_load_revalidates_table_names(tmp_path) -> None:
    path = tmp_path / "cache.json"
    _write(path, {"Microsoft.X/y": ["AB", "ValidTableName"], "Microsoft.Bad/only": ["12", "Q"]})
    diagnostics = DiagnosticLog()

    loaded = MappingCache(path, diagnostics=diagnostics).load()

    assert loaded.to_dict() == {"Microsoft.X/y": ["ValidTableName"]}
    assert diagnostics.counts() == {"invalid-table-name": 3, "resource-type-dropped": 1}


def test_missing_cache_is_a_miss(tmp_path) -> None:
    assert MappingCache(tmp_path / "absent.json").load() is None


def test_expired_cache_is_a_miss(tmp_path) -> None:
    path = tmp_path / "cache.json"
    _write(path, {"Microsoft.X/y": ["ValidTableName"]})
    _age(path, 30)
    diagnostics = DiagnosticLog()

    cache = MappingCache(path, ttl_hours=24, diagnostics=diagnostics)

    assert not cache.is_fresh()
    assert cache.load() is None
    assert diagnostics.counts() == {"cache-expired": 1}


def test_cache_within_custom_ttl_is_used(tmp_path) -> None:
    path = tmp_path / "cache.json"
    _write(path, {"Microsoft.X/y": ["ValidTableName"]})
    _age(path, 30)

    assert MappingCache(path, ttl_hours=48).load() is not None


def test_force_refresh_skips_fresh_cache(tmp_path) -> None:
    path = tmp_path / "cache.json"
    _write(path, {"Microsoft.X/y": ["ValidTableName"]})

    assert MappingCache(path).load(force_refresh=True) is None


def test_corrupt_cache_is_a_miss(tmp_path) -> None:
    path = tmp_path / "cache.json"
    path.write_text("{not json", encoding="utf-8")
    diagnostics = DiagnosticLog()

    assert MappingCache(path, diagnostics=diagnostics).load() is None
    assert diagnostics.counts() == {"cache-corrupt": 1}


def test_non_object_cache_is_a_miss(tmp_path) -> None:
    path = tmp_path / "cache.json"
    _write(path, ["Microsoft.X/y"])

    assert MappingCache(path).load() is None


def test_malformed_entries_are_skipped(tmp_path) -> None:
    path = tmp_path / "cache.json"
    _write(path, {"Microsoft.X/y": "ValidTableName", "Microsoft.Ok/z": ["GoodTable", 42]})
    diagnostics = DiagnosticLog()

    loaded = MappingCache(path, diagnostics=diagnostics).load()

    assert loaded.to_dict() == {"Microsoft.Ok/z": ["GoodTable"]}
    assert diagnostics.counts() == {"cache-corrupt": 1}
