"""Time-limited on-disk cache for the resource type mapping."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

from src.parsing import utils
from src.parsing.validation import DiagnosticLog, filter_valid_tables

from .index import MappingIndex

logger = logging.getLogger(__name__)

DEFAULT_TTL_HOURS = 24.0


class MappingCache:
    """Load and save a :class:`MappingIndex` as a JSON object.

    The artifact's age comes from the file modification time. Every table
    name is re-validated on load, so a damaged cache only loses entries.
    """

    def __init__(
        self,
        path: Path,
        *,
        ttl_hours: float = DEFAULT_TTL_HOURS,
        diagnostics: DiagnosticLog | None = None,
    ) -> None:
        self.path = Path(path)
        self.ttl = timedelta(hours=ttl_hours)
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()

    def age(self) -> timedelta | None:
        if not self.path.exists():
            return None
        modified = datetime.fromtimestamp(self.path.stat().st_mtime, tz=timezone.utc)
        return datetime.now(timezone.utc) - modified

    def is_fresh(self) -> bool:
        age = self.age()
        return age is not None and age < self.ttl

    def load(self, *, force_refresh: bool = False) -> MappingIndex | None:
        """Return the cached index, or ``None`` on a miss."""

        if force_refresh:
            logger.info("Forced refresh requested; ignoring cache %s", self.path)
            return None

        age = self.age()
        if age is None:
            logger.info("No mapping cache at %s", self.path)
            return None
        if age >= self.ttl:
            self.diagnostics.add(
                "cache-expired",
                f"Cache {self.path} is {age.total_seconds() / 3600:.1f}h old (limit {self.ttl.total_seconds() / 3600:.1f}h)",
                path=str(self.path),
            )
            logger.info("Mapping cache %s expired", self.path)
            return None

        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            self._record_corrupt(f"unreadable: {exc}")
            return None
        if not isinstance(payload, dict):
            self._record_corrupt("top-level value is not an object")
            return None

        index = MappingIndex()
        for resource_type, tables in payload.items():
            if not isinstance(tables, list):
                self._record_corrupt(f"entry {resource_type!r} is not a list")
                continue
            names = [item for item in tables if isinstance(item, str)]
            valid = filter_valid_tables(names, diagnostics=self.diagnostics, resource_type=resource_type)
            if not valid:
                self.diagnostics.add(
                    "resource-type-dropped",
                    f"Dropped cached {resource_type}: no valid table names",
                    resource_type=resource_type,
                )
                continue
            index.set(resource_type, valid)

        logger.info("Loaded %s resource types from cache %s", len(index), self.path)
        return index

    def save(self, index: MappingIndex) -> Path:
        utils.ensure_directory(self.path.parent)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(index.to_dict(), indent=2, sort_keys=True), encoding="utf-8")
        tmp_path.replace(self.path)
        logger.info("Saved %s resource types to cache %s", len(index), self.path)
        return self.path

    def _record_corrupt(self, detail: str) -> None:
        logger.warning("Mapping cache %s is corrupt: %s", self.path, detail)
        self.diagnostics.add("cache-corrupt", f"Cache {self.path} {detail}", path=str(self.path))


__all__ = ["DEFAULT_TTL_HOURS", "MappingCache"]
