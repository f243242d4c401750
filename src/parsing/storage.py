"""Persistence helpers for extracted documentation structure artifacts."""

from __future__ import annotations

import json
from pathlib import Path

from . import utils
from .base import DocumentStructure, ParserError

_DEFAULT_ARTIFACT = "tables-by-category.json"


class StructureStorage:
    """Read and write the ordered structure artifact under ``root``."""

    def __init__(self, root: Path, *, artifact_filename: str = _DEFAULT_ARTIFACT) -> None:
        self.root = Path(root)
        self.root = self.root if self.root.is_absolute() else self.root.resolve()
        self._artifact_filename = artifact_filename

    @property
    def artifact_path(self) -> Path:
        return self.root / self._artifact_filename

    def save(self, structure: DocumentStructure, path: Path | None = None) -> Path:
        """Write ``structure`` as JSON, keeping document order for every mapping."""

        target = Path(path) if path is not None else self.artifact_path
        utils.ensure_directory(target.parent)
        payload = structure.to_dict()
        tmp_path = target.with_name(target.name + ".tmp")
        # sort_keys stays off: key order is the documentation order.
        tmp_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp_path.replace(target)
        return target

    def load(self, path: Path | None = None) -> DocumentStructure:
        source = Path(path) if path is not None else self.artifact_path
        if not source.exists():
            raise FileNotFoundError(f"Structure artifact '{source}' does not exist")
        try:
            raw = json.loads(source.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ParserError(f"Structure artifact '{source}' is not valid JSON: {exc}") from exc
        if not isinstance(raw, dict) or not isinstance(raw.get("Categories"), dict):
            raise ParserError(f"Structure artifact '{source}' has no Categories mapping")
        return DocumentStructure.from_dict(raw)


__all__ = ["StructureStorage"]
