"""Core parsing interfaces and data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable

UNCATEGORIZED = "Uncategorized"


class ParserError(RuntimeError):
    """Raised when documentation markup cannot be turned into a category tree."""


class FetchError(ParserError):
    """Raised when every attempt to download a documentation page failed."""


@dataclass(frozen=True)
class TableRef:
    """A table link found under a resource provider."""

    table_name: str
    url: str

    def to_dict(self) -> dict[str, str]:
        return {"TableName": self.table_name, "Url": self.url}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "TableRef":
        return cls(table_name=str(payload.get("TableName", "")), url=str(payload.get("Url", "")))


@dataclass(slots=True)
class ResourceProvider:
    """A provider heading and everything attached to it in document order."""

    name: str
    resource_type: str = ""
    tables: list[TableRef] = field(default_factory=list)

    def add_tables(self, items: Iterable[TableRef]) -> None:
        self.tables.extend(items)

    def table_names(self) -> list[str]:
        return [table.table_name for table in self.tables]

    def to_dict(self) -> dict[str, Any]:
        return {
            "ResourceType": self.resource_type,
            "Tables": [table.to_dict() for table in self.tables],
        }


@dataclass(slots=True)
class Category:
    """A level-2 documentation section owning its providers by name."""

    name: str
    providers: dict[str, ResourceProvider] = field(default_factory=dict)

    def provider(self, name: str) -> ResourceProvider:
        """Return the provider called ``name``, creating it on first use."""
        existing = self.providers.get(name)
        if existing is None:
            existing = ResourceProvider(name=name)
            self.providers[name] = existing
        return existing

    def to_dict(self) -> dict[str, Any]:
        return {name: provider.to_dict() for name, provider in self.providers.items()}


@dataclass(slots=True)
class DocumentStructure:
    """Ordered Category -> ResourceProvider tree extracted from one page."""

    source_url: str
    categories: dict[str, Category] = field(default_factory=dict)
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    category_filter: str | None = None

    def category(self, name: str) -> Category:
        existing = self.categories.get(name)
        if existing is None:
            existing = Category(name=name)
            self.categories[name] = existing
        return existing

    def providers(self) -> Iterable[tuple[Category, ResourceProvider]]:
        for category in self.categories.values():
            for provider in category.providers.values():
                yield category, provider

    def statistics(self) -> dict[str, int]:
        providers = [provider for _category, provider in self.providers()]
        return {
            "categories": len(self.categories),
            "providers": len(providers),
            "tables": sum(len(provider.tables) for provider in providers),
            "providers_without_resource_type": sum(
                1 for provider in providers if not provider.resource_type
            ),
        }

    def is_empty(self) -> bool:
        return not self.categories

    def is_partial(self) -> bool:
        """True when only the category named by ``category_filter`` was extracted."""
        return bool(self.category_filter)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "GeneratedDate": self.generated_at.isoformat(),
            "SourceUrl": self.source_url,
            "DocumentationOrderPreserved": True,
        }
        if self.category_filter:
            payload["CategoryFilter"] = self.category_filter
        payload["Categories"] = {name: category.to_dict() for name, category in self.categories.items()}
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "DocumentStructure":
        generated_raw = payload.get("GeneratedDate")
        generated_at = (
            datetime.fromisoformat(generated_raw)
            if isinstance(generated_raw, str) and generated_raw
            else datetime.now(timezone.utc)
        )
        category_filter = payload.get("CategoryFilter")
        structure = cls(
            source_url=str(payload.get("SourceUrl", "")),
            generated_at=generated_at,
            category_filter=str(category_filter) if category_filter else None,
        )
        for category_name, providers in (payload.get("Categories") or {}).items():
            category = structure.category(category_name)
            for provider_name, body in (providers or {}).items():
                provider = category.provider(provider_name)
                provider.resource_type = str(body.get("ResourceType") or "")
                provider.add_tables(TableRef.from_dict(item) for item in body.get("Tables") or [])
        return structure
