"""High-level orchestration: fetch -> extract -> build -> cache -> resolve."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from src.mapping.builder import build_mapping
from src.mapping.cache import MappingCache
from src.mapping.index import MappingIndex
from src.mapping.resolver import TableResolver
from src.parsing import utils
from src.parsing.base import DocumentStructure, ParserError
from src.parsing.fetcher import DocumentFetcher
from src.parsing.structure import DocumentStructureExtractor
from src.parsing.validation import DiagnosticLog

from .config import TableMapConfig

logger = logging.getLogger(__name__)

SOURCE_CACHE = "cache"
SOURCE_FRESH = "fresh"


@dataclass(slots=True)
class RunContext:
    """State owned by a single run: configuration, fetcher and diagnostics."""

    config: TableMapConfig
    fetcher: DocumentFetcher
    diagnostics: DiagnosticLog = field(default_factory=DiagnosticLog)

    @classmethod
    def create(cls, config: TableMapConfig, *, fetcher: DocumentFetcher | None = None) -> "RunContext":
        return cls(config=config, fetcher=fetcher or DocumentFetcher(config.fetch.to_policy()))

    def cache(self) -> MappingCache:
        return MappingCache(
            self.config.cache.path,
            ttl_hours=self.config.cache.ttl_hours,
            diagnostics=self.diagnostics,
        )


@dataclass(slots=True)
class MappingOutcome:
    index: MappingIndex
    source: str
    structure: DocumentStructure | None = None
    cache_path: Path | None = None


def extract_documentation(
    context: RunContext,
    source: str | Path | None = None,
    *,
    category_filter: str | None = None,
    apply_configured_filter: bool = True,
) -> DocumentStructure:
    """Fetch the documentation page and extract its category tree.

    ``category_filter`` falls back to ``docs.category_filter`` unless
    ``apply_configured_filter`` is off. Raises ``FetchError`` when every
    download attempt fails and ``ParserError`` when the page yields no
    categories.
    """

    docs = context.config.docs
    if category_filter is None and apply_configured_filter:
        category_filter = docs.category_filter
    target = str(source) if source is not None else docs.base_url
    fetched = context.fetcher.load(target)
    link_base = fetched.source if utils.is_http_url(fetched.source) else docs.base_url

    extractor = DocumentStructureExtractor(source_url=link_base)
    structure = extractor.extract(fetched.content, category_filter)
    if structure.is_empty():
        raise ParserError(f"No categories extracted from {target}")
    return structure


def build_fresh_mapping(
    context: RunContext,
    structure: DocumentStructure | None = None,
    *,
    source: str | Path | None = None,
) -> MappingOutcome:
    if structure is None:
        # The index is shared by every run, so it is always built from the whole page.
        structure = extract_documentation(context, source, apply_configured_filter=False)

    list_documents: list[str] = []
    for url in context.config.docs.list_urls:
        list_documents.append(context.fetcher.load(url).content)

    index = build_mapping(structure, list_documents=list_documents, diagnostics=context.diagnostics)
    return MappingOutcome(index=index, source=SOURCE_FRESH, structure=structure)


def load_or_build_mapping(
    context: RunContext,
    *,
    force_refresh: bool | None = None,
    structure: DocumentStructure | None = None,
    source: str | Path | None = None,
) -> MappingOutcome:
    """Return the cached mapping when fresh, otherwise rebuild and rewrite the cache.

    A ``structure`` passed in (for example one loaded from a saved artifact)
    always triggers a rebuild from that tree. A tree extracted with a
    category filter is never written to the shared cache.
    """

    cache = context.cache()
    if structure is None:
        refresh = context.config.cache.force_refresh if force_refresh is None else force_refresh
        cached = cache.load(force_refresh=refresh)
        if cached:
            return MappingOutcome(index=cached, source=SOURCE_CACHE, cache_path=cache.path)

    outcome = build_fresh_mapping(context, structure, source=source)
    if outcome.structure is not None and outcome.structure.is_partial():
        logger.warning(
            "Structure was extracted with category filter %r; not caching a partial mapping",
            outcome.structure.category_filter,
        )
        context.diagnostics.add(
            "cache-skipped",
            f"Mapping built from category {outcome.structure.category_filter!r} only; cache left unchanged",
            category_filter=outcome.structure.category_filter,
        )
        return outcome
    outcome.cache_path = cache.save(outcome.index)
    return outcome


def create_resolver(context: RunContext, index: MappingIndex) -> TableResolver:
    return TableResolver(index, diagnostics=context.diagnostics)


__all__ = [
    "MappingOutcome",
    "RunContext",
    "SOURCE_CACHE",
    "SOURCE_FRESH",
    "build_fresh_mapping",
    "create_resolver",
    "extract_documentation",
    "load_or_build_mapping",
]
