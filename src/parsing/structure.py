"""Turn a "tables by category" documentation page into an ordered category tree.

The page is parsed with BeautifulSoup and segmented into heading spans: each
``<h2>``..``<h6>`` element owns the nodes that follow it in document order up
to the next heading. Level-2 headings open categories, deeper headings open
resource providers inside the current category, and table links found in any
span are attached to the provider that most recently opened (or to the
category's ``Uncategorized`` bucket).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterator
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from . import utils
from .base import UNCATEGORIZED, Category, DocumentStructure, ResourceProvider, TableRef

logger = logging.getLogger(__name__)

HTML_PARSER = "html.parser"
HEADING_TAGS = ("h2", "h3", "h4", "h5", "h6")
MIN_HEADING_LENGTH = 3
MAX_HEADING_LENGTH = 100

_STRIPPED_TAGS = ("script", "style", "noscript", "template")
# Tried in order; the first container present becomes the content region.
_CONTENT_CONTAINERS: tuple[tuple[str, dict[str, str]], ...] = (
    ("main", {}),
    ("article", {}),
    ("div", {"class": "content"}),
)
RESOURCE_TYPE_PATTERN = re.compile(r"Microsoft\.[A-Za-z0-9]+(?:/[A-Za-z0-9]+)*", re.IGNORECASE)
_TABLE_HREF_PATTERN = re.compile(r"(?:[^#?]*/)?tables/[^#?]+")
_BRACKET_TABLE_PATTERN = re.compile(r"\[([^\]\[]+)\]\(\s*((?:[^)\s]*/)?tables/[^)\s]+)\s*\)")

NAVIGATION_HEADINGS = (
    "in this article",
    "feedback",
    "table of contents",
    "see also",
    "additional resources",
    "next steps",
    "related content",
    "related articles",
    "was this page helpful?",
    "submit and view feedback for",
)


@dataclass
class HeadingSpan:
    """One heading and the nodes that trail it up to the next heading."""

    level: int
    identifier: str
    text: str
    nodes: list[Tag | NavigableString] = field(default_factory=list)

    def tags(self, name: str) -> Iterator[Tag]:
        """Yield the ``name`` elements that start inside this span, in document order."""
        for node in self.nodes:
            if isinstance(node, Tag) and node.name == name:
                yield node

    @property
    def text_content(self) -> str:
        return "".join(str(node) for node in self.nodes if isinstance(node, NavigableString))


def parse_markup(markup: str) -> BeautifulSoup:
    """Parse ``markup`` and drop the parts that never carry documentation text."""

    return strip_scripts_and_styles(BeautifulSoup(markup, HTML_PARSER))


def strip_scripts_and_styles(soup: BeautifulSoup) -> BeautifulSoup:
    for tag in soup.find_all(_STRIPPED_TAGS):
        tag.decompose()
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()
    return soup


def select_content_region(soup: BeautifulSoup) -> tuple[Tag, bool]:
    """Return the primary content region and whether a container was recognised."""

    for name, attrs in _CONTENT_CONTAINERS:
        region = soup.find(name, attrs=attrs)
        if region is not None:
            return region, True
    return soup, False


def segment_headings(region: Tag) -> list[HeadingSpan]:
    """Split ``region`` into consecutive, non-overlapping heading spans.

    Every node after a heading belongs to that heading's span until the next
    heading starts, regardless of how the nodes are nested. Nodes before the
    first heading belong to no span.
    """

    spans: list[HeadingSpan] = []
    current: HeadingSpan | None = None
    inside_heading: set[int] = set()

    for node in region.descendants:
        if id(node) in inside_heading:
            continue
        if isinstance(node, Tag) and node.name in HEADING_TAGS:
            inside_heading = {id(child) for child in node.descendants}
            current = HeadingSpan(
                level=int(node.name[1]),
                identifier=str(node.get("id") or ""),
                text=utils.clean_html_text(node),
            )
            spans.append(current)
            continue
        if current is not None and isinstance(node, (Tag, NavigableString)):
            current.nodes.append(node)
    return spans


def is_navigation_heading(text: str) -> bool:
    lowered = text.strip().lower()
    return any(lowered == label or lowered.startswith(label + " ") for label in NAVIGATION_HEADINGS)


def find_resource_type(span: HeadingSpan) -> str:
    """Return the first paragraph that is exactly a ``Microsoft.X/y`` token, or an empty string."""

    for paragraph in span.tags("p"):
        text = utils.clean_html_text(paragraph)
        if RESOURCE_TYPE_PATTERN.fullmatch(text):
            return text
    return ""


def find_table_refs(span: HeadingSpan, *, base_url: str = "") -> list[TableRef]:
    """Collect table links: anchor-style first, then bracket-style, each in order found."""

    refs: list[TableRef] = []
    for anchor in span.tags("a"):
        match = _TABLE_HREF_PATTERN.match(str(anchor.get("href") or ""))
        if match:
            refs.append(_make_ref(utils.clean_html_text(anchor), match.group(0), base_url))
    for match in _BRACKET_TABLE_PATTERN.finditer(span.text_content):
        refs.append(_make_ref(utils.collapse_whitespace(match.group(1)), match.group(2), base_url))
    return refs


def _make_ref(name: str, href: str, base_url: str) -> TableRef:
    if not name:
        name = href.rstrip("/").rsplit("/", 1)[-1]
        if name.endswith(".md"):
            name = name[:-3]
    url = urljoin(base_url, href) if base_url else href
    return TableRef(table_name=name, url=url)


class DocumentStructureExtractor:
    """Build a :class:`DocumentStructure` from raw documentation markup."""

    def __init__(self, *, source_url: str = "") -> None:
        self.source_url = source_url

    def extract(self, markup: str, category_filter: str | None = None) -> DocumentStructure:
        structure = DocumentStructure(source_url=self.source_url, category_filter=category_filter or None)

        region, recognised = select_content_region(parse_markup(markup))
        if not recognised:
            logger.debug("No content container found in %s; scanning whole document", self.source_url or "markup")

        current_category: Category | None = None
        current_provider: ResourceProvider | None = None

        for span in segment_headings(region):
            heading = span.text
            if is_navigation_heading(heading):
                continue
            if not MIN_HEADING_LENGTH <= len(heading) <= MAX_HEADING_LENGTH:
                continue

            if span.level == 2:
                name = utils.normalize_section_name(heading)
                current_provider = None
                if category_filter and name != category_filter:
                    current_category = None
                    continue
                current_category = structure.category(name)
            elif current_category is not None:
                current_provider = current_category.provider(utils.normalize_section_name(heading))

            if current_category is None:
                continue

            refs = find_table_refs(span, base_url=self.source_url)
            if not refs:
                continue

            target = current_provider or current_category.provider(UNCATEGORIZED)
            target.add_tables(refs)
            resource_type = find_resource_type(span)
            if resource_type:
                target.resource_type = resource_type

        stats = structure.statistics()
        logger.info(
            "Extracted %s categories, %s providers, %s tables",
            stats["categories"],
            stats["providers"],
            stats["tables"],
        )
        return structure


def extract_categories(
    markup: str,
    category_filter: str | None = None,
    *,
    source_url: str = "",
) -> list[Category]:
    """Return the ordered categories found in ``markup``."""

    extractor = DocumentStructureExtractor(source_url=source_url)
    structure = extractor.extract(markup, category_filter)
    return list(structure.categories.values())


__all__ = [
    "DocumentStructureExtractor",
    "HTML_PARSER",
    "HeadingSpan",
    "NAVIGATION_HEADINGS",
    "RESOURCE_TYPE_PATTERN",
    "extract_categories",
    "find_resource_type",
    "find_table_refs",
    "is_navigation_heading",
    "parse_markup",
    "segment_headings",
    "select_content_region",
    "strip_scripts_and_styles",
]
