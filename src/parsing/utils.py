"""Utility helpers shared across parsing components."""

from __future__ import annotations

import re
from pathlib import Path
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

_SECTION_SUFFIX_PATTERN = re.compile(r"\s+(?:tables?|logs?)\s*$", re.IGNORECASE)


def ensure_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def collapse_whitespace(value: str) -> str:
    """Join whitespace runs (non-breaking spaces included) into single spaces."""

    return " ".join(value.split())


def clean_html_text(fragment: str | Tag) -> str:
    """Return the visible text of a tag or markup fragment with entities decoded."""

    if not isinstance(fragment, Tag):
        fragment = BeautifulSoup(fragment, "html.parser")
    return collapse_whitespace(fragment.get_text())


def normalize_section_name(value: str) -> str:
    """Drop a trailing "table(s)" or "log(s)" word from a heading name."""

    return _SECTION_SUFFIX_PATTERN.sub("", value.strip()).strip()


def is_http_url(value: str) -> bool:
    """Return ``True`` when ``value`` looks like an HTTP or HTTPS URL."""

    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)
