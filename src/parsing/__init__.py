"""Documentation fetching, structure extraction and table name validation."""

from .base import (
    UNCATEGORIZED,
    Category,
    DocumentStructure,
    FetchError,
    ParserError,
    ResourceProvider,
    TableRef,
)
from .fetcher import DocumentFetcher, FetchPolicy, FetchResult
from .storage import StructureStorage
from .structure import DocumentStructureExtractor, extract_categories, segment_headings
from .validation import Diagnostic, DiagnosticLog, filter_valid_tables, is_valid_table_name

__all__ = [
    "UNCATEGORIZED",
    "Category",
    "Diagnostic",
    "DiagnosticLog",
    "DocumentFetcher",
    "DocumentStructure",
    "DocumentStructureExtractor",
    "FetchError",
    "FetchPolicy",
    "FetchResult",
    "ParserError",
    "ResourceProvider",
    "StructureStorage",
    "TableRef",
    "extract_categories",
    "filter_valid_tables",
    "is_valid_table_name",
    "segment_headings",
]
