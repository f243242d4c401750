"""Resource type to log table mapping, caching and resolution."""

from .builder import KNOWN_TABLE_OVERRIDES, KeywordRule, MappingBuilder, build_mapping, infer_resource_type
from .cache import MappingCache
from .index import MappingIndex
from .resolver import METRICS_TABLE, MatchKind, ResolutionResult, TableResolver, UnknownReason

__all__ = [
    "KNOWN_TABLE_OVERRIDES",
    "KeywordRule",
    "METRICS_TABLE",
    "MappingBuilder",
    "MappingCache",
    "MappingIndex",
    "MatchKind",
    "ResolutionResult",
    "TableResolver",
    "UnknownReason",
    "build_mapping",
    "infer_resource_type",
]
