"""Run configuration and orchestration for documentation table mapping."""

from .config import ConfigError, TableMapConfig, load_config
from .run import (
    MappingOutcome,
    RunContext,
    build_fresh_mapping,
    create_resolver,
    extract_documentation,
    load_or_build_mapping,
)

__all__ = [
    "ConfigError",
    "MappingOutcome",
    "RunContext",
    "TableMapConfig",
    "build_fresh_mapping",
    "create_resolver",
    "extract_documentation",
    "load_config",
    "load_or_build_mapping",
]
