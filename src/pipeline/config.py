"""Configuration helpers for documentation mapping runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from src import paths
from src.parsing.fetcher import DEFAULT_USER_AGENT, FetchPolicy
from src.inventory.classify import PacingPolicy

DEFAULT_BASE_URL = "https://learn.microsoft.com/en-us/azure/azure-monitor/reference/tables-category"
_DEFAULT_OUTPUT_ROOT = paths.get_output_root()
_DEFAULT_CACHE_PATH = paths.get_cache_root() / "resource-type-tables.json"
_DEFAULT_CONFIG_PATH = paths.get_config_file()


class ConfigError(ValueError):
    """Raised when a configuration value has the wrong shape."""


@dataclass(slots=True)
class DocsConfig:
    base_url: str = DEFAULT_BASE_URL
    list_urls: tuple[str, ...] = ()
    category_filter: str | None = None


@dataclass(slots=True)
class FetchConfig:
    max_attempts: int = 3
    backoff_seconds: float = 2.0
    min_content_length: int = 1000
    request_delay_ms: int = 500
    timeout_seconds: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT

    def to_policy(self) -> FetchPolicy:
        return FetchPolicy(
            max_attempts=self.max_attempts,
            backoff_seconds=self.backoff_seconds,
            min_content_length=self.min_content_length,
            request_delay_seconds=self.request_delay_ms / 1000.0,
            timeout_seconds=self.timeout_seconds,
            user_agent=self.user_agent,
        )


@dataclass(slots=True)
class CacheConfig:
    path: Path = field(default_factory=lambda: _DEFAULT_CACHE_PATH.resolve())
    ttl_hours: float = 24.0
    force_refresh: bool = False


@dataclass(slots=True)
class PacingConfig:
    resource_delay_ms: int = 0
    category_delay_ms: int = 0

    def to_policy(self) -> PacingPolicy:
        return PacingPolicy(
            resource_delay_seconds=self.resource_delay_ms / 1000.0,
            category_delay_seconds=self.category_delay_ms / 1000.0,
        )


@dataclass(slots=True)
class TableMapConfig:
    output_root: Path
    docs: DocsConfig = field(default_factory=DocsConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    pacing: PacingConfig = field(default_factory=PacingConfig)

    @classmethod
    def default(cls) -> "TableMapConfig":
        return cls(output_root=_resolve_path(_DEFAULT_OUTPUT_ROOT, base=None))

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any], *, base_path: Path | None) -> "TableMapConfig":
        output_value = payload.get("output_root")
        if output_value is None:
            output_root = _resolve_path(_DEFAULT_OUTPUT_ROOT, base=base_path)
        else:
            output_root = _resolve_path(Path(str(output_value)), base=base_path)

        return cls(
            output_root=output_root,
            docs=_build_docs_config(_section(payload, "docs")),
            fetch=_build_fetch_config(_section(payload, "fetch")),
            cache=_build_cache_config(_section(payload, "cache"), base_path=base_path),
            pacing=_build_pacing_config(_section(payload, "pacing")),
        )


def load_config(config_path: Path | None) -> TableMapConfig:
    """Load configuration from YAML or fallback to defaults."""

    if config_path is not None:
        resolved = Path(config_path).expanduser()
        if not resolved.exists():
            raise FileNotFoundError(f"Config '{resolved}' does not exist")
        return _load_file(resolved)

    default_path = _DEFAULT_CONFIG_PATH
    if default_path.exists():
        return _load_file(default_path)

    return TableMapConfig.default()


def _load_file(path: Path) -> TableMapConfig:
    raw = path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config '{path}' is not valid YAML: {exc}") from exc
    if not isinstance(data, Mapping):
        raise ConfigError("Config must be a mapping")
    return TableMapConfig.from_dict(data, base_path=path.parent)


def _section(payload: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = payload.get(name) or {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"Config section '{name}' must be a mapping")
    return value


def _build_docs_config(payload: Mapping[str, Any]) -> DocsConfig:
    list_urls = payload.get("list_urls") or ()
    if isinstance(list_urls, str):
        list_urls = [list_urls]
    category_filter = payload.get("category_filter")
    return DocsConfig(
        base_url=str(payload.get("base_url") or DEFAULT_BASE_URL),
        list_urls=tuple(dict.fromkeys(str(url).strip() for url in list_urls if str(url).strip())),
        category_filter=str(category_filter) if category_filter else None,
    )


def _build_fetch_config(payload: Mapping[str, Any]) -> FetchConfig:
    defaults = FetchConfig()
    config = FetchConfig(
        max_attempts=_number(payload, "max_attempts", defaults.max_attempts, int),
        backoff_seconds=_number(payload, "backoff_seconds", defaults.backoff_seconds, float),
        min_content_length=_number(payload, "min_content_length", defaults.min_content_length, int),
        request_delay_ms=_number(payload, "request_delay_ms", defaults.request_delay_ms, int),
        timeout_seconds=_number(payload, "timeout_seconds", defaults.timeout_seconds, float),
        user_agent=str(payload.get("user_agent") or defaults.user_agent),
    )
    if config.max_attempts < 1:
        raise ConfigError("fetch.max_attempts must be at least 1")
    return config


def _build_cache_config(payload: Mapping[str, Any], *, base_path: Path | None) -> CacheConfig:
    path_value = payload.get("path")
    path = (
        _resolve_path(Path(str(path_value)), base=base_path)
        if path_value
        else _resolve_path(_DEFAULT_CACHE_PATH, base=base_path)
    )
    ttl_hours = _number(payload, "ttl_hours", 24.0, float)
    if ttl_hours < 0:
        raise ConfigError("cache.ttl_hours must be non-negative")
    return CacheConfig(path=path, ttl_hours=ttl_hours, force_refresh=bool(payload.get("force_refresh", False)))


def _build_pacing_config(payload: Mapping[str, Any]) -> PacingConfig:
    return PacingConfig(
        resource_delay_ms=_number(payload, "resource_delay_ms", 0, int),
        category_delay_ms=_number(payload, "category_delay_ms", 0, int),
    )


def _number(payload: Mapping[str, Any], key: str, default: Any, kind: type) -> Any:
    value = payload.get(key)
    if value is None:
        return default
    try:
        number = kind(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Config value '{key}' must be a number") from exc
    if number < 0:
        raise ConfigError(f"Config value '{key}' must be non-negative")
    return number


def _resolve_path(path: Path, *, base: Path | None) -> Path:
    candidate = path.expanduser()
    if candidate.is_absolute() or base is None:
        return candidate.resolve()
    return (base / candidate).resolve()


__all__ = [
    "CacheConfig",
    "ConfigError",
    "DEFAULT_BASE_URL",
    "DocsConfig",
    "FetchConfig",
    "PacingConfig",
    "TableMapConfig",
    "load_config",
]
