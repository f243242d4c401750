"""Rate-limited, retrying download of documentation pages."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import requests

from . import utils
from .base import FetchError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "tablemap-docs-fetcher/1.0"


@dataclass(slots=True)
class FetchPolicy:
    """Retry and pacing configuration for documentation downloads."""

    max_attempts: int = 3
    backoff_seconds: float = 2.0
    min_content_length: int = 1000  # shorter bodies are treated as truncated
    request_delay_seconds: float = 0.5
    timeout_seconds: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT


@dataclass(slots=True)
class FetchResult:
    source: str
    content: str
    attempts: int
    status_code: int | None = None
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class DocumentFetcher:
    """Fetch documentation markup over HTTP(S) or from a saved local file."""

    def __init__(
        self,
        policy: FetchPolicy | None = None,
        *,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.policy = policy or FetchPolicy()
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": self.policy.user_agent})
        self._sleep = sleep

    def load(self, source: str | Path) -> FetchResult:
        """Return markup for ``source``, dispatching on URL versus file path."""

        source_str = str(source)
        if utils.is_http_url(source_str):
            return self.fetch(source_str)

        path = Path(source_str).expanduser()
        if not path.exists():
            raise FetchError(f"Documentation source '{path}' does not exist")
        content = path.read_text(encoding="utf-8")
        return FetchResult(source=str(path.resolve()), content=content, attempts=1)

    def fetch(self, url: str) -> FetchResult:
        """GET ``url`` with bounded retries; raise ``FetchError`` when all attempts fail."""

        policy = self.policy
        attempts = max(1, policy.max_attempts)
        last_error: str | None = None

        for attempt in range(1, attempts + 1):
            if attempt > 1:
                logger.warning(
                    "Retrying %s in %.1fs (attempt %s/%s): %s",
                    url,
                    policy.backoff_seconds,
                    attempt,
                    attempts,
                    last_error,
                )
                self._sleep(policy.backoff_seconds)

            try:
                response = self.session.get(url, timeout=policy.timeout_seconds)
            except requests.RequestException as exc:
                last_error = f"request_error:{exc}"
                continue

            if response.status_code != 200:
                last_error = f"http_status={response.status_code}"
                continue

            content = response.text or ""
            if len(content) < policy.min_content_length:
                last_error = f"truncated_content={len(content)} chars"
                continue

            logger.info("Fetched %s (%s chars, attempt %s)", url, len(content), attempt)
            if policy.request_delay_seconds > 0:
                self._sleep(policy.request_delay_seconds)
            return FetchResult(
                source=url,
                content=content,
                attempts=attempt,
                status_code=response.status_code,
            )

        raise FetchError(f"Failed to fetch {url} after {attempts} attempt(s): {last_error or 'unavailable'}")


__all__ = ["DEFAULT_USER_AGENT", "DocumentFetcher", "FetchPolicy", "FetchResult"]
