"""
CSV download helper shared by the data sources.

Downloads a CSV over HTTP with linear-backoff retries and parses it into a
pandas DataFrame.
"""

import asyncio
import logging
import time
from io import StringIO
from typing import Any, Awaitable, Callable, Hashable, Optional

import httpx
import pandas as pd

from goal_getter.domain.exceptions import DataSourceUnavailableException


logger = logging.getLogger(__name__)

CSV_HEADERS = {
    "Accept": "text/csv,text/plain,*/*",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


def add_cache_busting(url: str) -> str:
    """Append a timestamp query parameter so intermediaries don't serve stale files."""
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}_t={int(time.time() * 1000)}"


def read_csv_text(text: str) -> pd.DataFrame:
    """Parse CSV text, keeping every column as a string."""
    df = pd.read_csv(
        StringIO(text),
        dtype=str,
        keep_default_na=False,
        on_bad_lines="skip",
        skipinitialspace=True,
    )
    df.columns = [str(c).strip().strip('"') for c in df.columns]
    return df


async def fetch_csv_with_retry(
    client: httpx.AsyncClient,
    url: str,
    retries: int = 3,
    retry_delay: float = 1.0,
    timeout: float = 30.0,
) -> pd.DataFrame:
    """
    Download and parse a CSV file.

    Args:
        client: Shared HTTP client
        url: CSV location
        retries: Total number of attempts
        retry_delay: Base delay; attempt ``n`` waits ``retry_delay * n`` before retrying
        timeout: Per-request timeout in seconds

    Returns:
        Parsed DataFrame

    Raises:
        DataSourceUnavailableException: If every attempt fails
    """
    last_error: Optional[Exception] = None

    for attempt in range(1, retries + 1):
        try:
            response = await client.get(add_cache_busting(url), headers=CSV_HEADERS, timeout=timeout)
            response.raise_for_status()
            df = read_csv_text(response.text)
            logger.info(f"Downloaded {len(df)} rows from {url} (attempt {attempt})")
            return df
        except (httpx.HTTPError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            last_error = e
            logger.warning(f"Attempt {attempt} failed for {url}: {e}")
            if attempt < retries:
                await asyncio.sleep(retry_delay * attempt)

    raise DataSourceUnavailableException(
        f"Failed to fetch {url} after {retries} attempts: {last_error}"
    )


class DownloadCache:
    """
    Parsed downloads keyed by source, each kept for ``ttl`` seconds.

    Concurrent loads of one key share a single in-flight task. Failed
    downloads are not stored, so the next load tries again.
    """

    def __init__(self, ttl: float):
        self.ttl = ttl
        self._entries: dict[Hashable, tuple[Any, float]] = {}
        self._pending: dict[Hashable, asyncio.Task] = {}

    def get(self, key: Hashable) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, loaded_at = entry
        if time.monotonic() - loaded_at >= self.ttl:
            del self._entries[key]
            return None
        return value

    async def load(self, key: Hashable, download: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value for ``key``, downloading it at most once at a time."""
        value = self.get(key)
        if value is not None:
            return value

        task = self._pending.get(key)
        # Tasks from a closed loop cannot be awaited here
        if task is None or task.get_loop() is not asyncio.get_running_loop():
            task = asyncio.ensure_future(self._store(key, download))
            self._pending[key] = task
            task.add_done_callback(lambda done, key=key: self._release(key, done))
        else:
            logger.debug(f"Joining in-flight download for {key}")
        return await asyncio.shield(task)

    async def _store(self, key: Hashable, download: Callable[[], Awaitable[Any]]) -> Any:
        value = await download()
        self._entries[key] = (value, time.monotonic())
        return value

    def _release(self, key: Hashable, task: asyncio.Task) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]

    def clear(self) -> None:
        self._entries.clear()
