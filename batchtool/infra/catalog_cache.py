"""
Catalog cache infrastructure for batch-tool.

Persists the fetched repository catalog as JSON with:
- A UTC ``updated_at`` timestamp checked against a TTL on load
- Atomic writes (write to temp, then rename)
- Automatic parent directory creation

File format:

    {
      "updated_at": "2024-01-01T00:00:00Z",
      "repositories": {"acme/web-app": {"name": "web-app", ...}}
    }
"""

import json
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple
import logging

from ..domain import Repository
from ..exceptions import CacheMissing, CacheCorrupt, CacheExpired, CacheWriteError

logger = logging.getLogger(__name__)

DEFAULT_CACHE_FILE = ".batch-tool-cache.json"

# Negative TTL used when flushing, so a record saved this instant is still expired
FLUSH_TTL = timedelta(microseconds=-1)


def resolve_cache_path(config: Mapping[str, Any]) -> Path:
    """
    Resolve the cache file location.

    An explicit ``repos.cache.path`` wins; otherwise the cache lives at
    ``<git.directory>/<git.host>/.batch-tool-cache.json``.
    """
    custom = config.get('repos', {}).get('cache', {}).get('path')
    if custom:
        return Path(custom).expanduser()

    git = config.get('git', {})
    return Path(git.get('directory') or os.getcwd()).expanduser() / git.get('host', '') / DEFAULT_CACHE_FILE


def format_timestamp(moment: datetime) -> str:
    """RFC 3339 timestamp in UTC with a ``Z`` suffix."""
    return moment.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp, treating naive values as UTC."""
    text = value.strip()
    if text.endswith('Z') or text.endswith('z'):
        text = text[:-1] + '+00:00'
    # Go writes nanoseconds; fromisoformat accepts at most microseconds
    if '.' in text:
        head, _, rest = text.partition('.')
        digits = len(rest) - len(rest.lstrip('0123456789'))
        fraction, tz = rest[:digits], rest[digits:]
        text = f"{head}.{fraction[:6].ljust(6, '0')}{tz}"
    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


class CatalogCache:
    """
    TTL-bounded on-disk snapshot of the repository catalog.

    Example:
        cache = CatalogCache(Path("~/src/github.com/.batch-tool-cache.json"))
        cache.save(catalog)
        updated_at, catalog = cache.load(timedelta(hours=24))
    """

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'CatalogCache':
        return cls(resolve_cache_path(config))

    def load(self, ttl: timedelta, now: Optional[datetime] = None) -> Tuple[datetime, Dict[str, Repository]]:
        """
        Read the cache file.

        Args:
            ttl: Maximum accepted age of the record
            now: Reference time (defaults to the current UTC time)

        Returns:
            (updated_at, repositories keyed by qualified name)

        Raises:
            CacheMissing: file missing or unreadable
            CacheCorrupt: content cannot be decoded
            CacheExpired: record older than ttl
        """
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                raw = f.read()
        except OSError as e:
            raise CacheMissing(
                f"local cache of repository catalog is missing or invalid - fetching remote info ({e.strerror or e})",
                self.path,
            ) from e

        try:
            data = json.loads(raw)
            updated_at = parse_timestamp(data['updated_at'])
            entries = data.get('repositories') or {}
            if not isinstance(entries, dict):
                raise ValueError("repositories is not an object")
            repositories = {key: Repository.from_dict(entry) for key, entry in entries.items()}
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise CacheCorrupt(f"local cache of repository catalog is corrupt: {e}", self.path) from e

        now = now or datetime.now(timezone.utc)
        if now - updated_at > ttl:
            raise CacheExpired(
                "local cache of repository catalog is too old - fetching remote info",
                self.path,
            )

        return updated_at, repositories

    def save(self, repositories: Mapping[str, Repository], now: Optional[datetime] = None) -> None:
        """
        Write the catalog with a fresh ``updated_at`` timestamp.

        Raises:
            CacheWriteError: directory or file could not be written
        """
        record = {
            'updated_at': format_timestamp(now or datetime.now(timezone.utc)),
            'repositories': {key: repo.to_dict() for key, repo in repositories.items()},
        }

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._write_atomic(record)
        except OSError as e:
            raise CacheWriteError(self.path, e) from e

        logger.debug(f"Saved {len(repositories)} repositories to {self.path}")

    def _write_atomic(self, data: Dict[str, Any]) -> None:
        """Write data atomically using temp file and rename."""
        fd, temp_path = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp"
        )

        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(temp_path, self.path)
        except OSError:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def flush(self) -> None:
        """
        Delete the cache file. A missing file is not an error.

        Raises:
            CacheWriteError: the file exists but could not be removed
        """
        try:
            self.path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise CacheWriteError(self.path, e) from e
        logger.debug(f"Removed repository cache {self.path}")

    def exists(self) -> bool:
        return self.path.exists()
