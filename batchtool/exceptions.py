"""
Exception hierarchy for batch-tool.

Cache read problems (CacheMissing, CacheCorrupt, CacheExpired) are recovered
by falling back to a live fetch. Fetch and cache write problems propagate
to the caller with the failing project or path attached.
"""

from pathlib import Path
from typing import Optional


class BatchToolError(Exception):
    """Base class for all batch-tool errors."""


class CatalogError(BatchToolError):
    """Base class for repository catalog errors."""


class CacheError(CatalogError):
    """The on-disk catalog cache could not be used."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class CacheMissing(CacheError):
    """The cache file does not exist or cannot be opened."""


class CacheCorrupt(CacheError):
    """The cache file exists but its content cannot be decoded."""


class CacheExpired(CacheError):
    """The cache file is older than the configured TTL."""


class CacheWriteError(CatalogError):
    """The cache file (or its directory) could not be written."""

    def __init__(self, path: Path, cause: Exception):
        super().__init__(f"failed to write repository cache {path}: {cause}")
        self.path = path
        self.cause = cause


class ProviderFetchError(CatalogError):
    """Listing repositories for a project failed."""

    def __init__(self, project: str, cause: Exception):
        super().__init__(f"failed to fetch repositories from project {project}: {cause}")
        self.project = project
        self.cause = cause


class FetchCancelled(CatalogError):
    """A catalog fetch was cancelled by the caller."""


class ProviderError(BatchToolError):
    """An SCM provider request failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UnregisteredProvider(BatchToolError):
    """No provider factory is registered under the requested name."""

    def __init__(self, name: str):
        super().__init__(f"SCM provider {name} not registered")
        self.name = name


class InvalidConfiguration(BatchToolError):
    """A configuration setting has a value that cannot be used."""

    def __init__(self, key: str, value: object):
        super().__init__(f"invalid value for {key}: {value!r}")
        self.key = key
        self.value = value
