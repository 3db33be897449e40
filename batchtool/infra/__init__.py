"""
Infrastructure layer for batch-tool.

Contains abstractions for external systems:
- Provider / ProviderRegistry: SCM provider interface and lookup
- GitHubProvider: GitHub REST API access
- FakeProvider: In-memory provider for tests and dry runs
- CatalogCache: JSON persistence of the repository catalog

These provide clean interfaces that can be mocked for testing.
"""

from .provider import Provider
from .registry import ProviderRegistry, default_registry
from .github_client import GitHubProvider, RateLimitStatus
from .fake_provider import FakeProvider
from .catalog_cache import CatalogCache, resolve_cache_path, DEFAULT_CACHE_FILE, FLUSH_TTL

__all__ = [
    'Provider',
    'ProviderRegistry',
    'default_registry',
    'GitHubProvider',
    'RateLimitStatus',
    'FakeProvider',
    'CatalogCache',
    'resolve_cache_path',
    'DEFAULT_CACHE_FILE',
    'FLUSH_TTL',
]
