"""
Catalog service for batch-tool.

Owns the repository catalog and the label index for the lifetime of a
process and answers repository-selection queries against them. This is
the primary API for commands that operate on many repositories.
"""

import logging
import threading
from datetime import timedelta
from dataclasses import replace
from types import MappingProxyType
from typing import AbstractSet, Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Set, Tuple

from ..config import get_default_config, merge_configs, normalize_keys, parse_duration
from ..domain import Repository, Markers, LabelGroup, evaluate, with_unwanted, qualify
from ..exceptions import CacheError, FetchCancelled, InvalidConfiguration, ProviderFetchError
from ..infra import CatalogCache, ProviderRegistry, default_registry, FLUSH_TTL

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Repository catalog, label index and filter evaluation.

    Mutations (cache load, fetch, alias merge, flush) are serialized by an
    internal lock. Filter evaluation works on a snapshot of the label index
    and may run concurrently once the catalog is loaded.

    Example:
        service = CatalogService(config)
        service.initialize()
        for name in service.select(["~frontend", "!mobile-app"]):
            print(name)
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        registry: Optional[ProviderRegistry] = None,
        cache: Optional[CatalogCache] = None,
    ):
        """
        Initialize CatalogService.

        Args:
            config: Configuration dict, merged over the defaults
            registry: Provider registry (built-in providers if None)
            cache: Catalog cache (path resolved from config if None)
        """
        self.config = merge_configs(get_default_config(), normalize_keys(config or {}))
        self.registry = registry or default_registry()
        self.cache = cache or CatalogCache.from_config(self.config)
        self.markers = Markers.from_config(self.config)

        self._catalog: Dict[str, Repository] = {}
        self._labels: Dict[str, Set[str]] = {}
        self._lock = threading.RLock()

    # Configuration accessors

    @property
    def repos_config(self) -> Dict[str, Any]:
        return self.config.get('repos', {})

    @property
    def git_config(self) -> Dict[str, Any]:
        return self.config.get('git', {})

    @property
    def superset_label(self) -> str:
        return self.repos_config.get('catch_all', 'all')

    @property
    def sort_repos(self) -> bool:
        return bool(self.repos_config.get('sort', True))

    @property
    def cache_ttl(self) -> timedelta:
        """
        Configured cache TTL.

        Raises:
            InvalidConfiguration: repos.cache.ttl is not a duration
        """
        value = (self.repos_config.get('cache') or {}).get('ttl', '24h')
        try:
            return parse_duration(value)
        except ValueError as e:
            raise InvalidConfiguration('repos.cache.ttl', value) from e

    def projects(self) -> List[str]:
        """Configured projects: ``git.projects`` plus the default ``git.project``."""
        projects = set(self.git_config.get('projects') or [])
        default_project = self.git_config.get('project')
        if default_project:
            projects.add(default_project)
        return sorted(projects)

    # Read access

    @property
    def catalog(self) -> Mapping[str, Repository]:
        """Read-only view of the current catalog."""
        with self._lock:
            return MappingProxyType(dict(self._catalog))

    @property
    def labels(self) -> Dict[str, FrozenSet[str]]:
        """Snapshot of the label index."""
        with self._lock:
            return {name: frozenset(repos) for name, repos in self._labels.items()}

    def label(self, name: str) -> FrozenSet[str]:
        """Repositories carrying a label (empty if the label is unknown)."""
        with self._lock:
            return frozenset(self._labels.get(name, ()))

    def is_loaded(self) -> bool:
        with self._lock:
            return bool(self._catalog)

    # Initialization

    def initialize(self, flush: bool = False, cancel: Optional[threading.Event] = None) -> None:
        """
        Populate the catalog from the cache, or from the provider on a miss.

        Args:
            flush: Ignore the cache and refetch from the provider
            cancel: Event checked between project fetches

        Raises:
            ProviderFetchError: listing a project failed (catalog unchanged)
            FetchCancelled: cancel was set during the fetch
            CacheWriteError: the fetched catalog could not be persisted
                (the in-memory catalog is already updated)
            UnregisteredProvider: git.provider names no registered provider
        """
        with self._lock:
            if self._catalog and not flush:
                return

            try:
                self._load_or_fetch(flush, cancel)
            finally:
                self._rebuild_labels()

    def refresh(self, cancel: Optional[threading.Event] = None) -> None:
        """Force a refetch from the provider and rewrite the cache."""
        self.initialize(flush=True, cancel=cancel)

    def _load_or_fetch(self, flush: bool, cancel: Optional[threading.Event]) -> None:
        ttl = FLUSH_TTL if flush else self.cache_ttl

        try:
            _, repositories = self.cache.load(ttl)
        except CacheError as e:
            if not flush:
                logger.warning(str(e))
        else:
            logger.debug(f"Loaded {len(repositories)} repositories from {self.cache.path}")
            self._catalog = repositories
            return

        repositories = self._fetch(cancel)
        if repositories is None:
            return

        self._catalog = repositories
        self.cache.save(self._catalog)

    def _fetch(self, cancel: Optional[threading.Event]) -> Optional[Dict[str, Repository]]:
        """Fetch every configured project; all-or-nothing."""
        projects = self.projects()
        if not projects:
            logger.warning("No git.project or git.projects configured - nothing to fetch")
            return None

        provider_name = self.git_config.get('provider', 'github')
        fetched: Dict[str, Repository] = {}

        for project in projects:
            if cancel is not None and cancel.is_set():
                raise FetchCancelled(f"fetch cancelled before project {project}")

            provider = self.registry.get(provider_name, project, self.config)
            try:
                repos = provider.list_repositories()
            except Exception as e:
                raise ProviderFetchError(project, e) from e

            for repo in repos:
                if not repo.project:
                    repo = replace(repo, project=project)
                fetched[repo.qualified_name] = repo

            logger.info(f"Fetched {len(repos)} repositories from project {project}")

        return fetched

    def _rebuild_labels(self) -> None:
        """Intrinsic labels, then configured aliases, then the superset label."""
        labels: Dict[str, Set[str]] = {}

        for key, repo in self._catalog.items():
            for label in repo.labels:
                labels.setdefault(label, set()).add(key)

        qualify_name = self._name_qualifier(set(self._catalog))
        for name, repos in (self.repos_config.get('aliases') or {}).items():
            labels.setdefault(name, set()).update(qualify_name(repo) for repo in repos)

        labels[self.superset_label] = set(self._catalog)

        self._labels = labels

    def flush_cache(self) -> None:
        """Delete the cache file and forget the in-memory catalog."""
        with self._lock:
            self.cache.flush()
            self._catalog = {}
            self._rebuild_labels()

    # Lookup

    def get_repository(self, name: str) -> Optional[Repository]:
        """
        Find a repository by qualified or bare name.

        Tries the exact key, then the default project, then any repository
        whose name (or key suffix) matches.
        """
        with self._lock:
            if name in self._catalog:
                return self._catalog[name]

            default_project = self.git_config.get('project')
            if default_project:
                qualified = qualify(name, default_project)
                if qualified in self._catalog:
                    return self._catalog[qualified]

            for key, repo in self._catalog.items():
                if repo.name == name or key.endswith("/" + name):
                    return repo

        return None

    def get_project_for_repo(self, name: str) -> str:
        """Project of a known repository, else the configured default project."""
        repo = self.get_repository(name)
        if repo is not None:
            return repo.project
        return self.git_config.get('project', '')

    def default_branch_for(self, name: str) -> str:
        """Default branch of a known repository, else ``git.default_branch``."""
        repo = self.get_repository(name)
        if repo is not None and repo.default_branch:
            return repo.default_branch
        return self.git_config.get('default_branch', 'main')

    # Selection

    def effective_filters(self, filters: Iterable[str]) -> List[str]:
        """The filters plus the automatic unwanted-label exclusions."""
        if self.repos_config.get('skip_unwanted', True):
            return with_unwanted(filters, self.repos_config.get('unwanted_labels') or [], self.markers)
        return list(filters)

    def _name_qualifier(self, keys: AbstractSet[str]) -> Callable[[str], str]:
        """Map bare names of default-project repositories to their catalog keys."""
        default_project = self.git_config.get('project')

        def qualify_name(name: str) -> str:
            if default_project and name not in keys:
                qualified = qualify(name, default_project)
                if qualified in keys:
                    return qualified
            return name

        return qualify_name

    def qualify_name(self, name: str) -> str:
        """Catalog key for a filter name; unknown names are returned unchanged."""
        with self._lock:
            keys = set(self._catalog)
        return self._name_qualifier(keys)(name)

    def repository_list(self, filters: Iterable[str]) -> Set[str]:
        """
        Set of repository names matched by the filters.

        Bare names of repositories in the default project (``mobile-app``)
        match the same catalog key as their qualified form (``acme/mobile-app``).
        """
        with self._lock:
            keys = set(self._catalog)
            labels = {name: frozenset(repos) for name, repos in self._labels.items()}
        return evaluate(self.effective_filters(filters), labels, self.markers, self._name_qualifier(keys))

    def select(self, filters: Iterable[str]) -> List[str]:
        """Matched repository names, sorted when ``repos.sort`` is set."""
        selected = self.repository_list(filters)
        if self.sort_repos:
            return sorted(selected)
        return list(selected)

    def parse_labels(self, filters: Iterable[str]) -> Tuple[LabelGroup, List[str]]:
        """Display groups for the filters together with the matched repositories."""
        effective = self.effective_filters(filters)
        group = LabelGroup.parse(effective, self.markers)
        return group, self.select(filters)
