"""
Provider registry for batch-tool.

Factories are registered explicitly on a registry object that is built at
startup and handed to the catalog service.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..exceptions import UnregisteredProvider
from .provider import Provider

logger = logging.getLogger(__name__)

# factory(project, config) -> Provider
ProviderFactory = Callable[[str, Mapping[str, Any]], Provider]


class ProviderRegistry:
    """
    Maps provider names to factories.

    Example:
        registry = ProviderRegistry()
        registry.register("github", GitHubProvider.from_config)
        provider = registry.get("github", "acme", config)
    """

    def __init__(self):
        self._factories: Dict[str, ProviderFactory] = {}

    def register(self, name: str, factory: ProviderFactory) -> None:
        """Register a factory; the first registration of a name wins."""
        if name in self._factories:
            logger.debug(f"Provider {name} already registered, keeping existing factory")
            return
        self._factories[name] = factory

    def get(self, name: str, project: str, config: Optional[Mapping[str, Any]] = None) -> Provider:
        """
        Build a provider for a project.

        Raises:
            UnregisteredProvider: if no factory is registered under name
        """
        factory = self._factories.get(name)
        if factory is None:
            raise UnregisteredProvider(name)
        return factory(project, config or {})

    def names(self) -> List[str]:
        return sorted(self._factories)

    def __contains__(self, name: str) -> bool:
        return name in self._factories


def default_registry() -> ProviderRegistry:
    """Registry with the built-in providers."""
    from .github_client import GitHubProvider
    from .fake_provider import FakeProvider

    registry = ProviderRegistry()
    registry.register("github", GitHubProvider.from_config)
    registry.register("fake", FakeProvider.from_config)
    return registry
