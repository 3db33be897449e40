"""
batchtool - Select repositories by name and label for batch SCM operations.

The core is the repository selection engine: a cached catalog of the
repositories in one or more provider projects, a label index built from
each repository's labels plus configured aliases, and a filter language
that turns tokens like ``~frontend !mobile-app +deprecated-app`` into a
concrete set of repositories.

Quick Start:
    from batchtool import CatalogService, load_config

    service = CatalogService(load_config())
    service.initialize()

    for name in service.select(["~frontend", "!mobile-app"]):
        print(name, service.default_branch_for(name))

Filter markers (configurable under repos.tokens):
    ~  label   - the token names a label
    !  skip    - remove the selection
    +  force   - keep the selection even if skipped

The selection is Forced ∪ (Included ∖ Excluded).
"""

__version__ = "0.4.0"

from .domain import (
    Repository,
    PullRequest,
    PROptions,
    PRMergeOptions,
    FilterToken,
    Markers,
    Label,
    LabelGroup,
    evaluate,
)

from .infra import (
    Provider,
    ProviderRegistry,
    default_registry,
    CatalogCache,
)

from .services import CatalogService

from .config import load_config

__all__ = [
    "__version__",
    "Repository",
    "PullRequest",
    "PROptions",
    "PRMergeOptions",
    "FilterToken",
    "Markers",
    "Label",
    "LabelGroup",
    "evaluate",
    "Provider",
    "ProviderRegistry",
    "default_registry",
    "CatalogCache",
    "CatalogService",
    "load_config",
]
