"""Shared fixtures for batch-tool tests."""

import pytest

from batchtool.domain import Repository
from batchtool.infra import CatalogCache, FakeProvider, ProviderRegistry
from batchtool.services import CatalogService


def sample_repositories(project="acme"):
    return [
        Repository(name="web-app", project=project, default_branch="main", public=True,
                   labels=("frontend",)),
        Repository(name="mobile-app", project=project, default_branch="develop",
                   labels=("frontend",)),
        Repository(name="api-server", project=project, default_branch="main",
                   labels=("backend",)),
        Repository(name="worker", project=project, default_branch="main",
                   labels=("backend",)),
        Repository(name="deprecated-app", project=project, default_branch="master",
                   labels=("deprecated",)),
        Repository(name="poc-app", project=project, default_branch="main",
                   labels=("poc", "frontend")),
    ]


def registry_for(providers):
    """Registry whose "fake" factory hands out the given providers by project."""
    registry = ProviderRegistry()
    registry.register("fake", lambda project, config: providers[project])
    return registry


@pytest.fixture
def config(tmp_path):
    return {
        "git": {
            "provider": "fake",
            "project": "acme",
            "projects": [],
            "host": "example.com",
            "directory": str(tmp_path / "src"),
        },
        "repos": {
            "skip_unwanted": False,
            "aliases": {},
        },
        "logging": {
            "level": "ERROR",
        },
    }


@pytest.fixture
def fake():
    return FakeProvider("acme", sample_repositories())


@pytest.fixture
def registry(fake):
    return registry_for({"acme": fake})


@pytest.fixture
def service(config, registry):
    svc = CatalogService(config, registry=registry)
    svc.initialize()
    return svc


@pytest.fixture
def cache(tmp_path):
    return CatalogCache(tmp_path / "cache" / "repos.json")
