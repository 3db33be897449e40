"""
SCM provider interface for batch-tool.

The catalog only needs ``list_repositories``; the pull request operations
are consumed by the batch commands built on top of the catalog.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..domain import Repository, PullRequest, PROptions, PRMergeOptions, Capabilities
from ..domain.pull_request import validate_pr_options


class Provider(ABC):
    """
    A source control provider scoped to a single project.

    Implementations raise ProviderError (or any exception) on failure;
    the catalog wraps list failures in ProviderFetchError.
    """

    capabilities: Capabilities = Capabilities()

    def __init__(self, project: str):
        self.project = project

    def check_capabilities(self, opts: Optional[PROptions]) -> None:
        """Raise ValueError if opts use a feature this provider lacks."""
        validate_pr_options(self.capabilities, opts)

    @abstractmethod
    def list_repositories(self) -> List[Repository]:
        """List all repositories in the project."""

    @abstractmethod
    def get_pull_request(self, repo: str, branch: str) -> PullRequest:
        """Get the open pull request for a source branch."""

    @abstractmethod
    def open_pull_request(self, repo: str, branch: str, opts: Optional[PROptions] = None) -> PullRequest:
        """Open a new pull request from a source branch."""

    @abstractmethod
    def update_pull_request(self, repo: str, branch: str, opts: Optional[PROptions] = None) -> PullRequest:
        """Update the open pull request for a source branch."""

    @abstractmethod
    def merge_pull_request(self, repo: str, branch: str, opts: Optional[PRMergeOptions] = None) -> PullRequest:
        """Merge the open pull request for a source branch."""
