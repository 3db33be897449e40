"""
In-memory SCM provider.

Used by tests and for dry runs. Seed data can come from the ``fake``
configuration section:

    {"fake": {"repositories": [{"name": "web-app", "labels": ["frontend"]}]}}
"""

from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..domain import Repository, PullRequest, PROptions, PRMergeOptions, Capabilities
from ..exceptions import ProviderError
from .provider import Provider


def _dedupe(items: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def _copy(pr: PullRequest) -> PullRequest:
    return replace(pr, reviewers=list(pr.reviewers), team_reviewers=list(pr.team_reviewers))


class FakeProvider(Provider):
    """
    Provider backed by in-memory repositories and pull requests.

    Errors can be injected per method name:

        fake.set_error("list_repositories", ProviderError("boom"))
    """

    def __init__(
        self,
        project: str,
        repositories: Optional[Iterable[Repository]] = None,
        capabilities: Optional[Capabilities] = None,
    ):
        super().__init__(project)
        self.repositories: List[Repository] = list(repositories or [])
        self.pull_requests: Dict[str, PullRequest] = {}
        self.errors: Dict[str, Exception] = {}
        self.capabilities = capabilities or Capabilities(
            team_reviewers=True,
            reset_reviewers=True,
            draft=True,
            merge_methods=("merge", "squash", "rebase"),
            check_mergeable=True,
        )
        self.list_calls = 0

    @classmethod
    def from_config(cls, project: str, config: Mapping[str, Any]) -> 'FakeProvider':
        """Build a fake seeded from ``fake.repositories`` entries of this project."""
        entries = config.get('fake', {}).get('repositories', [])
        repos = []
        for entry in entries:
            repo = Repository.from_dict(entry)
            if not repo.project:
                repo = replace(repo, project=project)
            if repo.project == project:
                repos.append(repo)
        return cls(project, repos)

    def _raise_if_set(self, method: str) -> None:
        error = self.errors.get(method)
        if error is not None:
            raise error

    @staticmethod
    def _key(repo: str, branch: str) -> str:
        return f"{repo}:{branch}"

    def _find(self, repo: str, branch: str) -> PullRequest:
        pr = self.pull_requests.get(self._key(repo, branch))
        if pr is None:
            raise ProviderError(f"pull request not found for {repo}:{branch}", status_code=404)
        return pr

    def list_repositories(self) -> List[Repository]:
        self.list_calls += 1
        self._raise_if_set("list_repositories")
        return list(self.repositories)

    def get_pull_request(self, repo: str, branch: str) -> PullRequest:
        self._raise_if_set("get_pull_request")
        return _copy(self._find(repo, branch))

    def open_pull_request(self, repo: str, branch: str, opts: Optional[PROptions] = None) -> PullRequest:
        opts = opts or PROptions()
        self._raise_if_set("open_pull_request")

        key = self._key(repo, branch)
        if key in self.pull_requests:
            raise ProviderError(f"pull request already exists for {repo}:{branch}", status_code=409)

        pr = PullRequest(
            title=opts.title,
            description=opts.description,
            branch=branch,
            repo=repo,
            reviewers=list(opts.reviewers),
            team_reviewers=list(opts.team_reviewers),
            id=len(self.pull_requests) + 1,
            number=len(self.pull_requests) + 1,
            version=1,
            draft=bool(opts.draft),
            mergeable=True,
        )
        self.pull_requests[key] = pr
        return _copy(pr)

    def update_pull_request(self, repo: str, branch: str, opts: Optional[PROptions] = None) -> PullRequest:
        opts = opts or PROptions()
        self._raise_if_set("update_pull_request")

        pr = self._find(repo, branch)
        pr.title = opts.title
        pr.description = opts.description
        pr.version += 1

        if opts.reset_reviewers:
            pr.reviewers = list(opts.reviewers)
            pr.team_reviewers = list(opts.team_reviewers)
        else:
            pr.reviewers = _dedupe(pr.reviewers + opts.reviewers)
            pr.team_reviewers = _dedupe(pr.team_reviewers + opts.team_reviewers)

        return _copy(pr)

    def merge_pull_request(self, repo: str, branch: str, opts: Optional[PRMergeOptions] = None) -> PullRequest:
        opts = opts or PRMergeOptions()
        self._raise_if_set("merge_pull_request")

        pr = self._find(repo, branch)
        if opts.check_mergeable and not pr.mergeable:
            raise ProviderError(
                f"pull request for {repo}:{branch} is not mergeable (conflicts, required checks failing, etc)"
            )

        del self.pull_requests[self._key(repo, branch)]
        return _copy(pr)

    # Test helpers

    def add_repositories(self, *repos: Repository) -> None:
        self.repositories.extend(repos)

    def set_error(self, method: str, error: Exception) -> None:
        self.errors[method] = error

    def clear_errors(self) -> None:
        self.errors.clear()

    def set_mergeable(self, repo: str, branch: str, mergeable: bool) -> None:
        self._find(repo, branch).mergeable = mergeable
