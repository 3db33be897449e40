"""
GitHub provider for batch-tool.

Provides a clean abstraction over GitHub REST API access:
- Uses the configured token, the GITHUB_TOKEN env var, or `gh auth token`
- Lists organization repositories, falling back to user repositories
- Handles rate limiting with exponential backoff
"""

import subprocess
import os
import time
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List, Dict, Any, Mapping, Tuple

import requests

from ..domain import Repository, PullRequest, PROptions, PRMergeOptions, Capabilities
from ..exceptions import ProviderError
from .provider import Provider

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
PAGE_SIZE = 100


@dataclass
class RateLimitStatus:
    """GitHub API rate limit status."""
    remaining: int
    limit: int
    reset_time: int  # Unix timestamp
    used: int

    @property
    def reset_datetime(self) -> datetime:
        """Get reset time as datetime."""
        return datetime.fromtimestamp(self.reset_time)

    @property
    def minutes_until_reset(self) -> int:
        """Minutes until rate limit resets."""
        now = int(time.time())
        return max(0, (self.reset_time - now) // 60)

    @property
    def is_low(self) -> bool:
        """Check if rate limit is getting low (< 100 remaining)."""
        return self.remaining < 100


def repository_from_api(data: Dict[str, Any], project: str, default_branch: str = "main") -> Repository:
    """Convert a GitHub repository payload into a catalog Repository."""
    return Repository(
        name=data.get('name', ''),
        description=data.get('description') or "",
        public=not data.get('private', False),
        project=project,
        default_branch=data.get('default_branch') or default_branch,
        labels=tuple(data.get('topics') or ()),
    )


def pull_request_from_api(data: Dict[str, Any], repo: str) -> PullRequest:
    """Convert a GitHub pull request payload into a PullRequest."""
    return PullRequest(
        title=data.get('title') or "",
        description=data.get('body') or "",
        branch=data.get('head', {}).get('ref', ''),
        repo=repo,
        reviewers=[r.get('login', '') for r in data.get('requested_reviewers') or []],
        team_reviewers=[t.get('slug', '') for t in data.get('requested_teams') or []],
        id=data.get('id', 0),
        number=data.get('number', 0),
        draft=bool(data.get('draft', False)),
        mergeable=bool(data.get('mergeable', False)),
    )


class GitHubProvider(Provider):
    """
    GitHub REST API provider with rate limiting.

    Example:
        provider = GitHubProvider("acme", token="...")
        for repo in provider.list_repositories():
            print(repo.qualified_name)
    """

    capabilities = Capabilities(
        team_reviewers=True,
        reset_reviewers=True,
        draft=True,
        merge_methods=("merge", "squash", "rebase"),
        check_mergeable=True,
    )

    def __init__(
        self,
        project: str,
        token: Optional[str] = None,
        api_url: str = DEFAULT_API_URL,
        default_branch: str = "main",
        timeout: float = 30.0,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize GitHubProvider.

        Args:
            project: Organization or user owning the repositories
            token: GitHub token (defaults to BATCHTOOL_GITHUB_TOKEN, GITHUB_TOKEN or `gh auth token`)
            api_url: Base URL of the REST API (GitHub Enterprise: https://host/api/v3)
            default_branch: Branch used when a repository reports none
            timeout: Per-request timeout in seconds
            max_retries: Maximum retry attempts for rate-limited requests
            base_delay: Base delay for exponential backoff
            max_delay: Maximum delay between retries
            session: requests session (created if None)
        """
        super().__init__(project)
        self.token = (
            token
            or os.environ.get('BATCHTOOL_GITHUB_TOKEN')
            or os.environ.get('GITHUB_TOKEN')
            or self._gh_token()
        )
        self.api_url = api_url.rstrip('/')
        self.default_branch = default_branch
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.session = session or requests.Session()
        self._rate_limit_status: Optional[RateLimitStatus] = None

    @classmethod
    def from_config(cls, project: str, config: Mapping[str, Any]) -> 'GitHubProvider':
        github = config.get('github', {})
        rate_limit = github.get('rate_limit', {})
        return cls(
            project,
            token=github.get('token') or None,
            api_url=github.get('api_url') or DEFAULT_API_URL,
            default_branch=config.get('git', {}).get('default_branch', 'main'),
            timeout=github.get('timeout_seconds', 30),
            max_retries=rate_limit.get('max_retries', 3),
            max_delay=rate_limit.get('max_delay_seconds', 60),
        )

    @staticmethod
    def _gh_token() -> Optional[str]:
        """Ask the gh CLI for its token, if it is installed and logged in."""
        try:
            result = subprocess.run(
                ['gh', 'auth', 'token'],
                capture_output=True,
                text=True,
                timeout=10
            )
            if result.returncode == 0 and result.stdout.strip():
                return result.stdout.strip()
        except (subprocess.TimeoutExpired, FileNotFoundError):
            pass
        return None

    def _update_rate_limit_from_headers(self, headers: Mapping[str, str]) -> None:
        """Update rate limit status from response headers."""
        try:
            remaining = int(headers.get('X-RateLimit-Remaining', -1))
            limit = int(headers.get('X-RateLimit-Limit', -1))
            reset_time = int(headers.get('X-RateLimit-Reset', 0))
            used = int(headers.get('X-RateLimit-Used', 0))
        except (ValueError, TypeError):
            return

        if remaining >= 0 and limit >= 0:
            self._rate_limit_status = RateLimitStatus(
                remaining=remaining,
                limit=limit,
                reset_time=reset_time,
                used=used
            )

            if self._rate_limit_status.is_low:
                logger.warning(
                    f"GitHub API rate limit low: {remaining}/{limit} remaining, "
                    f"resets in {self._rate_limit_status.minutes_until_reset} minutes"
                )

    @property
    def rate_limit_status(self) -> Optional[RateLimitStatus]:
        """Rate limit status from the last API call, if any."""
        return self._rate_limit_status

    def _headers(self) -> Dict[str, str]:
        headers = {
            'Accept': 'application/vnd.github+json',
            'User-Agent': 'batch-tool'
        }
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """
        Call the GitHub API, retrying when rate limited.

        Raises:
            ProviderError: on network failure or any non-2xx response
        """
        url = endpoint if endpoint.startswith('http') else f"{self.api_url}/{endpoint.lstrip('/')}"

        for attempt in range(self.max_retries):
            try:
                response = self.session.request(
                    method,
                    url,
                    headers=self._headers(),
                    params=params,
                    json=json,
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                raise ProviderError(f"GitHub API request failed for {endpoint}: {e}") from e

            self._update_rate_limit_from_headers(response.headers)

            if response.status_code in (403, 429) and response.headers.get('X-RateLimit-Remaining') == '0':
                reset_time = response.headers.get('X-RateLimit-Reset')
                delay = min(self.base_delay * (2 ** attempt), self.max_delay)
                if reset_time:
                    wait_time = int(reset_time) - int(time.time())
                    if 0 < wait_time < self.max_delay:
                        delay = wait_time
                logger.info(f"Rate limited, waiting {delay}s (attempt {attempt + 1})")
                time.sleep(delay)
                continue

            if response.ok:
                return response

            raise ProviderError(
                f"GitHub API error {response.status_code} for {method} {endpoint}",
                status_code=response.status_code,
            )

        raise ProviderError(f"GitHub API rate limit exceeded for {endpoint}", status_code=403)

    def _paginate(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Collect every page of a list endpoint by following Link headers."""
        items: List[Dict[str, Any]] = []
        next_url: Optional[str] = endpoint
        page_params = dict(params or {}, per_page=PAGE_SIZE)

        while next_url:
            response = self._request('GET', next_url, params=page_params)
            items.extend(response.json())
            next_url = response.links.get('next', {}).get('url')
            # The next link already carries the query string
            page_params = None

        return items

    def list_repositories(self) -> List[Repository]:
        """
        List all repositories owned by the project.

        The project is tried as an organization first, then as a user.
        """
        try:
            data = self._paginate(f"orgs/{self.project}/repos", {'sort': 'full_name'})
        except ProviderError as e:
            if e.status_code != 404:
                raise
            logger.debug(f"{self.project} is not an organization, listing user repositories")
            data = self._paginate(f"users/{self.project}/repos", {'sort': 'full_name'})

        return [repository_from_api(item, self.project, self.default_branch) for item in data]

    def _find_pull(self, repo: str, branch: str) -> Dict[str, Any]:
        response = self._request(
            'GET',
            f"repos/{self.project}/{repo}/pulls",
            params={'head': f"{self.project}:{branch}", 'state': 'open'},
        )
        pulls = response.json()
        if not pulls:
            raise ProviderError(f"pull request not found for {repo}:{branch}", status_code=404)
        # The list endpoint omits mergeability, the detail endpoint reports it
        return self._request('GET', f"repos/{self.project}/{repo}/pulls/{pulls[0]['number']}").json()

    def _request_reviewers(self, repo: str, number: int, reviewers: List[str], teams: List[str]) -> None:
        if not reviewers and not teams:
            return
        self._request(
            'POST',
            f"repos/{self.project}/{repo}/pulls/{number}/requested_reviewers",
            json={'reviewers': reviewers, 'team_reviewers': teams},
        )

    def get_pull_request(self, repo: str, branch: str) -> PullRequest:
        return pull_request_from_api(self._find_pull(repo, branch), repo)

    def open_pull_request(self, repo: str, branch: str, opts: Optional[PROptions] = None) -> PullRequest:
        opts = opts or PROptions()
        self.check_capabilities(opts)

        base = opts.base_branch
        if not base:
            info = self._request('GET', f"repos/{self.project}/{repo}").json()
            base = info.get('default_branch') or self.default_branch

        payload: Dict[str, Any] = {
            'title': opts.title,
            'body': opts.description,
            'head': branch,
            'base': base,
        }
        if opts.draft is not None:
            payload['draft'] = opts.draft

        data = self._request('POST', f"repos/{self.project}/{repo}/pulls", json=payload).json()
        self._request_reviewers(repo, data['number'], opts.reviewers, opts.team_reviewers)

        return self.get_pull_request(repo, branch)

    def update_pull_request(self, repo: str, branch: str, opts: Optional[PROptions] = None) -> PullRequest:
        opts = opts or PROptions()
        self.check_capabilities(opts)

        current = self._find_pull(repo, branch)
        number = current['number']

        payload: Dict[str, Any] = {}
        if opts.title:
            payload['title'] = opts.title
        if opts.description:
            payload['body'] = opts.description
        if opts.base_branch:
            payload['base'] = opts.base_branch
        if payload:
            self._request('PATCH', f"repos/{self.project}/{repo}/pulls/{number}", json=payload)

        if opts.reset_reviewers:
            existing, existing_teams = self._reviewer_names(current)
            if existing or existing_teams:
                self._request(
                    'DELETE',
                    f"repos/{self.project}/{repo}/pulls/{number}/requested_reviewers",
                    json={'reviewers': existing, 'team_reviewers': existing_teams},
                )

        self._request_reviewers(repo, number, opts.reviewers, opts.team_reviewers)

        return self.get_pull_request(repo, branch)

    @staticmethod
    def _reviewer_names(data: Dict[str, Any]) -> Tuple[List[str], List[str]]:
        reviewers = [r.get('login', '') for r in data.get('requested_reviewers') or []]
        teams = [t.get('slug', '') for t in data.get('requested_teams') or []]
        return reviewers, teams

    def merge_pull_request(self, repo: str, branch: str, opts: Optional[PRMergeOptions] = None) -> PullRequest:
        opts = opts or PRMergeOptions()
        self.check_capabilities(PROptions(merge=opts))

        data = self._find_pull(repo, branch)
        if opts.check_mergeable and not data.get('mergeable'):
            raise ProviderError(
                f"pull request for {repo}:{branch} is not mergeable (conflicts, required checks failing, etc)"
            )

        payload = {'merge_method': opts.method} if opts.method else {}
        self._request('PUT', f"repos/{self.project}/{repo}/pulls/{data['number']}/merge", json=payload)

        return pull_request_from_api(data, repo)
