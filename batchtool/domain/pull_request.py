"""
Pull request value objects exchanged with SCM providers.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any


@dataclass
class PullRequest:
    """A pull request in a repository."""
    title: str
    branch: str
    repo: str
    description: str = ""
    reviewers: List[str] = field(default_factory=list)
    team_reviewers: List[str] = field(default_factory=list)
    id: int = 0
    number: int = 0
    version: int = 0
    draft: bool = False
    mergeable: bool = False

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'title': self.title,
            'description': self.description,
            'branch': self.branch,
            'repo': self.repo,
            'reviewers': list(self.reviewers),
            'id': self.id,
            'number': self.number,
            'mergeable': self.mergeable,
        }
        if self.team_reviewers:
            result['team_reviewers'] = list(self.team_reviewers)
        if self.version:
            result['version'] = self.version
        if self.draft:
            result['draft'] = self.draft
        return result


@dataclass
class PRMergeOptions:
    """Options for merging a pull request."""
    method: str = ""
    check_mergeable: bool = False


@dataclass
class PROptions:
    """Options for opening or updating a pull request."""
    title: str = ""
    description: str = ""
    reviewers: List[str] = field(default_factory=list)
    team_reviewers: List[str] = field(default_factory=list)
    reset_reviewers: bool = False
    base_branch: str = ""
    draft: Optional[bool] = None
    merge: PRMergeOptions = field(default_factory=PRMergeOptions)


@dataclass(frozen=True)
class Capabilities:
    """Which pull request options a provider supports."""
    team_reviewers: bool = False
    reset_reviewers: bool = False
    draft: bool = False
    merge_methods: tuple = ()
    check_mergeable: bool = False


def validate_pr_options(caps: Optional[Capabilities], opts: Optional[PROptions]) -> None:
    """
    Check that the given options only use supported features.

    Raises:
        ValueError: naming the first unsupported option
    """
    if opts is None:
        return

    caps = caps or Capabilities()

    if not caps.team_reviewers and opts.team_reviewers:
        raise ValueError("provider does not support team reviewers")
    if not caps.reset_reviewers and opts.reset_reviewers:
        raise ValueError("provider does not support resetting reviewers")
    if not caps.draft and opts.draft is not None:
        raise ValueError("provider does not support draft pull requests")
    if opts.merge.method and opts.merge.method not in caps.merge_methods:
        raise ValueError(f"provider does not support merge method {opts.merge.method!r}")
    if not caps.check_mergeable and opts.merge.check_mergeable:
        raise ValueError("provider does not support checking PR mergeability")
