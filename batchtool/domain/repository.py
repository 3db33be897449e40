"""
Repository domain object for batch-tool.

Repository represents a repository as listed by an SCM provider.
It is immutable and serializes to the catalog cache format.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any, Tuple


@dataclass(frozen=True)
class Repository:
    """
    Immutable representation of a provider repository.

    Repositories are created by a provider fetch or a cache load and are
    never mutated afterwards; a refresh replaces the whole catalog.

    Example:
        repo = Repository(name="web-app", project="acme", labels=("frontend",))
        repo.qualified_name  # "acme/web-app"
    """

    name: str
    description: str = ""
    public: bool = False
    project: str = ""
    default_branch: str = ""
    labels: Tuple[str, ...] = ()

    @property
    def qualified_name(self) -> str:
        """Project-qualified name, or the bare name when no project is set."""
        if self.project:
            return f"{self.project}/{self.name}"
        return self.name

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Repository':
        """
        Create from a cache entry.

        Raises:
            ValueError: if the entry is not a mapping with a string name
        """
        if not isinstance(data, dict) or not isinstance(data.get('name'), str):
            raise ValueError(f"invalid repository entry: {data!r}")

        labels = data.get('labels') or []
        if not isinstance(labels, list) or not all(isinstance(label, str) for label in labels):
            raise ValueError(f"invalid labels for repository {data['name']!r}: {labels!r}")

        return cls(
            name=data['name'],
            description=data.get('description') or "",
            public=bool(data.get('public', False)),
            project=data.get('project') or "",
            default_branch=data.get('default_branch') or "",
            labels=tuple(labels),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: Dict[str, Any] = {
            'name': self.name,
            'description': self.description,
            'public': self.public,
            'project': self.project,
            'default_branch': self.default_branch,
        }
        if self.labels:
            result['labels'] = list(self.labels)
        return result

    def has_label(self, label: str) -> bool:
        return label in self.labels

    def __str__(self) -> str:
        return self.qualified_name

    def __repr__(self) -> str:
        return f"Repository(name={self.name!r}, project={self.project!r})"


def qualify(name: str, project: Optional[str]) -> str:
    """Join a project and repository name the way catalog keys are built."""
    if project:
        return f"{project}/{name}"
    return name
