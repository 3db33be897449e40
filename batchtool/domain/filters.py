"""
Filter expressions for selecting repositories.

A filter is a list of tokens such as ``~frontend !mobile-app +deprecated-app``.
Each token carries up to three markers:

    label (``~``)  - the name refers to a label, not a repository
    skip  (``!``)  - remove the selection from the result
    force (``+``)  - keep the selection regardless of any skip

The selected set is ``Forced ∪ (Included ∖ Excluded)``. Force takes
priority over skip, and skip over a plain include.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Set, AbstractSet


class Bucket(Enum):
    """Which part of the set expression a token contributes to."""
    FORCED = "forced"
    INCLUDED = "included"
    EXCLUDED = "excluded"


@dataclass(frozen=True)
class FilterToken:
    """
    A single parsed filter argument.

    Attributes:
        raw: The argument exactly as given
        name: The argument with every marker removed
        is_label: Whether the label marker was present
        is_forced: Whether the force marker was present
        is_skipped: Whether the skip marker was present
    """
    raw: str
    name: str
    is_label: bool = False
    is_forced: bool = False
    is_skipped: bool = False

    @property
    def bucket(self) -> Bucket:
        if self.is_forced:
            return Bucket.FORCED
        if self.is_skipped:
            return Bucket.EXCLUDED
        return Bucket.INCLUDED


@dataclass(frozen=True)
class Markers:
    """The configurable marker strings recognised in filter tokens."""
    label: str = "~"
    skip: str = "!"
    forced: str = "+"

    @classmethod
    def from_config(cls, config: Mapping) -> 'Markers':
        tokens = config.get('repos', {}).get('tokens', {})
        return cls(
            label=tokens.get('label', cls.label),
            skip=tokens.get('skip', cls.skip),
            forced=tokens.get('forced', cls.forced),
        )

    def _has(self, marker: str, text: str) -> bool:
        return bool(marker) and marker in text

    def clean(self, text: str) -> str:
        """Strip every marker from the text."""
        for marker in (self.label, self.skip, self.forced):
            if marker:
                text = text.replace(marker, "")
        return text

    def parse(self, raw: str) -> FilterToken:
        return FilterToken(
            raw=raw,
            name=self.clean(raw),
            is_label=self._has(self.label, raw),
            is_forced=self._has(self.forced, raw),
            is_skipped=self._has(self.skip, raw),
        )

    def skip_label(self, label: str) -> str:
        """Build the token that excludes a whole label."""
        return f"{label}{self.skip}{self.label}"

    def display_name(self, token: FilterToken) -> str:
        """Name used in set notation; label entries keep a trailing marker."""
        if token.is_label:
            return token.name + self.label
        return token.name


def with_unwanted(filters: Iterable[str], unwanted: Iterable[str], markers: Markers) -> List[str]:
    """Append one label-skip token per unwanted label."""
    result = list(filters)
    result.extend(markers.skip_label(label) for label in unwanted)
    return result


def resolve(
    token: FilterToken,
    labels: Mapping[str, AbstractSet[str]],
    qualify_name: Optional[Callable[[str], str]] = None,
) -> Set[str]:
    """
    Resolve a token to the repository names it denotes.

    Unknown labels resolve to the empty set. Bare names go through
    qualify_name when given (e.g. to map them to catalog keys) and are
    never checked for existence.
    """
    if token.is_label:
        return set(labels.get(token.name, ()))
    if qualify_name is not None:
        return {qualify_name(token.name)}
    return {token.name}


def evaluate(
    filters: Iterable[str],
    labels: Mapping[str, AbstractSet[str]],
    markers: Optional[Markers] = None,
    qualify_name: Optional[Callable[[str], str]] = None,
) -> Set[str]:
    """
    Compute the repository names selected by a filter list.

    Args:
        filters: Raw filter tokens
        labels: Label name to repository-name set
        markers: Marker configuration (defaults to ``~``, ``!``, ``+``)
        qualify_name: Maps a bare repository name to its label-index key

    Returns:
        ``Forced ∪ (Included ∖ Excluded)``
    """
    markers = markers or Markers()
    buckets: Dict[Bucket, Set[str]] = {bucket: set() for bucket in Bucket}

    for raw in filters:
        token = markers.parse(raw)
        buckets[token.bucket] |= resolve(token, labels, qualify_name)

    return buckets[Bucket.FORCED] | (buckets[Bucket.INCLUDED] - buckets[Bucket.EXCLUDED])
