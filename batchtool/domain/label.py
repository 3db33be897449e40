"""
Label domain objects for batch-tool.

A Label is a named set of repository names. A LabelGroup holds the
forced, included and excluded names parsed out of a filter list and
renders them in set notation:

    (forced) ∪ ( (included) ∖ (excluded) )
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set, Tuple

from .filters import Bucket, Markers

UNION = "\u222a"  # ∪
MINUS = "\u2216"  # ∖


class Label(set):
    """A set of names rendered as a sorted union."""

    def __str__(self) -> str:
        return f" {UNION} ".join(sorted(self))

    def to_list(self) -> List[str]:
        return sorted(self)


@dataclass
class LabelGroup:
    """Forced, included and excluded filter names, for display."""
    forced: Label = field(default_factory=Label)
    included: Label = field(default_factory=Label)
    excluded: Label = field(default_factory=Label)

    @classmethod
    def parse(cls, filters: Iterable[str], markers: Optional[Markers] = None) -> 'LabelGroup':
        """
        Categorize filter tokens, re-appending the label marker to label names.
        """
        markers = markers or Markers()
        group = cls()
        targets = {
            Bucket.FORCED: group.forced,
            Bucket.INCLUDED: group.included,
            Bucket.EXCLUDED: group.excluded,
        }

        for raw in filters:
            token = markers.parse(raw)
            targets[token.bucket].add(markers.display_name(token))

        return group

    def to_lists(self) -> Tuple[List[str], List[str], List[str]]:
        """Sorted (forced, included, excluded) lists."""
        return self.forced.to_list(), self.included.to_list(), self.excluded.to_list()

    def __str__(self) -> str:
        parts = []

        if self.forced:
            parts.append(f"({self.forced}) {UNION} ")
            if self.excluded:
                parts.append("( ")

        parts.append(f"({self.included})")

        if self.excluded:
            parts.append(f" {MINUS} ({self.excluded})")
            if self.forced:
                parts.append(" )")

        return "".join(parts)


def label_names(entries: Iterable[str], markers: Markers) -> List[str]:
    """Label names (marker stripped) among display entries, sorted."""
    names: Set[str] = set()
    for entry in entries:
        if markers.label and markers.label in entry:
            names.add(entry.replace(markers.label, ""))
    return sorted(names)
