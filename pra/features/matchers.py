"""
Feature Matcher Module.

A feature matcher is the per-step predicate a graph walk consults when
reconstructing which nodes satisfy a feature. At every step the walker asks
whether an edge may be followed, whether the node it leads to may be kept,
and whether the walk is complete. Matchers hold only the pattern they
encode; they never touch the graph.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence, Tuple


class FeatureMatcher(ABC):
    """Predicate set controlling a feature-guided graph walk."""

    @abstractmethod
    def is_finished(self, steps_taken: int) -> bool:
        """Whether a walk that has taken steps_taken steps has matched the whole feature."""

    @abstractmethod
    def edge_ok(self, edge_id: int, steps_taken: int) -> bool:
        """Whether the walk may follow an edge of type edge_id as its next step."""

    @abstractmethod
    def node_ok(self, node_id: int, steps_taken: int) -> bool:
        """Whether the walk may arrive at node_id on its next step."""


class EmptyFeatureMatcher(FeatureMatcher):
    """Matcher that accepts nothing, for features that cannot occur in this graph."""

    def is_finished(self, steps_taken: int) -> bool:
        return False

    def edge_ok(self, edge_id: int, steps_taken: int) -> bool:
        return False

    def node_ok(self, node_id: int, steps_taken: int) -> bool:
        return False

    def __repr__(self) -> str:
        return "EmptyFeatureMatcher()"


class PathFeatureMatcher(FeatureMatcher):
    """
    Matcher for a sequence of edge types.

    Each pattern entry is the edge type id allowed at that step, or None for
    "any edge type". The walk is finished once every entry has been
    consumed.

    Example:
        >>> matcher = PathFeatureMatcher([3, None])
        >>> matcher.edge_ok(3, 0), matcher.edge_ok(4, 0), matcher.edge_ok(4, 1)
        (True, False, True)
        >>> matcher.is_finished(2)
        True
    """

    def __init__(self, edge_pattern: Sequence[Optional[int]]):
        self.edge_pattern: Tuple[Optional[int], ...] = tuple(edge_pattern)

    def is_finished(self, steps_taken: int) -> bool:
        return steps_taken >= len(self.edge_pattern)

    def edge_ok(self, edge_id: int, steps_taken: int) -> bool:
        if steps_taken >= len(self.edge_pattern):
            return False
        expected = self.edge_pattern[steps_taken]
        return expected is None or expected == edge_id

    def node_ok(self, node_id: int, steps_taken: int) -> bool:
        return True

    def __repr__(self) -> str:
        return f"PathFeatureMatcher({list(self.edge_pattern)})"
