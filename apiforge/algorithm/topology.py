"""Topological ordering of named nodes with cycle detection.

The Topology orders definitions so that every node appears after the nodes it
depends on. It is used to emit model definitions in an order that lets them
compile in a single pass.
"""

import logging
from collections.abc import Hashable, Iterator
from typing import Generic, TypeVar

from apiforge.algorithm.ordered_set import OrderedSet
from apiforge.exceptions import CycleError

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=Hashable)

__all__ = ['Topology']


class Topology(Generic[T]):
    """A directed "depends on" graph over named nodes.

    Edges are kept in insertion order so the resulting order is reproducible.

    Example:
        >>> graph = Topology()
        >>> graph.add_edge('a', 'b')
        >>> graph.add_edge('b', 'c')
        >>> graph.sort('a')
        ['c', 'b', 'a']
    """

    def __init__(self):
        self._nodes: dict[T, OrderedSet[T]] = {}

    def add_node(self, name: T) -> None:
        """Add a node without edges. Adding an existing node is a no-op."""
        if name not in self._nodes:
            self._nodes[name] = OrderedSet()

    def add_edge(self, source: T, target: T) -> None:
        """Record that ``source`` depends on ``target``.

        Both endpoints are created if they do not exist yet.
        """
        self.add_node(source)
        self.add_node(target)
        self._nodes[source].add(target)

    def edges(self, name: T) -> list[T]:
        """Return the direct dependencies of a node in insertion order."""
        return self._nodes[name].items

    def sort(self, start: T, break_cycles: bool = False) -> list[T]:
        """Order every node reachable from ``start``, dependencies first.

        Args:
            start: The node to order.
            break_cycles: Skip an edge back into the current path instead of
                failing, which gives a best-effort order for cyclic graphs.

        Raises:
            KeyError: If ``start`` is not a node of the graph.
            CycleError: If a node is re-entered while still on the current path
                and ``break_cycles`` is false.
        """
        if start not in self._nodes:
            raise KeyError(start)
        results: OrderedSet[T] = OrderedSet()
        self._visit(start, results, OrderedSet(), break_cycles)
        return results.items

    def sort_all(self, break_cycles: bool = False) -> list[T]:
        """Order every node of the graph, dependencies first.

        Roots are visited in insertion order and share one result set, so a
        node reachable from several roots is listed once. ``break_cycles``
        behaves as in ``sort``.
        """
        results: OrderedSet[T] = OrderedSet()
        for name in self._nodes:
            if name not in results:
                self._visit(name, results, OrderedSet(), break_cycles)
        return results.items

    def _visit(
        self,
        name: T,
        results: OrderedSet[T],
        path: OrderedSet[T],
        break_cycles: bool,
    ) -> None:
        # path holds the nodes entered but not yet completed on this branch
        if not path.add(name):
            raise CycleError(path.items + [name])

        for edge in self._nodes[name]:
            if edge in results:
                continue
            if break_cycles and edge in path:
                logger.debug(f'Skipped edge {name!r} -> {edge!r} closing a cycle')
                continue
            self._visit(edge, results, path, break_cycles)

        path.pop()
        if results.add(name):
            logger.debug(f'Ordered node {name!r} at position {len(results) - 1}')

    def __contains__(self, name: object) -> bool:
        return name in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[T]:
        return iter(self._nodes)
