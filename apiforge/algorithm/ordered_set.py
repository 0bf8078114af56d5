"""Insertion-ordered set with constant-time membership and index lookup."""

from collections.abc import Hashable, Iterable, Iterator
from typing import Generic, TypeVar

T = TypeVar('T', bound=Hashable)

__all__ = ['OrderedSet']


class OrderedSet(Generic[T]):
    """A set that remembers insertion order.

    Membership and position lookups go through a dict index; the items
    themselves live in an append-only list.

    Example:
        >>> s = OrderedSet()
        >>> s.add('a')
        True
        >>> s.add('a')
        False
        >>> s.index('a')
        0
        >>> s.index('b') is None
        True
    """

    def __init__(self, items: Iterable[T] | None = None):
        self._index: dict[T, int] = {}
        self._items: list[T] = []
        for item in items or ():
            self.add(item)

    def add(self, item: T) -> bool:
        """Insert an item.

        Returns:
            True if the item was newly inserted, False if it was already present
            (in which case the set is left unchanged).
        """
        if item in self._index:
            return False
        self._index[item] = len(self._items)
        self._items.append(item)
        return True

    def index(self, item: T) -> int | None:
        """Return the 0-based insertion position of an item, or None."""
        return self._index.get(item)

    def pop(self) -> T:
        """Remove and return the most recently inserted item.

        Raises:
            IndexError: If the set is empty.
        """
        item = self._items.pop()
        del self._index[item]
        return item

    def copy(self) -> 'OrderedSet[T]':
        """Return an independent copy of this set."""
        clone: OrderedSet[T] = OrderedSet()
        clone._index = dict(self._index)
        clone._items = list(self._items)
        return clone

    @property
    def items(self) -> list[T]:
        """The items in insertion order (a fresh list)."""
        return list(self._items)

    def __contains__(self, item: object) -> bool:
        return item in self._index

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrderedSet):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        return f'OrderedSet({self._items!r})'
