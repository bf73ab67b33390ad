from __future__ import annotations

import heapq
import logging
from collections.abc import Collection
from functools import cmp_to_key
from typing import (
    Any,
    Callable,
    Generic,
    Hashable,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
)

from . import generator
from .errors import EmptyContainer, InvalidArgument, NotFound
from .keys import OrderKey
from .storage import AccessorStorage, KeyGetter, KeySetter, KeyStorage, MapStorage

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Hashable)


def _unique(elements: Iterable[E]) -> List[E]:
    return list(dict.fromkeys(elements))


class ReorderableContainer(Collection, Generic[E]):
    """Set of unique elements kept in an order of the caller's choosing.

    Unlike a list, positions are opaque order keys rather than contiguous
    indices, so inserting or moving elements only touches the keys of the
    elements being placed. Nothing can be added without saying where it goes.

    Unless stated otherwise, placement methods do not care whether the placed
    elements are already in the container: present ones are moved.
    """

    def __init__(self, elements: Iterable[E] = (), *, storage: Optional[KeyStorage[E]] = None) -> None:
        self._storage: KeyStorage[E] = storage if storage is not None else MapStorage()
        elements = _unique(elements)
        if elements:
            if len(self._storage):
                raise InvalidArgument("initial elements need an empty storage")
            self._update(zip(elements, generator.initial(len(elements))))

    # === collection protocol ===

    def __len__(self) -> int:
        return len(self._storage)

    def __contains__(self, element: object) -> bool:
        return element in self._storage

    def __iter__(self) -> Iterator[E]:
        yield from sorted(self._storage, key=self._storage.get)

    def __reversed__(self) -> Iterator[E]:
        yield from sorted(self._storage, key=self._storage.get, reverse=True)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)!r})"

    def elements(self) -> Iterator[E]:
        """Iterate the elements in no particular order, skipping the sort."""
        return iter(self._storage)

    def items(self) -> Iterator[Tuple[E, OrderKey]]:
        get = self._storage.get
        yield from sorted(((e, get(e)) for e in self._storage), key=lambda pair: pair[1])

    def key_of(self, element: E) -> OrderKey:
        self._require(element)
        return self._storage.get(element)

    @property
    def sort_key(self) -> Callable[[E], OrderKey]:
        """Key function ordering elements the way the container does."""
        return self.key_of

    # === placement ===

    def put_between(self, start: E, end: E, *new_elements: E) -> None:
        """Put the new elements between ``start`` and ``end``.

        When ``start`` and ``end`` are not neighbours, the new elements land
        right after ``start``, before the elements already in the gap.
        """
        if start == end:
            raise InvalidArgument("start and end must be different")
        self._require(start, "start")
        self._require(end, "end")
        new = _unique(new_elements)
        start_key = self._storage.get(start)
        end_key = self._storage.get(end)
        occupied = [k for k in self._unmoved_keys(new) if start_key < k < end_key]
        keys = generator.between(start_key, min(occupied, default=end_key), len(new))
        self._update(zip(new, keys))

    def put_at_end(self, *new_elements: E, last: bool = True) -> None:
        new = _unique(new_elements)
        unmoved = self._unmoved_keys(new)
        if not unmoved:
            keys = generator.initial(len(new))
        elif last:
            keys = generator.after(max(unmoved), len(new))
        else:
            keys = generator.before(min(unmoved), len(new))
        self._update(zip(new, keys))

    def put_next_to(self, anchor: E, *new_elements: E, after: bool = True) -> None:
        """Put the new elements right after (or before) ``anchor``.

        ``anchor`` may itself be one of the new elements: the block then takes
        the anchor's former place.
        """
        self._require(anchor, "anchor")
        new = _unique(new_elements)
        unmoved = self._unmoved_keys(new)
        anchor_key = self._storage.get(anchor)
        below = [k for k in unmoved if k < anchor_key]
        above = [k for k in unmoved if anchor_key < k]

        if anchor in new:
            # the anchor's key is about to go, the closest unmoved key stands in
            if after:
                anchor_key = max(below, default=None)
            else:
                anchor_key = min(above, default=None)

        if after:
            lower, upper = anchor_key, min(above, default=None)
        else:
            lower, upper = max(below, default=None), anchor_key
        self._update(zip(new, generator.generate(len(new), lower, upper)))

    # === reordering ===

    def recompute(self) -> None:
        """Give every element a fresh, minimal key, keeping the order."""
        self._assign_in_order(list(self))

    def sort_by(self, key: Optional[Callable[[E], Any]] = None, reverse: bool = False) -> None:
        """Stable sort of the whole container, ``key=None`` meaning the elements themselves."""
        self._assign_in_order(sorted(self, key=key, reverse=reverse))

    def sort_with(self, comparator: Callable[[E, E], int], reverse: bool = False) -> None:
        self.sort_by(cmp_to_key(comparator), reverse)

    def sort(self, *, key: Optional[Callable[[E], Any]] = None, reverse: bool = False) -> None:
        self.sort_by(key, reverse)

    def sort_tranche_by(
        self,
        start: Optional[E],
        end: Optional[E],
        key: Optional[Callable[[E], Any]] = None,
        reverse: bool = False,
    ) -> None:
        """Stable sort of the elements strictly between ``start`` and ``end``.

        ``None`` leaves that side of the tranche open. Elements outside the
        tranche, the boundaries included, keep their keys.
        """
        lower, upper, tranche = self._tranche(start, end)
        self._assign_in_order(sorted(tranche, key=key, reverse=reverse), lower, upper)

    def sort_tranche_with(
        self,
        start: Optional[E],
        end: Optional[E],
        comparator: Callable[[E, E], int],
        reverse: bool = False,
    ) -> None:
        self.sort_tranche_by(start, end, cmp_to_key(comparator), reverse)

    def sort_tranche(
        self,
        start: Optional[E] = None,
        end: Optional[E] = None,
        *,
        key: Optional[Callable[[E], Any]] = None,
        reverse: bool = False,
    ) -> None:
        self.sort_tranche_by(start, end, key, reverse)

    # === removal ===

    def pop_item(self, last: bool = True) -> E:
        if not len(self._storage):
            raise EmptyContainer("the container is empty")
        pick = max if last else min
        element = pick(self._storage, key=self._storage.get)
        self._storage.discard(element)
        logger.debug("popped %r", element)
        return element

    def pop_items(self, n: int, last: bool = True) -> List[E]:
        """Remove and return up to ``n`` elements from one end.

        The result is in extraction order: the most extreme element first.
        """
        if n < 0:
            raise InvalidArgument(f"cannot pop a negative number of elements ({n})")
        pick = heapq.nlargest if last else heapq.nsmallest
        popped = pick(n, self._storage, key=self._storage.get)
        for element in popped:
            self._storage.discard(element)
        logger.debug("popped %d elements", len(popped))
        return popped

    def remove(self, *elements: E) -> None:
        """Remove the elements, all of which must be present."""
        for element in elements:
            self._require(element)
        for element in elements:
            self._storage.discard(element)

    def discard(self, *elements: E) -> None:
        for element in elements:
            self._storage.discard(element)

    # === internals ===

    def _require(self, element: E, role: str = "element") -> None:
        if element not in self._storage:
            raise NotFound(f"{role} {element!r} is not in the container")

    def _unmoved_keys(self, new: Sequence[E]) -> List[OrderKey]:
        moving = set(new)
        get = self._storage.get
        return [get(e) for e in self._storage if e not in moving]

    def _tranche(self, start: Optional[E], end: Optional[E]):
        lower = None
        upper = None
        if start is not None:
            self._require(start, "start")
            lower = self._storage.get(start)
        if end is not None:
            self._require(end, "end")
            upper = self._storage.get(end)
        if lower is not None and upper is not None and not lower < upper:
            return lower, upper, []
        tranche = [
            e
            for e, k in self.items()
            if (lower is None or lower < k) and (upper is None or k < upper)
        ]
        return lower, upper, tranche

    def _assign_in_order(
        self,
        ordered: Sequence[E],
        lower: Optional[OrderKey] = None,
        upper: Optional[OrderKey] = None,
    ) -> None:
        if not ordered:
            return
        keys = generator.generate(len(ordered), lower, upper)
        self._storage.update(zip(ordered, keys), may_be_new=False)
        logger.debug("reassigned %d keys", len(keys))

    def _update(self, pairs: Iterable[Tuple[E, OrderKey]]) -> None:
        pairs = list(pairs)
        self._storage.update(pairs)
        logger.debug("placed %d elements", len(pairs))


def reorderable_set_of(
    *elements: E,
    get_key: Optional[KeyGetter] = None,
    set_key: Optional[KeySetter] = None,
) -> ReorderableContainer[E]:
    """Build a container holding ``elements`` in the given order.

    Without accessors the container keeps the keys itself. With ``get_key``
    and ``set_key`` the keys are written onto the elements, which suits
    elements stored elsewhere with their key, e.g. in a database row::

        reorderable_set_of(*cards, get_key=lambda c: c.sort_key,
                           set_key=lambda c, k: setattr(c, "sort_key", k))
    """
    if (get_key is None) != (set_key is None):
        raise InvalidArgument("get_key and set_key must be given together")
    storage = None
    if get_key is not None:
        storage = AccessorStorage(get_key, set_key)
    return ReorderableContainer(elements, storage=storage)


def from_keyed(elements: Iterable[E], get_key: KeyGetter, set_key: KeySetter) -> ReorderableContainer[E]:
    """Adopt elements that already carry their keys, without regenerating them."""
    storage = AccessorStorage(get_key, set_key, elements)
    keys = []
    for element in storage:
        key = storage.get(element)
        if not isinstance(key, OrderKey):
            raise InvalidArgument(f"element {element!r} has no order key")
        keys.append(key)
    if len(set(keys)) != len(keys):
        raise InvalidArgument("elements must not share an order key")
    return ReorderableContainer(storage=storage)
