from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Dict, Generic, Hashable, Iterable, Iterator, Tuple, TypeVar

from .keys import OrderKey

E = TypeVar("E", bound=Hashable)

KeyGetter = Callable[[E], OrderKey]
KeySetter = Callable[[E, OrderKey], None]


class KeyStorage(ABC, Generic[E]):
    """Where a container keeps the element -> order key mapping.

    The container only ever talks to this interface. Iteration is unordered.
    """

    @abstractmethod
    def __contains__(self, element: object) -> bool: ...

    @abstractmethod
    def __len__(self) -> int: ...

    @abstractmethod
    def __iter__(self) -> Iterator[E]: ...

    @abstractmethod
    def get(self, element: E) -> OrderKey:
        """Return the key of an element known to be stored."""

    @abstractmethod
    def update(self, pairs: Iterable[Tuple[E, OrderKey]], may_be_new: bool = True) -> None:
        """Assign keys, adding the elements unless ``may_be_new`` is false."""

    @abstractmethod
    def discard(self, element: E) -> bool:
        """Forget an element, returning whether it was stored."""


class MapStorage(KeyStorage[E]):
    """In-memory store owning the keys; elements carry no key of their own."""

    def __init__(self) -> None:
        self.keys: Dict[E, OrderKey] = {}

    def __contains__(self, element: object) -> bool:
        return element in self.keys

    def __len__(self) -> int:
        return len(self.keys)

    def __iter__(self) -> Iterator[E]:
        return iter(self.keys)

    def get(self, element: E) -> OrderKey:
        return self.keys[element]

    def update(self, pairs: Iterable[Tuple[E, OrderKey]], may_be_new: bool = True) -> None:
        self.keys.update(pairs)

    def discard(self, element: E) -> bool:
        return self.keys.pop(element, None) is not None


class AccessorStorage(KeyStorage[E]):
    """Keys live on caller-owned objects, read and written through two callables.

    Only membership is kept here. ``set_key`` is always called on an incoming
    element before ``get_key`` is, so the key attribute may start out unset.
    Elements given to the constructor are adopted with the keys they already
    carry.
    """

    def __init__(self, get_key: KeyGetter, set_key: KeySetter, elements: Iterable[E] = ()) -> None:
        self.get_key = get_key
        self.set_key = set_key
        self.members: Dict[E, None] = dict.fromkeys(elements)

    def __contains__(self, element: object) -> bool:
        return element in self.members

    def __len__(self) -> int:
        return len(self.members)

    def __iter__(self) -> Iterator[E]:
        return iter(self.members)

    def get(self, element: E) -> OrderKey:
        return self.get_key(element)

    def update(self, pairs: Iterable[Tuple[E, OrderKey]], may_be_new: bool = True) -> None:
        for element, key in pairs:
            self.set_key(element, key)
            if may_be_new:
                self.members[element] = None

    def discard(self, element: E) -> bool:
        try:
            del self.members[element]
        except KeyError:
            return False
        return True
