"""
Typed registry.

Defines TypedRegistry, the in-memory keyed store every demo builds on, the
error hierarchy it raises, and build_index for derived foreign-key groupings.
"""

import logging
import typing

from collections import defaultdict
from typing import Callable, Dict, Generic, Hashable, Iterator, List, Optional, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")
F = TypeVar("F", bound=Hashable)


class RegistryError(Exception):
    """Base class for every error raised by a registry or an entity."""


class DuplicateKeyError(RegistryError):
    """An entity with the same identifier is already stored."""

    def __init__(self, key: typing.Any):
        super().__init__(f"An item with Id {key!r} already exists.")
        self.key = key


class NotFoundError(RegistryError, KeyError):
    """No entity is stored under the requested identifier."""

    def __init__(self, key: typing.Any, message: Optional[str] = None):
        super().__init__(message or f"Item with Id {key!r} not found.")
        self.key = key

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0])


class InvalidValueError(RegistryError, ValueError):
    """A value violates an entity constraint."""


def _default_key(item: typing.Any) -> typing.Any:
    return item.id


class TypedRegistry(Generic[K, V]):
    """
    Authoritative keyed store for one kind of entity.

    Entities are expected to be value-like (frozen dataclasses); the stored
    copy only ever changes through `update`. Iteration follows insertion order.
    """

    def __init__(self, key: Callable[[V], K] = _default_key, name: Optional[str] = None):
        self._key = key
        self._items: Dict[K, V] = {}
        self.name = name or "registry"

    @property
    def key_func(self) -> Callable[[V], K]:
        return self._key

    def add(self, item: V) -> None:
        if item is None:
            raise InvalidValueError("Cannot add None to a registry.")
        key = self._key(item)
        if key in self._items:
            raise DuplicateKeyError(key)
        self._items[key] = item
        logging.debug(f"{self.name}: added {key!r}")

    def get(self, key: K) -> V:
        try:
            return self._items[key]
        except KeyError:
            raise NotFoundError(key) from None

    def remove(self, key: K) -> None:
        if key not in self._items:
            raise NotFoundError(key, f"Cannot remove: Item with Id {key!r} not found.")
        del self._items[key]
        logging.debug(f"{self.name}: removed {key!r}")

    def update(self, key: K, mutation: Callable[[V], V]) -> V:
        """
        Replace the entity stored under `key` with `mutation(current)`.

        The mutation must return a new entity; entity validation errors
        propagate as InvalidValueError and leave the stored entity untouched.
        """
        current = self.get(key)
        try:
            replacement = mutation(current)
        except InvalidValueError:
            raise
        except ValueError as e:
            raise InvalidValueError(str(e)) from e
        if replacement is None:
            raise InvalidValueError(f"Mutation for Id {key!r} returned no entity.")
        new_key = self._key(replacement)
        if new_key != key:
            raise InvalidValueError(f"Mutation cannot change Id {key!r} to {new_key!r}.")
        self._items[key] = replacement
        logging.debug(f"{self.name}: updated {key!r}")
        return replacement

    def list(self) -> List[V]:
        return list(self._items.values())

    def find(self, predicate: Callable[[V], bool]) -> Optional[V]:
        for item in self._items.values():
            if predicate(item):
                return item
        return None

    def keys(self) -> List[K]:
        return list(self._items.keys())

    def clear(self) -> None:
        self._items.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[V]:
        return iter(self.list())

    def __repr__(self) -> str:
        return f"TypedRegistry(name={self.name!r}, size={len(self._items)})"


def build_index(items: typing.Iterable[V], foreign_key: Callable[[V], F]) -> Dict[F, List[V]]:
    """
    Group `items` by `foreign_key`, keeping each item's relative order.
    The result is a snapshot: rebuild it after the source registry changes.
    """
    index: Dict[F, List[V]] = defaultdict(list)
    for item in items:
        index[foreign_key(item)].append(item)
    return dict(index)
