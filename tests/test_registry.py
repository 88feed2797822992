"""
Tests for TypedRegistry and build_index:
- add/get/remove/update/find/list semantics,
- error kinds and the no-change guarantee on failure,
- insertion order and snapshot listings.
"""

import dataclasses
import pytest

from tally.registry import (
    DuplicateKeyError,
    InvalidValueError,
    NotFoundError,
    RegistryError,
    TypedRegistry,
    build_index,
)


@dataclasses.dataclass(frozen=True)
class Item:
    id: int
    name: str
    quantity: int = 0

    def __post_init__(self):
        if self.quantity < 0:
            raise InvalidValueError("Quantity cannot be negative")


def make_registry(*ids):
    registry = TypedRegistry(name="items")
    for i in ids:
        registry.add(Item(i, f"item-{i}"))
    return registry


def test_add_then_get_returns_same_entity():
    registry = TypedRegistry()
    item = Item(7, "widget", 3)
    registry.add(item)
    assert registry.get(7) == item
    assert 7 in registry
    assert len(registry) == 1


def test_duplicate_add_raises_and_keeps_original():
    registry = make_registry(1)
    with pytest.raises(DuplicateKeyError):
        registry.add(Item(1, "other"))
    assert registry.get(1).name == "item-1"
    assert len(registry) == 1


def test_remove_then_get_raises_not_found():
    registry = make_registry(1, 2, 3)
    registry.remove(2)
    assert [i.id for i in registry.list()] == [1, 3]
    with pytest.raises(NotFoundError):
        registry.get(2)


@pytest.mark.parametrize("operation", ["get", "remove"])
def test_missing_key_raises_not_found(operation):
    registry = make_registry(1)
    with pytest.raises(NotFoundError) as info:
        getattr(registry, operation)(42)
    assert info.value.key == 42
    assert "42" in str(info.value)


def test_not_found_is_also_a_key_error():
    registry = make_registry()
    with pytest.raises(KeyError):
        registry.get("nope")


def test_invalid_value_is_also_a_value_error():
    assert issubclass(InvalidValueError, ValueError)
    assert issubclass(InvalidValueError, RegistryError)


def test_readded_entity_moves_to_end():
    registry = make_registry(1, 2, 3)
    registry.remove(1)
    registry.add(Item(1, "back again"))
    assert registry.keys() == [2, 3, 1]


def test_list_is_a_snapshot():
    registry = make_registry(1, 2)
    listing = registry.list()
    listing.clear()
    assert len(registry) == 2


def test_update_applies_mutation():
    registry = make_registry(1)
    updated = registry.update(1, lambda item: dataclasses.replace(item, quantity=5))
    assert updated.quantity == 5
    assert registry.get(1).quantity == 5


def test_update_rejected_by_entity_leaves_registry_unchanged():
    registry = make_registry(1)
    before = registry.get(1)
    with pytest.raises(InvalidValueError):
        registry.update(1, lambda item: dataclasses.replace(item, quantity=-1))
    assert registry.get(1) is before


def test_update_cannot_change_identifier():
    registry = make_registry(1)
    with pytest.raises(InvalidValueError):
        registry.update(1, lambda item: dataclasses.replace(item, id=2))
    assert registry.keys() == [1]


def test_update_missing_raises_not_found():
    registry = make_registry()
    with pytest.raises(NotFoundError):
        registry.update(1, lambda item: item)


def test_find_returns_first_match_or_none():
    registry = TypedRegistry()
    registry.add(Item(1, "bolt"))
    registry.add(Item(2, "nut"))
    registry.add(Item(3, "nut"))
    assert registry.find(lambda i: i.name == "nut").id == 2
    assert registry.find(lambda i: i.name == "gear") is None


def test_custom_key_function():
    registry = TypedRegistry(key=lambda item: item.name)
    registry.add(Item(1, "bolt"))
    assert registry.get("bolt").id == 1
    with pytest.raises(DuplicateKeyError):
        registry.add(Item(2, "bolt"))


def test_add_none_is_rejected():
    with pytest.raises(InvalidValueError):
        TypedRegistry().add(None)


def test_build_index_groups_in_source_order():
    rows = [Item(1, "a"), Item(2, "b"), Item(3, "a"), Item(4, "c"), Item(5, "a")]
    index = build_index(rows, lambda item: item.name)
    assert [i.id for i in index["a"]] == [1, 3, 5]
    assert [i.id for i in index["b"]] == [2]
    assert list(index) == ["a", "b", "c"]
    assert "missing" not in index


def test_update_type_error_is_not_converted():
    registry = make_registry(1)

    def broken(item):
        return dataclasses.replace(item, colour="red")

    with pytest.raises(TypeError):
        registry.update(1, broken)
    assert registry.get(1).quantity == 0
