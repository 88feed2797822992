"""
Inventory domain model.

Defines the stock item kinds (electronics, groceries and the logged
InventoryItem) and the Warehouse that manages one registry per kind.
"""

import dataclasses
import datetime
import typing

from dataclasses import dataclass

from .registry import InvalidValueError, TypedRegistry


def _check_quantity(quantity: int) -> None:
    if quantity < 0:
        raise InvalidValueError("Quantity cannot be negative")


def _today() -> datetime.date:
    return datetime.date.today()


def _check_name(value: str, label: str = "Name") -> None:
    if not value or not value.strip():
        raise InvalidValueError(f"{label} cannot be empty")


@dataclass(frozen=True)
class ElectronicItem:
    """
    Attributes:
        id: Unique item identifier.
        name: Product name.
        quantity: Units in stock, non-negative.
        brand: Manufacturer brand.
        warranty_months: Warranty length, non-negative.
    """

    id: int
    name: str
    quantity: int
    brand: str
    warranty_months: int

    def __post_init__(self):
        _check_quantity(self.quantity)
        _check_name(self.name)
        _check_name(self.brand, "Brand")
        if self.warranty_months < 0:
            raise InvalidValueError("Warranty months cannot be negative")

    def __str__(self) -> str:
        return (
            f"ElectronicItem [Id={self.id}, Name={self.name}, Quantity={self.quantity}, "
            f"Brand={self.brand}, WarrantyMonths={self.warranty_months}]"
        )


@dataclass(frozen=True)
class GroceryItem:
    """
    Attributes:
        id: Unique item identifier.
        name: Product name.
        quantity: Units in stock, non-negative.
        expiry_date: Must not be before today when the item is first created.
        check_expiry: Set to False when copying an item already in stock.
    """

    id: int
    name: str
    quantity: int
    expiry_date: datetime.date
    check_expiry: dataclasses.InitVar[bool] = True

    def __post_init__(self, check_expiry: bool):
        _check_quantity(self.quantity)
        _check_name(self.name)
        if check_expiry and self.expiry_date < _today():
            raise InvalidValueError("Expiry date cannot be in the past")

    def __str__(self) -> str:
        return (
            f"GroceryItem [Id={self.id}, Name={self.name}, Quantity={self.quantity}, "
            f"Expiry={self.expiry_date:%Y-%m-%d}]"
        )

    def with_quantity(self, quantity: int) -> "GroceryItem":
        # stock that has since expired can still be counted
        return dataclasses.replace(self, quantity=quantity, check_expiry=False)


@dataclass(frozen=True)
class InventoryItem:
    """A logged stock entry, persisted by `tally.storage`."""

    id: int
    name: str
    quantity: int
    date_added: datetime.datetime

    def __post_init__(self):
        _check_quantity(self.quantity)
        _check_name(self.name)

    def __str__(self) -> str:
        return (
            f"ID: {self.id}, Name: {self.name}, Quantity: {self.quantity}, "
            f"Date Added: {self.date_added:%Y-%m-%d}"
        )


S = typing.TypeVar("S", ElectronicItem, GroceryItem, InventoryItem)


def _with_quantity(item: S, quantity: int) -> S:
    if isinstance(item, GroceryItem):
        return item.with_quantity(quantity)
    return dataclasses.replace(item, quantity=quantity)


def update_quantity(registry: TypedRegistry[int, S], item_id: int, new_quantity: int) -> S:
    """Set the stored quantity of `item_id`; negative quantities are refused."""
    if new_quantity < 0:
        raise InvalidValueError("Quantity cannot be negative.")
    return registry.update(item_id, lambda item: _with_quantity(item, new_quantity))


def increase_stock(registry: TypedRegistry[int, S], item_id: int, amount: int) -> S:
    if amount <= 0:
        raise InvalidValueError("Quantity to increase must be positive.")
    current = registry.get(item_id)
    return update_quantity(registry, item_id, current.quantity + amount)


class Warehouse:
    """Holds the electronics and grocery inventories side by side."""

    def __init__(self):
        self.electronics: TypedRegistry[int, ElectronicItem] = TypedRegistry(name="electronics")
        self.groceries: TypedRegistry[int, GroceryItem] = TypedRegistry(name="groceries")

    def seed(self, today: typing.Optional[datetime.date] = None) -> None:
        today = today or datetime.date.today()
        days = datetime.timedelta
        self.electronics.add(ElectronicItem(1, "Smartphone", 50, "BrandX", 24))
        self.electronics.add(ElectronicItem(2, "Laptop", 30, "BrandY", 12))
        self.electronics.add(ElectronicItem(3, "Headphones", 100, "BrandZ", 6))

        self.groceries.add(GroceryItem(101, "Milk", 200, today + days(days=10)))
        self.groceries.add(GroceryItem(102, "Bread", 150, today + days(days=5)))
        self.groceries.add(GroceryItem(103, "Eggs", 300, today + days(days=20)))


def seed_inventory_log(registry: TypedRegistry[int, InventoryItem], now: typing.Optional[datetime.datetime] = None) -> None:
    now = now or datetime.datetime.now()
    days = datetime.timedelta
    registry.add(InventoryItem(1, "Laptop", 10, now - days(days=30)))
    registry.add(InventoryItem(2, "Desk Chair", 25, now - days(days=15)))
    registry.add(InventoryItem(3, "Headphones", 50, now - days(days=45)))
    registry.add(InventoryItem(4, "Keyboard", 40, now - days(days=10)))
    registry.add(InventoryItem(5, "Monitor", 20, now - days(days=5)))
