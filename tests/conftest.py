import datetime
import pytest

from tally.registry import TypedRegistry
from tally.inventory import InventoryItem


@pytest.fixture
def students_file(tmp_path) -> str:
    """
    Student input with two valid lines, a blank line and three malformed ones.
    """
    path = tmp_path / "students_input.txt"
    path.write_text(
        "1, Ama Owusu, 85\n"
        "2, Kofi Mensah, 64\n"
        "\n"
        "3, Missing Score\n"
        "4, Bad Score, eighty\n"
        "5, Too High, 101\n",
        encoding="utf-8",
    )
    return str(path)


@pytest.fixture
def inventory_log() -> TypedRegistry:
    registry = TypedRegistry(name="inventory-log")
    added = datetime.datetime(2024, 5, 1, 9, 30)
    registry.add(InventoryItem(1, "Laptop", 10, added))
    registry.add(InventoryItem(2, "Desk Chair", 25, added - datetime.timedelta(days=15)))
    registry.add(InventoryItem(3, "Headphones", 50, added - datetime.timedelta(days=45)))
    return registry
