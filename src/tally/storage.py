"""
JSON persistence for registries.

Saves the insertion-ordered listing of a registry to an indented JSON array
and repopulates a fresh registry from it. Dates are stored as ISO strings.
I/O failures are logged and reported through the return value; they never
abort the caller.
"""

import dataclasses
import datetime
import decimal
import json
import logging
import pathlib
import typing

import pandas as pd

from .registry import RegistryError, TypedRegistry

T = typing.TypeVar("T")


def entity_to_dict(entity: typing.Any) -> dict:
    record = dataclasses.asdict(entity)
    for name, value in record.items():
        if isinstance(value, (datetime.date, datetime.datetime)):
            record[name] = value.isoformat()
        elif isinstance(value, decimal.Decimal):
            # as a string so no precision is lost
            record[name] = str(value)
    return record


def entity_from_dict(entity_cls: typing.Type[T], record: dict) -> T:
    """Build `entity_cls` from a JSON record, parsing date, datetime and Decimal fields back."""
    kwargs = {}
    hints = typing.get_type_hints(entity_cls)
    for fld in dataclasses.fields(entity_cls):
        if fld.name not in record:
            raise RegistryError(f"Record is missing field {fld.name!r}: {record!r}")
        value = record[fld.name]
        hint = hints.get(fld.name)
        if hint is datetime.datetime and isinstance(value, str):
            value = datetime.datetime.fromisoformat(value)
        elif hint is datetime.date and isinstance(value, str):
            value = datetime.date.fromisoformat(value)
        elif hint is decimal.Decimal and isinstance(value, (str, int)):
            value = decimal.Decimal(value)
        kwargs[fld.name] = value
    return entity_cls(**kwargs)


class JsonStore(typing.Generic[T]):
    """A JSON file holding the listing of one registry of `entity_cls` records."""

    def __init__(self, file_path: typing.Union[str, pathlib.Path], entity_cls: typing.Type[T]):
        if file_path is None:
            raise ValueError("file_path is required")
        self.file_path = pathlib.Path(file_path)
        self.entity_cls = entity_cls

    def save(self, registry: TypedRegistry[typing.Any, T]) -> bool:
        """
        Write the registry listing; returns False (after logging) when writing fails.
        The listing is serialized before the file is opened, so a record that
        cannot be encoded leaves the previous file intact.
        """
        try:
            payload = [entity_to_dict(item) for item in registry.list()]
            text = json.dumps(payload, indent=2)
            with open(self.file_path, "w", encoding="utf-8") as out_f:
                out_f.write(text)
        except (OSError, TypeError, ValueError) as e:
            logging.error(f"Error saving log to file {self.file_path}: {e}")
            return False
        logging.info(f"Saved {len(payload)} records to {self.file_path}")
        return True

    def load(self, registry: TypedRegistry[typing.Any, T]) -> bool:
        """
        Replace the registry contents with the records in the file.

        - missing file: the registry is emptied, returns True
        - unreadable or malformed file: logged, registry left as it was, returns False
        """
        if not self.file_path.is_file():
            logging.warning(f"Log file {self.file_path} not found, starting with empty log.")
            registry.clear()
            return True
        try:
            with open(self.file_path, "r", encoding="utf-8") as in_f:
                payload = json.load(in_f)
            if not isinstance(payload, list):
                raise RegistryError(f"Expected a JSON array, got {type(payload).__name__}")
            # validate everything before touching the registry
            staged: TypedRegistry[typing.Any, T] = TypedRegistry(key=registry.key_func, name=registry.name)
            for record in payload:
                staged.add(entity_from_dict(self.entity_cls, record))
        except (OSError, ValueError, TypeError, ArithmeticError, RegistryError) as e:
            logging.error(f"Error loading log from file {self.file_path}: {e}")
            return False
        registry.clear()
        for item in staged.list():
            registry.add(item)
        logging.info(f"Loaded {len(registry)} records from {self.file_path}")
        return True


def to_frame(registry: TypedRegistry[typing.Any, typing.Any]) -> pd.DataFrame:
    """Registry listing as a DataFrame, one row per entity in insertion order."""
    rows = [dataclasses.asdict(item) for item in registry.list()]
    return pd.DataFrame(rows)
