"""
Command‑line interface for the tally demos.
Each subcommand seeds (or reads) its sample data into typed registries,
exercises the registry operations and prints the results.
"""

import click
import logging
import sys
import typing

from stairval.notepad import create_notepad

from .finance import Account, AccountKind, FinanceApp, seed_transactions
from .grading import InvalidScoreFormatError, grade_summary, read_students, write_report
from .health import HealthSystem, seed_health_system
from .inventory import (
    ElectronicItem,
    InventoryItem,
    Warehouse,
    increase_stock,
    seed_inventory_log,
    update_quantity,
)
from .registry import DuplicateKeyError, InvalidValueError, NotFoundError, RegistryError, TypedRegistry
from .storage import JsonStore


def _configure_logging(verbose_logging: bool, log_file_path: typing.Optional[str]) -> None:
    handlers: list[logging.Handler] = []
    if log_file_path:
        handlers.append(logging.FileHandler(log_file_path, mode="a", encoding="utf-8"))
    if verbose_logging:
        handlers.append(logging.StreamHandler(sys.stderr))
    if handlers:
        logging.basicConfig(
            level=logging.DEBUG if verbose_logging else logging.INFO,
            format="%(asctime)s %(levelname)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            handlers=handlers,
            force=True,
        )


@click.group()
@click.option("--verbose-logging", is_flag=True, help="Also emit debug logs to stderr")
@click.option(
    "--log-file-path",
    type=click.Path(dir_okay=False, writable=True),
    help="Append timestamped logs to this file",
)
def main(verbose_logging: bool, log_file_path: typing.Optional[str]):
    """tally: typed registry demos for finance, health, grading and inventory."""
    _configure_logging(verbose_logging, log_file_path)


@main.command(name="finance")
@click.option(
    "--account-kind",
    type=click.Choice([kind.value for kind in AccountKind], case_sensitive=False),
    default=AccountKind.SAVINGS.value,
    show_default=True,
    help="withdrawal rules of the account",
)
@click.option("--initial-balance", type=str, default="1000", show_default=True)
def finance(account_kind: str, initial_balance: str):
    """
    Process three sample transactions through their payment channels and
    apply them to one account.
    """
    try:
        account = Account("SA-12345", initial_balance, AccountKind.from_label(account_kind))
    except InvalidValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    app = FinanceApp(account)
    results = [app.process(transaction, channel) for transaction, channel in seed_transactions()]
    # all channel lines first, then the account lines
    for channel_line, _ in results:
        click.echo(channel_line)
    for _, account_line in results:
        click.echo(account_line)
    click.echo(f"Recorded {len(app.transactions)} transactions")


@main.command(name="health")
@click.option("-p", "--patient-id", type=int, default=1, show_default=True, help="patient whose prescriptions to show")
def health(patient_id: int):
    """List the sample patients and the prescriptions of one of them."""
    system = HealthSystem()
    seed_health_system(system)
    system.build_prescription_map()

    click.echo("All Patients:")
    for patient in system.patients.list():
        click.echo(str(patient))
    click.echo("")

    patient = system.find_patient(patient_id)
    if patient is None:
        click.echo(f"No patient found with Id = {patient_id}")
        return

    click.echo(f"Prescriptions for {patient.name}:")
    prescriptions = system.prescriptions_for(patient_id)
    if not prescriptions:
        click.echo("  No prescriptions found.")
        return
    for prescription in prescriptions:
        click.echo(f"  {prescription}")


def _print_inventory(label: str, registry: TypedRegistry) -> None:
    click.echo(f"Inventory for {label}:")
    for item in registry.list():
        click.echo(str(item))
    click.echo("")


@main.command(name="warehouse")
def warehouse():
    """Seed both inventories, then walk through the registry error cases."""
    manager = Warehouse()
    try:
        manager.seed()
    except RegistryError as e:
        click.echo(f"Error during seeding data: {e}")

    _print_inventory("GroceryItem", manager.groceries)
    _print_inventory("ElectronicItem", manager.electronics)

    click.echo("Trying to add a duplicate electronic item...")
    try:
        manager.electronics.add(ElectronicItem(1, "Tablet", 10, "BrandA", 18))
    except DuplicateKeyError as e:
        click.echo(f"Caught DuplicateKeyError: {e}")

    click.echo("Trying to remove a non-existent grocery item...")
    try:
        manager.groceries.remove(999)
    except NotFoundError as e:
        click.echo(f"Caught NotFoundError: {e}")

    click.echo("Trying to update quantity to invalid value...")
    try:
        update_quantity(manager.electronics, 2, -5)
    except InvalidValueError as e:
        click.echo(f"Caught InvalidValueError: {e}")

    click.echo("Increasing stock of existing electronic item (Id=2) by 15:")
    try:
        item = increase_stock(manager.electronics, 2, 15)
        click.echo(f"Increased stock for item Id=2 by 15. New quantity: {item.quantity}")
    except RegistryError as e:
        click.echo(f"{type(e).__name__}: {e}")

    click.echo("")
    _print_inventory("ElectronicItem", manager.electronics)


def _report_issues(notepad):
    # if there were errors, show them
    if notepad.has_errors(include_subsections=True):
        click.echo("Errors found in input:")
        for err in notepad.errors():
            click.echo(f"- {err}")
    if notepad.has_warnings(include_subsections=True):
        click.echo("Warnings found in input:")
        for w in notepad.warnings():
            click.echo(f"- {w}")


@main.command(name="grades")
@click.option(
    "-i",
    "--input-path",
    default="students_input.txt",
    show_default=True,
    envvar="TALLY_STUDENTS_INPUT",
    type=click.Path(dir_okay=False),
    help="student file with `id,full name,score` lines",
)
@click.option(
    "-o",
    "--output-path",
    default="students_report.txt",
    show_default=True,
    envvar="TALLY_STUDENTS_REPORT",
    type=click.Path(dir_okay=False),
    help="where to write the report",
)
@click.option("--strict", is_flag=True, help="Stop at the first malformed line")
@click.option("--summary", is_flag=True, help="Also print the grade distribution")
def grades(input_path: str, output_path: str, strict: bool, summary: bool):
    """Grade every student in the input file and write the text report."""
    notepad = create_notepad("students")
    try:
        students = read_students(input_path, notepad, strict=strict)
    except OSError as e:
        click.echo(f"File error: {e}", err=True)
        sys.exit(1)
    except InvalidScoreFormatError as e:
        click.echo(f"Score format error: {e}", err=True)
        sys.exit(1)
    except (InvalidValueError, DuplicateKeyError) as e:
        click.echo(f"Data error: {e}", err=True)
        sys.exit(1)

    _report_issues(notepad)

    try:
        write_report(students.list(), output_path)
    except OSError as e:
        click.echo(f"File error: {e}", err=True)
        sys.exit(1)
    click.echo(f"Report written successfully to '{output_path}'.")

    if summary:
        click.echo(grade_summary(students.list()).to_string())


@main.command(name="inventory-log")
@click.option(
    "-f",
    "--data-file",
    default="inventory_data.json",
    show_default=True,
    envvar="TALLY_INVENTORY_FILE",
    type=click.Path(dir_okay=False),
    help="JSON file the log is saved to and loaded from",
)
@click.option("--seed/--no-seed", default=True, help="Seed and save sample items before reloading")
def inventory_log(data_file: str, seed: bool):
    """Save the inventory log to JSON, then reload it in a fresh registry."""
    store = JsonStore(data_file, InventoryItem)

    if seed:
        click.echo("Seeding sample data...")
        log: TypedRegistry[int, InventoryItem] = TypedRegistry(name="inventory-log")
        seed_inventory_log(log)
        click.echo("Saving data to file...")
        if not store.save(log):
            click.echo(f"Error saving log to file {data_file}", err=True)

    click.echo("Loading data from file...")
    reloaded: TypedRegistry[int, InventoryItem] = TypedRegistry(name="inventory-log")
    if not store.load(reloaded):
        click.echo(f"Error loading log from file {data_file}", err=True)

    items = reloaded.list()
    if not items:
        click.echo("No inventory items to display.")
        return
    click.echo("Inventory Items:")
    for item in items:
        click.echo(str(item))


if __name__ == "__main__":
    main()
