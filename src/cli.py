"""Command-line interface for inventory administration."""

import json
import sys

import click
from pydantic import ValidationError as PydanticValidationError

from .schemas.requests import StockInCreate, StockOutCreate
from .services.reconciliation_service import ReconciliationService
from .services.report_service import ReportService
from .services.stock_in_service import StockInService
from .services.stock_out_service import StockOutService
from .store.database import get_database
from .utils.config import get_config
from .utils.exceptions import BaseAppException


def _fail(message: str):
    click.echo(click.style(f"✗ {message}", fg="red"), err=True)
    sys.exit(1)


@click.group()
@click.version_option(version="1.0.0")
def cli():
    """
    Inventory administration CLI.

    Create the schema, reconcile stock and debt counters, import ledger
    backfills and print reports.
    """
    pass


@cli.command("init-db")
def init_db():
    """Create all tables that do not exist yet."""
    try:
        get_database().create_all()
        click.echo(click.style("✓ Database tables created", fg="green"))
    except Exception as e:
        _fail(f"Could not create tables: {str(e)}")


@cli.command()
@click.option("--fix", is_flag=True, help="Overwrite drifted counters with the ledger value")
@click.option("--apply-pending", is_flag=True, help="Apply entries recorded without counter changes first")
def reconcile(fix: bool, apply_pending: bool):
    """
    Check Product.currentStock and Supplier.totalDebt against the ledgers.

    Exits 1 when drift remains or errors occurred.
    """
    click.echo("Reconciling stock and debt counters...")
    if fix:
        click.echo(click.style("Drifted counters will be repaired", fg="yellow", bold=True))
    click.echo()

    result = ReconciliationService().reconcile(fix=fix, apply_pending=apply_pending)

    click.echo("─" * 60)
    if result.is_consistent:
        click.echo(click.style("✓ Counters are consistent", fg="green", bold=True))
    else:
        click.echo(click.style("✗ Counters drifted from the ledger", fg="red", bold=True))

    click.echo()
    click.echo(f"Records checked: {result.checked_count}")
    click.echo(f"Pending applied: {result.pending_applied_count}")
    click.echo(click.style(f"Drifted:         {result.drift_count}", fg="red" if result.drift_count else None))
    click.echo(f"Fixed:           {result.fixed_count}")
    click.echo(f"Duration:        {result.duration:.2f}s")

    if result.drifts:
        click.echo()
        click.echo(click.style(f"Drifts ({result.drift_count}):", bold=True))
        for drift in result.drifts[:20]:
            marker = "fixed" if drift.fixed else "open"
            click.echo(
                f"  - [{marker}] {drift.record_type} {drift.name}: {drift.counter} "
                f"stored={drift.stored} expected={drift.expected}"
            )
        if result.drift_count > 20:
            click.echo(f"  ... and {result.drift_count - 20} more")
            click.echo("  Check logs/reconcile.log for full details")

    if result.errors:
        click.echo()
        click.echo(click.style(f"Errors ({len(result.errors)}):", fg="red", bold=True))
        for error in result.errors[:10]:
            click.echo(f"  - {error.record_id}: {error.message}")

    click.echo("─" * 60)
    sys.exit(0 if result.is_consistent else 1)


@cli.command("import-ledger")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--skip-counters", is_flag=True, help="Record entries without touching stock or debt")
@click.option("--user", default="import", show_default=True, help="Value stored as createdBy")
def import_ledger(path: str, skip_counters: bool, user: str):
    """
    Import Stock-In / Stock-Out entries from a JSON file.

    PATH: JSON object with optional "stockIn" and "stockOut" arrays, each
    item shaped like the corresponding API request body.
    """
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        _fail(f"Invalid JSON in {path}: {str(e)}")

    apply_counters = not skip_counters
    stock_in_service = StockInService()
    stock_out_service = StockOutService()
    imported = 0
    failed = 0

    batches = [
        ("stockIn", StockInCreate, stock_in_service),
        ("stockOut", StockOutCreate, stock_out_service),
    ]
    for key, schema, service in batches:
        for index, item in enumerate(data.get(key, [])):
            try:
                service.create(schema.model_validate(item), created_by=user, apply_counters=apply_counters)
                imported += 1
            except PydanticValidationError as e:
                failed += 1
                click.echo(click.style(f"  {key}[{index}]: {e.errors()[0]['msg']}", fg="red"))
            except BaseAppException as e:
                failed += 1
                click.echo(click.style(f"  {key}[{index}]: {e.message}", fg="red"))

    click.echo()
    click.echo(f"Imported: {imported}")
    click.echo(click.style(f"Failed:   {failed}", fg="red" if failed else None))
    if skip_counters and imported:
        click.echo(click.style(
            "Counters were not changed; run `reconcile --apply-pending` to apply them",
            fg="yellow"
        ))
    sys.exit(0 if failed == 0 else 1)


# ------------------------------------------------------------------
# Reports
# ------------------------------------------------------------------

@cli.group()
def report():
    """Print a report as JSON."""
    pass


def _print_report(build):
    try:
        click.echo(json.dumps(build(), indent=2, default=str))
    except BaseAppException as e:
        _fail(e.message)


@report.command("stock-status")
def report_stock_status():
    """Stock of every product, grouped by category."""
    _print_report(lambda: ReportService().stock_status_report())


@report.command("sales")
@click.option("--start", "start_date", required=True, help="YYYY-MM-DD")
@click.option("--end", "end_date", required=True, help="YYYY-MM-DD")
def report_sales(start_date: str, end_date: str):
    """Sales by product and by day."""
    _print_report(lambda: ReportService().sales_report(start_date, end_date))


@report.command("profit")
@click.option("--start", "start_date", required=True, help="YYYY-MM-DD")
@click.option("--end", "end_date", required=True, help="YYYY-MM-DD")
def report_profit(start_date: str, end_date: str):
    """Revenue, cost of goods sold and gross profit."""
    _print_report(lambda: ReportService().profit_report(start_date, end_date))


@report.command("debts")
def report_debts():
    """Outstanding supplier debts."""
    _print_report(lambda: ReportService().outstanding_debts_report())


@cli.command()
def config_info():
    """Display current configuration settings."""
    try:
        config = get_config()

        click.echo("Configuration Settings:")
        click.echo("=" * 60)
        click.echo()

        click.echo("Environment:")
        click.echo(f"  Environment:     {config.env.environment}")
        click.echo(f"  Log level:       {config.logging.level}")
        click.echo(f"  Port:            {config.env.port}")
        click.echo()

        click.echo("Store:")
        click.echo(f"  Database URL:    {config.env.database_url}")
        click.echo(f"  Create tables:   {config.store.create_tables}")
        click.echo(f"  Max retries:     {config.store.max_retries}")
        click.echo()

        click.echo("Auth:")
        click.echo(f"  Token required:  {config.auth.require_admin_token}")
        click.echo(f"  Admin token:     {'set' if config.env.admin_token else 'not set'}")
        click.echo()

        click.echo("Reconciliation:")
        click.echo(f"  Scheduled:       {config.scheduler.enabled}")
        click.echo(f"  Interval:        {config.env.reconcile_interval_minutes} minutes")
        click.echo(f"  Auto fix:        {config.scheduler.auto_fix}")
        click.echo()

    except Exception as e:
        _fail(f"Error loading config: {str(e)}")


if __name__ == "__main__":
    cli()
