from __future__ import annotations

from dotenv import load_dotenv

load_dotenv()

import asyncio
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from crmpro.config import get_settings
from crmpro.errors import CrmError
from crmpro.logging_utils import setup_logging
from crmpro.models import Source
from crmpro.services import customers as customer_service
from crmpro.services import scheduler
from crmpro.services.importer import import_file
from crmpro.services.reconcile import NoMatch
from crmpro.services.session import ReconciliationSession
from crmpro.store import CustomerStore

app = typer.Typer(help="CRM Pro — customer records and follow-ups")
console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")) -> None:
    setup_logging("DEBUG" if verbose else get_settings().log_level)


def _fail(exc: CrmError) -> None:
    console.print(f"[red]{exc}[/red]")
    raise typer.Exit(code=1)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Host to bind to"),
    port: int = typer.Option(8000, help="Port to bind to"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
) -> None:
    """Start the CRM Pro API server."""
    import uvicorn

    uvicorn.run("crmpro.web:create_app", host=host, port=port, reload=reload, factory=True)


@app.command()
def doings() -> None:
    """Show open follow-up tasks, soonest first."""
    tasks = scheduler.open_tasks(CustomerStore().all())
    if not tasks:
        console.print("[green]All clear! No open tasks.[/green]")
        return

    table = Table(title=f"Open Doings ({len(tasks)})")
    table.add_column("Company", style="cyan")
    table.add_column("Next Steps", style="white")
    table.add_column("Due", style="yellow")
    for t in tasks:
        due = f"[bold red]{t.due.isoformat()}[/bold red]" if t.overdue else t.due.isoformat()
        table.add_row(t.customer.company_name, t.description or "—", due)
    console.print(table)


@app.command("customers")
def list_customers(
    search: str = typer.Option("", help="Search company, person, email and industry"),
    inactive: bool = typer.Option(False, help="Show inactive customers instead of active ones"),
    sort_by: str = typer.Option("lastContact", help="lastContact, firstContact or companyName"),
) -> None:
    """List customers."""
    try:
        rows = customer_service.query_customers(
            CustomerStore().all(), search=search, inactive=inactive, sort_by=sort_by
        )
    except CrmError as exc:
        _fail(exc)
    table = Table(title="Inactive Customers" if inactive else "Active Customers")
    table.add_column("Company", style="cyan")
    table.add_column("Contact")
    table.add_column("Last Contact", style="yellow")
    table.add_column("Reminder", style="magenta")
    for c in rows:
        last = str(c.last_contact)
        if customer_service.is_stale_contact(c):
            last = f"[dim]{last}[/dim]"
        table.add_row(
            c.company_name,
            c.contact_person,
            last,
            c.reminder_date.isoformat() if c.reminder_date else "—",
        )
    console.print(table)


@app.command()
def add(
    company_name: str = typer.Argument(..., help="Company name"),
    contact_person: str = typer.Option("", help="Contact person"),
    email: str = typer.Option("", help="Email address"),
    phone: str = typer.Option("", help="Phone number"),
    source: Source = typer.Option(Source.OTHER, help="How the contact was found"),
) -> None:
    """Create a customer."""
    try:
        customer = customer_service.create_customer(
            CustomerStore(),
            {
                "company_name": company_name,
                "contact_person": contact_person,
                "email": email,
                "phone": phone,
                "source": source,
            },
        )
    except CrmError as exc:
        _fail(exc)
    console.print(f"[green]Created {customer.company_name}[/green] ({customer.id})")


@app.command("import")
def import_customers(path: Path = typer.Argument(..., exists=True, dir_okay=False)) -> None:
    """Import customers from a CSV or Excel file."""
    try:
        result = import_file(CustomerStore(), path.name, path.read_bytes())
    except CrmError as exc:
        _fail(exc)
    if result.accepted:
        console.print(f"[green]{result.accepted} customers imported.[/green]")
    else:
        console.print("[yellow]No valid customers found. Check the file format and content.[/yellow]")


@app.command()
def assign(
    path: Optional[Path] = typer.Argument(None, help="File with the email text (default: stdin)"),
    note_only: bool = typer.Option(False, "--note-only", help="Only add the summary note"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Apply without asking"),
) -> None:
    """Match an email to a customer and merge the extracted contact details."""
    text = path.read_text(encoding="utf-8") if path else sys.stdin.read()
    session = ReconciliationSession(CustomerStore())
    try:
        outcome = asyncio.run(session.submit(text))
    except CrmError as exc:
        _fail(exc)

    if isinstance(outcome, NoMatch):
        console.print(f"[yellow]{outcome.message}[/yellow]")
        return

    console.print(f"Matched [cyan]{outcome.customer.company_name}[/cyan]")
    console.print(f"Summary: {outcome.summary}")
    if outcome.has_changes:
        table = Table(title="Proposed changes")
        table.add_column("Field", style="magenta")
        table.add_column("Current", style="dim")
        table.add_column("New", style="green")
        for change in outcome.changes:
            table.add_row(change.field, change.old_value or "—", change.new_value)
        console.print(table)
    else:
        console.print("No new or changed contact details found.")

    if not yes and not typer.confirm("Save?", default=True):
        session.discard()
        console.print("Discarded.")
        return

    if note_only or not outcome.has_changes:
        session.note_only()
        console.print(f"[green]Note added to {outcome.customer.company_name}.[/green]")
    else:
        session.apply_and_note()
        console.print(f"[green]Updated {outcome.customer.company_name} and added note.[/green]")
