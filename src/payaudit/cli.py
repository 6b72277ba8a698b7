"""payaudit CLI: audit maintenance and reports from the command line."""

import asyncio
from datetime import datetime

import typer
from rich.console import Console
from rich.table import Table

from payaudit import __version__
from payaudit import models  # noqa: F401 - registers every mapper
from payaudit.config import settings
from payaudit.modules.audit.services import PaymentAuditService


console = Console()

app = typer.Typer(
    name="payaudit",
    help="Maintain and inspect the payment audit trail.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def get_audit_service() -> PaymentAuditService:
    """Audit service bound to the application database."""
    from payaudit.core.database import async_session_factory  # noqa: PLC0415

    return PaymentAuditService(async_session_factory)


@app.callback(invoke_without_command=True)
def version_callback(
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit."
    ),
) -> None:
    """payaudit - payment audit trail tools."""
    if version:
        console.print(f"[bold cyan]payaudit[/bold cyan] version {__version__}")
        raise typer.Exit()


@app.command()
def cleanup(
    days: int = typer.Option(
        settings.audit_retention_days,
        "--days",
        "-d",
        min=1,
        help="Keep entries newer than this many days",
    ),
) -> None:
    """Delete low and medium severity entries past retention.

    High and critical entries are never deleted.
    """
    deleted = asyncio.run(get_audit_service().cleanup_old_logs(days))
    console.print(
        f"[green]Deleted {deleted} audit entries[/green] older than {days} days."
    )


@app.command()
def stats(
    start: datetime | None = typer.Option(
        None, "--start", help="Window start (inclusive)"
    ),
    end: datetime | None = typer.Option(None, "--end", help="Window end (inclusive)"),
) -> None:
    """Show audit entry counts per category and severity."""
    result = asyncio.run(
        get_audit_service().get_audit_statistics(start_date=start, end_date=end)
    )

    console.print(f"\n[bold]Total actions:[/bold] {result.total_actions}\n")

    for title, breakdown in (
        ("By Category", result.category_breakdown),
        ("By Severity", result.severity_breakdown),
    ):
        table = Table(title=title, show_header=True)
        table.add_column("Name", style="cyan", no_wrap=True)
        table.add_column("Count", justify="right", style="green")
        for name, count in sorted(breakdown.items()):
            table.add_row(name, str(count))
        console.print(table)
        console.print()


@app.command()
def suspicious(
    hours: int = typer.Option(
        settings.audit_suspicious_window_hours,
        "--hours",
        min=1,
        help="Look-back window in hours",
    ),
    limit: int = typer.Option(50, "--limit", "-l", min=1, help="Maximum entries"),
) -> None:
    """List recent critical, security, rejection and file deletion entries."""
    entries = asyncio.run(
        get_audit_service().get_suspicious_activities(limit=limit, hours=hours)
    )

    if not entries:
        console.print(f"[green]No suspicious activity in the last {hours} hours.[/green]")
        return

    table = Table(title=f"Suspicious Activity (last {hours}h)", show_header=True)
    table.add_column("Time", no_wrap=True)
    table.add_column("Action", style="cyan", overflow="fold")
    table.add_column("Severity", style="red", no_wrap=True)
    table.add_column("Performed By", overflow="fold")
    table.add_column("Description", overflow="fold")

    for entry in entries:
        table.add_row(
            entry.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            str(entry.action),
            str(entry.severity),
            str(entry.performed_by)[:8],
            entry.description,
        )

    console.print()
    console.print(table)
    console.print()


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
