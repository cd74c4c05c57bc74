"""Rich formatting helpers for the Tether CLI.

Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from tether.models.trigger import ConstraintActivation, TriggerContext
    from tether.storage.schema import ActivationLogRow


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def format_context(context: TriggerContext, console: Console) -> None:
    """Display the normalized trigger context."""
    keywords = ", ".join(context.keywords) if context.keywords else "(none)"
    console.print(f"Keywords:     [cyan]{escape(keywords)}[/cyan]")
    console.print(f"Context type: [magenta]{escape(context.context_type)}[/magenta]")
    if context.file_path:
        console.print(f"File:         {escape(context.file_path)}")


def format_activations(activations: list[ConstraintActivation], console: Console) -> None:
    """Display ranked activations as a table."""
    if not activations:
        console.print("[dim]No constraints activated.[/dim]")
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Constraint", style="yellow")
    table.add_column("Confidence", justify="right", style="green")
    table.add_column("Reason", style="cyan")
    table.add_column("Reminder")

    for rank, activation in enumerate(activations, start=1):
        reminder = activation.reminders[0] if activation.reminders else ""
        table.add_row(
            str(rank),
            escape(activation.constraint_id),
            f"{activation.confidence_score:.2f}",
            activation.reason.value,
            escape(reminder),
        )

    console.print(table)


def format_schedule(decisions: list[bool], console: Console) -> None:
    """Display the cadence decision for each interaction."""
    for number, inject in enumerate(decisions, start=1):
        marker = "[green]inject[/green]" if inject else "[dim]skip[/dim]"
        console.print(f"{number:>4}  {marker}")


def format_activation_log(entries: list[ActivationLogRow], console: Console) -> None:
    """Display audit log entries, newest first."""
    if not entries:
        console.print("[dim]No activations logged.[/dim]")
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Time", style="dim")
    table.add_column("#", justify="right")
    table.add_column("Constraint", style="yellow")
    table.add_column("Confidence", justify="right", style="green")
    table.add_column("Reason", style="cyan")
    table.add_column("Context")

    for entry in entries:
        table.add_row(
            entry.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            str(entry.interaction_number) if entry.interaction_number is not None else "",
            escape(entry.constraint_id),
            f"{entry.confidence:.2f}",
            entry.reason,
            escape(entry.context_type),
        )

    console.print(table)


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
