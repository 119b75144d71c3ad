"""Display functions for CLI commands - pure functions for Rich output."""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..content.models import SocialPostParams
from ..services import AllProvidersExhausted, TextResult


def show_post_config(console: Console, params: SocialPostParams) -> None:
    """Display social post parameters panel."""
    console.print(Panel(
        f"Topic: [green]{params.topic}[/green]\n"
        f"Platform: [cyan]{params.platform.value}[/cyan]\n"
        f"Tone: [yellow]{params.tone.value}[/yellow]\n"
        f"Audience: [yellow]{params.target_audience or 'general audience'}[/yellow]\n"
        f"Hashtags: [yellow]{'yes' if params.include_hashtags else 'no'}[/yellow]  "
        f"Emojis: [yellow]{'yes' if params.include_emojis else 'no'}[/yellow]",
        title="Social Post",
    ))


def show_post_result(console: Console, result: TextResult) -> None:
    """Display a generated post with its hashtags."""
    hashtags = " ".join(f"#{tag}" for tag in result.hashtags or [])
    body = escape(result.content or "")
    if hashtags:
        body += f"\n\n[cyan]{hashtags}[/cyan]"

    fallback = ""
    if result.failed_providers:
        fallback = f" after {', '.join(result.failed_providers)} failed"

    console.print(Panel(
        body,
        title=f"{result.provider} ({result.model_used})",
        subtitle=f"{result.generation_time_ms}ms{fallback}",
        border_style="green",
    ))


def show_exhausted(console: Console, error: AllProvidersExhausted) -> None:
    """Display the ordered failure trail."""
    console.print("\n[red]Error: All providers failed[/red]")
    if not error.attempts:
        console.print("  [dim]No providers configured for this chain[/dim]")
    for position, attempt in enumerate(error.attempts, start=1):
        console.print(
            f"  [dim]{position}.[/dim] [bold]{attempt.provider}[/bold] "
            f"[dim]({attempt.error_type})[/dim] [yellow]{escape(attempt.error or '')}[/yellow]"
        )


def show_providers_table(console: Console, rows: list[dict[str, Any]]) -> None:
    """Display provider chains with model and credential status."""
    if not rows:
        console.print("[yellow]No providers enabled.[/yellow]")
        return

    table = Table(title="Provider Chains")
    table.add_column("Chain", style="cyan")
    table.add_column("#", style="dim")
    table.add_column("Provider", style="white")
    table.add_column("Model", style="yellow")
    table.add_column("Credentials")

    for row in rows:
        status = "[green]ready[/green]" if row["configured"] else "[red]missing[/red]"
        table.add_row(
            row["kind"],
            str(row["position"]),
            row["name"],
            row["model"],
            status,
        )

    console.print(table)
