"""Rich console singleton for CLI output."""

import sys

from rich.console import Console

# safe_box avoids box-drawing characters cp1252 cannot encode
console = Console(safe_box=sys.platform == "win32")


def print_info(message: str) -> None:
    console.print(f"[cyan]{message}[/cyan]")
