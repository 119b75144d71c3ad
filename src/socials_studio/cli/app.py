"""Typer app configuration and logging setup."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.logging import RichHandler

from .console import console

# Load environment variables from .env file
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="socials-studio",
    help="Social-media text and image generation with provider fallback",
    add_completion=False,
)


def register_commands() -> None:
    """Register all CLI commands."""
    from .commands import post, providers, serve

    app.command(name="serve")(serve)
    app.command(name="post")(post)
    app.command(name="providers")(providers)


def setup_logging(log_dir: Path | None = None, level: str = "INFO") -> None:
    """Configure logging for CLI and server.

    - Full provider traffic (``ai_calls``) goes to ``ai_calls.log``
    - Fallback and history warnings go to the console via Rich
    - Library chatter (httpx, httpcore) is suppressed
    """
    if log_dir is None:
        from ..settings import get_settings
        log_dir = get_settings().log_dir
    log_dir.mkdir(parents=True, exist_ok=True)

    # Suppress loggers that might print to console
    for logger_name in ["httpx", "httpcore", "asyncio"]:
        logger = logging.getLogger(logger_name)
        logger.setLevel(logging.WARNING)
        logger.propagate = False

    formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")

    # ai_calls logger with FileHandler for full AI request/response logging
    ai_calls_logger = logging.getLogger("ai_calls")
    ai_calls_logger.setLevel(logging.DEBUG)
    ai_calls_logger.propagate = False
    ai_calls_logger.handlers = []
    ai_file_handler = logging.FileHandler(log_dir / "ai_calls.log", encoding="utf-8")
    ai_file_handler.setLevel(logging.DEBUG)
    ai_file_handler.setFormatter(formatter)
    ai_calls_logger.addHandler(ai_file_handler)

    # Application loggers: file at the configured level, console for warnings
    console_handler = RichHandler(console=console, show_path=False)
    console_handler.setLevel(logging.WARNING)
    for logger_name in ["llm_fallback", "history", "generation"]:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level.upper())
        logger.propagate = False
        logger.handlers = [ai_file_handler, console_handler]


# Register all commands
register_commands()


def main() -> None:
    """CLI entry point."""
    from ..settings import get_settings

    settings = get_settings()
    setup_logging(settings.log_dir, settings.log_level)
    app()
