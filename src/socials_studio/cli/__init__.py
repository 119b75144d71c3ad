"""Command-line interface.

Usage:
    socials-studio serve --port 8000
    socials-studio post "Launch of our summer menu" --platform instagram
    socials-studio providers
"""

from .app import app, main, setup_logging

__all__ = ["app", "main", "setup_logging"]
