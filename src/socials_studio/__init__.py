"""Socials Studio - AI social-media text and image generation service."""

__version__ = "0.1.0"
