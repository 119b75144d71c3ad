"""Provider error taxonomy.

Every failure a provider adapter can hit is raised as a ``ProviderError`` so
the fallback chain can record it and move on to the next provider.
"""

from __future__ import annotations


class ProviderError(Exception):
    """A single provider attempt failed.

    Attributes:
        provider: Name of the provider that failed.
        cause: Human-readable failure reason.
    """

    def __init__(self, provider: str, cause: str | BaseException):
        self.provider = provider
        self.cause = cause
        super().__init__(f"{provider}: {cause}")

    @property
    def reason(self) -> str:
        """Failure reason without the provider prefix."""
        return str(self.cause)


class ConfigurationError(ProviderError):
    """Provider is missing a required credential. No network call was made."""


class UnsupportedOperationError(ProviderError):
    """Provider does not offer the requested operation."""
