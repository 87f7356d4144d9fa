"""Exception hierarchy for credential refresh and header production."""

from __future__ import annotations


class CredentialError(Exception):
    """Base class for every error raised by :mod:`cmdauth`."""


class UnsupportedScheme(CredentialError, ValueError):
    """Raised when a scheme name does not match any known :class:`AuthScheme`."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unsupported authorization scheme: {name!r}")
        self.name = name


class RefreshError(CredentialError):
    """Raised when a token refresh fails.  Never retried automatically."""


class CommandExecutionError(RefreshError):
    """The refresh command could not be launched or its output read as text."""


class InvalidRefreshOutput(RefreshError):
    """The refresh command printed something other than ``<token> <lifetime>``."""
