"""cmdauth -- self-refreshing Authorization headers backed by an external command."""

from cmdauth.errors import (
    CommandExecutionError,
    CredentialError,
    InvalidRefreshOutput,
    RefreshError,
    UnsupportedScheme,
)
from cmdauth.models import AuthScheme, LifespanKind, Token, TokenLifespan
from cmdauth.provider import AUTHORIZATION_HEADER, CredentialProvider
from cmdauth.refresh import parse_refresh_output, run_refresh_command

__version__ = "0.1.0"

__all__ = [
    "AUTHORIZATION_HEADER",
    "AuthScheme",
    "CommandExecutionError",
    "CredentialError",
    "CredentialProvider",
    "InvalidRefreshOutput",
    "LifespanKind",
    "RefreshError",
    "Token",
    "TokenLifespan",
    "UnsupportedScheme",
    "parse_refresh_output",
    "run_refresh_command",
]
