"""Re-export all cmdauth data models for convenient access."""

from cmdauth.models.scheme import AuthScheme
from cmdauth.models.token import LifespanKind, Token, TokenLifespan

__all__ = [
    "AuthScheme",
    "LifespanKind",
    "Token",
    "TokenLifespan",
]
