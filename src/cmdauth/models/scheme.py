"""Authorization schemes understood by the credential provider."""

from __future__ import annotations

from enum import Enum

from ..errors import UnsupportedScheme


class AuthScheme(Enum):
    """Authorization scheme placed in front of the credential.

    Only ``Bearer`` exists today.  Adding a scheme means adding a member
    here and a branch in :meth:`parse` / :meth:`display_name`.
    """

    BEARER = "bearer"

    @classmethod
    def parse(cls, name: str) -> AuthScheme:
        """Parse *name* case-insensitively.

        Raises :class:`~cmdauth.errors.UnsupportedScheme` on unknown input.
        """
        lowered = name.lower()
        if lowered == "bearer":
            return cls.BEARER
        raise UnsupportedScheme(name)

    @property
    def display_name(self) -> str:
        """Scheme name as it appears in the ``Authorization`` header."""
        if self is AuthScheme.BEARER:
            return "Bearer"
        raise UnsupportedScheme(self.value)

    def __str__(self) -> str:
        return self.display_name
