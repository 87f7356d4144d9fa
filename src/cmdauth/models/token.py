"""Pydantic v2 models for refreshed tokens and their lifespans."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator


class LifespanKind(str, Enum):
    INDEFINITE = "indefinite"
    SINGLE_USE = "single_use"
    SECONDS = "seconds"


class TokenLifespan(BaseModel):
    """How long a token stays valid after it was issued.

    ``seconds`` is only set (and always positive) for
    :attr:`LifespanKind.SECONDS`.
    """

    model_config = ConfigDict(frozen=True)

    kind: LifespanKind
    seconds: int | None = None

    @model_validator(mode="after")
    def _check_seconds(self) -> TokenLifespan:
        if self.kind is LifespanKind.SECONDS:
            if self.seconds is None or self.seconds <= 0:
                raise ValueError("a timed lifespan needs a positive number of seconds")
        elif self.seconds is not None:
            raise ValueError(f"{self.kind.value} lifespan takes no seconds")
        return self

    @classmethod
    def indefinite(cls) -> TokenLifespan:
        return cls(kind=LifespanKind.INDEFINITE)

    @classmethod
    def single_use(cls) -> TokenLifespan:
        return cls(kind=LifespanKind.SINGLE_USE)

    @classmethod
    def timed(cls, seconds: int) -> TokenLifespan:
        return cls(kind=LifespanKind.SECONDS, seconds=seconds)

    @classmethod
    def from_seconds(cls, value: int) -> TokenLifespan:
        """Classify a lifetime reported by the refresh command.

        Negative means indefinite, zero means single use, anything else is
        a lifetime in seconds.
        """
        if value < 0:
            return cls.indefinite()
        if value == 0:
            return cls.single_use()
        return cls.timed(value)

    def __str__(self) -> str:
        if self.kind is LifespanKind.SECONDS:
            return f"{self.seconds}s"
        return self.kind.value


class Token(BaseModel):
    """A credential obtained from one successful refresh.

    ``issued_at`` is a reading of the provider's monotonic clock, not a
    wall-clock timestamp.
    """

    model_config = ConfigDict(frozen=True)

    value: str
    lifespan: TokenLifespan
    issued_at: float

    def __repr__(self) -> str:
        # Keep the credential out of logs and tracebacks.
        return f"Token(value='***', lifespan={self.lifespan}, issued_at={self.issued_at})"
