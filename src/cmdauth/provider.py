"""Self-refreshing ``Authorization`` header provider.

The provider keeps at most one token in memory and decides on every
access whether it can be reused:

* no cached token -> refresh
* indefinite      -> reuse forever
* single use      -> refresh on every access
* ``n`` seconds   -> refresh once more than ``n // 2`` whole seconds have
  elapsed since the token was issued (half-life refresh), reuse otherwise

Refreshing happens lazily inside :meth:`CredentialProvider.get_token`;
there are no background timers.
"""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING, Callable

from loguru import logger

from .models.scheme import AuthScheme
from .models.token import LifespanKind, Token
from .refresh import run_refresh_command

if TYPE_CHECKING:
    from .settings import ProviderSettings

AUTHORIZATION_HEADER = "Authorization"


class CredentialProvider:
    """Produce ``Authorization`` headers from an external refresh command.

    With an empty *refresh_command* the provider is a no-op:
    :meth:`access_header` returns ``None`` and no subprocess is ever
    spawned.

    All access to the cached token is serialized by a lock held for the
    whole check/refresh/store sequence, so concurrent callers with a stale
    cache trigger a single refresh and then reuse its result.

    Example::

        provider = CredentialProvider("/usr/local/bin/get-token", "bearer")
        header = provider.access_header()
        if header:
            name, value = header
    """

    def __init__(
        self,
        refresh_command: str,
        scheme: AuthScheme | str = AuthScheme.BEARER,
        *,
        timeout: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._scheme = scheme if isinstance(scheme, AuthScheme) else AuthScheme.parse(scheme)
        self._refresh_command = refresh_command
        self._timeout = timeout
        self._clock = clock
        self._token: Token | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: ProviderSettings, **kwargs) -> CredentialProvider:
        """Build a provider from a loaded :class:`~cmdauth.settings.ProviderSettings`."""
        return cls(
            settings.refresh_command,
            settings.scheme,
            timeout=settings.timeout,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def scheme(self) -> AuthScheme:
        return self._scheme

    @property
    def refresh_command(self) -> str:
        return self._refresh_command

    @property
    def is_enabled(self) -> bool:
        """Return ``True`` if a refresh command is configured."""
        return bool(self._refresh_command)

    @property
    def cached_token(self) -> Token | None:
        """The currently cached token, or ``None`` before the first refresh."""
        with self._lock:
            return self._token

    # ------------------------------------------------------------------
    # Token management
    # ------------------------------------------------------------------

    def _needs_refresh(self, token: Token | None) -> bool:
        if token is None:
            return True
        lifespan = token.lifespan
        if lifespan.kind is LifespanKind.INDEFINITE:
            return False
        if lifespan.kind is LifespanKind.SINGLE_USE:
            return True
        elapsed = int(self._clock() - token.issued_at)
        return elapsed > lifespan.seconds // 2

    def get_token(self) -> str:
        """Return a usable credential string, refreshing it if necessary.

        Refresh errors propagate unchanged; the previously cached token (if
        any) is left in place but is not returned.
        """
        with self._lock:
            token = self._token
            if self._needs_refresh(token):
                if token is None:
                    logger.debug("No cached token, refreshing")
                else:
                    logger.debug(f"Cached token ({token.lifespan}) is stale, refreshing")
                token = run_refresh_command(
                    self._refresh_command, timeout=self._timeout, clock=self._clock
                )
                self._token = token
            else:
                logger.debug(f"Reusing cached token ({token.lifespan})")
            return token.value

    def invalidate(self) -> None:
        """Drop the cached token so the next access refreshes."""
        with self._lock:
            self._token = None

    # ------------------------------------------------------------------
    # Header helpers
    # ------------------------------------------------------------------

    def access_header(self) -> tuple[str, str] | None:
        """Return the ``(name, value)`` header pair, or ``None`` if disabled."""
        if not self.is_enabled:
            return None
        return AUTHORIZATION_HEADER, f"{self._scheme.display_name} {self.get_token()}"

    def auth_headers(self) -> dict[str, str]:
        """Build an ``Authorization`` header dict, empty when disabled."""
        header = self.access_header()
        if header is None:
            return {}
        name, value = header
        return {name: value}

    def __repr__(self) -> str:
        return (
            f"CredentialProvider(refresh_command={self._refresh_command!r}, "
            f"scheme={self._scheme.display_name!r})"
        )
