"""Run the external refresh command and turn its output into a :class:`Token`.

The command is executed as a single program with no arguments and no
shell.  It must print exactly two whitespace-separated fields on stdout::

    <credential> <lifetime-seconds>

where the lifetime is a signed 64-bit integer (see
:meth:`TokenLifespan.from_seconds` for how it is interpreted).
"""

from __future__ import annotations

import re
import subprocess
import time
from typing import Callable

from loguru import logger

from .errors import CommandExecutionError, InvalidRefreshOutput
from .models.token import Token, TokenLifespan

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def parse_lifetime(field: str) -> int:
    """Parse the lifetime field as a signed 64-bit integer."""
    if not _INTEGER_RE.fullmatch(field):
        raise InvalidRefreshOutput(f"Lifetime is not an integer: {field!r}")
    value = int(field)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise InvalidRefreshOutput(f"Lifetime out of range: {field!r}")
    return value


def parse_refresh_output(output: str, issued_at: float) -> Token:
    """Build a :class:`Token` from the refresh command's stdout.

    Raises :class:`~cmdauth.errors.InvalidRefreshOutput` unless *output*
    splits into exactly two fields with an integer second field.
    """
    fields = output.split()
    if len(fields) != 2:
        raise InvalidRefreshOutput(
            f"Expected '<token> <lifetime>' but got {len(fields)} field(s)"
        )
    value, lifetime = fields
    return Token(
        value=value,
        lifespan=TokenLifespan.from_seconds(parse_lifetime(lifetime)),
        issued_at=issued_at,
    )


def run_refresh_command(
    command: str,
    timeout: float | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> Token:
    """Execute *command* and return the token it prints.

    Parameters
    ----------
    command:
        Path or name of the program to run.  It is invoked without
        arguments.
    timeout:
        Optional bound on the subprocess run time, in seconds.
    clock:
        Monotonic clock used to stamp ``issued_at``.

    Raises :class:`~cmdauth.errors.CommandExecutionError` if the process
    cannot be started, times out, or prints non-UTF-8 output, and
    :class:`~cmdauth.errors.InvalidRefreshOutput` if the output is
    malformed.  A non-zero exit status is logged but is not an error by
    itself.
    """
    if not command:
        raise CommandExecutionError("No refresh command configured")

    logger.debug(f"Running refresh command {command!r}")
    try:
        result = subprocess.run(
            [command],
            capture_output=True,
            text=True,
            encoding="utf-8",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        logger.error(f"Refresh command {command!r} timed out after {timeout}s")
        raise CommandExecutionError(
            f"Refresh command {command!r} timed out after {timeout}s"
        ) from exc
    except UnicodeDecodeError as exc:
        logger.error(f"Refresh command {command!r} printed non-UTF-8 output")
        raise CommandExecutionError(
            f"Output of refresh command {command!r} is not valid UTF-8"
        ) from exc
    except OSError as exc:
        logger.error(f"Failed to launch refresh command {command!r}: {exc}")
        raise CommandExecutionError(
            f"Failed to launch refresh command {command!r}: {exc}"
        ) from exc

    if result.returncode != 0:
        logger.warning(f"Refresh command {command!r} exited with status {result.returncode}")

    token = parse_refresh_output(result.stdout or "", issued_at=clock())
    logger.debug(f"Refresh command {command!r} issued a token with lifespan {token.lifespan}")
    return token
