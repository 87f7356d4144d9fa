import stat
import sys

import pytest
from loguru import logger


class FakeClock:
    """Manually advanced stand-in for ``time.monotonic``."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def _restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def make_script(tmp_path):
    """Write an executable ``/bin/sh`` script and return its path."""
    if sys.platform == "win32":
        pytest.skip("shell scripts require a POSIX platform")

    def _make(body: str, name: str = "refresh.sh") -> str:
        path = tmp_path / name
        path.write_text("#!/bin/sh\n" + body, encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)

    return _make


@pytest.fixture
def counting_script(make_script, tmp_path):
    """A refresh script printing ``tok1 <lifetime>``, ``tok2 <lifetime>``, ... on each run."""

    def _make(lifetime: int = 10) -> str:
        counter = tmp_path / "counter"
        return make_script(
            f'n=$(cat "{counter}" 2>/dev/null || echo 0)\n'
            "n=$((n + 1))\n"
            f'echo "$n" > "{counter}"\n'
            f'echo "tok$n {lifetime}"\n'
        )

    return _make
