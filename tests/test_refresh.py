"""Tests for the refresh command runner and its output parser."""
import subprocess
from unittest.mock import MagicMock, patch

import pytest
from loguru import logger

from cmdauth.errors import CommandExecutionError, InvalidRefreshOutput, RefreshError
from cmdauth.models import LifespanKind, TokenLifespan
from cmdauth.refresh import parse_lifetime, parse_refresh_output, run_refresh_command


def _completed(stdout, returncode=0, stderr=""):
    result = MagicMock()
    result.stdout = stdout
    result.stderr = stderr
    result.returncode = returncode
    return result


# =========================================================================
# parse_refresh_output
# =========================================================================


class TestParseRefreshOutput:
    def test_timed_token(self):
        token = parse_refresh_output("abc123 300", issued_at=5.0)
        assert token.value == "abc123"
        assert token.lifespan == TokenLifespan.timed(300)
        assert token.issued_at == 5.0

    def test_indefinite_token(self):
        token = parse_refresh_output("abc123 -1", issued_at=0.0)
        assert token.lifespan.kind is LifespanKind.INDEFINITE

    def test_single_use_token(self):
        token = parse_refresh_output("abc123 0", issued_at=0.0)
        assert token.lifespan.kind is LifespanKind.SINGLE_USE

    def test_surrounding_whitespace_and_newlines(self):
        """Any whitespace separates fields, including a trailing newline."""
        token = parse_refresh_output("\n  abc123\t\t300 \n", issued_at=0.0)
        assert token.value == "abc123"
        assert token.lifespan.seconds == 300

    def test_fields_on_separate_lines(self):
        token = parse_refresh_output("abc123\n300\n", issued_at=0.0)
        assert token.value == "abc123"

    def test_plus_sign_accepted(self):
        token = parse_refresh_output("abc +60", issued_at=0.0)
        assert token.lifespan.seconds == 60

    @pytest.mark.parametrize("output", ["", "   \n", "abc123", "abc123 300 extra"])
    def test_wrong_field_count(self, output):
        with pytest.raises(InvalidRefreshOutput):
            parse_refresh_output(output, issued_at=0.0)

    @pytest.mark.parametrize("lifetime", ["notanumber", "1.5", "1_000", "0x10", "--1", "+"])
    def test_non_integer_lifetime(self, lifetime):
        with pytest.raises(InvalidRefreshOutput):
            parse_refresh_output(f"abc123 {lifetime}", issued_at=0.0)

    def test_invalid_output_is_a_refresh_error(self):
        assert issubclass(InvalidRefreshOutput, RefreshError)


class TestParseLifetime:
    def test_int64_bounds(self):
        assert parse_lifetime(str(2**63 - 1)) == 2**63 - 1
        assert parse_lifetime(str(-(2**63))) == -(2**63)

    def test_outside_int64(self):
        with pytest.raises(InvalidRefreshOutput):
            parse_lifetime(str(2**63))
        with pytest.raises(InvalidRefreshOutput):
            parse_lifetime(str(-(2**63) - 1))

    def test_non_ascii_digits_rejected(self):
        with pytest.raises(InvalidRefreshOutput):
            parse_lifetime("٣٠")  # Arabic-Indic "30"


# =========================================================================
# run_refresh_command (subprocess mocked)
# =========================================================================


class TestRunRefreshCommand:
    def test_runs_command_without_arguments(self, clock):
        with patch("cmdauth.refresh.subprocess.run", return_value=_completed("tok 10\n")) as mock_run:
            token = run_refresh_command("/opt/get-token", clock=clock)
        mock_run.assert_called_once()
        args, kwargs = mock_run.call_args
        assert args[0] == ["/opt/get-token"]
        assert kwargs["capture_output"] is True
        assert kwargs["text"] is True
        assert kwargs.get("shell", False) is False
        assert token.value == "tok"
        assert token.issued_at == clock.now

    def test_timeout_is_passed_through(self, clock):
        with patch("cmdauth.refresh.subprocess.run", return_value=_completed("tok 10")) as mock_run:
            run_refresh_command("get-token", timeout=3.5, clock=clock)
        assert mock_run.call_args.kwargs["timeout"] == 3.5

    def test_empty_command(self):
        with patch("cmdauth.refresh.subprocess.run") as mock_run:
            with pytest.raises(CommandExecutionError):
                run_refresh_command("")
        mock_run.assert_not_called()

    def test_launch_failure(self):
        with patch("cmdauth.refresh.subprocess.run", side_effect=FileNotFoundError("nope")):
            with pytest.raises(CommandExecutionError) as exc_info:
                run_refresh_command("missing-command")
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    def test_permission_denied(self):
        with patch("cmdauth.refresh.subprocess.run", side_effect=PermissionError("denied")):
            with pytest.raises(CommandExecutionError):
                run_refresh_command("not-executable")

    def test_non_utf8_output(self):
        err = UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
        with patch("cmdauth.refresh.subprocess.run", side_effect=err):
            with pytest.raises(CommandExecutionError):
                run_refresh_command("binary-output")

    def test_timeout_expired(self):
        err = subprocess.TimeoutExpired(cmd=["slow"], timeout=1)
        with patch("cmdauth.refresh.subprocess.run", side_effect=err):
            with pytest.raises(CommandExecutionError):
                run_refresh_command("slow", timeout=1)

    def test_nonzero_exit_still_parses_stdout(self, clock):
        """The exit status alone does not fail the refresh."""
        result = _completed("tok 10", returncode=3, stderr="warning: something")
        with patch("cmdauth.refresh.subprocess.run", return_value=result):
            token = run_refresh_command("flaky", clock=clock)
        assert token.value == "tok"

    def test_nonzero_exit_does_not_log_stderr(self, clock):
        """Helpers may print secrets to stderr; only the exit status is logged."""
        messages = []
        logger.add(messages.append, level="DEBUG")
        result = _completed("tok 10", returncode=1, stderr="leaked-secret-value")
        with patch("cmdauth.refresh.subprocess.run", return_value=result):
            run_refresh_command("flaky", clock=clock)
        assert any("exited with status 1" in m for m in messages)
        assert not any("leaked-secret-value" in m for m in messages)

    def test_nonzero_exit_with_no_output(self):
        result = _completed("", returncode=1, stderr="fatal")
        with patch("cmdauth.refresh.subprocess.run", return_value=result):
            with pytest.raises(InvalidRefreshOutput):
                run_refresh_command("broken")

    def test_malformed_output(self):
        with patch("cmdauth.refresh.subprocess.run", return_value=_completed("abc123 notanumber")):
            with pytest.raises(InvalidRefreshOutput):
                run_refresh_command("bad")


# =========================================================================
# run_refresh_command (real subprocess)
# =========================================================================


class TestRunRefreshCommandScripts:
    def test_real_script(self, make_script):
        script = make_script('echo "abc123 300"\n')
        token = run_refresh_command(script)
        assert token.value == "abc123"
        assert token.lifespan == TokenLifespan.timed(300)

    def test_command_not_found(self, tmp_path):
        with pytest.raises(CommandExecutionError):
            run_refresh_command(str(tmp_path / "does-not-exist"))

    def test_command_is_not_split_on_spaces(self, make_script):
        """The command string names one program; it is never shell-split."""
        script = make_script('echo "tok 1"\n')
        with pytest.raises(CommandExecutionError):
            run_refresh_command(f"{script} --flag")

    def test_script_failing_after_output(self, make_script):
        script = make_script('echo "tok -1"\nexit 4\n')
        token = run_refresh_command(script)
        assert token.lifespan.kind is LifespanKind.INDEFINITE
