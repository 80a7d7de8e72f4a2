from __future__ import annotations

import pytest

from transientretry import cli
from transientretry.errors import ExitCode


def test_cli_help_lists_commands() -> None:
    help_text = cli.build_parser().format_help()
    assert "decode" in help_text
    assert "decode-message" in help_text
    assert "classify" in help_text
    assert "--log-level" in help_text


def test_decode_prints_condition(capsys) -> None:
    assert cli.main(["decode", "1234"]) == ExitCode.SUCCESS
    assert capsys.readouterr().out.startswith("Mode: RejectAllWrites | Cpu: None")


def test_decode_accepts_hex(capsys) -> None:
    assert cli.main(["decode", "0x3"]) == 0
    assert capsys.readouterr().out.startswith("Mode: RejectAll |")


def test_decode_message_without_code_prints_unknown(capsys) -> None:
    assert cli.main(["decode-message", "server busy"]) == 0
    assert capsys.readouterr().out.strip() == "Mode: Unknown | Unknown: Unknown"


@pytest.mark.parametrize(
    ("argv", "expected"),
    [
        (["classify", "40613"], "transient"),
        (["classify", "99999"], "not transient"),
        (["classify", "--network", "11001"], "transient"),
        (["classify", "--network", "40613"], "not transient"),
    ],
)
def test_classify_reports_outcome(argv: list[str], expected: str, capsys) -> None:
    assert cli.main(argv) == 0
    assert capsys.readouterr().out.strip() == expected


def test_classify_throttling_includes_condition(capsys) -> None:
    assert cli.main(["classify", "40501", "--message", "Code: 1"]) == 0
    assert capsys.readouterr().out.startswith("transient (Mode: RejectUpdateInsert |")


def test_invalid_reason_code_returns_error_code() -> None:
    assert cli.main(["decode", "abc"]) == ExitCode.INVALID_ARGS


def test_missing_command_returns_error_code() -> None:
    assert cli.main([]) != 0


def test_invalid_log_level_returns_error_code() -> None:
    assert cli.main(["--log-level", "loud", "decode", "1"]) != 0
