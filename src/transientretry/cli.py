"""Command line entrypoint for decoding and classifying provider errors."""

from __future__ import annotations

import argparse
import logging as py_logging
import sys
from collections.abc import Sequence
from pathlib import Path

from .classifiers import NETWORK_CONNECTIVITY, SQL_TRANSIENT
from .errors import ExitCode, TransientRetryError, user_facing_error
from .logging import LOG_LEVELS, configure_logging, normalize_level
from .providers import SqlError, SqlProviderError
from .throttling import from_error_message, from_reason_code

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")


def _log_level_type(value: str) -> str:
    normalized = normalize_level(value)
    if normalized not in LOG_LEVELS:
        accepted = ", ".join(_VALID_LOG_LEVELS)
        raise argparse.ArgumentTypeError(f"--log-level must be one of: {accepted}")
    return normalized


def _reason_code_type(value: str) -> int:
    try:
        return int(value, 0)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("reason code must be an integer") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="transientretry")
    parser.add_argument("--log-level", type=_log_level_type, default="WARN")
    parser.add_argument("--log-file", type=Path, default=None)
    commands = parser.add_subparsers(dest="command", required=True)

    decode = commands.add_parser("decode", help="Decode a throttling reason code")
    decode.add_argument("code", type=_reason_code_type)

    decode_message = commands.add_parser(
        "decode-message",
        help="Decode the reason code embedded in a provider error message",
    )
    decode_message.add_argument("message")

    classify = commands.add_parser(
        "classify",
        help="Report whether a provider error with the given numbers is transient",
    )
    classify.add_argument("numbers", type=int, nargs="+")
    classify.add_argument("--message", default="")
    classify.add_argument(
        "--network",
        action="store_true",
        help="Use the network connectivity classifier",
    )
    return parser


def _classify(namespace: argparse.Namespace) -> str:
    error = SqlProviderError(
        namespace.message,
        [SqlError(number, namespace.message) for number in namespace.numbers],
    )
    if namespace.network:
        return "transient" if NETWORK_CONNECTIVITY.is_transient(error) else "not transient"
    outcome = SQL_TRANSIENT.classify(error)
    if not outcome.transient:
        return "not transient"
    if outcome.throttling is not None:
        return f"transient ({outcome.throttling})"
    return "transient"


def run_command(namespace: argparse.Namespace) -> str:
    if namespace.command == "decode":
        return str(from_reason_code(namespace.code))
    if namespace.command == "decode-message":
        return str(from_error_message(namespace.message))
    if namespace.command == "classify":
        return _classify(namespace)
    raise TransientRetryError(
        f"Unknown command: {namespace.command}",
        code=ExitCode.INVALID_ARGS,
        hint="Run with --help to list commands.",
    )


def main(argv: Sequence[str] | None = None) -> int:
    logger = configure_logging("WARN")
    parser = build_parser()
    try:
        namespace = parser.parse_args(argv)
    except SystemExit as exc:
        if exc.code not in (None, 0):
            logger.warning("Argument parsing failed with exit code %s", exc.code)
        return int(exc.code or 0)

    logger = configure_logging(level=namespace.log_level, log_file=namespace.log_file)
    try:
        logger.debug("Running command %s", namespace.command)
        print(run_command(namespace))
        return int(ExitCode.SUCCESS)
    except TransientRetryError as exc:
        logger.error(
            "Handled TransientRetryError (code=%s): %s",
            int(exc.code),
            exc.message,
            exc_info=logger.isEnabledFor(py_logging.DEBUG),
        )
        print(user_facing_error(exc.message, hint=exc.hint), file=sys.stderr)
        return int(exc.code)
    except Exception:
        logger.exception("Unhandled exception in CLI entrypoint")
        print(user_facing_error("Unexpected runtime failure"), file=sys.stderr)
        return int(ExitCode.RUNTIME_ERROR)


def run(argv: Sequence[str] | None = None) -> int:
    return main(argv)
