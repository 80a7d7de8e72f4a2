"""Module entrypoint for `python -m transientretry`."""

from transientretry.cli import run

if __name__ == "__main__":
    raise SystemExit(run())
