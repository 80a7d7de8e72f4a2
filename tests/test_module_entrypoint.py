from __future__ import annotations

import runpy
import sys

import pytest


def test_module_entrypoint_exits_with_cli_code(monkeypatch, capsys) -> None:
    monkeypatch.setattr(sys, "argv", ["transientretry", "decode", "0"])

    with pytest.raises(SystemExit) as exc:
        runpy.run_module("transientretry", run_name="__main__")

    assert exc.value.code == 0
    assert "Mode: Unknown" in capsys.readouterr().out
