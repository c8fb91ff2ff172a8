"""Tests for running fluxtrace as a module (`python -m fluxtrace`)."""

from __future__ import annotations

import runpy
from unittest.mock import patch

import pytest


def test_module_help_exits_zero() -> None:
    with patch("sys.argv", ["fluxtrace", "--help"]):
        with pytest.raises(SystemExit) as exc_info:
            runpy.run_module("fluxtrace", run_name="__main__")
    assert exc_info.value.code == 0


def test_module_trace_help_exits_zero(capsys) -> None:
    with patch("sys.argv", ["fluxtrace", "trace", "--help"]):
        with pytest.raises(SystemExit) as exc_info:
            runpy.run_module("fluxtrace", run_name="__main__")
    assert exc_info.value.code == 0
    assert "--min-contribution" in capsys.readouterr().out
