"""Tests for apitestgen.output -- stdout/stderr discipline and formats."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from apitestgen.output import (
    OutputFormat,
    OutputManager,
    get_output,
    info,
    reset_output,
    set_output,
)


class TestFormatResolution:
    def test_auto_is_plain_when_not_a_tty(self) -> None:
        assert OutputManager().format is OutputFormat.PLAIN

    def test_explicit_format_kept(self) -> None:
        assert OutputManager(format=OutputFormat.JSON).format is OutputFormat.JSON

    def test_no_color_env(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        OutputManager().error("bad")
        assert capsys.readouterr().err == "Error: bad\n"


class TestDataOutput:
    def test_table_plain(self, capsys: pytest.CaptureFixture) -> None:
        OutputManager(format=OutputFormat.PLAIN).print_table(["A", "B"], [["1", "2"]])
        assert capsys.readouterr().out == "A\tB\n1\t2\n"

    def test_table_json(self, capsys: pytest.CaptureFixture) -> None:
        OutputManager(format=OutputFormat.JSON).print_table(["A", "B"], [["1", "2"]])
        assert json.loads(capsys.readouterr().out) == [{"A": "1", "B": "2"}]

    def test_data_goes_to_stdout_only(self, capsys: pytest.CaptureFixture) -> None:
        OutputManager(format=OutputFormat.PLAIN).print_data("payload")
        captured = capsys.readouterr()
        assert captured.out == "payload\n"
        assert captured.err == ""

    def test_written_paths_plain(self, capsys: pytest.CaptureFixture) -> None:
        OutputManager(format=OutputFormat.PLAIN).print_paths([Path("out/v1_a_test.py"), Path("out/v2_a_test.py")])
        assert capsys.readouterr().out == "out/v1_a_test.py\nout/v2_a_test.py\n"

    def test_written_paths_json(self, capsys: pytest.CaptureFixture) -> None:
        OutputManager(format=OutputFormat.JSON).print_paths([Path("out/v1_a_test.py")])
        assert json.loads(capsys.readouterr().out) == ["out/v1_a_test.py"]

    def test_no_paths_prints_nothing_in_plain(self, capsys: pytest.CaptureFixture) -> None:
        OutputManager(format=OutputFormat.PLAIN).print_paths([])
        assert capsys.readouterr().out == ""


class TestDiagnostics:
    def test_quiet_suppresses_info_not_errors(self, capsys: pytest.CaptureFixture) -> None:
        output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        output.info("hidden")
        output.success("hidden")
        output.suggest("hidden")
        output.error("shown")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == "Error: shown\n"

    def test_debug_only_when_verbose(self, capsys: pytest.CaptureFixture) -> None:
        OutputManager(no_color=True).debug("quiet")
        OutputManager(no_color=True, verbose=True).debug("loud")
        assert capsys.readouterr().err == "[debug] loud\n"

    def test_suggestion_marked_with_arrow(self, capsys: pytest.CaptureFixture) -> None:
        OutputManager(no_color=True).suggest("pytest out")
        assert capsys.readouterr().err == "→ pytest out\n"


class TestGlobalInstance:
    def test_set_and_reset(self, capsys: pytest.CaptureFixture) -> None:
        manager = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        set_output(manager)
        assert get_output() is manager
        info("hello")
        assert capsys.readouterr().err == "hello\n"
        reset_output()
        assert get_output() is not manager
