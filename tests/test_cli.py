"""Command-line front-end."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from locus import cli
from locus.core.models import ToolReport

from conftest import SECTION_HEADERS, SYMBOLS


class FakeCollector:
    reports: dict[str, ToolReport] = {}

    def __init__(self, config=None) -> None:
        self.config = config

    def section_headers(self, executable):
        return self.reports["headers"]

    def symbols(self, executable):
        return self.reports["symbols"]


@pytest.fixture
def executable(tmp_path):
    path = tmp_path / "fw.elf"
    path.write_bytes(b"\x7fELF")
    return str(path)


@pytest.fixture
def runner(monkeypatch, report_factory) -> CliRunner:
    FakeCollector.reports = {
        "headers": report_factory(SECTION_HEADERS),
        "symbols": report_factory(SYMBOLS),
    }
    monkeypatch.setattr(cli, "ObjdumpCollector", FakeCollector)
    return CliRunner()


def test_sections_table(runner, executable) -> None:
    result = runner.invoke(cli.locus_cli, ["sections", executable])
    assert result.exit_code == 0, result.output
    assert ".text" in result.output
    assert "3 loadable" in result.output


def test_sections_json(runner, executable) -> None:
    result = runner.invoke(cli.locus_cli, ["--json", "sections", executable])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert [s["name"] for s in payload][:2] == [".text", ".data"]
    assert payload[0]["vma"] == 0x1000


def test_symbols_functions_json(runner, executable) -> None:
    result = runner.invoke(cli.locus_cli, ["--json", "symbols", executable, "--kind", "functions"])
    assert result.exit_code == 0, result.output
    names = [s["name"] for s in json.loads(result.output)]
    assert "foo" in names
    assert "counter" not in names


def test_symbols_statics_requires_file(runner, executable) -> None:
    result = runner.invoke(cli.locus_cli, ["symbols", executable, "--kind", "statics"])
    assert result.exit_code == 2


def test_lookup_with_offset(runner, executable) -> None:
    result = runner.invoke(cli.locus_cli, ["--json", "lookup", executable, "0x9050", "--offset", "0x8000"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["name"] == "foo"
    assert payload["base"] == 0x9000


def test_lookup_with_section_placement(runner, executable) -> None:
    result = runner.invoke(cli.locus_cli, ["lookup", executable, "0x4050", "--section", ".text=0x4000"])
    assert result.exit_code == 0, result.output
    assert "foo" in result.output


def test_lookup_miss_exits_non_zero(runner, executable) -> None:
    result = runner.invoke(cli.locus_cli, ["lookup", executable, "0x9050"])
    assert result.exit_code == 1


def test_lookup_rejects_bad_address(runner, executable) -> None:
    result = runner.invoke(cli.locus_cli, ["lookup", executable, "pc"])
    assert result.exit_code == 2


def test_find_prefers_static(runner, executable) -> None:
    result = runner.invoke(cli.locus_cli, ["--json", "find", executable, "helper", "--file", "a.c"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["scope"] == "local"
    assert payload["file"] == "a.c"


def test_tool_failure_is_reported(runner, executable, report_factory) -> None:
    FakeCollector.reports["headers"] = report_factory("", returncode=1, stderr="bad file")
    result = runner.invoke(cli.locus_cli, ["sections", executable])
    assert result.exit_code == 1
    assert "failed" in result.output


def test_symbols_rejects_negative_limit(runner, executable) -> None:
    result = runner.invoke(cli.locus_cli, ["--json", "symbols", executable, "--limit", "-1"])
    assert result.exit_code == 2


def test_symbols_limit_truncates_json(runner, executable) -> None:
    result = runner.invoke(cli.locus_cli, ["--json", "symbols", executable, "--limit", "2"])
    assert result.exit_code == 0, result.output
    assert [s["name"] for s in json.loads(result.output)] == [".text", ".data"]
