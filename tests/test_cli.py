"""
Command-line interface (cli/__main__.py).
"""

import json

import pytest
from click.testing import CliRunner

from modkit import __version__
from modkit.cli.__main__ import cli

from tests.conftest import PNG_4x2, write_package


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def project(tmp_path, monkeypatch):
    """Working directory with a `mods` tree and no config files."""
    for key in ["MODKIT_PACKAGES_DIR", "MODKIT_STRICT", "MODKIT_WORKERS",
                "MODKIT_LOG_LEVEL", "MODKIT_MANIFEST_NAMES"]:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    mods = tmp_path / "mods"
    write_package(mods, "core", files={"textures/a.png": PNG_4x2, "m.mtl": "newmtl x\n"})
    write_package(mods, "base", dependencies={"core": ">=1.0"})
    return tmp_path


def _break(project):
    write_package(project / "mods", "orphan", dependencies={"ghost": None})


class TestCli:

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_import(self, runner, project):
        result = runner.invoke(cli, ["import"], obj={})
        assert result.exit_code == 0, result.output
        assert "Processing order" in result.output
        assert "1. core" in result.output
        assert "2. base" in result.output

    def test_import_json(self, runner, project):
        result = runner.invoke(cli, ["import", "--json-output"], obj={})
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["processing_order"] == ["core", "base"]
        assert data["asset_count"] == 3

    def test_import_with_problems_exits_1(self, runner, project):
        _break(project)
        result = runner.invoke(cli, ["import"], obj={})
        assert result.exit_code == 1
        assert "Invalid packages" in result.output
        assert "orphan" in result.output

    def test_order(self, runner, project):
        result = runner.invoke(cli, ["order"], obj={})
        assert result.exit_code == 0
        assert result.output.split() == ["core", "base"]

    def test_order_with_dir_option(self, runner, project, tmp_path_factory):
        other = tmp_path_factory.mktemp("other")
        write_package(other, "solo")
        result = runner.invoke(cli, ["order", "--dir", str(other)], obj={})
        assert result.output.split() == ["solo"]

    def test_inspect_json(self, runner, project):
        _break(project)
        result = runner.invoke(cli, ["inspect", "--json-output"], obj={})
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert len(data["fingerprint"]) == 64
        packages = {p["name"]: p for p in data["packages"]}
        assert packages["orphan"]["valid"] is False
        assert packages["orphan"]["problems"][0]["type"] == "UnresolvedDependencyError"
        assert packages["core"]["load_order"] == 0

    def test_inspect_table(self, runner, project):
        result = runner.invoke(cli, ["inspect"], obj={})
        assert result.exit_code == 0
        assert "Package" in result.output
        assert "Fingerprint" in result.output

    def test_graph(self, runner, project):
        result = runner.invoke(cli, ["graph"], obj={})
        assert result.exit_code == 0
        assert '"base" -> "core";' in result.output

    def test_graph_json(self, runner, project):
        _break(project)
        result = runner.invoke(cli, ["graph", "--json-output"], obj={})
        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "base": ["core"], "core": [], "ghost": [], "orphan": ["ghost"],
        }

    def test_import_json_lists_resolution_errors(self, runner, project):
        _break(project)
        result = runner.invoke(cli, ["import", "--json-output"], obj={})
        data = json.loads(result.output)
        assert data["validation"]["error_count"] == 1
        assert data["validation"]["errors"][0]["type"] == "UnresolvedDependencyError"

    def test_graph_to_file(self, runner, project):
        result = runner.invoke(cli, ["graph", "-o", "deps.dot"], obj={})
        assert result.exit_code == 0
        assert (project / "deps.dot").read_text().startswith("digraph")

    def test_config_file(self, runner, project):
        (project / "modkit.yaml").write_text("packages_dir: elsewhere\n")
        write_package(project / "elsewhere", "lonely")
        result = runner.invoke(cli, ["order"], obj={})
        assert result.output.split() == ["lonely"]

    def test_bad_config_exits_2(self, runner, project):
        (project / "modkit.yaml").write_text("workers: 0\n")
        result = runner.invoke(cli, ["order"], obj={})
        assert result.exit_code == 2
