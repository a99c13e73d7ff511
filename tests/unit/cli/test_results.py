"""Unit tests for results command.

Tests for viewing outcomes appended by previous runs.
"""

import json
import os
from pathlib import Path

import pytest
from shrinkctl.cli.main import app
from shrinkctl.core.reporter import open_sink
from shrinkctl.models.outcome import Outcome
from typer.testing import CliRunner

runner = CliRunner()


def _outcome(name: str, state: str) -> Outcome:
    return Outcome(
        name=name,
        full_path=f"/profiles/{name}",
        state=state,
        original_size_gb=10.0,
        final_size_gb=3.0 if state == "Success" else 10.0,
        space_saved_gb=7.0 if state == "Success" else 0.0,
    )


@pytest.fixture
def results_file(tmp_path: Path) -> Path:
    """CSV results file with three outcomes."""
    path = tmp_path / "results.csv"
    sink = open_sink(path)
    sink.report(_outcome("alice.vhdx", "Success"))
    sink.report(_outcome("bob.vhdx", "Ignored"))
    sink.report(_outcome("carol.vhdx", "DiskShrinkFailed"))
    return path


class TestResultsCommand:
    """Tests for shrinkctl results command."""

    def test_results_table(self, results_file: Path) -> None:
        result = runner.invoke(app, ["results", "-o", str(results_file)])

        assert result.exit_code == 0
        assert "alice.vhdx" in result.stdout
        assert "DiskShrinkFailed" in result.stdout

    def test_results_json_newest_first(self, results_file: Path) -> None:
        result = runner.invoke(app, ["results", "-o", str(results_file), "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [d["name"] for d in data] == ["carol.vhdx", "bob.vhdx", "alice.vhdx"]

    def test_results_limit(self, results_file: Path) -> None:
        result = runner.invoke(app, ["results", "-o", str(results_file), "-n", "1", "--json"])

        assert [d["name"] for d in json.loads(result.stdout)] == ["carol.vhdx"]

    def test_results_state_filter(self, results_file: Path) -> None:
        result = runner.invoke(
            app, ["results", "-o", str(results_file), "--state", "Success", "--json"]
        )

        data = json.loads(result.stdout)
        assert len(data) == 1
        assert data[0]["space_saved_gb"] == 7.0

    def test_results_default_location(self) -> None:
        """Without --output the configured results file is read."""
        default = Path(os.environ["XDG_STATE_HOME"]) / "shrinkctl" / "results.csv"
        open_sink(default).report(_outcome("dave.vhdx", "Success"))

        result = runner.invoke(app, ["results", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)[0]["name"] == "dave.vhdx"

    def test_results_empty(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["results", "-o", str(tmp_path / "none.csv")])

        assert result.exit_code == 0
        assert "No results found" in result.stdout
