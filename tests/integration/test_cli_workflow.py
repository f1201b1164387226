"""Integration tests for end-to-end CLI workflows.

Tests the full analysis pipeline: parameters → cycle → diagram → export.
"""

import csv
import json
import os
import tempfile

import pytest
from click.testing import CliRunner

from thermoviz.cli.main import cli

OTTO_ARGS = ["--type", "otto", "-p", "T1=300", "-p", "P1=100", "-p", "compressionRatio=8"]


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def tmp_dir():
    with tempfile.TemporaryDirectory() as d:
        yield d


class TestCycleAnalyze:
    """Test the cycle analyze command and its exports."""

    def test_analyze_prints_tables(self, runner):
        result = runner.invoke(cli, ["cycle", "analyze", *OTTO_ARGS])
        assert result.exit_code == 0, result.output
        assert "States" in result.output
        assert "Processes" in result.output
        assert "Performance" in result.output

    def test_analyze_saves_json(self, runner, tmp_dir):
        out = os.path.join(tmp_dir, "otto.json")
        result = runner.invoke(cli, ["cycle", "analyze", *OTTO_ARGS, "-o", out])
        assert result.exit_code == 0, result.output

        with open(out) as f:
            data = json.load(f)
        cycle = data["cycle"]
        assert cycle["type"] == "otto"
        assert len(cycle["states"]) == 4
        assert cycle["states"][1]["temperature"] == pytest.approx(689.2, abs=0.1)
        assert cycle["efficiency"] == pytest.approx(0.5647, abs=1e-4)

    def test_analyze_extended_csv_and_report(self, runner, tmp_dir):
        csv_out = os.path.join(tmp_dir, "otto.csv")
        report_out = os.path.join(tmp_dir, "otto.txt")
        result = runner.invoke(
            cli,
            ["cycle", "analyze", *OTTO_ARGS, "--extended", "--csv", csv_out, "--report", report_out],
        )
        assert result.exit_code == 0, result.output

        with open(csv_out, newline="") as f:
            rows = list(csv.reader(f))
        assert rows[0][0] == "state"
        with open(report_out, encoding="utf-8") as f:
            content = f.read()
        assert "PERFORMANCE" in content
        assert "Entropy Generation" in content

    def test_html_report(self, runner, tmp_dir):
        report_out = os.path.join(tmp_dir, "rankine.html")
        result = runner.invoke(
            cli, ["cycle", "analyze", "--preset", "rankine-standard", "--report", report_out]
        )
        assert result.exit_code == 0, result.output
        with open(report_out, encoding="utf-8") as f:
            assert "<!DOCTYPE html>" in f.read()

    def test_preset_with_override(self, runner, tmp_dir):
        out = os.path.join(tmp_dir, "otto.json")
        result = runner.invoke(
            cli,
            ["cycle", "analyze", "--preset", "otto-standard", "-p", "compressionRatio=10", "-o", out],
        )
        assert result.exit_code == 0, result.output
        with open(out) as f:
            data = json.load(f)
        assert data["cycle"]["efficiency"] == pytest.approx(1 - 10 ** -0.4, rel=1e-6)

    def test_refrigeration_preset(self, runner):
        result = runner.invoke(cli, ["cycle", "analyze", "--preset", "refrigeration-standard"])
        assert result.exit_code == 0, result.output
        assert "COP" in result.output

    def test_coolprop_with_table_id(self, runner):
        result = runner.invoke(
            cli, ["cycle", "analyze", "--preset", "refrigeration-standard", "--coolprop"]
        )
        assert result.exit_code == 0, result.output
        assert "COP" in result.output


class TestCycleErrors:
    """Calculation errors exit with status 1, usage errors with 2."""

    def test_invalid_compression_ratio(self, runner):
        result = runner.invoke(
            cli, ["cycle", "analyze", "--type", "otto", "-p", "T1=300", "-p", "P1=100", "-p", "compressionRatio=1"]
        )
        assert result.exit_code == 1
        assert "Error" in result.output
        assert "compressionRatio" in result.output

    def test_unknown_fluid(self, runner):
        result = runner.invoke(cli, ["cycle", "analyze", *OTTO_ARGS, "--fluid", "unobtainium"])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_missing_parameter(self, runner):
        result = runner.invoke(cli, ["cycle", "analyze", "--type", "diesel", "-p", "T1=300"])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_overflowing_input(self, runner):
        result = runner.invoke(
            cli, ["cycle", "analyze", "--type", "otto", "-p", "T1=1e300", "-p", "P1=100", "-p", "compressionRatio=8"]
        )
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_malformed_parameter(self, runner):
        result = runner.invoke(cli, ["cycle", "analyze", "--type", "otto", "-p", "T1"])
        assert result.exit_code == 2

    def test_non_numeric_parameter(self, runner):
        result = runner.invoke(cli, ["cycle", "analyze", "--type", "otto", "-p", "T1=hot"])
        assert result.exit_code == 2

    def test_unknown_preset(self, runner):
        result = runner.invoke(cli, ["cycle", "analyze", "--preset", "otto-turbo"])
        assert result.exit_code == 2

    def test_preset_type_mismatch(self, runner):
        result = runner.invoke(
            cli, ["cycle", "analyze", "--preset", "otto-standard", "--type", "diesel"]
        )
        assert result.exit_code == 2

    def test_no_type_or_preset(self, runner):
        result = runner.invoke(cli, ["cycle", "analyze"])
        assert result.exit_code == 2


class TestCycleCompare:
    def test_compare_all(self, runner):
        result = runner.invoke(cli, ["cycle", "compare"])
        assert result.exit_code == 0, result.output
        assert "Preset Comparison" in result.output

    def test_compare_filtered(self, runner):
        result = runner.invoke(cli, ["cycle", "compare", "--type", "otto"])
        assert result.exit_code == 0, result.output
        assert "Preset Comparison" in result.output


class TestDiagram:
    """Test diagram sampling, CSV export and plotting."""

    def test_pv_diagram(self, runner):
        result = runner.invoke(cli, ["diagram", *OTTO_ARGS])
        assert result.exit_code == 0, result.output
        assert "Points: 81" in result.output
        assert "Enclosed area" in result.output

    def test_ph_has_no_area(self, runner):
        result = runner.invoke(cli, ["diagram", *OTTO_ARGS, "--diagram", "ph"])
        assert result.exit_code == 0, result.output
        assert "Enclosed area" not in result.output

    def test_hs_diagram(self, runner):
        result = runner.invoke(
            cli, ["diagram", "--preset", "brayton-standard", "--diagram", "hs", "--samples", "4"]
        )
        assert result.exit_code == 0, result.output
        assert "Points: 17" in result.output

    def test_csv_output(self, runner, tmp_dir):
        out = os.path.join(tmp_dir, "ts.csv")
        result = runner.invoke(
            cli, ["diagram", *OTTO_ARGS, "--diagram", "ts", "--samples", "10", "-o", out]
        )
        assert result.exit_code == 0, result.output
        with open(out, newline="") as f:
            rows = list(csv.reader(f))
        assert len(rows) == 1 + 4 * 10 + 1

    def test_plot(self, runner, tmp_dir):
        out = os.path.join(tmp_dir, "pv.png")
        result = runner.invoke(cli, ["diagram", "--preset", "diesel-standard", "--plot", out])
        assert result.exit_code == 0, result.output
        assert os.path.getsize(out) > 0

    def test_zero_samples_rejected(self, runner):
        result = runner.invoke(cli, ["diagram", *OTTO_ARGS, "--samples", "0"])
        assert result.exit_code == 2


class TestSettings:
    """Test the global --settings option."""

    def test_settings_file_controls_density(self, runner, tmp_dir):
        path = os.path.join(tmp_dir, "settings.json")
        with open(path, "w") as f:
            json.dump({"samples_per_leg": 5}, f)
        result = runner.invoke(cli, ["--settings", path, "diagram", *OTTO_ARGS])
        assert result.exit_code == 0, result.output
        assert "Points: 21" in result.output

    def test_invalid_settings_file(self, runner, tmp_dir):
        path = os.path.join(tmp_dir, "settings.json")
        with open(path, "w") as f:
            json.dump({"eviction": "random"}, f)
        result = runner.invoke(cli, ["--settings", path, "info", "settings"])
        assert result.exit_code == 2


class TestInfoCommands:
    """Test info CLI commands."""

    def test_info_fluids(self, runner):
        result = runner.invoke(cli, ["info", "fluids"])
        assert result.exit_code == 0, result.output
        assert "Working Fluids" in result.output

    def test_info_presets(self, runner):
        result = runner.invoke(cli, ["info", "presets"])
        assert result.exit_code == 0, result.output
        assert "Cycle Presets" in result.output

    def test_info_parameters(self, runner):
        result = runner.invoke(cli, ["info", "parameters"])
        assert result.exit_code == 0, result.output
        assert "Cycle Parameters" in result.output

    def test_info_settings(self, runner):
        result = runner.invoke(cli, ["info", "settings"])
        assert result.exit_code == 0, result.output
        assert "samples_per_leg" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output
