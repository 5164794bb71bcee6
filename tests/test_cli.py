"""
Tests for the Typer command line interface.
"""

import shutil
from pathlib import Path

import pytest
from typer.testing import CliRunner

from bookingslots import __version__
from bookingslots.cli.app import app

runner = CliRunner()

SAMPLE_DATA = Path(__file__).resolve().parent.parent / "sample_data.json"


@pytest.fixture
def config_path(tmp_path):
    shutil.copy(SAMPLE_DATA, tmp_path / "sample_data.json")
    path = tmp_path / "config.yaml"
    path.write_text(
        "timezone: America/Sao_Paulo\n"
        "log_level: ERROR\n"
        "data_file: sample_data.json\n",
        encoding="utf-8",
    )
    return path


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output


class TestSlotsCommand:
    """Tests for the slots command."""

    def test_slots_for_booked_day(self, config_path):
        result = runner.invoke(
            app,
            ["slots", "corte-fino", "ana", "--config", str(config_path), "--date", "2024-11-25"],
        )

        assert result.exit_code == 0
        assert "09:00" in result.output
        assert "Booked" in result.output
        assert "Break" in result.output
        assert "Blocked" in result.output
        assert "booking window" in result.output
        assert "Morning" in result.output

    def test_only_available_hides_booked(self, config_path):
        result = runner.invoke(
            app,
            [
                "slots", "corte-fino", "ana",
                "-c", str(config_path),
                "--date", "2024-11-25",
                "--only-available",
            ],
        )

        assert result.exit_code == 0
        assert "Booked" not in result.output
        assert "09:40" in result.output

    def test_closed_sunday(self, config_path):
        result = runner.invoke(
            app,
            ["slots", "corte-fino", "ana", "-c", str(config_path), "--date", "2024-11-24"],
        )

        assert result.exit_code == 0
        assert "Closed on 2024-11-24" in result.output

    def test_unknown_business_is_closed(self, config_path):
        result = runner.invoke(
            app,
            ["slots", "nowhere", "ana", "-c", str(config_path), "--date", "2024-11-25"],
        )

        assert result.exit_code == 0
        assert "Closed on 2024-11-25" in result.output

    def test_invalid_date(self, config_path):
        result = runner.invoke(
            app,
            ["slots", "corte-fino", "ana", "-c", str(config_path), "--date", "25/11/2024"],
        )

        assert result.exit_code == 1
        assert "Could not parse date" in result.output

    def test_non_positive_duration(self, config_path):
        result = runner.invoke(
            app,
            ["slots", "corte-fino", "ana", "-c", str(config_path), "--date", "2024-11-25", "-d", "0"],
        )

        assert result.exit_code == 1
        assert "--duration must be greater than zero" in result.output

    def test_missing_config(self, tmp_path):
        result = runner.invoke(app, ["slots", "corte-fino", "ana", "-c", str(tmp_path / "none.yaml")])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_no_data_source(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("timezone: UTC\n", encoding="utf-8")

        result = runner.invoke(app, ["slots", "corte-fino", "ana", "-c", str(path), "--date", "2024-11-25"])

        assert result.exit_code == 1
        assert "No data source configured" in result.output


def test_professionals(config_path):
    result = runner.invoke(app, ["professionals", "corte-fino", "-c", str(config_path)])

    assert result.exit_code == 0
    assert "Ana" in result.output
    assert "Bruno" in result.output
    assert "Carla" not in result.output


def test_dates(config_path):
    result = runner.invoke(app, ["dates", "-c", str(config_path), "--days", "3"])

    assert result.exit_code == 0
    assert len([line for line in result.output.splitlines() if line.strip()]) == 4
