"""Unit tests for the command-line interface."""

import json

from typer.testing import CliRunner

from buildlogic import __version__
from buildlogic.cli import app, parse_overrides
from buildlogic.core.config import get_config

runner = CliRunner()


class TestParseOverrides:
    """Tests for --set parsing."""

    def test_values_are_json_or_text(self):
        """Test that numbers and booleans are typed and other values stay text."""
        overrides = parse_overrides([
            "compile_options.target_sdk=34",
            "compile_options.all_warnings_as_errors=true",
            "test_options.execution=HOST",
        ])

        assert overrides == {
            "compile_options": {"target_sdk": 34, "all_warnings_as_errors": True},
            "test_options": {"execution": "HOST"},
        }


class TestCommands:
    """Tests for CLI commands."""

    def test_version(self):
        """Test the --version flag."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_modules(self):
        """Test listing the built-in conventions."""
        result = runner.invoke(app, ["modules"])
        assert result.exit_code == 0
        assert "feature" in result.stdout
        assert "jacoco" in result.stdout

    def test_plan(self):
        """Test showing the application order without applying anything."""
        result = runner.invoke(app, ["plan", "feature"])

        assert result.exit_code == 0
        lines = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        assert lines[0].startswith("1. library")
        assert lines[2] == "3. feature"

    def test_plan_unknown(self):
        """Test that an unknown identifier exits with an error."""
        result = runner.invoke(app, ["plan", "ghost"])
        assert result.exit_code == 1
        assert "ghost" in result.stdout

    def test_resolve_json(self):
        """Test resolving a target and printing JSON."""
        result = runner.invoke(
            app,
            ["resolve", ":core:data", "-m", "library", "-m", "unit-test", "--set", "compile_options.target_sdk=34", "--json"],
        )

        assert result.exit_code == 0
        final = json.loads(result.stdout)
        assert final["target"] == ":core:data"
        assert final["test_options"]["framework"] == "jupiter"
        assert final["compile_options"]["target_sdk"] == 34

    def test_resolve_table(self):
        """Test the human-readable summary."""
        result = runner.invoke(app, ["resolve", ":app", "-m", "application"])

        assert result.exit_code == 0
        assert "Resolved :app" in result.stdout
        assert "Shape: application" in result.stdout

    def test_resolve_conflict(self):
        """Test that a resolution error exits with status 1."""
        result = runner.invoke(app, ["resolve", ":app", "-m", "application", "-m", "library"])

        assert result.exit_code == 1
        assert "Resolution failed" in result.stdout

    def test_resolve_invalid_path(self):
        """Test that an invalid project path is reported."""
        result = runner.invoke(app, ["resolve", "app", "-m", "application"])

        assert result.exit_code == 1
        assert "Invalid request" in result.stdout

    def test_resolve_with_version_table(self, sample_properties):
        """Test resolving with an external version table."""
        result = runner.invoke(
            app,
            ["resolve", ":core:data", "-m", "library", "--versions", str(sample_properties), "--json"],
        )

        assert result.exit_code == 0
        final = json.loads(result.stdout)
        assert final["compile_options"]["jvm_target"] == "17"
        assert final["compile_options"]["min_sdk"] == 26

    def test_batch(self, temp_dir):
        """Test resolving several targets from a requests file.

        Verifies that successful targets are written even when another
        target fails, and that the command exits with status 1.
        """
        requests_file = temp_dir / "requests.json"
        requests_file.write_text(json.dumps([
            {"target": {"path": ":core:data"}, "identifiers": ["library", "unit-test"]},
            {"target": {"path": ":app"}, "identifiers": ["application", "library"]},
        ]))
        output = temp_dir / "out"

        result = runner.invoke(app, ["batch", str(requests_file), "--output", str(output), "--workers", "2"])

        assert result.exit_code == 1
        written = json.loads((output / "core_data.json").read_text())
        assert written["shape"] == "library"
        assert not (output / "app.json").exists()

    def test_config(self):
        """Test showing the current configuration."""
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "Strict Overwrites" in result.stdout

    def test_verbose_keeps_shared_config(self):
        """Test that --verbose does not change the cached configuration."""
        level = get_config().log_level

        result = runner.invoke(app, ["resolve", ":app", "-m", "application", "--verbose", "--json"])

        assert result.exit_code == 0
        assert get_config().log_level == level
