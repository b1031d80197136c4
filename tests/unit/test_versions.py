"""Unit tests for the version table."""

import pytest

from buildlogic.core.exceptions import MissingVersionKeyError, VersionTableError
from buildlogic.versions import DEFAULT_VERSIONS, VersionTable, load_version_table


class TestVersionTable:
    """Tests for VersionTable."""

    def test_defaults(self):
        """Test that the built-in SDK and toolchain values are present."""
        table = VersionTable()
        assert table.require_int("compile-sdk") == 36
        assert table.require_int("target-sdk") == 36
        assert table.require_int("min-sdk") == 28
        assert table.require("java-version") == "21"
        assert table.require("jvm-target") == "21"
        assert table.require("build-tools") == "36.0.0"

    def test_external_values_take_precedence(self):
        """Test layering of external values over defaults."""
        table = VersionTable({"jvm-target": "17", "jacoco": "0.8.7"})
        assert table.require("jvm-target") == "17"
        assert table.require("jacoco") == "0.8.7"
        assert table.require("compile-sdk") == "36"

    def test_without_defaults(self):
        """Test a table that holds only the given values."""
        table = VersionTable({"jvm-target": "21"}, defaults=None)
        assert len(table) == 1
        assert "compile-sdk" not in table

    def test_missing_key(self):
        """Test that an unknown key names the key and the reading module."""
        with pytest.raises(MissingVersionKeyError) as exc_info:
            VersionTable().require("jacoco", identifier="jacoco")
        assert exc_info.value.key == "jacoco"
        assert exc_info.value.identifier == "jacoco"

    def test_non_integer_sdk(self):
        """Test that an SDK level must be an integer."""
        with pytest.raises(VersionTableError):
            VersionTable({"target-sdk": "Baklava"}).require_int("target-sdk")

    def test_values_are_strings(self):
        """Test that numeric inputs are normalised to strings."""
        table = VersionTable({"target-sdk": 35})
        assert table.find("target-sdk") == "35"
        assert table.find("kotlin") is None

    def test_defaults_are_read_only(self):
        """Test that the default table cannot be mutated."""
        with pytest.raises(TypeError):
            DEFAULT_VERSIONS["compile-sdk"] = "34"  # type: ignore[index]


class TestLoadVersionTable:
    """Tests for loading version tables from files."""

    def test_load_catalog(self, sample_catalog):
        """Test reading the [versions] table of a Gradle catalog.

        Verifies that plain, integer and rich (strictly) declarations are
        flattened and that other catalog tables are ignored.
        """
        table = load_version_table(sample_catalog)

        assert table.require("jacoco") == "0.8.7"
        assert table.require("jvm-target") == "17"
        assert table.require("kotlin") == "2.2.20"
        assert table.require_int("target-sdk") == 35
        assert table.require("compile-sdk") == "36"
        assert "room-runtime" not in table
        assert table.source == str(sample_catalog)

    def test_load_properties(self, sample_properties):
        """Test reading key=value properties, ignoring comments."""
        table = load_version_table(sample_properties)

        assert table.require("jvm-target") == "17"
        assert table.require_int("min-sdk") == 26
        assert table.require("jacoco") == "0.8.12"

    def test_missing_file(self, temp_dir):
        """Test that a missing file is a version table error."""
        with pytest.raises(VersionTableError) as exc_info:
            load_version_table(temp_dir / "nope.toml")
        assert exc_info.value.path.endswith("nope.toml")

    def test_invalid_toml(self, temp_dir):
        """Test that malformed TOML is reported with its path."""
        broken = temp_dir / "libs.versions.toml"
        broken.write_text("[versions\njacoco = ")

        with pytest.raises(VersionTableError) as exc_info:
            load_version_table(broken)
        assert exc_info.value.cause is not None

    def test_unsupported_format(self, temp_dir):
        """Test that unknown file types are rejected."""
        yaml_file = temp_dir / "versions.yaml"
        yaml_file.write_text("jacoco: 0.8.7\n")

        with pytest.raises(VersionTableError):
            load_version_table(yaml_file)

    def test_flat_toml(self, temp_dir):
        """Test a TOML file without a [versions] table."""
        flat = temp_dir / "versions.toml"
        flat.write_text('jacoco = "0.8.7"\nmin-sdk = 24\n')

        table = load_version_table(flat)
        assert table.require("jacoco") == "0.8.7"
        assert table.require_int("min-sdk") == 24
