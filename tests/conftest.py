"""Test configuration for buildlogic."""

import pytest
from pathlib import Path
import tempfile

from buildlogic.conventions import build_default_registry
from buildlogic.core.config import Config, EngineConfig
from buildlogic.engine import CompositionResolver, ExtensionStore
from buildlogic.models import ResolutionRequest, TargetModule
from buildlogic.versions import VersionTable


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests.

    Yields:
        Path: A Path object pointing to the temporary directory.
            The directory is automatically cleaned up after the test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config():
    """Create a configuration independent of the environment.

    Returns:
        Config: Strict engine configuration with default project properties.
    """
    return Config(engine=EngineConfig(strict_overwrites=True, max_workers=4))


@pytest.fixture
def versions():
    """Create a version table holding the built-in defaults plus jacoco.

    Returns:
        VersionTable: Version table shared by the resolver fixtures.
    """
    return VersionTable({"jacoco": "0.8.7"})


@pytest.fixture
def registry():
    """Create the frozen registry of built-in conventions.

    Returns:
        Registry: Registry holding every built-in convention.
    """
    return build_default_registry()


@pytest.fixture
def resolver(registry, versions, config):
    """Create a strict resolver over the built-in conventions.

    Args:
        registry: Pytest fixture providing the default registry.
        versions: Pytest fixture providing the version table.
        config: Pytest fixture providing the configuration.

    Returns:
        CompositionResolver: The resolver under test.
    """
    return CompositionResolver(registry, versions, config=config)


@pytest.fixture
def store():
    """Create an empty, strict extension store for target ':core:data'.

    Returns:
        ExtensionStore: A store in the OPEN state.
    """
    return ExtensionStore(target=":core:data", strict=True)


@pytest.fixture
def make_request():
    """Build resolution requests tersely.

    Returns:
        Callable: ``make_request(path, *identifiers, overrides=None, **properties)``.
    """
    def _make(path, *identifiers, overrides=None, **properties):
        return ResolutionRequest(
            target=TargetModule(path=path, properties=properties),
            identifiers=list(identifiers),
            overrides=overrides or {},
        )

    return _make


@pytest.fixture
def sample_catalog(temp_dir):
    """Create a Gradle version catalog for testing.

    Args:
        temp_dir: Pytest fixture providing a temporary directory path.

    Returns:
        Path: The path to a libs.versions.toml file.
    """
    catalog = temp_dir / "libs.versions.toml"
    catalog.write_text(
        "[versions]\n"
        'jacoco = "0.8.7"\n'
        'jvm-target = "17"\n'
        'kotlin = { strictly = "2.2.20" }\n'
        "target-sdk = 35\n"
        "\n"
        "[libraries]\n"
        'room-runtime = { group = "androidx.room", name = "room-runtime", version = "2.7.0" }\n'
    )
    return catalog


@pytest.fixture
def sample_properties(temp_dir):
    """Create a properties-style version table for testing.

    Args:
        temp_dir: Pytest fixture providing a temporary directory path.

    Returns:
        Path: The path to a versions.properties file.
    """
    properties = temp_dir / "versions.properties"
    properties.write_text(
        "# toolchain\n"
        "jvm-target=17\n"
        "min-sdk=26\n"
        "jacoco=0.8.12\n"
    )
    return properties
