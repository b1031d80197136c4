"""Unit tests for capability sets and the capability detector."""

import pytest

from buildlogic.core.exceptions import ConflictError, MissingPrerequisiteError
from buildlogic.engine import CapabilityDetector, FunctionModule
from buildlogic.models import CapabilitySet, Shape


class TestCapabilitySet:
    """Tests for CapabilitySet."""

    def test_starts_empty(self):
        """Test that a new set has no tags and no shape."""
        caps = CapabilitySet()
        assert len(caps) == 0
        assert caps.shape is None

    def test_shape_tag_sets_shape(self):
        """Test that adding a shape tag establishes the shape."""
        caps = CapabilitySet(["library", "lint"])
        assert caps.shape is Shape.LIBRARY
        assert caps == {"library", "lint"}

    def test_second_shape_conflicts(self):
        """Test shape exclusivity.

        Verifies that adding a different shape tag raises ConflictError and
        leaves the set unchanged.
        """
        caps = CapabilitySet(["application"])

        with pytest.raises(ConflictError) as exc_info:
            caps.add("library", source="library")
        assert exc_info.value.identifier == "library"
        assert exc_info.value.conflicting_with == "application"
        assert caps == {"application"}

    def test_same_shape_twice_is_allowed(self):
        """Test that re-adding the active shape is a no-op."""
        caps = CapabilitySet(["library"])
        caps.add("library")
        assert caps.shape is Shape.LIBRARY
        assert len(caps) == 1

    def test_frozen_set_rejects_new_tags(self):
        """Test that a frozen set cannot grow."""
        caps = CapabilitySet(["library"])
        caps.freeze()

        with pytest.raises(ConflictError):
            caps.add("room")
        caps.add("library")
        assert caps.frozen

    def test_iteration_is_sorted(self):
        """Test that iteration order does not depend on insertion order."""
        assert list(CapabilitySet(["lint", "application", "detekt"])) == ["application", "detekt", "lint"]

    def test_snapshot_is_detached(self):
        """Test that a snapshot does not follow later additions."""
        caps = CapabilitySet(["library"])
        snapshot = caps.snapshot()
        caps.add("room")
        assert snapshot == frozenset({"library"})

    def test_shape_from_tag(self):
        """Test mapping tags to shapes."""
        assert Shape.from_tag("jvm-only") is Shape.JVM_ONLY
        assert Shape.from_tag("lint") is None
        assert Shape.TEST_HARNESS.is_android
        assert not Shape.JVM_ONLY.is_android


class TestCapabilityDetector:
    """Tests for CapabilityDetector."""

    def test_has(self):
        """Test tag presence checks."""
        detector = CapabilityDetector()
        caps = CapabilitySet(["library"])
        assert detector.has(caps, "library")
        assert not detector.has(caps, "room")
        assert detector.shape_of(caps) is Shape.LIBRARY

    def test_missing_prerequisite(self):
        """Test that a missing prerequisite tag is reported with its name."""
        module = FunctionModule("feature", prerequisites=["library", "dependency-injection"])
        caps = CapabilitySet(["library"])

        with pytest.raises(MissingPrerequisiteError) as exc_info:
            CapabilityDetector().require_before_apply(caps, module, target=":feature:home")
        assert exc_info.value.identifier == "feature"
        assert exc_info.value.missing_tag == "dependency-injection"
        assert exc_info.value.target == ":feature:home"

    def test_shape_prerequisite_conflicts_with_other_shape(self):
        """Test that requiring a shape the target does not have is a conflict."""
        module = FunctionModule("feature", prerequisites=["library"])
        caps = CapabilitySet(["application"])

        with pytest.raises(ConflictError) as exc_info:
            CapabilityDetector().require_before_apply(caps, module)
        assert exc_info.value.conflicting_with == "application"

    def test_base_module_conflicts_with_other_shape(self):
        """Test that a second base module is rejected before it runs."""
        module = FunctionModule("library", shape=Shape.LIBRARY)

        with pytest.raises(ConflictError):
            CapabilityDetector().require_before_apply(CapabilitySet(["application"]), module)

    def test_allowed_shapes(self):
        """Test that a module attached to an unsupported shape conflicts."""
        module = FunctionModule("unit-test", allowed_shapes=[Shape.APPLICATION, Shape.LIBRARY])
        detector = CapabilityDetector()

        assert detector.require_before_apply(CapabilitySet(["library"]), module)
        with pytest.raises(ConflictError):
            detector.require_before_apply(CapabilitySet(["test-harness"]), module)

    def test_requires_shape(self):
        """Test that a module needing a shape fails on an unshaped target."""
        module = FunctionModule("compose", allowed_shapes=[Shape.APPLICATION, Shape.LIBRARY], requires_shape=True)

        with pytest.raises(MissingPrerequisiteError) as exc_info:
            CapabilityDetector().require_before_apply(CapabilitySet(), module)
        assert exc_info.value.missing_tag == "application|library"

    def test_required_tags(self):
        """Test required non-shape tags."""
        module = FunctionModule("hilt-testing", required_tags=["dependency-injection"])
        detector = CapabilityDetector()

        with pytest.raises(MissingPrerequisiteError):
            detector.require_before_apply(CapabilitySet(["library"]), module)
        assert detector.require_before_apply(CapabilitySet(["library", "dependency-injection"]), module)

    def test_declared_shape_before_base_module(self):
        """Test checks against the shape declared by a later base module.

        Verifies that a shape-requiring module passes on an unshaped set when
        the plan declares a supported shape, and conflicts otherwise.
        """
        module = FunctionModule("flavors", allowed_shapes=[Shape.APPLICATION, Shape.LIBRARY], requires_shape=True)
        detector = CapabilityDetector()

        assert detector.shape_of(CapabilitySet(), Shape.APPLICATION) is Shape.APPLICATION
        assert detector.require_before_apply(CapabilitySet(), module, declared_shape=Shape.APPLICATION)
        with pytest.raises(ConflictError) as exc_info:
            detector.require_before_apply(CapabilitySet(), module, declared_shape=Shape.JVM_ONLY)
        assert exc_info.value.conflicting_with == "jvm-only"
