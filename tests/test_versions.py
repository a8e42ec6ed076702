"""Tests for version publishing and deprecation."""

import pytest

from libregistry.errors import (
    EmptyContentPointer,
    NotFound,
    NotOwner,
    VersionExists,
    VersionNotFound,
)
from libregistry.events import EventRecorder, VersionDeprecated, VersionPublished
from libregistry.registry import LibraryRegistry

OWNER = "0xowner"
OTHER = "0xother"


def _registry(clock=lambda: 1_700_000_000):
    registry = LibraryRegistry(clock=clock)
    recorder = EventRecorder()
    registry.events.subscribe(recorder)
    registry.register_library("PublishTestLib", "Lib for publishing tests", [], False, "go", caller=OWNER)
    recorder.clear()
    return registry, recorder


def test_owner_publishes_version():
    registry, recorder = _registry()
    registry.publish_version("PublishTestLib", "1.0.0", "QmHashV1", [], caller=OWNER)

    assert recorder.events == [
        VersionPublished(
            library="PublishTestLib", version="1.0.0", content_pointer="QmHashV1", publisher=OWNER
        )
    ]
    v = registry.get_version_info("PublishTestLib", "1.0.0")
    assert v.content_pointer == "QmHashV1"
    assert v.publisher == OWNER
    assert v.timestamp == 1_700_000_000
    assert v.deprecated is False
    assert v.dependencies == []
    assert registry.get_version_numbers("PublishTestLib") == ["1.0.0"]


def test_default_clock_records_current_time():
    registry = LibraryRegistry()
    registry.register_library("Clocked", caller=OWNER)
    registry.publish_version("Clocked", "0.1.0", "QmX", caller=OWNER)
    assert registry.get_version_info("Clocked", "0.1.0").timestamp > 0


def test_dependencies_stored_verbatim():
    registry, _ = _registry()
    deps = ["left-pad@^1.3.0", "not a real specifier", "left-pad@^1.3.0"]
    registry.publish_version("PublishTestLib", "1.0.0", "QmHashV1", deps, caller=OWNER)

    assert registry.get_version_info("PublishTestLib", "1.0.0").dependencies == deps


def test_non_owner_cannot_publish():
    registry, _ = _registry()
    with pytest.raises(NotOwner):
        registry.publish_version("PublishTestLib", "1.0.0", "QmHashV1", caller=OTHER)
    assert registry.get_version_numbers("PublishTestLib") == []


def test_publish_to_missing_library_fails():
    registry, _ = _registry()
    with pytest.raises(NotFound):
        registry.publish_version("NonExistent", "1.0.0", "QmHashV1", caller=OWNER)


def test_publish_duplicate_version_fails():
    registry, recorder = _registry()
    registry.publish_version("PublishTestLib", "1.0.0", "QmHashV1", caller=OWNER)

    with pytest.raises(VersionExists):
        registry.publish_version("PublishTestLib", "1.0.0", "DifferentHash", caller=OWNER)

    assert registry.get_version_info("PublishTestLib", "1.0.0").content_pointer == "QmHashV1"
    assert registry.get_version_numbers("PublishTestLib") == ["1.0.0"]
    assert len(recorder.events) == 1


def test_publish_empty_content_pointer_fails():
    registry, _ = _registry()
    with pytest.raises(EmptyContentPointer):
        registry.publish_version("PublishTestLib", "1.0.0", "", caller=OWNER)
    assert registry.get_version_numbers("PublishTestLib") == []


def test_versions_listed_in_publish_order():
    registry, _ = _registry()
    for version in ["2.0.0", "1.0.0", "1.1.0"]:
        registry.publish_version("PublishTestLib", version, f"Qm{version}", caller=OWNER)

    assert registry.get_version_numbers("PublishTestLib") == ["2.0.0", "1.0.0", "1.1.0"]
    assert registry.get_version_info("PublishTestLib", "1.1.0").content_pointer == "Qm1.1.0"


def test_get_missing_version_fails():
    registry, _ = _registry()
    with pytest.raises(VersionNotFound):
        registry.get_version_info("PublishTestLib", "9.9.9")


def test_owner_deprecates_version():
    registry, recorder = _registry()
    registry.publish_version("PublishTestLib", "1.0.0", "QmHashV1", caller=OWNER)

    registry.deprecate_version("PublishTestLib", "1.0.0", caller=OWNER)

    assert recorder.events[-1] == VersionDeprecated(library="PublishTestLib", version="1.0.0")
    assert registry.get_version_info("PublishTestLib", "1.0.0").deprecated is True


def test_deprecate_twice_is_idempotent():
    registry, recorder = _registry()
    registry.publish_version("PublishTestLib", "1.0.0", "QmHashV1", caller=OWNER)

    registry.deprecate_version("PublishTestLib", "1.0.0", caller=OWNER)
    first = registry.get_version_info("PublishTestLib", "1.0.0")
    registry.deprecate_version("PublishTestLib", "1.0.0", caller=OWNER)

    assert registry.get_version_info("PublishTestLib", "1.0.0") == first
    assert len(recorder.of_type(VersionDeprecated)) == 2


def test_non_owner_cannot_deprecate():
    registry, _ = _registry()
    registry.publish_version("PublishTestLib", "1.0.0", "QmHashV1", caller=OWNER)
    with pytest.raises(NotOwner):
        registry.deprecate_version("PublishTestLib", "1.0.0", caller=OTHER)
    assert registry.get_version_info("PublishTestLib", "1.0.0").deprecated is False


def test_deprecate_missing_version_fails():
    registry, _ = _registry()
    with pytest.raises(VersionNotFound):
        registry.deprecate_version("PublishTestLib", "9.9.9", caller=OWNER)


def test_deprecate_version_of_missing_library_fails():
    registry, _ = _registry()
    with pytest.raises(NotFound):
        registry.deprecate_version("FakeLib", "1.0.0", caller=OWNER)
