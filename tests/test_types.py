"""Unit tests for adapter-facing types and the resource ID cache."""

import pytest

from adapters.cache import ResourceIdCache
from adapters.types import (
    ApplyError,
    ApplyResult,
    Change,
    ChangeSet,
    ResourceType,
)
from ir.types import (
    CustomFormatIR,
    DownloadClientIR,
    HealthIssue,
    HealthStatus,
    RadarrNamingIR,
    VideoQualityIR,
)


# ==================== Change tests ====================


class TestChange:
    def test_matching_payload(self):
        change = Change(
            resource_type=ResourceType.QUALITY_PROFILE,
            name="nebularr-movies",
            payload=VideoQualityIR(profile_name="nebularr-movies"),
        )
        assert change.id is None

    def test_mismatched_payload_raises(self):
        with pytest.raises(TypeError, match="DownloadClient change 'x'"):
            Change(
                resource_type=ResourceType.DOWNLOAD_CLIENT,
                name="x",
                payload=CustomFormatIR(name="x"),
            )

    def test_naming_payload(self):
        Change(resource_type=ResourceType.NAMING_CONFIG, name="naming", payload=RadarrNamingIR())


# ==================== ChangeSet tests ====================


class TestChangeSet:
    def test_empty(self):
        cs = ChangeSet()
        assert cs.is_empty()
        assert cs.total_changes() == 0

    def test_add_and_summary(self):
        cs = ChangeSet()
        cs.add_create(ResourceType.CUSTOM_FORMAT, "a", CustomFormatIR(name="a"))
        cs.add_update(ResourceType.CUSTOM_FORMAT, "b", 2, CustomFormatIR(name="b"))
        cs.add_delete(ResourceType.CUSTOM_FORMAT, "c", 3, CustomFormatIR(name="c", id=3))
        assert not cs.is_empty()
        assert cs.total_changes() == 3
        assert cs.summary() == "1 create(s), 1 update(s), 1 delete(s)"

    def test_update_without_id(self):
        cs = ChangeSet()
        with pytest.raises(ValueError, match="no service ID"):
            cs.add_update(ResourceType.CUSTOM_FORMAT, "b", None, CustomFormatIR(name="b"))

    def test_delete_without_id(self):
        cs = ChangeSet()
        with pytest.raises(ValueError):
            cs.add_delete(ResourceType.CUSTOM_FORMAT, "c", None, CustomFormatIR(name="c"))

    def test_extend(self):
        first = ChangeSet()
        first.add_create(ResourceType.CUSTOM_FORMAT, "a", CustomFormatIR(name="a"))
        second = ChangeSet()
        second.add_create(
            ResourceType.DOWNLOAD_CLIENT, "b", DownloadClientIR(name="b", implementation="X")
        )
        first.extend(second)
        assert [c.name for c in first.creates] == ["a", "b"]


# ==================== ApplyResult tests ====================


class TestApplyResult:
    def test_success(self):
        assert ApplyResult(applied=3).success

    def test_record_failure(self):
        result = ApplyResult()
        result.record_failure(None, RuntimeError("nope"), resource="Authentication")
        assert result.failed == 1
        assert not result.success
        assert str(result.errors[0]) == "Authentication: nope"

    def test_error_str_with_change(self):
        change = Change(ResourceType.CUSTOM_FORMAT, "f", CustomFormatIR(name="f"))
        error = ApplyError(change=change, error=RuntimeError("bad"))
        assert str(error) == "CustomFormat 'f': bad"

    def test_merge(self):
        a = ApplyResult(applied=1, skipped=1)
        b = ApplyResult(applied=2)
        b.record_failure(None, RuntimeError("x"))
        a.merge(b)
        assert (a.applied, a.failed, a.skipped) == (3, 1, 1)
        assert len(a.errors) == 1


# ==================== Health tests ====================


class TestHealthStatus:
    def test_errors_and_warnings(self):
        status = HealthStatus(
            healthy=False,
            issues=(
                HealthIssue(source="IndexerCheck", type="error", message="down"),
                HealthIssue(source="UpdateCheck", type="warning", message="old"),
            ),
        )
        assert status.has_errors()
        assert status.has_warnings()

    def test_issue_key(self):
        issue = HealthIssue(source="S", type="notice", message="m")
        assert issue.key == "S:notice:m"


# ==================== ResourceIdCache tests ====================


class TestResourceIdCache:
    def test_set_and_get(self):
        cache = ResourceIdCache()
        cache.set("http://a", ResourceType.CUSTOM_FORMAT, "f", 5)
        assert cache.get("http://a", ResourceType.CUSTOM_FORMAT, "f") == 5

    def test_scoped_by_instance(self):
        cache = ResourceIdCache()
        cache.set("http://a", ResourceType.CUSTOM_FORMAT, "f", 5)
        assert cache.get("http://b", ResourceType.CUSTOM_FORMAT, "f") is None

    def test_scoped_by_type(self):
        cache = ResourceIdCache()
        cache.set("http://a", ResourceType.CUSTOM_FORMAT, "f", 5)
        assert cache.get("http://a", ResourceType.QUALITY_PROFILE, "f") is None

    def test_discard(self):
        cache = ResourceIdCache()
        cache.set("http://a", ResourceType.CUSTOM_FORMAT, "f", 5)
        cache.discard("http://a", ResourceType.CUSTOM_FORMAT, "f")
        cache.discard("http://missing", ResourceType.CUSTOM_FORMAT, "f")
        assert len(cache) == 0

    def test_invalidate(self):
        cache = ResourceIdCache()
        cache.set("http://a", ResourceType.CUSTOM_FORMAT, "f", 1)
        cache.set("http://b", ResourceType.CUSTOM_FORMAT, "f", 2)
        cache.invalidate("http://a")
        assert len(cache) == 1
        cache.invalidate()
        assert len(cache) == 0
