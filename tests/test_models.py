"""
Tests for data models and the status cache.
"""

from datetime import datetime

import pytest

from arch_updates_bar.exceptions import FetchError, FetchErrorKind
from arch_updates_bar.models import AppConfig, DisplayKind, DisplayState, UpdateSnapshot
from arch_updates_bar.utils.cache import StatusCache

from conftest import make_snapshot


class TestUpdateSnapshot:
    """Snapshot invariants."""

    def test_from_entries_counts(self):
        snapshot = UpdateSnapshot.from_entries(["a 1 -> 2", "b 1 -> 2"], fetched_at=datetime(2024, 1, 1))
        assert snapshot.count == 2
        assert snapshot.package_names == ("a 1 -> 2", "b 1 -> 2")

    def test_count_must_match_entries(self):
        with pytest.raises(ValueError):
            UpdateSnapshot(count=3, package_names=("a",), fetched_at=datetime(2024, 1, 1))

    def test_negative_count_rejected(self):
        with pytest.raises(ValueError):
            UpdateSnapshot(count=-1)

    def test_immutable(self):
        snapshot = make_snapshot(1)
        with pytest.raises(AttributeError):
            snapshot.count = 5

    def test_unknown_is_not_known(self):
        assert UpdateSnapshot.unknown().is_known is False
        assert make_snapshot(0).is_known is True


class TestDisplayState:
    """Exactly one variant is populated."""

    def test_normal_requires_snapshot(self):
        with pytest.raises(ValueError):
            DisplayState(kind=DisplayKind.NORMAL)

    def test_checking_cannot_carry_snapshot(self):
        with pytest.raises(ValueError):
            DisplayState(kind=DisplayKind.CHECKING, snapshot=make_snapshot(2))

    def test_error_requires_reason(self):
        with pytest.raises(ValueError):
            DisplayState(kind=DisplayKind.ERROR)

    def test_equality(self):
        assert DisplayState.checking() == DisplayState.checking()
        assert DisplayState.normal(make_snapshot(2)) == DisplayState.normal(make_snapshot(2))


class TestAppConfig:
    """Configuration model."""

    def test_defaults(self):
        assert AppConfig().to_dict() == {
            "interval_in_seconds": 1200,
            "warning_threshold": 25,
            "critical_threshold": 100,
        }

    def test_from_dict_round_trip(self):
        config = AppConfig(60, 1, 2)
        assert AppConfig.from_dict(config.to_dict()) == config


class TestStatusCache:
    """Cache bookkeeping."""

    def test_initial_state(self):
        cache = StatusCache()
        assert cache.has_snapshot is False
        assert cache.is_stale is False
        assert cache.interval_elapsed(0.0, 1200) is True

    def test_interval(self):
        cache = StatusCache()
        cache.store(make_snapshot(1), now=100.0)
        assert cache.interval_elapsed(1299.0, 1200) is False
        assert cache.interval_elapsed(1300.0, 1200) is True

    def test_failure_keeps_snapshot(self):
        cache = StatusCache()
        snapshot = make_snapshot(7)
        cache.store(snapshot, now=0.0)
        error = FetchError(FetchErrorKind.COMMAND_FAILED, "exit 1")

        cache.record_failure(error, now=1200.0)

        assert cache.snapshot is snapshot
        assert cache.is_stale is True
        assert cache.last_full_check == 1200.0

    def test_failure_before_first_success_is_not_stale(self):
        cache = StatusCache()
        cache.record_failure(FetchError(FetchErrorKind.TIMEOUT, "slow"), now=0.0)
        assert cache.is_stale is False
        assert cache.has_snapshot is False
