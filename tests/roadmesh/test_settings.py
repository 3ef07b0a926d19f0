"""Unit tests for the per-curve settings store."""

import pytest

from src.roadmesh.settings import CurveSettings, SettingsStore


class Counter:
    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1


class TestSettingsStore:
    """Test suite for SettingsStore."""

    def test_get_creates_default(self):
        """Test that first access creates an entry with the defaults."""
        store = SettingsStore(lambda: 3, default_width=2.5, default_resolution=7)

        settings = store.get(1)

        assert settings == CurveSettings(1, 2.5, 7)
        assert len(store) == 1
        assert store.get(1) is settings

    def test_get_invalid_index(self):
        """Test that out-of-range indices return None and add nothing."""
        store = SettingsStore(lambda: 2)

        assert store.get(2) is None
        assert store.get(-1) is None
        assert len(store) == 0

    def test_defaults_taken_at_creation(self):
        """Test that changing defaults does not touch existing entries."""
        store = SettingsStore(lambda: 2, default_width=1.0, default_resolution=4)
        first = store.get(0)

        store.default_width = 3.0
        second = store.get(1)

        assert first.width == 1.0
        assert second.width == 3.0

    def test_set_width_notifies(self):
        """Test that width overrides update the entry and notify."""
        counter = Counter()
        store = SettingsStore(lambda: 2, on_change=counter)

        assert store.set_width(0, 4.0) is True

        assert store.get(0).width == 4.0
        assert counter.calls == 1

    def test_set_resolution_notifies(self):
        """Test that resolution overrides update the entry and notify."""
        counter = Counter()
        store = SettingsStore(lambda: 2, on_change=counter)

        assert store.set_resolution(1, 12) is True

        assert store.get(1).resolution == 12
        assert counter.calls == 1

    def test_set_width_invalid_index_is_noop(self):
        """Test that an invalid index leaves the store untouched and silent."""
        counter = Counter()
        store = SettingsStore(lambda: 2, on_change=counter)

        assert store.set_width(5, 4.0) is False
        assert store.set_resolution(-1, 4) is False

        assert len(store) == 0
        assert counter.calls == 0

    def test_negative_values_rejected(self):
        """Test that negative width or resolution raise ValueError."""
        store = SettingsStore(lambda: 2)

        with pytest.raises(ValueError):
            store.set_width(0, -1.0)
        with pytest.raises(ValueError):
            store.set_resolution(0, -1)

    def test_records_round_trip(self):
        """Test that records keep insertion order and rebuild the lookup."""
        store = SettingsStore(lambda: 3, default_width=1.0, default_resolution=4)
        store.get(2)
        store.set_width(0, 3.0)
        store.set_resolution(2, 9)

        records = store.to_records()
        restored = SettingsStore.from_records(records, lambda: 3)

        assert [r["curve_index"] for r in records] == [2, 0]
        assert restored.to_records() == records
        assert restored.get(2).resolution == 9
        assert restored.get(0).width == 3.0

    def test_load_records_no_duplicates(self):
        """Test that a repeated curve index keeps a single entry."""
        store = SettingsStore(lambda: 3)

        store.load_records([
            {"curve_index": 1, "width": 1.0, "resolution": 2},
            {"curve_index": 1, "width": 5.0, "resolution": 6},
        ])

        assert len(store) == 1
        assert store.get(1).width == 5.0

    def test_load_records_validates_before_replacing(self):
        """Test that an invalid record raises and keeps the current entries."""
        store = SettingsStore(lambda: 3)
        store.set_width(0, 3.0)

        with pytest.raises(ValueError):
            store.load_records([
                {"curve_index": 1, "width": 2.0, "resolution": 4},
                {"curve_index": 2, "width": -1.0, "resolution": 4},
            ])
        with pytest.raises(ValueError):
            store.load_records([{"curve_index": 1, "width": 2.0, "resolution": -1}])

        assert len(store) == 1
        assert store.get(0).width == 3.0
        assert 1 not in store
