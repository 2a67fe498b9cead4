"""Unit tests for derived statistics fields."""

import pytest

from chartcalc.formula.stats import (
    BASE_FIELDS,
    DERIVED_FIELDS,
    compute_derived_field,
    ensure_derived_metrics,
    is_derived_field,
    synthetic_stats,
)


class TestDerivedFields:
    """Tests for computed-on-read fields."""

    def test_all_images(self):
        stats = {"remoteImages": 10, "hostessImages": 5, "selfies": 3}
        assert compute_derived_field("allImages", stats) == 18

    def test_remote_fans_computed(self):
        assert compute_derived_field("remoteFans", {"indoor": 50, "outdoor": 30}) == 80

    def test_remote_fans_stored_value_wins(self):
        stats = {"remoteFans": 12, "indoor": 50, "outdoor": 30}
        assert compute_derived_field("remoteFans", stats) == 12

    def test_total_fans(self, event_stats):
        assert compute_derived_field("totalFans", event_stats) == 280

    def test_total_fans_uses_stored_remote(self):
        assert compute_derived_field("totalFans", {"remoteFans": 10, "stadium": 5}) == 15

    def test_age_groups(self, event_stats):
        assert compute_derived_field("totalUnder40", event_stats) == 120
        assert compute_derived_field("totalOver40", event_stats) == 160

    def test_missing_and_non_numeric_count_as_zero(self):
        stats = {"genAlpha": None, "genYZ": "4", "genX": "n/a"}
        assert compute_derived_field("totalUnder40", stats) == 4
        assert compute_derived_field("totalOver40", stats) == 0

    def test_is_derived_field(self):
        assert set(DERIVED_FIELDS) == {
            "totalFans",
            "remoteFans",
            "allImages",
            "totalUnder40",
            "totalOver40",
        }
        assert is_derived_field("allImages")
        assert not is_derived_field("female")

    def test_unknown_derived_field(self):
        with pytest.raises(KeyError):
            compute_derived_field("female", {})


class TestEnsureDerivedMetrics:
    """Tests for ensure_derived_metrics."""

    def test_fills_missing(self, event_stats):
        enriched = ensure_derived_metrics(event_stats)
        assert enriched["allImages"] == 50
        assert enriched["remoteFans"] == 80
        assert enriched["totalFans"] == 280
        assert "totalUnder40" not in enriched

    def test_keeps_existing(self):
        enriched = ensure_derived_metrics({"allImages": 7, "stadium": 1, "indoor": 1})
        assert enriched["allImages"] == 7
        assert enriched["totalFans"] == 2

    def test_does_not_mutate(self, event_stats):
        before = dict(event_stats)
        ensure_derived_metrics(event_stats)
        assert event_stats == before


class TestSyntheticStats:
    """Tests for synthetic_stats."""

    def test_base_fields(self):
        stats = synthetic_stats()
        assert set(stats) == set(BASE_FIELDS)
        assert all(value == 1.0 for value in stats.values())

    def test_extra_fields(self):
        stats = synthetic_stats(["ticketRevenue", "totalFans"])
        assert stats["ticketRevenue"] == 1.0
        assert "totalFans" not in stats
