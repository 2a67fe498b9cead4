"""Statistics record helpers.

Derived fields are computed from the current base values every time they
are read and are never stored, so they cannot drift out of sync.
"""

from collections.abc import Callable, Mapping
from typing import Any

from chartcalc.formula.results import coerce_number

StatsRecord = Mapping[str, Any]

# Base metrics of an event statistics record
BASE_FIELDS: tuple[str, ...] = (
    "remoteImages",
    "hostessImages",
    "selfies",
    "indoor",
    "outdoor",
    "stadium",
    "female",
    "male",
    "genAlpha",
    "genYZ",
    "genX",
    "boomer",
    "merched",
    "jersey",
    "scarf",
    "flags",
    "baseballCap",
    "other",
    "approvedImages",
    "rejectedImages",
    "eventAttendees",
    "eventTicketPurchases",
    "eventResultHome",
    "eventResultVisitor",
)

# Realistic record used for trying formulas out
SAMPLE_STATS: dict[str, float] = {
    "remoteImages": 10,
    "hostessImages": 25,
    "selfies": 15,
    "indoor": 50,
    "outdoor": 30,
    "stadium": 200,
    "female": 120,
    "male": 160,
    "genAlpha": 20,
    "genYZ": 100,
    "genX": 80,
    "boomer": 80,
    "merched": 40,
    "jersey": 15,
    "scarf": 8,
    "flags": 12,
    "baseballCap": 5,
    "other": 3,
    "approvedImages": 45,
    "rejectedImages": 5,
    "eventAttendees": 1000,
    "eventTicketPurchases": 850,
    "eventResultHome": 2,
    "eventResultVisitor": 1,
    "jerseyPrice": 85,
    "scarfPrice": 25,
    "flagsPrice": 15,
    "capPrice": 20,
    "otherPrice": 10,
}


def _value(stats: StatsRecord, name: str) -> float:
    """Numeric value of a base field; missing or non-numeric counts as 0."""
    return coerce_number(stats.get(name)) or 0.0


def remote_fans(stats: StatsRecord) -> float:
    """Stored remoteFans if present, otherwise indoor + outdoor."""
    stored = stats.get("remoteFans")
    if stored is not None:
        return coerce_number(stored) or 0.0
    return _value(stats, "indoor") + _value(stats, "outdoor")


def total_fans(stats: StatsRecord) -> float:
    return remote_fans(stats) + _value(stats, "stadium")


def all_images(stats: StatsRecord) -> float:
    return _value(stats, "remoteImages") + _value(stats, "hostessImages") + _value(stats, "selfies")


def total_under_40(stats: StatsRecord) -> float:
    return _value(stats, "genAlpha") + _value(stats, "genYZ")


def total_over_40(stats: StatsRecord) -> float:
    return _value(stats, "genX") + _value(stats, "boomer")


DERIVED_FIELDS: dict[str, Callable[[StatsRecord], float]] = {
    "totalFans": total_fans,
    "remoteFans": remote_fans,
    "allImages": all_images,
    "totalUnder40": total_under_40,
    "totalOver40": total_over_40,
}


def is_derived_field(name: str) -> bool:
    return name in DERIVED_FIELDS


def compute_derived_field(name: str, stats: StatsRecord) -> float:
    """
    Compute a derived field from the record.

    Raises:
        KeyError: If name is not a derived field
    """
    return DERIVED_FIELDS[name](stats)


def ensure_derived_metrics(stats: StatsRecord) -> dict[str, Any]:
    """
    Return a copy of the record with missing derived totals filled in.

    Only allImages, remoteFans and totalFans are materialised, and only when
    absent; formulas do not need this since they compute derived fields on
    read, but consumers that read the record directly do.
    """
    enriched = dict(stats)
    for name in ("allImages", "remoteFans", "totalFans"):
        if enriched.get(name) is None:
            enriched[name] = DERIVED_FIELDS[name](enriched)
    return enriched


def synthetic_stats(extra_fields: list[str] | None = None) -> dict[str, float]:
    """Record with every known base field set to 1, used for trial evaluation."""
    stats = {name: 1.0 for name in BASE_FIELDS}
    for name in extra_fields or ():
        if name not in DERIVED_FIELDS:
            stats[name] = 1.0
    return stats
