"""
Aggregation functions for Progress Charts.

PURPOSE: Turn a parsed API payload into chart-ready summaries.
AI CONTEXT: Pure data processing - no rendering, no I/O.

OPERATIONS:
1. group_by_day: PointEvents -> DaySeries (per local calendar day sums)
2. count_pass_fail: GradedItems -> PassFailCount (projects only)
3. compute_ratio: RatioPair -> RatioResult (ratio + status)
4. summarize_profile: payload -> ProfileStats (headline numbers)

PAYLOAD SHAPE (GraphQL response, optionally wrapped in {"data": ...}):
    {
        "user": [{"id": 1, "login": "alice", "createdAt": "..."}],
        "transactions": {
            "aggregate": {"sum": {"amount": 12345}},
            "nodes": [{"amount": 500, "createdAt": "2025-03-01T10:00:00Z"}]
        },
        "progress": [{"grade": 1, "object": {"type": "project"}}],
        "audits": {
            "up": {"aggregate": {"sum": {"amount": 150}}},
            "down": {"aggregate": {"sum": {"amount": 100}}}
        }
    }

FAILURE SEMANTICS:
Malformed records never raise - missing numbers count as 0 and events
without a usable timestamp are skipped. Only a clearly wrong container
(a number where a list is required) raises InvalidInputError.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from datetime import date, tzinfo
from typing import Any

from .config import Config
from .formatting import format_day_label
from .models import (
    DaySeries,
    DayTotal,
    GradedItem,
    InvalidInputError,
    PassFailCount,
    PointEvent,
    RatioPair,
    RatioResult,
    RatioStatus,
    coerce_number,
    parse_timestamp,
)

__all__ = [
    "ProfileStats",
    "group_by_day",
    "count_pass_fail",
    "compute_ratio",
    "ratio_status",
    "unwrap_payload",
    "extract_point_events",
    "extract_graded_items",
    "extract_ratio_pair",
    "extract_user",
    "parse_created_at",
    "summarize_profile",
]

logger = logging.getLogger(__name__)


def _require_sequence(value: Any, name: str) -> Sequence[Any]:
    """Reject anything that is not a list-like of records."""
    if isinstance(value, str | bytes | Mapping) or not isinstance(value, Sequence):
        raise InvalidInputError(f"{name} must be a sequence, got {type(value).__name__}")
    return value


def _as_point_event(record: Any) -> PointEvent | None:
    if isinstance(record, PointEvent):
        # Constructed directly, so the timestamp may still be a string or None
        stamp = parse_timestamp(record.timestamp)
        if stamp is None:
            return None
        return record if stamp is record.timestamp else replace(record, timestamp=stamp)
    if isinstance(record, Mapping):
        return PointEvent.from_dict(record)
    return None


def _clamped_amount(event: PointEvent) -> int:
    return max(0, int(coerce_number(event.amount)))


def _as_graded_item(record: Any) -> GradedItem | None:
    if isinstance(record, GradedItem):
        return record
    if isinstance(record, Mapping):
        return GradedItem.from_dict(record)
    return None


# =============================================================================
# Core aggregations
# =============================================================================


def group_by_day(
    events: Sequence[PointEvent | Mapping[str, Any]],
    *,
    tz: tzinfo | None = None,
    chronological: bool = False,
) -> DaySeries:
    """
    Sum event amounts per local calendar day.

    Each event's timestamp is converted to ``tz`` (the host's local zone
    when None) and labelled dd/mm/yyyy. Buckets keep the order in which
    their label first appears in the input unless ``chronological`` is
    set, in which case they are sorted by date.

    Business context: Feeds the daily progress line chart. Insertion
    order mirrors the API's ordering; chronological order guarantees the
    x-axis reads left-to-right in time even for unsorted input.

    Args:
        events: PointEvent objects or payload transaction mappings.
            Records without a valid timestamp are skipped; missing
            amounts count as 0; negative amounts count as 0.
        tz: Zone used to pick the calendar day of aware timestamps.
        chronological: Sort buckets by calendar date.

    Returns:
        DaySeries with one DayTotal per distinct day. Empty input gives
        an empty series.

    Raises:
        InvalidInputError: If events is not a sequence.

    Example:
        >>> from datetime import UTC
        >>> series = group_by_day([
        ...     {'amount': 10, 'createdAt': '2025-03-01T09:00:00Z'},
        ...     {'amount': 5, 'createdAt': '2025-03-01T18:00:00Z'},
        ...     {'amount': 3, 'createdAt': '2025-03-02T09:00:00Z'},
        ... ], tz=UTC)
        >>> [(d.date_label, d.total) for d in series]
        [('01/03/2025', 15), ('02/03/2025', 3)]
    """
    _require_sequence(events, "events")

    totals: dict[str, int] = {}
    dates: dict[str, date] = {}
    skipped = 0
    for record in events:
        event = _as_point_event(record)
        if event is None:
            skipped += 1
            continue
        stamp = event.timestamp
        if stamp.tzinfo is not None:
            stamp = stamp.astimezone(tz)
        label = format_day_label(stamp, tz)
        totals[label] = totals.get(label, 0) + _clamped_amount(event)
        dates.setdefault(label, stamp.date())

    if skipped:
        logger.debug("Skipped %d events without a usable timestamp", skipped)

    labels = list(totals)
    if chronological:
        labels.sort(key=dates.__getitem__)
    return DaySeries(tuple(DayTotal(label, totals[label]) for label in labels))


def count_pass_fail(items: Sequence[GradedItem | Mapping[str, Any]]) -> PassFailCount:
    """
    Count passed and failed projects.

    Only items whose kind is "project" are considered. A grade above 0
    is a pass, a grade of exactly 0 is a fail, anything else (negative)
    is excluded from both buckets. Missing grades count as 0.

    Args:
        items: GradedItem objects or payload progress mappings.

    Returns:
        PassFailCount; {0, 0} for empty or project-free input.

    Raises:
        InvalidInputError: If items is not a sequence.

    Example:
        >>> count_pass_fail([
        ...     {'kind': 'project', 'grade': 1},
        ...     {'kind': 'project', 'grade': 0},
        ...     {'kind': 'quiz', 'grade': 1},
        ... ])
        PassFailCount(passed=1, failed=1)
    """
    _require_sequence(items, "items")

    passed = failed = 0
    for record in items:
        item = _as_graded_item(record)
        if item is None or item.kind != Config.PROJECT_KIND:
            continue
        grade = coerce_number(item.grade)
        if grade > 0:
            passed += 1
        elif grade == 0:
            failed += 1
    return PassFailCount(passed=passed, failed=failed)


def ratio_status(ratio: float) -> RatioStatus:
    """
    Classify a ratio against the standing thresholds.

    Returns:
        BELOW under 1.0, GOOD from 1.0 up to 1.5, EXCELLENT from 1.5
        (infinity included).
    """
    if ratio >= Config.RATIO_EXCELLENT:
        return RatioStatus.EXCELLENT
    if ratio >= Config.RATIO_GOOD:
        return RatioStatus.GOOD
    return RatioStatus.BELOW


def compute_ratio(pair: RatioPair | Mapping[str, Any]) -> RatioResult:
    """
    Compute the given/received ratio and its status.

    Business context: The audit ratio shows whether a user reviews at
    least as much work as they get reviewed. A ratio under 1.0 puts the
    account below the required standing.

    Args:
        pair: RatioPair or a mapping accepted by RatioPair.from_dict.

    Returns:
        RatioResult with ratio = given / received when received > 0,
        math.inf when only given is non-zero, and 0.0 when both are 0.

    Raises:
        InvalidInputError: If pair is neither a RatioPair nor a mapping.

    Example:
        >>> compute_ratio(RatioPair(given=150, received=100)).status
        <RatioStatus.EXCELLENT: 'excellent'>
        >>> compute_ratio(RatioPair(given=50, received=0)).is_infinite
        True
    """
    if isinstance(pair, Mapping):
        pair = RatioPair.from_dict(pair)
    elif not isinstance(pair, RatioPair):
        raise InvalidInputError(f"pair must be a RatioPair or mapping, got {type(pair).__name__}")

    given = max(0, coerce_number(pair.given))
    received = max(0, coerce_number(pair.received))
    if received > 0:
        ratio = given / received
    elif given > 0:
        ratio = float("inf")
    else:
        ratio = 0.0
    return RatioResult(ratio=ratio, status=ratio_status(ratio))


# =============================================================================
# Payload extraction
# =============================================================================


def unwrap_payload(payload: Any) -> dict[str, Any]:
    """
    Return the data object of an API response.

    Accepts the raw GraphQL envelope ({"data": {...}}) or the data
    object itself. Anything that is not a mapping yields {}.
    """
    if not isinstance(payload, Mapping):
        return {}
    data = payload.get("data")
    if isinstance(data, Mapping):
        return dict(data)
    return dict(payload)


def extract_point_events(payload: Any) -> list[PointEvent]:
    """
    Extract transaction nodes as PointEvents.

    Args:
        payload: API response (wrapped or unwrapped).

    Returns:
        PointEvents in payload order. Nodes without a valid timestamp
        are dropped.
    """
    transactions = unwrap_payload(payload).get("transactions")
    nodes = transactions.get("nodes") if isinstance(transactions, Mapping) else None
    if not isinstance(nodes, list):
        return []
    events = [_as_point_event(node) for node in nodes]
    return [event for event in events if event is not None]


def extract_graded_items(payload: Any) -> list[GradedItem]:
    """Extract progress records as GradedItems."""
    progress = unwrap_payload(payload).get("progress")
    if not isinstance(progress, list):
        return []
    items = [_as_graded_item(record) for record in progress]
    return [item for item in items if item is not None]


def extract_ratio_pair(payload: Any) -> RatioPair:
    """Extract audit up/down totals as a RatioPair ({0, 0} when absent)."""
    audits = unwrap_payload(payload).get("audits")
    if not isinstance(audits, Mapping):
        return RatioPair(given=0, received=0)
    return RatioPair.from_dict(audits)


def extract_user(payload: Any) -> dict[str, Any]:
    """
    Extract the first user record.

    Returns:
        The user mapping, or {} when the payload has no user.
    """
    users = unwrap_payload(payload).get("user")
    if isinstance(users, list) and users and isinstance(users[0], Mapping):
        return dict(users[0])
    return {}


# =============================================================================
# Profile summary
# =============================================================================


@dataclass(frozen=True)
class ProfileStats:
    """Headline numbers shown above the charts."""

    total_amount: int
    passed: int
    failed: int

    @property
    def total_projects(self) -> int:
        return self.passed + self.failed

    @property
    def success_rate(self) -> float:
        return PassFailCount(self.passed, self.failed).success_rate


def summarize_profile(payload: Any) -> ProfileStats:
    """
    Compute the profile's headline statistics.

    The total amount comes from the transaction aggregate sum when the
    API provides it, otherwise from the sum of the transaction nodes.

    Args:
        payload: API response (wrapped or unwrapped).

    Returns:
        ProfileStats with total amount and pass/fail counts.

    Example:
        >>> stats = summarize_profile({'transactions': {'aggregate': {'sum': {'amount': 900}}}})
        >>> stats.total_amount, stats.total_projects
        (900, 0)
    """
    data = unwrap_payload(payload)
    transactions = data.get("transactions")
    aggregate_total = None
    if isinstance(transactions, Mapping):
        aggregate = transactions.get("aggregate")
        if isinstance(aggregate, Mapping) and isinstance(aggregate.get("sum"), Mapping):
            aggregate_total = aggregate["sum"].get("amount")

    if aggregate_total is not None:
        total = max(0, int(coerce_number(aggregate_total)))
    else:
        total = sum(_clamped_amount(event) for event in extract_point_events(data))

    counts = count_pass_fail(extract_graded_items(data))
    return ProfileStats(total_amount=total, passed=counts.passed, failed=counts.failed)


def parse_created_at(user: Mapping[str, Any]) -> str:
    """Return the user's account creation date as dd/mm/yyyy ('' if absent)."""
    created = parse_timestamp(user.get("createdAt"))
    return format_day_label(created) if created is not None else ""
