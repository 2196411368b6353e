"""Tests for aggregation module."""

from __future__ import annotations

import math
from datetime import UTC, datetime, timedelta, timezone
from typing import Any

import pytest

from progress_charts.aggregation import (
    compute_ratio,
    count_pass_fail,
    extract_graded_items,
    extract_point_events,
    extract_ratio_pair,
    extract_user,
    group_by_day,
    parse_created_at,
    ratio_status,
    summarize_profile,
    unwrap_payload,
)
from progress_charts.models import (
    DayTotal,
    GradedItem,
    InvalidInputError,
    PassFailCount,
    PointEvent,
    RatioPair,
    RatioStatus,
)


def _nodes(payload: dict[str, Any]) -> list[dict[str, Any]]:
    return payload["data"]["transactions"]["nodes"]


class TestGroupByDay:
    """Tests for per-day aggregation of point events."""

    def test_insertion_order_by_default(self, sample_payload: dict[str, Any]) -> None:
        """Verifies buckets keep first-seen order and sum same-day events.

        Business context:
        The API lists transactions in its own order; the default chart
        mirrors it rather than re-sorting.

        Arrangement:
        Sample payload with two events on 01/03 and days listed as
        01/03, 03/03, 02/03.

        Action:
        group_by_day with tz=UTC.

        Assertion Strategy:
        Labels and totals match insertion order exactly.
        """
        series = group_by_day(_nodes(sample_payload), tz=UTC)

        assert list(series) == [
            DayTotal("01/03/2025", 750),
            DayTotal("03/03/2025", 1000),
            DayTotal("02/03/2025", 2000),
        ]

    def test_chronological_sorts_by_date(self, sample_payload: dict[str, Any]) -> None:
        """Verifies chronological=True orders buckets by calendar date."""
        series = group_by_day(_nodes(sample_payload), tz=UTC, chronological=True)

        assert series.labels == ["01/03/2025", "02/03/2025", "03/03/2025"]
        assert series.totals == [750, 2000, 1000]

    def test_chronological_across_month_boundary(self) -> None:
        """Verifies sorting uses dates, not the dd/mm/yyyy label text.

        Arrangement:
        02/04 appears before 31/03; as strings '02/04' < '31/03'.

        Assertion Strategy:
        31/03 comes first after chronological sorting.
        """
        events = [
            {"amount": 1, "createdAt": "2025-04-02T12:00:00Z"},
            {"amount": 2, "createdAt": "2025-03-31T12:00:00Z"},
        ]

        series = group_by_day(events, tz=UTC, chronological=True)

        assert series.labels == ["31/03/2025", "02/04/2025"]

    def test_groups_in_target_zone(self) -> None:
        """Verifies the calendar day depends on the supplied zone."""
        events = [
            {"amount": 10, "createdAt": "2025-03-01T23:30:00Z"},
            {"amount": 5, "createdAt": "2025-03-02T00:30:00Z"},
        ]

        assert len(group_by_day(events, tz=UTC)) == 2
        plus_two = group_by_day(events, tz=timezone(timedelta(hours=2)))
        assert list(plus_two) == [DayTotal("02/03/2025", 15)]

    def test_accepts_point_events(self) -> None:
        events = [
            PointEvent(datetime(2025, 3, 1, 9, tzinfo=UTC), 4),
            PointEvent(datetime(2025, 3, 1, 10, tzinfo=UTC), 6),
        ]
        assert group_by_day(events, tz=UTC).totals == [10]

    def test_point_event_with_string_timestamp(self) -> None:
        """Verifies a PointEvent built with an ISO string is parsed, not crashed on.

        Business context:
        Callers sometimes construct PointEvents straight from JSON without
        converting the timestamp first; the chart should still get the day.
        """
        events = [PointEvent(timestamp="2025-03-01T10:00:00Z", amount=5)]  # type: ignore[arg-type]

        assert list(group_by_day(events, tz=UTC)) == [DayTotal("01/03/2025", 5)]

    def test_point_event_without_usable_timestamp_is_skipped(self) -> None:
        events: list[Any] = [
            PointEvent(timestamp=None, amount=5),  # type: ignore[arg-type]
            PointEvent(timestamp="yesterday", amount=8),  # type: ignore[arg-type]
            PointEvent(datetime(2025, 3, 2, 9, tzinfo=UTC), 3),
        ]

        assert list(group_by_day(events, tz=UTC, chronological=True)) == [
            DayTotal("02/03/2025", 3)
        ]

    def test_empty_input(self) -> None:
        assert len(group_by_day([])) == 0

    def test_skips_events_without_timestamp(self) -> None:
        """Verifies malformed records are skipped and missing amounts count as 0.

        Arrangement:
        One valid event, one without timestamp, one without amount, one
        that is not a mapping.

        Assertion Strategy:
        Only the dated records contribute; total is unaffected by the
        amount-less record.
        """
        events: list[Any] = [
            {"amount": 7, "createdAt": "2025-03-01T12:00:00Z"},
            {"amount": 100},
            {"createdAt": "2025-03-01T13:00:00Z"},
            42,
        ]

        series = group_by_day(events, tz=UTC)

        assert list(series) == [DayTotal("01/03/2025", 7)]

    def test_negative_amounts_count_as_zero(self) -> None:
        events = [
            {"amount": -50, "createdAt": "2025-03-01T12:00:00Z"},
            {"amount": 5, "createdAt": "2025-03-01T13:00:00Z"},
        ]
        assert group_by_day(events, tz=UTC).totals == [5]

    @pytest.mark.parametrize("events", [None, 12, "events", {"amount": 1}])
    def test_rejects_non_sequence(self, events: Any) -> None:
        """Verifies a container of the wrong type raises InvalidInputError."""
        with pytest.raises(InvalidInputError):
            group_by_day(events)

    def test_invalid_input_is_type_error(self) -> None:
        """Verifies callers catching TypeError also catch InvalidInputError."""
        with pytest.raises(TypeError):
            group_by_day(3.5)  # type: ignore[arg-type]


class TestCountPassFail:
    """Tests for project pass/fail counting."""

    def test_sample_payload(self, sample_payload: dict[str, Any]) -> None:
        """Verifies only projects count: grades 1 and 1.2 pass, 0 fails.

        Business context:
        Exercises and quizzes also have grades but are not projects, so
        they must not move the project success rate.
        """
        counts = count_pass_fail(sample_payload["data"]["progress"])

        assert counts == PassFailCount(passed=2, failed=1)
        assert round(counts.success_rate, 1) == 66.7

    def test_missing_grade_is_a_fail(self) -> None:
        """Verifies a project with no grade counts as grade 0 (failed)."""
        assert count_pass_fail([{"kind": "project"}]) == PassFailCount(0, 1)

    def test_negative_grade_excluded(self) -> None:
        items = [GradedItem("project", -1), GradedItem("project", 0.5)]
        assert count_pass_fail(items) == PassFailCount(passed=1, failed=0)

    def test_no_projects(self) -> None:
        assert count_pass_fail([GradedItem("exercise", 1)]) == PassFailCount(0, 0)
        assert count_pass_fail([]) == PassFailCount(0, 0)

    def test_rejects_non_sequence(self) -> None:
        with pytest.raises(InvalidInputError):
            count_pass_fail(None)  # type: ignore[arg-type]


class TestComputeRatio:
    """Tests for ratio computation and status thresholds."""

    @pytest.mark.parametrize(
        ("given", "received", "ratio", "status"),
        [
            (50, 100, 0.5, RatioStatus.BELOW),
            (100, 100, 1.0, RatioStatus.GOOD),
            (149, 100, 1.49, RatioStatus.GOOD),
            (150, 100, 1.5, RatioStatus.EXCELLENT),
            (300, 100, 3.0, RatioStatus.EXCELLENT),
        ],
    )
    def test_thresholds(
        self, given: int, received: int, ratio: float, status: RatioStatus
    ) -> None:
        """Verifies status boundaries at exactly 1.0 and 1.5.

        Assertion Strategy:
        Boundaries are inclusive on the upper status (1.0 is GOOD,
        1.5 is EXCELLENT).
        """
        result = compute_ratio(RatioPair(given, received))

        assert result.ratio == pytest.approx(ratio)
        assert result.status is status

    def test_nothing_received_is_infinite(self) -> None:
        """Verifies given > 0 with received == 0 gives an infinite ratio.

        Business context:
        Someone who has only reviewed others is in excellent standing,
        not an error case.
        """
        result = compute_ratio(RatioPair(given=50, received=0))

        assert math.isinf(result.ratio)
        assert result.is_infinite
        assert result.status is RatioStatus.EXCELLENT

    def test_both_zero(self) -> None:
        result = compute_ratio(RatioPair(0, 0))
        assert result.ratio == 0.0
        assert result.status is RatioStatus.BELOW

    def test_accepts_mapping(self) -> None:
        assert compute_ratio({"given": 3, "received": 2}).ratio == 1.5

    def test_rejects_other_types(self) -> None:
        with pytest.raises(InvalidInputError):
            compute_ratio([150, 100])  # type: ignore[arg-type]

    def test_ratio_status_infinity(self) -> None:
        assert ratio_status(math.inf) is RatioStatus.EXCELLENT


class TestPayloadExtraction:
    """Tests for unwrapping and extracting payload sections."""

    def test_unwrap_envelope_and_bare(self, sample_payload: dict[str, Any]) -> None:
        """Verifies both {"data": ...} and bare data objects are accepted."""
        data = unwrap_payload(sample_payload)
        assert "transactions" in data
        assert unwrap_payload(data) == data

    def test_unwrap_non_mapping(self) -> None:
        assert unwrap_payload(None) == {}
        assert unwrap_payload([1, 2]) == {}

    def test_extract_sections(self, sample_payload: dict[str, Any]) -> None:
        """Verifies every section extractor on the sample payload.

        Assertion Strategy:
        Counts and values match the fixture's documented contents.
        """
        assert len(extract_point_events(sample_payload)) == 4
        assert len(extract_graded_items(sample_payload)) == 4
        assert extract_ratio_pair(sample_payload) == RatioPair(150000, 100000)
        assert extract_user(sample_payload)["login"] == "alice"

    def test_missing_sections(self) -> None:
        """Verifies an empty payload yields empty extractions, never errors."""
        assert extract_point_events({}) == []
        assert extract_graded_items({}) == []
        assert extract_ratio_pair({}) == RatioPair(0, 0)
        assert extract_user({}) == {}

    def test_malformed_sections(self) -> None:
        payload = {"transactions": {"nodes": "oops"}, "progress": 5, "user": []}
        assert extract_point_events(payload) == []
        assert extract_graded_items(payload) == []
        assert extract_user(payload) == {}


class TestSummarizeProfile:
    """Tests for headline statistics."""

    def test_uses_aggregate_total(self, sample_payload: dict[str, Any]) -> None:
        stats = summarize_profile(sample_payload)

        assert stats.total_amount == 3750
        assert stats.passed == 2
        assert stats.failed == 1
        assert stats.total_projects == 3

    def test_falls_back_to_node_sum(self) -> None:
        """Verifies the total is summed from nodes when no aggregate exists."""
        payload = {
            "transactions": {
                "nodes": [
                    {"amount": 100, "createdAt": "2025-03-01T12:00:00Z"},
                    {"amount": 23, "createdAt": "2025-03-02T12:00:00Z"},
                ]
            }
        }
        assert summarize_profile(payload).total_amount == 123

    def test_node_sum_ignores_negative_amounts(self) -> None:
        """Verifies the header total matches the chart, which drops negatives."""
        payload = {
            "transactions": {
                "nodes": [
                    {"amount": 100, "createdAt": "2025-03-01T12:00:00Z"},
                    {"amount": -40, "createdAt": "2025-03-01T13:00:00Z"},
                ]
            }
        }

        stats = summarize_profile(payload)

        assert stats.total_amount == 100
        assert stats.total_amount == sum(group_by_day(extract_point_events(payload)).totals)

    def test_negative_aggregate_total_clamped(self) -> None:
        payload = {"transactions": {"aggregate": {"sum": {"amount": -5}}}}
        assert summarize_profile(payload).total_amount == 0

    def test_empty_payload(self) -> None:
        stats = summarize_profile({})
        assert stats.total_amount == 0
        assert stats.success_rate == 0.0

    def test_parse_created_at(self) -> None:
        assert parse_created_at({"createdAt": "2023-09-01T12:00:00Z"}) == "01/09/2023"
        assert parse_created_at({}) == ""
