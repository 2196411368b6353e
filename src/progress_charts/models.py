"""
Data models for Progress Charts.

PURPOSE: Type-safe dataclasses for raw records, aggregates and chart I/O.
AI CONTEXT: These models define the contract between aggregation and rendering.

MODEL HIERARCHY:
- Raw records: PointEvent, GradedItem, RatioPair (parsed from the payload)
- Aggregates: DayTotal/DaySeries, PassFailCount, RatioResult
- Chart I/O: ChartDimensions, ChartSpec -> RenderedChart (+ TooltipRecord)

PARSING:
Raw records have from_dict() accepting both the plain shape and the API
shape. Missing or non-numeric fields become 0; they never raise.

USAGE:
    event = PointEvent.from_dict({"amount": 500, "createdAt": "2025-03-01T10:00:00Z"})
    spec = ChartSpec(ChartKind.LINE, series, mount_id="progress-chart")
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

__all__ = [
    "InvalidInputError",
    "PointEvent",
    "DayTotal",
    "DaySeries",
    "GradedItem",
    "PassFailCount",
    "RatioPair",
    "RatioStatus",
    "RatioResult",
    "ChartKind",
    "Margins",
    "ChartDimensions",
    "ChartSpec",
    "Point",
    "TooltipRecord",
    "RenderedChart",
    "coerce_number",
    "parse_timestamp",
]


class InvalidInputError(TypeError):
    """Raised when input has an unrecoverable shape (not a sequence, a negative count)."""


def coerce_number(value: Any) -> float | int:
    """
    Coerce a payload value to a finite number, defaulting to 0.

    Booleans, strings, None, NaN and infinities are all treated as
    malformed and become 0. Integers stay integers.

    Args:
        value: Raw value from a parsed JSON payload.

    Returns:
        The value itself when it is a finite int/float, else 0.

    Example:
        >>> coerce_number(12)
        12
        >>> coerce_number(None)
        0
        >>> coerce_number("12")
        0
    """
    if isinstance(value, bool) or not isinstance(value, int | float):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return value


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse an ISO 8601 timestamp, returning None when invalid.

    Handles the 'Z' suffix the API uses for UTC. Datetime objects are
    returned unchanged.

    Args:
        value: ISO 8601 string or datetime.

    Returns:
        Parsed datetime (aware if the string carried an offset) or None.
    """
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _require_non_negative(record: Any, *fields: str) -> None:
    """Raise InvalidInputError when a count or total field is below zero."""
    for name in fields:
        if getattr(record, name) < 0:
            raise InvalidInputError(
                f"{type(record).__name__}.{name} must be non-negative, got {getattr(record, name)}"
            )


def _nested_amount(node: Any) -> float | int:
    """Read node.aggregate.sum.amount from an API aggregate, defaulting to 0."""
    for key in ("aggregate", "sum", "amount"):
        if not isinstance(node, Mapping):
            return 0
        node = node.get(key)
    return coerce_number(node)


# =============================================================================
# Raw records
# =============================================================================


@dataclass(frozen=True)
class PointEvent:
    """An atomic quantity earned at a point in time (e.g. an XP grant)."""

    timestamp: datetime
    amount: int

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PointEvent | None:
        """
        Create a PointEvent from a payload transaction node.

        Accepts either 'createdAt' (API shape) or 'timestamp' for the
        instant. A missing amount becomes 0; a missing or unparseable
        timestamp makes the record unusable for day grouping.

        Args:
            data: Mapping like {'amount': 500, 'createdAt': '2025-03-01T10:00:00Z'}.

        Returns:
            PointEvent, or None when no valid timestamp is present.

        Example:
            >>> ev = PointEvent.from_dict({'amount': 5, 'createdAt': '2025-03-01T10:00:00Z'})
            >>> ev.amount
            5
            >>> PointEvent.from_dict({'amount': 5}) is None
            True
        """
        timestamp = parse_timestamp(data.get("createdAt", data.get("timestamp")))
        if timestamp is None:
            return None
        return cls(timestamp=timestamp, amount=int(coerce_number(data.get("amount"))))


@dataclass(frozen=True)
class GradedItem:
    """A scored submission with a kind discriminator."""

    kind: str
    grade: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GradedItem:
        """
        Create a GradedItem from a payload progress record.

        The API nests the kind under object.type; a flat 'kind' key is
        also accepted. A missing grade becomes 0.

        Args:
            data: Mapping like {'grade': 1, 'object': {'type': 'project'}}.

        Returns:
            GradedItem with kind '' when no kind is present.
        """
        kind = data.get("kind")
        if kind is None:
            obj = data.get("object")
            kind = obj.get("type") if isinstance(obj, Mapping) else None
        return cls(
            kind=kind if isinstance(kind, str) else "",
            grade=coerce_number(data.get("grade")),
        )


@dataclass(frozen=True)
class RatioPair:
    """Given/received totals (review audits done vs received)."""

    given: int
    received: int

    def __post_init__(self) -> None:
        _require_non_negative(self, "given", "received")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RatioPair:
        """
        Create a RatioPair from either the flat or the API aggregate shape.

        Args:
            data: {'given': n, 'received': m} or
                {'up': {'aggregate': {'sum': {'amount': n}}}, 'down': {...}}.

        Returns:
            RatioPair with negative or malformed totals clamped to 0.

        Example:
            >>> RatioPair.from_dict({'up': {'aggregate': {'sum': {'amount': 150}}}})
            RatioPair(given=150, received=0)
        """
        if "given" in data or "received" in data:
            given = coerce_number(data.get("given"))
            received = coerce_number(data.get("received"))
        else:
            given = _nested_amount(data.get("up"))
            received = _nested_amount(data.get("down"))
        return cls(given=max(0, int(given)), received=max(0, int(received)))

    @property
    def total(self) -> int:
        return self.given + self.received


# =============================================================================
# Aggregates
# =============================================================================


@dataclass(frozen=True)
class DayTotal:
    """Sum of amounts for one calendar day."""

    date_label: str
    total: int

    def __post_init__(self) -> None:
        _require_non_negative(self, "total")


@dataclass(frozen=True)
class DaySeries:
    """
    Ordered per-day totals used by the line chart.

    Order is whatever the aggregator produced (first-seen by default).
    """

    days: tuple[DayTotal, ...] = ()

    def __len__(self) -> int:
        return len(self.days)

    def __iter__(self) -> Iterator[DayTotal]:
        return iter(self.days)

    def __getitem__(self, index: int) -> DayTotal:
        return self.days[index]

    @property
    def labels(self) -> list[str]:
        return [day.date_label for day in self.days]

    @property
    def totals(self) -> list[int]:
        return [day.total for day in self.days]

    @property
    def max_total(self) -> int:
        """Largest daily total, 0 for an empty series."""
        return max(self.totals, default=0)


@dataclass(frozen=True)
class PassFailCount:
    """Pass/fail tally of graded projects."""

    passed: int = 0
    failed: int = 0

    def __post_init__(self) -> None:
        _require_non_negative(self, "passed", "failed")

    @property
    def total(self) -> int:
        return self.passed + self.failed

    @property
    def success_rate(self) -> float:
        """
        Percentage of passed items, 0.0 when nothing was graded.

        Returns:
            Unrounded percentage in [0, 100].
        """
        if self.total == 0:
            return 0.0
        return self.passed / self.total * 100


class RatioStatus(Enum):
    """Standing derived from a given/received ratio."""

    BELOW = "below"
    GOOD = "good"
    EXCELLENT = "excellent"

    @property
    def caption(self) -> str:
        return _STATUS_CAPTIONS[self]


_STATUS_CAPTIONS: dict[RatioStatus, str] = {
    RatioStatus.BELOW: "Below Required",
    RatioStatus.GOOD: "Good Standing",
    RatioStatus.EXCELLENT: "Excellent!",
}


@dataclass(frozen=True)
class RatioResult:
    """Computed ratio and its status. ratio is math.inf for the infinite case."""

    ratio: float
    status: RatioStatus

    @property
    def is_infinite(self) -> bool:
        return math.isinf(self.ratio)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON; infinity is emitted as the string 'infinite'."""
        return {
            "ratio": "infinite" if self.is_infinite else self.ratio,
            "status": self.status.value,
        }


# =============================================================================
# Chart I/O
# =============================================================================


class ChartKind(Enum):
    """The three supported chart kinds."""

    LINE = "line"
    BAR = "bar"
    DONUT = "donut"


@dataclass(frozen=True)
class Margins:
    """Space reserved around the plot area, in pixels."""

    top: float
    right: float
    bottom: float
    left: float


@dataclass(frozen=True)
class ChartDimensions:
    """Canvas size and margins. The plot area is what remains inside."""

    width: float
    height: float
    margins: Margins

    @property
    def plot_width(self) -> float:
        return self.width - self.margins.left - self.margins.right

    @property
    def plot_height(self) -> float:
        return self.height - self.margins.top - self.margins.bottom


@dataclass(frozen=True)
class ChartSpec:
    """
    Single input to the renderer.

    ATTRIBUTES:
    - kind: Which chart to draw
    - data: DaySeries (LINE), PassFailCount (BAR) or RatioPair (DONUT)
    - mount_id: Id of the mount point the chart is written into
    - dimensions: Explicit geometry; None uses the default for the kind
    - theme: Theme name (see themes.py)
    - hover_endpoint: When set, line markers carry htmx hover hooks
      targeting f"{hover_endpoint}/{marker_id}"
    """

    kind: ChartKind
    data: DaySeries | PassFailCount | RatioPair
    mount_id: str
    dimensions: ChartDimensions | None = None
    theme: str = "dark"
    hover_endpoint: str | None = None


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class TooltipRecord:
    """Tooltip content and anchor for one chart marker."""

    element_id: str
    anchor: Point
    lines: tuple[str, ...]


@dataclass(frozen=True)
class RenderedChart:
    """
    Immutable output of one render.

    The markup is a self-contained SVG document (or placeholder/error
    markup). Tooltip records let the TooltipController position its box
    without re-running the geometry.
    """

    spec: ChartSpec | None
    markup: str
    tooltips: tuple[TooltipRecord, ...] = field(default_factory=tuple)
    placeholder: bool = False
    mount: str = ""

    @property
    def mount_id(self) -> str:
        """Mount point id; taken from the spec when one produced the chart."""
        return self.spec.mount_id if self.spec is not None else self.mount

    @property
    def kind(self) -> ChartKind | None:
        return self.spec.kind if self.spec is not None else None
