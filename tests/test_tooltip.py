"""Tests for tooltip module."""

from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from progress_charts.config import Config
from progress_charts.models import ChartKind, ChartSpec, DaySeries, DayTotal, RenderedChart
from progress_charts.renderer import render_chart, render_error_state
from progress_charts.tooltip import (
    TooltipController,
    TooltipState,
    measure_text,
    tooltip_slot_id,
)

MOUNT = "progress-chart"


@pytest.fixture
def rendered() -> RenderedChart:
    """Three-day line chart with known anchors."""
    series = DaySeries(
        (
            DayTotal("01/03/2025", 500),
            DayTotal("02/03/2025", 1500),
            DayTotal("03/03/2025", 123_456_789),
        )
    )
    return render_chart(ChartSpec(ChartKind.LINE, series, MOUNT))


@pytest.fixture
def controller(rendered: RenderedChart) -> TooltipController:
    ctrl = TooltipController()
    ctrl.attach(rendered)
    return ctrl


def _marker(i: int) -> str:
    return f"{MOUNT}-marker-{i}"


class TestMeasureText:
    """Tests for text width estimation."""

    def test_empty(self) -> None:
        assert measure_text("", 14) == 0.0

    def test_grows_with_length_and_size(self) -> None:
        """Verifies width is monotonic in text length and font size."""
        assert measure_text("1.50 kB", 14) > measure_text("150 B", 14)
        assert measure_text("1.50 kB", 14) > measure_text("1.50 kB", 12)

    def test_bold_is_wider(self) -> None:
        assert measure_text("01/03/2025", 12, bold=True) > measure_text("01/03/2025", 12)


class TestTooltipController:
    """Tests for tooltip state transitions."""

    def test_initially_hidden(self, controller: TooltipController) -> None:
        assert controller.state == TooltipState()
        assert controller.mount_id == MOUNT
        assert _marker(0) in controller

    def test_enter_sizes_and_centres_box(
        self, controller: TooltipController, rendered: RenderedChart
    ) -> None:
        """Verifies box size follows its text and sits centred above the marker.

        Business context:
        The box must not cover the hovered point and must fit both the
        date and the amount.

        Arrangement:
        Marker 1 of a three-day chart; lines '02/03/2025' and '1.50 kB'.

        Action:
        enter(marker 1).

        Assertion Strategy:
        Width = widest bold line + 2 * padding, height = 2 lines +
        padding, horizontally centred, bottom edge OFFSET above anchor.
        """
        record = rendered.tooltips[1]

        state = controller.enter(_marker(1))

        widest = max(
            measure_text("02/03/2025", 12, bold=True),
            measure_text("1.50 kB", 14, bold=True),
        )
        assert state.visible
        assert state.marker_id == _marker(1)
        assert state.lines == ("02/03/2025", "1.50 kB")
        assert state.width == pytest.approx(widest + 2 * Config.TOOLTIP_PADDING_X)
        assert state.height == pytest.approx(2 * Config.TOOLTIP_LINE_HEIGHT + 2 * Config.TOOLTIP_PADDING_Y)
        assert state.x + state.width / 2 == pytest.approx(record.anchor.x)
        assert state.y + state.height == pytest.approx(record.anchor.y - Config.TOOLTIP_OFFSET)

    def test_wider_text_wider_box(self, controller: TooltipController) -> None:
        small = controller.enter(_marker(0)).width
        large = controller.enter(_marker(2)).width
        assert large > small

    def test_marker_emphasis(self, controller: TooltipController) -> None:
        """Verifies only the active marker is emphasised (r 6, stroke 3)."""
        controller.enter(_marker(0))

        active = controller.marker_state(_marker(0))
        idle = controller.marker_state(_marker(1))

        assert active is not None and active.emphasised
        assert (active.radius, active.stroke_width) == (6, 3)
        assert idle is not None and not idle.emphasised
        assert (idle.radius, idle.stroke_width) == (4, 2)

    def test_leave_hides_and_reverts(self, controller: TooltipController) -> None:
        controller.enter(_marker(0))

        state = controller.leave(_marker(0))

        assert not state.visible
        marker = controller.marker_state(_marker(0))
        assert marker is not None and not marker.emphasised

    def test_last_enter_wins(self, controller: TooltipController) -> None:
        """Verifies rapid enters without leave leave only the last marker active.

        Arrangement:
        Enter marker 0 then marker 1 with no leave in between.

        Assertion Strategy:
        Tooltip belongs to marker 1; marker 0 is reverted.
        """
        controller.enter(_marker(0))
        controller.enter(_marker(1))

        assert controller.state.marker_id == _marker(1)
        first = controller.marker_state(_marker(0))
        assert first is not None and not first.emphasised

    def test_late_leave_keeps_newer_tooltip(self, controller: TooltipController) -> None:
        """Verifies a stale leave for the previous marker does not hide the current one."""
        controller.enter(_marker(0))
        controller.enter(_marker(1))

        state = controller.leave(_marker(0))

        assert state.visible
        assert state.marker_id == _marker(1)

    def test_unknown_marker_ignored(self, controller: TooltipController) -> None:
        controller.enter(_marker(2))
        before = controller.state

        assert controller.enter("nope") == before
        assert controller.leave("nope") == before
        assert controller.marker_state("nope") is None

    def test_attach_resets_state(
        self, controller: TooltipController, rendered: RenderedChart
    ) -> None:
        """Verifies re-attaching (chart re-render) hides the tooltip."""
        controller.enter(_marker(0))

        controller.attach(rendered)

        assert not controller.state.visible

    def test_attach_chart_without_markers(self, controller: TooltipController) -> None:
        controller.attach(render_error_state("audit-chart"))

        assert controller.mount_id == "audit-chart"
        assert _marker(0) not in controller


class TestTooltipRender:
    """Tests for the tooltip slot fragment."""

    def test_hidden_fragment(self, controller: TooltipController) -> None:
        slot = ET.fromstring(controller.render())

        assert slot.get("id") == tooltip_slot_id(MOUNT)
        assert slot.get("display") == "none"
        assert len(slot) == 0

    def test_visible_fragment(self, controller: TooltipController) -> None:
        """Verifies the visible slot holds emphasis circle, box and text lines.

        Assertion Strategy:
        Parse the fragment; check child order, box geometry against the
        state and the text content.
        """
        state = controller.enter(_marker(1))

        slot = ET.fromstring(controller.render())

        assert slot.get("display") is None
        tags = [child.tag for child in slot]
        assert tags == ["circle", "rect", "text", "text"]
        circle, rect, title, value = list(slot)
        assert circle.get("id") == f"{_marker(1)}-emphasis"
        assert circle.get("r") == "6"
        assert float(rect.get("width", "0")) == pytest.approx(state.width, abs=0.01)
        assert title.text == "02/03/2025"
        assert value.text == "1.50 kB"

    def test_fragment_replaces_chart_slot(
        self, controller: TooltipController, rendered: RenderedChart
    ) -> None:
        """Verifies the fragment id matches the slot embedded in the chart."""
        assert f'id="{tooltip_slot_id(MOUNT)}"' in rendered.markup
        assert f'id="{tooltip_slot_id(MOUNT)}"' in controller.render()

    def test_light_theme_from_spec(self, rendered: RenderedChart) -> None:
        light = render_chart(
            ChartSpec(ChartKind.LINE, rendered.spec.data, MOUNT, theme="light")  # type: ignore[union-attr]
        )
        ctrl = TooltipController()
        ctrl.attach(light)
        ctrl.enter(_marker(0))

        assert "#f1f5f9" in ctrl.render()
