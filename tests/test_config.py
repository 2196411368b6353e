"""Tests for config module."""

from __future__ import annotations

import pytest

from progress_charts.config import Config


class TestConfigConstants:
    """Tests for chart and tooltip constants."""

    def test_geometry_constants(self) -> None:
        """Verifies the constants the chart geometry depends on.

        Business context:
        Gridline count, label density and the donut hole proportion
        define how every chart looks; an accidental edit shows up here.
        """
        assert Config.GRIDLINE_INTERVALS == 5
        assert Config.TARGET_X_LABELS == 10
        assert Config.DONUT_HOLE_RATIO == pytest.approx(80 / 120)

    def test_ratio_thresholds(self) -> None:
        assert Config.RATIO_GOOD == 1.0
        assert Config.RATIO_EXCELLENT == 1.5
        assert Config.RATIO_GOOD < Config.RATIO_EXCELLENT

    def test_marker_emphasis_is_larger(self) -> None:
        assert Config.EMPHASIS_RADIUS > Config.MARKER_RADIUS
        assert Config.EMPHASIS_STROKE_WIDTH > Config.MARKER_STROKE_WIDTH

    def test_messages_cover_every_kind(self) -> None:
        kinds = {"line", "bar", "donut"}
        assert set(Config.CHART_TITLES) == kinds
        assert set(Config.PLACEHOLDER_MESSAGES) == kinds

    def test_frozen_instance(self) -> None:
        from dataclasses import FrozenInstanceError

        config = Config()
        with pytest.raises(FrozenInstanceError):
            config.GRIDLINE_INTERVALS = 3  # type: ignore[misc]


class TestConfigEnvironmentSettings:
    """Tests for environment-driven settings and test overrides."""

    def test_payload_path_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PROGRESS_CHARTS_PAYLOAD", raising=False)
        assert Config.get_payload_path() == "profile.json"

    def test_payload_path_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Verifies PROGRESS_CHARTS_PAYLOAD selects the snapshot file.

        Arrangement:
        Set the environment variable via monkeypatch.

        Assertion Strategy:
        get_payload_path returns the variable's value.
        """
        monkeypatch.setenv("PROGRESS_CHARTS_PAYLOAD", "/srv/alice.json")
        assert Config.get_payload_path() == "/srv/alice.json"

    def test_theme_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROGRESS_CHARTS_THEME", "light")
        assert Config.get_theme_name() == "light"

    def test_theme_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PROGRESS_CHARTS_THEME", raising=False)
        assert Config.get_theme_name() == "dark"

    @pytest.mark.parametrize(("value", "expected"), [("true", True), ("TRUE", True), ("1", False), ("", False)])
    def test_chronological_from_env(
        self, monkeypatch: pytest.MonkeyPatch, value: str, expected: bool
    ) -> None:
        """Verifies only a case-insensitive 'true' enables chronological order."""
        monkeypatch.setenv("PROGRESS_CHARTS_CHRONOLOGICAL", value)
        assert Config.is_chronological() is expected

    def test_overrides_win_over_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Verifies test overrides take priority over environment variables."""
        monkeypatch.setenv("PROGRESS_CHARTS_PAYLOAD", "/env.json")
        monkeypatch.setenv("PROGRESS_CHARTS_CHRONOLOGICAL", "true")

        Config.set_test_overrides(payload_path="/override.json", chronological=False)

        assert Config.get_payload_path() == "/override.json"
        assert Config.is_chronological() is False

    def test_reset_test_overrides_clears_all(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PROGRESS_CHARTS_THEME", raising=False)
        Config.set_test_overrides(payload_path="/x.json", theme="light", chronological=True)

        Config.reset_test_overrides()

        assert Config.get_theme_name() == "dark"
        assert Config._payload_path_override is None
        assert Config._chronological_override is None
