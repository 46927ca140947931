"""Tests for config.py — Settings defaults, environment overrides, validation, warnings."""

from __future__ import annotations

from deliberation_shape.config import Settings, get_settings


class TestConfigDefaults:
    def test_shadow_defaults(self, monkeypatch):
        for name in (
            "SHADOW_ENABLED",
            "SHADOW_TOP_N",
            "SHADOW_MATCH_THRESHOLD",
            "SHADOW_CONFIDENCE_FLOOR",
        ):
            monkeypatch.delenv(name, raising=False)
        s = Settings()
        assert s.shadow_enabled is True
        assert s.shadow_top_n == 5
        assert s.shadow_match_threshold == 0.4
        assert s.shadow_confidence_floor == 0.4

    def test_event_log_defaults(self, monkeypatch):
        monkeypatch.delenv("RUN_LOG_DIR", raising=False)
        monkeypatch.delenv("EVENT_LOG_ENABLED", raising=False)
        s = Settings()
        assert s.run_log_dir == "runs/"
        assert s.event_log_enabled is True


class TestEnvironmentOverrides:
    def test_shadow_disabled_from_env(self, monkeypatch):
        monkeypatch.setenv("SHADOW_ENABLED", "false")
        assert get_settings().shadow_enabled is False

    def test_numeric_overrides(self, monkeypatch):
        monkeypatch.setenv("SHADOW_TOP_N", "12")
        monkeypatch.setenv("SHADOW_MATCH_THRESHOLD", "0.55")
        s = get_settings()
        assert s.shadow_top_n == 12
        assert s.shadow_match_threshold == 0.55

    def test_explicit_value_wins(self, monkeypatch):
        monkeypatch.setenv("SHADOW_TOP_N", "12")
        assert Settings(shadow_top_n=3).shadow_top_n == 3


class TestValidation:
    def test_valid_by_default(self):
        s = Settings(
            shadow_top_n=5,
            shadow_match_threshold=0.4,
            shadow_confidence_floor=0.4,
            run_log_dir="runs/",
        )
        assert s.validate() == []

    def test_top_n_must_be_positive(self):
        errors = Settings(shadow_top_n=0).validate()
        assert any("SHADOW_TOP_N" in e for e in errors)

    def test_match_threshold_range(self):
        assert any("SHADOW_MATCH_THRESHOLD" in e for e in Settings(shadow_match_threshold=0.0).validate())
        assert any("SHADOW_MATCH_THRESHOLD" in e for e in Settings(shadow_match_threshold=1.5).validate())

    def test_confidence_floor_range(self):
        errors = Settings(shadow_confidence_floor=1.0).validate()
        assert any("SHADOW_CONFIDENCE_FLOOR" in e for e in errors)

    def test_log_dir_required_when_logging(self):
        errors = Settings(event_log_enabled=True, run_log_dir="").validate()
        assert errors == ["RUN_LOG_DIR is required when EVENT_LOG_ENABLED is true"]

    def test_log_dir_optional_when_not_logging(self):
        s = Settings(
            event_log_enabled=False,
            run_log_dir="",
            shadow_top_n=5,
            shadow_match_threshold=0.4,
            shadow_confidence_floor=0.4,
        )
        assert s.validate() == []


class TestConfigWarnings:
    def test_no_warnings_at_defaults(self):
        s = Settings(shadow_match_threshold=0.4, shadow_confidence_floor=0.4)
        assert s.warnings() == []

    def test_aggressive_confidence_floor(self):
        warns = Settings(shadow_match_threshold=0.4, shadow_confidence_floor=0.85).warnings()
        assert len(warns) == 1
        assert "aggressive" in warns[0]

    def test_permissive_match_threshold(self):
        warns = Settings(shadow_match_threshold=0.1, shadow_confidence_floor=0.4).warnings()
        assert len(warns) == 1
        assert "SHADOW_MATCH_THRESHOLD=0.1" in warns[0]
