"""Tests for engine settings loading."""

import logging
from pathlib import Path

import pytest
import yaml

from lanmafia.config import (
    DurationOverrides,
    EngineSettings,
    GameRules,
    PhaseDurations,
    RuleOverrides,
    load_settings,
)
from lanmafia.logging_config import setup_logging
from lanmafia.models import Phase


class TestLoadSettings:
    """YAML file plus LANMAFIA_* environment overrides."""

    def test_defaults(self) -> None:
        settings = load_settings(environ={})
        assert settings == EngineSettings()
        assert settings.players.min == 3
        assert settings.players.max == 20
        assert settings.rules.allow_self_heal

    def test_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "lanmafia.yaml"
        path.write_text(yaml.dump({
            "durations": {"night": 45, "voting": 20},
            "rules": {"reveal_role_on_death": False},
        }))

        settings = load_settings(path, environ={})
        assert settings.durations.night == 45
        assert settings.durations.discussion == 120
        assert not settings.rules.reveal_role_on_death

    def test_environment_overrides_file(self, tmp_path: Path) -> None:
        path = tmp_path / "lanmafia.yaml"
        path.write_text(yaml.dump({"players": {"max": 12}, "log_level": "INFO"}))

        settings = load_settings(path, environ={
            "LANMAFIA_MAX_PLAYERS": "10",
            "LANMAFIA_LOG_LEVEL": "debug",
            "LANMAFIA_TICK_INTERVAL": "0.5",
        })
        assert settings.players.max == 10
        assert settings.log_level == "DEBUG"
        assert settings.tick_interval == 0.5

    def test_invalid_values(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.dump({"durations": {"night": -5}}))
        with pytest.raises(ValueError, match="Invalid engine settings"):
            load_settings(path, environ={})

    def test_min_above_max(self) -> None:
        with pytest.raises(ValueError):
            load_settings(environ={"LANMAFIA_MIN_PLAYERS": "15", "LANMAFIA_MAX_PLAYERS": "10"})

    def test_non_mapping_file(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="mapping"):
            load_settings(path, environ={})

    def test_to_yaml_round_trip(self, tmp_path: Path) -> None:
        settings = EngineSettings(durations=PhaseDurations(night=40))
        path = tmp_path / "out.yaml"
        path.write_text(settings.to_yaml())
        assert load_settings(path, environ={}) == settings


class TestOverrides:
    """Host-supplied duration and rule changes."""

    def test_duration_overrides_keep_unset(self) -> None:
        durations = DurationOverrides(night=60).apply_to(PhaseDurations())
        assert durations.night == 60
        assert durations.voting == 60
        assert durations.for_phase(Phase.NIGHT) == 60
        assert durations.for_phase(Phase.LOBBY) is None

    def test_rule_overrides(self) -> None:
        rules = RuleOverrides(allow_self_heal=False).apply_to(GameRules())
        assert not rules.allow_self_heal
        assert rules.reveal_role_on_death


class TestLogging:
    """Root logger configuration."""

    def test_level_from_name(self) -> None:
        setup_logging("debug", rich_console=False)
        assert logging.getLogger().level == logging.DEBUG
        setup_logging(logging.WARNING)
        assert logging.getLogger().level == logging.WARNING

    def test_unknown_level(self) -> None:
        with pytest.raises(ValueError):
            setup_logging("chatty")

    def test_log_file(self, tmp_path: Path) -> None:
        path = tmp_path / "engine.log"
        setup_logging("INFO", rich_console=False, log_file=str(path))
        logging.getLogger("lanmafia.test").info("hello")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "hello" in path.read_text()
        setup_logging(logging.WARNING)
