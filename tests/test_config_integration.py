#!/usr/bin/env python3
"""
Tests for config.yaml loading, selector configuration and environment settings
"""

import os

import pytest
from pydantic import ValidationError

from config import settings as config_settings
from config.environment import Settings, get_settings, reload_settings
from config.selector_config import SelectorConfig, load_selector_config
from config.settings import get_config, reload_config


class TestYamlConfig:
    """Test the config.yaml loader."""

    def test_sections_present(self):
        config = get_config()
        assert config["task_selector"]["task_cooldowns"]["newsletter_analysis"] == 3600
        assert config["task_selector"]["acceptance_thresholds"]["CONSERVATIVE"] == 0.6
        assert len(config["task_catalog"]) == 6

    def test_default_config_ships_with_package(self):
        package_dir = os.path.dirname(os.path.abspath(config_settings.__file__))
        assert config_settings.DEFAULT_CONFIG_PATH == os.path.join(package_dir, "config.yaml")
        assert os.path.isfile(config_settings.DEFAULT_CONFIG_PATH)

    def test_reload(self):
        assert reload_config()["task_selector"]["base_selection_interval"] == 180


class TestSelectorConfig:
    """Test SelectorConfig validation and lookups."""

    def test_values_from_yaml(self):
        config = load_selector_config()
        assert config.base_selection_interval == 180
        assert config.min_task_interval == 900
        assert config.max_decision_history == 100
        assert config.interval_multipliers.analytical == 1.5

    def test_thresholds(self):
        config = load_selector_config()
        assert config.threshold_for("CONSERVATIVE") == 0.6
        assert config.threshold_for("HIGH_REWARD_AGGRESSIVE") == 0.25
        assert config.threshold_for("MODERATE") == 0.4

    def test_cooldowns(self):
        config = load_selector_config()
        assert config.cooldown_for("learn_from_others") == 1200
        assert config.cooldown_for("custom_task") == 900

    def test_overrides(self):
        config = load_selector_config({"max_decision_history": 5, "min_task_interval": 60})
        assert config.max_decision_history == 5
        assert config.cooldown_for("custom_task") == 60
        assert config.cooldown_for("newsletter_analysis") == 3600

    def test_defaults_without_yaml(self):
        config = SelectorConfig()
        assert config.threshold_for("CALCULATED_AGGRESSIVE") == 0.4
        assert config.cooldown_for("learn_from_others") == 900

    def test_default_threshold_is_filled_in(self):
        config = SelectorConfig(acceptance_thresholds={"CONSERVATIVE": 0.7})
        assert config.threshold_for("MODERATE") == 0.4

    @pytest.mark.parametrize("overrides", [
        {"acceptance_thresholds": {"default": 1.5}},
        {"base_selection_interval": 0},
        {"max_decision_history": 0},
        {"task_cooldowns": {"learn_from_others": -1}},
        {"interval_multipliers": {"speed": 0}},
    ])
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(ValidationError):
            load_selector_config(overrides)


class TestSettings:
    """Test environment settings."""

    def test_test_environment(self):
        settings = get_settings()
        assert settings.log_level == "ERROR"
        assert settings.log_format == "console"
        assert settings.metrics_enabled is False

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("EXECUTOR_MAX_WORKERS", "3")
        assert reload_settings().executor_max_workers == 3

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="LOUD")

    def test_invalid_log_format(self):
        with pytest.raises(ValidationError):
            Settings(log_format="xml")
