#!/usr/bin/env python3
"""
Validated view of the ``task_selector`` section of config.yaml.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from config.settings import get_config

logger = logging.getLogger(__name__)


class IntervalMultipliers(BaseModel):
    """Selection interval multipliers derived from personality."""
    speed: float = 0.5
    analytical: float = 1.5
    conservative: float = 1.3

    @field_validator("speed", "analytical", "conservative")
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("Interval multipliers must be positive")
        return v


class SelectorConfig(BaseModel):
    """Engine configuration surface. All durations are in seconds."""
    enabled: bool = True
    base_selection_interval: float = 180.0
    min_task_interval: float = 900.0
    max_decision_history: int = 100
    recent_execution_window: float = 1800.0
    scoring_failure_score: float = 0.2
    acceptance_thresholds: Dict[str, float] = Field(
        default_factory=lambda: {
            "default": 0.4,
            "CONSERVATIVE": 0.6,
            "HIGH_REWARD_AGGRESSIVE": 0.25,
        }
    )
    interval_multipliers: IntervalMultipliers = Field(default_factory=IntervalMultipliers)
    task_cooldowns: Dict[str, float] = Field(default_factory=dict)

    @field_validator("base_selection_interval", "min_task_interval", "recent_execution_window")
    @classmethod
    def validate_positive_durations(cls, v):
        if v <= 0:
            raise ValueError("Intervals must be positive")
        return v

    @field_validator("max_decision_history")
    @classmethod
    def validate_history_size(cls, v):
        if v <= 0:
            raise ValueError("max_decision_history must be a positive integer")
        return v

    @field_validator("scoring_failure_score")
    @classmethod
    def validate_score(cls, v):
        if not 0.0 <= v <= 1.0:
            raise ValueError("Scores must be between 0.0 and 1.0")
        return v

    @field_validator("acceptance_thresholds")
    @classmethod
    def validate_thresholds(cls, v):
        for name, threshold in v.items():
            if not 0.0 <= threshold <= 1.0:
                raise ValueError(f"Threshold '{name}' must be between 0.0 and 1.0")
        v.setdefault("default", 0.4)
        return v

    @field_validator("task_cooldowns")
    @classmethod
    def validate_cooldowns(cls, v):
        for task_type, cooldown in v.items():
            if cooldown < 0:
                raise ValueError(f"Cooldown for '{task_type}' must not be negative")
        return v

    def threshold_for(self, risk_profile: str) -> float:
        """Acceptance threshold for a risk profile name."""
        return self.acceptance_thresholds.get(risk_profile, self.acceptance_thresholds["default"])

    def cooldown_for(self, task_type: str) -> float:
        """Minimum re-execution interval for a task type."""
        return self.task_cooldowns.get(task_type, self.min_task_interval)


def load_selector_config(overrides: Optional[Dict[str, Any]] = None) -> SelectorConfig:
    """
    Build a SelectorConfig from config.yaml.

    Args:
        overrides: Optional top-level keys that replace the YAML values

    Returns:
        Validated selector configuration
    """
    section = dict(get_config().get('task_selector', {}) or {})
    if overrides:
        section.update(overrides)

    config = SelectorConfig(**section)
    logger.debug(
        f"[SelectorConfig] base_interval={config.base_selection_interval}s, "
        f"cooldowns={len(config.task_cooldowns)}, max_history={config.max_decision_history}"
    )
    return config
