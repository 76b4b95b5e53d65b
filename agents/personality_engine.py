#!/usr/bin/env python3
"""
Personality Engine for autonomous task selection

Derives a fixed personality profile from an agent's character configuration
and reshapes raw opportunity scores with it: category-weighted strategic
preferences, risk tolerance, time horizon and learning style all compose
multiplicatively.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from tasks.base import RiskLevel, TaskCategory

from .errors import RegistrationError

logger = logging.getLogger(__name__)


class RiskProfile(Enum):
    """Risk tolerance of an agent."""
    CONSERVATIVE = "CONSERVATIVE"
    MODERATE = "MODERATE"
    CALCULATED_AGGRESSIVE = "CALCULATED_AGGRESSIVE"
    HIGH_REWARD_AGGRESSIVE = "HIGH_REWARD_AGGRESSIVE"


class TimeHorizon(Enum):
    """Preferred time horizon of an agent."""
    IMMEDIATE_EXECUTION = "IMMEDIATE_EXECUTION"
    SHORT_TERM = "SHORT_TERM"
    MEDIUM_TERM = "MEDIUM_TERM"
    LONG_TERM = "LONG_TERM"


class LearningStyle(Enum):
    """How an agent prefers to learn."""
    TECHNICAL_OPTIMIZATION = "TECHNICAL_OPTIMIZATION"
    PATTERN_CORRELATION_ANALYSIS = "PATTERN_CORRELATION_ANALYSIS"
    EXPERIENTIAL = "EXPERIENTIAL"
    COLLABORATIVE = "COLLABORATIVE"


# Strategic weights consulted per task category. The first weight of each
# pair decides whether a reason is reported.
CATEGORY_WEIGHTS: Dict[TaskCategory, Tuple[str, ...]] = {
    TaskCategory.LEARNING_INTELLIGENCE: ("intelligence",),
    TaskCategory.COMPETITION_ANALYSIS: ("competitive_advantage", "competition_beating"),
    TaskCategory.PERFORMANCE_OPTIMIZATION: ("execution_speed", "gas_optimization"),
    TaskCategory.MARKET_INTELLIGENCE: ("pattern_recognition", "opportunity_size"),
}

CATEGORY_REASONS: Dict[TaskCategory, str] = {
    TaskCategory.LEARNING_INTELLIGENCE: "High intelligence weight",
    TaskCategory.COMPETITION_ANALYSIS: "Competitive advantage focus",
    TaskCategory.PERFORMANCE_OPTIMIZATION: "Speed optimization priority",
    TaskCategory.MARKET_INTELLIGENCE: "Pattern recognition focus",
}

# (high-risk multiplier, low-risk multiplier) per risk profile
RISK_MULTIPLIERS: Dict[RiskProfile, Tuple[float, float]] = {
    RiskProfile.CONSERVATIVE: (0.3, 1.2),
    RiskProfile.HIGH_REWARD_AGGRESSIVE: (1.8, 0.7),
}

LONG_TASK_MULTIPLIER = 0.4
LEARNING_STYLE_SYNERGY = 1.3


@dataclass(frozen=True)
class PersonalityProfile:
    """Per-agent selection preferences, fixed for the agent's lifetime."""
    name: str
    risk_profile: RiskProfile = RiskProfile.CALCULATED_AGGRESSIVE
    time_horizon: TimeHorizon = TimeHorizon.IMMEDIATE_EXECUTION
    strategic_weights: Mapping[str, float] = field(default_factory=dict)
    learning_style: LearningStyle = LearningStyle.TECHNICAL_OPTIMIZATION
    competition_approach: str = "DIRECT_DOMINANCE"

    def weight(self, name: str) -> float:
        return float(self.strategic_weights.get(name, 1.0))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "risk_profile": self.risk_profile.value,
            "time_horizon": self.time_horizon.value,
            "strategic_weights": dict(self.strategic_weights),
            "learning_style": self.learning_style.value,
            "competition_approach": self.competition_approach,
        }


def _parse_enum(enum_cls, value: Optional[str], default):
    if value is None:
        return default
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        valid = [member.value for member in enum_cls]
        raise RegistrationError(f"Invalid {enum_cls.__name__} '{value}'. Must be one of: {valid}")


def extract_personality_profile(agent_id: str, character_config: Optional[Dict[str, Any]] = None) -> PersonalityProfile:
    """
    Derive an agent's personality profile from its character configuration.

    Args:
        agent_id: Agent identifier, used as the display name fallback
        character_config: ``{"decision_making": {...}, "strategic_weights": {...},
            "profile": {"name": ...}}``

    Returns:
        Immutable personality profile

    Raises:
        RegistrationError: on unknown enum values or non-numeric weights
    """
    character_config = character_config or {}
    decision_making = character_config.get("decision_making") or {}
    profile = character_config.get("profile") or {}

    weights = {}
    for name, value in (character_config.get("strategic_weights") or {}).items():
        try:
            weights[name] = float(value)
        except (TypeError, ValueError):
            raise RegistrationError(f"Strategic weight '{name}' must be numeric, got {value!r}")

    return PersonalityProfile(
        name=str(profile.get("name") or agent_id),
        risk_profile=_parse_enum(RiskProfile, decision_making.get("risk_profile"),
                                 RiskProfile.CALCULATED_AGGRESSIVE),
        time_horizon=_parse_enum(TimeHorizon, decision_making.get("time_horizon"),
                                 TimeHorizon.IMMEDIATE_EXECUTION),
        strategic_weights=weights,
        learning_style=_parse_enum(LearningStyle, decision_making.get("learning_style"),
                                   LearningStyle.TECHNICAL_OPTIMIZATION),
        competition_approach=str(decision_making.get("competition_approach") or "DIRECT_DOMINANCE"),
    )


def calculate_selection_interval(profile: PersonalityProfile, base_interval: float,
                                 speed: float = 0.5, analytical: float = 1.5,
                                 conservative: float = 1.3) -> float:
    """Selection cycle interval (seconds) for a personality profile."""
    if "SpeedDemon" in profile.name or profile.time_horizon == TimeHorizon.IMMEDIATE_EXECUTION:
        return base_interval * speed
    if "Analyst" in profile.name or profile.learning_style == LearningStyle.PATTERN_CORRELATION_ANALYSIS:
        return base_interval * analytical
    if profile.risk_profile == RiskProfile.CONSERVATIVE:
        return base_interval * conservative
    return base_interval


def is_long_running(estimated_duration: Optional[str]) -> bool:
    """Whether a duration hint suggests a long task."""
    if not estimated_duration:
        return False
    hint = estimated_duration.lower()
    return "30" in hint or "long" in hint


class PersonalityModulator:
    """
    Rescales base opportunity scores using an agent's personality.

    The returned reasons are for observability only.
    """

    def modulate(self, personality: PersonalityProfile, evaluation) -> Tuple[float, List[str]]:
        """
        Compute the personality multiplier for one evaluation.

        Args:
            personality: The agent's profile
            evaluation: Evaluation carrying the candidate descriptor and metadata

        Returns:
            (multiplier, reasons)
        """
        multiplier = 1.0
        reasons: List[str] = []
        descriptor = evaluation.descriptor

        weight_names = CATEGORY_WEIGHTS.get(descriptor.category, ())
        for name in weight_names:
            multiplier *= personality.weight(name)
        if weight_names and personality.weight(weight_names[0]) > 1.0:
            reasons.append(CATEGORY_REASONS[descriptor.category])

        risk_level = descriptor.risk_level
        risk_multipliers = RISK_MULTIPLIERS.get(personality.risk_profile)
        if risk_multipliers:
            high, low = risk_multipliers
            if risk_level == RiskLevel.HIGH:
                multiplier *= high
                reasons.append(
                    "Conservative profile avoids high risk"
                    if personality.risk_profile == RiskProfile.CONSERVATIVE
                    else "Aggressive profile seeks high risk/reward"
                )
            elif risk_level == RiskLevel.LOW:
                multiplier *= low
                reasons.append(
                    "Conservative profile prefers low risk"
                    if personality.risk_profile == RiskProfile.CONSERVATIVE
                    else "Aggressive profile finds low risk boring"
                )

        if (personality.time_horizon == TimeHorizon.IMMEDIATE_EXECUTION
                and is_long_running(descriptor.estimated_duration)):
            multiplier *= LONG_TASK_MULTIPLIER
            reasons.append("Immediate execution preference avoids long tasks")

        if (personality.learning_style == LearningStyle.TECHNICAL_OPTIMIZATION
                and descriptor.category == TaskCategory.PERFORMANCE_OPTIMIZATION):
            multiplier *= LEARNING_STYLE_SYNERGY
            reasons.append("Technical optimization learning style match")

        return multiplier, reasons

    def apply(self, personality: PersonalityProfile, evaluation) -> None:
        """Fill the personality fields of ``evaluation`` in place."""
        multiplier, reasons = self.modulate(personality, evaluation)
        evaluation.personality_multiplier = multiplier
        evaluation.personality_reasons = reasons
        evaluation.personality_score = evaluation.opportunity_score * multiplier
        if reasons:
            logger.debug(f"[PersonalityModulator] {personality.name}/{evaluation.task_type}: "
                         f"x{multiplier:.3f} ({'; '.join(reasons)})")
