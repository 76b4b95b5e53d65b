#!/usr/bin/env python3
"""
Opportunity scoring for candidate background tasks.

The heuristic scorer is always available. When a learned value estimator is
connected the learned scorer consults it first and falls back to the
heuristic on any failure.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from tasks.base import TaskPriority
from tasks.catalog import Candidate
from monitoring.metrics import record_collaborator_failure

from .collaborators import maybe_await
from .errors import ScoringError, escalate_as
from .selector_state import SelectorState

logger = logging.getLogger(__name__)

PRIORITY_BONUS = {
    TaskPriority.CRITICAL: 0.4,
    TaskPriority.HIGH: 0.3,
    TaskPriority.MEDIUM: 0.2,
    TaskPriority.LOW: 0.1,
}
UNKNOWN_PRIORITY_BONUS = 0.2
RECENT_EXECUTION_PENALTY = 0.4


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def describe_opportunity(score: float) -> str:
    """Human-readable explanation of an opportunity score."""
    if score > 0.8:
        return "High value opportunity detected"
    elif score > 0.6:
        return "Good opportunity with solid potential"
    elif score > 0.4:
        return "Moderate opportunity worth considering"
    elif score > 0.2:
        return "Low value opportunity"
    return "Poor opportunity, likely not worth pursuing"


class OpportunityScorer(ABC):
    """Estimates the value of running a candidate right now, in [0, 1]."""

    @abstractmethod
    async def score(self, candidate: Candidate, context: Dict[str, Any],
                    state: SelectorState, now: float) -> float:
        """Score one candidate. Raises ScoringError on failure."""


class HeuristicOpportunityScorer(OpportunityScorer):
    """
    Deterministic rule-based scorer.

    Score = 0.5 + priority bonus + 0.2 * value score
            + 0.3 * (avg success - 0.5) - 0.4 if run recently,
    clamped to [0.1, 1.0].
    """

    def __init__(self, recent_execution_window: float = 1800.0):
        self.recent_execution_window = recent_execution_window

    def compute(self, candidate: Candidate, state: SelectorState, now: float) -> float:
        metadata = candidate.metadata
        score = 0.5

        score += PRIORITY_BONUS.get(metadata.priority, UNKNOWN_PRIORITY_BONUS)

        value_score = metadata.value_score if metadata.value_score is not None else 0.5
        score += float(value_score) * 0.2

        history = state.history_for(candidate.task_type)
        score += (history.avg_success - 0.5) * 0.3

        if state.time_since_last_run(candidate.task_type, now) < self.recent_execution_window:
            score -= RECENT_EXECUTION_PENALTY

        return clamp(score, 0.1, 1.0)

    @escalate_as(ScoringError)
    async def score(self, candidate: Candidate, context: Dict[str, Any],
                    state: SelectorState, now: float) -> float:
        return self.compute(candidate, state, now)


class LearnedOpportunityScorer(OpportunityScorer):
    """Delegates to a learned value estimator, heuristic on failure."""

    def __init__(self, estimator, fallback: Optional[HeuristicOpportunityScorer] = None):
        self.estimator = estimator
        self.fallback = fallback or HeuristicOpportunityScorer()

    @escalate_as(ScoringError)
    async def score(self, candidate: Candidate, context: Dict[str, Any],
                    state: SelectorState, now: float) -> float:
        try:
            value = await maybe_await(self.estimator.evaluate_opportunity(candidate.metadata, context))
            return clamp(float(value), 0.0, 1.0)
        except Exception as e:
            logger.warning(f"[OpportunityScorer] Value estimator failed for {candidate.task_type}, "
                           f"using heuristic: {e}")
            record_collaborator_failure("value_estimator", "evaluate_opportunity")
            return self.fallback.compute(candidate, state, now)
