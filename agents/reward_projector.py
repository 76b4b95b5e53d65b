#!/usr/bin/env python3
"""
Reward projection stage of the evaluation pipeline.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from monitoring.metrics import record_collaborator_failure, record_error

from .collaborators import maybe_await
from .errors import ProjectionError
from .selector_state import Evaluation

logger = logging.getLogger(__name__)

HISTORICAL_BONUS_THRESHOLD = 0.8
HISTORICAL_PENALTY_THRESHOLD = 0.4
HISTORICAL_BONUS = 1.2
HISTORICAL_PENALTY = 0.7
PROJECTION_FAILURE_FACTOR = 0.5


class RewardProjector:
    """
    Projects the expected reward of running a candidate.

    Starts from the personality score, lets a connected reward engine
    override it, then adjusts for the agent's track record on the task type.
    """

    def __init__(self, reward_engine=None):
        self.reward_engine = reward_engine

    async def _engine_projection(self, agent_id: str, evaluation: Evaluation) -> Optional[Dict[str, Any]]:
        if self.reward_engine is None:
            return None
        context = {
            "task_type": evaluation.task_type,
            "category": evaluation.descriptor.category.value,
        }
        try:
            return await maybe_await(
                self.reward_engine.project_reward(agent_id, evaluation.metadata, context)
            )
        except Exception as e:
            logger.warning(f"[RewardProjector] Reward engine failed for {evaluation.task_type}: {e}")
            record_collaborator_failure("reward_engine", "project_reward")
            return None

    def _adjust_for_history(self, expected: float, breakdown: Dict[str, Any],
                            historical: Dict[str, Any]) -> float:
        avg_success = float(historical["avg_success"])
        if avg_success > HISTORICAL_BONUS_THRESHOLD:
            expected *= HISTORICAL_BONUS
            breakdown["historical_bonus"] = 0.2
        elif avg_success < HISTORICAL_PENALTY_THRESHOLD:
            expected *= HISTORICAL_PENALTY
            breakdown["historical_penalty"] = -0.3
        return expected

    async def project(self, agent_id: str, evaluation: Evaluation,
                      historical: Dict[str, Any]) -> Tuple[float, Dict[str, Any]]:
        """
        Project the reward for one evaluation.

        Args:
            agent_id: Selecting agent
            evaluation: Evaluation with ``personality_score`` already set
            historical: ``SelectorState.historical_performance`` for the task type

        Returns:
            (expected_reward, breakdown)

        Raises:
            ProjectionError: if the projection cannot be computed
        """
        try:
            expected = evaluation.personality_score
            breakdown: Dict[str, Any] = {"base": expected}

            projection = await self._engine_projection(agent_id, evaluation)
            if projection:
                if projection.get("expected_reward") is not None:
                    expected = float(projection["expected_reward"])
                if projection.get("breakdown"):
                    breakdown = dict(projection["breakdown"])

            expected = self._adjust_for_history(expected, breakdown, historical)
            return expected, breakdown
        except Exception as e:
            raise ProjectionError(f"Reward projection failed for {evaluation.task_type}: {e}") from e

    async def apply(self, agent_id: str, evaluation: Evaluation, historical: Dict[str, Any]) -> None:
        """Fill the reward fields of ``evaluation``, degrading on ProjectionError."""
        evaluation.historical_performance = historical
        try:
            expected, breakdown = await self.project(agent_id, evaluation, historical)
        except ProjectionError as e:
            logger.warning(f"[RewardProjector] {e}")
            record_error("ProjectionError", "reward_projector")
            expected = evaluation.personality_score * PROJECTION_FAILURE_FACTOR
            breakdown = {"error": str(e)}
        evaluation.reward_projection = expected
        evaluation.reward_breakdown = breakdown
