#!/usr/bin/env python3
"""
Decision-awareness filter: the last scoring stage before selection.
"""

import logging
from typing import Any, Dict, Tuple

from monitoring.metrics import record_collaborator_failure, record_error

from .collaborators import maybe_await
from .errors import AwarenessError
from .selector_state import Evaluation

logger = logging.getLogger(__name__)

PROCEED = "PROCEED"
DEFAULT_AWARENESS = {"recommendation": PROCEED, "confidence": 0.7}
PROCEED_CONFIDENCE = 0.7
HOLD_CONFIDENCE = 0.3
HOLD_FACTOR = 0.5
FAILURE_FACTOR = 0.8
FAILURE_CONFIDENCE = 0.5


class DecisionAwarenessFilter:
    """
    Applies an awareness advisor's recommendation to a reward projection.

    Without an advisor every candidate proceeds with confidence 0.7.
    """

    def __init__(self, advisor=None):
        self.advisor = advisor

    async def assess(self, agent_id: str, evaluation: Evaluation) -> Dict[str, Any]:
        """Ask the advisor about one candidate. Raises AwarenessError."""
        if self.advisor is None:
            return dict(DEFAULT_AWARENESS)
        try:
            awareness = await maybe_await(self.advisor.assess_decision(
                agent_id,
                {"task_selection": evaluation},
                {"decision_type": "background_task_selection"},
            ))
        except Exception as e:
            record_collaborator_failure("awareness_advisor", "assess_decision")
            raise AwarenessError(f"Awareness advisor failed for {evaluation.task_type}: {e}") from e
        if not isinstance(awareness, dict):
            raise AwarenessError(f"Awareness advisor returned {type(awareness).__name__}, expected dict")
        return awareness

    async def filter(self, agent_id: str, evaluation: Evaluation) -> Tuple[float, float, Dict[str, Any]]:
        """
        Compute the final score of one evaluation.

        Returns:
            (final_score, decision_confidence, awareness)
        """
        try:
            awareness = await self.assess(agent_id, evaluation)
        except AwarenessError as e:
            logger.warning(f"[DecisionAwareness] {e}")
            record_error("AwarenessError", "decision_awareness")
            return evaluation.reward_projection * FAILURE_FACTOR, FAILURE_CONFIDENCE, {"error": str(e)}

        confidence = awareness.get("confidence")
        if awareness.get("recommendation") == PROCEED:
            multiplier = confidence or PROCEED_CONFIDENCE
        else:
            multiplier = (confidence or HOLD_CONFIDENCE) * HOLD_FACTOR

        return evaluation.reward_projection * multiplier, confidence or PROCEED_CONFIDENCE, awareness

    async def apply(self, agent_id: str, evaluation: Evaluation) -> None:
        final_score, confidence, awareness = await self.filter(agent_id, evaluation)
        evaluation.final_score = final_score
        evaluation.decision_confidence = confidence
        evaluation.awareness = awareness
