#!/usr/bin/env python3
"""
Selection policy: picks at most one evaluated candidate per cycle.

Pure with respect to its inputs; it never mutates the agent's state.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from config.selector_config import SelectorConfig

from .selector_state import Evaluation, SelectorState

logger = logging.getLogger(__name__)


class SelectionStage(Enum):
    """Stages of the selection decision"""
    CANDIDATES_RANKED = "candidates_ranked"
    THRESHOLD_CHECK = "threshold_check"
    COOLDOWN_CHECK = "cooldown_check"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass
class SelectionOutcome:
    """Result of applying the policy to one cycle's evaluations."""
    stage: SelectionStage
    selected: Optional[Evaluation] = None
    ranked: List[Evaluation] = field(default_factory=list)
    threshold: Optional[float] = None
    reason: str = ""
    rejected_at: Optional[SelectionStage] = None

    @property
    def accepted(self) -> bool:
        return self.stage == SelectionStage.ACCEPTED

    @property
    def best(self) -> Optional[Evaluation]:
        return self.ranked[0] if self.ranked else None


class SelectionPolicy:
    """Ranks evaluations and applies the acceptance threshold and cooldowns."""

    def __init__(self, config: SelectorConfig):
        self.config = config

    def select(self, evaluations: List[Evaluation], state: SelectorState, now: float) -> SelectionOutcome:
        """
        Decide which candidate, if any, to execute.

        Args:
            evaluations: Fully scored evaluations of this cycle
            state: The agent's selector state (read only)
            now: Cycle timestamp (seconds)

        Returns:
            SelectionOutcome with stage ACCEPTED or REJECTED
        """
        ranked = sorted(evaluations, key=lambda e: e.final_score, reverse=True)
        if not ranked:
            return SelectionOutcome(SelectionStage.REJECTED, ranked=ranked, reason="no candidates",
                                    rejected_at=SelectionStage.CANDIDATES_RANKED)

        best = ranked[0]
        threshold = self.config.threshold_for(state.personality.risk_profile.value)
        if best.final_score < threshold:
            reason = f"score {best.final_score:.3f} below threshold {threshold}"
            logger.info(f"[SelectionPolicy] {state.agent_id} rejected best task {best.task_type} ({reason})")
            return SelectionOutcome(SelectionStage.REJECTED, ranked=ranked, threshold=threshold,
                                    reason=reason, rejected_at=SelectionStage.THRESHOLD_CHECK)

        since_last = state.time_since_last_run(best.task_type, now)
        cooldown = self.config.cooldown_for(best.task_type)
        if since_last < cooldown:
            reason = f"cooldown active ({since_last:.0f}s < {cooldown:.0f}s)"
            logger.info(f"[SelectionPolicy] {state.agent_id} skipped {best.task_type}: {reason}")
            return SelectionOutcome(SelectionStage.REJECTED, ranked=ranked, threshold=threshold,
                                    reason=reason, rejected_at=SelectionStage.COOLDOWN_CHECK)

        return SelectionOutcome(SelectionStage.ACCEPTED, selected=best, ranked=ranked,
                                threshold=threshold, reason=best.evaluation_reason)
