#!/usr/bin/env python3
"""
Evaluation pipeline: scorer -> personality modulator -> reward projector ->
decision-awareness filter, applied to every candidate of a cycle.
"""

import logging
from typing import Any, Dict, List, Optional

from tasks.catalog import Candidate
from monitoring.metrics import record_error, selection_final_score

from .decision_awareness import DecisionAwarenessFilter
from .errors import ScoringError
from .opportunity_scorer import (
    HeuristicOpportunityScorer,
    LearnedOpportunityScorer,
    OpportunityScorer,
    describe_opportunity,
)
from .personality_engine import PersonalityModulator
from .reward_projector import RewardProjector
from .selector_state import Evaluation, SelectorState

logger = logging.getLogger(__name__)


class EvaluationPipeline:
    """Runs every scoring stage over the candidates of one cycle."""

    def __init__(self, scorer: Optional[OpportunityScorer] = None,
                 modulator: Optional[PersonalityModulator] = None,
                 projector: Optional[RewardProjector] = None,
                 awareness: Optional[DecisionAwarenessFilter] = None,
                 scoring_failure_score: float = 0.2,
                 recent_execution_window: float = 1800.0):
        self.recent_execution_window = recent_execution_window
        self.scorer = scorer or HeuristicOpportunityScorer(recent_execution_window)
        self.modulator = modulator or PersonalityModulator()
        self.projector = projector or RewardProjector()
        self.awareness = awareness or DecisionAwarenessFilter()
        self.scoring_failure_score = scoring_failure_score

    def connect(self, value_estimator=None, reward_engine=None, awareness_advisor=None) -> None:
        """Swap in learning collaborators; ``None`` leaves a stage unchanged."""
        if value_estimator is not None:
            self.scorer = LearnedOpportunityScorer(
                value_estimator, HeuristicOpportunityScorer(self.recent_execution_window)
            )
        if reward_engine is not None:
            self.projector.reward_engine = reward_engine
        if awareness_advisor is not None:
            self.awareness.advisor = awareness_advisor

    async def _score(self, evaluation: Evaluation, context: Dict[str, Any],
                     state: SelectorState, now: float) -> None:
        try:
            score = await self.scorer.score(evaluation.candidate, context, state, now)
            evaluation.opportunity_score = score
            evaluation.evaluation_reason = describe_opportunity(score)
        except ScoringError as e:
            logger.warning(f"[EvaluationPipeline] Scoring failed for {evaluation.task_type}: {e}")
            record_error("ScoringError", "opportunity_scorer")
            evaluation.opportunity_score = self.scoring_failure_score
            evaluation.evaluation_reason = "Evaluation failed"

    async def evaluate(self, state: SelectorState, candidates: List[Candidate],
                       context: Dict[str, Any], now: float) -> List[Evaluation]:
        """
        Evaluate all candidates for one agent.

        Args:
            state: The agent's selector state
            candidates: Candidates from the task catalog
            context: Decision context passed to learning collaborators
            now: Cycle timestamp (seconds)

        Returns:
            One evaluation per candidate, in catalog order
        """
        evaluations = []
        for candidate in candidates:
            evaluation = Evaluation(candidate=candidate)
            await self._score(evaluation, context, state, now)
            self.modulator.apply(state.personality, evaluation)
            await self.projector.apply(
                state.agent_id, evaluation, state.historical_performance(candidate.task_type)
            )
            await self.awareness.apply(state.agent_id, evaluation)
            selection_final_score.observe(evaluation.final_score)
            evaluations.append(evaluation)

        logger.debug(f"[EvaluationPipeline] {state.agent_id}: evaluated {len(evaluations)} candidates")
        return evaluations
