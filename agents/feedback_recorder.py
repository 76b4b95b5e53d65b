#!/usr/bin/env python3
"""
Feedback Recorder - closes the loop from execution outcomes back into the
agent's task history, decision log and connected learning systems.
"""

import logging
from typing import Any, Dict, List, Optional

from tasks.base import TaskResult
from monitoring.logger import log_selection_decision
from monitoring.metrics import record_collaborator_failure, record_decision

from .collaborators import maybe_await
from .selector_state import Decision, DecisionKind, Evaluation, SelectorState
from .task_executor import FAILED_PERFORMANCE, ExecutionReport

logger = logging.getLogger(__name__)


class FeedbackRecorder:
    """
    Records decisions and outcomes for one engine.

    History updates are the only writes to ``SelectorState`` outside the
    selection cycle itself.
    """

    def __init__(self, reward_engine=None, adaptive_learning=None, value_estimator=None):
        self.reward_engine = reward_engine
        self.adaptive_learning = adaptive_learning
        self.value_estimator = value_estimator

    def _append(self, state: SelectorState, decision: Decision) -> Decision:
        state.append_decision(decision)
        record_decision(decision.kind.value)
        log_selection_decision(
            state.agent_id,
            decision.kind.value,
            task_type=decision.task_type,
            score=decision.projected_score if decision.projected_score is not None else decision.best_task_score,
            reason=decision.reason,
            actual_performance=decision.actual_performance,
        )
        return decision

    def record_execution(self, state: SelectorState, evaluation: Evaluation, result: Optional[TaskResult],
                         execution_time: float, actual_performance: float, now: float) -> Decision:
        """
        Record a completed execution.

        A run counts as successful unless its result explicitly reports
        ``success=False``.
        """
        success = result is None or result.success is not False
        state.entry_for_update(evaluation.task_type).record(success, actual_performance, now)

        logger.info(f"[FeedbackRecorder] {state.agent_id} completed {evaluation.task_type} "
                    f"(performance={actual_performance:.3f}, projected={evaluation.final_score:.3f})")
        return self._append(state, Decision(
            timestamp=now,
            agent_id=state.agent_id,
            kind=DecisionKind.EXECUTE_TASK,
            task_type=evaluation.task_type,
            projected_score=evaluation.final_score,
            actual_performance=actual_performance,
            performance_delta=actual_performance - evaluation.reward_projection,
            execution_time=execution_time,
            success=success,
        ))

    def record_failure(self, state: SelectorState, evaluation: Evaluation, error: Exception,
                       now: float, execution_time: Optional[float] = None) -> Decision:
        """Record an execution that raised; counts as a failed run in the task history."""
        state.entry_for_update(evaluation.task_type).record(False, FAILED_PERFORMANCE, now)

        logger.warning(f"[FeedbackRecorder] {state.agent_id} task {evaluation.task_type} failed: {error}")
        return self._append(state, Decision(
            timestamp=now,
            agent_id=state.agent_id,
            kind=DecisionKind.TASK_FAILED,
            task_type=evaluation.task_type,
            projected_score=evaluation.final_score,
            actual_performance=FAILED_PERFORMANCE,
            performance_delta=FAILED_PERFORMANCE - evaluation.reward_projection,
            execution_time=execution_time,
            success=False,
            error=str(error),
        ))

    def record_no_action(self, state: SelectorState, ranked: List[Evaluation], reason: str,
                         now: float) -> Decision:
        """Record a cycle that started nothing. Task history is untouched."""
        best_score = ranked[0].final_score if ranked else 0.0
        logger.info(f"[FeedbackRecorder] {state.agent_id} chose no action "
                    f"(best score: {best_score:.3f}, {reason})")
        return self._append(state, Decision(
            timestamp=now,
            agent_id=state.agent_id,
            kind=DecisionKind.NO_ACTION,
            available_tasks=len(ranked),
            best_task_score=best_score,
            reason=reason,
        ))

    async def _forward(self, collaborator: str, operation: str, call) -> bool:
        try:
            await maybe_await(call())
            return True
        except Exception as e:
            logger.error(f"[FeedbackRecorder] Failed to update {collaborator}.{operation}: {e}")
            record_collaborator_failure(collaborator, operation)
            return False

    async def forward_outcome(self, state: SelectorState, evaluation: Evaluation,
                              report: ExecutionReport, context: Dict[str, Any]) -> Dict[str, bool]:
        """
        Best-effort delivery of an outcome to the connected learning systems.

        Returns:
            Collaborator name -> whether the update was delivered
        """
        delivered: Dict[str, bool] = {}
        result = report.result
        success = (not report.failed) and (result is None or result.success is not False)
        insights = len(result.insights) if result else 0

        if self.reward_engine is not None:
            outcome = {
                "task_type": evaluation.task_type,
                "success": success,
                "value": report.actual_performance,
                "insights": insights,
            }
            delivered["reward_engine"] = await self._forward(
                "reward_engine", "record_outcome",
                lambda: self.reward_engine.record_outcome(state.agent_id, outcome),
            )

        if self.adaptive_learning is not None and result is not None and result.learning_metrics:
            delivered["adaptive_learning"] = await self._forward(
                "adaptive_learning", "update_metrics",
                lambda: self.adaptive_learning.update_metrics(state.agent_id, result.learning_metrics),
            )

        update = getattr(self.value_estimator, "update_from_outcome", None)
        if callable(update):
            transition = {
                "state": context,
                "action": evaluation.task_type,
                "reward": report.actual_performance,
                "next_state": "task_completed",
            }
            delivered["value_estimator"] = await self._forward(
                "value_estimator", "update_from_outcome", lambda: update(transition),
            )

        return delivered
