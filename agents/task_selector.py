#!/usr/bin/env python3
"""
AutonomousTaskSelector - per-agent autonomous background task selection

Every registered agent gets its own selection loop. Each cycle evaluates the
task catalog through the scoring pipeline, applies the selection policy and,
when a candidate is accepted, starts it in the background so the loop keeps
ticking. Outcomes flow back into the agent's history and the connected
learning systems.
"""

import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from config.environment import Settings, get_settings
from config.selector_config import SelectorConfig, load_selector_config
from tasks.catalog import TaskCatalog
from monitoring.logger import AgentLogContext, log_error
from monitoring.metrics import (
    active_selectors,
    in_flight_executions,
    record_error,
    record_task_execution,
    selection_cycle_duration_seconds,
    selection_cycles_total,
)

from .collaborators import SelectionObserver, TaskCompletedEvent, TaskFailedEvent, maybe_await
from .errors import CycleError, RegistrationError
from .evaluation_pipeline import EvaluationPipeline
from .feedback_recorder import FeedbackRecorder
from .personality_engine import calculate_selection_interval, extract_personality_profile
from .selection_policy import SelectionOutcome, SelectionPolicy
from .selector_state import Decision, Evaluation, SelectorState
from .task_executor import ExecutionReport, TaskExecutor


@dataclass
class CycleResult:
    """What one selection cycle did."""
    agent_id: str
    outcome: Optional[SelectionOutcome] = None
    decision: Optional[Decision] = None
    execution: Optional[asyncio.Task] = None
    skipped: bool = False
    error: Optional[CycleError] = None

    @property
    def started_execution(self) -> bool:
        return self.execution is not None


class AutonomousTaskSelector:
    """
    Engine owning every agent's selector state and selection loop.

    Capabilities:
    - Personality-driven registration with derived selection intervals
    - Scoring pipeline with optional learned collaborators
    - Threshold and cooldown based admission
    - Fire-and-continue execution with a re-entrancy guard per agent
    - Outcome feedback into task history, learning systems and observers
    """

    def __init__(self, catalog: Optional[TaskCatalog] = None,
                 config: Optional[SelectorConfig] = None,
                 settings: Optional[Settings] = None,
                 clock: Optional[Callable[[], float]] = None):
        self.name = "task_selector"
        self.config = config or load_selector_config()
        self.settings = settings or get_settings()
        self.catalog = catalog if catalog is not None else TaskCatalog()
        self.clock = clock or time.time

        self.selectors: Dict[str, SelectorState] = {}
        self._loops: Dict[str, asyncio.Task] = {}
        self._executions: set = set()
        self._observers: List[SelectionObserver] = []
        self.is_running = False

        # Learning systems
        self.value_estimator = None
        self.reward_engine = None
        self.awareness_advisor = None
        self.adaptive_learning = None

        self.thread_pool = self._create_thread_pool()
        self.pipeline = EvaluationPipeline(
            scoring_failure_score=self.config.scoring_failure_score,
            recent_execution_window=self.config.recent_execution_window,
        )
        self.policy = SelectionPolicy(self.config)
        self.executor = TaskExecutor(self.catalog, self.thread_pool)
        self.recorder = FeedbackRecorder()

        logging.info(f"[{self.name}] Initialized with {len(self.catalog)} catalog entries "
                     f"(base interval {self.config.base_selection_interval}s)")

    def _create_thread_pool(self) -> ThreadPoolExecutor:
        return ThreadPoolExecutor(max_workers=self.settings.executor_max_workers,
                                  thread_name_prefix="background-task")

    # --- learning systems & observers ---

    def connect_learning_systems(self, value_estimator=None, reward_engine=None,
                                 awareness_advisor=None, adaptive_learning=None) -> None:
        """
        Connect optional learning collaborators.

        Args:
            value_estimator: Learned opportunity scorer backend
            reward_engine: Reward projection and outcome accounting
            awareness_advisor: Decision-awareness meta reasoning
            adaptive_learning: Sink for task-reported learning metrics
        """
        if value_estimator is not None:
            self.value_estimator = value_estimator
            self.recorder.value_estimator = value_estimator
        if reward_engine is not None:
            self.reward_engine = reward_engine
            self.recorder.reward_engine = reward_engine
        if awareness_advisor is not None:
            self.awareness_advisor = awareness_advisor
        if adaptive_learning is not None:
            self.adaptive_learning = adaptive_learning
            self.recorder.adaptive_learning = adaptive_learning

        self.pipeline.connect(value_estimator, reward_engine, awareness_advisor)
        logging.info(f"[{self.name}] Learning systems connected: {self._connected_systems()}")

    def _connected_systems(self) -> Dict[str, bool]:
        return {
            "value_estimator": self.value_estimator is not None,
            "reward_engine": self.reward_engine is not None,
            "awareness_advisor": self.awareness_advisor is not None,
            "adaptive_learning": self.adaptive_learning is not None,
        }

    def subscribe(self, observer: SelectionObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: SelectionObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    async def _notify(self, hook: str, event) -> None:
        for observer in list(self._observers):
            callback = getattr(observer, hook, None)
            if callback is None:
                continue
            try:
                await maybe_await(callback(event))
            except Exception as e:
                logging.error(f"[{self.name}] Observer {type(observer).__name__}.{hook} failed: {e}")
                record_error(type(e).__name__, "observer")

    # --- registration ---

    def register_agent(self, agent_id: str, character_config: Optional[Dict[str, Any]] = None) -> SelectorState:
        """
        Register an agent for autonomous task selection.

        Args:
            agent_id: Unique agent identifier
            character_config: Character configuration the personality is derived from

        Returns:
            The agent's new selector state

        Raises:
            RegistrationError: on empty or duplicate ids and invalid personalities
        """
        if not agent_id:
            raise RegistrationError("Agent id must not be empty")
        if agent_id in self.selectors:
            raise RegistrationError(f"Agent {agent_id} is already registered")

        personality = extract_personality_profile(agent_id, character_config)
        multipliers = self.config.interval_multipliers
        interval = calculate_selection_interval(
            personality, self.config.base_selection_interval,
            speed=multipliers.speed, analytical=multipliers.analytical,
            conservative=multipliers.conservative,
        )

        state = SelectorState(agent_id, personality, interval, self.config.max_decision_history)
        self.selectors[agent_id] = state
        logging.info(f"[{self.name}] Registered agent {agent_id} ({personality.name}, "
                     f"{personality.risk_profile.value}, interval {interval:.0f}s)")

        if self.is_running and self.settings.autostart_agents:
            self.start_agent(agent_id)
        return state

    def deregister_agent(self, agent_id: str) -> Optional[SelectorState]:
        """
        Stop scheduling an agent and forget its state.

        An execution already in flight is left to finish; its outcome is
        recorded on the returned, detached state.
        """
        state = self.selectors.pop(agent_id, None)
        if state is None:
            return None
        self.stop_agent(agent_id, state)
        logging.info(f"[{self.name}] Deregistered agent {agent_id}")
        return state

    def start_agent(self, agent_id: str) -> None:
        """Start the selection loop of a registered agent. Must run inside the event loop."""
        state = self.selectors.get(agent_id)
        if state is None:
            raise RegistrationError(f"Agent {agent_id} is not registered")
        if agent_id in self._loops:
            return
        if not self.config.enabled:
            logging.info(f"[{self.name}] Task selection disabled, not starting loop for {agent_id}")
            return
        state.is_active = True
        self._loops[agent_id] = asyncio.get_running_loop().create_task(
            self._selection_loop(state), name=f"selection-loop-{agent_id}"
        )
        self._update_active_gauge()
        logging.info(f"[{self.name}] Started selection loop for {agent_id} "
                     f"(every {state.selection_interval:.0f}s)")

    def stop_agent(self, agent_id: str, state: Optional[SelectorState] = None) -> None:
        """Cancel an agent's selection loop without touching in-flight executions."""
        state = state or self.selectors.get(agent_id)
        loop_task = self._loops.pop(agent_id, None)
        if loop_task is not None:
            loop_task.cancel()
        if state is not None:
            state.is_active = False
        self._update_active_gauge()

    def _update_active_gauge(self) -> None:
        active_selectors.set(sum(1 for s in self.selectors.values() if s.is_active))

    # --- lifecycle ---

    async def start(self) -> None:
        """Start the selection loops of all registered agents."""
        if self.is_running:
            return
        if not self.config.enabled:
            logging.info(f"[{self.name}] Task selection disabled in config, selection loops not started")
            return
        if self.thread_pool is None:
            self.thread_pool = self._create_thread_pool()
            self.executor.thread_pool = self.thread_pool
        self.is_running = True
        if self.settings.autostart_agents:
            for agent_id in list(self.selectors):
                self.start_agent(agent_id)
        logging.info(f"[{self.name}] Started with {len(self._loops)} active selectors")

    async def shutdown(self, wait_for_executions: bool = True) -> None:
        """
        Stop every selection loop.

        Args:
            wait_for_executions: Wait for in-flight executions instead of cancelling them
        """
        self.is_running = False
        loops = list(self._loops.values())
        for agent_id in list(self._loops):
            self.stop_agent(agent_id)
        if loops:
            await asyncio.gather(*loops, return_exceptions=True)

        executions = list(self._executions)
        if executions:
            if not wait_for_executions:
                for execution in executions:
                    execution.cancel()
            await asyncio.gather(*executions, return_exceptions=True)

        if self.thread_pool is not None:
            self.thread_pool.shutdown(wait=wait_for_executions)
            self.thread_pool = None
        logging.info(f"[{self.name}] Shut down ({len(executions)} executions were in flight)")

    # --- selection ---

    async def _selection_loop(self, state: SelectorState) -> None:
        try:
            while True:
                await asyncio.sleep(state.selection_interval)
                await self._guarded_cycle(state)
        except asyncio.CancelledError:
            logging.info(f"[{self.name}] Selection loop for {state.agent_id} stopped")
            raise

    async def run_selection_cycle(self, agent_id: str) -> CycleResult:
        """
        Run one full selection cycle for an agent.

        The selected execution, if any, is started in the background and
        returned as ``CycleResult.execution``; it is not awaited here.

        Raises:
            RegistrationError: if the agent is not registered
        """
        state = self.selectors.get(agent_id)
        if state is None:
            raise RegistrationError(f"Agent {agent_id} is not registered")
        return await self._guarded_cycle(state)

    async def _guarded_cycle(self, state: SelectorState) -> CycleResult:
        try:
            return await self._cycle(state)
        except CycleError as e:
            logging.error(f"[{self.name}] Selection cycle failed for {state.agent_id}: {e}")
            log_error(e, {"agent_id": state.agent_id, "cycle": state.cycles_run})
            record_error("CycleError", "task_selector")
            selection_cycles_total.labels(status="error").inc()
            return CycleResult(agent_id=state.agent_id, error=e)

    async def _cycle(self, state: SelectorState) -> CycleResult:
        if state.execution_in_flight:
            state.cycles_skipped += 1
            selection_cycles_total.labels(status="skipped_in_flight").inc()
            logging.info(f"[{self.name}] Skipping cycle for {state.agent_id}: execution still in flight")
            return CycleResult(agent_id=state.agent_id, skipped=True)

        state.cycles_run += 1
        with AgentLogContext(state.agent_id, state.cycles_run), selection_cycle_duration_seconds.time():
            now = self.clock()
            state.last_decision_time = now
            try:
                context = self.build_decision_context(state, now)
                candidates = self.catalog.list_candidates()
                evaluations = await self.pipeline.evaluate(state, candidates, context, now)
                outcome = self.policy.select(evaluations, state, now)

                if not outcome.accepted:
                    decision = self.recorder.record_no_action(state, outcome.ranked, outcome.reason, now)
                    selection_cycles_total.labels(status="completed").inc()
                    return CycleResult(agent_id=state.agent_id, outcome=outcome, decision=decision)

                selected = outcome.selected
                logging.info(f"[{self.name}] {state.agent_id} selected {selected.task_type} "
                             f"(score {selected.final_score:.3f}, threshold {outcome.threshold})")
                execution = self._spawn_execution(state, selected, context)
            except Exception as e:
                raise CycleError(f"Cycle {state.cycles_run} for {state.agent_id} failed: {e}") from e

        selection_cycles_total.labels(status="completed").inc()
        return CycleResult(agent_id=state.agent_id, outcome=outcome, execution=execution)

    def _spawn_execution(self, state: SelectorState, evaluation: Evaluation,
                         context: Dict[str, Any]) -> asyncio.Task:
        state.execution_in_flight = True
        in_flight_executions.inc()
        execution = asyncio.get_running_loop().create_task(
            self._execute(state, evaluation, context),
            name=f"execution-{state.agent_id}-{evaluation.task_type}",
        )
        self._executions.add(execution)
        execution.add_done_callback(self._executions.discard)
        return execution

    async def _execute(self, state: SelectorState, evaluation: Evaluation,
                       context: Dict[str, Any]) -> ExecutionReport:
        try:
            with AgentLogContext(state.agent_id):
                report = await self.executor.execute(state, evaluation)
                try:
                    await self._record_outcome(state, evaluation, report, context)
                except Exception as e:
                    logging.error(f"[{self.name}] Recording outcome of {evaluation.task_type} "
                                  f"failed for {state.agent_id}: {e}")
                    log_error(e, {"agent_id": state.agent_id, "task_type": evaluation.task_type})
                    record_error(type(e).__name__, "feedback_recorder")
                return report
        finally:
            state.execution_in_flight = False
            in_flight_executions.dec()

    async def _record_outcome(self, state: SelectorState, evaluation: Evaluation,
                              report: ExecutionReport, context: Dict[str, Any]) -> None:
        now = self.clock()
        task_type = evaluation.task_type
        record_task_execution(task_type, not report.failed, report.execution_time,
                              report.actual_performance)

        if report.failed:
            cause = report.error.__cause__ or report.error
            self.recorder.record_failure(state, evaluation, cause, now, report.execution_time)
            record_error("ExecutionError", "task_executor")
            await self.recorder.forward_outcome(state, evaluation, report, context)
            await self._notify("on_task_failed", TaskFailedEvent(
                agent_id=state.agent_id, task_type=task_type, error=str(cause),
            ))
            return

        self.recorder.record_execution(state, evaluation, report.result, report.execution_time,
                                       report.actual_performance, now)
        await self.recorder.forward_outcome(state, evaluation, report, context)
        await self._notify("on_task_completed", TaskCompletedEvent(
            agent_id=state.agent_id,
            task_type=task_type,
            results=report.result.to_dict() if report.result else {},
            execution_time=report.execution_time,
            actual_performance=report.actual_performance,
        ))

    # --- introspection ---

    def build_decision_context(self, state: SelectorState, now: Optional[float] = None) -> Dict[str, Any]:
        """Context handed to learning collaborators for one cycle."""
        return {
            "agent_id": state.agent_id,
            "timestamp": now if now is not None else self.clock(),
            "personality": state.personality.to_dict(),
            "recent_performance": state.recent_performance(),
            "task_history": {k: v.snapshot() for k, v in state.task_history.items()},
        }

    def get_selector_status(self) -> Dict[str, Any]:
        """Engine-wide status summary."""
        return {
            "is_running": self.is_running,
            "total_agents": len(self.selectors),
            "active_selectors": sum(1 for s in self.selectors.values() if s.is_active),
            "in_flight_executions": len(self._executions),
            "catalog_size": len(self.catalog),
            "observers": len(self._observers),
            "learning_systems_connected": self._connected_systems(),
        }

    def get_agent_summary(self, agent_id: str, recent: int = 10) -> Optional[Dict[str, Any]]:
        """Per-agent history snapshot and most recent decisions."""
        state = self.selectors.get(agent_id)
        if state is None:
            return None
        summary = state.to_dict()
        summary["recent_performance"] = state.recent_performance()
        summary["recent_decisions"] = [d.to_dict() for d in list(state.decision_history)[-recent:]]
        return summary


# Global instance accessor
_task_selector = None


def get_task_selector() -> AutonomousTaskSelector:
    """Get the global AutonomousTaskSelector instance."""
    global _task_selector
    if _task_selector is None:
        _task_selector = AutonomousTaskSelector()
    return _task_selector
