#!/usr/bin/env python3
"""
Task Executor - runs a selected background task and measures the outcome.

Coroutine task bodies are awaited on the event loop; plain ones run on the
engine's thread pool so a slow task never blocks other agents' loops.
"""

import asyncio
import inspect
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, Optional

from tasks.base import TaskResult
from tasks.catalog import TaskCatalog
from monitoring.logger import log_background_task

from .errors import ExecutionError
from .selector_state import Evaluation, SelectorState

logger = logging.getLogger(__name__)

FAILED_PERFORMANCE = 0.1


def calculate_actual_performance(result: Optional[TaskResult]) -> float:
    """
    Turn a task result into a realized performance score in [0.1, 1.0].

    Args:
        result: Normalized task result, or None when the task returned nothing

    Returns:
        0.5 base, +0.2 on success, +0.1 per insight (max 0.3),
        +0.2 * value, +0.1 when learning metrics were reported
    """
    if result is None:
        return FAILED_PERFORMANCE

    performance = 0.5
    if result.success:
        performance += 0.2
    if result.insights:
        performance += min(0.3, len(result.insights) * 0.1)
    if result.value:
        performance += float(result.value) * 0.2
    if result.learning_metrics:
        performance += 0.1

    return max(0.1, min(1.0, performance))


@dataclass
class ExecutionReport:
    """What happened when a selected task ran."""
    task_type: str
    result: Optional[TaskResult] = None
    execution_time: float = 0.0
    actual_performance: float = FAILED_PERFORMANCE
    error: Optional[ExecutionError] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task_type": self.task_type,
            "result": self.result.to_dict() if self.result else None,
            "execution_time": self.execution_time,
            "actual_performance": self.actual_performance,
            "error": str(self.error) if self.error else None,
        }


class TaskExecutor:
    """Instantiates and runs selected tasks."""

    def __init__(self, catalog: TaskCatalog, thread_pool: ThreadPoolExecutor):
        self.catalog = catalog
        self.thread_pool = thread_pool

    async def _run(self, task) -> Any:
        if inspect.iscoroutinefunction(task.run):
            return await task.run()
        loop = asyncio.get_running_loop()
        raw = await loop.run_in_executor(self.thread_pool, task.run)
        if inspect.isawaitable(raw):
            raw = await raw
        return raw

    async def execute(self, state: SelectorState, evaluation: Evaluation) -> ExecutionReport:
        """
        Run the task chosen for ``state``'s agent.

        Never raises; failures are returned as a report carrying an ExecutionError.
        """
        task_type = evaluation.task_type
        started = time.perf_counter()
        log_background_task(task_type, "started", agent_id=state.agent_id)

        try:
            try:
                task = self.catalog.instantiate(task_type, state.agent_id, evaluation.metadata)
                result = TaskResult.coerce(await self._run(task))
            except ExecutionError:
                raise
            except Exception as e:
                raise ExecutionError(f"{task_type} failed: {e}") from e
        except ExecutionError as error:
            duration = time.perf_counter() - started
            e = error.__cause__ or error
            logger.error(f"[TaskExecutor] {state.agent_id} task {task_type} failed: {e}")
            log_background_task(task_type, "failed", duration, agent_id=state.agent_id, error=str(e))
            return ExecutionReport(task_type=task_type, execution_time=duration, error=error)

        duration = time.perf_counter() - started
        performance = calculate_actual_performance(result)
        log_background_task(task_type, "completed", duration, agent_id=state.agent_id,
                            actual_performance=round(performance, 3))
        return ExecutionReport(task_type=task_type, result=result, execution_time=duration,
                               actual_performance=performance)
