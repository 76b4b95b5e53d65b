#!/usr/bin/env python3
"""
Interfaces of the external collaborators the selection engine talks to.

The engine only relies on the method names below; implementations may be
plain objects (duck typed) and any method may be sync or async.
"""

import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if the collaborator returned an awaitable."""
    if inspect.isawaitable(value):
        return await value
    return value


class ValueEstimator(ABC):
    """Learned opportunity-scoring backend."""

    @abstractmethod
    def evaluate_opportunity(self, metadata: Any, context: Dict[str, Any]) -> float:
        """Return an opportunity value in [0, 1]. May raise."""

    def update_from_outcome(self, outcome: Dict[str, Any]) -> None:
        """Optional: learn from a (state, action, reward, next_state) outcome."""


class RewardProjectionEngine(ABC):
    """Reward/penalty accounting system."""

    @abstractmethod
    def project_reward(self, agent_id: str, metadata: Any, context: Dict[str, Any]) -> Dict[str, Any]:
        """Return ``{"expected_reward": float, "breakdown": dict}``. May raise."""

    @abstractmethod
    def record_outcome(self, agent_id: str, outcome: Dict[str, Any]) -> None:
        """Receive ``{task_type, success, value, insights}`` after an execution."""


class AwarenessAdvisor(ABC):
    """Decision-awareness meta reasoning."""

    @abstractmethod
    def assess_decision(self, agent_id: str, candidate_context: Dict[str, Any],
                        meta: Dict[str, Any]) -> Dict[str, Any]:
        """Return ``{"recommendation": "PROCEED"|other, "confidence": float}``."""


class LearningMetricsSink(ABC):
    """Adaptive learning engine."""

    @abstractmethod
    def update_metrics(self, agent_id: str, learning_metrics: Dict[str, Any]) -> None:
        """Receive the learning metrics reported by a task."""


@dataclass
class TaskCompletedEvent:
    """Emitted after a selected task finished."""
    agent_id: str
    task_type: str
    results: Dict[str, Any]
    execution_time: float
    actual_performance: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TaskFailedEvent:
    """Emitted after a selected task raised."""
    agent_id: str
    task_type: str
    error: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class SelectionObserver:
    """
    Subscriber for engine notifications.

    Subclass and override what you need; both hooks may be coroutines.
    """

    def on_task_completed(self, event: TaskCompletedEvent) -> Optional[Any]:
        return None

    def on_task_failed(self, event: TaskFailedEvent) -> Optional[Any]:
        return None
