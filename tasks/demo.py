#!/usr/bin/env python3
"""
Simulated background tasks for the configured catalog.

Used by ``main.py run`` and the demo script so the engine can be exercised
without any real research or analysis backends.
"""

import asyncio
import random
from typing import Any, Dict, Iterable, Optional

from config.settings import get_config

from .base import BackgroundTask, TaskResult
from .catalog import TaskCatalog

# Self-reported value scores of the simulated tasks
DEMO_VALUE_SCORES = {
    "learn_from_others": 0.7,
    "mev_competitor_analysis": 0.6,
    "enhanced_mev_competitor_intelligence": 0.8,
    "newsletter_analysis": 0.4,
    "enhanced_priority_fee_analysis": 0.65,
    "enhanced_twitter_crypto_analysis": 0.5,
}


class SimulatedTask(BackgroundTask):
    """Sleeps briefly and reports a randomized outcome."""

    task_type = "simulated"
    value_score = 0.5
    duration = 0.05
    failure_rate = 0.1

    def get_metadata(self) -> Dict[str, Any]:
        return {
            "id": f"{self.task_type}_task",
            "name": self.task_type.replace("_", " ").title(),
            "value_score": self.value_score,
        }

    async def run(self) -> TaskResult:
        await asyncio.sleep(self.duration)
        if random.random() < self.failure_rate:
            return TaskResult(success=False, insights=[], value=0.0)
        insight_count = random.randint(0, 4)
        return TaskResult(
            success=True,
            insights=[f"{self.task_type} insight {i + 1}" for i in range(insight_count)],
            value=round(random.uniform(0.2, 1.0) * self.value_score, 3),
            learning_metrics={"patterns": insight_count} if insight_count > 2 else None,
        )


def simulated_task_class(task_type: str, value_score: float = 0.5, duration: float = 0.05,
                         failure_rate: float = 0.1) -> type:
    """Build a SimulatedTask subclass for one task type."""
    class_name = "".join(part.title() for part in task_type.split("_")) + "Task"
    return type(class_name, (SimulatedTask,), {
        "task_type": task_type,
        "value_score": value_score,
        "duration": duration,
        "failure_rate": failure_rate,
    })


def build_demo_catalog(entries: Optional[Iterable[Dict[str, Any]]] = None,
                       duration: float = 0.05, failure_rate: float = 0.1) -> TaskCatalog:
    """Catalog of the configured descriptors backed by simulated tasks."""
    entries = list(entries if entries is not None else get_config().get("task_catalog", []))
    factories = {
        entry["type"]: simulated_task_class(
            entry["type"], DEMO_VALUE_SCORES.get(entry["type"], 0.5), duration, failure_rate
        )
        for entry in entries
    }
    return TaskCatalog.from_config(entries, factories)
