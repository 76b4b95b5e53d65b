#!/usr/bin/env python3
"""
Autonomous Task Selection Demo

Walks through single selection cycles with hand-written tasks and learning
collaborators: personality-driven scoring, threshold rejection, cooldowns,
failure handling and outcome feedback.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from agents.collaborators import (
    AwarenessAdvisor,
    LearningMetricsSink,
    RewardProjectionEngine,
    SelectionObserver,
)
from agents.task_selector import AutonomousTaskSelector
from config.selector_config import load_selector_config
from tasks.base import (
    BackgroundTask,
    RiskLevel,
    TaskCategory,
    TaskDescriptor,
    TaskPriority,
    TaskResult,
)
from tasks.catalog import TaskCatalog


class FeeAnalysisTask(BackgroundTask):
    """Synchronous task; runs on the engine's thread pool."""

    def get_metadata(self):
        return {"name": "Priority Fee Analysis", "priority": "high", "value_score": 0.8}

    def run(self):
        return {"success": True, "insights": ["fees spike at block start", "tips cluster"],
                "value": 0.7, "learning_metrics": {"fee_patterns": 2}}


class CompetitorScanTask(BackgroundTask):
    """Asynchronous task that always fails."""

    def get_metadata(self):
        return {"priority": "critical", "value_score": 0.9}

    async def run(self):
        await asyncio.sleep(0.01)
        raise ConnectionError("competitor feed unavailable")


class NewsletterTask(BackgroundTask):
    """Uses the default metadata derived from its descriptor."""

    async def run(self):
        return TaskResult(success=True, insights=["new L2 launch"], value=0.3)


class DemoRewardEngine(RewardProjectionEngine):
    def __init__(self):
        self.outcomes = []

    def project_reward(self, agent_id, metadata, context):
        return {"expected_reward": 0.6 + 0.3 * metadata.value_score,
                "breakdown": {"value": metadata.value_score}}

    def record_outcome(self, agent_id, outcome):
        self.outcomes.append((agent_id, outcome))


class DemoAwareness(AwarenessAdvisor):
    async def assess_decision(self, agent_id, candidate_context, meta):
        evaluation = candidate_context["task_selection"]
        if evaluation.descriptor.risk_level == RiskLevel.HIGH:
            return {"recommendation": "RECONSIDER", "confidence": 0.6}
        return {"recommendation": "PROCEED", "confidence": 0.9}


class DemoLearning(LearningMetricsSink):
    def update_metrics(self, agent_id, learning_metrics):
        print(f"   🧠 learning metrics for {agent_id}: {learning_metrics}")


class PrintingObserver(SelectionObserver):
    def on_task_completed(self, event):
        print(f"   ✅ {event.task_type} finished (performance {event.actual_performance:.2f})")

    def on_task_failed(self, event):
        print(f"   ❌ {event.task_type} failed: {event.error}")


def build_catalog() -> TaskCatalog:
    catalog = TaskCatalog()
    catalog.register(TaskDescriptor("enhanced_priority_fee_analysis", TaskCategory.PERFORMANCE_OPTIMIZATION,
                                    TaskPriority.HIGH, "10-20 minutes", RiskLevel.LOW), FeeAnalysisTask)
    catalog.register(TaskDescriptor("mev_competitor_analysis", TaskCategory.COMPETITION_ANALYSIS,
                                    TaskPriority.HIGH, "15-25 minutes", RiskLevel.HIGH), CompetitorScanTask)
    catalog.register(TaskDescriptor("newsletter_analysis", TaskCategory.MARKET_INTELLIGENCE,
                                    TaskPriority.MEDIUM, "5-15 minutes", RiskLevel.LOW), NewsletterTask)
    return catalog


async def demo_cycles():
    """Run a handful of cycles with a simulated clock"""
    print("🎯 Autonomous Task Selection Demo")
    print("=" * 50)

    now = [1_000_000.0]
    engine = AutonomousTaskSelector(catalog=build_catalog(), config=load_selector_config(),
                                    clock=lambda: now[0])
    reward_engine = DemoRewardEngine()
    engine.connect_learning_systems(reward_engine=reward_engine, awareness_advisor=DemoAwareness(),
                                    adaptive_learning=DemoLearning())
    engine.subscribe(PrintingObserver())

    engine.register_agent("speed-demon", {
        "profile": {"name": "SpeedDemon"},
        "decision_making": {"risk_profile": "HIGH_REWARD_AGGRESSIVE"},
        "strategic_weights": {"execution_speed": 1.4, "competitive_advantage": 1.3},
    })
    engine.register_agent("guardian", {
        "decision_making": {"risk_profile": "CONSERVATIVE", "time_horizon": "LONG_TERM"},
    })

    for step in range(4):
        print(f"\n⏱️ t+{step * 10} minutes")
        for agent_id in ("speed-demon", "guardian"):
            result = await engine.run_selection_cycle(agent_id)
            if result.started_execution:
                selected = result.outcome.selected
                print(f"   🤖 {agent_id} → {selected.task_type} (score {selected.final_score:.3f})")
                await result.execution
            else:
                print(f"   🤔 {agent_id} → no action ({result.outcome.reason})")
        now[0] += 600

    print(f"\n📊 Status: {engine.get_selector_status()}")
    print(f"💰 Outcomes forwarded to reward engine: {len(reward_engine.outcomes)}")
    await engine.shutdown()


def main():
    """Run the demo"""
    try:
        asyncio.run(demo_cycles())
        print("\n🎉 Demo completed successfully!")
    except Exception as e:
        print(f"❌ Demo failed: {e}")
        import traceback
        traceback.print_exc()


if __name__ == "__main__":
    main()
