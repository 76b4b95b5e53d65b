#!/usr/bin/env python3
"""
Tests for reward projection and the decision-awareness filter.
"""

import pytest

from agents.decision_awareness import DecisionAwarenessFilter
from agents.errors import ProjectionError
from agents.reward_projector import RewardProjector
from tests.utils.fakes import FakeAwareness, FakeRewardEngine, make_evaluation

NEUTRAL = {"executions": 0, "avg_success": 0.5, "avg_performance": 0.5, "last_execution": None}


def _evaluation(personality_score=0.6, reward_projection=0.0):
    evaluation = make_evaluation(final_score=0.0, reward_projection=reward_projection)
    evaluation.personality_score = personality_score
    return evaluation


class TestRewardProjector:
    """Test RewardProjector."""

    @pytest.mark.asyncio
    async def test_starts_from_personality_score(self):
        expected, breakdown = await RewardProjector().project("a", _evaluation(), NEUTRAL)
        assert expected == pytest.approx(0.6)
        assert breakdown == {"base": pytest.approx(0.6)}

    @pytest.mark.asyncio
    async def test_historical_bonus(self):
        history = dict(NEUTRAL, avg_success=0.9)
        expected, breakdown = await RewardProjector().project("a", _evaluation(), history)
        assert expected == pytest.approx(0.72)
        assert breakdown["historical_bonus"] == 0.2

    @pytest.mark.asyncio
    async def test_historical_penalty(self):
        history = dict(NEUTRAL, avg_success=0.3)
        expected, breakdown = await RewardProjector().project("a", _evaluation(), history)
        assert expected == pytest.approx(0.42)
        assert breakdown["historical_penalty"] == -0.3

    @pytest.mark.asyncio
    async def test_boundaries_are_exclusive(self):
        for avg_success in (0.8, 0.4):
            expected, breakdown = await RewardProjector().project(
                "a", _evaluation(), dict(NEUTRAL, avg_success=avg_success)
            )
            assert expected == pytest.approx(0.6)
            assert set(breakdown) == {"base"}

    @pytest.mark.asyncio
    async def test_reward_engine_overrides_projection(self):
        engine = FakeRewardEngine({"expected_reward": 0.8, "breakdown": {"model": 0.8}})
        expected, breakdown = await RewardProjector(engine).project("agent-1", _evaluation(), NEUTRAL)

        assert expected == pytest.approx(0.8)
        assert breakdown == {"model": 0.8}
        agent_id, metadata, context = engine.calls[0]
        assert agent_id == "agent-1"
        assert metadata.task_type == "learn_from_others"
        assert context == {"task_type": "learn_from_others", "category": "learning-intelligence"}

    @pytest.mark.asyncio
    async def test_missing_keys_keep_local_values(self):
        engine = FakeRewardEngine({"breakdown": {"model": 1}})
        expected, breakdown = await RewardProjector(engine).project("a", _evaluation(), NEUTRAL)
        assert expected == pytest.approx(0.6)
        assert breakdown == {"model": 1}

    @pytest.mark.asyncio
    async def test_reward_engine_failure_keeps_local_value(self):
        engine = FakeRewardEngine(fail=True)
        expected, breakdown = await RewardProjector(engine).project("a", _evaluation(), NEUTRAL)
        assert expected == pytest.approx(0.6)
        assert breakdown == {"base": pytest.approx(0.6)}

    @pytest.mark.asyncio
    async def test_invalid_projection_raises(self):
        engine = FakeRewardEngine({"expected_reward": "lots"})
        with pytest.raises(ProjectionError):
            await RewardProjector(engine).project("a", _evaluation(), NEUTRAL)

    @pytest.mark.asyncio
    async def test_apply_halves_score_on_projection_error(self):
        engine = FakeRewardEngine({"expected_reward": "lots"})
        evaluation = _evaluation()
        await RewardProjector(engine).apply("a", evaluation, NEUTRAL)

        assert evaluation.reward_projection == pytest.approx(0.3)
        assert "error" in evaluation.reward_breakdown
        assert evaluation.historical_performance == NEUTRAL


class TestDecisionAwarenessFilter:
    """Test DecisionAwarenessFilter."""

    @pytest.mark.asyncio
    async def test_default_awareness(self):
        final, confidence, awareness = await DecisionAwarenessFilter().filter("a", _evaluation(reward_projection=0.8))
        assert final == pytest.approx(0.56)
        assert confidence == 0.7
        assert awareness == {"recommendation": "PROCEED", "confidence": 0.7}

    @pytest.mark.asyncio
    async def test_proceed_uses_confidence(self):
        advisor = FakeAwareness({"recommendation": "PROCEED", "confidence": 0.9})
        final, confidence, _ = await DecisionAwarenessFilter(advisor).filter("a", _evaluation(reward_projection=0.8))
        assert final == pytest.approx(0.72)
        assert confidence == 0.9

    @pytest.mark.asyncio
    async def test_proceed_without_confidence(self):
        advisor = FakeAwareness({"recommendation": "PROCEED"})
        final, confidence, _ = await DecisionAwarenessFilter(advisor).filter("a", _evaluation(reward_projection=0.8))
        assert final == pytest.approx(0.56)
        assert confidence == 0.7

    @pytest.mark.asyncio
    async def test_other_recommendation_is_dampened(self):
        advisor = FakeAwareness({"recommendation": "RECONSIDER", "confidence": 0.6})
        final, confidence, _ = await DecisionAwarenessFilter(advisor).filter("a", _evaluation(reward_projection=0.8))
        assert final == pytest.approx(0.24)
        assert confidence == 0.6

    @pytest.mark.asyncio
    async def test_other_recommendation_without_confidence(self):
        advisor = FakeAwareness({"recommendation": "ABORT"})
        final, _, _ = await DecisionAwarenessFilter(advisor).filter("a", _evaluation(reward_projection=0.8))
        assert final == pytest.approx(0.12)

    @pytest.mark.asyncio
    async def test_advisor_called_with_selection_context(self):
        advisor = FakeAwareness()
        evaluation = _evaluation(reward_projection=0.8)
        await DecisionAwarenessFilter(advisor).filter("agent-9", evaluation)

        agent_id, candidate_context, meta = advisor.calls[0]
        assert agent_id == "agent-9"
        assert candidate_context == {"task_selection": evaluation}
        assert meta == {"decision_type": "background_task_selection"}

    @pytest.mark.asyncio
    async def test_advisor_failure_penalty(self):
        advisor = FakeAwareness(fail=True)
        final, confidence, awareness = await DecisionAwarenessFilter(advisor).filter("a", _evaluation(reward_projection=0.8))
        assert final == pytest.approx(0.64)
        assert confidence == 0.5
        assert "error" in awareness

    @pytest.mark.asyncio
    async def test_apply_sets_final_fields(self):
        evaluation = _evaluation(reward_projection=0.5)
        await DecisionAwarenessFilter().apply("a", evaluation)
        assert evaluation.final_score == pytest.approx(0.35)
        assert evaluation.decision_confidence == 0.7
