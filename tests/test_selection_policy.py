#!/usr/bin/env python3
"""
Tests for the selection policy: ranking, acceptance thresholds and cooldowns.
"""

import unittest

from agents.personality_engine import RiskProfile
from agents.selection_policy import SelectionPolicy, SelectionStage
from config.selector_config import load_selector_config
from tests.utils.fakes import make_evaluation, make_state

NOW = 1_000_000.0
MINUTE = 60.0


class TestSelectionPolicy(unittest.TestCase):
    """Test SelectionPolicy.select."""

    def setUp(self):
        self.policy = SelectionPolicy(load_selector_config())

    def test_no_candidates(self):
        outcome = self.policy.select([], make_state(), NOW)
        self.assertEqual(outcome.stage, SelectionStage.REJECTED)
        self.assertEqual(outcome.rejected_at, SelectionStage.CANDIDATES_RANKED)
        self.assertEqual(outcome.reason, "no candidates")
        self.assertIsNone(outcome.best)

    def test_ranks_by_final_score(self):
        evaluations = [
            make_evaluation("newsletter_analysis", 0.45),
            make_evaluation("learn_from_others", 0.9),
            make_evaluation("mev_competitor_analysis", 0.6),
        ]
        outcome = self.policy.select(evaluations, make_state(), NOW)
        self.assertEqual([e.task_type for e in outcome.ranked],
                         ["learn_from_others", "mev_competitor_analysis", "newsletter_analysis"])
        self.assertTrue(outcome.accepted)
        self.assertEqual(outcome.selected.task_type, "learn_from_others")

    def test_conservative_agent_picks_eligible_candidate(self):
        state = make_state(risk_profile=RiskProfile.CONSERVATIVE)
        evaluations = [
            make_evaluation("newsletter_analysis", 0.55),
            make_evaluation("learn_from_others", 0.72),
        ]
        outcome = self.policy.select(evaluations, state, NOW)
        self.assertEqual(outcome.stage, SelectionStage.ACCEPTED)
        self.assertEqual(outcome.selected.task_type, "learn_from_others")
        self.assertEqual(outcome.threshold, 0.6)

    def test_conservative_threshold_rejects(self):
        state = make_state(risk_profile=RiskProfile.CONSERVATIVE)
        outcome = self.policy.select([make_evaluation("learn_from_others", 0.55)], state, NOW)
        self.assertEqual(outcome.stage, SelectionStage.REJECTED)
        self.assertEqual(outcome.rejected_at, SelectionStage.THRESHOLD_CHECK)

    def test_aggressive_threshold(self):
        aggressive = make_state(risk_profile=RiskProfile.HIGH_REWARD_AGGRESSIVE)
        moderate = make_state(risk_profile=RiskProfile.MODERATE)
        evaluations = [make_evaluation("learn_from_others", 0.3)]

        self.assertTrue(self.policy.select(evaluations, aggressive, NOW).accepted)
        outcome = self.policy.select(evaluations, moderate, NOW)
        self.assertFalse(outcome.accepted)
        self.assertEqual(outcome.threshold, 0.4)

    def test_selected_score_meets_threshold(self):
        for profile in RiskProfile:
            state = make_state(risk_profile=profile)
            for score in (0.1, 0.26, 0.41, 0.61, 0.9):
                outcome = self.policy.select([make_evaluation("learn_from_others", score)], state, NOW)
                if outcome.accepted:
                    self.assertGreaterEqual(outcome.selected.final_score, outcome.threshold)

    def test_cooldown_blocks_recently_run_best_task(self):
        state = make_state()
        state.entry_for_update("learn_from_others").record(True, 0.9, NOW - 5 * MINUTE)
        evaluations = [
            make_evaluation("learn_from_others", 0.95),
            make_evaluation("newsletter_analysis", 0.8),
        ]
        outcome = self.policy.select(evaluations, state, NOW)

        self.assertEqual(outcome.stage, SelectionStage.REJECTED)
        self.assertEqual(outcome.rejected_at, SelectionStage.COOLDOWN_CHECK)
        self.assertIsNone(outcome.selected)

    def test_cooldown_expires(self):
        state = make_state()
        state.entry_for_update("learn_from_others").record(True, 0.9, NOW - 21 * MINUTE)
        outcome = self.policy.select([make_evaluation("learn_from_others", 0.95)], state, NOW)
        self.assertTrue(outcome.accepted)

    def test_unknown_type_uses_minimum_interval(self):
        state = make_state()
        state.entry_for_update("custom_task").record(True, 0.9, NOW - 10 * MINUTE)
        evaluations = [make_evaluation("custom_task", 0.95)]
        self.assertFalse(self.policy.select(evaluations, state, NOW).accepted)

        state.entry_for_update("custom_task").last_execution = NOW - 16 * MINUTE
        self.assertTrue(self.policy.select(evaluations, state, NOW).accepted)

    def test_does_not_mutate_state(self):
        state = make_state()
        before = state.to_dict()
        self.policy.select([make_evaluation("learn_from_others", 0.9)], state, NOW)
        self.assertEqual(state.to_dict(), before)
        self.assertEqual(len(state.decision_history), 0)


if __name__ == '__main__':
    unittest.main()
