#!/usr/bin/env python3
"""
Tests for per-agent selector state: task history, decision log bounds and
recent performance.
"""

import unittest

from agents.selector_state import Decision, DecisionKind, TaskHistoryEntry
from tests.utils.fakes import make_state


class TestTaskHistoryEntry(unittest.TestCase):
    """Test TaskHistoryEntry statistics."""

    def test_fresh_entry_defaults(self):
        entry = TaskHistoryEntry()
        self.assertEqual(entry.executions, 0)
        self.assertEqual(entry.avg_success, 0.5)
        self.assertEqual(entry.avg_performance, 0.5)
        self.assertIsNone(entry.last_execution)

    def test_record_updates_averages(self):
        entry = TaskHistoryEntry()
        entry.record(True, 0.8, 100.0)
        entry.record(False, 0.4, 200.0)

        self.assertEqual(entry.executions, 2)
        self.assertEqual(entry.successes, 1)
        self.assertAlmostEqual(entry.avg_success, 0.5)
        self.assertAlmostEqual(entry.avg_performance, 0.6)
        self.assertEqual(entry.last_execution, 200.0)

    def test_avg_success_matches_ratio(self):
        entry = TaskHistoryEntry()
        outcomes = [True, True, False, True, False, False, True]
        for i, success in enumerate(outcomes):
            entry.record(success, 0.5, float(i))
            self.assertAlmostEqual(entry.avg_success, entry.successes / entry.executions)

    def test_snapshot_includes_avg_success(self):
        entry = TaskHistoryEntry()
        entry.record(True, 0.9, 10.0)
        snapshot = entry.snapshot()
        self.assertEqual(snapshot["avg_success"], 1.0)
        self.assertEqual(snapshot["last_execution"], 10.0)


class TestSelectorState(unittest.TestCase):
    """Test SelectorState bookkeeping."""

    def test_history_for_does_not_create_entries(self):
        state = make_state()
        entry = state.history_for("newsletter_analysis")
        self.assertEqual(entry.executions, 0)
        self.assertNotIn("newsletter_analysis", state.task_history)

    def test_entry_for_update_creates_once(self):
        state = make_state()
        first = state.entry_for_update("newsletter_analysis")
        second = state.entry_for_update("newsletter_analysis")
        self.assertIs(first, second)

    def test_time_since_last_run(self):
        state = make_state()
        self.assertEqual(state.time_since_last_run("learn_from_others", 500.0), float("inf"))

        state.entry_for_update("learn_from_others").record(True, 0.7, 200.0)
        self.assertEqual(state.time_since_last_run("learn_from_others", 500.0), 300.0)

    def test_decision_history_is_bounded(self):
        state = make_state(max_decision_history=3)
        for i in range(5):
            state.append_decision(Decision(timestamp=float(i), agent_id="agent-1", kind=DecisionKind.NO_ACTION))

        self.assertEqual(len(state.decision_history), 3)
        self.assertEqual([d.timestamp for d in state.decision_history], [2.0, 3.0, 4.0])
        self.assertEqual(state.max_decision_history, 3)

    def test_recent_performance_defaults_to_neutral(self):
        state = make_state()
        self.assertEqual(state.recent_performance(), 0.5)

        state.append_decision(Decision(timestamp=1.0, agent_id="agent-1", kind=DecisionKind.NO_ACTION))
        self.assertEqual(state.recent_performance(), 0.5)

    def test_recent_performance_uses_last_ten_executions(self):
        state = make_state()
        for i in range(12):
            state.append_decision(Decision(
                timestamp=float(i), agent_id="agent-1", kind=DecisionKind.EXECUTE_TASK,
                actual_performance=0.1 if i < 2 else 0.9,
            ))
        state.append_decision(Decision(timestamp=13.0, agent_id="agent-1", kind=DecisionKind.TASK_FAILED,
                                       actual_performance=0.1))

        # last ten executed decisions: nine at 0.9 and one failure at 0.1
        self.assertAlmostEqual(state.recent_performance(), (9 * 0.9 + 0.1) / 10)

    def test_historical_performance_view(self):
        state = make_state()
        state.entry_for_update("learn_from_others").record(False, 0.1, 50.0)
        view = state.historical_performance("learn_from_others")
        self.assertEqual(view["executions"], 1)
        self.assertEqual(view["avg_success"], 0.0)
        self.assertEqual(view["last_execution"], 50.0)

    def test_to_dict(self):
        state = make_state()
        data = state.to_dict()
        self.assertEqual(data["agent_id"], "agent-1")
        self.assertEqual(data["personality"]["risk_profile"], "CALCULATED_AGGRESSIVE")
        self.assertFalse(data["execution_in_flight"])


class TestDecision(unittest.TestCase):
    """Test Decision serialization."""

    def test_to_dict_drops_unset_fields(self):
        decision = Decision(timestamp=1.0, agent_id="a", kind=DecisionKind.NO_ACTION,
                            available_tasks=3, best_task_score=0.2, reason="no candidates")
        data = decision.to_dict()
        self.assertEqual(data["kind"], "NO_ACTION")
        self.assertEqual(data["available_tasks"], 3)
        self.assertNotIn("task_type", data)
        self.assertNotIn("error", data)


if __name__ == '__main__':
    unittest.main()
