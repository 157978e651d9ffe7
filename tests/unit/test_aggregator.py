"""
Unit tests for QuerySession and RankingAggregator.
"""

import threading
import unittest

from actionsearch.aggregator import QuerySession, RankingAggregator
from actionsearch.config import ActionSearchConfig
from actionsearch.observability import MetricsCollector
from actionsearch.rendering import RecordingRenderer
from actionsearch.types import Action, App, Noun, ScoredAction, Suggestion

CALL = Action(names=("call",), params=("contact",), caption="Call %")
PHONE = App(id="phone", actions=(CALL,))


def scored(score, noun="Jane Doe"):
    return ScoredAction(
        app=PHONE,
        action=CALL,
        input=Noun(type="contact", serialized=noun),
        input_type="contact",
        score=score,
    )


def scores(actions):
    return [a.score for a in actions]


def names(suggestions):
    return [(s.serialized_noun, s.score) for s in suggestions]


# =============================================================================
# QUERY SESSION
# =============================================================================

class TestQuerySession(unittest.TestCase):
    """Tests for the per-query ranking state."""

    def test_sorted_descending(self):
        session = QuerySession(1, max_results=10)
        for score in (0.5, 2.0, 1.0, 1.5):
            session.insert(scored(score))
        self.assertEqual(scores(session.top_results), [2.0, 1.5, 1.0, 0.5])

    def test_insert_returns_rank(self):
        session = QuerySession(1, max_results=10)
        self.assertEqual(session.insert(scored(1.0)), 0)
        self.assertEqual(session.insert(scored(2.0)), 0)
        self.assertEqual(session.insert(scored(0.5)), 2)

    def test_ties_keep_arrival_order(self):
        session = QuerySession(1, max_results=10)
        for noun in ("a", "b", "c"):
            session.insert(scored(1.0, noun))
        self.assertEqual([a.input.serialized for a in session.top_results], ["a", "b", "c"])

    def test_cap_keeps_best(self):
        """Test that the lowest result is evicted once the cap is reached."""
        session = QuerySession(1, max_results=3)
        for score in (1.0, 2.0, 3.0, 4.0, 0.5):
            session.insert(scored(score))
        self.assertEqual(scores(session.top_results), [4.0, 3.0, 2.0])
        self.assertEqual(len(session), 3)

    def test_insert_below_cap_not_retained(self):
        session = QuerySession(1, max_results=2)
        session.insert(scored(2.0))
        session.insert(scored(1.0))
        self.assertIsNone(session.insert(scored(0.5)))
        self.assertIsNone(session.insert(scored(1.0)))

    def test_within_top(self):
        session = QuerySession(1, max_results=10)
        session.insert(scored(3.0))
        self.assertTrue(session.within_top(0.1, 2))
        session.insert(scored(2.0))
        session.insert(scored(1.0))
        self.assertTrue(session.within_top(2.0, 2))
        self.assertFalse(session.within_top(1.0, 2))

    def test_offer_suggestion_sorted_and_capped(self):
        session = QuerySession(1, max_results=10)
        self.assertTrue(session.offer_suggestion(Suggestion("a", 10), 2))
        self.assertTrue(session.offer_suggestion(Suggestion("b", 8), 2))
        self.assertTrue(session.offer_suggestion(Suggestion("c", 9), 2))
        self.assertEqual(names(session.suggestions), [("a", 10), ("c", 9)])

    def test_offer_suggestion_too_low(self):
        session = QuerySession(1, max_results=10)
        session.offer_suggestion(Suggestion("a", 10), 2)
        session.offer_suggestion(Suggestion("b", 8), 2)
        self.assertFalse(session.offer_suggestion(Suggestion("c", 1), 2))

    def test_equal_score_goes_first(self):
        session = QuerySession(1, max_results=10)
        session.offer_suggestion(Suggestion("a", 5), 2)
        session.offer_suggestion(Suggestion("b", 5), 2)
        self.assertEqual(names(session.suggestions), [("b", 5), ("a", 5)])

    def test_duplicate_noun_not_repeated(self):
        """Test a noun reached through several actions is suggested once."""
        session = QuerySession(1, max_results=10)
        session.offer_suggestion(Suggestion("a", 5), 2)
        self.assertFalse(session.offer_suggestion(Suggestion("a", 5), 2))
        self.assertFalse(session.offer_suggestion(Suggestion("a", 4), 2))
        self.assertEqual(names(session.suggestions), [("a", 5)])

    def test_duplicate_noun_upgraded(self):
        session = QuerySession(1, max_results=10)
        session.offer_suggestion(Suggestion("b", 7), 2)
        session.offer_suggestion(Suggestion("a", 5), 2)
        self.assertTrue(session.offer_suggestion(Suggestion("a", 9), 2))
        self.assertEqual(names(session.suggestions), [("a", 9), ("b", 7)])


# =============================================================================
# RANKING AGGREGATOR
# =============================================================================

class TestRankingAggregator(unittest.TestCase):
    """Tests for RankingAggregator."""

    def setUp(self):
        self.renderer = RecordingRenderer()
        self.aggregator = RankingAggregator(renderer=self.renderer)
        self.aggregator.reset(1)

    def test_starts_empty(self):
        aggregator = RankingAggregator()
        self.assertEqual(aggregator.generation, 0)
        self.assertEqual(aggregator.top_results, [])
        self.assertEqual(aggregator.top_suggestions, [])

    def test_accept_renders_full_list(self):
        """Test the renderer always gets the full current list, not a diff."""
        self.aggregator.accept(1, scored(1.0, "a"))
        self.aggregator.accept(1, scored(2.0, "b"))
        self.assertEqual([a.input.serialized for a in self.renderer.results], ["b", "a"])

    def test_suggestions_scenario(self):
        """Test 10, 8 then 9 leaves suggestions [10, 9]."""
        self.aggregator.accept(1, scored(10, "ten"))
        self.aggregator.accept(1, scored(8, "eight"))
        self.assertEqual(names(self.aggregator.top_suggestions), [("ten", 10), ("eight", 8)])

        self.aggregator.accept(1, scored(9, "nine"))
        self.assertEqual(names(self.aggregator.top_suggestions), [("ten", 10), ("nine", 9)])
        self.assertEqual(names(self.renderer.suggestions), [("ten", 10), ("nine", 9)])

    def test_suggestion_must_rank_in_top(self):
        """Test a low-ranked action cannot displace a suggestion."""
        self.aggregator.accept(1, scored(10, "a"))
        self.aggregator.accept(1, scored(9, "a"))
        self.aggregator.accept(1, scored(8, "b"))
        self.assertEqual(names(self.aggregator.top_suggestions), [("a", 10)])

    def test_rendered_results_capped(self):
        config = ActionSearchConfig(max_results_retained=10, max_results_rendered=3)
        aggregator = RankingAggregator(renderer=self.renderer, config=config)
        for score in range(8):
            aggregator.accept(0, scored(float(score)))

        self.assertEqual(len(aggregator.top_results), 8)
        self.assertEqual(scores(aggregator.rendered_results), [7.0, 6.0, 5.0])
        self.assertEqual(scores(self.renderer.results), [7.0, 6.0, 5.0])

    def test_insert_below_render_cap_does_not_render(self):
        config = ActionSearchConfig(max_results_retained=10, max_results_rendered=1)
        aggregator = RankingAggregator(renderer=self.renderer, config=config)
        aggregator.accept(0, scored(2.0))
        before = len(self.renderer.events)
        aggregator.accept(0, scored(1.0, "John Smith"))
        self.assertEqual(
            [kind for kind, _ in self.renderer.events[before:]], ["suggestions"]
        )

    def test_retention_cap(self):
        config = ActionSearchConfig(max_results_retained=100)
        aggregator = RankingAggregator(config=config)
        for i in range(150):
            aggregator.accept(0, scored(i / 150))
        self.assertEqual(len(aggregator.top_results), 100)
        self.assertEqual(aggregator.top_results[0].score, 149 / 150)
        self.assertEqual(aggregator.top_results[-1].score, 50 / 150)

    def test_reset_clears_everything(self):
        self.aggregator.accept(1, scored(1.0))
        self.aggregator.reset(2)
        self.assertEqual(self.aggregator.top_results, [])
        self.assertEqual(self.aggregator.top_suggestions, [])
        self.assertEqual(self.renderer.clear_count, 2)
        self.assertEqual(self.renderer.results, [])

    def test_reset_without_clear(self):
        self.aggregator.reset(2, clear=False)
        self.assertEqual(self.renderer.clear_count, 1)

    def test_reset_is_idempotent(self):
        """Test that repeated resets leave the same empty state."""
        self.aggregator.reset(2)
        self.aggregator.reset(3)
        self.assertEqual(self.aggregator.top_results, [])
        self.assertEqual(self.aggregator.generation, 3)

    def test_reset_marks_old_session_superseded(self):
        old = self.aggregator.session
        new = self.aggregator.reset(2)
        self.assertTrue(old.superseded)
        self.assertFalse(new.superseded)

    def test_stale_action_ignored(self):
        """Test an action of a superseded generation changes nothing."""
        self.aggregator.reset(2)
        events = len(self.renderer.events)

        self.assertFalse(self.aggregator.accept(1, scored(5.0)))
        self.assertEqual(self.aggregator.top_results, [])
        self.assertEqual(self.aggregator.top_suggestions, [])
        self.assertEqual(len(self.renderer.events), events)

    def test_unretained_action_still_accepted(self):
        aggregator = RankingAggregator(config=ActionSearchConfig(max_results_retained=1, max_results_rendered=1))
        aggregator.accept(0, scored(2.0))
        self.assertTrue(aggregator.accept(0, scored(1.0)))
        self.assertEqual(scores(aggregator.top_results), [2.0])

    def test_metrics_counts(self):
        metrics = MetricsCollector()
        aggregator = RankingAggregator(metrics=metrics)
        aggregator.accept(0, scored(1.0))
        aggregator.reset(1)
        aggregator.accept(0, scored(1.0))

        self.assertEqual(metrics.get_count('actions_accepted'), 1)
        self.assertEqual(metrics.get_count('stale_actions_dropped'), 1)
        self.assertEqual(metrics.get_count('resets'), 1)

    def test_concurrent_feeders(self):
        """Test inserts from several threads are all ranked."""
        aggregator = RankingAggregator(config=ActionSearchConfig(max_results_retained=1000))

        def feed(offset):
            for i in range(100):
                aggregator.accept(0, scored(offset + i / 1000))

        threads = [threading.Thread(target=feed, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        results = scores(aggregator.top_results)
        self.assertEqual(len(results), 400)
        self.assertEqual(results, sorted(results, reverse=True))


if __name__ == '__main__':
    unittest.main()
