"""
Unit tests for fuzzy pattern building, matching and scoring.
"""

import re
import unittest

from actionsearch.errors import MatchProviderFailure
from actionsearch.fuzzy import (
    FuzzyMatcher,
    join_terms,
    leading_noun_pattern,
    prefix_pattern,
)

NAMES = ["Jane Doe", "John Smith", "Janet Jackson", "Radiohead"]


def identity(text):
    return text


class TestPatternBuilders(unittest.TestCase):
    """Tests for join_terms / prefix_pattern / leading_noun_pattern."""

    def test_join_single_term(self):
        self.assertEqual(join_terms(["jane"]), "jane")

    def test_join_terms_matches_word_prefixes(self):
        """Test that 'ja do' reaches across the rest of a word and a gap."""
        pattern = re.compile(join_terms(["ja", "do"]), re.IGNORECASE)
        self.assertEqual(pattern.search("Jane Doe").group(0), "Jane Do")
        self.assertIsNone(pattern.search("Jane Smith"))

    def test_join_escapes_metacharacters(self):
        """Test that query punctuation is matched literally."""
        pattern = join_terms(["a+b", "(c"])
        re.compile(pattern)
        self.assertTrue(re.search(pattern, "a+b (c"))
        self.assertIsNone(re.search(pattern, "aab c"))

    def test_prefix_pattern_anchored(self):
        pattern = prefix_pattern("ca")
        self.assertTrue(re.search(pattern, "call"))
        self.assertIsNone(re.search(pattern, "scan"))

    def test_leading_noun_pattern_single_term(self):
        """Test that a lone verb leaves an empty noun pattern."""
        self.assertEqual(leading_noun_pattern(["call"]), "")

    def test_leading_noun_pattern_one_noun_term(self):
        pattern = leading_noun_pattern(["call", "jane"])
        self.assertEqual(re.search(pattern, "Jane Doe", re.I).group(0), "Jane")

    def test_leading_noun_pattern_two_noun_terms(self):
        pattern = leading_noun_pattern(["call", "jane", "do"])
        self.assertEqual(re.search(pattern, "Jane Doe", re.I).group(0), "Jane Doe")

    def test_second_noun_term_is_optional(self):
        """Test that a non-matching third term does not block the match."""
        pattern = leading_noun_pattern(["text", "jane", "hello"])
        self.assertEqual(re.search(pattern, "Jane Doe", re.I).group(0), "Jane")

    def test_lookahead_one_ignores_third_term(self):
        pattern = leading_noun_pattern(["call", "jane", "doe"], lookahead=1)
        self.assertEqual(re.search(pattern, "Jane Doe", re.I).group(0), "Jane")

    def test_terms_beyond_lookahead_never_used(self):
        pattern = leading_noun_pattern(["call", "jane", "doe", "smith"])
        self.assertNotIn("smith", pattern)


class TestFuzzyMatcher(unittest.TestCase):
    """Tests for FuzzyMatcher.match()."""

    def setUp(self):
        self.matcher = FuzzyMatcher()

    def test_filters_non_matching(self):
        matches = list(self.matcher.match("ja", NAMES, identity))
        self.assertEqual([m.item for m in matches], ["Jane Doe", "Janet Jackson"])

    def test_case_insensitive_by_default(self):
        matches = list(self.matcher.match("JANE", NAMES, identity))
        self.assertEqual(matches[0].item, "Jane Doe")

    def test_case_sensitive(self):
        matcher = FuzzyMatcher(case_sensitive=True)
        self.assertEqual(list(matcher.match("jane", NAMES, identity)), [])

    def test_score_is_coverage(self):
        """Test score = len(matched text) / len(text)."""
        [match] = list(self.matcher.match("jane", ["Jane Doe"], identity))
        self.assertAlmostEqual(match.score, 0.5)

    def test_full_match_scores_one(self):
        [match] = list(self.matcher.match(prefix_pattern("call"), ["call"], identity))
        self.assertEqual(match.score, 1.0)

    def test_first_capture_is_matched_text(self):
        [match] = list(self.matcher.match("doe", ["Jane Doe"], identity))
        self.assertEqual(match.captures[0], "Doe")
        self.assertEqual(match.matched_text, "Doe")

    def test_unmatched_groups_become_empty(self):
        pattern = leading_noun_pattern(["call", "jane", "xyz"]).replace("(?:", "(")
        [match] = list(self.matcher.match(pattern, ["Jane Doe"], identity))
        self.assertEqual(match.captures, ("Jane", ""))

    def test_empty_pattern_matches_everything_with_zero(self):
        matches = list(self.matcher.match("", NAMES, identity))
        self.assertEqual(len(matches), len(NAMES))
        self.assertTrue(all(m.score == 0.0 for m in matches))

    def test_empty_text_scores_zero(self):
        [match] = list(self.matcher.match("", [""], identity))
        self.assertEqual(match.score, 0.0)

    def test_empty_corpus(self):
        self.assertEqual(list(self.matcher.match("jane", [], identity)), [])

    def test_accessor(self):
        records = [{"name": "Jane Doe"}, {"name": "John Smith"}]
        matches = list(self.matcher.match("smith", records, lambda r: r["name"]))
        self.assertEqual(matches[0].item, records[1])

    def test_invalid_pattern_fails_eagerly(self):
        """Test that a bad regex raises before iteration starts."""
        with self.assertRaises(MatchProviderFailure) as ctx:
            self.matcher.match("(", NAMES, identity)
        self.assertEqual(ctx.exception.context["pattern"], "(")

    def test_accessor_error_wrapped(self):
        matches = self.matcher.match("x", [{}], lambda r: r["name"])
        with self.assertRaises(MatchProviderFailure):
            list(matches)

    def test_non_string_accessor_value(self):
        with self.assertRaises(MatchProviderFailure):
            list(self.matcher.match("1", [1], identity))

    def test_score_static(self):
        self.assertEqual(FuzzyMatcher.score("ab", "abcd"), 0.5)
        self.assertEqual(FuzzyMatcher.score("", ""), 0.0)


if __name__ == '__main__':
    unittest.main()
