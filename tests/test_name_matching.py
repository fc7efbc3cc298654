"""
Tests for word boundaries, the longest-alias matcher and the buffers.
"""

import unittest

from alias_index import AliasIndex
from name_matching import (
    ContextBuffer,
    MentionWindow,
    NameCandidate,
    PendingBuffer,
    ends_with_word,
    find_primary,
    is_word_end,
)


class TestWordRules(unittest.TestCase):

    def test_word_end_after_letter(self):
        self.assertTrue(is_word_end("Jon saw", 3))
        self.assertTrue(is_word_end("Jon's", 3))

    def test_no_word_end_inside_word_or_after_space(self):
        self.assertFalse(is_word_end("Jon saw", 2))
        self.assertFalse(is_word_end("Jon. Sam", 4))
        self.assertFalse(is_word_end("Jon", 0))

    def test_ends_with_whole_word(self):
        self.assertTrue(ends_with_word("Jon saw Sam", "Sam"))
        self.assertTrue(ends_with_word("Sam", "Sam"))
        self.assertTrue(ends_with_word("the Khal Drogo", "Drogo"))
        self.assertTrue(ends_with_word("Jaqen H'ghar", "ghar"))

    def test_partial_word_is_not_a_match(self):
        self.assertFalse(ends_with_word("Jon saw Isam", "Sam"))
        self.assertFalse(ends_with_word("Jon saw Samwell", "Sam"))
        self.assertFalse(ends_with_word("Jon", ""))


class TestFindPrimary(unittest.TestCase):

    def test_longest_alias_wins(self):
        index = AliasIndex({"Drogo": 0, "Khal Drogo": 0, "Dany": 1})
        primary = find_primary("and then Khal Drogo", 19, index.aliases_longest_first())
        self.assertEqual(primary, NameCandidate("Khal Drogo", 19, "and then Khal Drogo"))
        self.assertTrue(primary.is_valid)

    def test_no_match_is_invalid_sentinel(self):
        index = AliasIndex({"Dany": 1})
        primary = find_primary("and then", 8, index.aliases_longest_first())
        self.assertFalse(primary.is_valid)
        self.assertEqual(primary, NameCandidate.invalid())
        self.assertEqual(primary.text, "")
        self.assertEqual(primary.position, -1)


class TestContextBuffer(unittest.TestCase):

    def test_trims_to_radius_plus_two_spaces(self):
        buffer = ContextBuffer(radius=1)
        for c in "a b c d e":
            buffer.append(c)
        self.assertEqual(buffer.text, "b c d e")
        self.assertEqual(buffer.text.count(" "), 3)

    def test_short_context_untouched(self):
        buffer = ContextBuffer(radius=5)
        for c in "Jon saw Sam":
            buffer.append(c)
        self.assertEqual(str(buffer), "Jon saw Sam")


class TestPendingBuffer(unittest.TestCase):

    def test_flushes_on_valid_primary(self):
        pending = PendingBuffer(limit=7)
        self.assertTrue(pending.should_flush(NameCandidate("Jon", 3, "Jon")))
        self.assertFalse(pending.should_flush(NameCandidate.invalid()))

    def test_flushes_when_over_limit(self):
        pending = PendingBuffer(limit=2)
        pending.add(NameCandidate.invalid())
        pending.add(NameCandidate.invalid())
        self.assertFalse(pending.should_flush(NameCandidate.invalid()))
        pending.add(NameCandidate.invalid())
        self.assertTrue(pending.should_flush(NameCandidate.invalid()))

    def test_drain_is_oldest_first_and_empties(self):
        pending = PendingBuffer()
        first = NameCandidate("Jon", 3, "Jon")
        second = NameCandidate.invalid()
        pending.add(first)
        pending.add(second)
        self.assertEqual(list(pending.drain()), [first, second])
        self.assertEqual(len(pending), 0)
        self.assertFalse(pending)

    def test_negative_limit_rejected(self):
        with self.assertRaises(ValueError):
            PendingBuffer(limit=-1)


class TestMentionWindow(unittest.TestCase):

    def test_evicts_oldest_beyond_capacity(self):
        window = MentionWindow(2)
        self.assertIsNone(window.push("Jon"))
        self.assertIsNone(window.push(""))
        self.assertEqual(window.push("Sam"), "Jon")
        self.assertEqual(window.snapshot(), ["", "Sam"])
        self.assertEqual(len(window), 2)

    def test_radius_must_be_positive(self):
        with self.assertRaises(ValueError):
            MentionWindow(0)


if __name__ == "__main__":
    unittest.main()
