"""
Tests for the alias index: registration order, longest-first ordering
and the hardened lookup.
"""

import unittest

from alias_index import AliasIndex, UnknownAliasError


class TestAliasIndex(unittest.TestCase):

    def test_from_characters_registers_canonical_names(self):
        index = AliasIndex.from_characters([
            ("Jon Snow", ["Jon", "Lord Snow"]),
            ("Samwell Tarly", ["Sam"]),
        ])
        self.assertEqual(index["Jon Snow"], 0)
        self.assertEqual(index["Lord Snow"], 0)
        self.assertEqual(index["Sam"], 1)
        self.assertEqual(list(index), ["Jon Snow", "Jon", "Lord Snow", "Samwell Tarly", "Sam"])

    def test_alias_shared_between_characters_is_rejected(self):
        with self.assertRaises(ValueError):
            AliasIndex.from_characters([
                ("Jon Snow", ["Jon"]),
                ("Jon Connington", ["Jon"]),
            ])

    def test_repeated_alias_for_same_character_is_allowed(self):
        index = AliasIndex.from_characters([("Sam", ["Sam", "Samwell"])])
        self.assertEqual(len(index), 2)

    def test_empty_alias_rejected(self):
        with self.assertRaises(ValueError):
            AliasIndex({"": 0})

    def test_longest_first_keeps_registration_order_for_ties(self):
        index = AliasIndex({"Bran": 0, "Khal Drogo": 1, "Arya": 2, "Drogo": 1})
        self.assertEqual(
            index.aliases_longest_first(),
            ("Khal Drogo", "Drogo", "Bran", "Arya"),
        )

    def test_index_of_unknown_alias(self):
        index = AliasIndex({"Jon": 0})
        with self.assertRaises(UnknownAliasError) as ctx:
            index.index_of("Ghost")
        self.assertIsInstance(ctx.exception, KeyError)
        self.assertIn("Ghost", str(ctx.exception))

    def test_index_is_read_only(self):
        index = AliasIndex({"Jon": 0})
        with self.assertRaises(TypeError):
            index["Sam"] = 1


if __name__ == "__main__":
    unittest.main()
