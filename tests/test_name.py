"""
Name Tests

Tests for name normalization, wildcard matching and precision.
"""

import itertools
import unittest

from silkinjection import Name


class TestNameConstruction(unittest.TestCase):
    """Tests for Name.named() and Name.prefixed()."""

    def test_names_are_lower_case(self):
        self.assertEqual(Name.named("Primary"), Name("primary"))

    def test_blank_name_is_default(self):
        self.assertIs(Name.named(None), Name.DEFAULT)
        self.assertIs(Name.named(""), Name.DEFAULT)
        self.assertIs(Name.named("   "), Name.DEFAULT)

    def test_named_passes_names_through(self):
        name = Name.named("db")
        self.assertIs(Name.named(name), name)

    def test_prefixed(self):
        self.assertEqual(Name.prefixed("DB"), Name("db*"))
        self.assertTrue(Name.prefixed("db").is_pattern)
        self.assertIs(Name.prefixed(""), Name.ANY)

    def test_any_is_a_pattern(self):
        self.assertTrue(Name.ANY.is_any)
        self.assertTrue(Name.ANY.is_pattern)
        self.assertFalse(Name.DEFAULT.is_pattern)


class TestNameMatching(unittest.TestCase):
    """Tests for is_applicable_for()."""

    def test_any_matches_everything(self):
        for name in (Name.DEFAULT, Name("a"), Name("a*")):
            self.assertTrue(Name.ANY.is_applicable_for(name))
            self.assertTrue(name.is_applicable_for(Name.ANY))

    def test_equal_names_match(self):
        self.assertTrue(Name("db").is_applicable_for(Name("db")))
        self.assertTrue(Name.DEFAULT.is_applicable_for(Name.DEFAULT))

    def test_default_only_matches_default(self):
        self.assertFalse(Name.DEFAULT.is_applicable_for(Name("db")))
        self.assertFalse(Name("db").is_applicable_for(Name.DEFAULT))

    def test_prefix_patterns(self):
        self.assertTrue(Name("db-primary").is_applicable_for(Name.prefixed("db")))
        self.assertTrue(Name.prefixed("db").is_applicable_for(Name("db-primary")))
        self.assertFalse(Name("cache").is_applicable_for(Name.prefixed("db")))


class TestNamePrecision(unittest.TestCase):
    """Tests for the more_precise_than() strict partial order."""

    NAMES = [
        Name.DEFAULT, Name.ANY, Name("a"), Name("b"), Name("db-main"),
        Name("db*"), Name("db-*"), Name("x*"),
    ]

    def test_default_is_most_precise(self):
        for name in self.NAMES[1:]:
            self.assertTrue(Name.DEFAULT.more_precise_than(name), str(name))

    def test_any_is_least_precise(self):
        for name in self.NAMES:
            if name is not Name.ANY:
                self.assertTrue(name.more_precise_than(Name.ANY), str(name))

    def test_concrete_beats_pattern(self):
        self.assertTrue(Name("db-main").more_precise_than(Name("db*")))
        self.assertFalse(Name("db*").more_precise_than(Name("db-main")))

    def test_longer_prefix_beats_shorter(self):
        self.assertTrue(Name("db-*").more_precise_than(Name("db*")))
        self.assertFalse(Name("db*").more_precise_than(Name("db-*")))

    def test_incomparable(self):
        self.assertFalse(Name("a").more_precise_than(Name("b")))
        self.assertFalse(Name("b").more_precise_than(Name("a")))
        self.assertFalse(Name("db*").more_precise_than(Name("x*")))
        self.assertFalse(Name("x*").more_precise_than(Name("db*")))

    def test_strict_partial_order(self):
        for a in self.NAMES:
            self.assertFalse(a.more_precise_than(a))
        for a, b in itertools.permutations(self.NAMES, 2):
            self.assertFalse(a.more_precise_than(b) and b.more_precise_than(a))
        for a, b, c in itertools.permutations(self.NAMES, 3):
            if a.more_precise_than(b) and b.more_precise_than(c):
                self.assertTrue(a.more_precise_than(c), f"{a} > {b} > {c}")

    def test_precision_rank_is_monotone(self):
        for a, b in itertools.permutations(self.NAMES, 2):
            if a.more_precise_than(b):
                self.assertGreater(a.precision_rank(), b.precision_rank(), f"{a} > {b}")


if __name__ == '__main__':
    unittest.main()
