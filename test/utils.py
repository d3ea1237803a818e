"""
Tests for the shared helpers.

This module verifies:
- The Unset sentinel (singleton identity, falsy, sealed) and coalesce().
- CaseInsensitiveDict canonicalization on every mapping operation.
- The ordinal() and pluralize() wording helpers.
"""
import unittest
from unittest import TestCase

from conch.utils import *


class UnsetTest(TestCase):
    """Test suite for the Unset sentinel and coalesce()."""

    def testSingleton(self) -> None:
        self.assertIs(UnsetType(), Unset)

    def testFalsy(self) -> None:
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testFinal(self) -> None:
        with self.assertRaises(TypeError):
            type("Sub", (UnsetType,), {})

    def testUnion(self) -> None:
        self.assertIsInstance(Unset, str | Unset)

    def testCoalesce(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 5), 0)


class CaseInsensitiveDictTest(TestCase):
    """Test suite for CaseInsensitiveDict."""

    def setUp(self) -> None:
        self.mapping = CaseInsensitiveDict()
        self.mapping["Alpha"] = 1

    def testLookupIgnoresCase(self) -> None:
        self.assertEqual(self.mapping["ALPHA"], 1)
        self.assertIn("alpha", self.mapping)

    def testKeysAreNormalized(self) -> None:
        self.assertEqual(list(self.mapping), ["alpha"])

    def testOverwriteKeepsSingleEntry(self) -> None:
        self.mapping["aLpHa"] = 2
        self.assertEqual(len(self.mapping), 1)
        self.assertEqual(self.mapping["alpha"], 2)

    def testDeleteAndPop(self) -> None:
        self.mapping["Beta"] = 2
        del self.mapping["ALPHA"]
        self.assertEqual(self.mapping.pop("BETA"), 2)
        self.assertEqual(len(self.mapping), 0)

    def testGetWithDefault(self) -> None:
        self.assertIsNone(self.mapping.get("missing"))
        self.assertEqual(self.mapping.get("ALPHA"), 1)

    def testNonStringKeys(self) -> None:
        self.assertNotIn(1, self.mapping)
        with self.assertRaises(TypeError):
            self.mapping[1] = "x"

    def testConstructor(self) -> None:
        mapping = CaseInsensitiveDict({"A": 1}, B=2)
        self.assertEqual(dict(mapping), {"a": 1, "b": 2})

    def testClear(self) -> None:
        self.mapping.clear()
        self.assertEqual(len(self.mapping), 0)


class WordingTest(TestCase):
    """Test suite for ordinal() and pluralize()."""

    def testOrdinal(self) -> None:
        self.assertEqual(
            [ordinal(number) for number in (1, 2, 3, 4, 11, 12, 13, 21, 22, 23, 101, 111)],
            ["1st", "2nd", "3rd", "4th", "11th", "12th", "13th", "21st", "22nd", "23rd", "101st", "111th"],
        )

    def testPluralize(self) -> None:
        self.assertEqual(pluralize("argument", 1), "argument")
        self.assertEqual(pluralize("argument", 0), "arguments")
        self.assertEqual(pluralize("argument", 2), "arguments")
        self.assertEqual(pluralize("entry", 2), "entries")
        self.assertEqual(pluralize("day", 2), "days")
        self.assertEqual(pluralize("match", 3), "matches")

    def testNormalize(self) -> None:
        self.assertEqual(normalize("HeLLo"), "hello")
        with self.assertRaises(TypeError):
            normalize(None)


if __name__ == '__main__':
    unittest.main()
