"""
Tests for the internal helpers.

This module verifies:
- The Unset sentinel (identity, falsy semantics, finality) and coalesce().
- freeze() snapshots for sequences, mappings and sets.
- identifier() validation and ordinal() labels used in diagnostics.
"""
import unittest
from types import MappingProxyType
from unittest import TestCase

from commandeer.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` sentinel and `coalesce`.
    """

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsy(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)

    def testRepr(self):
        self.assertEqual(repr(Unset), "Unset")

    def testFinal(self):
        with self.assertRaises(TypeError):
            class Derived(UnsetType):
                pass

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertEqual(coalesce("value", "fallback"), "value")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertIsNone(coalesce(Unset))


class FreezeTest(TestCase):

    def testSequence(self):
        self.assertEqual(freeze([1, 2]), (1, 2))

    def testString(self):
        self.assertEqual(freeze("abc"), "abc")

    def testMapping(self):
        source = {"a": 1}
        frozen = freeze(source)
        source["a"] = 2
        self.assertIsInstance(frozen, MappingProxyType)
        self.assertEqual(frozen["a"], 1)

    def testSet(self):
        self.assertEqual(freeze({1, 2}), frozenset({1, 2}))


class IdentifierTest(TestCase):

    def testAccepted(self):
        for name in ("a", "file-name", "A1", "x-"):
            self.assertEqual(identifier(name, "name"), name)

    def testRejected(self):
        for name in ("", "1a", "-a", "a_b", "a b", "ä"):
            with self.assertRaises(ValueError):
                identifier(name, "name")

    def testKindInMessage(self):
        with self.assertRaisesRegex(ValueError, "option alias"):
            identifier("-v", "option alias")

    def testNonString(self):
        with self.assertRaises(TypeError):
            identifier(None, "name")


class OrdinalTest(TestCase):

    def testWords(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(10), "tenth")

    def testSuffixes(self):
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(12), "12th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(111), "111th")
        self.assertEqual(ordinal(104), "104th")


if __name__ == "__main__":
    unittest.main()
