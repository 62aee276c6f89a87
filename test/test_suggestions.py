"""
Suggestion engine tests (Levenshtein distance and close matches).
"""
import unittest
from unittest import TestCase

from helmsman import edit_distance, find_close


class TestEditDistance(TestCase):
    def testClassicExample(self):
        self.assertEqual(edit_distance("kitten", "sitting"), 3)

    def testEmptyStrings(self):
        self.assertEqual(edit_distance("", ""), 0)
        self.assertEqual(edit_distance("", "abc"), 3)
        self.assertEqual(edit_distance("abc", ""), 3)

    def testSingleEdits(self):
        self.assertEqual(edit_distance("add", "ad"), 1)  # deletion
        self.assertEqual(edit_distance("ad", "add"), 1)  # insertion
        self.assertEqual(edit_distance("bax", "baz"), 1)  # substitution

    def testTranspositionCostsTwo(self):
        self.assertEqual(edit_distance("test", "tset"), 2)

    def testSymmetric(self):
        self.assertEqual(edit_distance("status", "statsu"), edit_distance("statsu", "status"))

    def testCaseSensitive(self):
        self.assertEqual(edit_distance("Build", "build"), 1)


class TestFindClose(TestCase):
    def testThresholdOne(self):
        self.assertEqual(find_close(["baz", "boz"], "bax", 1), ["baz"])

    def testDefaultThresholdIsTwo(self):
        self.assertEqual(find_close(["baz", "boz", "quux"], "bax"), ["baz", "boz"])

    def testPreservesInputOrder(self):
        self.assertEqual(find_close(["boz", "baz"], "bax"), ["boz", "baz"])

    def testNoMatches(self):
        self.assertEqual(find_close(["bar"], "foo"), [])

    def testNegativeThresholdRejected(self):
        with self.assertRaises(ValueError):
            find_close(["a"], "a", -1)


if __name__ == "__main__":
    unittest.main()
