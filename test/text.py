# python
"""
Text module behavioral tests (measurement, wrapping, aligned lists).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
import warnings
from unittest import TestCase

from trellis import measure, wrap, align, NarrowListWarning


class TestMeasure(TestCase):
    """Behavioral tests for measure()."""

    def testAsciiIsOneCellPerCharacter(self):
        self.assertEqual(measure("hello"), 5)

    def testWideCharactersCountTwice(self):
        self.assertEqual(measure("日本"), 4)


class TestWrap(TestCase):
    """Behavioral tests for wrap()."""

    def testEmptyTextYieldsNoLines(self):
        self.assertEqual(wrap("", 10), [])

    def testGreedyPacking(self):
        self.assertEqual(wrap("a b c", 3), ["a b", "c"])

    def testWhitespaceCollapsed(self):
        self.assertEqual(wrap("a   b\tc", 80), ["a b c"])

    def testOverWideWordKeptWhole(self):
        self.assertEqual(wrap("hello superlongword x", 5), ["hello", "superlongword", "x"])

    def testExplicitBreaksKept(self):
        self.assertEqual(wrap("a\n\nb", 10), ["a", "", "b"])

    def testNoBreakSpaceKept(self):
        self.assertEqual(wrap("Bonjour\u00a0!", 80), ["Bonjour\u00a0!"])

    def testNoBreakSpaceNeverBreaks(self):
        self.assertEqual(wrap("Options globales\u00a0:", 10), ["Options", "globales\u00a0:"])

    def testLinesNeverExceedWidth(self):
        text = "the quick brown fox jumps over the lazy dog " * 5
        for width in (8, 12, 20, 33):
            for line in wrap(text, width):
                self.assertLessEqual(measure(line), width)

    def testWideCharactersRespectWidth(self):
        for line in wrap("日本 語の 文章 です", 5):
            self.assertLessEqual(measure(line), 5)


class TestAlign(TestCase):
    """Behavioral tests for align()."""

    def testEmptyItemsYieldEmptyText(self):
        self.assertEqual(align([]), "")

    def testColumnsPaddedToWidestKey(self):
        self.assertEqual(align([("a", "desc"), ("bbb", "d2")]), "a    desc\nbbb  d2")

    def testContinuationLinesUnderSecondColumn(self):
        self.assertEqual(align([("k", "aaa bbb")], width=8), "k  aaa\n   bbb")

    def testSeparatorAndIndent(self):
        self.assertEqual(
            align([("en-US", "English"), ("fr-FR", "Français")], separator=" - ", indent=2),
            "  en-US - English\n  fr-FR - Français",
        )

    def testForcedColumnWidth(self):
        self.assertEqual(align([("a", "x")], force=4, indent=1), " a    x")

    def testNarrowWidthWarnsAndPrintsKeys(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            text = align([("key", "d"), ("k2", "e")], width=4)
        self.assertEqual(text, "key\nk2")
        self.assertTrue(any(isinstance(warning.message, NarrowListWarning) for warning in caught))


if __name__ == "__main__":
    unittest.main()
