# python
"""
Utils module behavioral tests (sentinel, substitution, lookup, merge, worker pool).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import asyncio
import unittest
from types import MappingProxyType
from unittest import TestCase

from trellis.utils import Unset, UnsetType, coalesce, freeze, substitute, lookup, deepmerge, concur


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsey(self):
        self.assertFalse(Unset)

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})

    def testCoalesceKeepsFalseyValues(self):
        self.assertEqual(coalesce(Unset, "x"), "x")
        self.assertIsNone(coalesce(None, "x"))
        self.assertEqual(coalesce(0, 1), 0)


class TestFreeze(TestCase):
    """Behavioral tests for freeze()."""

    def testNestedContainers(self):
        frozen = freeze({"a": [1, {"b": 2}], "s": {1}})
        self.assertIsInstance(frozen, MappingProxyType)
        self.assertEqual(frozen["a"][0], 1)
        self.assertIsInstance(frozen["a"], tuple)
        self.assertIsInstance(frozen["a"][1], MappingProxyType)
        self.assertEqual(frozen["s"], frozenset({1}))

    def testStringsUntouched(self):
        self.assertEqual(freeze("abc"), "abc")


class TestSubstitute(TestCase):
    """Behavioral tests for substitute()."""

    def testKnownKeys(self):
        self.assertEqual(substitute("hi {{ .Name }}, {{.Name}}!", {"Name": "ada"}), "hi ada, ada!")

    def testUnknownKeysKept(self):
        self.assertEqual(substitute("hi {{ .Nope }}", {}), "hi {{ .Nope }}")

    def testEmptyTemplate(self):
        self.assertEqual(substitute("", {"a": "b"}), "")

    def testNonStringValuesConverted(self):
        self.assertEqual(substitute("{{ .N }}", {"N": 3}), "3")


class TestLookup(TestCase):
    """Behavioral tests for lookup()."""

    def testDottedPath(self):
        self.assertEqual(lookup({"a": {"b": {"c": 1}}}, "a.b.c"), 1)

    def testMissingSegmentDefault(self):
        self.assertEqual(lookup({"a": {}}, "a.b.c", "x"), "x")

    def testScalarMidwayDefault(self):
        self.assertIsNone(lookup({"a": "text"}, "a.b"))


class TestDeepmerge(TestCase):
    """Behavioral tests for deepmerge()."""

    def testNestedOverlay(self):
        self.assertEqual(deepmerge({"a": {"x": 1, "y": 2}}, {"a": {"y": 3}}), {"a": {"x": 1, "y": 3}})

    def testScalarReplacesMapping(self):
        self.assertEqual(deepmerge({"a": {"x": 1}}, {"a": "flat"}), {"a": "flat"})

    def testMappingReplacesScalar(self):
        self.assertEqual(deepmerge({"a": "flat"}, {"a": {"x": 1}}), {"a": {"x": 1}})

    def testListsReplaced(self):
        self.assertEqual(deepmerge({"a": [1, 2]}, {"a": [3]}), {"a": [3]})

    def testNewKeysAdded(self):
        self.assertEqual(deepmerge({"a": 1}, {"b": 2}), {"a": 1, "b": 2})

    def testInputsUntouched(self):
        base = {"a": {"x": 1}}
        override = {"a": {"x": 2}}
        deepmerge(base, override)
        self.assertEqual(base, {"a": {"x": 1}})
        self.assertEqual(override, {"a": {"x": 2}})


class TestConcur(TestCase):
    """Behavioral tests for concur()."""

    def testResultsInTaskOrder(self):
        def task(value, delay):
            async def run():
                await asyncio.sleep(delay)
                return value
            return run

        results = asyncio.run(concur([task(1, 0.02), task(2, 0), task(3, 0.01)], concurrency=3))
        self.assertEqual(results, [1, 2, 3])

    def testConcurrencyBound(self):
        active = 0
        peak = 0

        async def run():
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.001)
            active -= 1

        asyncio.run(concur([run] * 10, concurrency=3))
        self.assertEqual(peak, 3)

    def testFirstErrorRaised(self):
        async def fail():
            raise ValueError("nope")

        async def ok():
            return 1

        with self.assertRaises(ValueError):
            asyncio.run(concur([ok, fail, ok]))

    def testFirstErrorStopsNewWork(self):
        started = []

        def task(index):
            async def run():
                started.append(index)
                if index == 0:
                    raise ValueError("stop")
            return run

        with self.assertRaises(ValueError):
            asyncio.run(concur([task(index) for index in range(5)], concurrency=1))
        self.assertEqual(started, [0])

    def testSettledReturnsExceptions(self):
        async def fail():
            raise ValueError("nope")

        async def ok():
            return 1

        results = asyncio.run(concur([ok, fail, ok], concurrency=2, settled=True))
        self.assertEqual(results[0], 1)
        self.assertIsInstance(results[1], ValueError)
        self.assertEqual(results[2], 1)

    def testEmpty(self):
        self.assertEqual(asyncio.run(concur([])), [])


if __name__ == "__main__":
    unittest.main()
