# python
"""
Faults module behavioral tests (codes, options, rendering).

Conventions
- Test method names follow CamelCase per project convention.
- Rendering is captured from the shared stderr console.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from trellis import FaultCode, UnknownOptionError, NarrowListWarning, CommandException, report
from trellis.faults import console


class TestFaultCode(TestCase):
    """Behavioral tests for FaultCode."""

    def testNormalize(self):
        self.assertEqual(FaultCode.UNKNOWN_OPTION.normalize(), "11111")

    def testErrorsAndWarningsInSeparateRanges(self):
        self.assertLess(FaultCode.PREFERENCE_WRITE_FAILED, 12000)
        self.assertGreaterEqual(FaultCode.NARROW_LIST, 12000)


class TestCommandException(TestCase):
    """Behavioral tests for CommandException and its subclasses."""

    def testMessageAndOptions(self):
        fault = UnknownOptionError("Unknown option: --x", option="--x")
        self.assertEqual(str(fault), "Unknown option: --x")
        self.assertEqual(fault.code, FaultCode.UNKNOWN_OPTION)
        self.assertEqual(fault.options["option"], "--x")

    def testOptionsReadOnly(self):
        with self.assertRaises(TypeError):
            UnknownOptionError("m").options["x"] = 1  # type: ignore[index]

    def testMessageMustBeString(self):
        with self.assertRaises(TypeError):
            CommandException(3)  # type: ignore[arg-type]

    def testReplaceKeepsCause(self):
        try:
            try:
                raise OSError("disk")
            except OSError as error:
                raise UnknownOptionError("m", option="--x") from error
        except UnknownOptionError as fault:
            replaced = fault.__replace__(prog="app")
        self.assertEqual(replaced.options["prog"], "app")
        self.assertEqual(replaced.options["option"], "--x")
        self.assertIsInstance(replaced.__cause__, OSError)


class TestReport(TestCase):
    """Behavioral tests for report()."""

    def testRendersHeaderMessageAndCause(self):
        fault = UnknownOptionError("Unknown option: --x")
        fault.__cause__ = ValueError("bad token")
        with console.capture() as capture:
            report(fault, prog="app", prefix="Cause:", colorful=False)
        text = capture.get()
        self.assertIn("app", text)
        self.assertIn("11111", text)
        self.assertIn("unknown option", text)
        self.assertIn("Unknown option: --x", text)
        self.assertIn(">Cause: bad token", text)

    def testRendersWarnings(self):
        with console.capture() as capture:
            report(NarrowListWarning("too narrow"), prog="app")
        self.assertIn("too narrow", capture.get())

    def testRejectsOtherObjects(self):
        with self.assertRaises(TypeError):
            report(ValueError("x"))  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
