# python
"""
Context module behavioral tests (state directory, bootstrap, context copies).

Conventions
- Test method names follow CamelCase per project convention.
- Platform, home and environment are injected; nothing touches the real home.
"""

from __future__ import annotations

import pathlib
import tempfile
import unittest
import warnings
from unittest import TestCase

from trellis import Context, Locales, Preference, bootstrap, statedir, UnsupportedPlatformWarning


class TestStatedir(TestCase):
    """Behavioral tests for statedir()."""

    HOME = pathlib.Path("/home/ada")

    def testLinuxXdg(self):
        self.assertEqual(
            statedir("app", environ={"XDG_CONFIG_HOME": "/xdg"}, platform="linux", home=self.HOME),
            pathlib.Path("/xdg/app"),
        )

    def testLinuxFallback(self):
        self.assertEqual(statedir("app", environ={}, platform="linux", home=self.HOME), self.HOME / ".config" / "app")

    def testWindowsAppData(self):
        self.assertEqual(
            statedir("app", environ={"APPDATA": "/appdata"}, platform="win32", home=self.HOME),
            pathlib.Path("/appdata/app"),
        )

    def testDarwin(self):
        self.assertEqual(
            statedir("app", environ={}, platform="darwin", home=self.HOME),
            self.HOME / "Library" / "Application Support" / "app",
        )

    def testOtherPlatformWarns(self):
        with self.assertWarns(UnsupportedPlatformWarning):
            directory = statedir("app", environ={}, platform="plan9", home=self.HOME)
        self.assertEqual(directory, self.HOME / ".app")


class TestBootstrap(TestCase):
    """Behavioral tests for bootstrap()."""

    def setUp(self):
        self._directory = tempfile.TemporaryDirectory()
        self.root = pathlib.Path(self._directory.name)
        self.environ = {"XDG_CONFIG_HOME": str(self.root), "LANG": "fr_FR.UTF-8"}

    def tearDown(self):
        self._directory.cleanup()

    def testLocaleFromEnvironment(self):
        context = bootstrap("app", environ=self.environ, platform="linux", home=self.root)
        self.assertEqual(context.locale, "fr-FR")
        self.assertEqual(context.strings["help"]["generic"]["commandHeader"], "Commandes :")
        self.assertEqual(context.statedir, self.root / "app")

    def testPreferenceWins(self):
        Preference.at(self.root / "app").write("en-US")
        context = bootstrap("app", environ=self.environ, platform="linux", home=self.root)
        self.assertEqual(context.locale, "en-US")

    def testVersionFallsBackToPackage(self):
        import trellis

        context = bootstrap("no-such-distribution-xyz", environ=self.environ, platform="linux", home=self.root)
        self.assertEqual(context.version, trellis.__version__)

    def testDefaults(self):
        context = bootstrap("app", environ=self.environ, platform="linux", home=self.root)
        self.assertEqual((context.width, context.indent, context.separator), (80, 2, " - "))
        self.assertFalse(context.debug)


class TestContext(TestCase):
    """Behavioral tests for Context."""

    def make(self):
        return Context("app", "1.0", {"a": "b"}, Locales(), "en-US", "/state")

    def testReplacements(self):
        self.assertEqual(self.make().replacements, {"AppName": "app", "Version": "1.0"})

    def testEvolveKeepsOtherFields(self):
        context = self.make().evolve(debug=True)
        self.assertTrue(context.debug)
        self.assertEqual(context.name, "app")
        self.assertEqual(context.strings["a"], "b")

    def testPreferencePath(self):
        self.assertEqual(self.make().preference.path, pathlib.Path("/state/locale.json"))

    def testReadOnly(self):
        with self.assertRaises(AttributeError):
            self.make().name = "other"  # type: ignore[misc]

    def testNameRequired(self):
        with self.assertRaises(TypeError):
            Context("", "1.0", {}, Locales(), "en-US", "/state")


if __name__ == "__main__":
    unittest.main()
