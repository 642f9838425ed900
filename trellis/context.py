"""
Trellis application context.

A Context is built once per invocation by bootstrap() and handed to every
command; nothing in trellis reads global application state.

Fields
- name, version: program identity (version from the installed distribution).
- strings: frozen string table of the active locale.
- locales, locale: the resolver and the active locale code.
- statedir: per-user directory holding persisted state (locale.json).
- width, indent, separator: layout settings for help and lists.
- debug: print warnings and tracebacks.
"""
import os
import pathlib
import sys
import warnings
from importlib import metadata

from .faults import UnsupportedPlatformWarning
from .locales import LOCALES, Locales, Preference
from .utils import coalesce, Unset, mirror


class Context:
    """
    Immutable per-invocation settings shared by the commands.
    """

    __introspectable__ = ("name", "version", "locale", "statedir", "width", "indent", "separator", "debug")

    name = mirror("name")
    version = mirror("version")
    strings = mirror("strings")
    locales = mirror("locales")
    locale = mirror("locale")
    statedir = mirror("statedir")
    width = mirror("width")
    indent = mirror("indent")
    separator = mirror("separator")
    debug = mirror("debug")

    def __init__(self, name, version, strings, locales, locale, statedir, *,
                 width=80, indent=2, separator=" - ", debug=False):
        if not isinstance(name, str) or not name:
            raise TypeError("Context() name must be a non-empty string")
        self._name = name
        self._version = version
        self._strings = strings
        self._locales = locales
        self._locale = locale
        self._statedir = pathlib.Path(statedir)
        self._width = width
        self._indent = indent
        self._separator = separator
        self._debug = bool(debug)

    @property
    def preference(self):
        """
        The persisted locale preference of this program.
        """
        return Preference.at(self._statedir)

    @property
    def replacements(self):
        """
        Placeholders available to every localized text.
        """
        return {"AppName": self._name, "Version": self._version}

    def evolve(self, **changes):
        """
        Return a copy with some fields replaced.
        """
        fields = {name: getattr(self, "_" + name) for name in (
            "name", "version", "strings", "locales", "locale", "statedir", "width", "indent", "separator", "debug",
        )}
        fields.update(changes)
        return type(self)(
            fields.pop("name"),
            fields.pop("version"),
            fields.pop("strings"),
            fields.pop("locales"),
            fields.pop("locale"),
            fields.pop("statedir"),
            **fields,
        )

    def __rich_repr__(self):
        for name in self.__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "context(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


def version(name, /):
    """
    Installed version of distribution name, or the package version when trellis
    runs from a source checkout.
    """
    try:
        return metadata.version(name)
    except metadata.PackageNotFoundError:
        from . import __version__
        return __version__


def statedir(name, /, *, environ=os.environ, platform=sys.platform, home=Unset):
    """
    Per-user state directory of program name.

    - win32: %APPDATA%/<name> (or ~/AppData/Roaming/<name>)
    - linux: $XDG_CONFIG_HOME/<name> (or ~/.config/<name>)
    - darwin: ~/Library/Application Support/<name>
    - anything else: ~/.<name>, with an UnsupportedPlatformWarning
    """
    home = pathlib.Path(coalesce(home, pathlib.Path.home()))

    match platform:
        case "win32":
            if appdata := environ.get("APPDATA"):
                return pathlib.Path(appdata) / name
            return home / "AppData" / "Roaming" / name
        case "linux":
            if config := environ.get("XDG_CONFIG_HOME"):
                return pathlib.Path(config) / name
            return home / ".config" / name
        case "darwin":
            return home / "Library" / "Application Support" / name
        case _:
            warnings.warn(UnsupportedPlatformWarning(
                f"unsupported platform {platform!r}, state is stored in the home directory",
                platform=platform,
            ), stacklevel=2)
            return home / ("." + name)


def bootstrap(name="trellis", /, *, debug=False, environ=os.environ, platform=sys.platform, home=Unset, infos=LOCALES):
    """
    Build the context of one invocation.

    Steps
    1. program version from the installed distribution.
    2. state directory for the platform.
    3. active locale: persisted preference, then $LANG, then the base locale.
    4. string table of the active locale (raises LocaleLoadError when the base
       pack is unavailable).
    """
    directory = statedir(name, environ=environ, platform=platform, home=home)
    locales = Locales(infos)
    locale = locales.resolve(Preference.at(directory).read(), environ=environ)

    return Context(
        name,
        version(name),
        locales.strings(locale),
        locales,
        locale,
        directory,
        debug=debug,
    )


__all__ = (
    "Context",
    "version",
    "statedir",
    "bootstrap",
)
