"""
Trellis locales: language pack registry, locale resolution and string merging.

Overview
- LocaleInfo(code, name, path, default): one registered language pack.
- LOCALES: the packs bundled with trellis (trellis/data/i18n/<code>.json).
- Locales(infos): a resolver over a registry.
  • supported: frozenset of registered codes.
  • languages: primary language subtag -> representative code; packs flagged
    `default` win, then the first pack seen for a language.
  • resolve(preference, environ): pick the active locale.
  • strings(code): the base pack overlaid with the pack of code, frozen.
- Preference(path): the persisted {"locale": code} choice (locale.json).
- base(): the bundled base pack, loaded once.
- listing(infos): aligned "code - name" list used by the cfg help.

Resolution order
1. a supported persisted preference;
2. each candidate of $LANG (split on ':' and whitespace), normalized
   ("fr_CA.UTF-8" -> "fr-CA") and matched exactly, then by language;
3. BASE_LOCALE.
"""
import collections
import functools
import json
import os
import pathlib
import re
from importlib.resources import files
from types import MappingProxyType

from .faults import LocaleLoadError, PreferenceWriteError
from .text import align
from .utils import Unset, deepmerge, freeze, lookup, mirror, substitute

BASE_LOCALE = "en-US"

LocaleInfo = collections.namedtuple("LocaleInfo", ("code", "name", "path", "default"), defaults=(False,))

_PACKS = files(__package__) / "data" / "i18n"

LOCALES = (
    LocaleInfo("en-US", "English (United States)", _PACKS / "en-US.json", True),
    LocaleInfo("fr-FR", "Français (France)", _PACKS / "fr-FR.json", True),
)


def normalize(candidate, /):
    """
    Turn a POSIX locale name into a language tag: "en_US.UTF-8" -> "en-US".

    Returns None for empty input.
    """
    if not candidate:
        return None
    return candidate.split(".")[0].replace("_", "-") or None


def primary(code, /):
    """
    Lowercase primary language subtag of code, or None when it is not a valid one
    ("C", "" and friends).
    """
    language = code.split("-")[0].lower()
    if re.fullmatch(r"[a-z]{2,3}|[a-z]{5,8}", language):
        return language
    return None


def _read(path, /):
    # path is a Traversable for bundled packs, any path-like otherwise
    if not hasattr(path, "read_text"):
        path = pathlib.Path(path)
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise TypeError(f"language pack {str(path)!r} must hold a JSON object")
    return data


class Locales:
    """
    Resolver over a set of registered language packs.

    Instances are immutable; the registry is read once at construction.
    """

    supported = mirror("supported")
    languages = mirror("languages")

    def __init__(self, infos=LOCALES, /):
        self._infos = {}
        for info in infos:
            if not isinstance(info, LocaleInfo):
                raise TypeError("Locales() entries must be locale infos")
            self._infos.setdefault(info.code, info)

        languages = {}
        for info in self._infos.values():
            if info.default and (language := primary(info.code)):
                languages.setdefault(language, info.code)
        for code in self._infos:
            if language := primary(code):
                languages.setdefault(language, code)

        self._supported = frozenset(self._infos)
        self._languages = languages

    @property
    def infos(self):
        """
        Read-only mapping from code to LocaleInfo, in registration order.
        """
        return MappingProxyType(self._infos)

    def match(self, candidate, /):
        """
        Best supported code for one locale candidate, or None.

        An exact match on the normalized tag wins; otherwise the pack
        representing its primary language is used.
        """
        if (code := normalize(candidate)) is None:
            return None
        if code in self._supported:
            return code
        if (language := primary(code)) is None:
            return None
        return self._languages.get(language)

    def resolve(self, preference=None, /, environ=os.environ):
        """
        Pick the active locale: preference, then $LANG, then BASE_LOCALE.
        """
        if preference in self._supported:
            return preference
        for candidate in re.split(r"[:\s]+", environ.get("LANG") or ""):
            if (code := self.match(candidate)) is not None:
                return code
        return BASE_LOCALE

    def load(self, code, /):
        """
        Read the raw pack of code.

        raises KeyError for unknown codes, OSError/ValueError/TypeError for
        unreadable or malformed packs.
        """
        return _read(self._infos[code].path)

    def strings(self, code=BASE_LOCALE, /):
        """
        Load the string table for code.

        Behavior
        - the base pack is mandatory: any failure raises LocaleLoadError with the
          underlying exception as its cause.
        - the pack of code is an overlay; if it is unknown, absent or unreadable,
          the base pack is returned as-is.
        - the result is deep-merged and frozen.
        """
        try:
            base = self.load(BASE_LOCALE)
        except (KeyError, OSError, ValueError, TypeError) as error:
            raise LocaleLoadError(
                f"base language pack {BASE_LOCALE} could not be loaded", locale=BASE_LOCALE
            ) from error

        if code == BASE_LOCALE:
            return freeze(base)

        try:
            override = self.load(code)
        except (KeyError, OSError, ValueError, TypeError):
            return freeze(base)
        return freeze(deepmerge(base, override))


class Preference:
    """
    Persisted locale choice stored as {"locale": "<code>"}.
    """

    FILENAME = "locale.json"

    path = mirror("path")

    def __init__(self, path, /):
        self._path = pathlib.Path(path)

    @classmethod
    def at(cls, directory, /):
        """
        Preference stored in the default file of a state directory.
        """
        return cls(pathlib.Path(directory) / cls.FILENAME)

    def read(self):
        """
        Return the stored code, or None when the file is missing, corrupt or
        does not hold a string locale.
        """
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return None
        if isinstance(data, dict) and isinstance(locale := data.get("locale"), str):
            return locale
        return None

    def write(self, code, /, *, strings=Unset):
        """
        Store code, creating the state directory when needed.

        raises PreferenceWriteError (localized through strings) with the OS
        error as its cause.
        """
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps({"locale": code}, indent=2) + "\n", encoding="utf-8")
        except OSError as error:
            if strings is Unset:
                strings = base()
            template = lookup(strings, "errors.commands.cfg.failedToWriteLocale", "")
            raise PreferenceWriteError(
                substitute(template, {"ErrorMessage": error.strerror or str(error)}),
                path=str(self._path),
            ) from error


@functools.cache
def base():
    """
    The bundled base language pack (frozen, cached).
    """
    return Locales(LOCALES).strings(BASE_LOCALE)


def listing(infos=LOCALES, /, *, separator=" - ", indent=2, width=80):
    """
    Aligned "code<separator>name" list of registered packs.
    """
    if isinstance(infos, Locales):
        infos = infos.infos.values()
    return align(((info.code, info.name) for info in infos), width=width, separator=separator, indent=indent)


__all__ = (
    "BASE_LOCALE",
    "LOCALES",
    "LocaleInfo",
    "Locales",
    "Preference",
    "normalize",
    "primary",
    "base",
    "listing",
)
