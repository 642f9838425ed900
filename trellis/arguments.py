r"""
Trellis option specifications and the token parser.

Overview
- Specs
  • OptionSpec: one named option, either a "boolean" switch or a "string" option
    carrying a value, with an optional single-character short alias, an optional
    default and optional completion candidates.
  • Options: an immutable table mapping long names to OptionSpec, validated as a
    whole (unique short aliases, well-formed long names).

- Parsing
  • parse(tokens, options, positionals=..., strict=...) -> ParsedArgs(values, positionals)
  • Long options: "--name", "--name=value", "--name value".
  • Short clusters: "-abc", "-nAlice", "-n Alice".
  • "--" ends option processing; every following token is a positional.

Validation highlights (on construction)
- type must be "string" or "boolean".
- short must be a single letter or digit and unique inside a table.
- default must match the declared type.
- completions are only meaningful for string options; duplicates are rejected.
- long names must match r"[^\W\d_](-?[^\W_]+)*" (e.g. "lang", "dry-run").

Failures
- UnknownOptionError and UnexpectedPositionalError are raised only in strict mode;
  otherwise the offending token (or short character) is dropped.
- BooleanWithValueError and MissingValueError are always raised.
- Messages are localized through the "errors.cli" section of the string table.

Quick example:
    >>> options = Options({
    ...     "verbose": {"type": "boolean", "short": "v"},
    ...     "name": {"type": "string", "short": "n"},
    ... })
    >>> parse(["-vn", "Alice"], options, strict=True)
    ParsedArgs(values={'verbose': True, 'name': 'Alice'}, positionals=[])
"""
import collections
import re
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from .faults import *
from .utils import *

ParsedArgs = collections.namedtuple("ParsedArgs", ("values", "positionals"))


def _sanitize_metadata(metadata, /):
    """
    Internal: normalize and validate the metadata of a single option.

    Responsibilities
    - type: "string" | "boolean".
    - short: Unset or exactly one letter/digit.
    - default: Unset or a value of the declared type (bool for "boolean", str for "string").
    - completions: an iterable of strings (not a bare string), only for "string"
      options; duplicates rejected; normalized to a tuple preserving order.

    The dict is modified in place.
    """
    if not isinstance(type := metadata["type"], str):
        raise TypeError("option 'type' must be a string")
    elif type not in ("string", "boolean"):
        raise ValueError("option 'type' must be one of 'string' or 'boolean'")

    if not isinstance(short := metadata["short"], str | Unset):
        raise TypeError("option 'short' must be a string")
    elif isinstance(short, str) and not re.fullmatch(r"[^\W_]", short):
        raise ValueError("option 'short' must be a single letter or digit")

    # bool is checked explicitly, a string default must not be accepted for a switch
    if (default := metadata["default"]) is not Unset:
        if type == "boolean" and not isinstance(default, bool):
            raise TypeError("boolean option 'default' must be a bool")
        if type == "string" and not isinstance(default, str):
            raise TypeError("string option 'default' must be a string")

    if isinstance(completions := metadata["completions"], str) or not isinstance(completions, Iterable):
        raise TypeError("option 'completions' must be an iterable of strings")
    sanitized = []
    for completion in completions:
        if not isinstance(completion, str):
            raise TypeError("option 'completions' must be an iterable of strings")
        if completion in sanitized:
            raise ValueError("option 'completions' cannot contain duplicates")
        sanitized.append(completion)
    if sanitized and type != "string":
        raise TypeError("only string options can declare 'completions'")
    metadata["completions"] = tuple(sanitized)


class OptionSpec:
    """
    Declarative description of one named option.

    Instances are immutable: the sanitized metadata lives in private fields and
    is exposed through read-only properties.

    Properties
    - type: "string" | "boolean"
    - short: single-character alias, or Unset
    - default: declared default, or Unset
    - completions: tuple of candidate values offered by shell completion
    """

    __introspectable__ = ("type", "short", "default", "completions")

    type = mirror("type")
    short = mirror("short")
    default = mirror("default")
    completions = mirror("completions")

    def __init__(self, type="boolean", *, short=Unset, default=Unset, completions=()):
        metadata = {
            "type": type,
            "short": short,
            "default": default,
            "completions": completions,
        }
        _sanitize_metadata(metadata)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def valued(self):
        """
        True when the option consumes a value (string options).
        """
        return self._type == "string"

    def __eq__(self, other):
        if not isinstance(other, OptionSpec):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in self.__introspectable__)

    def __hash__(self):
        return hash(tuple(getattr(self, name) for name in self.__introspectable__))

    def __rich_repr__(self):
        for name in self.__introspectable__:
            if (object := getattr(self, name)) is not Unset and object != ():
                yield name, object

    def __repr__(self):
        return "option-spec(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


class Options(Mapping):
    """
    Immutable table of options keyed by long name.

    Values may be given as OptionSpec instances or as plain mappings of OptionSpec
    keyword arguments ({"type": "string", "short": "n"}).

    Invariants
    - long names are unique (mapping keys) and well formed.
    - short aliases are unique across the table.
    """

    def __init__(self, options=None, /):
        if options is None:
            options = {}
        if not isinstance(options, Mapping):
            raise TypeError("Options() argument must be a mapping")

        self._options = {}
        self._shorts = {}
        for name, spec in options.items():
            if not isinstance(name, str):
                raise TypeError("option names must be strings")
            elif not re.fullmatch(r"[^\W\d_](-?[^\W_]+)*", name):
                raise ValueError(f"invalid option name {name!r}")
            if isinstance(spec, Mapping):
                spec = OptionSpec(**spec)
            elif not isinstance(spec, OptionSpec):
                raise TypeError(f"option {name!r} must be an option-spec or a mapping")
            if spec.short:
                if spec.short in self._shorts:
                    raise ValueError(
                        f"short alias {spec.short!r} of {name!r} is already used by {self._shorts[spec.short]!r}"
                    )
                self._shorts[spec.short] = name
            self._options[name] = spec

    @property
    def shorts(self):
        """
        Read-only mapping from short alias to long name.
        """
        return MappingProxyType(self._shorts)

    def __getitem__(self, name):
        return self._options[name]

    def __iter__(self):
        return iter(self._options)

    def __len__(self):
        return len(self._options)

    def __repr__(self):
        return "options(%r)" % self._options


def _optionlike(token):
    # a lone "-" is the conventional stdin marker, not an option
    return token.startswith("-") and token != "-"


def parse(tokens, options, /, *, positionals=False, strict=False, strings=Unset):
    """
    parse raw tokens against an options table.

    parameters
    - tokens: iterable of str (argv without the program/command name).
    - options: Options, or a mapping accepted by Options().
    - positionals: keep non-option tokens; when False they are unexpected.
    - strict: raise on unknown options and unexpected positionals instead of dropping them.
    - strings: localized string table; the bundled base pack is used when Unset.

    returns
    - ParsedArgs(values, positionals)
      • values: long name -> str | bool. Booleans are always present (default or False);
        strings are present when given or defaulted.
      • positionals: tokens kept in order.

    raises
    - UnknownOptionError (strict), UnexpectedPositionalError (strict),
      BooleanWithValueError, MissingValueError.

    notes
    - "--" turns option processing off for the remaining tokens and is discarded;
      tokens after it are kept as positionals even when positionals=False.
    - a string option takes its value inline ("--name=v", "-nv") or from the next
      token, unless that token looks like an option.
    """
    if not isinstance(options, Options):
        options = Options(options)

    tokens = list(tokens)
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError("parse() tokens must be strings")

    def message(key, /, **data):
        # resolved lazily, only failing paths need the string table
        nonlocal strings
        if strings is Unset:
            from .locales import base
            strings = base()
        return substitute(lookup(strings, "errors.cli." + key, ""), data)

    def value(index, display):
        # next-token form: the following token is the value unless it looks like an option
        if index + 1 < len(tokens) and not _optionlike(tokens[index + 1]):
            return tokens[index + 1]
        raise MissingValueError(message("missingValue", Option=display), option=display, index=index)

    values = {}
    kept = []
    active = True
    index = 0

    while index < len(tokens):
        token = tokens[index]

        if active and token == "--":
            active = False
            index += 1
            continue

        if active and token.startswith("--"):
            name, separator, inline = token[2:].partition("=")
            display = "--" + name

            if (spec := options.get(name)) is None:
                if strict:
                    raise UnknownOptionError(message("unknownOption", Option=display), option=display, index=index)
                index += 1
                continue

            if not spec.valued:
                if separator:
                    raise BooleanWithValueError(
                        message("booleanWithValue", Option=display), option=display, index=index
                    )
                values[name] = True
            elif separator:
                values[name] = inline
            else:
                values[name] = value(index, display)
                index += 1
            index += 1
            continue

        if active and _optionlike(token):
            cluster = token[1:]
            for position, character in enumerate(cluster):
                display = "-" + character

                if (name := options.shorts.get(character)) is None:
                    if strict:
                        raise UnknownOptionError(
                            message("unknownOption", Option=display), option=display, index=index
                        )
                    continue

                if not options[name].valued:
                    values[name] = True
                    continue

                # a string option claims whatever is left of the cluster, or the next token
                if remainder := cluster[position + 1:]:
                    values[name] = remainder
                else:
                    values[name] = value(index, display)
                    index += 1
                break
            index += 1
            continue

        if positionals or not active:
            kept.append(token)
        elif strict:
            raise UnexpectedPositionalError(
                message("unexpectedPositional", Argument=token), argument=token, index=index
            )
        index += 1

    for name, spec in options.items():
        if name in values:
            continue
        if not spec.valued:
            values[name] = coalesce(spec.default, False)
        elif spec.default is not Unset:
            values[name] = spec.default

    return ParsedArgs(values, kept)


__all__ = (
    "OptionSpec",
    "Options",
    "ParsedArgs",
    "parse",
)
