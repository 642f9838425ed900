"""
Trellis utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the parser, the renderers and the locale layer.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the higher-level modules.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr) through frozen views.

- freeze(object)
  • Recursively turn mappings into read-only views and sequences into tuples.

- substitute(template, replacements)
  • Replace "{{ .Key }}" placeholders; unknown keys are left verbatim.

- lookup(mapping, "dotted.path", default)
  • Walk nested string tables without a cascade of try/except blocks.

- deepmerge(base, override)
  • Overlay an override mapping onto a base mapping (mappings merge, anything else replaces).

- concur(tasks, concurrency=..., settled=...)
  • Fixed-size asyncio worker pool with first-error or all-settled collection.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> substitute("hi {{ .Name }}", {"Name": "ada"})
    'hi ada'
    >>> deepmerge({"a": {"x": 1, "y": 2}}, {"a": {"y": 3}})
    {'a': {'x': 1, 'y': 3}}
"""
import asyncio
import functools
import re
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    This is used when None is a legitimate user value, but the API needs a way
    to distinguish “not provided” from “provided as None”. A single instance,
    Unset, is exposed for use as the default in internal parameters.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., str | Unset).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, 0, "" or [] are preserved as-is; only Unset is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def freeze(object, /):
    """
    Recursively build a read-only copy of nested containers.

    Behavior
    - Mapping: a MappingProxyType over a fresh dict whose values are frozen.
    - Sequence (non-string): a tuple of frozen items.
    - Set: a frozenset.
    - Anything else: returned as-is.

    Keys in mappings are preserved exactly; only values are transformed.
    """
    if isinstance(object, Mapping):
        return MappingProxyType(dict(zip(object.keys(), map(freeze, object.values()))))
    elif isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(map(freeze, object))
    elif isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads "_{name}" on the instance and returns a frozen
    view for container values, so public state cannot be mutated through it.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    def getter(self):
        return freeze(getattr(self, "_" + name))

    getter.__name__ = getter.__qualname__ = name
    return property(getter)


_PLACEHOLDER = re.compile(r"\{\{\s*\.(.*?)\s*\}\}")


def substitute(template, replacements, /):
    """
    Replace every "{{ .Key }}" token with replacements[Key].

    Whitespace around the dotted key is tolerated ("{{.Key}}" works too). A key
    absent from replacements leaves its placeholder untouched so a missing
    translation stays visible instead of failing.
    """
    if not template:
        return ""

    def replace(match):
        try:
            return str(replacements[match[1]])
        except KeyError:
            return match[0]

    return _PLACEHOLDER.sub(replace, template)


def lookup(mapping, path, default=None, /):
    """
    Fetch a nested value by dotted path ("errors.cli.unknownOption").

    Returns default when any segment is missing or a non-mapping is hit midway.
    """
    object = mapping
    for segment in path.split("."):
        if not isinstance(object, Mapping) or segment not in object:
            return default
        object = object[segment]
    return object


def deepmerge(base, override, /):
    """
    Overlay override onto base and return a new dict.

    Rules
    - keys only in base are kept.
    - keys only in override are added.
    - when both values are mappings, they are merged recursively.
    - otherwise the override value replaces the base value, whatever its shape
      (a scalar may replace a whole mapping).

    Neither input is modified.
    """
    merged = dict(base)
    for key, value in override.items():
        if isinstance(current := merged.get(key), Mapping) and isinstance(value, Mapping):
            merged[key] = deepmerge(current, value)
        else:
            merged[key] = value
    return merged


async def concur(tasks, /, *, concurrency=1, settled=False):
    """
    Run coroutine factories through a fixed-size pool of workers.

    parameters
    - tasks: iterable of zero-argument callables returning awaitables.
    - concurrency: number of workers (at least one, at most len(tasks)).
    - settled: False → the first failure is re-raised and no new task is started;
      True → every task runs and failures are returned in place of results.

    returns
    - list of results in the order of tasks.
    """
    tasks = list(tasks)
    results = [Unset] * len(tasks)
    failures = []
    pending = iter(enumerate(tasks))

    async def worker():
        # the shared iterator hands each index to exactly one worker
        for index, task in pending:
            if failures:
                return
            try:
                results[index] = await task()
            except Exception as exception:
                if not settled:
                    failures.append(exception)
                    return
                results[index] = exception

    workers = min(max(1, int(concurrency)), len(tasks))
    await asyncio.gather(*(worker() for _ in range(workers)))

    if failures:
        raise failures[0]
    return results


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Use Unset as a default when None is a valid, user-meaningful value but you still
need to distinguish “no input” from “explicitly passed None”.
"""


__all__ = (
    # Functions
    "coalesce",
    "freeze",
    "mirror",
    "substitute",
    "lookup",
    "deepmerge",
    "concur",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
