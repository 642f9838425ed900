"""
Trellis command layer: command base type, built-in commands and the entry point.

What this module provides
- Command: base class of every command. A command declares its surface as class
  attributes and implements execute(context, argv):
  • alias: name typed on the command line ("hw").
  • options: option table (Options or a mapping accepted by Options).
  • positionals: whether positional arguments are accepted.
  • completion: how shell completion handles positionals ("file", "directory", "none").
  • replacements: extra placeholders for the command's help and completion text.
- Built-in commands: help, hw (hello world), cfg (configuration), co (completion).
- CommandId / REGISTRY: the static alias -> command class table.
- main(argv): parse global options, dispatch to a command, render faults.

Global options
- Only tokens before the command alias are global: `--version`, `--debug`/`-d`
  and `--help`/`-h` (same as the help command). Everything after the alias
  belongs to the command.

Exit status
- 0 on success, 1 when a CommandException reaches main(). Other exceptions
  propagate.
"""
import enum
import os
import re
import sys
import warnings
from collections.abc import Mapping
from types import MappingProxyType

from rich.console import Console
from rich.text import Text

from .arguments import Options, parse
from .completions import generate
from .context import bootstrap
from .faults import *
from .faults import console
from .helps import render, section
from .locales import LOCALES, listing
from .utils import *

output = Console(highlight=False, soft_wrap=True)


def echo(text, /):
    """
    Print text verbatim on stdout (no markup, no re-wrapping).
    """
    output.print(Text(text))


def _sanitize_metadata(cls, /):
    """
    Internal: validate and normalize the class-level metadata of a command.

    - alias: Unset or a command name ("hw", "dry-run").
    - options: normalized to an Options table.
    - positionals: bool.
    - completion: "file" | "directory" | "none".
    - replacements: mapping of str to str, frozen.
    """
    if not isinstance(alias := cls.alias, str | Unset):
        raise TypeError(f"{cls.__typename__} 'alias' must be a string")
    elif isinstance(alias, str) and not re.fullmatch(r"[^\W\d_][\w-]*", alias):
        raise ValueError(f"{cls.__typename__} 'alias' must be a valid command name")

    if not isinstance(options := cls.options, Options):
        if not isinstance(options, Mapping):
            raise TypeError(f"{cls.__typename__} 'options' must be a mapping")
        cls.options = Options(options)

    if not isinstance(cls.positionals, bool):
        raise TypeError(f"{cls.__typename__} 'positionals' must be a bool")

    if cls.completion not in ("file", "directory", "none"):
        raise ValueError(f"{cls.__typename__} 'completion' must be one of 'file', 'directory' or 'none'")

    if not isinstance(replacements := cls.replacements, Mapping):
        raise TypeError(f"{cls.__typename__} 'replacements' must be a mapping")
    for key, value in replacements.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise TypeError(f"{cls.__typename__} 'replacements' must map strings to strings")
    cls.replacements = MappingProxyType(dict(replacements))


class CommandType(type):
    """
    Metaclass of Command: validates the declared surface once, at class creation.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      for readable diagnostics ("hello-command").
    - a malformed declaration fails at import time, never at run time.
    """

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {"__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower()},
            **options,
        )
        _sanitize_metadata(self)
        return self

    def __repr__(self):
        return f"{self.__typename__}(alias={self.alias!r})"


class Command(metaclass=CommandType):
    """
    Base class of every command.

    Subclasses declare alias/options/positionals/completion/replacements and
    implement execute(). Instances carry no state: the context is passed in.
    """
    alias = Unset
    options = {}
    positionals = False
    completion = "none"
    replacements = {}

    def parse(self, context, argv, /):
        """
        Parse argv strictly against this command's options.
        """
        return parse(argv, type(self).options, positionals=type(self).positionals, strict=True, strings=context.strings)

    def help(self, context, replacements=None, /):
        """
        Render the localized help of this command.
        """
        return render(
            section(lookup(context.strings, f"help.commands.{type(self).alias}", None) or {}),
            type(self).options,
            {**context.replacements, **type(self).replacements, **(replacements or {})},
            width=context.width,
            indent=context.indent,
        )

    def message(self, context, path, replacements=None, /):
        """
        Localized string at path with the context and given placeholders applied.
        """
        return substitute(lookup(context.strings, path, ""), {**context.replacements, **(replacements or {})})

    def execute(self, context, argv, /):
        """
        Run the command with the tokens following its alias; return the exit status.
        """
        raise NotImplementedError


class HelpCommand(Command):
    """
    Print the program-wide help.
    """
    alias = "help"

    def execute(self, context, argv, /):
        self.parse(context, argv)
        echo(render(
            section(lookup(context.strings, "help.generic")),
            Unset,
            context.replacements,
            width=context.width,
            indent=context.indent,
        ))
        return 0


class HelloCommand(Command):
    """
    Print a greeting.
    """
    alias = "hw"
    options = {
        "help": {"type": "boolean", "short": "h"},
        "name": {"type": "string", "short": "n", "default": "World"},
    }
    replacements = {"Default": "World"}

    def execute(self, context, argv, /):
        values, _ = self.parse(context, argv)
        if values["help"]:
            echo(self.help(context))
            return 0
        echo(self.message(context, "messages.commands.hw.greeting", {"Name": values["name"]}))
        return 0


class ConfigCommand(Command):
    """
    Show the configuration help or change the display language.

    Without arguments (or with --help) the help is printed, listing the
    available locales. `--lang <code>` validates code and persists it in the
    state directory.
    """
    alias = "cfg"
    options = {
        "help": {"type": "boolean", "short": "h"},
        "lang": {"type": "string", "short": "l", "completions": tuple(info.code for info in LOCALES)},
    }

    def execute(self, context, argv, /):
        values, _ = self.parse(context, argv)

        if values["help"] or not values.get("lang"):
            echo(self.help(context, {
                "LocaleList": listing(
                    context.locales,
                    separator=context.separator,
                    indent=context.indent,
                    width=context.width,
                ),
            }))
            return 0

        if (lang := values["lang"]) not in context.locales.supported:
            raise InvalidLocaleError(
                self.message(context, "errors.commands.cfg.invalidLocale", {"Lang": lang}),
                locale=lang,
            )

        context.preference.write(lang, strings=context.strings)
        echo(self.message(context, "messages.commands.cfg.localeSuccessfullyChanged", {"Locale": lang}))
        return 0


class CompletionCommand(Command):
    """
    Print the bash completion script of every registered command.
    """
    alias = "co"
    options = {
        "help": {"type": "boolean", "short": "h"},
    }

    def execute(self, context, argv, /):
        values, _ = self.parse(context, argv)
        if values["help"]:
            echo(self.help(context))
            return 0
        factories = {str(alias): (lambda command=command: command) for alias, command in REGISTRY.items()}
        echo(generate(factories, context.strings, prog=context.name))
        return 0


class CommandId(enum.StrEnum):
    """
    Aliases of the built-in commands.
    """
    CFG = "cfg"
    CO = "co"
    HELP = "help"
    HW = "hw"


REGISTRY = MappingProxyType({
    CommandId.CFG: ConfigCommand,
    CommandId.CO: CompletionCommand,
    CommandId.HELP: HelpCommand,
    CommandId.HW: HelloCommand,
})

DEFAULT = CommandId.HELP

GLOBAL_OPTIONS = Options({
    "help": {"type": "boolean", "short": "h"},
    "version": {"type": "boolean"},
    "debug": {"type": "boolean", "short": "d"},
})


def split(argv, /):
    """
    Split argv into (global tokens, alias, command tokens).

    The alias is the first token that does not look like an option; alias is
    Unset when there is none.
    """
    for index, token in enumerate(argv):
        if not token.startswith("-") or token == "-":
            return argv[:index], token, argv[index + 1:]
    return argv, Unset, []


def dispatch(context, alias, argv, /):
    """
    Run the command registered under alias with argv; return its exit status.

    raises UnknownCommandError for unregistered aliases.
    """
    if (command := REGISTRY.get(alias)) is None:
        raise UnknownCommandError(
            substitute(
                lookup(context.strings, "errors.cli.commandNotImplemented", ""),
                {**context.replacements, "CommandAlias": alias},
            ),
            command=alias,
        )
    return command().execute(context, argv)


def main(argv=None, /, *, environ=os.environ):
    """
    Console entry point.

    Steps
    1. build the context (locale, strings, state directory).
    2. parse global options from the tokens before the command alias.
    3. `--version` prints "<name>: <version>"; otherwise dispatch to the alias
       (help when none is given or with `--help`).

    Faults are rendered on stderr with the localized cause prefix and turn into
    exit status 1. Warnings are collected and shown only with --debug, together
    with the traceback of a fault.
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    leading, alias, rest = split(argv)
    context = Unset
    debug = False

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            context = bootstrap(environ=environ)
            values, _ = parse(leading, GLOBAL_OPTIONS, strings=context.strings)
            debug = values["debug"]
            context = context.evolve(debug=debug)

            if values["version"]:
                echo(f"{context.name}: {context.version}")
                status = 0
            elif values["help"]:
                status = dispatch(context, DEFAULT, [])
            else:
                status = dispatch(context, coalesce(alias, DEFAULT), rest)
        except CommandException as exception:
            strings = context.strings if context is not Unset else {}
            report(
                exception,
                prog=context.name if context is not Unset else "trellis",
                prefix=lookup(strings, "errors.cli.causePrefix", "Cause:"),
            )
            if debug:
                console.print_exception()
            status = 1

    if debug:
        for warning in caught:
            if isinstance(warning.message, CommandWarning):
                report(warning.message, prog=context.name)
            else:
                warnings.showwarning(warning.message, warning.category, warning.filename, warning.lineno)

    return status


__all__ = (
    "Command",
    "HelpCommand",
    "HelloCommand",
    "ConfigCommand",
    "CompletionCommand",
    "CommandId",
    "REGISTRY",
    "GLOBAL_OPTIONS",
    "echo",
    "split",
    "dispatch",
    "main",
)

# Keep the metaclass out of star-imports and docs; Command is the public base.
del CommandType
