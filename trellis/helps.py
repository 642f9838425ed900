"""
Trellis help rendering.

A help section is one of two shapes:
- GenericHelp: the whole program (header, usage, command list, global options).
- SpecificHelp: a single command (usage, description, its options).

Language packs store sections as plain mappings; section() turns such a mapping
into the matching shape, render() lays it out with the wrapper/list formatter and
finally substitutes "{{ .Key }}" placeholders.

Example
    >>> help = SpecificHelp("usage: app hw [options]", "Print a greeting.", flags={"name": "Who to greet."})
    >>> print(render(help, Options({"name": {"type": "string", "short": "n"}})))
    usage: app hw [options]
    <BLANKLINE>
    Print a greeting.
    <BLANKLINE>
    Options:
      -n, --name <value>  Who to greet.
"""
import collections
from collections.abc import Mapping

from .arguments import Options
from .text import align, measure, wrap
from .utils import Unset, substitute

GenericHelp = collections.namedtuple(
    "GenericHelp",
    ("header", "usage", "commands_header", "commands", "options_header", "footer", "flags"),
    defaults=(None, None),
)

SpecificHelp = collections.namedtuple(
    "SpecificHelp",
    ("usage", "description", "footer", "flags", "options_header"),
    defaults=(None, None, "Options:"),
)


def section(mapping, /):
    """
    Build the help section described by a language-pack mapping.

    A mapping holding both "commandDescriptions" and "commandHeader" describes the
    whole program; anything else describes one command.
    """
    if not isinstance(mapping, Mapping):
        raise TypeError("section() argument must be a mapping")

    if "commandDescriptions" in mapping and "commandHeader" in mapping:
        return GenericHelp(
            header=mapping.get("header", ""),
            usage=mapping.get("usage", ""),
            commands_header=mapping["commandHeader"],
            commands=mapping["commandDescriptions"],
            options_header=mapping.get("globalOptionsHeader", ""),
            footer=mapping.get("footer"),
            flags=mapping.get("flags"),
        )

    return SpecificHelp(
        usage=mapping.get("usage", ""),
        description=mapping.get("description", ""),
        footer=mapping.get("footer"),
        flags=mapping.get("flags"),
        options_header=mapping.get("optionsHeader", "Options:"),
    )


def label(name, spec, /):
    """
    Display key of an option: "-s, --long <value>", "--long", ...
    """
    parts = []
    if spec.short:
        parts.append(f"-{spec.short},")
    parts.append(f"--{name}")
    if spec.valued:
        parts.append("<value>")
    return " ".join(parts)


def render(section, options=Unset, replacements=None, /, *, width=80, indent=2):
    """
    Render a help section to text.

    parameters
    - section: GenericHelp | SpecificHelp.
    - options: the command's Options table (SpecificHelp only); when missing, the
      options list is skipped.
    - replacements: mapping used for "{{ .Key }}" substitution on the final text.
    - width: render width in cells.
    - indent: list indentation (also used as the column gap).

    layout
    - GenericHelp: commands and global flags share one first-column width, the
      widest key of both lists plus the indent, so the two lists line up.
    - SpecificHelp: options are listed in table order with their localized
      description from section.flags.
    """
    lines = []

    match section:
        case GenericHelp():
            commands = list(section.commands.items())
            flags = [("--" + flag, descr) for flag, descr in (section.flags or {}).items()]
            column = max(map(measure, (key for key, _ in commands + flags)), default=0) + indent

            lines.extend(wrap(section.header, width))
            lines.extend(["", *wrap(section.usage, width)])
            lines.append("\n" + section.commands_header)
            lines.append(align(commands, width=width, gap=indent, force=column, indent=indent))

            if section.footer:
                lines.extend(["", *wrap(section.footer, width)])

            if flags:
                lines.append("\n" + section.options_header)
                lines.append(align(flags, width=width, gap=indent, force=column, indent=indent))

        case SpecificHelp():
            lines.extend(wrap(section.usage, width))
            lines.extend(["", *wrap(section.description, width)])

            if section.flags and options:
                if not isinstance(options, Options):
                    options = Options(options)
                lines.append("\n" + section.options_header)
                lines.append(align(
                    ((label(name, spec), section.flags.get(name, "")) for name, spec in options.items()),
                    width=width,
                    gap=indent,
                    indent=indent,
                ))

            if section.footer:
                lines.extend(["", *wrap(section.footer, width)])

        case _:
            raise TypeError("render() argument must be a generic or specific help section")

    return substitute("\n".join(lines), replacements or {})


__all__ = (
    "GenericHelp",
    "SpecificHelp",
    "section",
    "label",
    "render",
)
