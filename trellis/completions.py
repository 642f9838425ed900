"""
Trellis bash completion script generator.

generate() turns the option tables of the registered commands into a single,
self-contained bash script:

- the first word completes to command aliases and the global flags;
- each command gets a `case` arm offering its flags, the candidates of
  value-taking flags, and a positional handler (files, directories or nothing);
- on double-tab listing (COMP_TYPE 63) flags are printed with their localized
  description.

Descriptions come from the string table, so every text is escaped before it is
embedded in the script (escape_single for single-quoted keys, escape_double for
double-quoted values).
"""
import asyncio
import inspect
import re
import textwrap
import warnings
from collections.abc import Mapping
from datetime import datetime, timezone

from .arguments import Options
from .faults import CommandLoadWarning
from .utils import Unset, concur, lookup, substitute

GLOBAL_FLAGS = ("--help", "--version")

_NAME = re.compile(r"[^\W\d_][\w-]*")

_SCRIPT = textwrap.dedent("""\
    #!/usr/bin/env bash
    # Bash completion for {prog}
    # Generated on: {stamp}

    _{prog}_completions() {{
      local cur prev words cword
      _get_comp_words_by_ref -n : cur prev words cword

      local subcommands="{subcommands}"
      local global_opts="{globals}"

      _{prog}_filedir() {{
        local expanded_cur="${{cur/#~/$HOME}}"
        mapfile -t COMPREPLY < <(compgen -f -- "${{expanded_cur}}")
        if [[ "${{cur}}" == "~"* && "${{#COMPREPLY[@]}}" -gt 0 ]]; then
          for i in "${{!COMPREPLY[@]}}"; do
            COMPREPLY[i]="~/${{COMPREPLY[i]#"$HOME"/}}"
          done
        fi
      }}

      _{prog}_dirdir() {{
        local expanded_cur="${{cur/#~/$HOME}}"
        mapfile -t COMPREPLY < <(compgen -d -- "${{expanded_cur}}")
        if [[ "${{cur}}" == "~"* && "${{#COMPREPLY[@]}}" -gt 0 ]]; then
          for i in "${{!COMPREPLY[@]}}"; do
            COMPREPLY[i]="~/${{COMPREPLY[i]#"$HOME"/}}"
          done
        fi
      }}

      if [[ $cword -eq 1 ]]; then
        COMPREPLY=( $(compgen -W "${{subcommands}} ${{global_opts}}" -- "${{cur}}") )
        return 0
      fi

      case "${{words[1]}}" in
    {arms}
        help)
          COMPREPLY=( $(compgen -W "${{subcommands}}" -- "${{cur}}") )
          ;;
        *)
          COMPREPLY=()
          ;;
      esac

      return 0
    }}

    complete -F _{prog}_completions {prog}
""")

_DESCRIBE = (
    '  if [[ "${cur}" == -* ]]; then',
    '    COMPREPLY=( $(compgen -W "${_opts}" -- "${cur}") )',
    '    if [[ -n "${COMP_TYPE-}" && "${COMP_TYPE}" -eq 63 ]]; then',
    '      printf "\\n"',
    "      local k d",
    '      for k in "${COMPREPLY[@]}"; do',
    '        d="${_descriptions["${k}"]:-}"',
    '        if [[ -n "${d}" ]]; then',
    '          printf "%-28s %s\\n" "${k}" "${d}"',
    "        else",
    '          printf "%s\\n" "${k}"',
    "        fi",
    "      done",
    "      COMPREPLY=()",
    "    fi",
    "    return 0",
    "  fi",
)


def escape_single(text, /):
    """
    Escape text for a single-quoted bash word: ' becomes '"'"'.
    """
    if not text:
        return ""
    return text.replace("'", "'\"'\"'")


def escape_double(text, /):
    """
    Escape text for a double-quoted bash word.

    Backslashes go first so the escapes added for ", $ and ` are not doubled;
    line breaks become a literal \\n.
    """
    if not text:
        return ""
    for character in ("\\", '"', "$", "`"):
        text = text.replace(character, "\\" + character)
    return text.replace("\r\n", "\\n").replace("\n", "\\n")


def handler(command, prog, /):
    """
    Bash statement completing the positionals of command.
    """
    if not getattr(command, "positionals", False):
        return "COMPREPLY=()"
    match getattr(command, "completion", "none"):
        case "file":
            return f"_{prog}_filedir"
        case "directory":
            return f"_{prog}_dirdir"
        case _:
            return "COMPREPLY=()"


def arm(alias, command, flags, /, *, prog):
    """
    Render the `case` arm of one command.

    parameters
    - alias: the command alias (case pattern).
    - command: object exposing options, positionals, completion, replacements.
    - flags: long name -> localized description (may hold placeholders).
    - prog: program name, used for the positional helpers.
    """
    options = command.options if isinstance(command.options, Options) else Options(command.options)
    replacements = getattr(command, "replacements", None) or {}
    positional = handler(command, prog)

    switches = []
    valued = []
    candidates = []
    descriptions = []

    for name, spec in options.items():
        names = ["--" + name]
        if spec.short:
            names.append("-" + spec.short)

        description = escape_double(substitute(flags.get(name, ""), replacements))
        for flag in names:
            descriptions.append(f"  _descriptions['{escape_single(flag)}']=\"{description}\"")
        switches.extend(names)

        if spec.valued:
            valued.extend(names)
            if spec.completions:
                candidates.append(("|".join(names), " ".join(map(escape_double, spec.completions))))

    lines = [
        f"{alias})",
        f'  local _opts="{" ".join(sorted(set(switches)))}"',
        "  declare -A _descriptions=()",
        *descriptions,
    ]

    if valued:
        lines.append(f'  if [[ " {" ".join(map(escape_double, valued))} " == *" ${{prev}} "* ]]; then')
        lines.append('    case "${prev}" in')
        for pattern, words in candidates:
            lines.append(f"      {pattern})")
            lines.append(f'        COMPREPLY=( $(compgen -W "{words}" -- "${{cur}}") )')
            lines.append("        ;;")
        lines.extend(("      *)", f"        {positional}", "        ;;", "    esac", "    return 0", "  fi"))

    lines.extend(_DESCRIBE)
    lines.extend((f"  {positional}", "  ;;"))
    return textwrap.indent("\n".join(lines), "    ")


async def resolve(commands, /, *, concurrency=4):
    """
    Call every command factory through a settled worker pool.

    Factories may return the command directly or an awaitable of it; failures
    are returned in place of the command.
    """
    def task(factory):
        async def run():
            command = factory()
            if inspect.isawaitable(command):
                command = await command
            return command
        return run

    return await concur([task(factory) for factory in commands.values()], concurrency=concurrency, settled=True)


def _skip(alias, error, strings, /):
    # one-line comment in place of the arm; the cause travels with the warning
    message = " ".join(str(error).splitlines()) or type(error).__name__
    warning = CommandLoadWarning(
        substitute(lookup(strings, "errors.commands.co.coError", ""), {"Command": alias}),
        command=alias,
    )
    warning.__cause__ = error
    warnings.warn(warning, stacklevel=3)
    return f"    # failed to load command {alias}: {message}"


def generate(commands, strings, /, *, prog, stamp=Unset, concurrency=4):
    """
    Build the bash completion script for prog.

    parameters
    - commands: mapping alias -> zero-argument factory returning a command.
    - strings: string table; flag descriptions are read from
      help.commands.<alias>.flags.
    - prog: program name (completion function and helper names derive from it).
    - stamp: generation time (datetime or text); now, in UTC, when Unset.
    - concurrency: number of factories resolved at once.

    A command whose factory fails, or whose case arm cannot be built from its
    metadata and flag descriptions, is replaced by a one-line comment and
    reported with a CommandLoadWarning; the rest of the script is still
    generated.

    raises ValueError when prog or an alias is not a plain command name, since
    both are embedded unquoted (function names, case patterns).
    """
    for name in (prog, *commands):
        if not isinstance(name, str) or not _NAME.fullmatch(name):
            raise ValueError(f"generate() names must be valid command names, not {name!r}")

    aliases = sorted(commands)
    resolved = dict(zip(commands, asyncio.run(resolve(commands, concurrency=concurrency))))

    if stamp is Unset:
        stamp = datetime.now(timezone.utc)
    if isinstance(stamp, datetime):
        stamp = stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    arms = []
    for alias in aliases:
        # the help arm is fixed and completes command aliases
        if alias == "help":
            continue

        if not isinstance(command := resolved[alias], Exception):
            if not isinstance(flags := lookup(strings, f"help.commands.{alias}.flags", None), Mapping):
                flags = {}
            try:
                arms.append(arm(alias, command, flags, prog=prog))
                continue
            except Exception as error:
                command = error

        arms.append(_skip(alias, command, strings))

    return _SCRIPT.format(
        prog=prog,
        stamp=" ".join(str(stamp).splitlines()),
        subcommands=" ".join(aliases),
        globals=" ".join(sorted(GLOBAL_FLAGS)),
        arms="\n".join(arms),
    )


__all__ = (
    "GLOBAL_FLAGS",
    "escape_single",
    "escape_double",
    "handler",
    "arm",
    "resolve",
    "generate",
)
