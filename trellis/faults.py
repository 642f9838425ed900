"""
Trellis faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues
  (errors and warnings). Codes are grouped by domain to keep copy consistent
  and make logs/searches predictable.
- CommandException / CommandWarning: base types that carry a localized message
  plus free-form options and know how to render themselves with rich.
- report(): central entry point that prints any fault on the stderr console.

Conventions
- The message is already localized when the fault is built; faults never look
  strings up by themselves.
- Lower-level failures are chained with `raise ... from error`; the renderer
  prints the cause on its own line.
- Warnings are emitted with warnings.warn and only shown by the entry point in
  debug mode.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .utils import Unset

console = Console(stderr=True, highlight=False)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the cli (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_COMMAND
    - options (1111x)
      • UNKNOWN_OPTION, BOOLEAN_WITH_VALUE, MISSING_VALUE
    - positionals (1112x)
      • UNEXPECTED_POSITIONAL
    - locales (1120x)
      • LOCALE_LOAD_FAILED, INVALID_LOCALE, PREFERENCE_WRITE_FAILED
    - warnings (12xxx)
      • NARROW_LIST, COMMAND_LOAD_FAILED, UNSUPPORTED_PLATFORM

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_COMMAND         = 11101

    # --- option errors (11xxx) ---
    UNKNOWN_OPTION          = 11111
    BOOLEAN_WITH_VALUE      = 11112
    MISSING_VALUE           = 11113

    # --- positional errors (11xxx) ---
    UNEXPECTED_POSITIONAL   = 11121

    # --- locale errors (11xxx) ---
    LOCALE_LOAD_FAILED      = 11201
    INVALID_LOCALE          = 11202
    PREFERENCE_WRITE_FAILED = 11203

    # --- warnings (12xxx) ---
    NARROW_LIST             = 12101
    COMMAND_LOAD_FAILED     = 12131
    UNSUPPORTED_PLATFORM    = 12201

    def normalize(self):
        """
        return the code as the string shown to users and written to logs.
        """
        return str(self.value)


_STYLES = {
    "prog-name": "bold #E6E6F0",  # near-white program name
    "error-code": "bold #00E5FF",  # neon cyan fault code
    "error-title": "bold #FF4DA6",  # friendly pinky title
    "error-message": "#C8C8D0",
    "warning-code": "bold #FFB400",  # amber fault code for warnings
    "warning-title": "bold #FFC2E0",
    "warning-message": "#D6D6DE",
    "cause-arrow": "#9CE19C dim",
    "cause": "italic #9CE19C",
}


def _render(fault, kind, /):
    styles = defaultdict(str, _STYLES)
    colorful = fault.options.get("colorful", True)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        return Text(str(fragment), styles[style] if colorful else "")

    header = Text.assemble(
        "[ ",
        text(fault.options.get("prog", "trellis"), "prog-name"),
        " — ",
        text(fault.code.normalize(), kind + "-code"),
        " | ",
        text(fault.title, kind + "-title"),
        " ]",
    )
    renders = [header, text(fault.message, kind + "-message")]

    if (cause := getattr(fault, "__cause__", None)) is not None:
        renders.append(Text.assemble(
            text(">", "cause-arrow"),
            text(fault.options.get("prefix", "Cause:"), "cause"),
            " ",
            text(str(cause) or type(cause).__name__, "cause"),
        ))

    return Group(*renders)


class CommandException(Exception):
    """
    base class of every error raised by trellis.

    attributes
    - message: localized, human readable text.
    - code: FaultCode (class-level, stable).
    - title: short english label shown in the rendered header.
    - options: read-only mapping of context (option name, token, program...).
    """
    code = Unset
    title = "error"

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __rich__(self):
        return _render(self, "error")

    def __replace__(self, **overrides):
        fault = type(self)(self.message, **{**self.options, **overrides})
        fault.__cause__ = self.__cause__
        return fault


class UnknownCommandError(CommandException):
    code = FaultCode.UNKNOWN_COMMAND
    title = "unknown command"


class UnknownOptionError(CommandException):
    code = FaultCode.UNKNOWN_OPTION
    title = "unknown option"


class BooleanWithValueError(CommandException):
    code = FaultCode.BOOLEAN_WITH_VALUE
    title = "flag cannot take a value"


class MissingValueError(CommandException):
    code = FaultCode.MISSING_VALUE
    title = "missing value"


class UnexpectedPositionalError(CommandException):
    code = FaultCode.UNEXPECTED_POSITIONAL
    title = "unexpected positional"


class LocaleLoadError(CommandException):
    code = FaultCode.LOCALE_LOAD_FAILED
    title = "language pack unavailable"


class InvalidLocaleError(CommandException):
    code = FaultCode.INVALID_LOCALE
    title = "unsupported locale"


class PreferenceWriteError(CommandException):
    code = FaultCode.PREFERENCE_WRITE_FAILED
    title = "preference not saved"


class CommandWarning(Warning):
    """
    base class of every non-fatal diagnostic.

    emitted through warnings.warn(); the entry point collects them and prints
    them on the stderr console when debug mode is on.
    """
    code = Unset
    title = "warning"

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __rich__(self):
        return _render(self, "warning")

    def __replace__(self, **overrides):
        fault = type(self)(self.message, **{**self.options, **overrides})
        fault.__cause__ = self.__cause__
        return fault


class NarrowListWarning(CommandWarning):
    code = FaultCode.NARROW_LIST
    title = "not enough room"


class CommandLoadWarning(CommandWarning):
    code = FaultCode.COMMAND_LOAD_FAILED
    title = "command skipped"


class UnsupportedPlatformWarning(CommandWarning):
    code = FaultCode.UNSUPPORTED_PLATFORM
    title = "unsupported platform"


def report(fault, /, **options):
    """
    print a fault on the stderr console with the given runtime options.

    contract
    - fault must be a CommandException or a CommandWarning.
    - options (prog, prefix, colorful, ...) are merged into the fault via __replace__
      before rendering; the original fault is left untouched.
    """
    if not isinstance(fault, CommandException | CommandWarning):
        raise TypeError("report() argument must be a command exception or warning")
    console.print(fault.__replace__(**options))


__all__ = (
    "CommandException",
    "UnknownCommandError",
    "UnknownOptionError",
    "BooleanWithValueError",
    "MissingValueError",
    "UnexpectedPositionalError",
    "LocaleLoadError",
    "InvalidLocaleError",
    "PreferenceWriteError",
    "CommandWarning",
    "NarrowListWarning",
    "CommandLoadWarning",
    "UnsupportedPlatformWarning",
    "FaultCode",
    "report",
)
