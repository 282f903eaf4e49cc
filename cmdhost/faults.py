"""
cmdhost faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by class so logs and searches stay predictable.
- ExitCode: the three process outcomes a dispatch can produce.
- CommandException / CommandWarning: base types that carry message + options and
  know how to render themselves through rich.
- trigger(): central entry point to surface a fault on a console.

Classes of faults
- configuration errors (ConfigurationError): raised while commands are being
  registered; they are programming errors and are never rendered by the dispatcher.
- usage errors (UsageError): missing/unknown commands and topics, bad flags;
  reported on stderr and mapped to ExitCode.USAGE.
- runtime errors (CommandError): raised by a command's own run(); reported on
  stderr as "<program> <command>: <message>" and mapped to ExitCode.FAILURE.

Integration
- Hosts may define __styles__ (palette overrides) and __codes__ (code → label)
  in __main__; both are read lazily at render time.
"""
import copy
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes used across the library (stable identifiers).

    grouping
    - configuration (101xx): DUPLICATE_COMMAND, RESERVED_COMMAND, INVALID_COMMAND
    - usage, routing (1020x): UNKNOWN_COMMAND, UNKNOWN_TOPIC, TOO_MANY_ARGUMENTS
    - usage, switches (1021x): UNKNOWN_SWITCH, OPTION_VALUE_REQUIRED,
      FLAG_ASSIGNMENT, INVALID_VALUE, DUPLICATED_SWITCH
    - runtime (103xx): COMMAND_FAILED, DOCUMENTATION_FAILED, DELEGATED_FAILURE
    - warnings (2xxxx): DEPRECATED_COMMAND
    """
    # --- configuration errors (101xx) ---
    DUPLICATE_COMMAND       = 10101
    RESERVED_COMMAND        = 10102
    INVALID_COMMAND         = 10103

    # --- routing errors (1020x) ---
    UNKNOWN_COMMAND         = 10201
    UNKNOWN_TOPIC           = 10202
    TOO_MANY_ARGUMENTS      = 10203

    # --- switch errors (1021x) ---
    UNKNOWN_SWITCH          = 10211
    OPTION_VALUE_REQUIRED   = 10212
    FLAG_ASSIGNMENT         = 10213
    INVALID_VALUE           = 10214
    DUPLICATED_SWITCH       = 10215

    # --- runtime errors (103xx) ---
    COMMAND_FAILED          = 10301
    DOCUMENTATION_FAILED    = 10302
    DELEGATED_FAILURE       = 10303

    # --- warnings (2xxxx) ---
    DEPRECATED_COMMAND      = 20101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ExitCode(IntEnum):
    """
    process outcome of a dispatch: success, runtime error or usage error.
    """
    SUCCESS = 0
    FAILURE = 1
    USAGE   = 2


class Fault:
    """
    rendering mixin shared by exceptions and warnings.

    subclasses set the class-level defaults `code`, `title` and `status`;
    any of them may be overridden per instance through options.

    recognized options
    - route: "<program>" or "<program> <command>", prefixed to the message.
    - hint: one actionable sentence shown under the message.
    - colorful: apply the palette (otherwise plain text).
    - fancy: wrap the fault in a titled panel.
    """
    code = Unset
    title = "fault"
    status = None

    __palette__ = {}

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)
        # Per-instance overrides of the class-level defaults.
        for name in ("code", "title", "status"):
            if name in options:
                setattr(self, name, options[name])

    def __rich__(self):
        styles = defaultdict(str, type(self).__palette__ | getattr(__import__("__main__"), "__styles__", {}))
        colorful = self.options.get("colorful", False)
        route = self.options.get("route")

        def text(fragment, style):
            return Text(str(fragment), styles[style] if colorful else "")

        message = Text.assemble(
            *((text(route, "route"), ": ") if route else ()),
            text(self.message or self.title, "message"),
        )
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

        if self.options.get("fancy", False):
            header = Text.assemble(
                "[ ",
                *((text(route, "route"), " — ") if route else ()),
                text(self.code.normalize() if self.code else "", "code"),
                " | ",
                text(self.title.title(), "title"),
                " ]",
            )
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(*renders)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class CommandException(Fault, Exception):
    __palette__ = {
        "route": "bold #E6E6F0",  # near-white program/command route
        "code": "bold #00E5FF",  # neon cyan fault code
        "title": "bold #FF4DA6",  # friendly pinky title
        "message": "#C8C8D0",  # soft light gray message
        "hint-arrow": "#9CE19C dim",  # gentle green arrow
        "hint": "italic #9CE19C",  # gentle green hint text
    }


class ConfigurationError(CommandException):
    title = "configuration error"

class DuplicateCommandError(ConfigurationError):
    code = FaultCode.DUPLICATE_COMMAND
    title = "duplicate command"

class ReservedCommandError(ConfigurationError):
    code = FaultCode.RESERVED_COMMAND
    title = "reserved command"

class InvalidCommandError(ConfigurationError):
    code = FaultCode.INVALID_COMMAND
    title = "invalid command"


class UsageError(CommandException):
    title = "usage error"
    status = ExitCode.USAGE

class UnknownCommandError(UsageError):
    code = FaultCode.UNKNOWN_COMMAND
    title = "unknown command"

class UnknownTopicError(UsageError):
    code = FaultCode.UNKNOWN_TOPIC
    title = "unknown help topic"

class TooManyArgumentsError(UsageError):
    code = FaultCode.TOO_MANY_ARGUMENTS
    title = "too many arguments"

class UnknownSwitchError(UsageError):
    code = FaultCode.UNKNOWN_SWITCH
    title = "unknown switch"

class OptionValueRequiredError(UsageError):
    code = FaultCode.OPTION_VALUE_REQUIRED
    title = "option value required"

class FlagAssignmentError(UsageError):
    code = FaultCode.FLAG_ASSIGNMENT
    title = "flag assignment"

class InvalidValueError(UsageError):
    code = FaultCode.INVALID_VALUE
    title = "invalid value"

class DuplicatedSwitchError(UsageError):
    code = FaultCode.DUPLICATED_SWITCH
    title = "duplicated switch"


class CommandError(CommandException):
    """
    runtime failure reported by a command.

    raise it (or a subclass) from run(); the dispatcher prints
    "<program> <command>: <message>" on stderr and exits with ExitCode.FAILURE.
    """
    code = FaultCode.COMMAND_FAILED
    title = "command failed"
    status = ExitCode.FAILURE

class DocumentationError(CommandError):
    code = FaultCode.DOCUMENTATION_FAILED
    title = "documentation failed"

class DelegatedCommandError(CommandError):
    """
    any other exception escaping a command's run(), wrapped by the dispatcher.

    the original exception is kept in the `exception` option.
    """
    code = FaultCode.DELEGATED_FAILURE
    title = "delegated error"


class CommandWarning(Fault, Warning):
    __palette__ = {
        "route": "bold #E6E6F0",  # near-white program/command route
        "code": "bold #FFB400",  # amber fault code for warnings
        "title": "bold #FFC2E0",  # softer pinky title for warnings
        "message": "#D6D6DE",  # slightly lighter gray body
        "hint-arrow": "#B8EFAF dim",  # softer green arrow
        "hint": "italic #B8EFAF",  # softer green hint text
    }
    title = "warning"

class DeprecatedCommandWarning(CommandWarning):
    code = FaultCode.DEPRECATED_COMMAND
    title = "deprecated command"


def trigger(fault, console, /, **options):
    """
    surface a fault on the given console with the given runtime options.

    contract
    - fault must provide __rich__ and __replace__ (see Fault).
    - options are merged into the fault via copy.replace before rendering.

    returns
    - the fault's exit status (None for warnings).
    """
    if (
        not hasattr(fault, "__rich__") or
        not callable(fault.__rich__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __rich__ and __replace__ methods")
    fault = copy.replace(fault, **options)
    console.print(fault)
    return fault.status


__all__ = (
    "FaultCode",
    "ExitCode",
    "CommandException",
    "ConfigurationError",
    "DuplicateCommandError",
    "ReservedCommandError",
    "InvalidCommandError",
    "UsageError",
    "UnknownCommandError",
    "UnknownTopicError",
    "TooManyArgumentsError",
    "UnknownSwitchError",
    "OptionValueRequiredError",
    "FlagAssignmentError",
    "InvalidValueError",
    "DuplicatedSwitchError",
    "CommandError",
    "DocumentationError",
    "DelegatedCommandError",
    "CommandWarning",
    "DeprecatedCommandWarning",
    "trigger",
)
