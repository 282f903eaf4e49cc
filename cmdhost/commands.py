"""
cmdhost command layer: the descriptors a host application registers.

What this module provides
- Command: the capability interface of a hosted subcommand. A concrete command
  is one subclass (or one instance) exposing:
  • name      → the word typed after the program name (unique per registry).
  • synopsis  → the arguments part of its usage line ("[-o <file>] <source>...").
  • short     → one-line description, shown in listings.
  • long      → free-form help text, shown by "help <name>".
  • runnable  → False for pure help topics.
  • register(flags) → declare switches on the per-invocation FlagSet.
  • run(args, flags) → do the work; return None/0 on success, an int to pick
    the exit status, or raise CommandError to report a failure.
- Topic: a non-runnable command that only surfaces documentation.
- command(...): build a Command from a plain function (or return a decorator).

Quick start
    from cmdhost import App, Topic, CommandError

    app = App(short="compiles and ships things")

    @app.command(synopsis="[-o <file>] <source>...", short="compiles sources")
    def build(args, flags):
        '''Build compiles the named source files.'''
        if not args:
            raise CommandError("no source files given")

    class Workflow(Topic):
        name = "workflow"
        short = "describes the build workflow"
        long = "Sources are compiled with 'build' and shipped with 'ship'."

    app.add(Workflow())

    if __name__ == "__main__":
        app.run()

Design notes
- Metadata may be given as class attributes (one subclass per command) or as
  constructor arguments; constructor arguments win.
- Descriptors are validated on construction and treated as read-only once
  registered.
"""
import inspect
import re
from abc import ABC, abstractmethod

from rich.text import Text

from .faults import InvalidCommandError
from .utils import *


# A command name is a single shell word: it starts with a letter and continues
# with letters, digits, '-', '_' or '.'.
NAME_PATTERN = re.compile(r"[^\W\d_][\w.-]*")


def _sanitize(self, metadata, /):
    """
    Internal: validate and normalize command metadata in place.

    - name: required, a shell word matching NAME_PATTERN.
    - short: required, non-empty after trimming.
    - synopsis/long: strings (may be empty); long keeps its inner layout.
    """
    typename = type(self).__name__

    if not isinstance(name := metadata["name"], str):
        raise InvalidCommandError(f"{typename} 'name' must be a string", hint="set a 'name' attribute")
    elif not NAME_PATTERN.fullmatch(name := name.strip()):
        raise InvalidCommandError(
            f"{typename} name {name!r} is not a valid command name",
            hint="use a single word starting with a letter",
        )
    metadata["name"] = name

    if not isinstance(short := metadata["short"], str | Text) or not str(short).strip():
        raise InvalidCommandError(f"command {name!r} needs a non-empty short description")
    metadata["short"] = str(short).strip()

    for field in ("synopsis", "long"):
        if not isinstance(metadata[field], str | Text):
            raise InvalidCommandError(f"command {name!r} '{field}' must be a string")
        metadata[field] = str(metadata[field])
    metadata["synopsis"] = metadata["synopsis"].strip()


class Command(ABC):
    """
    Capability interface of a hosted subcommand.

    Subclasses provide metadata as class attributes and implement run(); see
    the module docstring for the meaning of each member.
    """
    name = Unset
    synopsis = ""
    short = Unset
    long = ""
    runnable = True
    hidden = False
    deprecated = False

    def __init__(
            self,
            name=Unset,
            synopsis=Unset,
            short=Unset,
            long=Unset,
            *,
            hidden=Unset,
            deprecated=Unset
    ):
        metadata = {
            "name": coalesce(name, type(self).name),
            "synopsis": coalesce(synopsis, type(self).synopsis),
            "short": coalesce(short, type(self).short),
            "long": coalesce(long, type(self).long),
        }
        _sanitize(self, metadata)
        for field, object in metadata.items():
            setattr(self, field, object)
        self.hidden = bool(coalesce(hidden, type(self).hidden))
        self.deprecated = bool(coalesce(deprecated, type(self).deprecated))

    def register(self, flags, /):
        """
        Declare this command's switches on a fresh FlagSet (default: none).
        """

    @abstractmethod
    def run(self, args, flags, /):
        """
        Execute the command with the arguments left after flag parsing.
        """

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, ", ".join("%s=%r" % pair for pair in self.__rich_repr__()))

    def __rich_repr__(self):
        yield "name", self.name
        yield "short", self.short
        yield "runnable", self.runnable
        if self.hidden:
            yield "hidden", True
        if self.deprecated:
            yield "deprecated", True


class Topic(Command):
    """
    Non-runnable command: a help topic listed under "additional help topics".
    """
    runnable = False

    def run(self, args, flags, /):
        return None


class CallbackCommand(Command):
    """
    Command wrapping a plain function; built by command(...).

    The callback receives (args, flags); an optional `register` callable
    receives the FlagSet before parsing.
    """

    def __init__(self, callback, /, register=Unset, **metadata):
        if not callable(callback):
            raise TypeError("command callback must be callable")
        if register is not Unset and not callable(register):
            raise TypeError("command 'register' must be callable")
        if "name" not in metadata and hasattr(callback, "__name__"):
            metadata["name"] = callback.__name__.replace("_", "-").strip("-")
        metadata.setdefault("long", inspect.getdoc(callback) or "")
        super().__init__(**metadata)
        self._callback = callback
        self._register = register

    def register(self, flags, /):
        if self._register:
            self._register(flags)

    def run(self, args, flags, /):
        return self._callback(args, flags)


def command(source=Unset, /, **kwargs):
    """
    Create a Command from a function or return a decorator to build it later.

    Invocation modes
    - Direct callback:
        build = command(compile_all, short="compiles sources")
    - Decorator:
        @command(short="compiles sources", synopsis="<source>...")
        def build(args, flags): ...

    Defaults
    - name: the function name, underscores turned into hyphens.
    - long: the function docstring.

    Keyword arguments
    - name, synopsis, short, long, hidden, deprecated: Command metadata.
    - register: callable(flags) declaring the command's switches.
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        return CallbackCommand(source, **kwargs)

    return wrapper(source) if source is not Unset else wrapper


__all__ = (
    "Command",
    "Topic",
    "CallbackCommand",
    "command",
)
