"""
cmdhost application: metadata, the registry it owns and the dispatcher.

Dispatch (App.dispatch) has two phases:
- resolution: decide which command applies.
  • no arguments          → usage listing on stderr, ExitCode.USAGE.
  • "help"                → the built-in help pseudo-command (always wins).
  • a registered runnable → that command.
  • anything else         → UnknownCommandError on stderr, ExitCode.USAGE.
- execution: run exactly one command.
  • a fresh FlagSet is built, the command registers its switches on it and the
    arguments after the command name are parsed against it.
  • -h/--help (unless claimed by the command) prints its page and succeeds.
  • run(remaining, flags) returning None → ExitCode.SUCCESS; an int → that status.
  • UsageError (from parsing or from run) → ExitCode.USAGE.
  • CommandError from run → "<program> <command>: <message>", ExitCode.FAILURE.
  • any other exception from run → wrapped in DelegatedCommandError, same report.

dispatch() never terminates the process; run() is the single entry point that
does, so dispatch stays usable from tests and embedding hosts.

Configuration
- Constructor keywords default to Unset and are resolved with coalesce():
  name (else __main__.__prog__, else the base name of sys.argv[0]), short, long,
  synopsis, docfile ("doc.py"), stdout/stderr (rich consoles), fancy, colorful.
"""
import os.path
import shlex
import sys
from collections.abc import Iterable

from rich.console import Console

from .commands import Topic, command as _command
from .faults import *
from .flags import FlagSet
from .helper import Help, command_help, suggest, usage
from .registry import Registry
from .utils import *

SYNOPSIS = "[help] <command> [<args>...]"
DOCFILE = "doc.py"


class App:
    """
    A command-line application hosting a set of commands.

    Example
        app = App("tool", short="tool builds things")
        app.add(Build())
        app.topic("workflow", "describes the build workflow", WORKFLOW)
        app.run()
    """

    def __init__(
            self,
            name=Unset,
            /,
            short=Unset,
            long=Unset,
            synopsis=Unset,
            commands=(),
            *,
            docfile=Unset,
            stdout=Unset,
            stderr=Unset,
            fancy=Unset,
            colorful=Unset
    ):
        main = __import__("__main__")
        metadata = {
            "name": coalesce(name, getattr(main, "__prog__", os.path.basename(sys.argv[0]))),
            "short": coalesce(short, ""),
            "long": coalesce(long, ""),
            "synopsis": coalesce(synopsis, SYNOPSIS),
            "docfile": coalesce(docfile, DOCFILE),
        }
        for field, object in metadata.items():
            if field == "docfile" and isinstance(object, os.PathLike):
                continue
            if not isinstance(object, str):
                raise TypeError(f"application '{field}' must be a string")
        metadata["name"] = metadata["name"].strip()
        if not metadata["name"]:
            raise ValueError("application 'name' cannot be empty")
        for field, object in metadata.items():
            setattr(self, "_" + field, object)

        for field, console in (("stdout", stdout), ("stderr", stderr)):
            if not isinstance(console, Console | Unset):
                raise TypeError(f"application '{field}' must be a rich console")
        self._stdout = Console() if stdout is Unset else stdout
        self._stderr = Console(stderr=True) if stderr is Unset else stderr
        self._fancy = bool(coalesce(fancy, False))
        self._colorful = bool(coalesce(colorful, False))

        self._registry = Registry()
        self._helper = Help(self)
        for command in commands:
            self.add(command)

    name = mirror("name")
    short = mirror("short")
    long = mirror("long")
    synopsis = mirror("synopsis")
    docfile = mirror("docfile")
    stdout = mirror("stdout")
    stderr = mirror("stderr")
    fancy = mirror("fancy")
    colorful = mirror("colorful")
    registry = mirror("registry")
    helper = mirror("helper")

    def add(self, command, /):
        """
        register a command or topic; configuration errors are raised, not reported.
        """
        return self._registry.add(command)

    def command(self, source=Unset, /, **kwargs):
        """
        build a command from a function and register it (direct or decorator form).
        """
        if source is not Unset:
            return self.add(_command(source, **kwargs))

        @rename("command")
        def wrapper(source, /):
            return self.add(_command(source, **kwargs))

        return wrapper

    def topic(self, name, short, long="", /, **kwargs):
        """
        register a non-runnable help topic.
        """
        return self.add(Topic(name, short=short, long=long, **kwargs))

    def lookup(self, name, /):
        return self._registry.lookup(name)

    def _trigger(self, fault, route):
        return trigger(fault, self._stderr, route=route, fancy=self._fancy, colorful=self._colorful)

    def dispatch(self, args, /):
        """
        Resolve args[0] to a command, parse its switches and run it.

        Returns the exit status (an ExitCode, or the int a command returned).
        """
        args = list(args)
        if not all(isinstance(arg, str) for arg in args):
            raise TypeError("dispatch() argument must be an iterable of strings")

        if not args:
            self._stderr.print(usage(self))
            return ExitCode.USAGE

        name, rest = args[0], args[1:]
        if name == "help":
            command = self._helper
        elif (command := self._registry.lookup(name)) is None:
            return self._trigger(UnknownCommandError("unknown command %r" % name, hint=suggest(self, name)), self._name)
        elif not command.runnable:
            return self._trigger(UnknownCommandError(
                "unknown command %r" % name,
                hint="%r is a help topic; run '%s help %s' to read it" % (command.name, self._name, command.name),
            ), self._name)

        route = "%s %s" % (self._name, command.name)
        if command.deprecated:
            self._trigger(DeprecatedCommandWarning(
                "command %r is deprecated" % command.name,
                hint="run '%s help %s' for details" % (self._name, command.name),
            ), route)

        flags = FlagSet(route)
        command.register(flags)
        try:
            remaining = flags.parse(rest)
            if flags.helped:
                self._stdout.print(command_help(self, command))
                return ExitCode.SUCCESS
            status = command.run(remaining, flags)
        except (UsageError, CommandError) as fault:
            return self._trigger(fault, route)
        except Exception as exception:
            # Failures inside user code are runtime errors of that command.
            return self._trigger(DelegatedCommandError(
                str(exception) or type(exception).__name__,
                hint="%s raised by '%s'" % (type(exception).__name__, command.name),
                exception=exception,
            ), route)

        if status is None:
            return ExitCode.SUCCESS
        if not isinstance(status, int):
            raise TypeError(f"command {command.name!r} returned {type(status).__name__}, expected an int or None")
        return status

    def run(self, argv=Unset, /):
        """
        Dispatch argv and terminate the process with the resulting status.

        argv
        - Unset: sys.argv[1:].
        - str: shell-like string, split with shlex.split.
        - Iterable[str]: pre-tokenized arguments.
        """
        if argv is Unset:
            tokens = sys.argv[1:]
        elif isinstance(argv, str):
            tokens = shlex.split(argv)
        elif isinstance(argv, Iterable):
            tokens = list(argv)
        else:
            raise TypeError("run() argument must be a string or an iterable of strings")
        sys.exit(self.dispatch(tokens))

    def __rich_repr__(self):
        yield "name", self._name
        yield "short", self._short
        yield "commands", [command.name for command in self._registry]


__all__ = (
    "App",
)
