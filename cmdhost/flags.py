r"""
cmdhost flag sets: per-invocation switch tables for hosted commands.

Overview
- Specs
  • Option[_T]: named, value-bearing switch with one or more aliases (e.g., -o/--output).
  • Flag: named, presence-only switch (no payload), e.g., -v/--verbose.

- FlagSet
  • A fresh table is built for every dispatch; the command registers its switches
    on it, then the dispatcher parses the arguments that follow the command name.
  • Parsing consumes leading switches only. It stops at the first free argument,
    at a lone "-", or after a "--" terminator; everything from there on is the
    remainder handed to the command's run().
  • -h/--help is understood by every flag set unless the command claims one of
    those names itself; it stops parsing and marks the set as `helped`.

Accepted token shapes
- "--name=value" / "-n=value"   → inline option value
- "--name value" / "-n value"   → spaced option value
- "--name" / "-n"               → flag presence

Faults (all usage errors, see cmdhost.faults)
- UnknownSwitchError, OptionValueRequiredError, FlagAssignmentError,
  InvalidValueError, DuplicatedSwitchError.

Quick example:
    >>> flags = FlagSet("build")
    >>> output = flags.option("-o", "--output", metavar="FILE", descr="write output to FILE")
    >>> verbose = flags.flag("-v", "--verbose", descr="print each compiled file")
    >>> flags.parse(["-v", "--output=a.out", "main.c"])
    ['main.c']
    >>> flags.output, flags.verbose
    ('a.out', True)
"""
import difflib
import functools
import itertools
import operator
import re
from collections.abc import Iterable, Set

from rich.text import Text

from .faults import *
from .utils import *

# Built-in helper names; shadowed when a command registers either of them.
HELPERS = ("-h", "--help")


class ArgumentType(type):
    """
    Metaclass that turns specs into introspectable descriptors.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens),
      used in messages.
    - Expose the fields listed in __introspectable__ as read-only properties.
    - Provide stable __repr__/__rich_repr__ implementations for diagnostics.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    r"""
    Internal: validate names and description shared by Option and Flag.

    - names: required; each must match r"--?[^\W\d_](-?[^\W_]+)*" and be unique.
      Normalized into a tuple, shorter names first.
    - descr: Unset or a non-empty string (trimmed); Unset becomes None.
    - dest: derived from the longest name ("--dry-run" → "dry_run").
    """
    names = []
    if not metadata["names"]:
        raise TypeError(f"{cls.__typename__} must specify at least one name")

    for name in metadata["names"]:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif not re.fullmatch(r"--?[^\W\d_](-?[^\W_]+)*", name):
            raise ValueError(f"{cls.__typename__} names must be valid shell-style option names (unicodes are allowed)")
        elif name in names:
            raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
        names.append(name)

    metadata["names"] = tuple(sorted(names, key=len))
    metadata["dest"] = max(names, key=len).lstrip("-").replace("-", "_")

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


class Option[_T](metaclass=ArgumentType):
    """
    Named, value-bearing switch specification.

    Highlights
    - Aliases via 'names' (e.g., "-o", "--output").
    - 'type' converts each raw value; ValueError/TypeError become InvalidValueError.
    - 'choices' restricts converted values.
    - 'multiple' collects repeated occurrences into a list; otherwise repeating
      the option is a DuplicatedSwitchError.
    """

    __introspectable__ = (
        "names",
        "dest",
        "metavar",
        "type",
        "default",
        "choices",
        "multiple",
        "descr",
        "hidden",
    )

    def __init__(
            self,
            *names,
            metavar=Unset,
            type=str,
            default=None,
            choices=(),
            multiple=False,
            descr=Unset,
            hidden=False
    ):
        metadata = {
            "names": names,
            "metavar": metavar,
            "type": type,
            "default": default,
            "choices": choices,
            "multiple": bool(multiple),
            "descr": descr,
            "hidden": bool(hidden),
        }
        _sanitize_metadata(Option, metadata)

        if not isinstance(metavar, str | Unset):
            raise TypeError(f"{Option.__typename__} 'metavar' must be a string")
        elif isinstance(metavar, str) and not (metavar := metavar.strip()):
            raise ValueError(f"{Option.__typename__} 'metavar' cannot be empty")
        metadata["metavar"] = coalesce(metavar, "<%s>" % metadata["dest"].replace("_", "-"))

        if not callable(type):
            raise TypeError(f"{Option.__typename__} 'type' must be callable")

        if not isinstance(choices, Iterable):
            raise TypeError(f"{Option.__typename__} 'choices' must be iterable")
        if not isinstance(choices, Set):
            sanitized = []
            for choice in choices:
                if choice in sanitized:
                    raise ValueError(f"{Option.__typename__} 'choices' cannot contain duplicates")
                sanitized.append(choice)
            choices = tuple(sanitized)
        metadata["choices"] = choices

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    def convert(self, value, /):
        """
        Convert one raw value and check it against the choices.

        Raises InvalidValueError (without route) on failure; the caller adds context.
        """
        try:
            converted = self._type(value)
        except (ValueError, TypeError):
            raise InvalidValueError(
                "invalid value %r for %s" % (value, self._names[-1]),
                hint="expected a value of type %s" % getattr(self._type, "__name__", "value"),
            ) from None
        if self._choices and converted not in self._choices:
            raise InvalidValueError(
                "invalid choice %r for %s" % (value, self._names[-1]),
                hint="choose from %s" % ", ".join(map(repr, self._choices)),
            )
        return converted


class Flag(metaclass=ArgumentType):
    """
    Named, presence-only switch specification.

    A flag carries no value; its presence sets it to True. Assigning a value
    inline ("--verbose=yes") is a FlagAssignmentError.
    """

    __introspectable__ = (
        "names",
        "dest",
        "descr",
        "hidden",
    )

    def __init__(self, *names, descr=Unset, hidden=False):
        metadata = {
            "names": names,
            "descr": descr,
            "hidden": bool(hidden),
        }
        _sanitize_metadata(Flag, metadata)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)


class FlagSet:
    """
    Switch table scoped to one command invocation.

    Registration
    - option(*names, **metadata) / flag(*names, **metadata) build and add a spec.
    - add(argument) adds a prebuilt Option or Flag.
    - Two specs sharing a name, or specs sharing a destination, raise ValueError.

    Parsing
    - parse(args) consumes leading switches and returns the remainder.
    - Parsed values are read by destination: flags["output"] or flags.output.
    """

    def __init__(self, name, /):
        if not isinstance(name, str):
            raise TypeError("flag set name must be a string")
        self._name = name
        self._switches = {}
        self._arguments = []
        self._values = {}
        self._seen = set()
        self._helped = False
        self._parsed = False

    name = mirror("name")
    helped = mirror("helped")
    parsed = mirror("parsed")

    def add(self, argument, /):
        if not isinstance(argument, Option | Flag):
            raise TypeError("add() argument must be an option or a flag")
        if self._parsed:
            raise RuntimeError("cannot add switches to a parsed flag set")
        for name in argument.names:
            if name in self._switches:
                raise ValueError(f"{self._name}: switch {name!r} is already defined")
        if argument.dest in self._values:
            raise ValueError(f"{self._name}: destination {argument.dest!r} is already defined")
        self._switches.update(dict.fromkeys(argument.names, argument))
        self._arguments.append(argument)
        if isinstance(argument, Option):
            self._values[argument.dest] = [] if argument.multiple else argument.default
        else:
            self._values[argument.dest] = False
        return argument

    def option(self, *names, **metadata):
        return self.add(Option(*names, **metadata))

    def flag(self, *names, **metadata):
        return self.add(Flag(*names, **metadata))

    def __iter__(self):
        return iter(tuple(self._arguments))

    def __len__(self):
        return len(self._arguments)

    def __contains__(self, name):
        return name in self._switches or name in self._values

    def __getitem__(self, dest):
        try:
            return self._values[dest]
        except KeyError:
            raise KeyError(f"{self._name}: no switch stores {dest!r}") from None

    def __getattr__(self, dest):
        if dest.startswith("_"):
            raise AttributeError(dest)
        try:
            return self._values[dest]
        except KeyError:
            raise AttributeError(f"{self._name}: no switch stores {dest!r}") from None

    def _resolve_token(self, token):
        """
        split a switch token into (name, value); value is Unset when not inline.
        """
        name, equals, value = token.partition("=")
        return name, (value if equals else Unset)

    def _suggest(self, name):
        candidates = list(itertools.chain(self._switches, () if set(HELPERS) & self._switches.keys() else HELPERS))
        if matches := difflib.get_close_matches(name, candidates, n=1):
            return "did you mean %r?" % matches[0]
        return "run '%s -h' to list the accepted switches" % self._name

    def parse(self, args, /):
        """
        Consume leading switches from args and return the unparsed remainder.

        Raises UsageError subclasses on malformed input; values parsed before
        the fault are kept but the set should be discarded by the caller.
        """
        if self._parsed:
            raise RuntimeError("flag set already parsed")
        self._parsed = True
        tokens = list(args)
        index = 0

        while index < len(tokens):
            token = tokens[index]
            if token == "--":
                index += 1
                break
            if not token.startswith("-") or token == "-":
                break
            index += 1

            name, value = self._resolve_token(token)
            argument = self._switches.get(name)

            if argument is None:
                if name in HELPERS:
                    self._helped = True
                    break
                raise UnknownSwitchError("unknown switch %r" % name, hint=self._suggest(name))

            if isinstance(argument, Flag):
                if value is not Unset:
                    raise FlagAssignmentError(
                        "flag %s does not take a value" % name,
                        hint="use %s alone" % name,
                    )
                if argument in self._seen:
                    raise DuplicatedSwitchError("flag %s given more than once" % name, hint="remove the repeated flag")
                self._seen.add(argument)
                self._values[argument.dest] = True
                continue

            if value is Unset:
                if index >= len(tokens):
                    raise OptionValueRequiredError(
                        "option %s requires a value" % name,
                        hint="use %s %s or %s=%s" % (name, argument.metavar, name, argument.metavar),
                    )
                value = tokens[index]
                index += 1

            converted = argument.convert(value)
            if argument.multiple:
                self._values[argument.dest].append(converted)
            elif argument in self._seen:
                raise DuplicatedSwitchError("option %s given more than once" % name, hint="keep a single %s" % name)
            else:
                self._values[argument.dest] = converted
            self._seen.add(argument)

        return tokens[index:]


__all__ = (
    "Option",
    "Flag",
    "FlagSet",
)
