"""
cmdhost registry: the name → command table populated at start-up.

Contract
- add(command): inserts under the normalized name (stripped, lowercase).
  Names equal under normalization collide: DuplicateCommandError.
  Names of built-in pseudo-commands ("help", "documentation") are reserved:
  ReservedCommandError. Both are configuration errors raised at registration.
- lookup(name): returns the command or None, normalizing the key the same way.
- Iteration yields commands sorted by name; `commands` and `topics` split the
  visible entries by runnability for the usage listing.

A single lock guards inserts, lookups and snapshots. It is held only for the
table access itself, never while a command runs.
"""
import threading

from .commands import Command
from .faults import DuplicateCommandError, ReservedCommandError

# Words owned by the help pseudo-command; they always resolve to the built-in.
RESERVED = frozenset({"help", "documentation"})


def normalize(name, /):
    """
    return the registry key for a command name.
    """
    if not isinstance(name, str):
        raise TypeError("command name must be a string")
    return name.strip().lower()


class Registry:
    """
    Name → command table; see the module docstring for the contract.
    """

    def __init__(self, commands=(), /):
        self._commands = {}
        self._lock = threading.Lock()
        for command in commands:
            self.add(command)

    def add(self, command, /):
        if not isinstance(command, Command):
            raise TypeError("add() argument must be a command")
        key = normalize(command.name)
        if key in RESERVED:
            raise ReservedCommandError(
                "command name %r is reserved" % command.name,
                hint="built-in '%s' always takes priority; pick another name" % key,
            )
        with self._lock:
            if key in self._commands:
                raise DuplicateCommandError(
                    "command %r is already registered" % command.name,
                    hint="registered as %r" % self._commands[key].name,
                )
            self._commands[key] = command
        return command

    def lookup(self, name, /):
        key = normalize(name)
        with self._lock:
            return self._commands.get(key)

    def _snapshot(self):
        with self._lock:
            return sorted(self._commands.values(), key=lambda command: normalize(command.name))

    def __iter__(self):
        return iter(self._snapshot())

    def __len__(self):
        with self._lock:
            return len(self._commands)

    def __contains__(self, name):
        return isinstance(name, str) and self.lookup(name) is not None

    @property
    def commands(self):
        """
        visible runnable commands, sorted by name.
        """
        return tuple(command for command in self._snapshot() if command.runnable and not command.hidden)

    @property
    def topics(self):
        """
        visible help topics (non-runnable commands), sorted by name.
        """
        return tuple(command for command in self._snapshot() if not command.runnable and not command.hidden)


__all__ = (
    "Registry",
    "normalize",
    "RESERVED",
)
