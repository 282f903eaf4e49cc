"""
cmdhost help renderer and the built-in help pseudo-command.

Renderers (all return rich Text; `.plain` is the uncolored form)
- usage(app): short description, invocation synopsis, the runnable commands
  (help included), the help topics (only when there are any) and the hint lines.
- command_help(app, command): capitalized short description, the usage line
  (runnable commands only), the registered switches and the long description.
- program_help(app): the application's own page ("help <program>").
- documentation(app): the complete doc.py file content (see below).

Help pseudo-command (Help)
- help                → usage listing on stdout.
- help <command>      → that command's or topic's page.
- help help           → this pseudo-command's own page.
- help <program>      → the application's page.
- help documentation  → writes app.docfile (doc.py by default).
- anything else       → UnknownTopicError; more than one argument → TooManyArgumentsError.

Layout
- Listing rows are "    <name padded to 16> <short>" so that the columns line up
  regardless of the terminal; documentation output never depends on console width.

Palette keys (override through __styles__ in __main__, applied when colorful)
- section-label, program-name, command-name, command-description, switch-name,
  metavar, heading, hint
"""
import difflib
from collections import defaultdict

from rich.text import Text

from .commands import Command
from .faults import DocumentationError, TooManyArgumentsError, UnknownTopicError
from .flags import FlagSet, Option
from .utils import capitalize

# Width of the name column in listings.
COLUMN = 16

DOCUMENTATION = "documentation"

HEADER = '# Automatically generated doc.py file, do not edit.\n\n"""\n'
FOOTER = '"""\n'


def _styler(app):
    styles = defaultdict(str, {
        "section-label": "bold #FFFFFF",  # pure white headers
        "program-name": "bold #FF4D94",  # magenta-pink brand pop
        "command-name": "bold #36C5F0",  # sky-blue commands
        "command-description": "#9CA3AF",  # muted gray
        "switch-name": "bold #00E6FF",  # cyan switches
        "metavar": "bold #FFD600",  # amber parameters
        "heading": "bold #22C55E",  # green headings
        "hint": "italic #737373",  # dim footer gray
    } | getattr(__import__("__main__"), "__styles__", {}))

    def text(fragment, style=""):
        return Text(str(fragment), styles[style] if app.colorful else "")

    return text


def _row(text, name, descr, style):
    row = Text("    ")
    row.append_text(text(name.ljust(COLUMN), style))
    if descr:
        row.append(" ").append_text(text(descr, "command-description"))
    row.rstrip()
    return row


def _listed(app):
    """
    runnable commands shown in listings, the help pseudo-command included.
    """
    return sorted((*app.registry.commands, app.helper), key=lambda command: command.name.lower())


def usage(app, /):
    """
    render the application usage listing.
    """
    text = _styler(app)
    lines = [
        text(app.short),
        Text(),
        text("Usage:", "section-label"),
        Text(),
        Text.assemble("    ", text(app.name, "program-name"), " ", text(app.synopsis)),
        Text(),
        text("The commands are:", "section-label"),
        Text(),
    ]
    for command in _listed(app):
        lines.append(_row(text, command.name, command.short, "command-name"))
    lines.extend([
        Text(),
        text("Use '%s help <command>' for more information about a command." % app.name, "hint"),
    ])

    if topics := app.registry.topics:
        lines.extend([Text(), text("Additional help topics:", "section-label"), Text()])
        for topic in topics:
            lines.append(_row(text, topic.name, topic.short, "command-name"))
        lines.extend([
            Text(),
            text("Use '%s help <topic>' for more information about that topic." % app.name, "hint"),
        ])

    return Text("\n").join(lines)


def switches(command, /):
    """
    return the visible switches a command registers, on a scratch flag set.
    """
    flags = FlagSet(command.name)
    command.register(flags)
    return [argument for argument in flags if not argument.hidden]


def command_help(app, command, /):
    """
    render the detailed page of a command or topic.
    """
    text = _styler(app)
    lines = [text(capitalize(command.short), "heading")]

    if command.runnable:
        line = Text.assemble("    ", text(app.name, "program-name"), " ", text(command.name, "command-name"))
        if command.synopsis:
            line.append(" ").append_text(text(command.synopsis))
        lines.extend([Text(), text("Usage:", "section-label"), Text(), line])

        if arguments := switches(command):
            lines.extend([Text(), text("Options:", "section-label"), Text()])
            for argument in arguments:
                names = Text(", ").join(text(name, "switch-name") for name in argument.names)
                if isinstance(argument, Option):
                    names.append(" ").append_text(text(argument.metavar, "metavar"))
                row = Text("    ").append_text(names)
                if argument.descr:
                    if len(row) > COLUMN + 4:
                        row.append("\n" + " " * (COLUMN + 5))
                    else:
                        row.append(" " * (COLUMN + 5 - len(row)))
                    row.append_text(text(argument.descr, "command-description"))
                lines.append(row)

    if long := command.long.strip():
        lines.extend([Text(), text(long)])

    return Text("\n").join(lines)


def program_help(app, /):
    """
    render the application's own page.
    """
    text = _styler(app)
    lines = [
        Text.assemble(text(app.name, "program-name"), " - ", text(app.short)),
        Text(),
        text("Usage:", "section-label"),
        Text(),
        Text.assemble("    ", text(app.name, "program-name"), " ", text(app.synopsis)),
    ]
    if long := app.long.strip():
        lines.extend([Text(), text(long)])
    return Text("\n").join(lines)


def documentation(app, /):
    """
    return the doc.py content: usage plus every command's page, as a module docstring.

    The body is plain text, commands sorted by name (help and hidden ones
    included), so the file is byte-identical across runs while the registry
    is unchanged.
    """
    pages = [usage(app).plain]
    for command in sorted((*app.registry, app.helper), key=lambda command: command.name.lower()):
        pages.append(command_help(app, command).plain)
    body = "\n\n".join(page.rstrip() for page in pages)
    body = body.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    return HEADER + body + "\n" + FOOTER


def suggest(app, name, /):
    """
    return a hint naming the closest registered command, if any.
    """
    names = [command.name for command in (*app.registry, app.helper) if not command.hidden]
    if matches := difflib.get_close_matches(name, names, n=1):
        return "did you mean '%s'?" % matches[0]
    return "run '%s help' for a list of commands" % app.name


class Help(Command):
    """
    The built-in help pseudo-command; bound to one App and never registered.
    """
    name = "help"
    synopsis = "[<command>|<topic>|%s]" % DOCUMENTATION
    short = "displays help information"
    long = """
Help displays help information for a command or a help topic.

With no arguments it prints to the standard output the list of available
commands and help topics.

'help documentation' writes the usage listing and every command's help to
the documentation file (doc.py by default) as a module docstring.
"""

    def __init__(self, app, /):
        super().__init__(short="displays help information about %s" % app.name)
        self._app = app

    def run(self, args, flags, /):
        app = self._app
        if not args:
            app.stdout.print(usage(app))
            return None
        if len(args) > 1:
            raise TooManyArgumentsError(
                "too many arguments",
                hint="usage: %s help %s" % (app.name, self.synopsis),
            )

        match topic := args[0]:
            case "documentation":
                self.write(app.docfile)
            case "help":
                app.stdout.print(command_help(app, self))
            case _ if (command := app.registry.lookup(topic)) is not None:
                app.stdout.print(command_help(app, command))
            case _ if topic == app.name:
                app.stdout.print(program_help(app))
            case _:
                raise UnknownTopicError("unknown help topic %r" % topic, hint=suggest(app, topic))
        return None

    def write(self, path, /):
        """
        write the documentation file; failures are runtime errors of help.
        """
        content = documentation(self._app)
        try:
            with open(path, "w", encoding="utf-8", newline="\n") as file:
                file.write(content)
        except OSError as error:
            raise DocumentationError(
                "cannot write %s: %s" % (path, error.strerror or error),
                hint="check that the directory exists and is writable",
            ) from error


__all__ = (
    "usage",
    "command_help",
    "program_help",
    "documentation",
    "switches",
    "suggest",
    "Help",
)
