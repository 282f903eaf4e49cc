"""
Help renderer and help pseudo-command behavioral tests.

Scope
- Validate the usage listing layout (commands vs. topics, aligned columns, hints).
- Validate per-command pages (capitalized heading, synopsis for runnables only).
- Validate help arguments: topics, 'help help', the program page, bad topics.
- Validate 'help documentation' output file framing and idempotence.

Conventions
- Test method names follow CamelCase per project convention.
- Documentation files are written into temporary directories.
"""

from __future__ import annotations

import io
import os
import tempfile
import unittest
from unittest import TestCase

from rich.console import Console

from cmdhost import App, Command, ExitCode, Topic
from cmdhost.helper import FOOTER, HEADER, command_help, documentation, usage


def capture():
    return Console(file=io.StringIO(), width=200, color_system=None)


class Build(Command):
    name = "build"
    synopsis = "[-o <file>] <source>..."
    short = "compiles sources"
    long = """

    Build compiles the named source files.

"""

    def register(self, flags):
        flags.option("-o", "--output", metavar="<file>", descr="write the result to <file>")
        flags.flag("--dry-run", descr="only print what would be compiled")
        flags.flag("--trace", hidden=True)

    def run(self, args, flags):
        return None


class Workflow(Topic):
    name = "workflow"
    short = "describes the build workflow"
    long = "Sources are compiled with 'build' and shipped with \"\"\"ship\"\"\" C:\\out."


class TestUsage(TestCase):
    """Behavioral tests for the usage listing."""

    def setUp(self):
        self.app = App("tool", short="tool builds things", stdout=capture(), stderr=capture())
        self.app.add(Build())
        self.app.add(Workflow())
        self.app.command(lambda args, flags: None, name="clean", short="removes build outputs")

    def testHelpListsCommandsAndTopics(self):
        status = self.app.dispatch(["help"])
        self.assertEqual(status, ExitCode.SUCCESS)
        lines = self.app.stdout.file.getvalue().splitlines()

        commands = lines.index("The commands are:")
        topics = lines.index("Additional help topics:")
        build = lines.index(f"    {'build':<16} compiles sources")
        workflow = lines.index(f"    {'workflow':<16} describes the build workflow")

        self.assertLess(commands, build)
        self.assertLess(build, topics)
        self.assertLess(topics, workflow)
        self.assertEqual(self.app.stderr.file.getvalue(), "")

    def testCommandsAreSortedByName(self):
        lines = usage(self.app).plain.splitlines()
        self.assertLess(lines.index(f"    {'build':<16} compiles sources"),
                        lines.index(f"    {'clean':<16} removes build outputs"))

    def testUsageStartsWithShortDescriptionAndSynopsis(self):
        lines = usage(self.app).plain.splitlines()
        self.assertEqual(lines[0], "tool builds things")
        self.assertIn("    tool [help] <command> [<args>...]", lines)
        self.assertIn("Use 'tool help <command>' for more information about a command.", lines)
        self.assertIn("Use 'tool help <topic>' for more information about that topic.", lines)

    def testTopicsSectionOmittedWithoutTopics(self):
        app = App("tool", short="tool builds things", stdout=capture(), stderr=capture())
        app.add(Build())
        self.assertNotIn("Additional help topics:", usage(app).plain)

    def testHelpIsListedAmongCommands(self):
        lines = usage(self.app).plain.splitlines()
        row = lines.index(f"    {'help':<16} displays help information about tool")
        self.assertLess(lines.index(f"    {'clean':<16} removes build outputs"), row)
        self.assertLess(row, lines.index("Additional help topics:"))

    def testEmptyApplicationStillListsHelp(self):
        app = App("tool", short="tool builds things", stdout=capture(), stderr=capture())
        lines = usage(app).plain.splitlines()
        start = lines.index("The commands are:")
        self.assertEqual(lines[start + 2], f"    {'help':<16} displays help information about tool")

    def testHiddenCommandsAreNotListed(self):
        self.app.command(lambda args, flags: None, name="secret", short="internal", hidden=True)
        self.assertNotIn("secret", usage(self.app).plain)


class TestCommandHelp(TestCase):
    """Behavioral tests for per-command pages."""

    def setUp(self):
        self.app = App("tool", short="tool builds things", long="Tool builds and ships.",
                       stdout=capture(), stderr=capture())
        self.app.add(Build())
        self.app.add(Workflow())

    @property
    def out(self):
        return self.app.stdout.file.getvalue()

    def testRunnableHelpShowsSynopsis(self):
        status = self.app.dispatch(["help", "build"])
        self.assertEqual(status, ExitCode.SUCCESS)
        lines = self.out.splitlines()
        self.assertEqual(lines[0], "Compiles sources")
        self.assertIn("    tool build [-o <file>] <source>...", lines)
        self.assertIn("compiles sources", self.out.lower())

    def testLongDescriptionIsTrimmed(self):
        page = command_help(self.app, Build()).plain
        self.assertTrue(page.endswith("Build compiles the named source files."))

    def testRunnableHelpListsVisibleSwitches(self):
        page = command_help(self.app, Build()).plain
        self.assertIn("Options:", page)
        self.assertIn("-o, --output <file>", page)
        self.assertIn("--dry-run", page)
        self.assertIn("only print what would be compiled", page)
        self.assertNotIn("--trace", page)

    def testTopicHelpOmitsSynopsis(self):
        status = self.app.dispatch(["help", "workflow"])
        self.assertEqual(status, ExitCode.SUCCESS)
        self.assertEqual(self.out.splitlines()[0], "Describes the build workflow")
        self.assertNotIn("Usage:", self.out)
        self.assertNotIn("tool workflow", self.out)

    def testHelpTopicLookupIsCaseInsensitive(self):
        self.assertEqual(self.app.dispatch(["help", "Workflow"]), ExitCode.SUCCESS)
        self.assertIn("Describes the build workflow", self.out)

    def testHelpHelp(self):
        self.assertEqual(self.app.dispatch(["help", "help"]), ExitCode.SUCCESS)
        self.assertIn("Displays help information about tool", self.out)
        self.assertIn("tool help [<command>|<topic>|documentation]", self.out)

    def testProgramHelp(self):
        self.assertEqual(self.app.dispatch(["help", "tool"]), ExitCode.SUCCESS)
        self.assertIn("tool - tool builds things", self.out)
        self.assertIn("Tool builds and ships.", self.out)

    def testUnknownTopic(self):
        status = self.app.dispatch(["help", "nothing"])
        self.assertEqual(status, ExitCode.USAGE)
        self.assertEqual(self.out, "")
        self.assertIn("tool help: unknown help topic 'nothing'", self.app.stderr.file.getvalue())

    def testTooManyArguments(self):
        status = self.app.dispatch(["help", "build", "workflow"])
        self.assertEqual(status, ExitCode.USAGE)
        self.assertEqual(self.out, "")
        self.assertIn("too many arguments", self.app.stderr.file.getvalue())


class TestDocumentation(TestCase):
    """Behavioral tests for 'help documentation'."""

    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        self.addCleanup(self.directory.cleanup)
        self.path = os.path.join(self.directory.name, "doc.py")
        self.app = App("tool", short="tool builds things", docfile=self.path, stdout=capture(), stderr=capture())
        self.app.add(Workflow())
        self.app.add(Build())

    def read(self):
        with open(self.path, encoding="utf-8") as file:
            return file.read()

    def testDocumentationIsWrittenAndFramed(self):
        status = self.app.dispatch(["help", "documentation"])
        self.assertEqual(status, ExitCode.SUCCESS)
        content = self.read()
        self.assertTrue(content.startswith(HEADER))
        self.assertTrue(content.endswith(FOOTER))
        self.assertIn("The commands are:", content)
        self.assertIn("Compiles sources", content)
        self.assertIn("Describes the build workflow", content)
        self.assertLess(content.index("Compiles sources"), content.index("Describes the build workflow"))
        self.assertIn("Displays help information about tool", content)

    def testDocumentationIsIdempotent(self):
        self.app.dispatch(["help", "documentation"])
        first = self.read()
        self.app.dispatch(["help", "documentation"])
        self.assertEqual(first, self.read())

    def testDocumentationEscapesDocstringDelimiters(self):
        content = documentation(self.app)
        body = content[len(HEADER):-len(FOOTER)]
        self.assertNotIn('"""', body)
        self.assertIn('\\"\\"\\"ship\\"\\"\\"', body)
        self.assertIn("C:\\\\out", body)

    def testDocumentationFailureIsRuntimeError(self):
        app = App("tool", short="tool builds things", docfile=os.path.join(self.path, "missing", "doc.py"),
                  stdout=capture(), stderr=capture())
        status = app.dispatch(["help", "documentation"])
        self.assertEqual(status, ExitCode.FAILURE)
        self.assertIn("tool help: cannot write", app.stderr.file.getvalue())


if __name__ == "__main__":
    unittest.main()
