from cmdhost import *

__prog__ = "tool"

app = App(short="tool builds and ships sources", long="""
Tool compiles source files with 'build' and removes the results with 'clean'.
Run 'tool help documentation' to regenerate doc.py.
""")


class Build(Command):
    name = "build"
    synopsis = "[-o <file>] [-v] <source>..."
    short = "compiles sources"
    long = """
Build compiles the named source files into a single output file.

The -o flag names the output file (a.out by default).
The -v flag prints the name of each source file as it is compiled.
"""

    def register(self, flags):
        flags.option("-o", "--output", metavar="<file>", default="a.out", descr="write the result to <file>")
        flags.flag("-v", "--verbose", descr="print each compiled file")

    def run(self, args, flags):
        if not args:
            raise CommandError("no source files given", hint="run 'tool help build' for usage")
        for source in args:
            if flags.verbose:
                app.stdout.print(source, markup=False, highlight=False)
        app.stdout.print("wrote %s" % flags.output, markup=False, highlight=False)


@app.command(synopsis="[<target>...]", short="removes build outputs")
def clean(args, flags):
    """
    Clean removes the files written by 'build' (a.out unless targets are named).
    """
    for target in args or ["a.out"]:
        app.stdout.print("removed %s" % target, markup=False, highlight=False)


app.add(Build())
app.topic("workflow", "describes the build workflow", """
Sources are compiled with 'tool build' and the results removed with 'tool clean'.
""")


if __name__ == '__main__':
    app.run()
