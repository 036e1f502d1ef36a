"""
Help formatter behavioral tests (layout, metadata, wrapping, styling).

Scope
- Validate the two-column layout: column widths, padding, gutter and indent.
- Validate display names, metadata prefixes and default rendering.
- Validate word wrapping and the overflow rule for wide names.
- Validate section omission, custom headers and styled output.

Conventions
- Test method names follow CamelCase per project convention.
- Expected rows are built with str.ljust so column positions stay readable.
"""
import io
import re
import unittest
from unittest import TestCase

from rich.console import Console

from flagstaff import Schema, OptionSpec
from flagstaff.helptext import HelpLayout, alias, display, describe, measure, render, row


def greeter(**options):
    return Schema(
        args=[{"name": "hello", "type": "string", "help": "an argument for saying hello"}],
        flags=[
            {"name": "message", "alias": "m", "type": "boolean", "help": "a boolean flag"},
            {"name": "int", "alias": ["i", "integer"], "type": "integer", "help": "an integer flag"},
        ],
        **options
    )


class TestLayout(TestCase):
    """Behavioral tests for the full help text."""

    def testDefaultLayout(self):
        expected = "\n".join([
            "Arguments:",
            "  hello".ljust(19) + "(string) an argument for saying hello",
            "",
            "Flags:",
            "  --message, -m".ljust(19) + "(boolean) a boolean flag",
            "  --int, -i".ljust(19) + "(integer) an integer flag",
        ])
        self.assertEqual(greeter().help(), expected)

    def testMeasure(self):
        schema = greeter()
        layout = measure(schema.args, schema.flags)
        self.assertEqual(layout, HelpLayout(15, 65, 4, 2))
        self.assertEqual(layout.column, 19)
        self.assertEqual(layout.span, 61)

    def testExplicitRight(self):
        schema = greeter()
        self.assertEqual(measure(schema.args, schema.flags, right=30).right, 30)

    def testIndent(self):
        text = greeter(indent=0).help()
        self.assertIn("\n" + "hello".ljust(17) + "(string)", text)

    def testGutter(self):
        text = greeter().help(gutter=1)
        self.assertIn("  --message, -m (boolean) a boolean flag", text)

    def testIdempotent(self):
        schema = greeter()
        self.assertEqual(schema.help(), schema.help())
        self.assertEqual(schema.help(width=30), schema.help(width=30))

    def testWrapping(self):
        schema = Schema(args=[{"name": "a", "help": "one two three four five six"}])
        expected = "\n".join([
            "Arguments:",
            "  a".ljust(7) + "one two three",
            " " * 7 + "four five six",
        ])
        self.assertEqual(schema.help(width=20), expected)

    def testNoLineExceedsWidth(self):
        text = greeter().help(width=40)
        self.assertTrue(all(len(line) <= 40 for line in text.splitlines()))
        self.assertIn("  hello".ljust(19) + "(string) an argument\n" + " " * 19 + "for saying hello", text)

    def testWideNameMovesDescriptionDown(self):
        text = greeter().help(left=10)
        self.assertIn("  hello".ljust(14) + "(string)", text)
        self.assertIn("  --message, -m\n" + " " * 14 + "(boolean) a boolean flag", text)

    def testNarrowWidthStacksDescriptions(self):
        schema = greeter()
        self.assertEqual(measure(schema.args, schema.flags, width=18), HelpLayout(2, 16, 4, 2))
        text = schema.help(width=18)
        self.assertTrue(all(len(line) <= 18 for line in text.splitlines()))
        self.assertIn(
            "  hello\n" + " " * 6 + "(string) an\n" + " " * 6 + "argument for\n" + " " * 6 + "saying hello",
            text
        )

    def testNarrowConsole(self):
        stream = io.StringIO()
        schema = Schema(flags=[
            {"name": "defaultValueFunction", "alias": "d", "type": "string", "help": "a string argument"},
        ])
        schema.print_help(Console(file=stream, width=30, color_system=None))
        self.assertIn(
            "  --defaultValueFunction, -d\n" + " " * 6 + "(string) a string\n" + " " * 6 + "argument",
            stream.getvalue()
        )

    def testDescriptionColumnNeverCollapses(self):
        schema = greeter()
        self.assertEqual(measure(schema.args, schema.flags, right=4).span, 1)
        self.assertTrue(schema.help(right=4).startswith("Arguments:\n"))

    def testWidthsMustBeIntegers(self):
        with self.assertRaises(TypeError):
            greeter().help(width="80")
        with self.assertRaises(ValueError):
            greeter().help(gutter=-1)

    def testPlainHelpIgnoresColorful(self):
        schema = greeter()
        self.assertEqual(schema.help(colorful=True), schema.help())

    def testEmptySectionsAreOmitted(self):
        schema = Schema(flags=[{"name": "v", "help": "verbose output"}])
        self.assertEqual(schema.help(), "Flags:\n" + "  --v".ljust(9) + "verbose output")
        self.assertEqual(schema.args_help(), "")
        self.assertEqual(Schema().help(), "")

    def testCustomHeaders(self):
        text = greeter().help(args_header="Positionals:", flags_header="Options:")
        self.assertTrue(text.startswith("Positionals:\n"))
        self.assertIn("\n\nOptions:\n", text)

    def testEmptyHeaderFallsBack(self):
        self.assertTrue(greeter().help(args_header="").startswith("Arguments:\n"))

    def testSingleSections(self):
        schema = greeter()
        self.assertEqual(
            schema.args_help(),
            "Arguments:\n" + "  hello".ljust(19) + "(string) an argument for saying hello"
        )
        flags = schema.flags_help()
        self.assertTrue(flags.startswith("Flags:\n"))
        self.assertNotIn("hello", flags)
        self.assertEqual(schema.help(), schema.args_help() + "\n\n" + flags)

    def testExpandedAliases(self):
        text = greeter().flags_help(expanded=True)
        self.assertIn("  --int, -i, --integer    (integer) an integer flag", text)


class TestDescriptions(TestCase):
    """Behavioral tests for display names and metadata."""

    def testAlias(self):
        self.assertEqual(alias("m"), "-m")
        self.assertEqual(alias("integer"), "--integer")

    def testDisplay(self):
        spec = OptionSpec("int", ("i", "integer"))
        self.assertEqual(display(spec), "int")
        self.assertEqual(display(spec, flag=True), "--int, -i")
        self.assertEqual(display(spec, flag=True, expanded=True), "--int, -i, --integer")
        self.assertEqual(display(OptionSpec("verbose"), flag=True), "--verbose")

    def testMetadataOrder(self):
        spec = OptionSpec("level", type="integer", required=True, default=3, help="how loud")
        self.assertEqual(describe(spec), "(integer, required, default: 3) how loud")

    def testHelpOnly(self):
        self.assertEqual(describe(OptionSpec("a", help="text")), "text")

    def testMetadataOnly(self):
        self.assertEqual(describe(OptionSpec("a", type="boolean")), "(boolean)")

    def testNothing(self):
        self.assertEqual(describe(OptionSpec("a")), "")

    def testDefaultRendering(self):
        self.assertEqual(describe(OptionSpec("a", default=True)), "(default: true)")
        self.assertEqual(describe(OptionSpec("a", default=False)), "(default: false)")
        self.assertEqual(describe(OptionSpec("a", default=[1, 2])), "(default: 1,2)")
        self.assertEqual(describe(OptionSpec("a", default=0)), "(default: 0)")
        self.assertEqual(describe(OptionSpec("a", default=None)), "")
        self.assertEqual(describe(OptionSpec("a", default="")), "")

    def testThunkDefaultIsEvaluated(self):
        self.assertEqual(describe(OptionSpec("a", type="string", default=lambda: "hi")), "(string, default: hi)")

    def testPatternType(self):
        self.assertEqual(describe(OptionSpec("a", type=re.compile(r"^\d+$"))), r"(/^\d+$/)")

    def testRowsUseDescriptions(self):
        schema = greeter()
        layout = measure(schema.args, schema.flags)
        for option in schema.args:
            self.assertTrue(row(option, layout).plain.endswith(describe(option)))
        for option in schema.flags:
            self.assertTrue(row(option, layout, flag=True).plain.endswith(describe(option)))

    def testRenderRejectsIterators(self):
        with self.assertRaises(TypeError):
            render(iter(()), ())


class TestStyling(TestCase):
    """Behavioral tests for styled rendering and printing."""

    def testStyledMatchesPlain(self):
        schema = greeter()
        styled = schema.render_help(colorful=True)
        self.assertEqual(styled.plain, schema.help())
        self.assertTrue(styled.spans)

    def testColorlessHasNoSpans(self):
        styled = greeter().render_help(colorful=False)
        self.assertFalse([span for span in styled.spans if span.style])

    def testPrintHelpUsesConsoleWidth(self):
        stream = io.StringIO()
        console = Console(file=stream, width=40, color_system=None)
        schema = greeter()
        schema.print_help(console)
        self.assertEqual(stream.getvalue(), schema.help(width=40) + "\n")


if __name__ == "__main__":
    unittest.main()
