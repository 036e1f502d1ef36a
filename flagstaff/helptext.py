"""
flagstaff help formatter: two-column, word-wrapped help for a schema.

Layout

    Arguments:
      hello                (string) an argument for saying hello
    <indent><name><padding><description, wrapped at right - gutter columns
                           continuation lines start at left + gutter>

- left column: the longest indented display name over arguments and flags, unless
  the caller fixes it with `left`.
- right column: `width - left` unless the caller fixes it with `right`.
- gutter: blank columns between the two (4 by default); descriptions start at
  left + gutter.
- names wider than the left column push their description to the next line.
- on displays too narrow for both columns every description moves below its name.

Everything here is pure: the display width is a parameter, never a terminal query.
Text is produced as rich Text so the same layout serves plain (`.plain`) and styled
output. Palette keys can be overridden with a __styles__ mapping in __main__.
"""
from collections import defaultdict
from collections.abc import Sequence
from typing import NamedTuple

from rich.cells import cell_len
from rich.console import Console
from rich.text import Text

from .utils import Unset


class HelpLayout(NamedTuple):
    left: int
    right: int
    gutter: int
    indent: int

    @property
    def column(self):
        """first column of every description line"""
        return self.left + self.gutter

    @property
    def span(self):
        """width available to descriptions before wrapping"""
        return self.right - self.gutter


def _sanitize_width(value, label, /, *, minimum=0):
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"help {label!r} must be an integer")
    if value < minimum:
        raise ValueError(f"help {label!r} must be at least {minimum}")
    return value


def alias(identifier, /):
    """
    Switch spelling of a flag alias: '-a' for single characters, '--alias' otherwise.
    """
    return ("-" if len(identifier) == 1 else "--") + identifier


def display(option, /, *, flag=False, expanded=False):
    """
    Left-column text of an option.

    Arguments show their bare name. Flags show '--name' plus their first alias, or every
    alias when expanded.
    """
    if not flag:
        return option.name
    aliases = option.aliases if expanded else option.aliases[:1]
    return ", ".join(("--" + option.name, *map(alias, aliases)))


def _format(value, /):
    match value:
        case bool():
            return "true" if value else "false"
        case list() | tuple():
            return ",".join(map(_format, value))
        case _:
            return str(value)


def metadata(option, /):
    """
    Parenthesized metadata components: type, 'required', 'default: <value>'.

    Thunk defaults are evaluated for display.
    """
    components = []
    if option.typename:
        components.append(option.typename)
    if option.required:
        components.append("required")
    if option.default is not Unset and (value := option.resolve()) is not None and (shown := _format(value)):
        components.append("default: " + shown)
    return components


def _pieces(option, /):
    """
    Description fragments paired with their palette key, separators included.
    """
    pieces = []
    if components := metadata(option):
        pieces.append(("(%s)" % ", ".join(components), "metadata"))
    if option.help:
        if pieces:
            pieces.append((" ", ""))
        pieces.append((option.help, "argument-description"))
    return pieces


def describe(option, /):
    """
    Plain description of an option: '(meta, ...) help'.
    """
    return "".join(fragment for fragment, _ in _pieces(option))


def measure(arguments, flags, /, *, indent=2, left=Unset, right=Unset, width=80, gutter=4, expanded=False):
    """
    Compute the HelpLayout shared by both sections.

    When the names leave no room for a description column, the left column shrinks
    to the indent so every description starts on the line below its name. The
    description column is never narrower than one cell.

    Raises
    - TypeError/ValueError for non-integer or negative widths.
    """
    indent = _sanitize_width(indent, "indent")
    gutter = _sanitize_width(gutter, "gutter")
    width = _sanitize_width(width, "width", minimum=1)

    if left is Unset:
        names = [display(option) for option in arguments]
        names += [display(option, flag=True, expanded=expanded) for option in flags]
        left = max((indent + cell_len(name) for name in names), default=indent)
        if width - left - gutter < 1:
            left = indent
    else:
        left = _sanitize_width(left, "left")

    right = width - left if right is Unset else _sanitize_width(right, "right")

    return HelpLayout(left, max(right, gutter + 1), gutter, indent)


def _styles(colorful):
    styles = defaultdict(str, {
        "group-label": "bold #FFFFFF",
        "argument-name": "bold #FFD600",
        "flag-name": "bold #22C55E",
        "metadata": "#36C5F0",
        "argument-description": "#9CA3AF",
    } | getattr(__import__("__main__"), "__styles__", {}))
    return (lambda style: styles[style]) if colorful else (lambda style: "")


def row(option, layout, /, *, flag=False, expanded=False, colorful=False, console=Unset):
    """
    Render one option as a styled Text, wrapping its description under the right column.
    """
    styler = _styles(colorful)
    name = display(option, flag=flag, expanded=expanded)

    line = Text(" " * layout.indent)
    line.append(name, styler("flag-name" if flag else "argument-name"))

    description = Text()
    for fragment, style in _pieces(option):
        description.append(fragment, styler(style))

    if not description:
        return line

    if console is Unset:
        console = Console(width=layout.left + layout.right)
    lines = description.wrap(console, layout.span)
    for segment in lines:
        segment.rstrip()

    if cell_len(line.plain) > layout.left:
        line.append("\n").append(" " * layout.column)
    else:
        line.append(" " * (layout.column - cell_len(line.plain)))
    line.append(lines[0])
    for segment in lines[1:]:
        line.append("\n").append(" " * layout.column).append(segment)
    return line


def section(header, options, layout, /, *, flag=False, expanded=False, colorful=False, console=Unset):
    """
    Render a header line followed by one row per option; empty when there are no options.
    """
    if not options:
        return Text()
    styler = _styles(colorful)
    lines = [Text(header, styler("group-label"))]
    if console is Unset:
        console = Console(width=layout.left + layout.right)
    lines += [
        row(option, layout, flag=flag, expanded=expanded, colorful=colorful, console=console) for option in options
    ]
    return Text("\n").join(lines)


def render(
        arguments,
        flags,
        /,
        *,
        args_header="Arguments:",
        flags_header="Flags:",
        indent=2,
        left=Unset,
        right=Unset,
        width=80,
        gutter=4,
        expanded=False,
        colorful=False,
):
    """
    Render the argument section, a blank line, then the flag section.

    Empty sections are left out together with their separating blank line.
    """
    if not isinstance(arguments, Sequence) or not isinstance(flags, Sequence):
        raise TypeError("render() arguments and flags must be sequences of option specs")

    layout = measure(
        arguments, flags, indent=indent, left=left, right=right, width=width, gutter=gutter, expanded=expanded
    )
    sections = [
        section(args_header or "Arguments:", arguments, layout, expanded=expanded, colorful=colorful),
        section(flags_header or "Flags:", flags, layout, flag=True, expanded=expanded, colorful=colorful),
    ]
    return Text("\n\n").join(part for part in sections if part)


__all__ = (
    "HelpLayout",
    "alias",
    "display",
    "metadata",
    "describe",
    "measure",
    "row",
    "section",
    "render",
)
