"""
Usage message rendering.

render_usage() formats a Specification into the plain-text usage block shown
with every usage fault (and on demand). Output is deterministic for a given
specification and width.

Layout
    <message>                                  (when given)
    <pre-usage paragraph, wrapped>             (when given, then a blank line)
    Usage: prog [OPTIONS] outputfile [input ...]

    OPTIONS

    -i n
    --iterations n          Total iterations
    -u username
    --user username         User to receive email. (May be specified
                            multiple times.)

    PARAMETERS

    outputfile              Output file to which to write.
    [input ...]             Input files to read. (May be specified multiple
                            times.)

    <post-usage paragraph, wrapped>            (when given)

Descriptions start in a shared column two spaces past the longest label.
When fewer than 20 columns remain for them, descriptions move below their
labels, indented by four spaces.
"""
import io
import itertools
from collections import deque

from rich.console import Console
from rich.containers import Lines
from rich.text import Text

from .arguments import label, name
from .utils import Unset

_NARROW = 20
_HANGING = 4


def _wrap(console, text, width, /):
    """Word-wrap a paragraph into plain lines (at least one line)."""
    lines = [line.plain.rstrip() for line in Text(text).wrap(console, max(width, 1))]
    return lines or [""]


def _option_labels(argument, compact, /):
    labels = []
    for alias in argument.names:
        text = ("-" if len(alias) == 1 else "--") + alias
        if argument.kind.valued:
            text += " " + argument.value_name
        labels.append(text)
    if compact:
        return [", ".join(labels)]
    return labels


def _description(argument, /):
    description = argument.description
    if argument.kind.multiple:
        description = (description + " (May be specified multiple times.)").strip()
    return description


def _rows(console, entries, column, width, /):
    """
    Lay out (labels, description) entries in two columns.
    """
    rows = []
    narrow = width - column < _NARROW
    for labels, description in entries:
        if not description:
            rows.extend(labels)
            continue
        if narrow:
            rows.extend(labels)
            rows.extend(" " * _HANGING + line for line in _wrap(console, description, width - _HANGING))
            continue
        wrapped = _wrap(console, description, width - column)
        for left, right in itertools.zip_longest(labels, wrapped, fillvalue=""):
            rows.append((left.ljust(column) + right).rstrip())
    return rows


def _synopsis(specification, program, width, /):
    """
    Build the "Usage:" line, wrapping its items with a hanging indent.
    """
    head = "Usage: " + program
    items = deque()
    if specification.options:
        items.append("[OPTIONS]")
    items.extend(label(argument) for argument in specification.parameters)

    offset = len(head) + 1
    try:
        lines = Lines([Text(head + " " + items.popleft())])
    except IndexError:
        return [head]

    while items:
        if len(lines[-1]) + 1 + len(item := items.popleft()) > width and len(lines[-1]) > offset:
            lines.append(Text(" " * offset + item))
        else:
            lines[-1].append(" " + item)
    return [line.plain for line in lines]


def render_usage(
        specification,
        program,
        /,
        *,
        compact=False,
        width=79,
        pre_usage=Unset,
        post_usage=Unset,
        sort=False,
        message=Unset,
):
    """
    Render the usage message of a specification.

    Parameters
    - specification: Specification
    - program: str
      Program name shown after "Usage:".
    - compact: bool
      List every option's names on a single line ("-i n, --iterations n")
      instead of one name per line.
    - width: int
      Output width used for wrapping.
    - pre_usage / post_usage: str
      Paragraphs shown before the "Usage:" line and after the sections.
    - sort: bool
      Sort options by canonical name (hyphens ignored) instead of declaration
      order. Parameters always keep declaration order.
    - message: str
      Error message placed on the first line.

    Returns
    - str: the usage text, without a trailing newline.
    """
    if not isinstance(width, int) or width < 1:
        raise ValueError("render_usage() width must be a positive integer")

    console = Console(file=io.StringIO(), width=width, color_system=None)
    lines = []

    if message:
        lines.append(message)
    if pre_usage:
        lines.extend(_wrap(console, pre_usage, width))
        lines.append("")

    lines.extend(_synopsis(specification, program, width))

    options = specification.options
    if sort:
        options = sorted(options, key=lambda x: name(x).lstrip("-"))

    option_entries = [(_option_labels(x, compact), _description(x)) for x in options]
    parameter_entries = [([label(x)], _description(x)) for x in specification.parameters]

    widths = [len(entry) for labels, _ in option_entries + parameter_entries for entry in labels]
    column = max(widths, default=0) + 2

    if option_entries:
        lines.extend(["", "OPTIONS", ""])
        lines.extend(_rows(console, option_entries, column, width))
    if parameter_entries:
        lines.extend(["", "PARAMETERS", ""])
        lines.extend(_rows(console, parameter_entries, column, width))

    if post_usage:
        lines.append("")
        lines.extend(_wrap(console, post_usage, width))

    return "\n".join(lines)


__all__ = (
    "render_usage",
)
