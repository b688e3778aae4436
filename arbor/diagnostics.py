"""
Arbor diagnostics: turn a failed resolution into a readable report.

Layout (plain form)

    failed to parse fully:

        (spaces trimmed)
     => 'felid DNE'
               ^
    expected one of 'panther' or 'felinae' after 'felid', got 'DNE'

     → run 'felid help' for more info on the command.
     → run 'helptree' for more info on the entire command tree.

Notes
- The echo is the trimmed line; the caret sits under the first character of
  the offending token, or one past the last character when the line ended
  before a subcommand was given.
- The expectation names the innermost failure's expected set in registration order.
- One hint per context (innermost first, the path shortening by one name each line).
- Works on any value shaped like a ResolveError (token, path, expected, contexts).
"""
from rich.text import Text

from .tokens import trim
from .utils import disjoin, palette

_ECHO = " => '"


def _expectation(error):
    """the one-line "expected …, got …" sentence."""
    match len(error.expected):
        case 0:
            wanted = "no command"
        case 1:
            wanted = disjoin(error.expected)
        case _:
            wanted = f"one of {disjoin(error.expected)}"
    after = f" after {' '.join(error.path)!r}" if error.path else ""
    got = "nothing" if not error.token.text else repr(error.token.text)
    return f"expected {wanted}{after}, got {got}"


def diagnose(line, error, /, *, colorful=False):
    """
    Render the report for a failed resolution of line as a rich Text.

    Parameters
    - line: the raw input line (it is trimmed here, as it was for tokenizing).
    - error: the ResolveError produced for that line.
    - colorful: apply the package palette (see utils.palette()).

    Returns
    - rich.text.Text; .plain is exactly what render() returns.
    """
    styles = palette()

    def style(name):
        return styles[name] if colorful else ""

    trimmed = trim(line)
    start, end = error.token.start, error.token.end

    text = Text()
    text.append("failed to parse fully:\n\n")
    text.append("    (spaces trimmed)\n")
    text.append(_ECHO)
    text.append(trimmed[:start], style("echo"))
    text.append(trimmed[start:end], style("offender"))
    text.append(trimmed[end:], style("echo"))
    text.append("'\n")
    text.append(" " * (len(_ECHO) + start))
    text.append("^", style("caret"))
    text.append("\n")
    text.append(_expectation(error), style("error-message"))
    text.append("\n\n")

    depth = len(error.path)
    for index, _ in enumerate(error.contexts):
        text.append(" → ", style("hint-arrow"))
        text.append(f"run '{' '.join(error.path[:depth - index])} help' for more info on the command.\n", style("hint"))
    text.append(" → ", style("hint-arrow"))
    text.append("run 'helptree' for more info on the entire command tree.", style("hint"))
    return text


def render(line, error, /):
    """
    Render the report for a failed resolution of line as a plain string.
    """
    return diagnose(line, error).plain


__all__ = (
    "diagnose",
    "render",
)
