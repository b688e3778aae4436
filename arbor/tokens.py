"""
Arbor tokenizer: raw line → positioned tokens.

Behavior
- The line is trimmed first; every offset refers to the trimmed line.
- Tokens are maximal runs of non-whitespace; any whitespace run separates them.
- No quoting, escaping or grouping: a quote is an ordinary character.

Notes
- Offsets are character offsets (half-open [start, end)).
- tokenize() is lossy: joining the texts with single spaces normalizes the
  original spacing, which is all the resolver needs.
"""
import re
from collections import namedtuple

_WORD = re.compile(r"\S+")


class Token(namedtuple("Token", ("text", "start", "end"))):
    """
    A whitespace-free substring of the trimmed line with its position.
    """
    __slots__ = ()

    def __str__(self):
        return self.text


def trim(line, /):
    """return the line without leading and trailing whitespace."""
    if not isinstance(line, str):
        raise TypeError("trim() argument must be a string")
    return line.strip()


def tokenize(line, /):
    """
    Split a raw line into a tuple of Tokens.

    Returns
    - () when the trimmed line is empty.
    - Token(text, start, end) for each whitespace-separated word, in order.
    """
    if not isinstance(line, str):
        raise TypeError("tokenize() argument must be a string")
    return tuple(Token(match.group(), match.start(), match.end()) for match in _WORD.finditer(line.strip()))


__all__ = (
    "Token",
    "trim",
    "tokenize",
)
