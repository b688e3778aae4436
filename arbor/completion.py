"""
Arbor completion: candidate names for a partially typed line.

complete(root, line, cursor) looks only at the text before the cursor:
- the words before the last one (or all of them, when that text is empty or
  ends in whitespace) are resolved with the same resolver the shell uses;
- when they stop exactly on a Parent, its children whose names start with the
  last, partial word are the candidates (all of them for an empty partial);
- in every other case (they reach a Leaf, or do not match at all) there is
  nothing to offer.

Matching is literal and case-sensitive; candidates keep registration order.
"""
from .resolver import ResolveError, resolve
from .tokens import tokenize
from .utils import Unset, coalesce


def complete(root, line, cursor=Unset, /):
    """
    Return the completion candidates for line with the cursor at the given offset.

    Parameters
    - root: the Parent whose children form the first level.
    - line: the raw line being edited.
    - cursor: character offset into line (defaults to the end; larger values clamp).

    Returns
    - tuple[str, ...] of unique candidate names (possibly empty).

    Raises
    - TypeError / ValueError: for a non-string line or a non-integer / negative cursor.
    """
    if not isinstance(line, str):
        raise TypeError("complete() line must be a string")
    cursor = coalesce(cursor, len(line))
    if not isinstance(cursor, int) or isinstance(cursor, bool):
        raise TypeError("complete() cursor must be an integer")
    if cursor < 0:
        raise ValueError("complete() cursor cannot be negative")

    before = line[:cursor]
    tokens = tokenize(before)
    if tokens and not before[-1].isspace():
        typed, partial = tokens[:-1], tokens[-1].text
    else:
        typed, partial = tokens, ""

    outcome = resolve(root, typed)
    if not isinstance(outcome, ResolveError) or not outcome.exhausted:
        return ()
    return tuple(dict.fromkeys(name for name in outcome.expected if name.startswith(partial)))


__all__ = (
    "complete",
)
