"""
Arbor resolver: walk a command tree along a token sequence.

resolve(root, tokens) returns either
- Dispatch(leaf, args): the tokens reached a Leaf; args are the tokens after it.
- ResolveError(token, path, expected, contexts): they did not.

Algorithm (recursive, one frame per matched Parent)
1. A Parent with no tokens left fails "exhausted": the offending token is an
   empty Token at the end of the line and expected lists the Parent's children.
2. A Leaf dispatches with whatever tokens remain.
3. A Parent whose child matches the head token exactly recurses into it; on
   failure the frame appends that child's (name, help) to the error's contexts,
   so contexts read innermost first once the recursion has unwound.
4. A Parent with no matching child fails at the head token.

Notes
- expected always follows registration order; there is no prefix matching here.
- ResolveError is a value, never raised: the shell turns it into a fault and
  the completion engine reads it to find candidates.
"""
from collections import namedtuple

from .commands import Leaf, Parent
from .faults import FaultCode
from .tokens import Token, tokenize


class Dispatch(namedtuple("Dispatch", ("leaf", "args"))):
    """the leaf selected by a line and the tokens left for its handler."""
    __slots__ = ()


class ResolveError(namedtuple("ResolveError", ("token", "path", "expected", "contexts"))):
    """
    A failed resolution.

    Fields
    - token: the offending Token (empty text at end of line when exhausted).
    - path: names matched before the failure, outermost first.
    - expected: names that were valid at the failure point, in registration order.
    - contexts: (name, help) of each matched Parent, innermost first.
    """
    __slots__ = ()

    @property
    def exhausted(self):
        """True when the line ended on a Parent (nothing after it)."""
        return not self.token.text

    @property
    def code(self):
        if self.exhausted:
            return FaultCode.INCOMPLETE_COMMAND
        return FaultCode.UNKNOWN_SUBCOMMAND if self.path else FaultCode.UNKNOWN_COMMAND


def _resolve(node, tokens, path, end):
    if isinstance(node, Leaf):
        return Dispatch(node, tokens)

    if not tokens:
        return ResolveError(Token("", end, end), path, tuple(node._children), ())

    head, rest = tokens[0], tokens[1:]
    try:
        child = node._children[head.text]
    except KeyError:
        return ResolveError(head, path, tuple(node._children), ())

    outcome = _resolve(child, rest, path + (child.name,), end)
    if isinstance(outcome, ResolveError):
        return outcome._replace(contexts=outcome.contexts + ((child.name, child.help),))
    return outcome


def resolve(root, tokens, /):
    """
    Resolve tokens (a sequence of Token, or a raw line) against root's children.

    The root itself is never matched or reported in contexts; it only provides
    the first level of names.

    Raises
    - TypeError: when root is not a Parent or tokens is neither a string nor Tokens.
    """
    if not isinstance(root, Parent):
        raise TypeError("resolve() first argument must be a parent command")
    if isinstance(tokens, str):
        tokens = tokenize(tokens)
    tokens = tuple(tokens)
    if not all(isinstance(token, Token) for token in tokens):
        raise TypeError("resolve() second argument must be a string or a sequence of tokens")

    # The trimmed line ends where its last token ends.
    end = tokens[-1].end if tokens else 0
    return _resolve(root, tokens, (), end)


__all__ = (
    "Dispatch",
    "ResolveError",
    "resolve",
)
