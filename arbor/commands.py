"""
Arbor command layer: the tree of named commands a shell dispatches into.

What this module provides
- Leaf: a named command bound to a handler called as handler(state, args).
- Parent: a named, ordered group of subcommands (leaves or other parents).
- Factories and helpers:
  • command(...): create a Leaf or a decorator that produces one.
  • Parent.command(...) / Parent.group(...) / Parent.attach(...): grow a tree in place.
  • Parent.walk(): depth-first traversal used by tree renderers.
  • echo: a ready-made handler that echoes its arguments.

Core ideas
- Strict forest: every node is owned by at most one parent; sibling names are
  unique and checked when a node is attached (DuplicateCommandError).
- No upward links: a node does not know its parent; ancestry is rebuilt by whoever
  walks down the tree (see arbor.resolver).
- Names are whole tokens: non-empty, no whitespace, matched case-sensitively.

Quick start
    from arbor import Parent, command

    felid = Parent("felid", help="cats and such")

    @felid.command
    def panther(state, args):
        '''a big cat'''
        return "roar"

    felinae = felid.group("felinae", help="the small cats")

    @felinae.command(name="domestic-cat")
    def domestic(state, args):
        return "meow"
"""
import functools
import inspect
import operator
import re

from .faults import DuplicateCommandError, ReservedNameError, HandlerError
from .utils import Unset, coalesce, mirror, rename

_NAME = re.compile(r"\S+")


class CommandType(type):
    """
    Metaclass giving every command class a uniform, introspectable shape.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ for diagnostics and rich UI.
    - Expose selected fields as read-only properties using mirror() for all names
      listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens).
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        # Subclasses extend the introspectable fields of their bases.
        introspectable = tuple(dict.fromkeys((
            *(field for base in bases for field in getattr(base, "__introspectable__", ())),
            *namespace.get("__introspectable__", ()),
        )))

        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
                "__introspectable__": introspectable,
            } | {
                field: mirror(field) for field in introspectable
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - leaf(name='dog', help='a loyal friend')
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _process_name(cls, name):
    """
    Validate a command name.

    Errors
    - TypeError: when the name is not a string.
    - ValueError: when the name is empty or is not a single whitespace-free word.
    """
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} name must be a string")
    if not _NAME.fullmatch(name):
        raise ValueError(f"{cls.__typename__} name must be a non-empty word without whitespace, got {name!r}")
    return name


def _process_help(cls, help):
    if not isinstance(help, str | None):
        raise TypeError(f"{cls.__typename__} help must be a string")
    return (help.strip() or None) if help else None


def _attach_to_parent(self, parent):
    """
    Register this command under its parent, enforcing the forest rules.

    Errors
    - TypeError: when parent is not a Parent.
    - ValueError: when self is already attached somewhere, or the attachment
      would make a command its own descendant.
    - ReservedNameError: when the parent reserves self's name (shell roots do).
    - DuplicateCommandError: when a sibling already uses self's name.
    """
    if not isinstance(parent, Parent):
        raise TypeError(f"{type(self).__typename__} parent must be a parent command")
    if self._attached:
        raise ValueError(f"{type(self).__typename__} {self.name!r} is already attached to a parent")
    if self is parent or isinstance(self, Parent) and any(node is parent for node, _ in self.walk()):
        raise ValueError(f"{type(self).__typename__} {self.name!r} cannot be attached under itself")
    if self.name in parent._reserved:
        raise ReservedNameError(f"command name {self.name!r} is reserved for a builtin")

    # setdefault claims the slot only if it is free.
    if parent._children.setdefault(self.name, self) is not self:
        raise DuplicateCommandError(f"command name {self.name!r} is already in use under {parent.name!r}")
    self._attached = True


class Command(metaclass=CommandType):
    """
    Common base of Leaf and Parent; not instantiated directly.

    Properties
    - name: the token that selects this command among its siblings.
    - help: one-line description shown by listings (None when not given).
    """
    __introspectable__ = (
        "name",
        "help",
    )

    def __new__(cls, *args, **kwargs):
        if cls is Command:
            raise TypeError("type 'Command' cannot be instantiated directly, use Leaf or Parent")
        return super().__new__(cls)


class Leaf(Command):
    """
    An executable command.

    The handler receives the shell state and the tuple of remaining tokens
    (everything typed after the leaf's own name) and returns the text to print,
    or None for no output. To report a failure it raises HandlerError.
    """
    __introspectable__ = (
        "handler",
    )

    def __init__(self, callback, /, parent=Unset, name=Unset, help=Unset):
        """
        Wrap a callback into a Leaf.

        Parameters
        - callback: callable accepting (state, args).
        - parent: Parent to attach to right away (optional).
        - name: defaults to the callback's __name__ with underscores turned into hyphens;
          required for lambdas.
        - help: defaults to the first line of the callback's docstring.

        Raises
        - TypeError: callback not callable or unable to take (state, args); invalid name/help type.
        - ValueError: invalid name or a lambda without one; see _attach_to_parent for attachment errors.
        """
        if not callable(callback):
            raise TypeError(f"{type(self).__typename__} callback must be callable")
        try:
            inspect.signature(callback).bind(None, ())
        except TypeError:
            raise TypeError(f"{type(self).__typename__} callback must accept (state, args)") from None
        except ValueError:
            pass  # no introspectable signature (some builtins); trust the caller

        if name is Unset:
            name = getattr(callback, "__name__", Unset)
            if name == "<lambda>":
                raise ValueError(f"{type(self).__typename__} name is required for lambda callbacks")
            name = name.replace("_", "-") if isinstance(name, str) else name
        if help is Unset:
            help = (inspect.getdoc(callback) or "").partition("\n")[0]

        self._name = _process_name(type(self), coalesce(name))
        self._help = _process_help(type(self), help)
        self._handler = callback
        self._attached = False

        if parent is not Unset:
            _attach_to_parent(self, parent)

    def __call__(self, state, args, /):
        return self._handler(state, args)


class Parent(Command):
    """
    A group of subcommands; never executable itself.

    Children are kept in registration order: listings, completion candidates and
    "expected" sets all follow it.
    """
    __introspectable__ = (
        "children",
    )

    def __init__(self, name, /, *children, parent=Unset, help=Unset):
        """
        Build a Parent, optionally with initial children and an owner.

        Parameters
        - name: the token selecting this group.
        - *children: Leaf/Parent nodes attached in the given order.
        - parent: Parent to attach to right away (optional).
        - help: one-line description.
        """
        self._name = _process_name(type(self), name)
        self._help = _process_help(type(self), coalesce(help))
        self._children = {}
        self._reserved = frozenset()
        self._attached = False

        for child in children:
            self.attach(child)
        if parent is not Unset:
            _attach_to_parent(self, parent)

    def __contains__(self, name):
        return name in self._children

    def __len__(self):
        return len(self._children)

    def attach(self, child, /):
        """
        Attach an existing Leaf or Parent as the last child; returns the child.
        """
        if not isinstance(child, Command):
            raise TypeError(f"{type(self).__typename__} children must be commands")
        _attach_to_parent(child, self)
        return child

    def command(self, source=Unset, /, *args, **kwargs):
        """
        Create a Leaf under this parent; usable as @parent.command or @parent.command(name=...).

        This is a thin wrapper around command(...) injecting parent=self.
        """
        return command(source, self, *args, **kwargs)

    def group(self, name, /, *children, help=Unset):
        """
        Create a nested Parent under this parent and return it.
        """
        return Parent(name, *children, parent=self, help=help)

    def walk(self):
        """
        Depth-first, pre-order traversal of every descendant.

        Yields
        - (node, lasts): lasts is a tuple with one flag per level from the first
          child level down to node, each telling whether that ancestor (or node
          itself, for the final flag) is the last among its siblings.
        """
        def descend(parent, lasts):
            children = tuple(parent._children.values())
            for index, child in enumerate(children, 1):
                yield child, (chain := lasts + (index == len(children),))
                if isinstance(child, Parent):
                    yield from descend(child, chain)

        yield from descend(self, ())


def command(source=Unset, /, *args, **kwargs):
    """
    Create a Leaf or return a decorator to build it later.

    Invocation modes
    - Direct callback:   leaf = command(func, parent, name="x")
    - Decorator:         @command  /  @command(name="x", help="...")

    Parameters
    - source: Unset | Callable
    - *args, **kwargs: forwarded to Leaf (parent, name, help).

    Returns
    - Leaf | Callable[[Callable], Leaf]
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        return Leaf(source, *args, **kwargs)

    return wrapper(source) if source is not Unset else wrapper


def echo(state, args, /):
    """echo the arguments back"""
    if not args:
        raise HandlerError("nothing to echo", hint="pass at least one word, e.g. 'echo hello'")
    return f"ECHO: {' '.join(map(str, args))}"


__all__ = (
    "Command",
    "Leaf",
    "Parent",
    "command",
    "echo",
)

del CommandType
