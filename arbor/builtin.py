"""
Arbor builtins: the commands every shell carries.

- help [path...]   list the commands (or the subcommands under path)
- helptree         draw every command as a tree
- history          print the lines typed so far
- exit             leave the shell

Builtin handlers receive the shell itself as their state. They live in their
own tree (see tree()) so the user tree never has to make room for them; the
shell reserves their names at its top level.
"""
from .commands import Leaf, Parent
from .faults import HandlerError
from .resolver import Dispatch, resolve


def listing(parent, /, path=()):
    """
    List the direct children of parent, one "'name' - help" line each.

    path is the route the user typed to reach parent; it only affects the heading.
    """
    heading = f"subcommands of {' '.join(path)!r}:" if path else f"{parent.name}:"
    lines = [heading]
    for child in parent._children.values():
        lines.append(f"    {child.name!r} - {child.help or 'no description'}")
    return "\n".join(lines)


def drawing(root, /):
    """
    Draw root and all its descendants, depth first:

        commands
        ├── dog
        └── felid
            ├── panther
            └── felinae
    """
    lines = [root.name]
    for node, lasts in root.walk():
        indent = "".join("    " if last else "│   " for last in lasts[:-1])
        lines.append(f"{indent}{'└── ' if lasts[-1] else '├── '}{node.name}")
    return "\n".join(lines)


def descend(root, path, /):
    """return the node reached from root by following names in path."""
    node = root
    for name in path:
        node = node._children[name]
    return node


def _help(shell, args):
    """list the commands, or the subcommands under the given path"""
    if not args:
        return f"{listing(shell.commands)}\n{listing(shell.builtins)}"

    route = " ".join(map(str, args))
    outcome = resolve(shell.commands, args)
    if isinstance(outcome, Dispatch) and not outcome.args:
        return f"{route!r} - {outcome.leaf.help or 'no description'}"
    if isinstance(outcome, Dispatch):
        raise HandlerError(f"{outcome.leaf.name!r} has no subcommands", hint=f"run 'help {outcome.leaf.name}' instead")
    if outcome.exhausted:
        return listing(descend(shell.commands, outcome.path), outcome.path)
    if len(args) == 1 and (builtin := shell.builtins._children.get(route)):
        return f"{route!r} - {builtin.help or 'no description'}"
    raise HandlerError(f"there is no command {route!r}", hint="run 'helptree' to see the entire command tree")


def _bare(name, args):
    if args:
        raise HandlerError(f"{name!r} takes no arguments", hint=f"run '{name}' on its own")


def _helptree(shell, args):
    """draw the entire command tree"""
    _bare("helptree", args)
    return f"{drawing(shell.commands)}\n\n{drawing(shell.builtins)}"


def _history(shell, args):
    """print the lines entered so far"""
    _bare("history", args)
    return "\n".join(shell.history)


def _exit(shell, args):
    """leave the shell"""
    _bare("exit", args)
    shell.terminate()
    return "bye"


def tree():
    """
    Build a fresh builtin tree (a Parent named "builtins").

    Each shell needs its own, since a command belongs to a single parent.
    """
    return Parent(
        "builtins",
        Leaf(_help, name="help"),
        Leaf(_helptree, name="helptree"),
        Leaf(_history, name="history"),
        Leaf(_exit, name="exit"),
    )


__all__ = (
    "listing",
    "drawing",
    "descend",
    "tree",
)
