"""
curvecli command layer: the command tree.

What this module provides
- Command: one node of the command tree, with:
  • identity and help metadata (name, usage, descr),
  • a flag registry (local and persistent flags, see curvecli.flags),
  • ordered children (registration order is the help listing order),
  • an optional handler implementing Runnable.
- Runnable: capability interface for handlers (execute(invocation)).
- add_child()/add_flag(): build-phase helpers enforcing unique names.

Lifecycle
- Trees are assembled by a builder function (see curvecli.dispatcher) and
  sealed with seal(); after that every mutation raises TypeError.
- Trees are strictly hierarchical: a command has at most one parent and
  cannot be attached under itself or one of its descendants.

Quick start
    from curvecli.commands import Command
    from curvecli.flags import Flag, FlagKind

    def status(invocation):
        print("ok", invocation.args)

    root = Command("tool", descr="manage things")
    root.add_child(Command("status", descr="show status", handler=status))
    root.add_flag(Flag("verbose", "V", kind=FlagKind.BOOL))
"""
from typing import Protocol, runtime_checkable

from .faults import DuplicateFlagError, DuplicateNameError
from .flags import Flag
from .utils import IntrospectableType, Unset, coalesce


@runtime_checkable
class Runnable(Protocol):
    """
    Handler capability bound to a command.

    execute() receives the dispatcher's Invocation (remaining args, resolved
    flag values, matched command). Returning normally means success; raising
    curvecli.faults.HandlerError means failure.
    """

    def execute(self, invocation, /): ...


class Command(metaclass=IntrospectableType):
    """
    Node of the command tree.

    Properties
    - name, usage, descr, handler, parent: read-only scalars.
    - flags: read-only mapping long-name -> Flag of the flags declared here.
    - children: read-only mapping name -> Command in registration order.
    """

    __introspectable__ = (
        "name",
        "usage",
        "descr",
        "flags",
        "children",
        "handler",
        "parent",
    )

    __displayable__ = (
        "name",
        "usage",
        "descr",
        "children",
    )

    def __init__(self, name, /, usage=Unset, descr=Unset, *, handler=Unset):
        """
        Create a detached command (newNode).

        Parameters
        - name: str, non-empty, no whitespace.
        - usage: str | Unset; explicit usage line, synthesized when Unset.
        - descr: str | Unset; short description.
        - handler: Runnable | Callable[[Invocation], None] | Unset.
          Plain callables are accepted and called with the invocation.

        Raises
        - TypeError/ValueError on malformed metadata.
        """
        typename = type(self).__typename__

        if not isinstance(name, str):
            raise TypeError(f"{typename} 'name' must be a string")
        if not (name := name.strip()) or any(character.isspace() for character in name):
            raise ValueError(f"{typename} 'name' must be a non-empty word")

        for field, value in (("usage", usage), ("descr", descr)):
            if not isinstance(value, str | Unset):
                raise TypeError(f"{typename} {field!r} must be a string")
            if isinstance(value, str) and not value.strip():
                raise ValueError(f"{typename} {field!r} cannot be empty")

        if handler is not Unset and not (isinstance(handler, Runnable) or callable(handler)):
            raise TypeError(f"{typename} 'handler' must be runnable or callable")

        self._name = name
        self._usage = coalesce(usage and usage.strip())
        self._descr = coalesce(descr and descr.strip())
        self._handler = coalesce(handler)
        self._flags = {}
        self._children = {}
        self._parent = None
        self._sealed = False

    @property
    def sealed(self):
        return self._sealed

    @property
    def root(self):
        command = self
        while command.parent:
            command = command.parent
        return command

    @property
    def path(self):
        """
        Ancestry from the root to this command (root first).
        """
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    @property
    def route(self):
        """
        The command line that reaches this command, e.g. 'curve fs'.
        """
        return " ".join(command.name for command in self.path)

    def _ensure_mutable(self):
        if self._sealed:
            raise TypeError(f"{type(self).__typename__} {self.route!r} is sealed")

    def add_child(self, child, /):
        """
        Attach child under this command.

        Raises
        - TypeError: child is not a command or this tree is sealed.
        - ValueError: child already has a parent or would create a cycle.
        - DuplicateNameError: a sibling with the same name exists.
        """
        self._ensure_mutable()
        if not isinstance(child, Command):
            raise TypeError(f"{type(self).__typename__} child must be a command")
        if child.parent is not None:
            raise ValueError(f"{type(self).__typename__} {child.name!r} is already attached to {child.parent.route!r}")
        if child in self.path:
            raise ValueError(f"{type(self).__typename__} {child.name!r} cannot be attached under itself")

        if self._children.setdefault(child.name, child) is not child:
            typeof = "subcommand" if self.parent else "command"
            raise DuplicateNameError(
                f"{typeof} name {child.name!r} is already in use under {self.route!r}",
                name=child.name,
                route=self.route,
            )
        child._parent = self
        return child

    def add_flag(self, flag, /):
        """
        Declare a flag on this command.

        Raises
        - TypeError: flag is not a Flag or this tree is sealed.
        - DuplicateFlagError: another flag here shares its long or short name.
        """
        self._ensure_mutable()
        if not isinstance(flag, Flag):
            raise TypeError(f"{type(self).__typename__} flag must be a flag")

        for other in self._flags.values():
            if taken := set(flag.names) & set(other.names):
                raise DuplicateFlagError(
                    f"flag name {min(taken)!r} is already in use on {self.route!r}",
                    name=min(taken),
                    route=self.route,
                )
        self._flags[flag.long] = flag
        return flag

    def inherited_flags(self):
        """
        Persistent flags declared by ancestors and still visible here.

        Nearer ancestors override farther ones; flags declared on this
        command override every inherited flag with the same long name.
        """
        inherited = {}
        for ancestor in self.path[:-1]:
            for flag in ancestor._flags.values():
                if flag.persistent:
                    inherited.pop(flag.long, None)
                    inherited[flag.long] = flag
        for long in self._flags:
            inherited.pop(long, None)
        return inherited

    def visible_flags(self):
        """
        Every spelling ("--long", "-s") accepted here mapped to its Flag.
        """
        spellings = {}
        for flag in (*self.inherited_flags().values(), *self._flags.values()):
            for name in flag.names:
                spellings[name] = flag
        return spellings

    def seal(self):
        """
        Make this command and its whole subtree read-only. Returns self.
        """
        self._sealed = True
        for child in self._children.values():
            child.seal()
        return self

    def run(self, invocation, /):
        """
        Execute the handler with the invocation.

        Raises
        - TypeError: this command has no handler.
        - whatever the handler raises (HandlerError for expected failures).
        """
        if self._handler is None:
            raise TypeError(f"{type(self).__typename__} {self.route!r} has no handler")
        if isinstance(self._handler, Runnable):
            return self._handler.execute(invocation)
        return self._handler(invocation)


def add_child(parent, child, /):
    """
    Attach child under parent (see Command.add_child).
    """
    return parent.add_child(child)


def add_flag(command, flag, /):
    """
    Declare flag on command (see Command.add_flag).
    """
    return command.add_flag(flag)


__all__ = (
    "Runnable",
    "Command",
    "add_child",
    "add_flag",
)
