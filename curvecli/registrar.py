"""
curvecli subcommand registrar: mount subsystem command trees on the root.

Registration is data-driven. SUBSYSTEMS lists one Subsystem per product
area, in the order they appear under the root; adding a subsystem means
adding an entry, not code. Each factory builds a fresh, self-contained
subtree that is attached as is.
"""
from typing import NamedTuple, Protocol, runtime_checkable

from .log import logger
from .subsystems import new_curvefs_command
from .utils import Unset, coalesce


@runtime_checkable
class SubsystemCommandFactory(Protocol):
    """
    Anything with a subsystem name and a build() returning its Command tree.
    """
    name: str

    def build(self): ...


class Subsystem(NamedTuple):
    name: str
    factory: object

    def build(self):
        return self.factory()


# "bs" (curvebs) is not registered yet.
SUBSYSTEMS = (
    Subsystem("fs", new_curvefs_command),
)


def register_subsystems(root, factories=Unset, /):
    """
    Attach every subsystem subtree as a child of root, in order.

    Parameters
    - root: Command receiving the subtrees.
    - factories: Iterable[SubsystemCommandFactory] | Unset (SUBSYSTEMS).

    Raises
    - TypeError: an entry is not a subsystem factory.
    - DuplicateNameError: a subtree name collides with an existing child.

    Returns
    - root.
    """
    for factory in coalesce(factories, SUBSYSTEMS):
        if not isinstance(factory, SubsystemCommandFactory):
            raise TypeError("register_subsystems() entries must be subsystem command factories")
        root.add_child(subtree := factory.build())
        logger.debug("registered subsystem %r as %r", factory.name, subtree.route)
    return root


__all__ = (
    "SubsystemCommandFactory",
    "Subsystem",
    "SUBSYSTEMS",
    "register_subsystems",
)
