"""
Pre-order traversal of vdev trees.
"""

from collections.abc import Callable

from ..models.pool import VdevNode


VdevVisitor = Callable[[VdevNode], None]


def visit_vdevs(root: VdevNode | None, visitor: VdevVisitor) -> None:
    """
    Visit a vdev and all of its descendants, parents before children.

    Children are visited in the order the ZFS subsystem reported them.
    A missing tree (pool without devices) is a no-op.

    Args:
        root: Root of the (sub)tree to walk
        visitor: Called once per node
    """
    if root is None:
        return

    visitor(root)
    for child in root.children:
        visit_vdevs(child, visitor)
