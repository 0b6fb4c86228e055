"""Fragment tree building and loop detection."""

from .builder import TreeBuilder
from .loops import filter_loops
from .node import NodeState, TreeNode

__all__ = [
    "NodeState",
    "TreeBuilder",
    "TreeNode",
    "filter_loops",
]
