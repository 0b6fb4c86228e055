"""Tree node model for the expand-then-flatten builder."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from mosaic.fragments import Fragment


class NodeState(str, Enum):
    """Where a node is in the expand/flatten cycle."""
    PARSED = "parsed"
    CHILDREN_ATTACHED = "children_attached"
    FLATTENED = "flattened"
    TERMINAL = "terminal"


@dataclass(frozen=True)
class TreeNode:
    """
    A fragment positioned in the reference tree.

    Every transformation returns a new node; ancestor chains are tuples
    and are extended by copy, so sibling branches never share state.

    Attributes:
        path: Canonical path (or literal key for unresolved references)
        metadata: Fragment metadata
        body: Current text
        variables: Declared variable names
        references: Pending reference keys, first-appearance order
        ancestors: Canonical paths from the root down to (excluding) this node
        lineage: For each pending reference, the ancestor chain its child is
            built with (the chain of the fragment that introduced the token)
        referrers: For each pending reference lifted from children, the paths
            of the children whose text contained it
        children: Child nodes, only populated between attach and flatten
        state: Position in the expand/flatten cycle
    """
    path: str
    metadata: Optional[Dict[str, Any]]
    body: str
    variables: Tuple[str, ...] = ()
    references: Tuple[str, ...] = ()
    ancestors: Tuple[str, ...] = ()
    lineage: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    referrers: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    children: Tuple['TreeNode', ...] = ()
    state: NodeState = NodeState.PARSED

    @classmethod
    def from_fragment(cls, fragment: Fragment, ancestors: Tuple[str, ...] = ()) -> 'TreeNode':
        """Place a parsed fragment in the tree below the given ancestors."""
        return cls(
            path=fragment.path,
            metadata=fragment.metadata,
            body=fragment.body,
            variables=fragment.variables,
            references=fragment.references,
            ancestors=tuple(ancestors),
        )

    @property
    def own_chain(self) -> Tuple[str, ...]:
        """Ancestor chain for nodes introduced by this node's own text."""
        return self.ancestors + (self.path,)

    def chain_for(self, reference: str) -> Tuple[str, ...]:
        """Ancestor chain the child for a pending reference is built with."""
        return self.lineage.get(reference, self.own_chain)

    def referrers_for(self, reference: str) -> Tuple[str, ...]:
        """Fragments whose text contained a pending reference."""
        return self.referrers.get(reference, (self.path,))

    def evolve(self, **changes) -> 'TreeNode':
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)
