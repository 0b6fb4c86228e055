"""
Fragment tree builder.

Builds the root node, then repeats until no references remain:
1. attach one child per pending reference (each rendered with its own variables)
2. flatten the children's text into the parent body
3. re-extract references from the new body and filter loops
"""

import logging
from typing import Dict, List, Tuple

from mosaic.diagnostics import DiagnosticKind, DiagnosticsCollector
from mosaic.fragments import Fragment, FragmentParser
from mosaic.store import ContentStore, Found
from mosaic.tree.loops import filter_loops
from mosaic.tree.node import NodeState, TreeNode
from mosaic.variables import TemplateSubstitutor, VariableResolver


logger = logging.getLogger(__name__)


def _merge_chains(chains: List[Tuple[str, ...]]) -> Tuple[str, ...]:
    """Ordered union of several ancestor chains."""
    merged: List[str] = []
    for chain in chains:
        for path in chain:
            if path not in merged:
                merged.append(path)
    return tuple(merged)


class TreeBuilder:
    """Resolves a root fragment into a single flattened text."""

    def __init__(
        self,
        store: ContentStore,
        parser: FragmentParser,
        resolver: VariableResolver,
        diagnostics: DiagnosticsCollector
    ):
        """
        Initialize builder for one compose call.

        Args:
            store: Content source
            parser: Fragment parser bound to the same diagnostics
            resolver: Variable context snapshot
            diagnostics: Sink for recoverable anomalies
        """
        self.store = store
        self.parser = parser
        self.resolver = resolver
        self.diagnostics = diagnostics
        self.substitutor = TemplateSubstitutor()

    def build(self, root_key: str) -> TreeNode:
        """
        Build and fully flatten the tree rooted at a canonical path.

        Args:
            root_key: Canonical path (or literal key) of the root fragment

        Returns:
            Terminal node whose body is the composed text
        """
        node = self.build_node(root_key, ())

        iteration = 0
        while node.references:
            iteration += 1
            logger.debug(
                f"Iteration {iteration} for '{root_key}': expanding {list(node.references)}"
            )
            node = self.attach_children(node)
            node = self.flatten(node)

        return self.finalize(node)

    def load_fragment(self, key: str, referrers: Tuple[str, ...] = ()) -> Fragment:
        """
        Fetch and parse a fragment; absent content degrades to an empty fragment.

        Args:
            key: Reference key to load
            referrers: Fragments whose text referenced key, empty for the root

        Returns:
            Parsed fragment, or an empty one when the content is absent
        """
        result = self.store.get(key)
        if not isinstance(result, Found):
            for referrer in referrers or ("",):
                location = f" (referenced from '{referrer}')" if referrer else ""
                self.diagnostics.report(
                    DiagnosticKind.MISSING_TARGET,
                    f"'{key}' does not exist{location}: {result.reason}; rendering it as empty text",
                    path=referrer,
                    subject=key
                )
            return Fragment.empty(key)
        return self.parser.parse_fragment(key, result.text)

    def build_node(
        self,
        key: str,
        ancestors: Tuple[str, ...],
        referrers: Tuple[str, ...] = ()
    ) -> TreeNode:
        """
        Build a loop-free node with its own variables already rendered.

        Args:
            key: Reference key to build
            ancestors: Ancestor chain for the new node
            referrers: Fragments whose text referenced key

        Returns:
            Node in PARSED state
        """
        node = TreeNode.from_fragment(self.load_fragment(key, referrers), ancestors)
        node = self.render_variables(node)
        return filter_loops(node, self.diagnostics, self.substitutor)

    def render_variables(self, node: TreeNode) -> TreeNode:
        """Substitute a node's variables using its own path as override key."""
        if not node.variables:
            return node

        context = self.resolver.resolve(node.path)
        body = self.substitutor.substitute_variables(node.body, context)
        if self.substitutor.undefined_vars:
            logger.debug(
                f"Undefined variables in '{node.path}' rendered empty: "
                f"{sorted(self.substitutor.undefined_vars)}"
            )

        # Variable values may themselves contain reference tokens
        if '{{' in body:
            extraction = self.parser.extract_references(body, node.path)
            return node.evolve(body=extraction.body, references=tuple(extraction.references))
        return node.evolve(body=body)

    def attach_children(self, node: TreeNode) -> TreeNode:
        """Build one child per pending reference, in order."""
        children = tuple(
            self.build_node(ref, node.chain_for(ref), node.referrers_for(ref))
            for ref in node.references
        )
        return node.evolve(children=children, state=NodeState.CHILDREN_ATTACHED)

    def flatten(self, node: TreeNode) -> TreeNode:
        """
        Substitute children's text into the parent and collect new references.

        Args:
            node: Node in CHILDREN_ATTACHED state

        Returns:
            Loop-free node with children discarded and references re-extracted
        """
        context: Dict[str, str] = {}
        for ref, child in zip(node.references, node.children):
            context[ref] = child.body

        body = self.substitutor.substitute_all(node.body, context)
        extraction = self.parser.extract_references(body, node.path)

        # A reference lifted from a child's text keeps that child's chain
        lineage = {}
        referrers = {}
        for ref in extraction.references:
            sources = [child for child in node.children if ref in child.references]
            lineage[ref] = _merge_chains([child.own_chain for child in sources]) if sources else node.own_chain
            referrers[ref] = tuple(child.path for child in sources) if sources else (node.path,)

        flattened = node.evolve(
            body=extraction.body,
            references=tuple(extraction.references),
            lineage=lineage,
            referrers=referrers,
            children=(),
            state=NodeState.FLATTENED,
        )
        return filter_loops(flattened, self.diagnostics, self.substitutor)

    def finalize(self, node: TreeNode) -> TreeNode:
        """Render leftover variable tokens as empty text and mark the node terminal."""
        body = self.substitutor.substitute_all(node.body, {})
        return node.evolve(body=body, state=NodeState.TERMINAL)
