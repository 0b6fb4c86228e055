"""
Reference loop detection.

A reference is a loop when it points at the node itself, at one of the
node's ancestors, or at a fragment already on the chain that introduced
it. Loops are never fatal: the reference is dropped, its tokens are
stripped from the body and a warning diagnostic is recorded.
"""

from typing import List

from mosaic.diagnostics import DiagnosticKind, DiagnosticsCollector
from mosaic.tree.node import TreeNode
from mosaic.variables import TemplateSubstitutor


def remove_references(node: TreeNode, to_remove: List[str], substitutor: TemplateSubstitutor) -> TreeNode:
    """
    Drop references from a node and strip their tokens from its body.

    Args:
        node: Node to process
        to_remove: Reference keys to drop
        substitutor: Used to strip the tokens

    Returns:
        New node without the given references
    """
    removed = set(to_remove)
    return node.evolve(
        references=tuple(ref for ref in node.references if ref not in removed),
        lineage={ref: chain for ref, chain in node.lineage.items() if ref not in removed},
        referrers={ref: paths for ref, paths in node.referrers.items() if ref not in removed},
        body=substitutor.strip_tokens(node.body, removed),
    )


def filter_loops(
    node: TreeNode,
    diagnostics: DiagnosticsCollector,
    substitutor: TemplateSubstitutor
) -> TreeNode:
    """
    Remove self-references and ancestor loops from a node.

    Args:
        node: Node whose references may contain loops
        diagnostics: Sink for loop warnings
        substitutor: Used to strip removed tokens

    Returns:
        Node whose references contain neither its own path nor any ancestor
    """
    filtered = node

    if filtered.path in filtered.references:
        diagnostics.report(
            DiagnosticKind.SELF_REFERENCE,
            f"Self-reference detected at {filtered.path}; removing it",
            path=filtered.path,
            subject=filtered.path
        )
        filtered = remove_references(filtered, [filtered.path], substitutor)

    looped = [
        ref for ref in filtered.references
        if ref in filtered.ancestors or ref in filtered.lineage.get(ref, ())
    ]
    if looped:
        for ref in looped:
            diagnostics.report(
                DiagnosticKind.ANCESTOR_LOOP,
                f"Loop detected at {filtered.path} with reference: {ref}; removing it",
                path=filtered.path,
                subject=ref
            )
        filtered = remove_references(filtered, looped, substitutor)

    return filtered
