"""Tree walkers that collect references before rendering.

Callers run :func:`extract_clause_ids` on a template to learn which clause
bodies to fetch before they build the clause registry.
"""

from __future__ import annotations

from collections.abc import Iterator

from docrender.renderer.models import ClauseBlockAttrs, Node, NodeKind, VariableAttrs
from docrender.renderer.nodes import NodeLike


def iter_nodes(node: NodeLike) -> Iterator[Node]:
    """Yield *node* and all its descendants depth-first, in document order.

    Yields nothing when *node* is not a node at all.
    """
    root = Node.try_coerce(node)
    stack = [root] if root is not None else []
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def extract_clause_ids(node: NodeLike) -> list[str]:
    """Return the clause id of every clause reference, duplicates included."""
    ids: list[str] = []
    for current in iter_nodes(node):
        if current.type == NodeKind.CLAUSE_BLOCK.value:
            clause_id = ClauseBlockAttrs.from_attrs(current.attrs).clause_id
            if clause_id:
                ids.append(clause_id)
    return ids


def unique_clause_ids(node: NodeLike) -> list[str]:
    """Like :func:`extract_clause_ids` but keeping only first occurrences."""
    return list(dict.fromkeys(extract_clause_ids(node)))


def extract_variable_keys(node: NodeLike) -> list[str]:
    """Return the distinct variable keys referenced in *node*, in order."""
    keys: dict[str, None] = {}
    for current in iter_nodes(node):
        if current.type == NodeKind.VARIABLE.value:
            key = VariableAttrs.from_attrs(current.attrs).key
            if key and key.strip():
                keys.setdefault(key, None)
    return list(keys)
