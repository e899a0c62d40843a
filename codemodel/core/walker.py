"""
Generic traversal primitives over tree-sitter nodes.

Every scan in the extractor (call sites, type references, base lists) is a
call to :func:`walk` with a different visitor.
"""
from typing import Callable, Collection, Iterator, List, Optional

from tree_sitter import Node


Visitor = Callable[[Node], bool]


def walk(node: Optional[Node], visit: Visitor) -> None:
    """
    Walk a subtree depth-first in pre-order.

    If ``visit`` returns False for a node, its children are skipped and the
    traversal continues with the node's next sibling.

    Args:
        node: Root of the subtree, may be None
        visit: Callback invoked once per visited node
    """
    if node is None:
        return

    stack = [node]
    while stack:
        current = stack.pop()
        if not visit(current):
            continue
        # Reverse so the leftmost child is popped first
        stack.extend(reversed(current.children))


def iter_nodes(node: Optional[Node]) -> Iterator[Node]:
    """
    Yield every node of a subtree in the order :func:`walk` visits them.

    Args:
        node: Root of the subtree

    Yields:
        Each node in the tree
    """
    if node is None:
        return

    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def ancestors(node: Optional[Node]) -> Iterator[Node]:
    """Yield the strict ancestors of a node, nearest first."""
    if node is None:
        return
    parent = node.parent
    while parent is not None:
        yield parent
        parent = parent.parent


def find_nodes(root: Optional[Node], kinds: Collection[str], prune: Collection[str] = ()) -> List[Node]:
    """
    Collect all nodes of the given kinds under ``root``.

    Args:
        root: Subtree to search
        kinds: Node kinds to collect
        prune: Node kinds whose subtrees are not searched (the node itself
            is still collected when it matches ``kinds``)

    Returns:
        Matching nodes in pre-order
    """
    found: List[Node] = []

    def visit(node: Node) -> bool:
        if node.type in kinds:
            found.append(node)
        return node is root or node.type not in prune

    walk(root, visit)
    return found


def find_first(root: Optional[Node], kinds: Collection[str]) -> Optional[Node]:
    """Return the first node of one of ``kinds`` in pre-order, or None."""
    for node in iter_nodes(root):
        if node.type in kinds:
            return node
    return None


def child_of_type(node: Optional[Node], *kinds: str) -> Optional[Node]:
    """Return the first direct child whose kind is one of ``kinds``."""
    if node is None:
        return None
    for child in node.children:
        if child.type in kinds:
            return child
    return None


def node_text(node: Optional[Node], source: Optional[bytes]) -> str:
    """
    Extract the source text spanned by a node.

    An absent node, absent source or a byte range outside the source yields an
    empty string rather than an error.

    Args:
        node: Tree-sitter node
        source: Original source bytes

    Returns:
        Text content of the node
    """
    if node is None or source is None:
        return ""
    start, end = node.start_byte, node.end_byte
    if start < 0 or end > len(source) or start > end:
        return ""
    return source[start:end].decode("utf-8", errors="replace")


def node_line(node: Node) -> int:
    """1-indexed start line of a node."""
    return node.start_point[0] + 1


def node_end_line(node: Node) -> int:
    """1-indexed end line of a node."""
    return node.end_point[0] + 1


def node_location(node: Optional[Node], file_path: str = "") -> str:
    """Format ``file:line`` for a node."""
    if node is None:
        return ""
    return f"{file_path}:{node_line(node)}"
