"""
Directory tree aggregation over document paths.

Nodes live in a flat arena (a list) and refer to each other by index, so the
structure is built without recursive objects and rendered with an explicit
stack.
"""

from typing import Iterable, List, Optional, Tuple

from docsref.utils.paths import normalize_directory
from .cancellation import CancellationToken
from .models import DocumentTree, TreeNode

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE = "│   "
SPACE = "    "


def build_tree(paths: Iterable[str], root_directory: Optional[str] = None,
               max_depth: int = 3,
               cancel_token: Optional[CancellationToken] = None) -> DocumentTree:
    """
    Aggregate paths into a tree of at most ``max_depth`` levels

    Args:
        paths: Document paths ('/' separated)
        root_directory: Only paths under this directory are counted
        max_depth: Number of path segments kept per path
        cancel_token: Checked once per path

    Returns:
        DocumentTree whose nodes count every path passing through them

    Raises:
        QueryCancelledError: If the token is cancelled mid-build
    """
    prefix = normalize_directory(root_directory) if root_directory else None
    nodes: List[TreeNode] = [TreeNode(name="")]
    total = 0

    for path in paths:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        if prefix is not None and not path.startswith(prefix):
            continue

        total += 1
        parts = path.split('/')
        current = 0
        for depth, part in enumerate(parts[:max_depth]):
            child = nodes[current].children.get(part)
            if child is None:
                child = len(nodes)
                nodes.append(TreeNode(name=part, parent=current))
                nodes[current].children[part] = child
            node = nodes[child]
            node.file_count += 1
            if depth == len(parts) - 1:
                node.is_file = True
            current = child

    return DocumentTree(
        nodes=nodes,
        total_files=total,
        root_directory=root_directory,
        max_depth=max_depth,
    )


def node_label(node: TreeNode) -> str:
    if node.is_file and not node.children:
        return node.name
    return f"{node.name}/ ({node.file_count} files)"


def render_tree_lines(tree: DocumentTree) -> List[str]:
    """Depth-first, alphabetical rendering of the tree body (no header or footer)"""
    lines: List[str] = []
    # (node index, indentation prefix, is last sibling)
    stack: List[Tuple[int, str, bool]] = []

    top = tree.sorted_children(0)
    for position, (index, _) in reversed(list(enumerate(top))):
        stack.append((index, "", position == len(top) - 1))

    while stack:
        index, prefix, is_last = stack.pop()
        node = tree.nodes[index]
        lines.append(f"{prefix}{LAST_BRANCH if is_last else BRANCH}{node_label(node)}")

        children = tree.sorted_children(index)
        child_prefix = prefix + (SPACE if is_last else PIPE)
        for position, (child_index, _) in reversed(list(enumerate(children))):
            stack.append((child_index, child_prefix, position == len(children) - 1))

    return lines
