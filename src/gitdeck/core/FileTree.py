# gitdeck/core/FileTree.py
"""FileTree Module
===============
Builds the hierarchical tree shown by the Files panel from porcelain status
output, then flattens it depth-first into `FileLine` records.

The tree is rebuilt from scratch on every refresh. Only the flattened lines
survive; the cursor is carried across refreshes by path, not by node identity.
"""

import posixpath
from dataclasses import dataclass, field
from typing import Iterable, Union

from gitdeck.core.PanelState import FileLine


ROOT_NODE_NAME = "."
RENAME_DELIMITER = " -> "
DIR_EXPANDED_ICON = "▼ "
TREE_INDENT = "    "
PORCELAIN_PREFIX_LENGTH = 3


@dataclass
class TreeNode:
    name: str
    path: str = ""
    status_code: str = ""
    is_renamed: bool = False
    children: list["TreeNode"] = field(default_factory=list)

    @property
    def is_dir(self) -> bool:
        return bool(self.children)

    def find_child(self, name: str) -> "TreeNode | None":
        for child in self.children:
            if child.name == name:
                return child
        return None


def parse_status_line(line: str) -> Union[tuple[str, str, bool], None]:
    """Splits one porcelain line into ``(code, path, is_renamed)``.

    Lines shorter than the ``XY `` prefix are rejected with ``None``.
    """
    if len(line) < PORCELAIN_PREFIX_LENGTH:
        return None
    code = line[:2]
    path = line[PORCELAIN_PREFIX_LENGTH:].strip()
    if not path:
        return None
    is_renamed = False
    if code[0] in ("R", "C") or code[1] in ("R", "C"):
        if RENAME_DELIMITER in path:
            path = path.split(RENAME_DELIMITER, 1)[1].strip()
            is_renamed = True
    if len(path) >= 2 and path[0] == '"' and path[-1] == '"':
        path = path[1:-1]
    return code, path, is_renamed


def build_tree(status: Union[str, Iterable[str]]) -> TreeNode:
    """Builds a sorted, path-compacted tree from porcelain status output."""
    root = TreeNode(name=ROOT_NODE_NAME)
    lines = status.split("\n") if isinstance(status, str) else status

    for raw in lines:
        parsed = parse_status_line(raw.rstrip("\r"))
        if parsed is None:
            continue
        code, path, is_renamed = parsed

        node = root
        parts = [p for p in path.split("/") if p]
        for i, part in enumerate(parts):
            child = node.find_child(part)
            if child is None:
                child_path = part if node is root else posixpath.join(node.path, part)
                child = TreeNode(name=part, path=child_path)
                node.children.append(child)
            node = child
            if i == len(parts) - 1:
                node.status_code = code
                node.path = path
                node.is_renamed = is_renamed

    _sort(root)
    _compact(root, is_root=True)
    return root


def _sort(node: TreeNode) -> None:
    # sorted() is stable, so the key is a plain (is_file, name) tuple
    node.children.sort(key=lambda n: (not n.is_dir, n.name))
    for child in node.children:
        _sort(child)


def _compact(node: TreeNode, is_root: bool = False) -> None:
    for child in node.children:
        _compact(child)

    if is_root:
        return

    while len(node.children) == 1 and node.children[0].is_dir:
        child = node.children[0]
        node.name = posixpath.join(node.name, child.name)
        node.path = child.path
        node.children = child.children


def flatten(root: TreeNode) -> list[FileLine]:
    """Depth-first render of the tree. The root itself is not emitted."""
    return _flatten(root, "")


def _flatten(node: TreeNode, prefix: str) -> list[FileLine]:
    lines: list[FileLine] = []
    for child in node.children:
        if child.is_dir:
            lines.append(
                FileLine(
                    prefix=prefix,
                    status="",
                    name=DIR_EXPANDED_ICON + child.name,
                    path=child.path,
                    is_dir=True,
                )
            )
            lines.extend(_flatten(child, prefix + TREE_INDENT))
        else:
            lines.append(
                FileLine(
                    prefix=prefix,
                    status=child.status_code,
                    name=child.path if child.is_renamed else child.name,
                    path=child.path,
                    is_renamed=child.is_renamed,
                )
            )
    return lines


def build_file_lines(status: Union[str, Iterable[str]]) -> list[FileLine]:
    return flatten(build_tree(status))
