"""
Pure structural operations over a project file tree.

A tree is a list of nodes shaped like the persisted JSON:
``{"name": str, "type": "file", "content": str}`` or
``{"name": str, "type": "folder", "children": [...]}``.
A node is identified by its path, the list of names from the root.

Every function returns a new list and never modifies the nodes it receives;
untouched subtrees are shared with the input. Paths that do not resolve are a
silent "no match", because edits are often issued against UI state that has
already changed.
"""
from typing import Any, Dict, List, Optional, Sequence

FileNode = Dict[str, Any]
Tree = List[FileNode]
Path = Sequence[str]


def _is_folder(node: FileNode) -> bool:
    return node.get("type") == "folder" and node.get("children") is not None


def _with_children(node: FileNode, children: Tree) -> FileNode:
    return {**node, "children": children}


def add_node(tree: Tree, parent_path: Path, new_node: FileNode) -> Tree:
    """Appends `new_node` to the folder at `parent_path`; duplicate names are ignored."""
    if not parent_path:
        if any(n.get("name") == new_node.get("name") for n in tree):
            return tree
        return [*tree, new_node]

    current, rest = parent_path[0], parent_path[1:]
    return [
        _with_children(node, add_node(node["children"], rest, new_node))
        if node.get("name") == current and _is_folder(node) else node
        for node in tree
    ]


def rename_node(tree: Tree, path: Path, new_name: str) -> Tree:
    """Renames the node at `path`. Sibling collisions are the caller's problem."""
    if not path:
        return tree
    if len(path) == 1:
        return [{**node, "name": new_name} if node.get("name") == path[0] else node for node in tree]

    current, rest = path[0], path[1:]
    return [
        _with_children(node, rename_node(node["children"], rest, new_name))
        if node.get("name") == current and _is_folder(node) else node
        for node in tree
    ]


def delete_node(tree: Tree, path: Path) -> Tree:
    if not path:
        return tree
    if len(path) == 1:
        return [node for node in tree if node.get("name") != path[0]]

    current, rest = path[0], path[1:]
    return [
        _with_children(node, delete_node(node["children"], rest))
        if node.get("name") == current and _is_folder(node) else node
        for node in tree
    ]


def list_children(tree: Tree, path: Path) -> Tree:
    """Children of the folder at `path`, or an empty list when it is not a folder."""
    level = tree
    for part in path:
        node = next((n for n in level if n.get("name") == part), None)
        if node is None or not _is_folder(node):
            return []
        level = node["children"]
    return list(level)


def list_file_paths(tree: Tree, prefix: Optional[List[str]] = None) -> List[List[str]]:
    """Every file path, depth-first in child order. This is the generation order."""
    prefix = prefix or []
    paths: List[List[str]] = []
    for node in tree:
        node_path = [*prefix, node.get("name")]
        if node.get("type") == "file":
            paths.append(node_path)
        elif _is_folder(node):
            paths.extend(list_file_paths(node["children"], node_path))
    return paths


def find_node(tree: Tree, path: Path) -> Optional[FileNode]:
    if not path:
        return None
    parent = list_children(tree, path[:-1]) if len(path) > 1 else tree
    return next((n for n in parent if n.get("name") == path[-1]), None)


def update_file_content(tree: Tree, path: Path, content: str) -> Tree:
    """Replaces the content of the file at `path`; anything else is a no-op."""
    if not path:
        return tree

    current, rest = path[0], path[1:]
    updated = []
    for node in tree:
        if node.get("name") == current:
            if not rest and node.get("type") == "file":
                node = {**node, "content": content}
            elif rest and _is_folder(node):
                node = _with_children(node, update_file_content(node["children"], rest, content))
        updated.append(node)
    return updated


def rename_pdf_to_md(tree: Tree) -> Tree:
    """
    Planned .pdf deliverables cannot be generated as text, they become markdown files.
    When a sibling already has the markdown name, a counter is appended (report-1.md).
    """
    taken = {node.get("name") for node in tree}
    renamed = []
    for node in tree:
        name = node.get("name", "")
        if node.get("type") == "file" and name.lower().endswith(".pdf"):
            stem = name[: name.rfind(".")]
            md_name = f"{stem}.md"
            counter = 1
            while md_name in taken:
                md_name = f"{stem}-{counter}.md"
                counter += 1
            taken.add(md_name)
            node = {**node, "name": md_name}
        elif _is_folder(node):
            node = _with_children(node, rename_pdf_to_md(node["children"]))
        renamed.append(node)
    return renamed


def join_path(path: Path) -> str:
    return "/".join(path)
