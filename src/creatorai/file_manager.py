import logging
from typing import Any, Callable, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, SkipValidation

from src.creatorai import file_tree
from src.creatorai.config import DEFAULT_NODE_NAMES, PROTECTED_ROOT_FILES

logger = logging.getLogger(__name__)

NodeType = Literal["file", "folder"]


class TreeEditResult(BaseModel):
    """Outcome of a guarded edit. A rejected edit leaves `tree` untouched."""
    # not copied: same list object as the input
    tree: SkipValidation[List[Dict[str, Any]]]
    applied: bool
    message: Optional[str] = None


def is_protected(path: List[str]) -> bool:
    return len(path) == 1 and path[0].lower() in PROTECTED_ROOT_FILES


def unique_default_name(existing: List[str], node_type: NodeType) -> str:
    stem, suffix = DEFAULT_NODE_NAMES[node_type]
    name = f"{stem}{suffix}"
    counter = 1
    while name in existing:
        name = f"{stem}-{counter}{suffix}"
        counter += 1
    return name


def _log_rejection(message: str) -> None:
    logger.warning("--- Tree edit rejected: %s ---", message)


def create_node(tree: file_tree.Tree, parent_path: List[str],
                node_type: NodeType) -> Tuple[file_tree.Tree, Optional[List[str]]]:
    """
    Adds an empty file or folder under `parent_path` with a name that is free
    among its siblings. Returns the new tree and the path of the created node,
    or the unchanged tree and None when the parent is not a folder.
    """
    if parent_path:
        parent = file_tree.find_node(tree, parent_path)
        if parent is None or parent.get("type") != "folder":
            return tree, None

    existing = [child["name"] for child in file_tree.list_children(tree, parent_path)]
    name = unique_default_name(existing, node_type)
    if node_type == "file":
        new_node = {"name": name, "type": "file", "content": ""}
    else:
        new_node = {"name": name, "type": "folder", "children": []}

    return file_tree.add_node(tree, parent_path, new_node), [*parent_path, name]


def rename(tree: file_tree.Tree, path: List[str], new_name: str,
           notify: Callable[[str], None] = _log_rejection) -> TreeEditResult:
    new_name = (new_name or "").strip()
    if not path or not new_name:
        message = "A name is required."
        notify(message)
        return TreeEditResult(tree=tree, applied=False, message=message)

    if is_protected(path):
        message = "README.md and SETUP.md cannot be renamed."
        notify(message)
        return TreeEditResult(tree=tree, applied=False, message=message)

    siblings = file_tree.list_children(tree, path[:-1])
    if any(child["name"] == new_name for child in siblings):
        message = f'A file or folder named "{new_name}" already exists.'
        notify(message)
        return TreeEditResult(tree=tree, applied=False, message=message)

    return TreeEditResult(tree=file_tree.rename_node(tree, path, new_name), applied=True)


def delete(tree: file_tree.Tree, path: List[str],
           notify: Callable[[str], None] = _log_rejection) -> TreeEditResult:
    if is_protected(path):
        message = "README.md and SETUP.md cannot be deleted."
        notify(message)
        return TreeEditResult(tree=tree, applied=False, message=message)
    return TreeEditResult(tree=file_tree.delete_node(tree, path), applied=True)


class ProjectFileManager:
    """
    Owns one capstone project and swaps its file tree after each accepted edit.
    Readers always see either the previous or the next tree, never a partial one.
    """

    def __init__(self, project: Optional[Dict[str, Any]] = None,
                 notify: Callable[[str], None] = _log_rejection):
        self.project = project
        self.notify = notify

    @property
    def tree(self) -> file_tree.Tree:
        if not self.project:
            return []
        return self.project.get("fileStructure") or []

    def update_project(self, project: Optional[Dict[str, Any]]) -> None:
        self.project = project

    def update_project_part(self, patch: Dict[str, Any]) -> None:
        if self.project is not None:
            self.project = {**self.project, **patch}

    def _swap(self, tree: file_tree.Tree) -> None:
        self.project = {**self.project, "fileStructure": tree}

    def create(self, parent_path: List[str], node_type: NodeType) -> Optional[List[str]]:
        if not self.project or self.project.get("fileStructure") is None:
            return None
        tree, path = create_node(self.tree, parent_path, node_type)
        if path is not None:
            self._swap(tree)
        return path

    def rename(self, path: List[str], new_name: str) -> bool:
        if not self.project or self.project.get("fileStructure") is None:
            return False
        result = rename(self.tree, path, new_name, self.notify)
        if result.applied:
            self._swap(result.tree)
        return result.applied

    def delete(self, path: List[str]) -> bool:
        if not self.project or self.project.get("fileStructure") is None:
            return False
        result = delete(self.tree, path, self.notify)
        if result.applied:
            self._swap(result.tree)
        return result.applied
