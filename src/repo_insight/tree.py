"""Remote file tree: node types and the depth-limited walker."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Union

from .github import GitHubClient
from .logging import get_logger

MAX_DEPTH = 3  # root listing is depth 0, so at most 4 listings along a path
SKIP_DIRS = {"node_modules"}

logger = get_logger(__name__)


@dataclass(frozen=True)
class FileNode:
    name: str
    path: str
    size: int = 0

    @property
    def kind(self) -> str:
        return "file"

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "path": self.path, "size": self.size, "type": self.kind}


@dataclass(frozen=True)
class DirNode:
    name: str
    path: str
    children: tuple["Node", ...] = ()

    @property
    def kind(self) -> str:
        return "directory"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "type": self.kind,
            "children": [c.to_dict() for c in self.children],
        }


Node = Union[FileNode, DirNode]


def iter_preorder(nodes: Iterable[Node]) -> Iterator[Node]:
    """Yield every node once: a node, then its children left to right."""
    for node in nodes:
        yield node
        if isinstance(node, DirNode):
            yield from iter_preorder(node.children)


def iter_files(nodes: Iterable[Node]) -> Iterator[FileNode]:
    for node in iter_preorder(nodes):
        if isinstance(node, FileNode):
            yield node


def should_descend(name: str) -> bool:
    """Hidden and dependency-cache directories are never walked."""
    return not name.startswith(".") and name not in SKIP_DIRS


@dataclass
class TreeWalker:
    """Walks a repository through the contents API, one listing per directory.

    A failed listing empties that subtree instead of raising. Failed paths
    are kept in ``failed_paths`` so callers can tell an empty directory
    from an unreadable one.
    """

    client: GitHubClient
    max_depth: int = MAX_DEPTH
    failed_paths: list[str] = field(default_factory=list)

    def walk(self, owner: str, repo: str, path: str = "", depth: int = 0) -> tuple[Node, ...]:
        if depth > self.max_depth:
            return ()

        listing = self.client.list_directory(owner, repo, path)
        if listing.failed:
            logger.warning("Could not list /%s: %s", path, listing.error)
            self.failed_paths.append(path)
            return ()

        nodes: list[Node] = []
        for entry in listing.entries:
            name = str(entry.get("name", ""))
            entry_path = str(entry.get("path", name))
            entry_type = entry.get("type")

            if entry_type == "file":
                nodes.append(FileNode(name=name, path=entry_path, size=_size(entry)))
            elif entry_type == "dir" and should_descend(name):
                children = self.walk(owner, repo, entry_path, depth + 1)
                nodes.append(DirNode(name=name, path=entry_path, children=children))
            # symlinks, submodules, hidden dirs and node_modules are dropped

        return tuple(nodes)


def _size(entry: dict[str, Any]) -> int:
    try:
        return max(int(entry.get("size") or 0), 0)
    except (TypeError, ValueError):
        return 0
