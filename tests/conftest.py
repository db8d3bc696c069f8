"""Shared fixtures: an in-memory stand-in for the GitHub contents API."""

from __future__ import annotations

from typing import Any

import pytest

from repo_insight.errors import NotFoundError
from repo_insight.github import ListingResult


class FakeHost:
    """Serves listings and file contents from a nested dict.

    Directories are dicts, files are ints (size) or strings (content).
    Paths listed in ``failing`` return failed listings / unreadable files.
    """

    def __init__(
        self,
        tree: dict[str, Any],
        metadata: dict[str, Any] | None = None,
        languages: list[str] | None = None,
        failing: set[str] | None = None,
    ):
        self.tree = tree
        self.metadata = metadata
        self.languages = languages or []
        self.failing = failing or set()
        self.listed: list[str] = []
        self.fetched: list[str] = []
        self.calls = 0

    def _lookup(self, path: str) -> Any:
        node: Any = self.tree
        for part in filter(None, path.split("/")):
            node = node[part]
        return node

    def get_repository(self, owner: str, repo: str) -> dict[str, Any]:
        self.calls += 1
        if self.metadata is None:
            raise NotFoundError(f"Repository {owner}/{repo} not found or not accessible")
        return self.metadata

    def get_languages(self, owner: str, repo: str) -> list[str]:
        self.calls += 1
        return list(self.languages)

    def list_directory(self, owner: str, repo: str, path: str = "") -> ListingResult:
        self.calls += 1
        self.listed.append(path)
        if path in self.failing:
            return ListingResult.failure("HTTP 403")
        node = self._lookup(path)
        entries = []
        for name, child in node.items():
            child_path = f"{path}/{name}" if path else name
            if isinstance(child, dict):
                entries.append({"name": name, "path": child_path, "type": "dir", "size": 0})
            else:
                size = child if isinstance(child, int) else len(child)
                entries.append({"name": name, "path": child_path, "type": "file", "size": size})
        return ListingResult(entries=tuple(entries))

    def get_file_content(self, owner: str, repo: str, path: str) -> str | None:
        self.calls += 1
        self.fetched.append(path)
        if path in self.failing:
            return None
        node = self._lookup(path)
        return node if isinstance(node, str) else f"contents of {path}"


@pytest.fixture
def repo_metadata():
    return {
        "name": "widgets",
        "full_name": "acme/widgets",
        "description": "Reusable UI widgets",
        "html_url": "https://github.com/acme/widgets",
        "stargazers_count": 42,
        "watchers_count": 42,
        "forks_count": 7,
        "language": "TypeScript",
        "created_at": "2023-01-02T03:04:05Z",
        "updated_at": "2024-05-06T07:08:09Z",
    }


@pytest.fixture
def web_tree():
    """A small Next.js-style repository."""
    return {
        "README.md": "# Widgets\nReusable UI widgets\n",
        "package.json": '{"name": "widgets"}',
        "tailwind.config.js": 120,
        "tsconfig.json": "{}",
        ".github": {"workflows": {"ci.yml": 50}},
        "node_modules": {"react": {"index.js": 10}},
        "src": {
            "components": {"Button.tsx": 300, "Button.test.ts": 100},
            "lib": {"api.ts": 200},
        },
        "pages": {"index.tsx": 400},
    }


@pytest.fixture
def make_host(repo_metadata):
    def factory(tree, **kwargs):
        kwargs.setdefault("metadata", repo_metadata)
        return FakeHost(tree, **kwargs)

    return factory
