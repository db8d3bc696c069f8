"""Repository snapshot builder - Layer 1. No model needed.

Fetches metadata and languages, walks the file tree through the GitHub
contents API, counts components/pages, detects technologies and pulls a
handful of key files as context for the model.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

from .classifier import is_component, is_page, technologies_in_order
from .errors import InvalidUrlError, RepoInsightError, UpstreamError
from .github import GitHubClient
from .logging import get_logger
from .tree import FileNode, Node, TreeWalker, iter_files

MAX_SAMPLES = 5
SAMPLE_TARGETS = (
    "package.json",
    "README.md",
    "tsconfig.json",
    "next.config.js",
    "vite.config.ts",
)

REPO_URL_RE = re.compile(r"github\.com/([^/\s]+)/([^/\s?#]+)")

ProgressCallback = Callable[[str, int, int], None]

logger = get_logger(__name__)


@dataclass(frozen=True)
class RepositoryInfo:
    """Repository metadata as reported by GitHub."""

    name: str
    full_name: str = ""
    description: str = ""
    html_url: str = ""
    stargazers_count: int = 0
    watchers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    language: str = ""
    default_branch: str = ""
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "RepositoryInfo":
        def text(key: str) -> str:
            value = data.get(key)
            return str(value) if value is not None else ""

        def count(key: str) -> int:
            try:
                return int(data.get(key) or 0)
            except (TypeError, ValueError):
                return 0

        return cls(
            name=text("name"),
            full_name=text("full_name"),
            description=text("description"),
            html_url=text("html_url"),
            stargazers_count=count("stargazers_count"),
            watchers_count=count("watchers_count"),
            forks_count=count("forks_count"),
            open_issues_count=count("open_issues_count"),
            language=text("language"),
            default_branch=text("default_branch"),
            created_at=text("created_at"),
            updated_at=text("updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return dict(self.__dict__)


@dataclass(frozen=True)
class ProjectStats:
    total_files: int = 0
    components: int = 0
    pages: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "totalFiles": self.total_files,
            "components": self.components,
            "pages": self.pages,
        }


@dataclass(frozen=True)
class SampleFile:
    path: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "content": self.content}


@dataclass(frozen=True)
class RepositorySnapshot:
    """Everything known about a repository before the model sees it."""

    owner: str
    repo: str
    repository: RepositoryInfo
    stats: ProjectStats
    languages: tuple[str, ...] = ()
    technologies: tuple[str, ...] = ()
    file_structure: tuple[Node, ...] = ()
    sample_files: tuple[SampleFile, ...] = ()
    # Directories whose listing failed; their subtrees are empty
    failed_paths: tuple[str, ...] = field(default=(), compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "owner": self.owner,
            "repo": self.repo,
            "repository": self.repository.to_dict(),
            "stats": self.stats.to_dict(),
            "languages": list(self.languages),
            "technologies": list(self.technologies),
            "fileStructure": [n.to_dict() for n in self.file_structure],
            "sampleFiles": [s.to_dict() for s in self.sample_files],
            "failedPaths": list(self.failed_paths),
        }


def parse_repo_url(url: str) -> tuple[str, str]:
    """Extract (owner, repo) from a GitHub URL, dropping a trailing .git."""
    match = REPO_URL_RE.search(url.strip())
    if not match:
        raise InvalidUrlError(f"Invalid GitHub repository URL: {url!r}")
    owner = match.group(1)
    repo = re.sub(r"\.git$", "", match.group(2))
    if not repo:
        raise InvalidUrlError(f"Invalid GitHub repository URL: {url!r}")
    return owner, repo


def compute_stats(tree: Iterable[Node]) -> ProjectStats:
    total = components = pages = 0
    for node in iter_files(tree):
        total += 1
        if is_component(node.name, node.path):
            components += 1
        if is_page(node.name, node.path):
            pages += 1
    return ProjectStats(total_files=total, components=components, pages=pages)


def compute_technologies(tree: Iterable[Node], declared_languages: Iterable[str]) -> list[str]:
    """Declared languages first, then technologies inferred from file names."""
    # dict keeps insertion order and collapses duplicates
    technologies: dict[str, None] = dict.fromkeys(declared_languages)
    for node in iter_files(tree):
        for tech in technologies_in_order(node.name, node.path):
            technologies.setdefault(tech, None)
    return list(technologies)


def is_sample_candidate(node: FileNode) -> bool:
    return any(target in node.name for target in SAMPLE_TARGETS)


def collect_samples(
    tree: Iterable[Node],
    client: GitHubClient,
    owner: str,
    repo: str,
    limit: int = MAX_SAMPLES,
) -> list[SampleFile]:
    """Fetch the first ``limit`` readable key files, in pre-order."""
    samples: list[SampleFile] = []
    if limit <= 0:
        return samples
    for node in iter_files(tree):
        if not is_sample_candidate(node):
            continue
        content = client.get_file_content(owner, repo, node.path)
        if content is None:
            continue
        samples.append(SampleFile(path=node.path, content=content))
        if len(samples) >= limit:
            break
    return samples


def build_snapshot(
    repo_url: str,
    client: Optional[GitHubClient] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> RepositorySnapshot:
    """Run the full heuristic pass over a GitHub repository."""
    owner, repo = parse_repo_url(repo_url)

    own_client = client is None
    if client is None:
        client = GitHubClient()
    try:
        return _build(client, owner, repo, progress_callback)
    except RepoInsightError:
        raise
    except Exception as e:
        raise UpstreamError(f"Failed to analyze repository: {e}") from e
    finally:
        if own_client:
            client.close()


def _build(
    client: GitHubClient,
    owner: str,
    repo: str,
    progress_callback: Optional[ProgressCallback],
) -> RepositorySnapshot:
    steps = 4

    def report(status: str, step: int) -> None:
        if progress_callback:
            progress_callback(status, step, steps)

    report("Fetching repository metadata...", 1)
    repository = RepositoryInfo.from_api(client.get_repository(owner, repo))
    languages = client.get_languages(owner, repo)

    report("Walking file tree...", 2)
    walker = TreeWalker(client)
    tree = walker.walk(owner, repo)
    logger.debug(
        "Walked %s/%s: %d top-level entries, %d failed listings",
        owner, repo, len(tree), len(walker.failed_paths),
    )

    report("Classifying files...", 3)
    stats = compute_stats(tree)
    technologies = compute_technologies(tree, languages)

    report("Fetching sample files...", 4)
    samples = collect_samples(tree, client, owner, repo)

    return RepositorySnapshot(
        owner=owner,
        repo=repo,
        repository=repository,
        stats=stats,
        languages=tuple(languages),
        technologies=tuple(technologies),
        file_structure=tree,
        sample_files=tuple(samples),
        failed_paths=tuple(walker.failed_paths),
    )
