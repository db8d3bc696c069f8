"""File classification heuristics.

Maps a file name/path to coarse categories (component, page) and to the
technologies its name suggests. Loose by design: a false positive only
nudges a count, it never fails an analysis.
"""

from __future__ import annotations

import re

COMPONENT_EXTENSIONS = (".tsx", ".jsx", ".vue", ".svelte")

COMPONENT_PATH_PATTERNS = [
    re.compile(r"/components?/", re.IGNORECASE),
    re.compile(r"/ui/", re.IGNORECASE),
    re.compile(r"/widgets?/", re.IGNORECASE),
    re.compile(r"/shared/", re.IGNORECASE),
]

PAGE_PATH_PATTERNS = [
    re.compile(r"/pages?/", re.IGNORECASE),
    re.compile(r"/routes?/", re.IGNORECASE),
    re.compile(r"/views?/", re.IGNORECASE),
    re.compile(r"/screens?/", re.IGNORECASE),
    re.compile(r"^pages?/", re.IGNORECASE),
    # app router convention (Next.js app/ directory)
    re.compile(r"app/.*\.(tsx|jsx|js|ts)$", re.IGNORECASE),
]

PAGE_NAME_MARKERS = ("page", "route")

# (marker in lowercased file name, technology)
TECHNOLOGY_MARKERS: list[tuple[str, str]] = [
    ("package.json", "Node.js"),
    ("next.config", "Next.js"),
    ("nuxt.config", "Nuxt.js"),
    ("vue.config", "Vue.js"),
    ("angular.json", "Angular"),
    ("svelte.config", "Svelte"),
    ("vite.config", "Vite"),
    ("webpack.config", "Webpack"),
    ("tailwind.config", "Tailwind CSS"),
    ("postcss.config", "PostCSS"),
    ("tsconfig.json", "TypeScript"),
    ("jest.config", "Jest"),
    ("cypress.config", "Cypress"),
    ("playwright.config", "Playwright"),
    ("docker", "Docker"),
    ("docker-compose", "Docker Compose"),
    (".env", "Environment Variables"),
    ("prisma", "Prisma"),
    ("supabase", "Supabase"),
    ("firebase", "Firebase"),
    ("eslint", "ESLint"),
    ("prettier", "Prettier"),
    ("husky", "Husky"),
    ("lint-staged", "Lint Staged"),
]

# (marker in lowercased file path, technology)
TECHNOLOGY_PATH_MARKERS: list[tuple[str, str]] = [
    ("graphql", "GraphQL"),
]


def is_component(file_name: str, file_path: str) -> bool:
    """UI component: component extension AND a component-ish directory."""
    return file_name.endswith(COMPONENT_EXTENSIONS) and any(
        p.search(file_path) for p in COMPONENT_PATH_PATTERNS
    )


def is_page(file_name: str, file_path: str) -> bool:
    """Page or route: routing directory, app router file, or name hint."""
    if any(p.search(file_path) for p in PAGE_PATH_PATTERNS):
        return True
    lower = file_name.lower()
    return any(marker in lower for marker in PAGE_NAME_MARKERS)


def technologies_in_order(file_name: str, file_path: str) -> list[str]:
    """Technologies suggested by a file, in table order, without duplicates."""
    name = file_name.lower()
    path = file_path.lower()
    found: list[str] = []
    for marker, tech in TECHNOLOGY_MARKERS:
        if marker in name and tech not in found:
            found.append(tech)
    for marker, tech in TECHNOLOGY_PATH_MARKERS:
        if marker in path and tech not in found:
            found.append(tech)
    return found


def detect_technologies(file_name: str, file_path: str) -> set[str]:
    return set(technologies_in_order(file_name, file_path))
