"""Tests for the file classification heuristics."""

import pytest

from repo_insight.classifier import (
    TECHNOLOGY_MARKERS,
    detect_technologies,
    is_component,
    is_page,
    technologies_in_order,
)


class TestIsComponent:
    @pytest.mark.parametrize(
        "path",
        [
            "src/components/Button.tsx",
            "src/component/Card.jsx",
            "lib/ui/Modal.vue",
            "app/widgets/Clock.svelte",
            "packages/shared/Avatar.tsx",
            "src/Components/Nav.tsx",
        ],
    )
    def test_component_paths(self, path):
        assert is_component(path.rsplit("/", 1)[-1], path)

    def test_requires_component_extension(self):
        assert not is_component("Button.ts", "src/components/Button.ts")
        assert not is_component("styles.css", "src/components/styles.css")

    def test_requires_component_directory(self):
        assert not is_component("Button.tsx", "src/Button.tsx")
        # a leading segment has no slash before it
        assert not is_component("Button.tsx", "components/Button.tsx")


class TestIsPage:
    @pytest.mark.parametrize(
        "path",
        [
            "pages/index.tsx",
            "page/about.js",
            "src/pages/blog.tsx",
            "src/routes/users.ts",
            "src/views/Home.vue",
            "mobile/screens/Login.tsx",
            "app/dashboard/layout.tsx",
        ],
    )
    def test_page_paths(self, path):
        assert is_page(path.rsplit("/", 1)[-1], path)

    def test_name_markers(self):
        assert is_page("LandingPage.tsx", "src/LandingPage.tsx")
        assert is_page("router.ts", "src/router.ts")

    def test_not_a_page(self):
        assert not is_page("utils.ts", "src/lib/utils.ts")
        assert not is_page("app.css", "src/app.css")


class TestDetectTechnologies:
    def test_tailwind(self):
        assert detect_technologies("tailwind.config.js", "tailwind.config.js") == {"Tailwind CSS"}

    def test_case_insensitive(self):
        assert "Docker" in detect_technologies("Dockerfile", "Dockerfile")

    def test_compose_matches_both_docker_markers(self):
        assert detect_technologies("docker-compose.yml", "docker-compose.yml") == {
            "Docker",
            "Docker Compose",
        }

    def test_graphql_from_path(self):
        assert detect_technologies("schema.ts", "src/graphql/schema.ts") == {"GraphQL"}

    def test_no_match(self):
        assert detect_technologies("main.py", "src/main.py") == set()

    def test_order_follows_table(self):
        assert technologies_in_order("docker-compose.yml", "docker-compose.yml") == [
            "Docker",
            "Docker Compose",
        ]

    def test_table_size(self):
        assert len(TECHNOLOGY_MARKERS) >= 20

    def test_pure(self):
        args = ("next.config.js", "web/next.config.js")
        assert detect_technologies(*args) == detect_technologies(*args)
        assert is_page(*args) == is_page(*args)
        assert is_component(*args) == is_component(*args)
