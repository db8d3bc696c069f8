"""Tests for the GitHub REST client."""

import base64
from unittest.mock import MagicMock, patch

import httpx
import pytest

from repo_insight.errors import NotFoundError, UpstreamError
from repo_insight.github import GITHUB_API_URL, GitHubClient, decode_content


def _response(status_code=200, payload=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload
    return resp


class TestGetRepository:
    @patch("httpx.Client.get")
    def test_success(self, mock_get):
        mock_get.return_value = _response(payload={"name": "widgets"})
        client = GitHubClient()
        assert client.get_repository("acme", "widgets") == {"name": "widgets"}
        mock_get.assert_called_once_with(f"{GITHUB_API_URL}/repos/acme/widgets")

    @patch("httpx.Client.get")
    def test_not_found(self, mock_get):
        mock_get.return_value = _response(404)
        with pytest.raises(NotFoundError, match="acme/widgets"):
            GitHubClient().get_repository("acme", "widgets")

    @patch("httpx.Client.get")
    def test_other_status(self, mock_get):
        mock_get.return_value = _response(403, text="API rate limit exceeded")
        with pytest.raises(UpstreamError, match="403"):
            GitHubClient().get_repository("acme", "widgets")

    @patch("httpx.Client.get")
    def test_network_error(self, mock_get):
        mock_get.side_effect = httpx.ConnectError("connection refused")
        with pytest.raises(UpstreamError, match="Cannot reach GitHub"):
            GitHubClient().get_repository("acme", "widgets")


class TestGetLanguages:
    @patch("httpx.Client.get")
    def test_keys_in_order(self, mock_get):
        mock_get.return_value = _response(payload={"TypeScript": 9000, "CSS": 120, "HTML": 40})
        assert GitHubClient().get_languages("acme", "widgets") == ["TypeScript", "CSS", "HTML"]

    @patch("httpx.Client.get")
    def test_failure_is_empty(self, mock_get):
        mock_get.return_value = _response(500)
        assert GitHubClient().get_languages("acme", "widgets") == []

    @patch("httpx.Client.get")
    def test_timeout_is_empty(self, mock_get):
        mock_get.side_effect = httpx.TimeoutException("timed out")
        assert GitHubClient().get_languages("acme", "widgets") == []


class TestListDirectory:
    @patch("httpx.Client.get")
    def test_listing(self, mock_get):
        entries = [
            {"name": "src", "path": "src", "type": "dir", "size": 0},
            {"name": "README.md", "path": "README.md", "type": "file", "size": 12},
        ]
        mock_get.return_value = _response(payload=entries)
        result = GitHubClient().list_directory("acme", "widgets", "")
        assert not result.failed
        assert list(result.entries) == entries
        mock_get.assert_called_once_with(f"{GITHUB_API_URL}/repos/acme/widgets/contents/")

    @patch("httpx.Client.get")
    def test_empty_directory(self, mock_get):
        mock_get.return_value = _response(payload=[])
        result = GitHubClient().list_directory("acme", "widgets", "empty")
        assert result.entries == ()
        assert not result.failed

    @patch("httpx.Client.get")
    def test_status_failure(self, mock_get):
        mock_get.return_value = _response(403)
        result = GitHubClient().list_directory("acme", "widgets", "src")
        assert result.failed
        assert result.error == "HTTP 403"

    @patch("httpx.Client.get")
    def test_network_failure(self, mock_get):
        mock_get.side_effect = httpx.ConnectError("connection refused")
        result = GitHubClient().list_directory("acme", "widgets", "src")
        assert result.failed

    @patch("httpx.Client.get")
    def test_file_payload_is_failure(self, mock_get):
        mock_get.return_value = _response(payload={"type": "file", "content": ""})
        assert GitHubClient().list_directory("acme", "widgets", "README.md").failed

    @patch("httpx.Client.get")
    def test_invalid_json(self, mock_get):
        mock_get.return_value = _response(payload=ValueError("bad json"))
        assert GitHubClient().list_directory("acme", "widgets", "src").failed


class TestGetFileContent:
    @patch("httpx.Client.get")
    def test_decodes_base64(self, mock_get):
        encoded = base64.b64encode(b'{"name": "widgets"}\n').decode()
        # the API wraps content at 60 characters
        wrapped = "\n".join(encoded[i : i + 60] for i in range(0, len(encoded), 60))
        mock_get.return_value = _response(payload={"content": wrapped, "encoding": "base64"})
        content = GitHubClient().get_file_content("acme", "widgets", "package.json")
        assert content == '{"name": "widgets"}\n'

    @patch("httpx.Client.get")
    def test_missing_content(self, mock_get):
        mock_get.return_value = _response(payload={"type": "file"})
        assert GitHubClient().get_file_content("acme", "widgets", "big.bin") is None

    @patch("httpx.Client.get")
    def test_failure(self, mock_get):
        mock_get.return_value = _response(404)
        assert GitHubClient().get_file_content("acme", "widgets", "README.md") is None


class TestDecodeContent:
    def test_utf8(self):
        assert decode_content(base64.b64encode("héllo".encode()).decode()) == "héllo"

    def test_invalid(self):
        assert decode_content("***") is None

    def test_binary_is_replaced(self):
        assert decode_content(base64.b64encode(b"\xff\xfe").decode()) == "\ufffd\ufffd"


def test_context_manager_closes():
    with patch("httpx.Client.close") as mock_close:
        with GitHubClient() as client:
            assert client.base_url == GITHUB_API_URL
        mock_close.assert_called_once()
