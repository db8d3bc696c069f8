"""Local HTTP server for browsing a saved repo-insight report.

Serves the viewer HTML template, which fetches the report from
``/api/report``.
"""

from __future__ import annotations

import json
import threading
import webbrowser
from functools import partial
from http.server import HTTPServer, SimpleHTTPRequestHandler
from pathlib import Path
from typing import Any

from .logging import get_logger

VIEWER_TEMPLATE = Path(__file__).parent / "templates" / "viewer.html"
REPORT_FILENAME = "repo-insight-report.json"

logger = get_logger(__name__)


def load_report(path: Path) -> dict[str, Any]:
    """Load a report written by ``repo-insight analyze --output``.

    ``path`` is either the report file itself or a directory holding
    ``repo-insight-report.json``.
    """
    report_file = path / REPORT_FILENAME if path.is_dir() else path
    if not report_file.is_file():
        raise FileNotFoundError(
            f"No {REPORT_FILENAME} found at {path}. "
            "Run 'repo-insight analyze <url> --output <dir>' first."
        )
    with open(report_file, encoding="utf-8") as f:
        data = json.load(f)
    return {
        "snapshot": data.get("snapshot") or {},
        "analysis": data.get("analysis"),
        "model_used": data.get("model_used", ""),
    }


class ReportHandler(SimpleHTTPRequestHandler):
    """HTTP handler that serves the viewer and the report data."""

    def __init__(self, *args, report: dict, viewer_html: str, **kwargs):
        self._report = report
        self._viewer_html = viewer_html
        super().__init__(*args, **kwargs)

    def do_GET(self):
        if self.path in ("/", "/index.html"):
            self._send(self._viewer_html.encode("utf-8"), "text/html; charset=utf-8")
        elif self.path == "/api/report":
            self._send(json.dumps(self._report).encode("utf-8"), "application/json")
        else:
            self.send_error(404)

    def _send(self, content: bytes, content_type: str) -> None:
        self.send_response(200)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(content)))
        self.end_headers()
        self.wfile.write(content)

    def log_message(self, format, *args):
        logger.debug("viewer: " + format, *args)


def start_server(
    report_path: Path,
    port: int = 8420,
    open_browser: bool = False,
) -> None:
    """Start the local viewer server.

    Args:
        report_path: Report file or directory containing one
        port: Port to serve on
        open_browser: Whether to auto-open in browser
    """
    report = load_report(report_path)
    viewer_html = VIEWER_TEMPLATE.read_text(encoding="utf-8")

    handler = partial(ReportHandler, report=report, viewer_html=viewer_html)
    HTTPServer.allow_reuse_address = True
    server = HTTPServer(("127.0.0.1", port), handler)

    url = f"http://localhost:{port}"

    if open_browser:
        threading.Timer(0.5, lambda: webbrowser.open(url)).start()

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
