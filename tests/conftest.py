from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from wsgiref.util import setup_testing_defaults

import pytest

from spaserve import EmbeddedTree, SPAServer

INDEX = b"<!doctype html><html><body><div id=\"app\"></div></body></html>"
BUNDLE = b"console.log('bundle');"
STYLES = b"body { margin: 0; }"


@dataclass
class Response:
    status: int
    headers: dict[str, str]
    body: bytes


def call(server: SPAServer, path: str, *, method: str = "GET", headers: dict[str, str] | None = None) -> Response:
    """Run one request through the handler's WSGI application."""
    environ: dict = {}
    setup_testing_defaults(environ)
    environ.update(
        {
            "REQUEST_METHOD": method,
            "PATH_INFO": path,
            "QUERY_STRING": "",
            "CONTENT_LENGTH": "0",
            "SERVER_PROTOCOL": "HTTP/1.1",
        }
    )
    for name, value in (headers or {}).items():
        environ["HTTP_" + name.upper().replace("-", "_")] = value

    captured: dict = {}

    def start_response(status, response_headers, exc_info=None):
        captured["status"] = status
        captured["headers"] = response_headers

    result = server.application()(environ, start_response)
    try:
        body = b"".join(result)
    finally:
        if hasattr(result, "close"):
            result.close()

    return Response(
        status=int(captured["status"].split()[0]),
        headers=dict(captured["headers"]),
        body=body,
    )


@pytest.fixture
def dist_dir(tmp_path: Path) -> Path:
    root = tmp_path / "dist"
    (root / "assets").mkdir(parents=True)
    (root / "index.html").write_bytes(INDEX)
    (root / "bundle.js").write_bytes(BUNDLE)
    (root / "assets" / "app.css").write_bytes(STYLES)
    return root


@pytest.fixture
def embedded_tree() -> EmbeddedTree:
    return EmbeddedTree(
        {
            "web/dist/index.html": INDEX,
            "web/dist/bundle.js": BUNDLE,
            "web/dist/assets/app.css": STYLES,
            "web/README.md": b"not served",
        }
    )


@pytest.fixture(params=["embedded", "directory"])
def server(request, dist_dir: Path, embedded_tree: EmbeddedTree) -> SPAServer:
    """The same bundle behind each kind of asset source."""
    if request.param == "embedded":
        return SPAServer.from_embedded(embedded_tree, "web/dist")
    return SPAServer.from_dir(dist_dir)
