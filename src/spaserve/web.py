"""Serve a built SPA and its static assets via CherryPy."""
from __future__ import annotations

import dataclasses
import logging
import pathlib
from typing import Any

import cherrypy

from spaserve.sources import AssetSource, DirectoryTree, EmbeddedTree

DEFAULT_ENTRY = "index.html"
JS_CONTENT_TYPE = "application/javascript"


def normalize_base_path(path: str) -> str:
    """Return `path` as an absolute prefix ending in `/` (or exactly `/`)."""
    if not path.startswith("/"):
        path = "/" + path
    if not path.endswith("/") and path != "/":
        path = path + "/"
    return path


class SPADispatcher(cherrypy.dispatch.Dispatcher):
    """Send every request to one handler instead of walking object attributes."""

    def __init__(self, handler: Any) -> None:
        super().__init__()
        self.handler = handler

    def find_handler(self, path):
        request = cherrypy.serving.request
        app_config = request.app.config

        config = cherrypy.config.copy()
        # "/" first, then any deeper sections the host configured for this path
        for section in sorted(app_config, key=len):
            if section == "/" or path == section or path.startswith(section.rstrip("/") + "/"):
                config.update(app_config[section])

        request.config = config
        request.is_index = False
        return self.handler, []


@dataclasses.dataclass(frozen=True)
class SPAServer:
    """Serves an SPA bundle from an asset source.

    Behavior:
    - Requests outside `base_path` get a 404.
    - If the requested file exists in the source, serve it.
    - Otherwise, serve the entry document (SPA fallback for deep links).
    """

    source: AssetSource
    base_path: str = "/"
    entry_path: str = DEFAULT_ENTRY

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_path", normalize_base_path(self.base_path))

    @classmethod
    def from_embedded(cls, tree: EmbeddedTree, sub_path: str) -> SPAServer:
        """Create a handler rooted at `sub_path` inside an embedded tree."""
        return cls(tree.sub(sub_path))

    @classmethod
    def from_dir(cls, dir_path: str | pathlib.Path) -> SPAServer:
        """Create a handler over a directory; the directory is checked per request."""
        return cls(DirectoryTree(dir_path))

    def with_base_path(self, path: str) -> SPAServer:
        return dataclasses.replace(self, base_path=path)

    def with_entry_file(self, entry_path: str) -> SPAServer:
        return dataclasses.replace(self, entry_path=entry_path)

    def app_config(self) -> dict[str, dict[str, Any]]:
        """Per-app CherryPy config; content types must go out exactly as set."""
        return {
            "/": {
                "request.dispatch": SPADispatcher(self.default),
                "request.show_tracebacks": False,
                "tools.encode.on": False,
                "tools.trailing_slash.on": False,
            }
        }

    def application(self, script_name: str = "") -> cherrypy.Application:
        """Wrap the handler in a CherryPy application (a WSGI callable)."""
        return cherrypy.Application(self, script_name, config=self.app_config())

    def mount(self, script_name: str = "") -> cherrypy.Application:
        """Mount the handler on the global CherryPy tree."""
        return cherrypy.tree.mount(self, script_name, config=self.app_config())

    @cherrypy.expose
    def default(self, *vpath, **params):
        """Entry point for every request routed to this handler."""
        request = cherrypy.serving.request
        return self.handle(request.script_name + request.path_info)

    def handle(self, path: str) -> Any:
        """Serve a literal asset for `path`, the entry document, or a 404."""
        if not path.startswith(self.base_path):
            raise cherrypy.NotFound()

        rel = path[len(self.base_path):].removeprefix("/")
        if not rel:
            return self._serve_entry()

        if self.source.exists(rel):
            content_type = JS_CONTENT_TYPE if rel.endswith(".js") else None
            return self.source.serve(rel, content_type=content_type)

        return self._serve_entry()

    def _serve_entry(self) -> bytes:
        response = cherrypy.serving.response
        response.headers["Content-Type"] = "text/html"
        try:
            return self.source.read(self.entry_path)
        except OSError:
            cherrypy.log(
                f"Cannot read entry document {self.entry_path!r}",
                context="SPA",
                severity=logging.ERROR,
                traceback=True,
            )
            response.status = 500
            response.headers["Content-Type"] = "text/plain"
            return b"Internal Server Error"
