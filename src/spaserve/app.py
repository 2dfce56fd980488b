"""CherryPy entrypoint.

- Serves a built SPA from a directory (SPA_DIR) or from package data (SPA_PACKAGE)
- The handler owns its base path; it is always mounted at the tree root
- Settings come from the environment / .env, command-line flags win
"""

from __future__ import annotations

import argparse
import sys

import cherrypy

from spaserve.config import Settings
from spaserve.sources import ConfigurationError, EmbeddedTree
from spaserve.web import SPAServer

_FLAG_FIELDS = {
    "dir": "spa_dir",
    "package": "spa_package",
    "subdir": "spa_subdir",
    "base_path": "spa_base_path",
    "entry": "spa_entry_file",
    "host": "app_host",
    "port": "app_port",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="spaserve", description="Serve a single-page app bundle.")
    parser.add_argument("--dir", help="Directory holding the built app (SPA_DIR).")
    parser.add_argument("--package", help="Serve package data from this package instead (SPA_PACKAGE).")
    parser.add_argument("--subdir", help="Sub-directory within --package (SPA_SUBDIR).")
    parser.add_argument("--base-path", help="URL prefix the app is mounted under (SPA_BASE_PATH).")
    parser.add_argument("--entry", help="Entry document served for unknown paths (SPA_ENTRY_FILE).")
    parser.add_argument("--host", help="Bind address (APP_HOST).")
    parser.add_argument("--port", type=int, help="Bind port (APP_PORT).")
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Read settings from the environment, then apply any flags that were given."""
    overrides = {
        field: getattr(args, flag)
        for flag, field in _FLAG_FIELDS.items()
        if getattr(args, flag, None) is not None
    }
    return Settings(**overrides)


def build_server(settings: Settings) -> SPAServer:
    """Create the SPA handler described by `settings`."""
    if settings.embedded:
        tree = EmbeddedTree.from_package(settings.spa_package.strip())
        server = SPAServer.from_embedded(tree, settings.spa_subdir)
    else:
        server = SPAServer.from_dir(settings.spa_dir)

    return server.with_base_path(settings.spa_base_path).with_entry_file(settings.spa_entry_file)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = load_settings(args)

    try:
        server = build_server(settings)
    except (ConfigurationError, ModuleNotFoundError) as exc:
        print(f"spaserve: {exc}", file=sys.stderr)
        return 1

    cherrypy.config.update({
        "server.socket_host": settings.app_host,
        "server.socket_port": settings.app_port,
        "engine.autoreload.on": settings.autoreload,
    })

    server.mount("")
    source = f"package {settings.spa_package}" if settings.embedded else settings.spa_dir
    print(f"[spaserve] serving {source} at http://{settings.app_host}:{settings.app_port}{server.base_path}", flush=True)

    cherrypy.engine.start()
    cherrypy.engine.block()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
