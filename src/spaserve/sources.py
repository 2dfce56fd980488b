"""Asset sources the SPA handler reads from: embedded snapshots and live directories."""
from __future__ import annotations

import abc
import io
import mimetypes
import pathlib
from importlib import resources
from types import MappingProxyType
from typing import Any, Iterator, Mapping

import cherrypy
from cherrypy.lib import static


class ConfigurationError(ValueError):
    """Raised when a handler cannot be built from the given configuration."""


def _valid_path(name: str) -> bool:
    """Return True for slash-separated relative paths without empty, `.` or `..` parts."""
    if name == ".":
        return True
    if not name or name.startswith("/") or name.endswith("/"):
        return False
    return all(part not in {"", ".", ".."} for part in name.split("/"))


def _guess_type(path: str) -> str:
    content_type, _ = mimetypes.guess_type(path)
    return content_type or "application/octet-stream"


class AssetSource(abc.ABC):
    """A tree of named byte blobs addressed by relative slash-separated paths."""

    @abc.abstractmethod
    def exists(self, path: str) -> bool:
        """Return True if `path` names a readable file. Never raises."""

    @abc.abstractmethod
    def read(self, path: str) -> bytes:
        """Return the full contents of `path`, raising OSError on failure."""

    @abc.abstractmethod
    def serve(self, path: str, content_type: str | None = None) -> Any:
        """Hand `path` to cherrypy's static file primitive and return the body."""


class EmbeddedTree(AssetSource):
    """Immutable in-process snapshot of files.

    - Built once (from package data, a directory, or a mapping) and never touched again.
    - Lookups are dictionary hits; nothing here performs I/O after construction.
    """

    def __init__(self, files: Mapping[str, bytes]) -> None:
        for name in files:
            if not _valid_path(name) or name == ".":
                raise ConfigurationError(f"invalid embedded path: {name!r}")
        self._files = MappingProxyType({name: bytes(data) for name, data in files.items()})
        self._dirs = frozenset(
            name.rsplit("/", depth)[0]
            for name in self._files
            for depth in range(1, name.count("/") + 1)
        )

    @classmethod
    def from_package(cls, anchor: str, path: str = "") -> EmbeddedTree:
        """Snapshot package data below `anchor` (optionally below `path` within it)."""
        root = resources.files(anchor)
        for part in filter(None, path.split("/")):
            root = root / part
        if not root.is_dir():
            raise ConfigurationError(f"package resource is not a directory: {anchor}/{path}")
        return cls(dict(_walk(root, "")))

    @classmethod
    def from_directory(cls, path: str | pathlib.Path) -> EmbeddedTree:
        """Snapshot every file under `path` as it is right now."""
        root = pathlib.Path(path)
        if not root.is_dir():
            raise ConfigurationError(f"directory not found: {root}")
        return cls(dict(_walk(root, "")))

    def __len__(self) -> int:
        return len(self._files)

    def names(self) -> list[str]:
        """Return every file path in the tree, sorted."""
        return sorted(self._files)

    def sub(self, path: str) -> EmbeddedTree:
        """Return the sub-tree rooted at directory `path`."""
        path = path.strip("/") or "."
        if not _valid_path(path):
            raise ConfigurationError(f"invalid sub-directory path: {path!r}")
        if path == ".":
            return self
        if path not in self._dirs:
            raise ConfigurationError(f"sub-directory not found in embedded tree: {path!r}")

        prefix = path + "/"
        return EmbeddedTree(
            {name[len(prefix):]: data for name, data in self._files.items() if name.startswith(prefix)}
        )

    def exists(self, path: str) -> bool:
        return _valid_path(path) and path in self._files

    def read(self, path: str) -> bytes:
        if not self.exists(path):
            raise FileNotFoundError(path)
        return self._files[path]

    def serve(self, path: str, content_type: str | None = None) -> Any:
        if not self.exists(path):
            raise cherrypy.NotFound()
        data = self._files[path]
        content_type = content_type or _guess_type(path)
        cherrypy.serving.response.headers["Content-Type"] = content_type
        # serve_fileobj can't fstat a BytesIO; hand the length over so ranges work
        return static._serve_fileobj(io.BytesIO(data), content_type, len(data))


def _walk(node: Any, prefix: str) -> Iterator[tuple[str, bytes]]:
    """Yield (relative path, bytes) for every file below a Path or Traversable."""
    for child in sorted(node.iterdir(), key=lambda c: c.name):
        if child.name == "__pycache__":
            continue
        name = f"{prefix}{child.name}"
        if child.is_dir():
            yield from _walk(child, name + "/")
        elif child.is_file():
            yield name, child.read_bytes()


class DirectoryTree(AssetSource):
    """Live view of an on-disk directory, re-read on every access."""

    def __init__(self, root: str | pathlib.Path) -> None:
        self.root = pathlib.Path(root)

    def _resolve(self, path: str) -> pathlib.Path | None:
        """Join `path` to the root; None if the result escapes the root."""
        try:
            root = self.root.resolve()
            candidate = (root / path).resolve()
        except (OSError, ValueError, RuntimeError):
            return None

        # Prevent path traversal
        if root not in candidate.parents and candidate != root:
            return None
        return candidate

    def exists(self, path: str) -> bool:
        candidate = self._resolve(path)
        if candidate is None:
            return False
        try:
            return candidate.is_file()
        except (OSError, ValueError):
            return False

    def read(self, path: str) -> bytes:
        candidate = self._resolve(path)
        if candidate is None:
            raise FileNotFoundError(path)
        return candidate.read_bytes()

    def serve(self, path: str, content_type: str | None = None) -> Any:
        candidate = self._resolve(path)
        if candidate is None:
            raise cherrypy.NotFound()
        return static.serve_file(str(candidate), content_type=content_type)
