"""Serve single-page application bundles with CherryPy."""
from spaserve.sources import AssetSource, ConfigurationError, DirectoryTree, EmbeddedTree
from spaserve.web import SPAServer, normalize_base_path

__all__ = [
    "AssetSource",
    "ConfigurationError",
    "DirectoryTree",
    "EmbeddedTree",
    "SPAServer",
    "normalize_base_path",
]
