"""Classify bundled modules and locate their package manifests."""

from __future__ import annotations

import posixpath
import re
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from .errors import FileSystemError

BUILD_RELATIVE_MARKER = "./"
DEPENDENCY_PREFIX = "./node_modules/"
LOADER_SEPARATOR = "!"
MANIFEST_FILENAME = "package.json"
# "./node_modules/<pkg>" is the shortest path that can hold a manifest.
MIN_MANIFEST_DEPTH = 3

_MODULE_ROOT_RE = re.compile(r"^(?:[./]*node_modules/(?:@[^/]+/)?[^/]+|\.)/")


def normalize_prefix(prefix: str) -> str:
    """Expand a bare package prefix to its ``./node_modules`` location."""
    if prefix.startswith("."):
        return prefix
    return BUILD_RELATIVE_MARKER + posixpath.join("node_modules", prefix)


def module_id(path: str) -> str:
    """Return ``path`` relative to the root of the package that owns it."""
    return _MODULE_ROOT_RE.sub("", path, count=1)


class ModuleClassifier:
    """Filters bundler module names down to source files and finds their package."""

    def __init__(
        self,
        root: Path,
        *,
        extensions: Iterable[str],
        exclude: Iterable[str] = (),
        src_replace: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.root = Path(root)
        self.extensions = tuple(extensions)
        self.exclude: List[str] = [normalize_prefix(prefix) for prefix in exclude]
        self.src_replace: Dict[str, str] = dict(src_replace or {})

    def classify(self, name: str) -> Optional[str]:
        """Return the bare source path for a module name, or None to skip it."""
        if not name.endswith(self.extensions):
            return None
        if not name.startswith(BUILD_RELATIVE_MARKER):
            return None
        if any(name.startswith(prefix) for prefix in self.exclude):
            return None

        separator = name.rfind(LOADER_SEPARATOR)
        path = name[separator + 1 :] if separator != -1 else name
        return self.src_replace.get(path, path)

    def is_dependency(self, path: str) -> bool:
        return path.startswith(DEPENDENCY_PREFIX)

    def find_manifest(self, path: str) -> Path:
        """Return the absolute path of the manifest owning ``path``."""
        if not self.is_dependency(path):
            return (self.root / MANIFEST_FILENAME).resolve()

        segments = path.split("/")
        for depth in range(MIN_MANIFEST_DEPTH, len(segments)):
            candidate = self.root.joinpath(*segments[:depth], MANIFEST_FILENAME)
            if candidate.is_file():
                return candidate.resolve()
        raise FileSystemError(f"No {MANIFEST_FILENAME} found for module {path}")


__all__ = [
    "ModuleClassifier",
    "MANIFEST_FILENAME",
    "module_id",
    "normalize_prefix",
]
