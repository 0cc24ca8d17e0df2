"""Helper utilities for constructing temporary bundled projects in tests."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union


class ProjectBuilder:
    """Writes a throwaway project tree and matching bundler statistics."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "project"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the project."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def package(
        self,
        name: str,
        manifest: Union[Mapping[str, Any], str, None] = None,
        files: Optional[Mapping[str, str]] = None,
    ) -> Path:
        """Create ``node_modules/<name>`` with a package.json and extra files."""
        package_dir = self.root / "node_modules" / name
        package_dir.mkdir(parents=True, exist_ok=True)
        if manifest is None:
            manifest = {"name": name, "version": "1.0.0", "license": "MIT"}
        text = manifest if isinstance(manifest, str) else json.dumps(manifest)
        (package_dir / "package.json").write_text(text, encoding="utf-8")
        for relative, content in (files or {}).items():
            path = package_dir / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return package_dir

    def stats(
        self,
        modules: Sequence[Tuple[str, List[Any]]],
        chunks: Optional[Mapping[str, Any]] = None,
        *,
        public_path: str = "",
    ) -> Dict[str, Any]:
        """Return a webpack-style stats payload for ``(module name, chunk ids)`` pairs."""
        chunks = dict(chunks or {"main": "main.js"})
        assets = []
        for position, (chunk_name, asset) in enumerate(chunks.items()):
            name = asset if isinstance(asset, str) else asset[0]
            assets.append({"name": name, "chunks": [position], "chunkNames": [chunk_name]})
        return {
            "outputPath": str(self.root / "build"),
            "publicPath": public_path,
            "assets": assets,
            "assetsByChunkName": chunks,
            "modules": [
                {"name": name, "size": 10, "chunks": list(chunk_ids)} for name, chunk_ids in modules
            ],
        }

    def path(self) -> Path:
        """Return the project root path."""
        return self.root


__all__ = ["ProjectBuilder"]
