"""Copy license and source files into the output tree exactly once."""

from __future__ import annotations

import posixpath
import re
import shutil
from pathlib import Path
from typing import Dict, Optional

from ..errors import FileSystemError
from ..logging import get_logger

DEFAULT_TEXT_EXTENSION = ".txt"

_DEPENDENCY_ROOT_RE = re.compile(r"^([./]*node_modules|\.)/")


class CopiedFileCache:
    """Maps source files to the public URL of their published copy."""

    def __init__(self, root: Path, output_path: Path, public_path: str) -> None:
        self._root = Path(root).resolve()
        self._output_path = Path(output_path)
        self._public_path = public_path
        self._copied: Dict[str, str] = {}
        self.copy_count = 0
        self.logger = get_logger("stores.file_cache")

    def copy_file(self, source: str, ext: str = "") -> Optional[str]:
        """Publish ``source`` and return its public URL.

        Returns None for remote resources and files missing on disk.
        """
        if "://" in source:
            return None
        absolute = self._absolute(source)
        cached = self._copied.get(str(absolute))
        if cached is not None:
            return cached
        if not absolute.is_file():
            self.logger.debug("Skipping missing file %s", source)
            return None

        destination = self._destination(absolute) + ext
        target = self._output_path.joinpath(*destination.split("/"))
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(absolute, target)
        except OSError as exc:
            raise FileSystemError(f"Unable to copy {absolute} to {target}: {exc}") from exc
        self.copy_count += 1

        public_url = posixpath.join(self._public_path, destination)
        self._copied[str(absolute)] = public_url
        return public_url

    def copy_text_file(self, source: str) -> Optional[str]:
        """Like :meth:`copy_file`, adding ``.txt`` to extension-less names."""
        ext = "" if Path(source).suffix else DEFAULT_TEXT_EXTENSION
        return self.copy_file(source, ext)

    def __contains__(self, source: object) -> bool:
        if not isinstance(source, str):
            return False
        return str(self._absolute(source)) in self._copied

    def __len__(self) -> int:
        return len(self._copied)

    def _absolute(self, source: str) -> Path:
        path = Path(source)
        if not path.is_absolute():
            path = self._root / path
        return path.resolve()

    def _destination(self, absolute: Path) -> str:
        try:
            relative = "./" + absolute.relative_to(self._root).as_posix()
        except ValueError:
            # Files outside the project keep only their name.
            return absolute.name
        return _DEPENDENCY_ROOT_RE.sub("", relative, count=1)


__all__ = ["CopiedFileCache", "DEFAULT_TEXT_EXTENSION"]
