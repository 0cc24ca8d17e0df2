"""Package manifest parsing with per-run memoization."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import FileSystemError, ManifestParseError
from .licenses import LicenseResolver
from .logging import get_logger
from .models import LicenseLabel, PackageFile, PackageRecord

# Ancillary files published next to a package's license information.
TEXT_FILE_PREFIXES = ("license", "copying", "notice", "authors", "code_of_conduct")


def extract_license_expression(manifest: Mapping[str, Any]) -> Optional[str]:
    """Return the SPDX expression declared by a manifest, if any.

    Legacy manifests declare ``license: {type}`` or ``licenses: [{type}]``;
    multiple legacy entries are combined with OR.
    """
    if "license" in manifest:
        return _license_type(manifest["license"])
    if "licenses" in manifest:
        licenses = manifest["licenses"]
        if isinstance(licenses, list):
            types = [_license_type(entry) for entry in licenses]
            joined = " OR ".join(value for value in types if value)
            return joined or None
        return _license_type(licenses)
    return None


def _license_type(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        kind = value.get("type")
        return kind if isinstance(kind, str) else None
    return None


def _repository_url(value: Any) -> Optional[str]:
    if isinstance(value, Mapping):
        url = value.get("url")
        return url if isinstance(url, str) and url else None
    if isinstance(value, str) and value:
        return value
    return None


def _as_optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


class PackageResolver:
    """Reads ``package.json`` files once per run and normalizes their metadata."""

    def __init__(
        self,
        root: Path,
        licenses: LicenseResolver,
        *,
        include_license_files: bool = False,
    ) -> None:
        self.root = Path(root).resolve()
        self.licenses = licenses
        self.include_license_files = include_license_files
        self._cache: Dict[str, PackageRecord] = {}
        self._text_files: Dict[Tuple[str, str], Optional[str]] = {}
        self.logger = get_logger("packages")

    def resolve(self, manifest_path: Path) -> PackageRecord:
        """Return the normalized record for ``manifest_path``."""
        key = str(Path(manifest_path).resolve())
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        record = self._load(Path(key))
        self._cache[key] = record
        return record

    def __contains__(self, manifest_path: object) -> bool:
        if not isinstance(manifest_path, (str, Path)):
            return False
        return str(Path(manifest_path).resolve()) in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    def _load(self, path: Path) -> PackageRecord:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise FileSystemError(f"Unable to read package manifest {path}: {exc}") from exc
        try:
            manifest = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ManifestParseError(str(path), str(exc)) from exc
        if not isinstance(manifest, dict):
            raise ManifestParseError(str(path), "top-level value is not an object")

        name = _as_optional_str(manifest.get("name"))
        self.logger.debug("Parsing manifest %s (%s)", path, name or "unnamed")
        context = f"module {name}" if name else f"file {path}"

        expression = extract_license_expression(manifest)
        licenses: Tuple[LicenseLabel, ...] = ()
        if expression is None:
            self.logger.warning("Package manifest %s does not declare a license", path)
        else:
            licenses = tuple(self.licenses.resolve(expression, context))

        files: Optional[Tuple[PackageFile, ...]] = None
        if self.include_license_files:
            found = [self.find_text_file(path.parent, prefix) for prefix in TEXT_FILE_PREFIXES]
            files = tuple(item for item in found if item)

        return PackageRecord(
            name=name,
            version=_as_optional_str(manifest.get("version")),
            homepage=_as_optional_str(manifest.get("homepage")),
            repository=_repository_url(manifest.get("repository")),
            licenses=licenses,
            files=files,
        )

    def find_text_file(self, directory: Path, prefix: str) -> Optional[str]:
        """Return the first file in ``directory`` whose name starts with ``prefix``."""
        key = (prefix, str(directory))
        if key not in self._text_files:
            self._text_files[key] = self._scan_text_file(directory, prefix)
        return self._text_files[key]

    def _scan_text_file(self, directory: Path, prefix: str) -> Optional[str]:
        try:
            entries: List[Path] = sorted(directory.iterdir(), key=lambda entry: entry.name)
        except OSError as exc:
            raise FileSystemError(f"Unable to list {directory}: {exc}") from exc
        for entry in entries:
            if entry.name.lower().startswith(prefix) and entry.is_file():
                return self._relative(entry)
        return None

    def _relative(self, path: Path) -> str:
        try:
            return "./" + path.resolve().relative_to(self.root).as_posix()
        except ValueError:
            return str(path)


__all__ = ["PackageResolver", "TEXT_FILE_PREFIXES", "extract_license_expression"]
