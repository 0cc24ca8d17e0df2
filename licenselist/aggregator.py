"""Per-chunk package aggregation and manifest persistence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from .config import ProcessOutput
from .errors import FileSystemError
from .logging import get_logger
from .models import FileRef, ModuleRef, OutputManifest, PackageEntry, PackageFile, PackageRecord
from .modules import module_id
from .stores import CopiedFileCache
from .templates import resolve_string_template

SOURCE_FILE_ID = "SOURCE"


class OutputAggregator:
    """Groups bundled modules by chunk asset and package."""

    def __init__(
        self,
        files: CopiedFileCache,
        *,
        include_source_files: bool = False,
        source_templates: Optional[Mapping[str, List[str]]] = None,
    ) -> None:
        self.files = files
        self.include_source_files = include_source_files
        self.source_templates = dict(source_templates or {})
        self.output: OutputManifest = {}
        self._entries: Dict[Tuple[str, Optional[str]], PackageEntry] = {}
        self._identifiers: Dict[Tuple[str, Optional[str]], Set[str]] = {}
        self.logger = get_logger("aggregator")

    def add_module(self, path: str, chunk_asset: str, package: PackageRecord) -> None:
        """Record that the module at ``path`` ships in ``chunk_asset``."""
        key = (chunk_asset, package.name)
        entry = self._entries.get(key)
        if entry is None:
            entry = self._create_entry(package)
            self.output.setdefault(chunk_asset, []).append(entry)
            self._entries[key] = entry
            self._identifiers[key] = set()

        identifier = module_id(path)
        seen = self._identifiers[key]
        if identifier in seen:
            return
        seen.add(identifier)

        if entry.sources is not None:
            entry.sources.append(ModuleRef(name=identifier, url=self.files.copy_file(path)))
        else:
            entry.references().append(ModuleRef(name=identifier))

    def finalize(self) -> Dict[str, List[Dict[str, Any]]]:
        """Sort module lists by identifier and return plain manifest data."""
        payload: Dict[str, List[Dict[str, Any]]] = {}
        for chunk_asset, entries in self.output.items():
            for entry in entries:
                entry.references().sort(key=lambda ref: ref.name)
            payload[chunk_asset] = [entry.to_dict() for entry in entries]
        return payload

    def _create_entry(self, package: PackageRecord) -> PackageEntry:
        files = [ref for ref in (self._file_ref(item) for item in package.files or ()) if ref]

        templates = self.source_templates.get(package.name or "")
        if templates:
            values = {"name": package.name, "version": package.version}
            files.extend(
                FileRef(id=SOURCE_FILE_ID, url=resolve_string_template(template, values))
                for template in templates
            )

        use_sources = self.include_source_files and not templates
        return PackageEntry(
            name=package.name,
            url=package.homepage,
            version=package.version,
            licenses=list(package.licenses) if package.licenses is not None else None,
            files=files,
            repository=package.repository,
            sources=[] if use_sources else None,
            modules=None if use_sources else [],
        )

    def _file_ref(self, item: PackageFile) -> Optional[FileRef]:
        if isinstance(item, FileRef):
            return item
        url = self.files.copy_text_file(item)
        if url is None:
            self.logger.warning("Ancillary file %s could not be published", item)
            return None
        return FileRef(id=Path(item).stem.upper(), url=url)


class ManifestWriter:
    """Serializes the aggregated manifest to ``<output_path>/<filename>``."""

    def __init__(
        self,
        output_path: Path,
        filename: str,
        *,
        process_output: Optional[ProcessOutput] = None,
        pretty: bool = False,
    ) -> None:
        self.output_path = Path(output_path)
        self.filename = filename
        self.process_output = process_output
        self.pretty = pretty

    def render(self, payload: Dict[str, List[Dict[str, Any]]]) -> str:
        result: Any = payload
        if self.process_output is not None:
            result = self.process_output(payload)
        if isinstance(result, str):
            return result
        return json.dumps(result, indent=2 if self.pretty else None)

    def write(self, payload: Dict[str, List[Dict[str, Any]]]) -> Path:
        """Render ``payload`` and persist it, returning the written path."""
        text = self.render(payload)
        target = self.output_path / self.filename
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise FileSystemError(f"Unable to write manifest {target}: {exc}") from exc
        return target


__all__ = ["ManifestWriter", "OutputAggregator", "SOURCE_FILE_ID"]
