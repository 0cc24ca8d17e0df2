"""Pipeline orchestration for one license manifest build."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Union

from .aggregator import ManifestWriter, OutputAggregator
from .config import LicenseListConfig, parse_source_templates
from .database import LicenseDatabase
from .errors import LicenseListWarning
from .licenses import LicenseResolver
from .logging import get_logger, summarize_diagnostics
from .models import PackageRecord
from .modules import ModuleClassifier
from .overrides import OverrideEngine
from .packages import PackageResolver
from .stats import BuildStats, ChunkId, ChunkIndex
from .stores import CopiedFileCache

SOURCES_DIR = "sources"

CompletionCallback = Callable[[Optional[BaseException]], None]


@dataclass
class RunContext:
    """State and caches scoped to a single build run."""

    stats: BuildStats
    chunks: ChunkIndex
    output_path: Path
    public_path: str
    licenses: LicenseResolver
    packages: PackageResolver
    files: CopiedFileCache
    aggregator: OutputAggregator
    missing_chunks: Set[ChunkId] = field(default_factory=set)


@dataclass
class RunResult:
    """Outcome of a manifest build."""

    manifest_path: Path
    payload: Dict[str, List[Dict[str, Any]]]
    modules_processed: int
    files_copied: int
    diagnostics: List[LicenseListWarning]


class Orchestrator:
    """Builds license manifests from bundler statistics.

    Configuration (overrides, source templates, the license database) is
    validated once here; every call to :meth:`run` gets a fresh
    :class:`RunContext` so no cache outlives its build.
    """

    def __init__(
        self,
        config: LicenseListConfig | None = None,
        *,
        database: LicenseDatabase | None = None,
    ) -> None:
        self.config = config or LicenseListConfig()
        self.logger = get_logger("orchestrator")
        self.database = database or LicenseDatabase.load(self.config.license_database)
        self.config_resolver = LicenseResolver(self.database)
        self.overrides = OverrideEngine.from_config(self.config.override, self.config_resolver)
        self.source_templates = parse_source_templates(self.config.sources)
        self.classifier = ModuleClassifier(
            self.config.root,
            extensions=self.config.source_extensions,
            exclude=self.config.exclude,
            src_replace=self.config.src_replace,
        )
        self.logger.debug(
            "Configured %d override rules and %d source templates",
            len(self.overrides),
            len(self.source_templates),
        )

    def run(
        self,
        stats: Union[BuildStats, Mapping[str, Any]],
        *,
        output_path: Path | None = None,
        on_complete: CompletionCallback | None = None,
    ) -> RunResult:
        """Build and persist the manifest; ``on_complete`` is invoked exactly once."""
        try:
            result = self._run(stats, output_path)
        except Exception as exc:
            if on_complete is not None:
                on_complete(exc)
            raise
        if on_complete is not None:
            on_complete(None)
        return result

    def create_context(
        self, stats: BuildStats, output_path: Path | None = None
    ) -> RunContext:
        """Return the per-run caches and lookup tables for ``stats``."""
        root = Path(self.config.root)
        if output_path is None:
            output_path = root / (stats.output_path or ".") / self.config.output_dir
        public_path = self.config.public_path or stats.public_path
        files = CopiedFileCache(
            root,
            Path(output_path) / SOURCES_DIR,
            posixpath.join(public_path, self.config.output_dir, SOURCES_DIR),
        )
        licenses = LicenseResolver(self.database)
        return RunContext(
            stats=stats,
            chunks=ChunkIndex.from_stats(stats),
            output_path=Path(output_path),
            public_path=public_path,
            licenses=licenses,
            packages=PackageResolver(
                root,
                licenses,
                include_license_files=self.config.include_license_files,
            ),
            files=files,
            aggregator=OutputAggregator(
                files,
                include_source_files=self.config.include_source_files,
                source_templates=self.source_templates,
            ),
        )

    def _run(
        self, stats: Union[BuildStats, Mapping[str, Any]], output_path: Path | None
    ) -> RunResult:
        if not isinstance(stats, BuildStats):
            stats = BuildStats.from_dict(stats)
        context = self.create_context(stats, output_path)
        self.logger.info("Building license manifest from %d modules", len(stats.modules))

        processed = 0
        for module in stats.modules:
            path = self.classifier.classify(module.name)
            if path is None:
                continue
            package = self.package_for(context, path)
            for chunk_id in module.chunks:
                asset = context.chunks.asset_for_chunk(chunk_id)
                if asset is None:
                    if chunk_id not in context.missing_chunks:
                        context.missing_chunks.add(chunk_id)
                        self.logger.warning("No script asset found for chunk %s", chunk_id)
                    continue
                context.aggregator.add_module(path, context.public_path + asset, package)
            processed += 1
        self.logger.debug(
            "Processed %d source modules from %d packages", processed, len(context.packages)
        )

        payload = context.aggregator.finalize()
        writer = ManifestWriter(
            context.output_path,
            self.config.filename,
            process_output=self.config.process_output,
            pretty=self.config.pretty,
        )
        manifest_path = writer.write(payload)
        self.logger.info("License manifest written to %s", manifest_path)
        diagnostics = list(context.licenses.diagnostics)
        summarize_diagnostics(self.logger, diagnostics)
        return RunResult(
            manifest_path=manifest_path,
            payload=payload,
            modules_processed=processed,
            files_copied=context.files.copy_count,
            diagnostics=diagnostics,
        )

    def package_for(self, context: RunContext, path: str) -> PackageRecord:
        """Resolve the package owning ``path`` with overrides applied."""
        manifest = self.classifier.find_manifest(path)
        record = context.packages.resolve(manifest)
        return self.overrides.apply(path, record)


__all__ = ["Orchestrator", "RunContext", "RunResult"]
