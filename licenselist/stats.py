"""Build statistics ingestion and chunk lookup tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .logging import get_logger

SCRIPT_EXTENSION = ".js"

ChunkId = Union[int, str]

log = get_logger("stats")


@dataclass
class StatsAsset:
    """One emitted asset and the chunks it belongs to (index-aligned)."""

    name: str
    chunks: List[ChunkId] = field(default_factory=list)
    chunk_names: List[Optional[str]] = field(default_factory=list)


@dataclass
class StatsModule:
    """One module from the bundler's dependency graph."""

    name: str
    size: int = 0
    chunks: List[ChunkId] = field(default_factory=list)


@dataclass
class BuildStats:
    """The subset of bundler statistics the manifest generator reads."""

    output_path: str
    public_path: str = ""
    assets: List[StatsAsset] = field(default_factory=list)
    assets_by_chunk_name: Dict[str, Union[str, List[str]]] = field(default_factory=dict)
    modules: List[StatsModule] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "BuildStats":
        """Parse a webpack-style ``stats.json`` document."""
        assets = [
            StatsAsset(
                name=str(raw.get("name", "")),
                chunks=list(raw.get("chunks") or []),
                chunk_names=list(raw.get("chunkNames") or []),
            )
            for raw in payload.get("assets") or []
            if isinstance(raw, Mapping)
        ]
        by_chunk = payload.get("assetsByChunkName") or {}
        public_path = payload.get("publicPath")
        return cls(
            output_path=str(payload.get("outputPath") or ""),
            public_path=public_path if isinstance(public_path, str) else "",
            assets=assets,
            assets_by_chunk_name=dict(by_chunk) if isinstance(by_chunk, Mapping) else {},
            modules=list(_flatten_modules(payload.get("modules") or [], parent_chunks=[])),
        )


def _flatten_modules(raw_modules: Iterable[Any], parent_chunks: List[ChunkId]) -> Iterable[StatsModule]:
    # Concatenated modules list their members under "modules"; members
    # without their own chunk list belong to the parent's chunks.
    for raw in raw_modules:
        if not isinstance(raw, Mapping):
            continue
        chunks = list(raw.get("chunks") or []) or list(parent_chunks)
        name = raw.get("name")
        nested = raw.get("modules")
        if isinstance(nested, list) and nested:
            yield from _flatten_modules(nested, chunks)
        if isinstance(name, str):
            size = raw.get("size")
            yield StatsModule(
                name=name,
                size=size if isinstance(size, int) else 0,
                chunks=chunks,
            )


class ChunkIndex:
    """Maps chunk ids to the public script asset that carries them."""

    def __init__(self) -> None:
        self.id_to_name: Dict[ChunkId, Optional[str]] = {}
        self.name_to_asset: Dict[Union[str, int], str] = {}

    @classmethod
    def from_stats(cls, stats: BuildStats) -> "ChunkIndex":
        index = cls()
        for asset in stats.assets:
            if len(asset.chunks) != len(asset.chunk_names):
                log.warning(
                    "Asset %s lists %d chunk ids but %d chunk names; skipping its chunk mapping",
                    asset.name or "<unnamed>",
                    len(asset.chunks),
                    len(asset.chunk_names),
                )
                continue
            for chunk_id, chunk_name in zip(asset.chunks, asset.chunk_names):
                index.id_to_name[chunk_id] = chunk_name

        for position, (chunk_name, assets) in enumerate(stats.assets_by_chunk_name.items()):
            script = _first_script(assets)
            if script is not None:
                index.name_to_asset[chunk_name] = script
                index.name_to_asset[position] = script
        return index

    def asset_for_chunk(self, chunk_id: ChunkId) -> Optional[str]:
        """Return the script asset for ``chunk_id`` or None when unknown."""
        chunk_name = self.id_to_name.get(chunk_id)
        if chunk_name is not None and chunk_name in self.name_to_asset:
            return self.name_to_asset[chunk_name]
        if isinstance(chunk_id, int):
            return self.name_to_asset.get(chunk_id)
        if isinstance(chunk_id, str) and chunk_id.isdigit():
            return self.name_to_asset.get(int(chunk_id))
        return None


def _first_script(assets: Union[str, List[str], Any]) -> Optional[str]:
    candidates = [assets] if isinstance(assets, str) else assets
    if not isinstance(candidates, list):
        return None
    for candidate in candidates:
        if isinstance(candidate, str) and candidate.endswith(SCRIPT_EXTENSION):
            return candidate
    return None


__all__ = ["BuildStats", "ChunkIndex", "ChunkId", "StatsAsset", "StatsModule", "SCRIPT_EXTENSION"]
