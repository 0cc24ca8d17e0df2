"""Tests for bundler statistics ingestion."""

from __future__ import annotations

import logging

import pytest

from licenselist.stats import BuildStats, ChunkIndex


def _stats(**overrides: object) -> BuildStats:
    payload = {
        "outputPath": "/tmp/build",
        "publicPath": "/static/",
        "assets": [
            {"name": "main.js", "chunks": [0], "chunkNames": ["main"]},
            {"name": "vendor.js", "chunks": [1], "chunkNames": ["vendor"]},
        ],
        "assetsByChunkName": {"main": ["main.css", "main.js"], "vendor": "vendor.js"},
        "modules": [],
    }
    payload.update(overrides)
    return BuildStats.from_dict(payload)


def test_from_dict_reads_camel_case_fields() -> None:
    stats = _stats(modules=[{"name": "./src/a.js", "size": 12, "chunks": [0]}])

    assert stats.output_path == "/tmp/build"
    assert stats.public_path == "/static/"
    assert stats.assets[0].chunk_names == ["main"]
    assert stats.modules[0].name == "./src/a.js"
    assert stats.modules[0].size == 12
    assert stats.modules[0].chunks == [0]


def test_missing_public_path_defaults_to_empty() -> None:
    stats = BuildStats.from_dict({"outputPath": "dist", "publicPath": None})

    assert stats.public_path == ""
    assert stats.modules == []


def test_concatenated_modules_are_flattened() -> None:
    stats = _stats(
        modules=[
            {
                "name": "./src/index.js + 2 modules",
                "chunks": [1],
                "modules": [
                    {"name": "./src/index.js"},
                    {"name": "./node_modules/a/index.js", "chunks": [0]},
                ],
            }
        ]
    )

    by_name = {module.name: module.chunks for module in stats.modules}
    assert by_name["./src/index.js"] == [1]
    assert by_name["./node_modules/a/index.js"] == [0]
    assert "./src/index.js + 2 modules" in by_name


def test_chunk_index_maps_ids_to_first_script_asset() -> None:
    index = ChunkIndex.from_stats(_stats())

    assert index.asset_for_chunk(0) == "main.js"
    assert index.asset_for_chunk(1) == "vendor.js"
    assert index.asset_for_chunk("1") == "vendor.js"
    assert index.asset_for_chunk(7) is None
    assert index.asset_for_chunk("unknown") is None


def test_chunk_index_falls_back_to_positional_alias() -> None:
    stats = _stats(assets=[])
    index = ChunkIndex.from_stats(stats)

    assert index.asset_for_chunk(0) == "main.js"
    assert index.asset_for_chunk(1) == "vendor.js"


def test_mismatched_asset_arrays_are_skipped(caplog: pytest.LogCaptureFixture) -> None:
    stats = _stats(
        assets=[{"name": "broken.js", "chunks": ["main", "vendor"], "chunkNames": ["main"]}]
    )

    with caplog.at_level(logging.WARNING, logger="licenselist"):
        index = ChunkIndex.from_stats(stats)

    assert "broken.js" in caplog.text
    assert index.id_to_name == {}
    assert index.asset_for_chunk("main") is None
