"""Tests for licenselist.database."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from licenselist.database import LICENSE_URLS, LicenseDatabase
from licenselist.errors import FileSystemError


def test_bundled_database_contains_common_licenses(database: LicenseDatabase) -> None:
    for license_id in ("MIT", "Apache-2.0", "BSD-3-Clause", "GPL-3.0-only", "ISC"):
        assert license_id in database

    info = database.get("MIT")
    assert info is not None
    assert info.is_fsf_libre is True
    assert info.is_osi_approved is True
    assert info.reference == LICENSE_URLS["MIT"]


def test_non_free_flag_is_read(database: LicenseDatabase) -> None:
    info = database.get("JSON")

    assert info is not None
    assert info.is_fsf_libre is False


def test_from_spdx_skips_malformed_rows() -> None:
    database = LicenseDatabase.from_spdx(
        {
            "licenses": [
                {"licenseId": "Custom-1.0", "name": "Custom", "reference": "https://example.com"},
                {"name": "missing id"},
                "not a row",
            ]
        }
    )

    assert list(database) == ["Custom-1.0"]
    info = database.get("Custom-1.0")
    assert info is not None
    assert info.reference == "https://example.com"
    assert info.is_fsf_libre is False
    assert database.get("MIT") is None


def test_canonical_urls_override_spdx_reference() -> None:
    database = LicenseDatabase.from_spdx(
        {"licenses": [{"licenseId": "ISC", "reference": "https://spdx.org/licenses/ISC.html"}]}
    )

    info = database.get("ISC")
    assert info is not None
    assert info.reference == LICENSE_URLS["ISC"]


def test_load_reads_custom_file(tmp_path: Path) -> None:
    path = tmp_path / "licenses.json"
    path.write_text(json.dumps({"licenses": [{"licenseId": "Foo", "isFsfLibre": True}]}))

    database = LicenseDatabase.load(path)

    assert len(database) == 1
    assert "Foo" in database


def test_load_rejects_invalid_files(tmp_path: Path) -> None:
    path = tmp_path / "licenses.json"
    path.write_text("{ nope")

    with pytest.raises(FileSystemError):
        LicenseDatabase.load(path)
    with pytest.raises(FileSystemError):
        LicenseDatabase.load(tmp_path / "missing.json")


def test_bundled_database_lists_every_spdx_identifier(database: LicenseDatabase) -> None:
    assert len(database) > 600
    for license_id in ("Apache-1.0", "Artistic-1.0-Perl", "BSD-2-Clause-Patent", "AFL-2.1"):
        assert license_id in database


@pytest.mark.parametrize("license_id", ["LGPL-2.0", "GPL-2.0+", "GPL-3.0"])
def test_bundled_database_keeps_deprecated_identifiers(
    database: LicenseDatabase, license_id: str
) -> None:
    info = database.get(license_id)

    assert info is not None
    assert info.is_deprecated is True
