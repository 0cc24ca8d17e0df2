"""Tests for licenselist.licenses."""

from __future__ import annotations

import logging

import pytest

from licenselist.database import LicenseDatabase
from licenselist.errors import LicenseExpressionWarning, UnknownLicenseWarning
from licenselist.licenses import LicenseResolver
from licenselist.models import LicenseLabel


@pytest.fixture
def resolver(database: LicenseDatabase) -> LicenseResolver:
    return LicenseResolver(database)


def test_single_identifier_uses_canonical_url(resolver: LicenseResolver) -> None:
    labels = resolver.resolve("MIT", "module a")

    assert labels == [LicenseLabel(name="MIT", url="http://www.jclark.com/xml/copying.txt")]
    assert resolver.diagnostics == []


def test_identifier_without_canonical_url_uses_database_reference(
    resolver: LicenseResolver,
) -> None:
    labels = resolver.resolve("Zlib", "module z")

    assert labels == [LicenseLabel(name="Zlib", url="https://spdx.org/licenses/Zlib.html")]


def test_or_expression_lists_every_license(resolver: LicenseResolver) -> None:
    labels = resolver.resolve("MIT OR Apache-2.0", "module a")

    assert [label.name for label in labels] == ["MIT", "Apache-2.0"]
    assert resolver.diagnostics == []


def test_and_expression_is_flattened_with_a_warning(resolver: LicenseResolver) -> None:
    labels = resolver.resolve("(MIT OR ISC) AND Zlib", "module a")

    assert {label.name for label in labels} == {"MIT", "ISC", "Zlib"}
    assert len(resolver.diagnostics) == 1
    warning = resolver.diagnostics[0]
    assert isinstance(warning, LicenseExpressionWarning)
    assert "AND" in warning.message
    assert warning.context == "module a"


def test_lowercase_and_is_flattened_with_a_warning(resolver: LicenseResolver) -> None:
    labels = resolver.resolve("mit and apache-2.0", "module a")

    assert [label.name for label in labels] == ["MIT", "Apache-2.0"]
    assert len(resolver.diagnostics) == 1
    assert isinstance(resolver.diagnostics[0], LicenseExpressionWarning)
    assert "AND" in resolver.diagnostics[0].message


def test_or_later_suffix_reports_base_identifier(resolver: LicenseResolver) -> None:
    labels = resolver.resolve("GPL-2.0+", "module g")

    assert labels == [LicenseLabel(name="GPL-2.0", url="http://www.gnu.org/licenses/gpl-2.0.html")]


def test_informal_strings_are_corrected(resolver: LicenseResolver) -> None:
    labels = resolver.resolve(" bsd ", "module b")

    assert labels == [
        LicenseLabel(name="BSD-3-Clause", url="http://opensource.org/licenses/BSD-3-Clause")
    ]


@pytest.mark.parametrize("raw", ["UNLICENSED", "SEE LICENSE IN LICENSE.md", "wibble wobble"])
def test_unparseable_expression_degrades_to_raw_label(resolver: LicenseResolver, raw: str) -> None:
    labels = resolver.resolve(raw, "module x")

    assert labels == [LicenseLabel(name=raw, url="")]
    kinds = [type(warning) for warning in resolver.diagnostics]
    assert kinds.count(LicenseExpressionWarning) == 2
    assert kinds.count(UnknownLicenseWarning) == 2
    assert raw in resolver.diagnostics[0].message


def test_unknown_identifier_label_has_empty_url(resolver: LicenseResolver) -> None:
    label = resolver.to_label("Not-A-License", "file ./vendor/")

    assert label == LicenseLabel(name="Not-A-License", url="")
    assert isinstance(resolver.diagnostics[0], UnknownLicenseWarning)
    assert resolver.diagnostics[0].context == "file ./vendor/"


def test_non_free_license_is_logged(
    resolver: LicenseResolver, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="licenselist"):
        labels = resolver.resolve("JSON", "module json")

    assert labels == [LicenseLabel(name="JSON", url="https://spdx.org/licenses/JSON.html")]
    assert "not marked as FSF-libre" in caplog.text
    assert resolver.diagnostics == []


@pytest.mark.parametrize(
    "license_id", ["LGPL-2.0", "Apache-1.0", "Artistic-1.0-Perl", "BSD-2-Clause-Patent"]
)
def test_listed_identifiers_resolve_to_themselves(
    resolver: LicenseResolver, license_id: str
) -> None:
    labels = resolver.resolve(license_id, "module l")

    assert labels == [
        LicenseLabel(name=license_id, url=f"https://spdx.org/licenses/{license_id}.html")
    ]
    assert resolver.diagnostics == []


def test_or_expression_with_less_common_identifiers(resolver: LicenseResolver) -> None:
    labels = resolver.resolve("AFL-2.1 OR BSD-3-Clause", "module a")

    assert [label.name for label in labels] == ["AFL-2.1", "BSD-3-Clause"]
    assert resolver.diagnostics == []


def test_unknown_versioned_identifier_is_not_rewritten(resolver: LicenseResolver) -> None:
    labels = resolver.resolve("Apache-9.9", "module a")

    assert labels == [LicenseLabel(name="Apache-9.9", url="")]
    kinds = [type(warning) for warning in resolver.diagnostics]
    assert kinds.count(LicenseExpressionWarning) == 2
    assert kinds.count(UnknownLicenseWarning) == 2


def test_deeply_nested_expression_degrades_to_raw_label(resolver: LicenseResolver) -> None:
    raw = "(" * 400 + "MIT" + ")" * 400

    labels = resolver.resolve(raw, "module deep")

    assert labels == [LicenseLabel(name=raw, url="")]
    assert isinstance(resolver.diagnostics[0], LicenseExpressionWarning)
