"""Tests for the SPDX expression parser."""

from __future__ import annotations

import pytest

from licenselist.spdx import Binary, ExpressionSyntaxError, Leaf, iter_leaves, parse
from licenselist.spdx.expression import MAX_NESTING, is_license_ref, tokenize

KNOWN = {"MIT", "ISC", "Zlib", "Apache-2.0", "GPL-2.0", "GPL-3.0-only"}


def test_parse_single_identifier() -> None:
    assert parse("MIT", KNOWN) == Leaf("MIT")


def test_and_binds_tighter_than_or() -> None:
    tree = parse("MIT OR Apache-2.0 AND ISC", KNOWN)

    assert tree == Binary("OR", Leaf("MIT"), Binary("AND", Leaf("Apache-2.0"), Leaf("ISC")))


def test_parentheses_group_sub_expressions() -> None:
    tree = parse("(MIT OR ISC) AND Zlib", KNOWN)

    assert tree == Binary("AND", Binary("OR", Leaf("MIT"), Leaf("ISC")), Leaf("Zlib"))


def test_plus_and_exception_are_attached_to_the_leaf() -> None:
    assert parse("GPL-2.0+", KNOWN) == Leaf("GPL-2.0", plus=True)
    assert parse("GPL-2.0 WITH Classpath-exception-2.0", KNOWN) == Leaf(
        "GPL-2.0", exception="Classpath-exception-2.0"
    )


def test_license_refs_are_accepted_without_lookup() -> None:
    assert parse("LicenseRef-internal", KNOWN) == Leaf("LicenseRef-internal")
    assert is_license_ref("DocumentRef-spdx-tool:LicenseRef-MIT-style")
    assert not is_license_ref("MIT")


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   ",
        "MIT OR",
        "(MIT OR ISC",
        "MIT ISC",
        "MIT +",
        "Unknown-1.0",
        "MIT WITH not-an-exception",
        "mit",
        "MIT or ISC",
    ],
)
def test_invalid_expressions_raise(text: str) -> None:
    with pytest.raises(ExpressionSyntaxError):
        parse(text, KNOWN)


def test_tokenize_only_treats_upper_case_words_as_operators() -> None:
    assert tokenize("(MIT OR isc)") == [
        ("paren", "("),
        ("license", "MIT"),
        ("operator", "OR"),
        ("license", "isc"),
        ("paren", ")"),
    ]


def test_iter_leaves_walks_left_to_right() -> None:
    tree = parse("(MIT AND Zlib) OR (ISC AND Apache-2.0)", KNOWN)

    assert [leaf.license for leaf in iter_leaves(tree)] == ["MIT", "Zlib", "ISC", "Apache-2.0"]


def test_nesting_up_to_the_limit_is_accepted() -> None:
    text = "(" * MAX_NESTING + "MIT" + ")" * MAX_NESTING

    assert parse(text, KNOWN) == Leaf("MIT")


def test_nesting_beyond_the_limit_raises() -> None:
    text = "(" * 400 + "MIT" + ")" * 400

    with pytest.raises(ExpressionSyntaxError, match="nests deeper"):
        parse(text, KNOWN)


def test_long_operator_chains_parse() -> None:
    text = " OR ".join(["MIT", "ISC"] * 1000)

    leaves = list(iter_leaves(parse(text, KNOWN)))

    assert len(leaves) == 2000
    assert leaves[0] == Leaf("MIT")
    assert leaves[-1] == Leaf("ISC")
