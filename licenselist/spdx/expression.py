"""Recursive-descent parser for SPDX license expressions.

Grammar (operators are upper-case, AND binds tighter than OR)::

    expression := and-expr ("OR" and-expr)*
    and-expr   := term ("AND" term)*
    term       := "(" expression ")" | license
    license    := identifier ["+"] ["WITH" exception]

Parenthesised groups may nest at most ``MAX_NESTING`` levels deep.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Collection, Iterator, List, Optional, Tuple, Union

OPERATORS = ("AND", "OR")

MAX_NESTING = 64

EXCEPTIONS = frozenset(
    {
        "389-exception",
        "Autoconf-exception-2.0",
        "Autoconf-exception-3.0",
        "Bison-exception-2.2",
        "Bootloader-exception",
        "Classpath-exception-2.0",
        "CLISP-exception-2.0",
        "eCos-exception-2.0",
        "Font-exception-2.0",
        "GCC-exception-2.0",
        "GCC-exception-3.1",
        "LLVM-exception",
        "OCaml-LGPL-linking-exception",
        "OpenJDK-assembly-exception-1.0",
        "Qt-GPL-exception-1.0",
        "Qt-LGPL-exception-1.1",
        "u-boot-exception-2.0",
        "WxWindows-exception-3.1",
    }
)

_TOKEN_RE = re.compile(
    r"\s*(?:(?P<paren>[()])|(?P<plus>\+)|(?P<word>[A-Za-z0-9.\-]+(?::[A-Za-z0-9.\-]+)?))"
)
_LICENSE_REF_RE = re.compile(
    r"^(?:DocumentRef-[A-Za-z0-9.\-]+:)?LicenseRef-[A-Za-z0-9.\-]+$"
)


class ExpressionError(ValueError):
    """Base class for license expression failures."""


class ExpressionSyntaxError(ExpressionError):
    """Raised when an expression does not match the SPDX grammar."""


@dataclass(frozen=True)
class Leaf:
    """A single license identifier."""

    license: str
    plus: bool = False
    exception: Optional[str] = None


@dataclass(frozen=True)
class Binary:
    """Two sub-expressions joined by AND or OR."""

    op: str
    left: "Expression"
    right: "Expression"


Expression = Union[Leaf, Binary]


def iter_leaves(expression: Expression) -> Iterator[Leaf]:
    """Yield the leaves of ``expression`` depth-first, left to right."""
    stack: List[Expression] = [expression]
    while stack:
        node = stack.pop()
        if isinstance(node, Leaf):
            yield node
        else:
            stack.append(node.right)
            stack.append(node.left)


def is_license_ref(identifier: str) -> bool:
    return bool(_LICENSE_REF_RE.match(identifier))


def tokenize(text: str) -> List[Tuple[str, str]]:
    """Split an expression into ``(kind, value)`` tokens."""
    tokens: List[Tuple[str, str]] = []
    position = 0
    length = len(text)
    while position < length:
        if text[position:].strip() == "":
            break
        match = _TOKEN_RE.match(text, position)
        if match is None:
            raise ExpressionSyntaxError(
                f"Unexpected character {text[position:].lstrip()[:1]!r} in {text!r}"
            )
        if match.group("paren"):
            tokens.append(("paren", match.group("paren")))
        elif match.group("plus"):
            if not tokens or tokens[-1][0] != "license" or text[match.start("plus") - 1].isspace():
                raise ExpressionSyntaxError(f"Misplaced '+' in {text!r}")
            tokens.append(("plus", "+"))
        else:
            word = match.group("word")
            if word in OPERATORS or word == "WITH":
                tokens.append(("operator", word))
            else:
                tokens.append(("license", word))
        position = match.end()
    return tokens


class _Parser:
    def __init__(self, text: str, known: Collection[str]) -> None:
        self._text = text
        self._known = known
        self._tokens = tokenize(text)
        self._index = 0
        self._depth = 0

    def parse(self) -> Expression:
        if not self._tokens:
            raise ExpressionSyntaxError("Empty license expression")
        expression = self._parse_or()
        if self._index != len(self._tokens):
            kind, value = self._tokens[self._index]
            raise ExpressionSyntaxError(f"Unexpected {kind} {value!r} in {self._text!r}")
        return expression

    def _peek(self) -> Optional[Tuple[str, str]]:
        if self._index < len(self._tokens):
            return self._tokens[self._index]
        return None

    def _take(self) -> Tuple[str, str]:
        token = self._peek()
        if token is None:
            raise ExpressionSyntaxError(f"Unexpected end of expression {self._text!r}")
        self._index += 1
        return token

    def _parse_or(self) -> Expression:
        return self._parse_chain("OR", self._parse_and)

    def _parse_and(self) -> Expression:
        return self._parse_chain("AND", self._parse_term)

    def _parse_chain(self, op: str, operand: Callable[[], Expression]) -> Expression:
        # Right-associative fold over the collected operands.
        operands = [operand()]
        while self._peek() == ("operator", op):
            self._index += 1
            operands.append(operand())
        expression = operands.pop()
        while operands:
            expression = Binary(op, operands.pop(), expression)
        return expression

    def _parse_term(self) -> Expression:
        kind, value = self._take()
        if (kind, value) == ("paren", "("):
            self._depth += 1
            if self._depth > MAX_NESTING:
                raise ExpressionSyntaxError(
                    f"License expression nests deeper than {MAX_NESTING} parentheses"
                )
            inner = self._parse_or()
            if self._take() != ("paren", ")"):
                raise ExpressionSyntaxError(f"Unbalanced parenthesis in {self._text!r}")
            self._depth -= 1
            return inner
        if kind != "license":
            raise ExpressionSyntaxError(f"Expected a license, found {value!r} in {self._text!r}")
        if value not in self._known and not is_license_ref(value):
            raise ExpressionSyntaxError(f"Unknown license identifier {value!r}")
        plus = False
        if self._peek() == ("plus", "+"):
            self._index += 1
            plus = True
        exception = None
        if self._peek() == ("operator", "WITH"):
            self._index += 1
            exc_kind, exc_value = self._take()
            if exc_kind != "license" or exc_value not in EXCEPTIONS:
                raise ExpressionSyntaxError(f"Unknown license exception {exc_value!r}")
            exception = exc_value
        return Leaf(value, plus=plus, exception=exception)


def parse(text: str, known: Collection[str]) -> Expression:
    """Parse ``text`` into an expression tree of ``known`` identifiers."""
    return _Parser(text, known).parse()


__all__ = [
    "EXCEPTIONS",
    "Binary",
    "Expression",
    "ExpressionError",
    "ExpressionSyntaxError",
    "Leaf",
    "is_license_ref",
    "iter_leaves",
    "parse",
    "tokenize",
]
