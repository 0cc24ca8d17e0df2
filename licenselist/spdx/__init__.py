"""SPDX license expression correction and parsing."""

from .correct import ExpressionCorrectionError, correct
from .expression import (
    Binary,
    Expression,
    ExpressionError,
    ExpressionSyntaxError,
    Leaf,
    iter_leaves,
    parse,
)

__all__ = [
    "Binary",
    "Expression",
    "ExpressionCorrectionError",
    "ExpressionError",
    "ExpressionSyntaxError",
    "Leaf",
    "correct",
    "iter_leaves",
    "parse",
]
