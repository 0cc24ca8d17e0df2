"""Resolve license expressions into labels backed by the license database."""

from __future__ import annotations

from typing import List, Optional

from .database import LICENSE_URLS, LicenseDatabase
from .errors import LicenseExpressionWarning, LicenseListWarning, UnknownLicenseWarning
from .logging import get_logger
from .models import LicenseLabel
from .spdx import Binary, Expression, ExpressionError, Leaf, iter_leaves, parse
from .spdx.correct import Corrector

_IMPACT_MESSAGE = (
    "Some generated JavaScript assets may be flagged by license checkers "
    "due to missing license information."
)


def _has_and(tree: Expression) -> bool:
    stack = [tree]
    while stack:
        node = stack.pop()
        if isinstance(node, Binary):
            if node.op == "AND":
                return True
            stack.extend((node.left, node.right))
    return False


class LicenseResolver:
    """Turns raw license strings into lists of :class:`LicenseLabel`.

    Compound expressions are flattened: every identifier in the tree is
    reported, whether it was joined with AND or OR. Failures never raise;
    they degrade to a label carrying the raw text and are recorded in
    :attr:`diagnostics`.
    """

    def __init__(self, database: LicenseDatabase) -> None:
        self.database = database
        self._known = set(database) | set(LICENSE_URLS)
        self._corrector = Corrector(self._known)
        self.diagnostics: List[LicenseListWarning] = []
        self.logger = get_logger("licenses")

    def resolve(self, expression: str, context: str) -> List[LicenseLabel]:
        """Resolve ``expression`` declared by ``context`` into labels."""
        return self.to_labels(self.parse_expression(expression, context), context)

    def parse_expression(self, expression: str, context: str) -> Expression:
        try:
            tree = parse(self._corrector.correct(expression), self._known)
        except ExpressionError as exc:
            self._warn(
                LicenseExpressionWarning(
                    f"Unable to parse the SPDX license expression '{expression}' "
                    f"associated to {context}.",
                    context=context,
                )
            )
            self._warn(LicenseExpressionWarning(_IMPACT_MESSAGE, context=context))
            self.logger.debug("Expression failure for %s: %s", context, exc)
            return Leaf(expression)
        if _has_and(tree):
            self._warn(
                LicenseExpressionWarning(
                    f"The SPDX license expression '{expression}' associated to {context} "
                    "contains an AND operator; all of its licenses are listed without "
                    "combination semantics.",
                    context=context,
                )
            )
        return tree

    def to_labels(self, tree: Expression, context: Optional[str] = None) -> List[LicenseLabel]:
        return [self.to_label(leaf.license, context) for leaf in iter_leaves(tree)]

    def to_label(self, license_id: str, context: Optional[str] = None) -> LicenseLabel:
        info = self.database.get(license_id)
        if info is not None:
            if not info.is_fsf_libre:
                self.logger.info(
                    "License '%s' is not marked as FSF-libre in the license database.",
                    license_id,
                )
            return LicenseLabel(name=license_id, url=info.reference)
        self._warn(
            UnknownLicenseWarning(
                f"Unable to associate the SPDX license identifier '{license_id}' "
                "to a known license.",
                context=context,
            )
        )
        self._warn(UnknownLicenseWarning(_IMPACT_MESSAGE, context=context))
        return LicenseLabel(name=license_id, url="")

    def _warn(self, warning: LicenseListWarning) -> None:
        self.diagnostics.append(warning)
        self.logger.warning("%s", warning.message)


__all__ = ["LicenseResolver"]
