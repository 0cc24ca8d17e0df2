"""``%{field}`` string templates for published source locations."""

from __future__ import annotations

import re
from typing import Iterable, List, Mapping, Optional

TEMPLATE_FIELDS = frozenset({"name", "version"})

_PLACEHOLDER_RE = re.compile(r"%\{([^}]*)\}")


def template_fields(template: str) -> List[str]:
    """Return the placeholder names used by ``template``."""
    return _PLACEHOLDER_RE.findall(template)


def unknown_fields(templates: Iterable[str]) -> List[str]:
    unknown = {
        field
        for template in templates
        for field in template_fields(template)
        if field not in TEMPLATE_FIELDS
    }
    return sorted(unknown)


def resolve_string_template(template: str, values: Mapping[str, Optional[str]]) -> str:
    """Replace each ``%{field}`` in ``template`` with ``values[field]``."""

    def _substitute(match: "re.Match[str]") -> str:
        value = values.get(match.group(1))
        return "" if value is None else str(value)

    return _PLACEHOLDER_RE.sub(_substitute, template)


__all__ = ["TEMPLATE_FIELDS", "resolve_string_template", "template_fields", "unknown_fields"]
