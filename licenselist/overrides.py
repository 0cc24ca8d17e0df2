"""Path-prefix overrides applied on top of package manifest metadata."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .config import ConfigError
from .licenses import LicenseResolver
from .logging import get_logger
from .models import FileRef, LicenseLabel, PackageFile, PackageRecord
from .modules import normalize_prefix

_SCALAR_FIELDS = ("name", "version", "homepage", "repository")


@dataclass(frozen=True)
class OverrideRule:
    """Metadata forced onto every module whose path starts with ``path_prefix``."""

    path_prefix: str
    replace: bool = False
    name: Optional[str] = None
    version: Optional[str] = None
    homepage: Optional[str] = None
    repository: Optional[str] = None
    licenses: Optional[Tuple[LicenseLabel, ...]] = None
    files: Optional[Tuple[PackageFile, ...]] = None

    def matches(self, path: str) -> bool:
        return path.startswith(self.path_prefix)

    def apply(self, record: PackageRecord) -> PackageRecord:
        """Return ``record`` with this rule merged in."""
        if self.replace:
            record = PackageRecord()
        changes: Dict[str, Any] = {}
        for field_name in _SCALAR_FIELDS:
            value = getattr(self, field_name)
            if value:
                changes[field_name] = value
        if self.licenses:
            changes["licenses"] = (record.licenses or ()) + self.licenses
        if self.files:
            changes["files"] = (record.files or ()) + self.files
        return dataclasses.replace(record, **changes)


class OverrideEngine:
    """Ordered set of override rules, resolved once at configuration time."""

    def __init__(self, rules: List[OverrideRule]) -> None:
        self.rules = list(rules)
        self.logger = get_logger("overrides")

    @classmethod
    def from_config(
        cls, overrides: Mapping[str, Mapping[str, Any]], resolver: LicenseResolver
    ) -> "OverrideEngine":
        """Build rules from ``prefix -> fields`` mappings, in declaration order."""
        return cls([_build_rule(prefix, fields, resolver) for prefix, fields in overrides.items()])

    def apply(self, path: str, record: PackageRecord) -> PackageRecord:
        """Apply every rule matching ``path`` to ``record``, in order."""
        for rule in self.rules:
            if rule.matches(path):
                self.logger.debug("Override %s applies to %s", rule.path_prefix, path)
                record = rule.apply(record)
        return record

    def __len__(self) -> int:
        return len(self.rules)


def _build_rule(prefix: str, fields: Mapping[str, Any], resolver: LicenseResolver) -> OverrideRule:
    if not isinstance(fields, Mapping):
        raise ConfigError(f"override.{prefix} must be a mapping")

    scalars: Dict[str, Optional[str]] = {}
    for field_name in _SCALAR_FIELDS:
        value = fields.get(field_name)
        if value is not None and not isinstance(value, str):
            raise ConfigError(f"override.{prefix}.{field_name} must be a string")
        scalars[field_name] = value

    replace = fields.get("replace", False)
    if not isinstance(replace, bool):
        raise ConfigError(f"override.{prefix}.replace must be a boolean")

    licenses: List[LicenseLabel] = []
    expression = fields.get("license")
    if expression is not None:
        if not isinstance(expression, str):
            raise ConfigError(f"override.{prefix}.license must be an SPDX expression string")
        licenses.extend(resolver.resolve(expression, f"file {prefix}"))
    licenses.extend(_parse_labels(prefix, fields.get("licenses"), resolver))

    files = _parse_files(prefix, fields.get("files"))

    return OverrideRule(
        path_prefix=normalize_prefix(prefix),
        replace=replace,
        licenses=tuple(licenses) or None,
        files=files,
        **scalars,
    )


def _parse_labels(prefix: str, value: Any, resolver: LicenseResolver) -> List[LicenseLabel]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"override.{prefix}.licenses must be a list")
    labels: List[LicenseLabel] = []
    for item in value:
        if isinstance(item, str):
            labels.append(resolver.to_label(item, f"file {prefix}"))
        elif isinstance(item, Mapping) and isinstance(item.get("name"), str):
            url = item.get("url", "")
            labels.append(LicenseLabel(name=item["name"], url=url if isinstance(url, str) else ""))
        else:
            raise ConfigError(
                f"override.{prefix}.licenses entries must be identifiers or {{name, url}} mappings"
            )
    return labels


def _parse_files(prefix: str, value: Any) -> Optional[Tuple[PackageFile, ...]]:
    if value is None:
        return None
    if not isinstance(value, list):
        raise ConfigError(f"override.{prefix}.files must be a list")
    files: List[PackageFile] = []
    for item in value:
        if isinstance(item, str):
            files.append(item)
        elif isinstance(item, Mapping) and isinstance(item.get("id"), str):
            url = item.get("url")
            files.append(FileRef(id=item["id"], url=url if isinstance(url, str) else None))
        else:
            raise ConfigError(f"override.{prefix}.files entries must be paths or {{id, url}} mappings")
    return tuple(files) or None


__all__ = ["OverrideEngine", "OverrideRule"]
