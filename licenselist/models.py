"""Core data models shared across licenselist components."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class LicenseLabel:
    """A canonical license identifier and its reference URL."""

    name: str
    url: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "url": self.url}


@dataclass(frozen=True)
class FileRef:
    """An ancillary file that has already been published."""

    id: str
    url: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "url": self.url}


# Ancillary files are either published references or local paths still to copy.
PackageFile = Union[FileRef, str]


@dataclass(frozen=True)
class PackageRecord:
    """Normalized metadata for one package manifest.

    ``None`` marks a field an override cleared; it is omitted from output.
    """

    name: Optional[str] = None
    version: Optional[str] = None
    homepage: Optional[str] = None
    repository: Optional[str] = None
    licenses: Optional[Tuple[LicenseLabel, ...]] = None
    files: Optional[Tuple[PackageFile, ...]] = None


@dataclass
class ModuleRef:
    """A bundled module listed under a package entry."""

    name: str
    url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name}
        if self.url is not None:
            data["url"] = self.url
        return data


@dataclass
class PackageEntry:
    """Aggregated per-package record emitted for one chunk."""

    name: Optional[str]
    url: Optional[str]
    version: Optional[str]
    licenses: Optional[List[LicenseLabel]]
    files: List[FileRef] = field(default_factory=list)
    repository: Optional[str] = None
    modules: Optional[List[ModuleRef]] = None
    sources: Optional[List[ModuleRef]] = None

    def references(self) -> List[ModuleRef]:
        """Return the list modules are recorded in for this entry."""
        if self.sources is not None:
            return self.sources
        if self.modules is None:
            self.modules = []
        return self.modules

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.name is not None:
            data["name"] = self.name
        if self.url is not None:
            data["url"] = self.url
        if self.version is not None:
            data["version"] = self.version
        if self.licenses is not None:
            data["licenses"] = [label.to_dict() for label in self.licenses]
        if self.files:
            data["files"] = [ref.to_dict() for ref in self.files]
        if self.repository:
            data["repository"] = self.repository
        if self.sources is not None:
            data["sources"] = [ref.to_dict() for ref in self.sources]
        if self.modules is not None:
            data["modules"] = [ref.to_dict() for ref in self.modules]
        return data


OutputManifest = Dict[str, List[PackageEntry]]
