"""Configuration loading for licenselist (.licenselist.yml)."""

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import yaml

from .errors import LicenseListError
from .templates import unknown_fields

CONFIG_FILENAME = ".licenselist.yml"

DEFAULT_SOURCE_EXTENSIONS = (".js", ".mjs", ".cjs", ".jsx", ".ts", ".tsx", ".coffee", ".lua")

OVERRIDE_FIELDS = frozenset(
    {"replace", "name", "version", "homepage", "repository", "license", "licenses", "files"}
)

ProcessOutput = Callable[[Dict[str, Any]], Any]


class ConfigError(LicenseListError):
    """Raised when the configuration is malformed."""


@dataclass
class LicenseListConfig:
    """Options recognised by the license manifest generator."""

    root: Path = field(default_factory=Path.cwd)
    output_dir: str = "dist"
    filename: str = "licenses.json"
    public_path: Optional[str] = None
    include_license_files: bool = False
    include_source_files: bool = False
    source_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_SOURCE_EXTENSIONS))
    exclude: List[str] = field(default_factory=list)
    src_replace: Dict[str, str] = field(default_factory=dict)
    sources: Dict[str, List[str]] = field(default_factory=dict)
    override: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    process_output: Optional[ProcessOutput] = None
    license_database: Optional[Path] = None
    pretty: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], root: Path) -> "LicenseListConfig":
        """Build a config from a parsed YAML/JSON mapping."""
        if not isinstance(data, Mapping):
            raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

        config = cls(root=root)
        output_dir = _as_str(data.get("output_dir"))
        if output_dir:
            config.output_dir = output_dir
        filename = _as_str(data.get("filename"))
        if filename:
            config.filename = filename
        config.public_path = _as_str(data.get("public_path"))
        config.include_license_files = bool(_as_bool(data.get("include_license_files")))
        config.include_source_files = bool(_as_bool(data.get("include_source_files")))
        config.pretty = bool(_as_bool(data.get("pretty")))

        extensions = _as_str_list(data.get("source_extensions"))
        if extensions:
            config.source_extensions = [
                ext if ext.startswith(".") else f".{ext}" for ext in extensions
            ]
        config.exclude = _as_str_list(data.get("exclude"))
        config.src_replace = _as_str_mapping(data.get("src_replace"), "src_replace")
        config.sources = parse_source_templates(data.get("sources"))
        config.override = _parse_overrides(data.get("override"))

        hook = _as_str(data.get("process_output"))
        if hook:
            config.process_output = load_callable(hook)

        database = _as_str(data.get("license_database"))
        if database:
            config.license_database = root / database
        return config


def load_config(config_path: Path) -> LicenseListConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return LicenseListConfig(root=root)

    data = _read_config(config_file)
    return LicenseListConfig.from_mapping(data, root)


def load_callable(reference: str) -> ProcessOutput:
    """Import a ``module:attribute`` reference."""
    module_name, _, attribute = reference.partition(":")
    if not module_name or not attribute:
        raise ConfigError(f"process_output must look like 'module:function', got {reference!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigError(f"Unable to import process_output module {module_name!r}: {exc}") from exc
    target: Any = module
    for part in attribute.split("."):
        target = getattr(target, part, None)
        if target is None:
            raise ConfigError(f"{reference!r} does not resolve to an attribute")
    if not callable(target):
        raise ConfigError(f"process_output {reference!r} is not callable")
    return target


def _resolve_config_path(config_path: Path) -> Path:
    config_path = Path(config_path).expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def parse_source_templates(value: Any) -> Dict[str, List[str]]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError("sources must map package names to templates")
    templates: Dict[str, List[str]] = {}
    for name, raw in value.items():
        if isinstance(raw, str):
            templates[str(name)] = [raw]
        elif isinstance(raw, Sequence) and all(isinstance(item, str) for item in raw):
            templates[str(name)] = list(raw)
        else:
            raise ConfigError(f"sources.{name} must be a template string or a list of strings")
        unknown = unknown_fields(templates[str(name)])
        if unknown:
            raise ConfigError(
                f"sources.{name} uses unsupported placeholders: {', '.join(unknown)}"
            )
    return templates


def _parse_overrides(value: Any) -> Dict[str, Dict[str, Any]]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError("override must map path prefixes to override rules")
    overrides: Dict[str, Dict[str, Any]] = {}
    for prefix, rule in value.items():
        if not isinstance(rule, Mapping):
            raise ConfigError(f"override.{prefix} must be a mapping")
        unknown = set(rule) - OVERRIDE_FIELDS
        if unknown:
            raise ConfigError(
                f"override.{prefix} has unknown fields: {', '.join(sorted(map(str, unknown)))}"
            )
        overrides[str(prefix)] = dict(rule)
    return overrides


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


def _as_str_mapping(value: Any, key: str) -> Dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"{key} must be a mapping of strings")
    result: Dict[str, str] = {}
    for source, target in value.items():
        if not isinstance(target, str):
            raise ConfigError(f"{key}.{source} must be a string")
        result[str(source)] = target
    return result


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_SOURCE_EXTENSIONS",
    "LicenseListConfig",
    "load_callable",
    "parse_source_templates",
    "load_config",
]
