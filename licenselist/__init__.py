"""Bundle license manifests generated from bundler build statistics."""

from .config import ConfigError, LicenseListConfig, load_config
from .orchestrator import Orchestrator, RunResult

__all__ = [
    "ConfigError",
    "LicenseListConfig",
    "Orchestrator",
    "RunResult",
    "load_config",
]
