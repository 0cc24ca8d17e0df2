"""Per-run stores used while building a manifest."""

from .file_cache import CopiedFileCache

__all__ = ["CopiedFileCache"]
