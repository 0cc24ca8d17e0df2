"""Bundled data files (SPDX license list)."""
