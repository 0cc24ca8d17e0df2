from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from licenselist.database import LicenseDatabase
from tests._fixtures.project_builder import ProjectBuilder


@pytest.fixture
def project(tmp_path: Path) -> ProjectBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return ProjectBuilder(tmp_path)


@pytest.fixture(scope="session")
def database() -> LicenseDatabase:
    """The bundled SPDX license database."""
    return LicenseDatabase.load()


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo CLI logging configuration so caplog keeps receiving records."""
    yield
    logger = logging.getLogger("licenselist")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
