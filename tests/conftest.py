"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from pathlib import Path
from tempfile import TemporaryDirectory
from typing import TYPE_CHECKING

import pytest

from gitwrap.core.tools.git import GitController
from tests.repo_controller import RepositoryController

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture
def mock_repo() -> Generator[RepositoryController]:
    """Create a temporary git repository with A.txt, B.txt and folder/C.txt committed."""
    tmp_dir = TemporaryDirectory()
    repo = RepositoryController(Path(tmp_dir.name))
    repo.init()
    repo.add_file("A.txt", "A")
    repo.add_file("B.txt", "B")
    repo.add_file("folder/C.txt", "C")
    repo.commit_all("Initial commit.")
    yield repo
    tmp_dir.cleanup()


@pytest.fixture
def git_controller(mock_repo: RepositoryController) -> GitController:
    return GitController(repo_path=mock_repo.path)
