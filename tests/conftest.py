# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Test Fixtures

Provides pytest fixtures for package builders, local repositories and
recording UI sinks.
"""

from pathlib import Path

import pytest

from smcget.package import Package
from smcget.repository import LocalRepository
from smcget.retry import RetryPolicy

from helpers import RecordingInterface, RepositoryBuilder


@pytest.fixture
def builder(tmp_path):
    """Package source and remote repository builder."""
    return RepositoryBuilder(tmp_path / "build")


@pytest.fixture
def local_repo(tmp_path):
    """Empty local repository."""
    return LocalRepository(tmp_path / "data", tmp_path / "tmp")


@pytest.fixture
def ui():
    return RecordingInterface()


@pytest.fixture
def retry_policy():
    """Retry policy without delays."""
    return RetryPolicy(max_tries=3, retry_delay=0.0)


@pytest.fixture
def install_local(local_repo, tmp_path):
    """Install a bare archive straight into the local repository."""
    def _install(archive: Path):
        return local_repo.install(Package.from_file(archive, tmp_path / "scratch"))
    return _install
