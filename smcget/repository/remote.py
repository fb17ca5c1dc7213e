# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Remote Repository

Read-only publication point:

    <base>/packages.lst          whitespace separated package names
    <base>/specs/<name>.yml
    <base>/packages/<name>.smcpak
"""

import logging
import tempfile
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union
from urllib.parse import quote

from smcget.core.errors import (
    DownloadFailedError,
    InvalidRepositoryError,
    NoSuchPackageError,
    NoSuchResourceError,
)
from smcget.downloader import Downloader, ProgressCallback
from smcget.models import ARCHIVE_EXTENSION, SPEC_EXTENSION, PackageSpecification

from .base import Repository

logger = logging.getLogger(__name__)


class RemoteRepository(Repository):
    """Repository reachable through a base URL (http, https or file)."""

    LIST_FILE = "packages.lst"
    SPECS_DIR = "specs"
    PACKAGES_DIR = "packages"

    def __init__(self, uri: str, downloader: Optional[Downloader] = None):
        """
        Connect to a remote repository and read its package list.

        Args:
            uri: Base URL of the repository
            downloader: Transport to use

        Raises:
            InvalidRepositoryError: If the package list cannot be fetched
        """
        self.uri = uri if uri.endswith("/") else f"{uri}/"
        self.downloader = downloader or Downloader()

        try:
            listing = self.downloader.get(self.url_for(self.LIST_FILE))
        except DownloadFailedError as e:
            raise InvalidRepositoryError(uri, reason=e.message) from e

        try:
            self._package_names = list(dict.fromkeys(listing.decode("utf-8").split()))
        except UnicodeDecodeError as e:
            raise InvalidRepositoryError(uri, reason=f"{self.LIST_FILE} is not UTF-8 text") from e

        logger.info(f"Remote repository {self.uri} lists {len(self._package_names)} packages")

    def __repr__(self) -> str:
        return f"RemoteRepository({self.uri})"

    @property
    def package_names(self) -> List[str]:
        return list(self._package_names)

    def url_for(self, *parts: str) -> str:
        return self.uri + "/".join(quote(part) for part in parts)

    def spec_url(self, name: str) -> str:
        return self.url_for(self.SPECS_DIR, f"{name}{SPEC_EXTENSION}")

    def archive_url(self, name: str) -> str:
        return self.url_for(self.PACKAGES_DIR, f"{name}{ARCHIVE_EXTENSION}")

    def fetch_spec(self, name: str, directory: Union[str, Path]) -> Path:
        spec_file = f"{name}{SPEC_EXTENSION}"
        if name not in self._package_names:
            raise NoSuchResourceError(
                "spec", spec_file, f"Package specification '{spec_file}' not found in {self.uri}"
            )
        return self.downloader.download(self.spec_url(name), Path(directory) / spec_file)

    def fetch_archive(
        self,
        name: str,
        directory: Union[str, Path],
        progress: Optional[ProgressCallback] = None
    ) -> Path:
        if name not in self._package_names:
            raise NoSuchPackageError(name, f"Package {name} not found in {self.uri}")
        return self.downloader.download(
            self.archive_url(name),
            Path(directory) / f"{name}{ARCHIVE_EXTENSION}",
            progress
        )

    def load_spec(self, name: str) -> PackageSpecification:
        with tempfile.TemporaryDirectory(prefix="smc-get-spec-") as scratch:
            return PackageSpecification.from_file(self.fetch_spec(name, scratch))

    def modification_time(self, name: str) -> Optional[datetime]:
        """Last-Modified time of a package's manifest, if the server sends one."""
        if name not in self._package_names:
            raise NoSuchPackageError(name, f"Package {name} not found in {self.uri}")
        return self.downloader.last_modified(self.spec_url(name))
