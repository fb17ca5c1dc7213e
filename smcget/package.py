# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Package

A package specification bound to the place its archive can be found: either
a bare `.smcpak` file on disk or a repository it can be fetched from.
"""

import hashlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

from smcget.archive import PackageArchive
from smcget.core.errors import BrokenPackageError, InvalidSpecificationError
from smcget.downloader import ProgressCallback
from smcget.models import CONTENT_CATEGORIES, PackageSpecification

if TYPE_CHECKING:
    from smcget.repository.base import Repository

logger = logging.getLogger(__name__)


def file_checksum(path: Union[str, Path]) -> str:
    """SHA1 hex digest of a file's content."""
    digest = hashlib.sha1()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def directory_checksums(path: Union[str, Path]) -> Dict[str, str]:
    """Checksums of all files below a directory, keyed by relative path."""
    path = Path(path)
    return {
        entry.relative_to(path).as_posix(): file_checksum(entry)
        for entry in sorted(path.rglob("*"))
        if entry.is_file()
    }


def build_checksums(directory: Union[str, Path], spec: PackageSpecification) -> Dict[str, Dict[str, Any]]:
    """
    Compute the checksum mapping stored in a built package's manifest.

    Args:
        directory: Package source directory
        spec: Manifest declaring the content files

    Returns:
        category -> file name -> SHA1. Worlds are directories and map to a
        mapping of the files they contain.

    Raises:
        BrokenPackageError: If a declared file is missing
    """
    directory = Path(directory)
    checksums: Dict[str, Dict[str, Any]] = {}

    for category in CONTENT_CATEGORIES.values():
        entries = {}
        for filename in spec.files(category.field):
            path = directory / category.archive_dir / filename
            if category.field == "worlds":
                if not path.is_dir():
                    raise BrokenPackageError(f"World {filename} not found in {directory}")
                entries[filename] = directory_checksums(path)
            else:
                if not path.is_file():
                    raise BrokenPackageError(f"File {category.archive_dir}/{filename} not found in {directory}")
                entries[filename] = file_checksum(path)
        if entries:
            checksums[category.field] = entries

    return checksums


class Package:
    """
    A package specification plus a location.

    Packages with a repository are remote (even if that repository lives on
    the local disk); their archive is fetched on demand.
    """

    def __init__(
        self,
        spec: PackageSpecification,
        location: Optional[Union[str, Path]] = None,
        repository: Optional["Repository"] = None
    ):
        if location is None and repository is None:
            raise ValueError("A package needs an archive location or a repository")
        self.spec = spec
        self.location = Path(location) if location is not None else None
        self.repository = repository

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def remote(self) -> bool:
        return self.repository is not None

    def __repr__(self) -> str:
        where = self.repository if self.remote else self.location
        return f"<Package {self.name} ({where})>"

    @classmethod
    def from_file(cls, archive: Union[str, Path], scratch: Union[str, Path]) -> "Package":
        """
        Open a bare archive file.

        The archive is decompressed below `scratch` to read its manifest.

        Raises:
            BrokenPackageError: If the archive has no valid manifest
        """
        archive = Path(archive)
        package_dir = PackageArchive(archive).decompress(scratch)
        spec_file = package_dir / f"{package_dir.name}.yml"
        if not spec_file.is_file():
            raise BrokenPackageError(f"{archive} contains no specification {spec_file.name}")
        try:
            spec = PackageSpecification.from_file(spec_file)
        except InvalidSpecificationError as e:
            raise BrokenPackageError(f"{archive}: {e.message}")
        return cls(spec, location=archive)

    @classmethod
    def from_repository(cls, repository: "Repository", name: str, scratch: Union[str, Path]) -> "Package":
        """Resolve `name` through `repository` by fetching its manifest."""
        spec_file = repository.fetch_spec(name, scratch)
        return cls(PackageSpecification.from_file(spec_file), repository=repository)

    def fetch(self, directory: Union[str, Path], progress: Optional[ProgressCallback] = None) -> Path:
        """
        Materialize the archive and return its path.

        For remote packages the archive is fetched into `directory` and
        becomes the package's location.
        """
        if self.remote:
            self.location = self.repository.fetch_archive(self.name, directory, progress)
        elif progress:
            size = self.location.stat().st_size
            progress(size, size)
        return self.location

    def decompress(self, directory: Union[str, Path]) -> Path:
        """Decompress the archive below `directory`; fetch it first if needed."""
        if self.location is None:
            raise BrokenPackageError(f"Archive of {self.name} has not been fetched")
        return PackageArchive(self.location).decompress(directory)

    @classmethod
    def create(cls, directory: Union[str, Path], destination: Optional[Union[str, Path]] = None) -> "Package":
        """
        Build a package archive from a package source directory.

        The directory must be named after the package and contain
        `<name>.yml` along with every content file the manifest declares.
        The manifest has to carry `last_update` and `checksums`, and the
        recorded checksums have to match the files.

        Args:
            directory: Package source directory
            destination: Archive to write, `<name>.smcpak` next to the
                         source directory by default

        Returns:
            Package located at the new archive

        Raises:
            BrokenPackageError: If the directory is not a valid package
        """
        directory = Path(directory).resolve()
        if not directory.is_dir():
            raise BrokenPackageError(f"{directory} is not a directory")

        name = directory.name
        spec_file = directory / f"{name}.yml"
        if not spec_file.is_file():
            raise BrokenPackageError(f"Specification {spec_file.name} not found in {directory}")

        try:
            spec = PackageSpecification.from_file(spec_file, require_build_keys=True)
        except InvalidSpecificationError as e:
            raise BrokenPackageError(f"{spec_file}: {e.message}")

        actual = build_checksums(directory, spec)
        for category, entries in actual.items():
            for filename, checksum in entries.items():
                recorded = spec.checksum_for(category, filename)
                if recorded is None:
                    raise BrokenPackageError(f"No checksum recorded for {category} file {filename}")
                if recorded != checksum:
                    raise BrokenPackageError(f"Checksum mismatch for {category} file {filename}")

        archive_file = Path(destination) if destination else directory.parent / spec.archive_file_name
        logger.info(f"Compressing {directory} to {archive_file}")
        archive = PackageArchive.compress(directory, archive_file)
        return cls(spec, location=archive.path)
