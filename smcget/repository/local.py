# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Local Repository

The installation directory. Installed packages are the manifests found in
its `packages/` subdirectory; content files are copied into the content
category directories SMC reads them from.
"""

import logging
import os
import shutil
import tempfile
from datetime import datetime, UTC
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

from smcget.core.errors import (
    BrokenPackageError,
    InvalidSpecificationError,
    NoSuchPackageError,
    NoSuchResourceError,
)
from smcget.downloader import ProgressCallback
from smcget.models import CONTENT_CATEGORIES, SPEC_EXTENSION, PackageSpecification
from smcget.package import Package, directory_checksums, file_checksum
from smcget.ui import ConflictResolution

from .base import Repository

logger = logging.getLogger(__name__)

ConflictResolver = Callable[[Path], ConflictResolution]


class LocalRepository(Repository):
    """Write-capable package store rooted at the SMC data directory."""

    is_local = True

    SPECS_DIR = "packages"
    CACHE_DIR = "cache"

    def __init__(self, root: Union[str, Path], temp_dir: Optional[Union[str, Path]] = None):
        """
        Open (and create if needed) a local repository.

        Args:
            root: Installation directory
            temp_dir: Scratch area for decompressing archives
        """
        self.root = Path(root)
        self.specs_dir = self.root / self.SPECS_DIR
        self.cache_dir = self.root / self.CACHE_DIR
        self.temp_dir = Path(temp_dir) if temp_dir else Path(tempfile.gettempdir()) / "smc-get"

        for path in [self.specs_dir, self.cache_dir] + [self.category_dir(c) for c in CONTENT_CATEGORIES]:
            path.mkdir(parents=True, exist_ok=True)

        self._specs: Dict[str, PackageSpecification] = self._load_specs()
        logger.debug(f"Local repository {self.root} holds {len(self._specs)} packages")

    def __repr__(self) -> str:
        return f"LocalRepository({self.root})"

    def _load_specs(self) -> Dict[str, PackageSpecification]:
        specs = {}
        for spec_file in sorted(self.specs_dir.glob(f"*{SPEC_EXTENSION}")):
            try:
                spec = PackageSpecification.from_file(spec_file)
            except InvalidSpecificationError as e:
                logger.warning(f"Ignoring invalid specification {spec_file}: {e.message}")
                continue
            specs[spec.name] = spec
        return specs

    @property
    def package_specs(self) -> List[PackageSpecification]:
        return list(self._specs.values())

    @property
    def package_names(self) -> List[str]:
        return list(self._specs)

    def category_dir(self, category: str) -> Path:
        return self.root / CONTENT_CATEGORIES[category].local_dir

    def content_path(self, category: str, filename: str) -> Path:
        """
        Installed location of a content file.

        Raises:
            InvalidSpecificationError: If the entry resolves to the category
                                       directory itself or anywhere outside it
        """
        category_root = Path(os.path.normpath(self.category_dir(category)))
        target = Path(os.path.normpath(category_root / filename))
        if target == category_root or not target.is_relative_to(category_root):
            raise InvalidSpecificationError(
                f"{category} entry '{filename}' points outside {category_root}", key=category
            )
        return target

    def _content_targets(self, spec: PackageSpecification) -> List[Tuple[str, str, Path]]:
        # Every entry is checked before anything on disk changes
        return [
            (category, filename, self.content_path(category, filename))
            for category in CONTENT_CATEGORIES
            for filename in spec.files(category)
        ]

    def load_spec(self, name: str) -> PackageSpecification:
        try:
            return self._specs[name]
        except KeyError:
            raise NoSuchPackageError(name, f"Package {name} is not installed")

    def installed_at(self, name: str) -> datetime:
        """Installation date, taken from the manifest's modification time."""
        self.load_spec(name)
        spec_file = self.specs_dir / f"{name}{SPEC_EXTENSION}"
        return datetime.fromtimestamp(spec_file.stat().st_mtime, UTC)

    def fetch_spec(self, name: str, directory: Union[str, Path]) -> Path:
        spec_file = self.specs_dir / f"{name}{SPEC_EXTENSION}"
        if name not in self._specs or not spec_file.is_file():
            raise NoSuchResourceError(
                "spec", spec_file.name,
                f"Package specification '{spec_file.name}' not found in the local repository {self.root}"
            )
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        return Path(shutil.copy2(spec_file, directory / spec_file.name))

    def fetch_archive(
        self,
        name: str,
        directory: Union[str, Path],
        progress: Optional[ProgressCallback] = None
    ) -> Path:
        archive = self.cache_dir / f"{name}.smcpak"
        if not archive.is_file():
            raise NoSuchPackageError(name, f"Package file '{archive.name}' not found in the cache of {self.root}")
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        target = Path(shutil.copy2(archive, directory / archive.name))
        if progress:
            size = target.stat().st_size
            progress(size, size)
        return target

    def install(self, package: Package, progress: Optional[ProgressCallback] = None) -> PackageSpecification:
        """
        Install a package into this repository.

        Remote packages are fetched first. Installing a package that is
        already installed overwrites its files.

        Returns:
            The installed specification
        """
        spec = package.spec
        targets = self._content_targets(spec)
        package.fetch(self.temp_dir / "archives", progress)
        package_dir = package.decompress(self.temp_dir / "unpacked")

        try:
            if not (package_dir / spec.spec_file_name).is_file():
                raise BrokenPackageError(f"Archive of {spec.name} contains no {spec.spec_file_name}")

            for category, filename, target in targets:
                archive_dir = CONTENT_CATEGORIES[category].archive_dir
                source = package_dir / archive_dir / filename
                if source.is_dir():
                    shutil.copytree(source, target, dirs_exist_ok=True)
                elif source.is_file():
                    target.parent.mkdir(parents=True, exist_ok=True)
                    shutil.copy2(source, target)
                else:
                    raise BrokenPackageError(
                        f"{archive_dir}/{filename} declared by {spec.name} is missing from its archive"
                    )

            shutil.copy2(package_dir / spec.spec_file_name, self.specs_dir / spec.spec_file_name)
        finally:
            shutil.rmtree(package_dir)

        cached = self.cache_dir / spec.archive_file_name
        if not (cached.exists() and cached.samefile(package.location)):
            shutil.copy2(package.location, cached)

        self._specs[spec.name] = spec
        logger.info(f"Installed {spec.name} into {self.root}")
        return spec

    def uninstall(self, name: str, conflict_resolver: Optional[ConflictResolver] = None) -> List[Path]:
        """
        Remove an installed package's files and manifest.

        Missing files are skipped. Directories left empty are pruned, the
        category directories themselves always stay.

        Args:
            name: Package to remove
            conflict_resolver: Asked what to do with files that differ from
                               their recorded checksum; without one they are
                               deleted

        Returns:
            Paths of modified files that were preserved under a new name
        """
        spec = self.load_spec(name)
        targets = self._content_targets(spec)
        preserved = []

        for category, filename, target in targets:
            if not target.exists() and not target.is_symlink():
                continue

            if conflict_resolver and self.is_modified(spec, category, filename):
                if conflict_resolver(target) == ConflictResolution.PRESERVE:
                    kept = self._preserved_path(target)
                    target.rename(kept)
                    logger.info(f"Kept modified file {target} as {kept}")
                    preserved.append(kept)
                    continue

            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            else:
                target.unlink(missing_ok=True)

        for category in CONTENT_CATEGORIES:
            self._prune_empty_directories(self.category_dir(category))

        (self.specs_dir / spec.spec_file_name).unlink(missing_ok=True)
        del self._specs[name]
        logger.info(f"Uninstalled {name} from {self.root}")
        return preserved

    def is_modified(self, spec: PackageSpecification, category: str, filename: str) -> bool:
        """Whether an installed file differs from its recorded checksum."""
        recorded = spec.checksum_for(category, filename)
        if recorded is None:
            return False

        target = self.content_path(category, filename)
        if isinstance(recorded, dict):
            if not target.is_dir():
                return True
            actual = directory_checksums(target)
            return any(actual.get(path) != checksum for path, checksum in recorded.items())
        return not target.is_file() or file_checksum(target) != recorded

    @staticmethod
    def _preserved_path(target: Path) -> Path:
        """First free `<stem>.MODIFIED[.N]<suffix>` name next to `target`."""
        kept = target.with_name(f"{target.stem}.MODIFIED{target.suffix}")
        counter = 1
        while kept.exists() or kept.is_symlink():
            kept = target.with_name(f"{target.stem}.MODIFIED.{counter}{target.suffix}")
            counter += 1
        return kept

    @staticmethod
    def _prune_empty_directories(root: Path):
        # Removing a directory can empty its parent, repeat until nothing changes
        while True:
            empty = [
                path for path in root.rglob("*")
                if path.is_dir() and not path.is_symlink() and not any(path.iterdir())
            ]
            if not empty:
                break
            for path in empty:
                path.rmdir()
