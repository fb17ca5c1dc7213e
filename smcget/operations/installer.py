# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Installer

Single responsibility: Install packages together with their dependencies
"""

import logging
import tempfile
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Set, Union

from smcget.core.errors import NoSuchPackageError, NoSuchResourceError, SmcGetError
from smcget.models import (
    BatchReport,
    OperationResult,
    OperationStatus,
    OperationType,
    PackageSpecification,
)
from smcget.package import Package
from smcget.repository import LocalRepository, Repository
from smcget.retry import RetryPolicy
from smcget.ui import UserInterface

logger = logging.getLogger(__name__)


class Installer:
    """Installs packages from a remote repository into the local one"""

    def __init__(
        self,
        local: LocalRepository,
        remote: Union[Repository, Callable[[], Repository]],
        ui: Optional[UserInterface] = None,
        retry_policy: Optional[RetryPolicy] = None,
        temp_dir: Optional[Union[str, Path]] = None
    ):
        """
        Initialize installer.

        Args:
            local: Repository to install into
            remote: Repository to install from, or a factory creating it on
                    first use
            ui: Sink for notices, progress and questions
            retry_policy: Retry policy for network fetches
            temp_dir: Scratch area for manifests and archives
        """
        self.local = local
        self._remote = remote
        self.ui = ui or UserInterface()
        self.retry_policy = retry_policy or RetryPolicy()
        self.temp_dir = Path(temp_dir) if temp_dir else Path(tempfile.gettempdir()) / "smc-get"

    @property
    def remote(self) -> Repository:
        if callable(self._remote):
            self._remote = self._remote()
        return self._remote

    def fetch_spec(self, name: str) -> PackageSpecification:
        """
        Fetch and parse the remote manifest of `name`.

        Raises:
            NoSuchPackageError: If the package is not listed or its manifest
                                could not be fetched within max_tries
            ConnectionTimedOutError: If connecting timed out
        """
        if not self.remote.contains(name):
            raise NoSuchPackageError(name, f"Package {name} not found in {self.remote}")

        result = self.retry_policy.run(
            lambda: self.remote.fetch_spec(name, self.temp_dir / "specs"),
            f"specification of {name}",
            self.ui.retrying
        )
        if result.fatal:
            raise result.error
        if not result.ok:
            raise NoSuchPackageError(name, f"Could not fetch the specification of {name}: {result.error.message}")
        return PackageSpecification.from_file(result.value)

    def fetch_archive(self, spec: PackageSpecification) -> Package:
        """
        Download the archive of a package.

        Each attempt restarts the progress reporting from zero.

        Raises:
            NoSuchResourceError: If the archive could not be fetched within
                                 max_tries
            ConnectionTimedOutError: If connecting timed out
        """
        remote_package = Package(spec, repository=self.remote)
        result = self.retry_policy.run(
            lambda: remote_package.fetch(
                self.temp_dir / "packages",
                lambda total, done: self.ui.progress(spec.name, total, done)
            ),
            f"archive of {spec.name}",
            self.ui.retrying
        )
        if result.fatal:
            raise result.error
        if not result.ok:
            raise NoSuchResourceError(
                "archive", spec.archive_file_name,
                f"Could not fetch {spec.archive_file_name}: {result.error.message}"
            )
        return Package(spec, location=result.value)

    def install(
        self,
        name: str,
        reinstall: bool = False,
        visited: Optional[Set[str]] = None,
        is_dependency: bool = False
    ) -> List[str]:
        """
        Install a package and, before it, its dependencies.

        Args:
            name: Package to install
            reinstall: Overwrite packages that are already installed
            visited: Names seen during this run (cycle detection)
            is_dependency: Whether `name` is installed as a dependency

        Returns:
            Names of the packages actually installed, dependencies first

        Raises:
            SmcGetError: If the package or one of its dependencies fails
        """
        if visited is None:
            visited = set()

        # Cycles and diamonds: first occurrence wins
        if name in visited:
            self.ui.warn(f"Circular or duplicate dependency on {name}, not installing it again")
            return []
        visited.add(name)

        if self.local.contains(name) and not reinstall:
            if not is_dependency:
                self.ui.notify(f"{name} is already installed")
            return []

        spec = self.fetch_spec(name)

        installed = []
        for dependency in spec.dependencies:
            installed.extend(self.install(dependency, reinstall, visited, is_dependency=True))

        package = self.fetch_archive(spec)
        self.local.install(package)
        installed.append(name)
        logger.info(f"Installed {name}" + (" (dependency)" if is_dependency else ""))

        if spec.install_message:
            self.ui.notify(spec.install_message)
        return installed

    def install_file(self, path: Union[str, Path], reinstall: bool = False) -> List[str]:
        """
        Install a package from a bare archive file.

        Dependencies are installed from the remote repository.

        Returns:
            Names of the packages actually installed, dependencies first
        """
        package = Package.from_file(path, self.temp_dir / "files")
        name = package.name

        if self.local.contains(name) and not reinstall:
            self.ui.notify(f"{name} is already installed")
            return []

        visited = {name}
        installed = []
        for dependency in package.spec.dependencies:
            installed.extend(self.install(dependency, reinstall, visited, is_dependency=True))

        self.local.install(package)
        installed.append(name)
        logger.info(f"Installed {name} from {path}")

        if package.spec.install_message:
            self.ui.notify(package.spec.install_message)
        return installed

    def install_many(self, names: Iterable[str], reinstall: bool = False) -> BatchReport:
        """
        Install several packages in request order.

        A failing package is reported and the batch continues.
        """
        report = BatchReport(operation=OperationType.INSTALL)

        for name in names:
            was_installed = self.local.contains(name)
            try:
                installed = self.install(name, reinstall)
            except SmcGetError as e:
                logger.error(f"Failed to install {name}: {e.message}")
                self.ui.warn(f"Failed to install {name}: {e.message}")
                report.results.append(OperationResult(
                    name=name,
                    status=OperationStatus.FAILED,
                    message=e.message,
                    error=e.to_dict()
                ))
                continue

            if name not in installed:
                status = OperationStatus.SKIPPED
            elif was_installed:
                status = OperationStatus.REINSTALLED
            else:
                status = OperationStatus.INSTALLED
            report.results.append(OperationResult(name=name, status=status, installed=installed))

        return report
