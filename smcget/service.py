# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Package Manager - Modular Composition

Composes repositories, the retry policy and the install, uninstall and
update operations into one facade configured from a Config instance.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from smcget.core.config import Config
from smcget.core.logging import get_logger, log_event
from smcget.downloader import Downloader
from smcget.models import BatchReport, InstalledPackage, PackageSpecification
from smcget.operations import Installer, Uninstaller, Updater
from smcget.package import Package
from smcget.repository import LocalRepository, RemoteRepository, SearchResults
from smcget.retry import RetryPolicy
from smcget.ui import UserInterface

logger = logging.getLogger(__name__)

Names = Union[str, Iterable[str]]


def _as_list(names: Optional[Names]) -> Optional[List[str]]:
    if names is None:
        return None
    if isinstance(names, str):
        return [names]
    return list(names)


class PackageManager:
    """
    smc-get facade.

    Composes:
    - LocalRepository: the installation directory
    - RemoteRepository: created on first use, so offline operations
      (uninstall, list, local search) never touch the network
    - Installer, Uninstaller, Updater: the package operations
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        ui: Optional[UserInterface] = None,
        downloader: Optional[Downloader] = None
    ):
        """
        Initialize the package manager.

        Args:
            config: Configuration, defaults apply when omitted
            ui: Sink for notices, progress and questions
            downloader: Transport for the remote repository
        """
        self.config = config or Config()
        get_logger("smcget", self.config.log_level, self.config.log_format)

        self.ui = ui or UserInterface()
        self.downloader = downloader or Downloader(timeout=self.config.http_timeout)
        self.retry_policy = RetryPolicy(
            max_tries=self.config.max_tries,
            retry_delay=self.config.retry_delay
        )

        self.local = LocalRepository(self.config.data_path, self.config.temp_path)
        self.uninstaller = Uninstaller(self.local, self.ui)

        self._remote: Optional[RemoteRepository] = None
        self._installer: Optional[Installer] = None
        self._updater: Optional[Updater] = None

        logger.debug(f"Package manager initialized for {self.config.data_path}")

    def __enter__(self) -> "PackageManager":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        self.downloader.close()

    @property
    def remote(self) -> RemoteRepository:
        """
        The remote repository.

        Raises:
            InvalidRepositoryError: If it cannot be reached
        """
        if self._remote is None:
            self._remote = RemoteRepository(self.config.repo_url, self.downloader)
        return self._remote

    @property
    def installer(self) -> Installer:
        if self._installer is None:
            self._installer = Installer(
                self.local, lambda: self.remote, self.ui, self.retry_policy, self.config.temp_path
            )
        return self._installer

    @property
    def updater(self) -> Updater:
        if self._updater is None:
            self._updater = Updater(self.local, self.installer, self.uninstaller)
        return self._updater

    def install(self, names: Names, reinstall: bool = False) -> BatchReport:
        """Install packages and their dependencies from the remote repository."""
        report = self.installer.install_many(_as_list(names), reinstall)
        self._log_report(report)
        return report

    def install_file(self, path: Union[str, Path], reinstall: bool = False) -> List[str]:
        """Install a bare `.smcpak` file; dependencies come from the remote repository."""
        installed = self.installer.install_file(path, reinstall)
        log_event(logger, "install_file", path=str(path), installed=installed)
        return installed

    def uninstall(
        self,
        names: Names,
        ignore_dependents: bool = False,
        ignore_conflicts: bool = False
    ) -> BatchReport:
        report = self.uninstaller.uninstall_many(_as_list(names), ignore_dependents, ignore_conflicts)
        self._log_report(report)
        return report

    def update(self, names: Optional[Names] = None, assume_yes: bool = False) -> BatchReport:
        """
        Update installed packages.

        With `assume_yes` locally modified files are deleted without asking.
        """
        report = self.updater.update(_as_list(names), ignore_conflicts=assume_yes)
        self._log_report(report)
        return report

    def check_updates(self, names: Optional[Names] = None) -> List[str]:
        return self.updater.check(_as_list(names))

    def search(
        self,
        pattern: str,
        fields: Iterable[str] = ("name",),
        only_local: bool = False
    ) -> SearchResults:
        repository = self.local if only_local else self.remote
        return repository.search(pattern, fields)

    def info(self, name: str, force_remote: bool = False) -> PackageSpecification:
        """
        Manifest of a package.

        Installed packages are answered from the local repository unless
        `force_remote` is set.
        """
        if not force_remote and self.local.contains(name):
            return self.local.load_spec(name)
        return self.installer.fetch_spec(name)

    def list_installed(self) -> List[InstalledPackage]:
        return [
            InstalledPackage(name=spec.name, title=spec.title, installed_at=self.local.installed_at(spec.name))
            for spec in self.local.package_specs
        ]

    def build(self, directory: Union[str, Path], destination: Optional[Union[str, Path]] = None) -> Path:
        """Validate a package source directory and compress it."""
        package = Package.create(directory, destination)
        log_event(logger, "build", package=package.name, archive=str(package.location))
        return package.location

    def _log_report(self, report: BatchReport):
        log_event(
            logger,
            report.operation.value,
            level="INFO" if report.ok else "WARNING",
            succeeded=[r.name for r in report.succeeded],
            failed=[r.name for r in report.failed]
        )
