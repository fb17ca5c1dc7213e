# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Updater

Single responsibility: Replace installed packages with newer remote versions
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from smcget.core.errors import SmcGetError
from smcget.models import BatchReport, OperationResult, OperationStatus, OperationType
from smcget.repository import LocalRepository

from .installer import Installer
from .uninstaller import Uninstaller

logger = logging.getLogger(__name__)


def is_newer(remote: Optional[datetime], local: Optional[datetime]) -> bool:
    """Whether a remote last_update is strictly later than the local one."""
    if remote is None:
        return False
    if local is None:
        return True
    return remote > local


class Updater:
    """Compares installed packages against the remote repository"""

    def __init__(self, local: LocalRepository, installer: Installer, uninstaller: Uninstaller):
        self.local = local
        self.installer = installer
        self.uninstaller = uninstaller

    def is_outdated(self, name: str) -> bool:
        """
        Check one installed package.

        Raises:
            NoSuchPackageError: If it is not installed or not available remotely
        """
        local_spec = self.local.load_spec(name)
        remote_spec = self.installer.fetch_spec(name)
        return is_newer(remote_spec.last_update, local_spec.last_update)

    def check(self, names: Optional[Iterable[str]] = None) -> List[str]:
        """Names of the given (default: all installed) packages with updates."""
        outdated = []
        for name in self._targets(names):
            try:
                if self.is_outdated(name):
                    outdated.append(name)
            except SmcGetError as e:
                logger.warning(f"Cannot check {name} for updates: {e.message}")
        return outdated

    def update(self, names: Optional[Iterable[str]] = None, ignore_conflicts: bool = False) -> BatchReport:
        """
        Update the given (default: all installed) packages.

        An outdated package is uninstalled and installed again from the
        remote repository, pulling in dependencies it now lacks.
        """
        report = BatchReport(operation=OperationType.UPDATE)
        targets = self._targets(names)
        logger.info(f"Checking {len(targets)} packages for updates")

        for name in targets:
            try:
                if not self.is_outdated(name):
                    report.results.append(OperationResult(name=name, status=OperationStatus.UP_TO_DATE))
                    continue

                self.installer.ui.notify(f"Updating {name}")
                # Dependents are fine, the package is replaced right away
                self.uninstaller.uninstall(name, ignore_dependents=True, ignore_conflicts=ignore_conflicts)
                installed = self.installer.install(name)
            except SmcGetError as e:
                logger.error(f"Failed to update {name}: {e.message}")
                self.installer.ui.warn(f"Failed to update {name}: {e.message}")
                report.results.append(OperationResult(
                    name=name,
                    status=OperationStatus.FAILED,
                    message=e.message,
                    error=e.to_dict()
                ))
                continue

            report.results.append(OperationResult(name=name, status=OperationStatus.UPDATED, installed=installed))

        return report

    def _targets(self, names: Optional[Iterable[str]]) -> List[str]:
        return list(names) if names else self.local.package_names
