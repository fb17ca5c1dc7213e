# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Uninstaller

Single responsibility: Remove installed packages
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from smcget.core.errors import DependencyConflictError, SmcGetError
from smcget.models import BatchReport, OperationResult, OperationStatus, OperationType
from smcget.repository import LocalRepository
from smcget.ui import UserInterface

logger = logging.getLogger(__name__)


class Uninstaller:
    """Removes packages from the local repository"""

    def __init__(self, local: LocalRepository, ui: Optional[UserInterface] = None):
        self.local = local
        self.ui = ui or UserInterface()

    def dependents(self, name: str) -> List[str]:
        """Installed packages that depend on `name`."""
        return [
            spec.name for spec in self.local.package_specs
            if spec.name != name and name in spec.dependencies
        ]

    def uninstall(
        self,
        name: str,
        ignore_dependents: bool = False,
        ignore_conflicts: bool = False
    ) -> List[Path]:
        """
        Uninstall a package.

        Args:
            name: Package to remove
            ignore_dependents: Skip the check for packages depending on it
            ignore_conflicts: Delete modified files without asking

        Returns:
            Modified files that were kept under a new name

        Raises:
            NoSuchPackageError: If the package is not installed
            DependencyConflictError: If other packages depend on it and
                                     removal was not confirmed
        """
        spec = self.local.load_spec(name)

        if not ignore_dependents:
            dependents = self.dependents(name)
            if dependents:
                question = f"{name} is required by {', '.join(dependents)}. Uninstall anyway?"
                if not self.ui.confirm(question):
                    raise DependencyConflictError(name, dependents)
                logger.warning(f"Uninstalling {name} although {', '.join(dependents)} depend on it")

        resolver = None if ignore_conflicts else self.ui.resolve_conflict
        preserved = self.local.uninstall(name, resolver)

        for path in preserved:
            self.ui.notify(f"Modified file kept as {path}")
        if spec.remove_message:
            self.ui.notify(spec.remove_message)
        return preserved

    def uninstall_many(
        self,
        names: Iterable[str],
        ignore_dependents: bool = False,
        ignore_conflicts: bool = False
    ) -> BatchReport:
        report = BatchReport(operation=OperationType.UNINSTALL)

        for name in names:
            try:
                preserved = self.uninstall(name, ignore_dependents, ignore_conflicts)
            except SmcGetError as e:
                logger.error(f"Failed to uninstall {name}: {e.message}")
                self.ui.warn(f"Failed to uninstall {name}: {e.message}")
                report.results.append(OperationResult(
                    name=name,
                    status=OperationStatus.FAILED,
                    message=e.message,
                    error=e.to_dict()
                ))
                continue

            message = f"kept {len(preserved)} modified files" if preserved else None
            report.results.append(OperationResult(name=name, status=OperationStatus.UNINSTALLED, message=message))

        return report
