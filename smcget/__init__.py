# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
smc-get: package manager for Secret Maryo Chronicles contributed content.
"""

__version__ = "0.4.0"

from smcget.core.config import Config, load_config
from smcget.core.errors import (
    SmcGetError,
    InvalidSpecificationError,
    NoSuchPackageError,
    NoSuchResourceError,
    DownloadFailedError,
    ConnectionTimedOutError,
    BrokenPackageError,
    DependencyConflictError,
    InvalidRepositoryError,
    UnsupportedEntryError,
    ConfigurationError,
)
from smcget.models import PackageSpecification, BatchReport, OperationStatus
from smcget.archive import PackageArchive
from smcget.package import Package
from smcget.repository import LocalRepository, RemoteRepository
from smcget.ui import UserInterface, AssumeYesInterface, ConflictResolution
from smcget.service import PackageManager

__all__ = [
    "__version__",
    "Config",
    "load_config",
    "SmcGetError",
    "InvalidSpecificationError",
    "NoSuchPackageError",
    "NoSuchResourceError",
    "DownloadFailedError",
    "ConnectionTimedOutError",
    "BrokenPackageError",
    "DependencyConflictError",
    "InvalidRepositoryError",
    "UnsupportedEntryError",
    "ConfigurationError",
    "PackageSpecification",
    "BatchReport",
    "OperationStatus",
    "PackageArchive",
    "Package",
    "LocalRepository",
    "RemoteRepository",
    "UserInterface",
    "AssumeYesInterface",
    "ConflictResolution",
    "PackageManager",
]
