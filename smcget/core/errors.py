# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Custom exceptions for smc-get.

All exceptions inherit from SmcGetError. Batch operations catch SmcGetError
per package; anything else aborts the whole run.
"""

from pathlib import Path
from typing import List, Optional, Union


class SmcGetError(Exception):
    """Base exception for all smc-get errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        """
        Initialize smc-get error.

        Args:
            message: Human-readable error message
            details: Additional error details
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert error to dictionary for reports."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


class InvalidSpecificationError(SmcGetError):
    """Malformed or incomplete package manifest."""

    def __init__(self, message: str, key: Optional[str] = None, details: Optional[dict] = None):
        """
        Initialize invalid specification error.

        Args:
            message: Validation error message
            key: Manifest key that failed validation
            details: Additional error details
        """
        super().__init__(message, details=details)
        self.key = key


class NoSuchPackageError(SmcGetError):
    """Package is not part of a repository's package set."""

    def __init__(self, name: str, message: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message or f"Package not found: {name}", details=details)
        self.package_name = name


class NoSuchResourceError(SmcGetError):
    """A named sub-resource (spec, content file) of a package is missing."""

    def __init__(self, kind: str, name: str, message: Optional[str] = None, details: Optional[dict] = None):
        """
        Initialize missing resource error.

        Args:
            kind: Resource kind (spec, levels, music, ...)
            name: Resource name (e.g. mylevel.lvl or Stuff/Cheeseburger.png)
            message: Optional message overriding the default one
            details: Additional error details
        """
        super().__init__(message or f"{kind} resource not found: {name}", details=details)
        self.resource_type = kind
        self.resource_name = name


class DownloadFailedError(SmcGetError):
    """A single fetch failed. Transient: callers may retry."""

    def __init__(
        self,
        url: str,
        reason: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[dict] = None
    ):
        message = f"Download failed: {url}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, details=details)
        self.download_url = url
        self.reason = reason
        self.status_code = status_code


class ConnectionTimedOutError(DownloadFailedError):
    """Connecting to the server timed out. Fatal: never retried."""

    def __init__(self, url: str, details: Optional[dict] = None):
        super().__init__(url, reason="connection timed out", details=details)


class BrokenPackageError(SmcGetError):
    """Structural violation detected while building or validating a package."""


class DependencyConflictError(BrokenPackageError):
    """Removing a package would break packages depending on it."""

    def __init__(self, name: str, dependents: List[str]):
        super().__init__(
            f"Can't uninstall {name}: required by {', '.join(dependents)}",
            details={"dependents": list(dependents)}
        )
        self.package_name = name
        self.dependents = list(dependents)


class InvalidRepositoryError(SmcGetError):
    """Repository is unreachable or does not follow the repository layout."""

    def __init__(self, uri: str, reason: Optional[str] = None):
        message = f"Invalid repository: {uri}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.uri = uri


class UnsupportedEntryError(SmcGetError):
    """Filesystem entry that cannot be stored in a package archive."""

    def __init__(self, path: Union[str, Path]):
        super().__init__(f"Unsupported file type for {path}")
        self.path = Path(path)


class ConfigurationError(SmcGetError):
    """Configuration error."""

    def __init__(self, message: str, config_file: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message, details=details)
        self.config_file = config_file
