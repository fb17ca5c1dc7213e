# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Repository contract

Common interface of the local installation and remote publication points.
"""

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Pattern, Union

from smcget.core.errors import SmcGetError
from smcget.downloader import ProgressCallback
from smcget.models import SEARCH_FIELDS, PackageSpecification

logger = logging.getLogger(__name__)


class SearchResults:
    """
    Lazy search over a repository.

    Iterating starts a fresh search, so results can be consumed more than
    once. Package names are yielded in repository order, each at most once.
    """

    def __init__(self, repository: "Repository", pattern: Pattern, fields: List[str]):
        self.repository = repository
        self.pattern = pattern
        self.fields = fields

    def __iter__(self) -> Iterator[str]:
        needs_spec = [f for f in self.fields if f != "name"]

        for name in list(self.repository.package_names):
            if "name" in self.fields and self.pattern.search(name):
                yield name
                continue
            if not needs_spec:
                continue

            try:
                spec = self.repository.load_spec(name)
            except SmcGetError as e:
                logger.warning(f"Skipping {name} while searching {self.repository}: {e.message}")
                continue

            if any(
                self.pattern.search(value)
                for field in needs_spec
                for value in SEARCH_FIELDS[field](spec)
            ):
                yield name

    def __repr__(self) -> str:
        return f"SearchResults({self.repository}, {self.pattern.pattern!r}, {self.fields})"


class Repository(ABC):
    """A source of packages."""

    # True only for the write-capable local store
    is_local = False

    @property
    @abstractmethod
    def package_names(self) -> List[str]:
        """Names of all packages in this repository."""

    @abstractmethod
    def fetch_spec(self, name: str, directory: Union[str, Path]) -> Path:
        """
        Copy the manifest of `name` into `directory`.

        Raises:
            NoSuchResourceError: If `name` is not part of the repository
        """

    @abstractmethod
    def fetch_archive(
        self,
        name: str,
        directory: Union[str, Path],
        progress: Optional[ProgressCallback] = None
    ) -> Path:
        """
        Copy the archive of `name` into `directory`.

        `progress(total, done)` is called at least once with done == total
        on success.

        Raises:
            NoSuchPackageError: If `name` is not part of the repository
        """

    @abstractmethod
    def load_spec(self, name: str) -> PackageSpecification:
        """Parsed manifest of `name`."""

    def contains(self, name: str) -> bool:
        return name in self.package_names

    def __contains__(self, name: str) -> bool:
        return self.contains(name)

    def search(self, pattern: Union[str, Pattern], fields: Iterable[str] = ("name",)) -> SearchResults:
        """
        Search for packages matching a regular expression.

        A package matches if any of the requested manifest fields does.
        Searching the name alone never loads a manifest.

        Args:
            pattern: Regular expression
            fields: Manifest fields to match against (see SEARCH_FIELDS)

        Returns:
            Lazy, restartable iterable of package names
        """
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern

        known = []
        for field in fields:
            if field not in SEARCH_FIELDS:
                logger.warning(f"Ignoring unknown search field: {field}")
            elif field not in known:
                known.append(field)

        return SearchResults(self, regex, known)

    def install(self, package, progress: Optional[ProgressCallback] = None):
        raise NotImplementedError(f"{type(self).__name__} does not support installing packages")

    def uninstall(self, name: str, conflict_resolver=None):
        raise NotImplementedError(f"{type(self).__name__} does not support uninstalling packages")
