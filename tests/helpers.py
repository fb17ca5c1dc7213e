# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Test helpers

Builders for package sources and on-disk remote repositories, a recording
UI sink and a mock HTTP transport serving a directory.
"""

import shutil
from datetime import datetime, UTC
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional
from urllib.parse import unquote, urlparse

import httpx
import yaml

from smcget.models import CONTENT_CATEGORIES, PackageSpecification
from smcget.package import Package, build_checksums
from smcget.ui import ConflictResolution, UserInterface

OLD = datetime(2024, 1, 1, tzinfo=UTC)
NEW = datetime(2025, 6, 1, tzinfo=UTC)


class RepositoryBuilder:
    """Creates package sources and publishes them as a remote repository."""

    def __init__(self, root: Path):
        self.root = root
        self.sources = root / "sources"
        self.remote_dir = root / "remote"
        (self.remote_dir / "specs").mkdir(parents=True)
        (self.remote_dir / "packages").mkdir(parents=True)
        (self.remote_dir / "packages.lst").write_text("")
        self.sources.mkdir()

    @property
    def uri(self) -> str:
        return self.remote_dir.as_uri()

    def package_dir(
        self,
        name: str,
        dependencies: Iterable[str] = (),
        levels: Optional[Dict[str, bytes]] = None,
        music: Optional[Dict[str, bytes]] = None,
        sounds: Optional[Dict[str, bytes]] = None,
        graphics: Optional[Dict[str, bytes]] = None,
        worlds: Optional[Dict[str, Dict[str, bytes]]] = None,
        last_update: Optional[datetime] = OLD,
        **extra
    ) -> Path:
        """Write a complete package source directory with checksums."""
        if levels is None:
            levels = {f"{name}.lvl": f"level of {name}".encode()}
        content = {
            "levels": levels,
            "music": music or {},
            "sounds": sounds or {},
            "graphics": graphics or {},
        }

        directory = self.sources / name
        if directory.exists():
            shutil.rmtree(directory)
        directory.mkdir(parents=True)

        for category, files in content.items():
            for filename, data in files.items():
                path = directory / CONTENT_CATEGORIES[category].archive_dir / filename
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_bytes(data)
        for world, files in (worlds or {}).items():
            for filename, data in files.items():
                path = directory / "worlds" / world / filename
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_bytes(data)

        document = {
            "title": f"The {name} package",
            "authors": ["Tester"],
            "difficulty": "easy",
            "description": f"Description of {name}",
            "dependencies": list(dependencies),
            **{category: list(files) for category, files in content.items()},
            "worlds": list(worlds or {}),
        }
        if last_update is not None:
            document["last_update"] = last_update
        document.update(extra)

        spec = PackageSpecification.from_document(document, name)
        document["checksums"] = build_checksums(directory, spec)
        with open(directory / f"{name}.yml", "w") as f:
            yaml.safe_dump(document, f, default_flow_style=False, sort_keys=False)
        return directory

    def archive(self, name: str, **kwargs) -> Path:
        """Build a bare `.smcpak` file."""
        directory = self.package_dir(name, **kwargs)
        return Package.create(directory, self.root / "archives" / f"{name}.smcpak").location

    def publish(self, name: str, with_archive: bool = True, **kwargs) -> Path:
        """Build a package and publish it into the remote repository."""
        directory = self.package_dir(name, **kwargs)
        shutil.copy2(directory / f"{name}.yml", self.remote_dir / "specs" / f"{name}.yml")
        if with_archive:
            Package.create(directory, self.remote_dir / "packages" / f"{name}.smcpak")
        self.list_name(name)
        return directory

    def list_name(self, name: str):
        listing = self.remote_dir / "packages.lst"
        names = listing.read_text().split()
        if name not in names:
            names.append(name)
            listing.write_text("\n".join(names) + "\n")


class RecordingInterface(UserInterface):
    """UI sink remembering everything it was told."""

    def __init__(self, confirm: bool = False, resolution: ConflictResolution = ConflictResolution.PRESERVE):
        self.notices: List[str] = []
        self.warnings: List[str] = []
        self.progress_calls: List[tuple] = []
        self.retries: List[int] = []
        self.questions: List[str] = []
        self.conflicts: List[Path] = []
        self._confirm = confirm
        self._resolution = resolution

    def notify(self, message: str):
        self.notices.append(message)

    def warn(self, message: str):
        self.warnings.append(message)

    def progress(self, name, total, done):
        self.progress_calls.append((name, total, done))

    def retrying(self, error, attempt):
        self.retries.append(attempt)

    def confirm(self, question: str) -> bool:
        self.questions.append(question)
        return self._confirm

    def resolve_conflict(self, path: Path) -> ConflictResolution:
        self.conflicts.append(path)
        return self._resolution


def serve_directory(
    root: Path,
    failures: Optional[Dict[str, Callable[[httpx.Request], httpx.Response]]] = None,
    requests: Optional[List[str]] = None
) -> httpx.MockTransport:
    """
    Mock HTTP transport answering from a directory.

    `failures` maps URL paths to handlers used instead of the file content.
    Every requested path is appended to `requests`.
    """
    failures = failures or {}

    def handler(request: httpx.Request) -> httpx.Response:
        path = unquote(urlparse(str(request.url)).path)
        if requests is not None:
            requests.append(path)
        if path in failures:
            return failures[path](request)
        target = root / path.lstrip("/")
        if not target.is_file():
            return httpx.Response(404)
        return httpx.Response(200, content=target.read_bytes())

    return httpx.MockTransport(handler)
