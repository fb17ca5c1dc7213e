# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Package Archive

Compression and decompression of `.smcpak` files (TAR containers compressed
with XZ). No validation of the package layout happens here; see
Package.create for that.
"""

import logging
import lzma
import os
import shutil
import stat
import tarfile
from pathlib import Path, PurePosixPath
from typing import Iterator, Union

from smcget.core.errors import BrokenPackageError, UnsupportedEntryError

logger = logging.getLogger(__name__)

# Number of bytes to copy at a time
CHUNK_SIZE = 64 * 1024


class PackageArchive:
    """A compressed package file on disk."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"PackageArchive({self.path})"

    @classmethod
    def compress(cls, directory: Union[str, Path], goal_file: Union[str, Path]) -> "PackageArchive":
        """
        Compress `directory` into `goal_file`.

        The directory itself becomes the single toplevel entry of the
        archive, so `/home/freak/foo` is stored as `foo/...`, never with an
        absolute prefix or as `./...`.

        Args:
            directory: Directory to compress
            goal_file: Path of the archive to create

        Returns:
            Handle to the compressed archive

        Raises:
            UnsupportedEntryError: If the tree contains something other than
                                   regular files and directories
        """
        directory = Path(directory).resolve()
        if not directory.is_dir():
            raise NotADirectoryError(f"{directory} is not a directory")

        xz_file = Path(goal_file).resolve()
        tar_file = xz_file.with_name(xz_file.name + ".tar")
        xz_file.parent.mkdir(parents=True, exist_ok=True)

        try:
            with tarfile.open(tar_file, "w", format=tarfile.PAX_FORMAT) as tar:
                for entry in _walk(directory):
                    _add_entry(tar, entry, directory.parent)

            with open(tar_file, "rb") as src, lzma.open(xz_file, "wb", preset=6) as dst:
                shutil.copyfileobj(src, dst, CHUNK_SIZE)
        finally:
            tar_file.unlink(missing_ok=True)

        logger.debug(f"Compressed {directory} into {xz_file}")
        return cls(xz_file)

    def decompress(self, directory: Union[str, Path]) -> Path:
        """
        Decompress this archive below `directory`.

        Extracting the same archive again replaces the previous result.

        Args:
            directory: Where to extract to; a subdirectory named after the
                       package is created below it

        Returns:
            Path to the package directory

        Raises:
            BrokenPackageError: If the file is not a valid archive or does
                                not consist of exactly one toplevel directory
        """
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        tar_file = directory / (self.path.name + ".tar")

        try:
            with lzma.open(self.path, "rb") as src, open(tar_file, "wb") as dst:
                shutil.copyfileobj(src, dst, CHUNK_SIZE)

            with tarfile.open(tar_file, "r:") as tar:
                root = self._check_members(tar)
                dest_dir = directory / root
                if dest_dir.exists():
                    shutil.rmtree(dest_dir)
                # Members were checked above; keep permission bits exactly
                tar.extractall(directory, filter="fully_trusted")
        except (lzma.LZMAError, tarfile.TarError, EOFError) as e:
            raise BrokenPackageError(f"Cannot decompress {self.path}: {e}")
        finally:
            tar_file.unlink(missing_ok=True)

        logger.debug(f"Decompressed {self.path} into {dest_dir}")
        return dest_dir

    def _check_members(self, tar: tarfile.TarFile) -> str:
        """Ensure all members live below one relative toplevel directory."""
        roots = set()
        for member in tar.getmembers():
            path = PurePosixPath(member.name)
            if path.is_absolute() or ".." in path.parts:
                raise BrokenPackageError(f"Unsafe path in {self.path}: {member.name}")
            if not (member.isfile() or member.isdir()):
                raise BrokenPackageError(f"Unsupported entry in {self.path}: {member.name}")
            roots.add(path.parts[0])

        if len(roots) != 1:
            raise BrokenPackageError(
                f"{self.path} must contain exactly one toplevel directory, found {sorted(roots)}"
            )
        return roots.pop()


def _walk(path: Path) -> Iterator[Path]:
    """Yield `path` and everything below it, directories before their content."""
    yield path
    if path.is_dir():
        for child in sorted(path.iterdir()):
            yield from _walk(child)


def _add_entry(tar: tarfile.TarFile, entry: Path, base: Path) -> None:
    # stat follows symlinks, a link is stored as what it points to
    st = entry.stat()
    info = tarfile.TarInfo(entry.relative_to(base).as_posix())
    info.mode = stat.S_IMODE(st.st_mode)
    info.mtime = int(st.st_mtime)
    if hasattr(os, "getuid"):
        info.uid = st.st_uid
        info.gid = st.st_gid

    if stat.S_ISDIR(st.st_mode):
        info.type = tarfile.DIRTYPE
        tar.addfile(info)
    elif stat.S_ISREG(st.st_mode):
        info.type = tarfile.REGTYPE
        info.size = st.st_size
        with open(entry, "rb") as f:
            tar.addfile(info, f)
    else:
        raise UnsupportedEntryError(entry)
