# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Unit Tests for the Package Archive Codec

Tests compressing directory trees to `.smcpak` files and back.
"""

import io
import lzma
import os
import stat
import tarfile

import pytest

from smcget.archive import PackageArchive
from smcget.core.errors import BrokenPackageError, UnsupportedEntryError


@pytest.fixture
def source_tree(tmp_path):
    """A small package-like directory tree"""
    root = tmp_path / "src" / "mypkg"
    (root / "levels" / "sub").mkdir(parents=True)
    (root / "mypkg.yml").write_text("title: x\n")
    (root / "levels" / "one.lvl").write_bytes(b"level one")
    (root / "levels" / "sub" / "two.lvl").write_bytes(b"\x00\x01binary")
    (root / "run.sh").write_text("#!/bin/sh\n")
    os.chmod(root / "run.sh", 0o755)
    os.chmod(root / "levels" / "one.lvl", 0o640)
    return root


def snapshot(root):
    """Relative path -> (content, permission bits) for every file"""
    return {
        path.relative_to(root).as_posix(): (path.read_bytes(), stat.S_IMODE(path.stat().st_mode))
        for path in root.rglob("*")
        if path.is_file()
    }


class TestRoundTrip:
    """Test suite for compress/decompress round trips"""

    def test_round_trip(self, source_tree, tmp_path):
        """Test that paths, contents and permission bits survive"""
        archive = PackageArchive.compress(source_tree, tmp_path / "mypkg.smcpak")
        result = archive.decompress(tmp_path / "out")

        assert result == tmp_path / "out" / "mypkg"
        assert snapshot(result) == snapshot(source_tree)
        assert (result / "levels" / "sub").is_dir()

    def test_toplevel_is_directory_name(self, source_tree, tmp_path):
        """Test that entries are stored below the directory's basename"""
        archive = PackageArchive.compress(source_tree, tmp_path / "mypkg.smcpak")

        with lzma.open(archive.path) as f:
            with tarfile.open(fileobj=io.BytesIO(f.read())) as tar:
                names = tar.getnames()

        assert names[0] == "mypkg"
        assert all(name == "mypkg" or name.startswith("mypkg/") for name in names)

    def test_intermediate_container_removed(self, source_tree, tmp_path):
        PackageArchive.compress(source_tree, tmp_path / "out" / "mypkg.smcpak")
        assert os.listdir(tmp_path / "out") == ["mypkg.smcpak"]

    def test_repeated_decompress_overwrites(self, source_tree, tmp_path):
        """Test that decompressing again replaces the previous result"""
        archive = PackageArchive.compress(source_tree, tmp_path / "mypkg.smcpak")
        first = archive.decompress(tmp_path / "out")
        (first / "stale.txt").write_text("left over")
        (first / "mypkg.yml").write_text("changed")

        second = archive.decompress(tmp_path / "out")

        assert second == first
        assert not (second / "stale.txt").exists()
        assert snapshot(second) == snapshot(source_tree)
        assert not list((tmp_path / "out").glob("*.tar"))


class TestErrors:
    """Test suite for archive error handling"""

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="requires named pipes")
    def test_unsupported_entry(self, source_tree, tmp_path):
        """Test that special files cannot be archived"""
        os.mkfifo(source_tree / "pipe")

        with pytest.raises(UnsupportedEntryError) as exc:
            PackageArchive.compress(source_tree, tmp_path / "mypkg.smcpak")
        assert exc.value.path.name == "pipe"
        assert not (tmp_path / "mypkg.smcpak.tar").exists()

    def test_missing_source(self, tmp_path):
        with pytest.raises(NotADirectoryError):
            PackageArchive.compress(tmp_path / "nothing", tmp_path / "x.smcpak")

    def test_corrupt_archive(self, tmp_path):
        bogus = tmp_path / "bogus.smcpak"
        bogus.write_bytes(b"definitely not xz")

        with pytest.raises(BrokenPackageError):
            PackageArchive(bogus).decompress(tmp_path / "out")

    def test_multiple_toplevel_directories(self, tmp_path):
        """Test that an archive must have exactly one root directory"""
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w") as tar:
            for name in ("one", "two"):
                info = tarfile.TarInfo(name)
                info.type = tarfile.DIRTYPE
                tar.addfile(info)
        path = tmp_path / "two-roots.smcpak"
        path.write_bytes(lzma.compress(buffer.getvalue()))

        with pytest.raises(BrokenPackageError, match="exactly one toplevel"):
            PackageArchive(path).decompress(tmp_path / "out")

    def test_unsafe_paths(self, tmp_path):
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w") as tar:
            data = b"evil"
            info = tarfile.TarInfo("pkg/../../evil.txt")
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
        path = tmp_path / "evil.smcpak"
        path.write_bytes(lzma.compress(buffer.getvalue()))

        with pytest.raises(BrokenPackageError, match="Unsafe path"):
            PackageArchive(path).decompress(tmp_path / "out")
        assert not (tmp_path / "evil.txt").exists()
