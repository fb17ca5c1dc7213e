# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Unit Tests for Packages

Tests building packages from source directories and opening archives.
"""

import hashlib

import pytest
import yaml

from smcget.core.errors import BrokenPackageError
from smcget.package import Package, build_checksums, file_checksum
from smcget.models import PackageSpecification
from smcget.repository import RemoteRepository


def rewrite_spec(directory, **changes):
    spec_file = directory / f"{directory.name}.yml"
    document = yaml.safe_load(spec_file.read_text())
    for key, value in changes.items():
        if value is None:
            document.pop(key, None)
        else:
            document[key] = value
    spec_file.write_text(yaml.safe_dump(document))


class TestChecksums:
    """Test suite for checksum calculation"""

    def test_file_checksum(self, tmp_path):
        path = tmp_path / "f"
        path.write_bytes(b"hello")
        assert file_checksum(path) == hashlib.sha1(b"hello").hexdigest()

    def test_build_checksums(self, builder):
        """Test that worlds map to per-file checksums"""
        directory = builder.package_dir(
            "pkg",
            graphics={"a.png": b"png"},
            worlds={"w": {"world.xml": b"<w/>", "layer.xml": b"<l/>"}}
        )
        spec = PackageSpecification.from_file(directory / "pkg.yml")

        checksums = build_checksums(directory, spec)

        assert checksums["levels"]["pkg.lvl"] == hashlib.sha1(b"level of pkg").hexdigest()
        assert checksums["graphics"]["a.png"] == hashlib.sha1(b"png").hexdigest()
        assert checksums["worlds"]["w"] == {
            "layer.xml": hashlib.sha1(b"<l/>").hexdigest(),
            "world.xml": hashlib.sha1(b"<w/>").hexdigest(),
        }
        assert "music" not in checksums


class TestCreate:
    """Test suite for Package.create"""

    def test_create(self, builder):
        """Test that a valid directory is compressed next to itself"""
        directory = builder.package_dir("pkg")

        package = Package.create(directory)

        assert package.location == directory.parent / "pkg.smcpak"
        assert package.location.is_file()
        assert package.name == "pkg"
        assert not package.remote

    def test_create_with_destination(self, builder, tmp_path):
        package = Package.create(builder.package_dir("pkg"), tmp_path / "dist" / "out.smcpak")
        assert package.location == tmp_path / "dist" / "out.smcpak"

    def test_missing_spec(self, tmp_path):
        (tmp_path / "pkg").mkdir()
        with pytest.raises(BrokenPackageError, match="pkg.yml"):
            Package.create(tmp_path / "pkg")

    @pytest.mark.parametrize("key", ["title", "last_update", "checksums"])
    def test_missing_keys(self, builder, key):
        directory = builder.package_dir("pkg")
        rewrite_spec(directory, **{key: None})

        with pytest.raises(BrokenPackageError, match=key):
            Package.create(directory)

    def test_missing_content_file(self, builder):
        directory = builder.package_dir("pkg")
        (directory / "levels" / "pkg.lvl").unlink()

        with pytest.raises(BrokenPackageError, match="pkg.lvl"):
            Package.create(directory)

    def test_checksum_mismatch(self, builder):
        directory = builder.package_dir("pkg")
        (directory / "levels" / "pkg.lvl").write_bytes(b"changed after build")

        with pytest.raises(BrokenPackageError, match="Checksum mismatch"):
            Package.create(directory)

    def test_unrecorded_checksum(self, builder):
        directory = builder.package_dir("pkg")
        rewrite_spec(directory, checksums={})

        with pytest.raises(BrokenPackageError, match="No checksum recorded"):
            Package.create(directory)


class TestOpen:
    """Test suite for opening packages"""

    def test_from_file(self, builder, tmp_path):
        archive = builder.archive("pkg", dependencies=["other"])

        package = Package.from_file(archive, tmp_path / "scratch")

        assert package.name == "pkg"
        assert package.spec.dependencies == ["other"]
        assert package.location == archive
        calls = []
        assert package.fetch(tmp_path / "unused", lambda t, d: calls.append((t, d))) == archive
        assert calls == [(archive.stat().st_size, archive.stat().st_size)]

    def test_from_file_without_spec(self, tmp_path):
        from smcget.archive import PackageArchive
        source = tmp_path / "src" / "pkg"
        source.mkdir(parents=True)
        (source / "README.txt").write_text("no manifest")
        archive = PackageArchive.compress(source, tmp_path / "pkg.smcpak")

        with pytest.raises(BrokenPackageError):
            Package.from_file(archive.path, tmp_path / "scratch")

    def test_from_repository(self, builder, tmp_path):
        """Test that repository packages are remote until fetched"""
        builder.publish("pkg")
        repo = RemoteRepository(builder.uri)

        package = Package.from_repository(repo, "pkg", tmp_path / "specs")
        assert package.remote
        assert package.location is None
        with pytest.raises(BrokenPackageError):
            package.decompress(tmp_path / "out")

        path = package.fetch(tmp_path / "archives")
        assert path == tmp_path / "archives" / "pkg.smcpak"
        assert (package.decompress(tmp_path / "out") / "pkg.yml").is_file()

    def test_needs_location(self):
        spec = PackageSpecification.from_document(
            {"title": "t", "authors": ["a"], "difficulty": "d", "description": "x"}, "pkg"
        )
        with pytest.raises(ValueError):
            Package(spec)
