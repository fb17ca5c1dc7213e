# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Unit Tests for the Uninstaller

Tests dependent checks, conflict handling and batch removal.
"""

import pytest

from smcget.core.errors import DependencyConflictError, NoSuchPackageError
from smcget.models import OperationStatus
from smcget.operations import Uninstaller
from smcget.ui import AssumeYesInterface, ConflictResolution

from helpers import RecordingInterface


@pytest.fixture
def installed(builder, install_local):
    """Local repository with `base` and `addon` (depending on base)"""
    install_local(builder.archive("base", remove_message="Thanks for playing"))
    install_local(builder.archive("addon", dependencies=["base"]))


class TestUninstall:
    """Test suite for Uninstaller.uninstall"""

    def test_simple(self, local_repo, installed, ui):
        uninstaller = Uninstaller(local_repo, ui)

        assert uninstaller.uninstall("addon") == []
        assert local_repo.package_names == ["base"]
        assert not (local_repo.root / "levels" / "addon.lvl").exists()

    def test_dependents(self, local_repo, installed):
        assert Uninstaller(local_repo).dependents("base") == ["addon"]
        assert Uninstaller(local_repo).dependents("addon") == []

    def test_dependency_conflict_refused(self, local_repo, installed, ui):
        """Test that removing a needed package requires confirmation"""
        with pytest.raises(DependencyConflictError) as exc:
            Uninstaller(local_repo, ui).uninstall("base")

        assert exc.value.dependents == ["addon"]
        assert len(ui.questions) == 1
        assert local_repo.contains("base")
        assert (local_repo.root / "levels" / "base.lvl").is_file()

    def test_dependency_conflict_confirmed(self, local_repo, installed):
        Uninstaller(local_repo, AssumeYesInterface()).uninstall("base")
        assert not local_repo.contains("base")

    def test_ignore_dependents(self, local_repo, installed, ui):
        Uninstaller(local_repo, ui).uninstall("base", ignore_dependents=True)

        assert ui.questions == []
        assert not local_repo.contains("base")

    def test_remove_message(self, local_repo, installed, ui):
        Uninstaller(local_repo, ui).uninstall("base", ignore_dependents=True)
        assert "Thanks for playing" in ui.notices

    def test_unknown_package(self, local_repo):
        with pytest.raises(NoSuchPackageError):
            Uninstaller(local_repo).uninstall("ghost")

    def test_conflicts_resolved_by_ui(self, local_repo, installed):
        """Test that modified files are handed to the UI"""
        level = local_repo.root / "levels" / "addon.lvl"
        level.write_bytes(b"tweaked")
        ui = RecordingInterface(resolution=ConflictResolution.PRESERVE)

        preserved = Uninstaller(local_repo, ui).uninstall("addon")

        assert ui.conflicts == [level]
        assert preserved == [local_repo.root / "levels" / "addon.MODIFIED.lvl"]
        assert any("addon.MODIFIED.lvl" in notice for notice in ui.notices)

    def test_ignore_conflicts(self, local_repo, installed, ui):
        """Test that ignoring conflicts deletes without asking"""
        level = local_repo.root / "levels" / "addon.lvl"
        level.write_bytes(b"tweaked")

        assert Uninstaller(local_repo, ui).uninstall("addon", ignore_conflicts=True) == []
        assert ui.conflicts == []
        assert not level.exists()


class TestBatchUninstall:
    """Test suite for Uninstaller.uninstall_many"""

    def test_failures_do_not_abort(self, local_repo, installed, ui):
        report = Uninstaller(local_repo, ui).uninstall_many(["ghost", "base", "addon"])

        assert report.get("ghost").status == OperationStatus.FAILED
        assert report.get("base").status == OperationStatus.FAILED
        assert report.get("base").error["error"] == "DependencyConflictError"
        assert report.get("addon").status == OperationStatus.UNINSTALLED
        assert local_repo.package_names == ["base"]
