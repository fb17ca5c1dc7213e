# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Package operations: install, uninstall and update.
"""

from .installer import Installer
from .uninstaller import Uninstaller
from .updater import Updater, is_newer

__all__ = ["Installer", "Uninstaller", "Updater", "is_newer"]
