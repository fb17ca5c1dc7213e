# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Content category registry.

Maps each content category to the subdirectory it lives in inside a package
archive and the directory it is installed to below the local repository root.
"""

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Dict


@dataclass(frozen=True)
class ContentCategory:
    """One of the five file classes a package may contain."""
    field: str
    archive_dir: str
    local_dir: PurePosixPath


CONTENT_CATEGORIES: Dict[str, ContentCategory] = {
    "levels": ContentCategory("levels", "levels", PurePosixPath("levels")),
    "music": ContentCategory("music", "music", PurePosixPath("music/contrib-music")),
    "sounds": ContentCategory("sounds", "sounds", PurePosixPath("sounds/contrib-sounds")),
    # Graphics are called pixmaps everywhere on disk
    "graphics": ContentCategory("graphics", "pixmaps", PurePosixPath("pixmaps/contrib-graphics")),
    "worlds": ContentCategory("worlds", "worlds", PurePosixPath("world")),
}
