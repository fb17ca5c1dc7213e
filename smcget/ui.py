# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
User interface sink

Receives notices, progress updates and questions from package operations.
Front ends subclass UserInterface; the default answers every question
conservatively and only logs.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

from smcget.core.errors import SmcGetError

logger = logging.getLogger(__name__)


class ConflictResolution(Enum):
    """What to do with a locally modified file during uninstall"""
    DELETE = "delete"
    PRESERVE = "preserve"


class UserInterface:
    """Default sink: logs everything, confirms nothing, keeps modified files."""

    def notify(self, message: str):
        logger.info(message)

    def warn(self, message: str):
        logger.warning(message)

    def progress(self, name: str, total: Optional[int], done: int):
        if total is not None and total == done:
            logger.debug(f"{name}: {done} bytes transferred")

    def retrying(self, error: SmcGetError, attempt: int):
        logger.warning(f"{error.message}; starting attempt {attempt}")

    def confirm(self, question: str) -> bool:
        logger.info(f"{question} -> no")
        return False

    def resolve_conflict(self, path: Path) -> ConflictResolution:
        logger.info(f"{path} was modified, keeping a copy")
        return ConflictResolution.PRESERVE


class AssumeYesInterface(UserInterface):
    """Confirms every question and deletes modified files."""

    def confirm(self, question: str) -> bool:
        logger.info(f"{question} -> yes")
        return True

    def resolve_conflict(self, path: Path) -> ConflictResolution:
        return ConflictResolution.DELETE
