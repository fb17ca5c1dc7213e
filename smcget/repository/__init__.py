# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Package repositories: the local installation and remote publication points.
"""

from .base import Repository, SearchResults
from .local import LocalRepository
from .remote import RemoteRepository

__all__ = [
    "Repository",
    "SearchResults",
    "LocalRepository",
    "RemoteRepository",
]
