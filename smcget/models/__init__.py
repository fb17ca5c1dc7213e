# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
smc-get Data Models

Package manifests, the content category registry and operation reports.
"""

from .categories import CONTENT_CATEGORIES, ContentCategory
from .specification import (
    PackageSpecification,
    SEARCH_FIELDS,
    SPEC_MANDATORY_KEYS,
    BUILD_MANDATORY_KEYS,
    SPEC_EXTENSION,
    ARCHIVE_EXTENSION,
)
from .reports import (
    OperationStatus,
    OperationType,
    OperationResult,
    BatchReport,
    InstalledPackage,
)

__all__ = [
    "CONTENT_CATEGORIES",
    "ContentCategory",
    "PackageSpecification",
    "SEARCH_FIELDS",
    "SPEC_MANDATORY_KEYS",
    "BUILD_MANDATORY_KEYS",
    "SPEC_EXTENSION",
    "ARCHIVE_EXTENSION",
    "OperationStatus",
    "OperationType",
    "OperationResult",
    "BatchReport",
    "InstalledPackage",
]
