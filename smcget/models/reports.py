# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Operation Report Models

Outcome records for batch install, uninstall and update runs. A failed item
is an expected outcome, recorded here instead of raised.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class OperationStatus(str, Enum):
    """Outcome of one package within a batch"""
    INSTALLED = "installed"
    REINSTALLED = "reinstalled"
    SKIPPED = "skipped"
    UNINSTALLED = "uninstalled"
    UPDATED = "updated"
    UP_TO_DATE = "up_to_date"
    FAILED = "failed"


class OperationType(str, Enum):
    """Type of batch operation"""
    INSTALL = "install"
    UNINSTALL = "uninstall"
    UPDATE = "update"


class OperationResult(BaseModel):
    """Result for a single requested package"""
    name: str
    status: OperationStatus
    message: Optional[str] = None
    error: Optional[Dict[str, Any]] = None
    installed: List[str] = Field(default_factory=list)


class BatchReport(BaseModel):
    """Results of a batch operation in request order"""
    operation: OperationType
    results: List[OperationResult] = Field(default_factory=list)

    @property
    def succeeded(self) -> List[OperationResult]:
        return [r for r in self.results if r.status != OperationStatus.FAILED]

    @property
    def failed(self) -> List[OperationResult]:
        return [r for r in self.results if r.status == OperationStatus.FAILED]

    @property
    def ok(self) -> bool:
        return not self.failed

    def get(self, name: str) -> Optional[OperationResult]:
        for result in self.results:
            if result.name == name:
                return result
        return None


class InstalledPackage(BaseModel):
    """Entry of the installed package listing"""
    name: str
    title: str
    installed_at: datetime
