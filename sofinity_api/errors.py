from __future__ import annotations

from typing import Optional


class WorkflowError(Exception):
    """Base for failures of the missing-events workflow."""


class ConfigurationError(WorkflowError):
    """Store configuration missing, or no profiles to attach events to."""


class PersistenceError(WorkflowError):
    """The EventLogs batch insert was rejected."""


class AuditWriteError(WorkflowError):
    """The audit_logs insert failed. Never fatal."""


class StoreError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
