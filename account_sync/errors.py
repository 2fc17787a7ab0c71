"""
Record store error kinds.
Raised by store adapters; the resolver and record operations let them
propagate unchanged.
"""
from typing import Any, Dict, List, Optional


class RecordStoreError(Exception):
    """Base error for any failed call against a record store."""

    def __init__(self, message: str, sobject: Optional[str] = None):
        super().__init__(message)
        self.sobject = sobject


class WriteFailed(RecordStoreError):
    """The store rejected an insert/update/upsert/delete."""

    def __init__(
        self,
        message: str,
        sobject: Optional[str] = None,
        failures: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message, sobject)
        # Each failure: {"index": position in the batch, "errors": [...]}
        self.failures = failures or []


class PartialBatchFailure(WriteFailed):
    """Some records of a bulk write succeeded, others failed."""

    def __init__(
        self,
        message: str,
        sobject: Optional[str] = None,
        failures: Optional[List[Dict[str, Any]]] = None,
        succeeded_ids: Optional[List[str]] = None,
    ):
        super().__init__(message, sobject, failures)
        self.succeeded_ids = succeeded_ids or []
