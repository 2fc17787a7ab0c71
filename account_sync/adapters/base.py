"""
Abstract Record Store for CRM backends.
All backends (Salesforce, the local SQL database) must implement this interface.
"""
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence, Type

from ..records import Record


class RecordStore(ABC):
    """
    Abstract record store interface.

    The account resolver and the record operations only talk to this
    interface, so backends can be swapped without changing business logic.
    Every write call is one request to the backing store; an empty batch
    is a no-op. A batch must hold records of a single type.
    """

    @abstractmethod
    def find(
        self,
        record_type: Type[Record],
        field: str,
        value: Any,
        fields: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
    ) -> List[Record]:
        """
        Find records whose `field` equals `value`.

        Args:
            record_type: Record class to query (Account, Contact, ...).
            field: Python field name to filter on.
            value: Value the field must equal.
            fields: Optional projection. `id` is always returned.
            limit: Optional cap on the number of results.

        Returns:
            List of records in the store's default ordering.
        """
        ...

    @abstractmethod
    def insert(self, records: Sequence[Record]) -> List[Record]:
        """
        Insert new records.

        Returns:
            The same records, each carrying its generated id.

        Raises:
            WriteFailed / PartialBatchFailure on rejection.
        """
        ...

    @abstractmethod
    def update(self, records: Sequence[Record]) -> None:
        """Update existing records. Every record must carry an id."""
        ...

    @abstractmethod
    def upsert(self, records: Sequence[Record]) -> List[Record]:
        """
        Insert records without an id, update records with one.

        Returns:
            The same records, newly inserted ones carrying their id.
        """
        ...

    @abstractmethod
    def delete(self, records: Sequence[Record]) -> None:
        """Delete records by id."""
        ...


def require_ids(record_type: Type[Record], records: Sequence[Record]) -> None:
    """Updates and deletes address records by id only."""
    missing = [index for index, record in enumerate(records) if not record.id]
    if missing:
        raise ValueError(
            f"{record_type.sobject} records at positions {missing} have no Id"
        )


def batch_type(records: Sequence[Record]) -> Type[Record]:
    """Record class of a homogeneous, non-empty batch."""
    record_type = type(records[0])
    for record in records:
        if type(record) is not record_type:
            raise ValueError(
                f"Mixed record types in one batch: {record_type.__name__} "
                f"and {type(record).__name__}"
            )
    return record_type
