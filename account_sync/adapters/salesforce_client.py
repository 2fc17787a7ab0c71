"""
Salesforce Record Store.
Uses the 'simple-salesforce' library with Username-Password OAuth flow.
Queries go through SOQL, writes through the Bulk API so a whole batch is
one platform call.
"""
import os
import logging
from datetime import date
from decimal import Decimal
from typing import Any, List, Optional, Sequence, Type

from simple_salesforce import Salesforce, format_soql

from ..errors import PartialBatchFailure, WriteFailed
from ..records import Record
from .base import RecordStore, batch_type, require_ids

logger = logging.getLogger(__name__)


class SalesforceRecordStore(RecordStore):
    """
    Salesforce record store using Username-Password authentication.

    Requires env vars (unless an authenticated client is passed in):
      SALESFORCE_USERNAME
      SALESFORCE_PASSWORD
      SALESFORCE_SECURITY_TOKEN
    Optional:
      SALESFORCE_DOMAIN ("login" for production, "test" for sandboxes)
    """

    def __init__(self, sf: Optional[Salesforce] = None):
        if sf is not None:
            self.sf = sf
            return

        username = os.getenv("SALESFORCE_USERNAME")
        password = os.getenv("SALESFORCE_PASSWORD")
        security_token = os.getenv("SALESFORCE_SECURITY_TOKEN")
        domain = os.getenv("SALESFORCE_DOMAIN", "login")

        if not all([username, password, security_token]):
            raise ValueError(
                "Salesforce credentials not fully set. "
                "Need: SALESFORCE_USERNAME, SALESFORCE_PASSWORD, SALESFORCE_SECURITY_TOKEN"
            )

        try:
            self.sf = Salesforce(
                username=username,
                password=password,
                security_token=security_token,
                domain=domain,
            )
            logger.info("✅ Salesforce record store initialized")
        except Exception as e:
            logger.error(f"❌ Salesforce auth failed: {e}")
            raise

    def find(
        self,
        record_type: Type[Record],
        field: str,
        value: Any,
        fields: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
    ) -> List[Record]:
        """Run an equality SOQL query and validate the rows into records."""
        selected = fields if fields is not None else list(record_type.model_fields)
        columns = ["Id"] + [
            record_type.api_name(name) for name in selected if name != "id"
        ]

        query = (
            f"SELECT {', '.join(columns)} FROM {record_type.sobject} "
            f"WHERE {record_type.api_name(field)} = {{value}}"
        )
        if limit is not None:
            query += f" LIMIT {int(limit)}"
        soql = format_soql(query, value=value)

        try:
            results = self.sf.query_all(soql)
        except Exception as e:
            logger.error(f"❌ Salesforce query error on {record_type.sobject}: {e}")
            raise

        return [record_type.model_validate(row) for row in results.get("records", [])]

    def insert(self, records: Sequence[Record]) -> List[Record]:
        if not records:
            return []
        record_type = batch_type(records)
        payload = [_to_payload(record, include_id=False) for record in records]
        results = self._bulk(record_type, "insert", payload)
        _assign_ids(records, results)
        _check_results(record_type, "insert", results)
        logger.info(f"✅ Salesforce {record_type.sobject} inserted: {len(records)} record(s)")
        return list(records)

    def update(self, records: Sequence[Record]) -> None:
        if not records:
            return
        record_type = batch_type(records)
        require_ids(record_type, records)
        payload = [_to_payload(record, include_id=True) for record in records]
        results = self._bulk(record_type, "update", payload)
        _check_results(record_type, "update", results)
        logger.info(f"✅ Salesforce {record_type.sobject} updated: {len(records)} record(s)")

    def upsert(self, records: Sequence[Record]) -> List[Record]:
        if not records:
            return []
        record_type = batch_type(records)
        payload = [_to_payload(record, include_id=True) for record in records]
        results = self._bulk(record_type, "upsert", payload, "Id")
        _assign_ids(records, results)
        _check_results(record_type, "upsert", results)
        logger.info(f"✅ Salesforce {record_type.sobject} upserted: {len(records)} record(s)")
        return list(records)

    def delete(self, records: Sequence[Record]) -> None:
        if not records:
            return
        record_type = batch_type(records)
        require_ids(record_type, records)
        payload = [{"Id": record.id} for record in records]
        results = self._bulk(record_type, "delete", payload)
        _check_results(record_type, "delete", results)
        logger.info(f"🗑️ Salesforce {record_type.sobject} deleted: {len(records)} record(s)")

    def _bulk(self, record_type: Type[Record], operation: str, payload: list, *args) -> list:
        """Send one Bulk API job for `operation` and return per-record results."""
        handler = getattr(self.sf.bulk, record_type.sobject)
        try:
            return getattr(handler, operation)(payload, *args)
        except Exception as e:
            logger.error(f"❌ Salesforce {record_type.sobject} {operation} error: {e}")
            raise


def _to_payload(record: Record, include_id: bool) -> dict:
    """Serialize a record into a Salesforce field map."""
    data = record.model_dump(by_alias=True, exclude_none=True)
    if not include_id:
        data.pop("Id", None)
    for key, value in data.items():
        if isinstance(value, date):
            data[key] = value.isoformat()
        elif isinstance(value, Decimal):
            data[key] = str(value)
    return data


def _assign_ids(records: Sequence[Record], results: list) -> None:
    for record, result in zip(records, results):
        if result.get("success") and result.get("id"):
            record.id = result["id"]


def _check_results(record_type: Type[Record], operation: str, results: list) -> None:
    """Raise WriteFailed / PartialBatchFailure when any record was rejected."""
    failures = [
        {"index": index, "errors": result.get("errors", [])}
        for index, result in enumerate(results)
        if not result.get("success")
    ]
    if not failures:
        return

    sobject = record_type.sobject
    if len(failures) == len(results):
        logger.error(f"❌ Salesforce {sobject} {operation} rejected: {failures}")
        raise WriteFailed(
            f"{sobject} {operation} failed for all {len(results)} record(s)",
            sobject=sobject,
            failures=failures,
        )

    succeeded_ids = [result["id"] for result in results if result.get("success")]
    logger.warning(
        f"⚠️ Salesforce {sobject} {operation} partially failed: "
        f"{len(failures)} of {len(results)} record(s)"
    )
    raise PartialBatchFailure(
        f"{sobject} {operation} failed for {len(failures)} of {len(results)} record(s)",
        sobject=sobject,
        failures=failures,
        succeeded_ids=succeeded_ids,
    )
