"""
SQL Record Store.
Keeps records in a local database through SQLAlchemy. Used when no hosted
CRM is configured and as the backing store in tests.
Each store call runs in its own session and commits before returning, so a
bulk write is all-or-none.
"""
import logging
from typing import Any, List, Optional, Sequence, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import SessionLocal
from ..errors import WriteFailed
from ..models import ROW_MODELS
from ..records import Record
from .base import RecordStore, batch_type, require_ids

logger = logging.getLogger(__name__)


class SQLRecordStore(RecordStore):
    """Record store over the local `accounts`/`contacts`/... tables."""

    def __init__(self, session_factory=None):
        self.session_factory = session_factory or SessionLocal

    def find(
        self,
        record_type: Type[Record],
        field: str,
        value: Any,
        fields: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
    ) -> List[Record]:
        row_cls = _row_model(record_type)
        selected = fields if fields is not None else list(record_type.model_fields)
        names = ["id"] + [name for name in selected if name != "id"]

        with self.session_factory() as db:
            query = db.query(row_cls).filter(getattr(row_cls, field) == value)
            if limit is not None:
                query = query.limit(limit)
            rows = query.all()
            return [record_type(**{name: getattr(row, name) for name in names}) for row in rows]

    def insert(self, records: Sequence[Record]) -> List[Record]:
        if not records:
            return []
        record_type = batch_type(records)
        row_cls = _row_model(record_type)

        with self.session_factory() as db:
            rows = [row_cls(**_values(record)) for record in records]
            db.add_all(rows)
            self._commit(db, record_type, "insert")
            for record, row in zip(records, rows):
                record.id = row.id

        logger.info(f"✅ Inserted {len(records)} {record_type.sobject} record(s)")
        return list(records)

    def update(self, records: Sequence[Record]) -> None:
        if not records:
            return
        record_type = batch_type(records)
        require_ids(record_type, records)
        row_cls = _row_model(record_type)

        with self.session_factory() as db:
            for index, record in enumerate(records):
                row = _get_row(db, row_cls, record, index)
                for key, value in _values(record).items():
                    setattr(row, key, value)
            self._commit(db, record_type, "update")

        logger.info(f"✅ Updated {len(records)} {record_type.sobject} record(s)")

    def upsert(self, records: Sequence[Record]) -> List[Record]:
        if not records:
            return []
        record_type = batch_type(records)
        row_cls = _row_model(record_type)

        with self.session_factory() as db:
            rows = []
            for index, record in enumerate(records):
                if record.id:
                    row = _get_row(db, row_cls, record, index)
                    for key, value in _values(record).items():
                        setattr(row, key, value)
                else:
                    row = row_cls(**_values(record))
                    db.add(row)
                rows.append(row)
            self._commit(db, record_type, "upsert")
            for record, row in zip(records, rows):
                record.id = row.id

        logger.info(f"✅ Upserted {len(records)} {record_type.sobject} record(s)")
        return list(records)

    def delete(self, records: Sequence[Record]) -> None:
        if not records:
            return
        record_type = batch_type(records)
        require_ids(record_type, records)
        row_cls = _row_model(record_type)

        with self.session_factory() as db:
            for index, record in enumerate(records):
                db.delete(_get_row(db, row_cls, record, index))
            self._commit(db, record_type, "delete")

        logger.info(f"🗑️ Deleted {len(records)} {record_type.sobject} record(s)")

    def _commit(self, db: Session, record_type: Type[Record], operation: str) -> None:
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"❌ {record_type.sobject} {operation} failed: {e}")
            raise WriteFailed(
                f"{record_type.sobject} {operation} failed: {e}",
                sobject=record_type.sobject,
            ) from e


def _row_model(record_type: Type[Record]):
    try:
        return ROW_MODELS[record_type.sobject]
    except KeyError:
        raise ValueError(f"No table for record type {record_type.__name__}") from None


def _values(record: Record) -> dict:
    """Column values of a record, leaving out the id and unset fields."""
    return record.model_dump(exclude={"id"}, exclude_none=True)


def _get_row(db: Session, row_cls, record: Record, index: int):
    row = db.get(row_cls, record.id)
    if row is None:
        sobject = type(record).sobject
        logger.error(f"❌ {sobject} not found: {record.id}")
        raise WriteFailed(
            f"{sobject} {record.id} does not exist",
            sobject=sobject,
            failures=[{"index": index, "errors": ["ENTITY_NOT_FOUND"]}],
        )
    return row
