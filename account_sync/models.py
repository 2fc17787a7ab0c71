"""
SQLAlchemy tables backing the local record store.
Column names match the Python field names of the record models.
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Date, DateTime, Numeric, Text, ForeignKey

from .database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class TimestampMixin:
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )


class AccountRow(TimestampMixin, Base):
    """Account. `name` is indexed but not unique."""

    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    industry = Column(String(255), nullable=True)

    def __repr__(self):
        return f"<AccountRow(id={self.id}, name='{self.name}')>"


class ContactRow(TimestampMixin, Base):
    __tablename__ = "contacts"

    id = Column(String(36), primary_key=True, default=_new_id)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=True, index=True)


class OpportunityRow(TimestampMixin, Base):
    __tablename__ = "opportunities"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=True, index=True)
    stage = Column(String(100), nullable=False)
    close_date = Column(Date, nullable=False)
    amount = Column(Numeric(18, 2), nullable=True)


class LeadRow(TimestampMixin, Base):
    __tablename__ = "leads"

    id = Column(String(36), primary_key=True, default=_new_id)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=False)
    company = Column(String(255), nullable=False)
    status = Column(String(100), nullable=False)


class CaseRow(TimestampMixin, Base):
    __tablename__ = "cases"

    id = Column(String(36), primary_key=True, default=_new_id)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=True, index=True)
    subject = Column(String(255), nullable=True)
    status = Column(String(100), nullable=False)
    priority = Column(String(50), nullable=True)
    origin = Column(String(100), nullable=True)


# Platform object name -> table model
ROW_MODELS = {
    "Account": AccountRow,
    "Contact": ContactRow,
    "Opportunity": OpportunityRow,
    "Lead": LeadRow,
    "Case": CaseRow,
}
