"""
CRM record types.
One pydantic model per platform object. Python field names map to the
platform's API field names through aliases, so the same model validates a
SOQL result row and serializes back into a write payload.
"""
from datetime import date
from decimal import Decimal
from typing import ClassVar, Dict, Optional, Type

from pydantic import BaseModel, Field


class Record(BaseModel):
    """Base for every CRM record. `id` is only set once persisted."""

    sobject: ClassVar[str] = ""

    id: Optional[str] = Field(default=None, alias="Id")

    class Config:
        populate_by_name = True

    @classmethod
    def api_name(cls, field: str) -> str:
        """Platform field name for a Python field name."""
        info = cls.model_fields[field]
        return info.alias or field


class Account(Record):
    """Organization-level record. `name` is the lookup key."""

    sobject: ClassVar[str] = "Account"

    name: Optional[str] = Field(default=None, alias="Name")
    description: Optional[str] = Field(default=None, alias="Description")
    industry: Optional[str] = Field(default=None, alias="Industry")


class Contact(Record):
    sobject: ClassVar[str] = "Contact"

    first_name: Optional[str] = Field(default=None, alias="FirstName")
    last_name: Optional[str] = Field(default=None, alias="LastName")
    email: Optional[str] = Field(default=None, alias="Email")
    account_id: Optional[str] = Field(default=None, alias="AccountId")


class Opportunity(Record):
    sobject: ClassVar[str] = "Opportunity"

    name: Optional[str] = Field(default=None, alias="Name")
    account_id: Optional[str] = Field(default=None, alias="AccountId")
    stage: Optional[str] = Field(default=None, alias="StageName")
    close_date: Optional[date] = Field(default=None, alias="CloseDate")
    amount: Optional[Decimal] = Field(default=None, alias="Amount")


class Lead(Record):
    sobject: ClassVar[str] = "Lead"

    first_name: Optional[str] = Field(default=None, alias="FirstName")
    last_name: Optional[str] = Field(default=None, alias="LastName")
    company: Optional[str] = Field(default=None, alias="Company")
    status: Optional[str] = Field(default=None, alias="Status")


class Case(Record):
    sobject: ClassVar[str] = "Case"

    account_id: Optional[str] = Field(default=None, alias="AccountId")
    subject: Optional[str] = Field(default=None, alias="Subject")
    status: Optional[str] = Field(default=None, alias="Status")
    priority: Optional[str] = Field(default=None, alias="Priority")
    origin: Optional[str] = Field(default=None, alias="Origin")


RECORD_TYPES: Dict[str, Type[Record]] = {
    record_type.sobject: record_type
    for record_type in (Account, Contact, Opportunity, Lead, Case)
}
