"""
Pydantic request schemas for the account sync API.
Responses are the record models themselves (see records.py).
"""
from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from .records import Contact, Opportunity


class AccountResolveRequest(BaseModel):
    """Schema for find-or-create of an Account by name."""

    name: str = Field(..., min_length=1, max_length=255)

    class Config:
        json_schema_extra = {"example": {"name": "Acme"}}


class ContactLinkRequest(BaseModel):
    """Contacts to link to the Accounts named after their last names."""

    contacts: List[Contact]

    class Config:
        json_schema_extra = {
            "example": {
                "contacts": [
                    {"FirstName": "John", "LastName": "Doe"},
                    {"FirstName": "Mary", "LastName": "Jane"},
                ]
            }
        }


class OpportunityBatchRequest(BaseModel):
    """Opportunity names to create for one Account."""

    names: List[str] = Field(default_factory=list)

    class Config:
        json_schema_extra = {"example": {"names": ["Q1 Deal", "Q2 Deal"]}}


class AccountCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    industry: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None)


class LeadCreate(BaseModel):
    first_name: Optional[str] = Field(default=None, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    company: str = Field(..., min_length=1, max_length=255)
    status: Optional[str] = Field(default=None, max_length=100)


class CaseCreate(BaseModel):
    """One Case is opened per subject."""

    subjects: List[str] = Field(..., min_length=1)
    priority: str = Field(default="Medium")
    origin: str = Field(default="Web")


class OpportunityStageUpdate(BaseModel):
    """Move a batch of Opportunities to a stage, optionally re-pricing them."""

    opportunities: List[Opportunity]
    stage: str = Field(..., min_length=1)
    amount: Optional[Decimal] = Field(default=None)
    close_date: Optional[date] = Field(default=None)
