"""
Single-record and loop-and-assign operations on the CRM objects.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence, Type

from .adapters.base import RecordStore
from .records import Account, Case, Lead, Opportunity, Record

logger = logging.getLogger(__name__)

DEFAULT_LEAD_STATUS = "Open - Not Contacted"
NEW_CASE_STATUS = "New"


def create_account(
    store: RecordStore,
    name: str,
    industry: Optional[str] = None,
    description: Optional[str] = None,
) -> Account:
    account = Account(name=name, industry=industry, description=description)
    store.insert([account])
    logger.info(f"✅ Created Account '{name}' ({account.id})")
    return account


def create_lead(
    store: RecordStore,
    last_name: str,
    company: str,
    first_name: Optional[str] = None,
    status: str = DEFAULT_LEAD_STATUS,
) -> Lead:
    lead = Lead(first_name=first_name, last_name=last_name, company=company, status=status)
    store.insert([lead])
    logger.info(f"✅ Created Lead '{last_name}' at '{company}' ({lead.id})")
    return lead


def create_cases(
    store: RecordStore,
    account: Account,
    subjects: Sequence[str],
    priority: str = "Medium",
    origin: str = "Web",
) -> List[Case]:
    """Open one Case per subject against a persisted Account, in one insert."""
    if not account.id:
        raise ValueError("Cases can only be opened for a persisted Account")

    cases = [
        Case(
            account_id=account.id,
            subject=subject,
            status=NEW_CASE_STATUS,
            priority=priority,
            origin=origin,
        )
        for subject in subjects
    ]
    store.insert(cases)
    logger.info(f"✅ Opened {len(cases)} Case(s) for Account {account.id}")
    return cases


def update_opportunities(
    store: RecordStore,
    opportunities: Sequence[Opportunity],
    stage: str,
    amount: Optional[Decimal] = None,
    close_date: Optional[date] = None,
) -> List[Opportunity]:
    """
    Overwrite stage (and optionally amount / close date) on every
    Opportunity in place, then write them all with one upsert by id.
    """
    for opportunity in opportunities:
        opportunity.stage = stage
        if amount is not None:
            opportunity.amount = amount
        if close_date is not None:
            opportunity.close_date = close_date

    store.upsert(opportunities)
    logger.info(f"✅ Moved {len(opportunities)} Opportunity record(s) to '{stage}'")
    return list(opportunities)


def delete_records(store: RecordStore, record_type: Type[Record], record_ids: Sequence[str]) -> None:
    records = [record_type(id=record_id) for record_id in record_ids]
    store.delete(records)
    logger.info(f"🗑️ Deleted {len(records)} {record_type.sobject} record(s)")
