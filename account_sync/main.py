"""
Account Sync Service - CRM record operations over HTTP.
Exposes the account-resolving upserts and the routine record operations,
backed by a swappable record store (local SQL database or Salesforce).
"""
import os
from typing import List

from fastapi import FastAPI, HTTPException, Depends, Request
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from simple_salesforce.exceptions import SalesforceError
import logging

from .database import engine, Base
from . import models  # noqa: F401  registers the local tables on Base
from .errors import RecordStoreError
from .records import RECORD_TYPES, Account, Case, Contact, Lead, Opportunity
from .schemas import (
    AccountCreate,
    AccountResolveRequest,
    CaseCreate,
    ContactLinkRequest,
    LeadCreate,
    OpportunityBatchRequest,
    OpportunityStageUpdate,
)
from .adapters.base import RecordStore
from . import account_resolver, record_operations

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


# =============================================================================
# Record Store Factory
# =============================================================================

_record_store = None  # Singleton


def get_record_store() -> RecordStore:
    """
    Factory function that creates the record store selected by the
    CRM_PROVIDER environment variable ('salesforce' or 'local').
    """
    global _record_store
    if _record_store is not None:
        return _record_store

    provider = os.getenv("CRM_PROVIDER", "local").lower()

    if provider == "salesforce":
        try:
            from .adapters.salesforce_client import SalesforceRecordStore
            _record_store = SalesforceRecordStore()
        except Exception as e:
            logger.error(f"❌ Failed to init Salesforce record store: {e}")
            raise
    else:
        from .adapters.sql_store import SQLRecordStore
        _record_store = SQLRecordStore()
        logger.info("ℹ️ CRM_PROVIDER not set to 'salesforce', using the local database")

    return _record_store


# =============================================================================
# FastAPI App
# =============================================================================

# Create local tables on startup
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Account Sync Service",
    description="Find-or-create Accounts, link Contacts, batch Opportunities and other CRM record operations",
    version=VERSION,
)

# Prometheus metrics
Instrumentator().instrument(app).expose(app)


@app.exception_handler(RecordStoreError)
async def record_store_error_handler(request: Request, exc: RecordStoreError):
    """Store rejections surface as 502 with the per-record failures."""
    return JSONResponse(
        status_code=502,
        content={
            "detail": str(exc),
            "sobject": exc.sobject,
            "failures": getattr(exc, "failures", []),
            "succeeded_ids": getattr(exc, "succeeded_ids", []),
        },
    )


@app.exception_handler(SalesforceError)
async def salesforce_error_handler(request: Request, exc: SalesforceError):
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.on_event("startup")
async def startup_event():
    """Log record store status on startup."""
    provider = os.getenv("CRM_PROVIDER", "local")
    logger.info(f"🏢 CRM Provider configured: {provider}")


# =============================================================================
# Health
# =============================================================================

@app.get("/health")
async def health_check():
    """Health check with record store status."""
    provider = os.getenv("CRM_PROVIDER", "local")
    try:
        store = get_record_store()
    except Exception as e:
        logger.error(f"❌ Record store unavailable: {e}")
        store = None
    return {
        "status": "ok",
        "service": "account-sync",
        "version": VERSION,
        "crm_provider": provider,
        "store_connected": store is not None,
    }


# =============================================================================
# Account-Resolving Upserts
# =============================================================================

@app.post("/accounts/resolve", response_model=Account)
def resolve_account(
    request: AccountResolveRequest,
    store: RecordStore = Depends(get_record_store),
):
    """Find-or-create an Account by name and tag its description."""
    return account_resolver.resolve_account(store, request.name)


@app.post("/contacts/link", response_model=List[Contact])
def link_contacts(
    request: ContactLinkRequest,
    store: RecordStore = Depends(get_record_store),
):
    """Link each Contact to the Account named after its last name."""
    return account_resolver.link_contacts_to_accounts(store, request.contacts)


@app.post("/accounts/{account_name}/opportunities", response_model=List[Opportunity])
def upsert_opportunities(
    account_name: str,
    request: OpportunityBatchRequest,
    store: RecordStore = Depends(get_record_store),
):
    """Create the named Opportunities the Account does not have yet."""
    return account_resolver.upsert_opportunities_for_account(store, account_name, request.names)


# =============================================================================
# Record Operations
# =============================================================================

@app.post("/accounts", response_model=Account, status_code=201)
def create_account(
    request: AccountCreate,
    store: RecordStore = Depends(get_record_store),
):
    return record_operations.create_account(
        store, request.name, industry=request.industry, description=request.description
    )


@app.post("/leads", response_model=Lead, status_code=201)
def create_lead(
    request: LeadCreate,
    store: RecordStore = Depends(get_record_store),
):
    return record_operations.create_lead(
        store,
        request.last_name,
        request.company,
        first_name=request.first_name,
        status=request.status or record_operations.DEFAULT_LEAD_STATUS,
    )


@app.post("/accounts/{account_id}/cases", response_model=List[Case], status_code=201)
def create_cases(
    account_id: str,
    request: CaseCreate,
    store: RecordStore = Depends(get_record_store),
):
    return record_operations.create_cases(
        store,
        Account(id=account_id),
        request.subjects,
        priority=request.priority,
        origin=request.origin,
    )


@app.patch("/opportunities", response_model=List[Opportunity])
def update_opportunities(
    request: OpportunityStageUpdate,
    store: RecordStore = Depends(get_record_store),
):
    return record_operations.update_opportunities(
        store,
        request.opportunities,
        request.stage,
        amount=request.amount,
        close_date=request.close_date,
    )


@app.delete("/records/{sobject}/{record_id}", status_code=204)
def delete_record(
    sobject: str,
    record_id: str,
    store: RecordStore = Depends(get_record_store),
):
    record_type = RECORD_TYPES.get(sobject)
    if record_type is None:
        raise HTTPException(status_code=404, detail=f"Unknown object type: {sobject}")

    record_operations.delete_records(store, record_type, [record_id])
    return None


# =============================================================================
# Root Info
# =============================================================================

@app.get("/")
async def root():
    """Root endpoint with service info."""
    return {
        "service": "Account Sync Service",
        "version": VERSION,
        "endpoints": {
            "/health": "Health check (includes record store status)",
            "/accounts/resolve": "POST - Find-or-create an Account by name",
            "/contacts/link": "POST - Link Contacts to Accounts named after their last names",
            "/accounts/{name}/opportunities": "POST - Create missing Opportunities for an Account",
            "/accounts": "POST - Create an Account",
            "/leads": "POST - Create a Lead",
            "/accounts/{id}/cases": "POST - Open Cases for an Account",
            "/opportunities": "PATCH - Move Opportunities to a stage",
            "/records/{sobject}/{id}": "DELETE - Delete a record",
        },
    }
