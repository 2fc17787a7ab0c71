"""
Account-resolving upserts.

- resolve_account: find-or-create an Account by name and tag its description.
- link_contacts_to_accounts: derive an Account from each Contact's last name,
  link the Contact to it, then write all Contacts in one bulk upsert.
- upsert_opportunities_for_account: create the Opportunities an Account does
  not have yet, skipping names that already exist for it.

Store errors are never caught here; they propagate to the caller.
"""
import logging
from datetime import date
from typing import List, Optional, Sequence

from dateutil.relativedelta import relativedelta

from .adapters.base import RecordStore
from .records import Account, Contact, Opportunity

logger = logging.getLogger(__name__)

NEW_ACCOUNT_DESCRIPTION = "New Account"
UPDATED_ACCOUNT_DESCRIPTION = "Updated Account"

DEFAULT_OPPORTUNITY_STAGE = "Prospecting"
CLOSE_DATE_OFFSET = relativedelta(months=3)


def find_account_by_name(store: RecordStore, name: str) -> Optional[Account]:
    """
    Return the first Account named `name`, or None.

    Names are not unique in the store. When several Accounts share a name
    the store's default ordering decides which one is returned.
    """
    matches = store.find(Account, "name", name, fields=["name", "description"], limit=2)
    if len(matches) > 1:
        logger.warning(f"⚠️ Several Accounts named '{name}', using {matches[0].id}")
    return matches[0] if matches else None


def resolve_account(store: RecordStore, name: str) -> Account:
    """
    Find-or-create an Account by name.

    An existing Account gets its description set to "Updated Account" and is
    updated; otherwise a new Account described as "New Account" is inserted.
    Exactly one write either way.

    Raises:
        ValueError: if `name` is blank.
    """
    if not name or not name.strip():
        raise ValueError("Account name must be a non-empty string")

    account = find_account_by_name(store, name)
    if account is not None:
        account.description = UPDATED_ACCOUNT_DESCRIPTION
        store.update([account])
        logger.info(f"✅ Updated existing Account '{name}' ({account.id})")
        return account

    account = Account(name=name, description=NEW_ACCOUNT_DESCRIPTION)
    store.insert([account])
    logger.info(f"✅ Created Account '{name}' ({account.id})")
    return account


def link_contacts_to_accounts(store: RecordStore, contacts: Sequence[Contact]) -> List[Contact]:
    """
    Link each Contact to the Account named after its last name.

    Every contact costs one resolver write. Contacts that resolve to no
    Account are left out and never persisted. The linked contacts are then
    written in a single bulk upsert keyed by their own ids. Account writes
    already made are not undone if that final write fails.

    Returns:
        The contacts that were linked and written.
    """
    linked = []
    for contact in contacts:
        account_name = contact.last_name
        if not account_name or not account_name.strip():
            logger.warning(f"⚠️ Skipping Contact without a last name ({contact.id})")
            continue

        account = resolve_account(store, account_name)
        if account is None or not account.id:
            continue

        contact.account_id = account.id
        linked.append(contact)
        logger.info(f"🔗 Contact '{contact.last_name}' -> Account {account.id}")

    store.upsert(linked)
    return linked


def upsert_opportunities_for_account(
    store: RecordStore,
    account_name: str,
    opportunity_names: Sequence[str],
) -> List[Opportunity]:
    """
    Create the named Opportunities for an Account, skipping duplicates.

    The Account is looked up by exact name and inserted (name only) if it is
    missing. Names already used by the Account's Opportunities, or repeated
    earlier in `opportunity_names`, are skipped. New Opportunities start in
    "Prospecting" and close three months from today. All of them are written
    in one bulk upsert, so repeating a call creates nothing new.

    Returns:
        The Opportunities that were created, in input order.

    Raises:
        ValueError: if `account_name` or any opportunity name is blank.
            Nothing is written in that case.
    """
    if not account_name or not account_name.strip():
        raise ValueError("Account name must be a non-empty string")
    blank = [index for index, name in enumerate(opportunity_names) if not name or not name.strip()]
    if blank:
        raise ValueError(f"Opportunity names at positions {blank} are blank")

    account = find_account_by_name(store, account_name)
    if account is None:
        account = Account(name=account_name)
        store.insert([account])
        logger.info(f"✅ Created Account '{account_name}' ({account.id})")

    existing_names = {
        opportunity.name
        for opportunity in store.find(Opportunity, "account_id", account.id, fields=["name"])
    }

    close_date = date.today() + CLOSE_DATE_OFFSET
    staged = []
    for name in opportunity_names:
        if name in existing_names:
            logger.info(f"ℹ️ Opportunity '{name}' already exists for '{account_name}', skipping")
            continue
        staged.append(
            Opportunity(
                account_id=account.id,
                name=name,
                stage=DEFAULT_OPPORTUNITY_STAGE,
                close_date=close_date,
            )
        )
        existing_names.add(name)

    store.upsert(staged)
    logger.info(f"✅ {len(staged)} Opportunity record(s) written for '{account_name}'")
    return staged
