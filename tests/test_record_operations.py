"""
Tests for the routine record operations.
"""
from datetime import date
from decimal import Decimal

import pytest

from account_sync import record_operations
from account_sync.errors import WriteFailed
from account_sync.records import Account, Case, Lead, Opportunity


class TestCreate:
    def test_create_account(self, store):
        account = record_operations.create_account(store, "Acme", industry="Energy")

        [stored] = store.find(Account, "id", account.id)
        assert stored.name == "Acme"
        assert stored.industry == "Energy"
        assert stored.description is None

    def test_create_lead_defaults_status(self, store):
        lead = record_operations.create_lead(store, "Doe", "Acme", first_name="John")

        [stored] = store.find(Lead, "id", lead.id)
        assert stored.first_name == "John"
        assert stored.company == "Acme"
        assert stored.status == "Open - Not Contacted"

    def test_create_cases_one_per_subject(self, store, spy_store):
        account = record_operations.create_account(store, "Acme")

        cases = record_operations.create_cases(
            spy_store, account, ["Login broken", "Invoice wrong"], priority="High"
        )

        assert spy_store.insert.call_count == 1
        assert len({c.id for c in cases}) == 2
        stored = store.find(Case, "account_id", account.id)
        assert sorted(c.subject for c in stored) == ["Invoice wrong", "Login broken"]
        assert {c.status for c in stored} == {"New"}
        assert {c.priority for c in stored} == {"High"}
        assert {c.origin for c in stored} == {"Web"}

    def test_create_cases_requires_persisted_account(self, spy_store):
        with pytest.raises(ValueError):
            record_operations.create_cases(spy_store, Account(name="Unsaved"), ["Subject"])
        spy_store.insert.assert_not_called()

    def test_create_cases_for_unknown_account_is_rejected(self, store):
        """Cases must point at an Account that exists."""
        with pytest.raises(WriteFailed) as exc_info:
            record_operations.create_cases(store, Account(id="no-such-account"), ["Subject"])

        assert exc_info.value.sobject == "Case"
        assert store.find(Case, "account_id", "no-such-account") == []


class TestUpdateOpportunities:
    def test_overwrites_fields_in_place_and_upserts(self, store, spy_store):
        persisted = Opportunity(name="Old", stage="Prospecting", close_date=date(2027, 1, 1))
        store.insert([persisted])
        fresh = Opportunity(name="Fresh", stage="Prospecting", close_date=date(2027, 2, 1))

        result = record_operations.update_opportunities(
            spy_store, [persisted, fresh], "Closed Won", amount=Decimal("1000")
        )

        assert result == [persisted, fresh]
        assert spy_store.upsert.call_count == 1
        assert fresh.id is not None
        for opportunity in (persisted, fresh):
            [stored] = store.find(Opportunity, "id", opportunity.id)
            assert stored.stage == "Closed Won"
            assert stored.amount == Decimal("1000")

    def test_close_date_kept_unless_given(self, store):
        opportunity = Opportunity(name="Deal", stage="Prospecting", close_date=date(2027, 1, 1))
        store.insert([opportunity])

        record_operations.update_opportunities(store, [opportunity], "Negotiation/Review")
        assert store.find(Opportunity, "id", opportunity.id)[0].close_date == date(2027, 1, 1)

        record_operations.update_opportunities(
            store, [opportunity], "Negotiation/Review", close_date=date(2027, 6, 30)
        )
        assert store.find(Opportunity, "id", opportunity.id)[0].close_date == date(2027, 6, 30)


class TestDelete:
    def test_delete_records(self, store):
        lead = record_operations.create_lead(store, "Doe", "Acme")

        record_operations.delete_records(store, Lead, [lead.id])

        assert store.find(Lead, "id", lead.id) == []

    def test_delete_missing_record_raises(self, store):
        with pytest.raises(WriteFailed):
            record_operations.delete_records(store, Lead, ["missing"])
