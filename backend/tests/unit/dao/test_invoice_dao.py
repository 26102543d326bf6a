"""
Unit tests for Invoice DAO.

WHAT: Tests for InvoiceDAO database operations.

WHY: The invoice preview takes the first listed invoice as sample data and
the dashboard sums totals per status; both depend on these queries.

HOW: Uses pytest-asyncio with in-memory SQLite database for isolation.
"""

import pytest
from datetime import date
from decimal import Decimal

from solodesk.dao.invoice import InvoiceDAO
from solodesk.models.invoice import InvoiceStatus
from tests.factories import InvoiceFactory, UserFactory


class TestGetUserInvoices:
    """Tests for invoice listing."""

    @pytest.mark.asyncio
    async def test_newest_issue_date_first(self, db_session, test_user):
        old = await InvoiceFactory.create(
            db_session, test_user, number="INV-0001", issue_date=date(2024, 1, 1)
        )
        new = await InvoiceFactory.create(
            db_session, test_user, number="INV-0002", issue_date=date(2024, 2, 1)
        )

        invoices = await InvoiceDAO(db_session).get_user_invoices(test_user.id)

        assert [i.id for i in invoices] == [new.id, old.id]

    @pytest.mark.asyncio
    async def test_status_filter_and_limit(self, db_session, test_user):
        await InvoiceFactory.create(db_session, test_user, number="A", status=InvoiceStatus.PAID)
        await InvoiceFactory.create(db_session, test_user, number="B", status=InvoiceStatus.PAID)
        await InvoiceFactory.create(db_session, test_user, number="C")

        dao = InvoiceDAO(db_session)
        paid = await dao.get_user_invoices(test_user.id, status=InvoiceStatus.PAID.value)
        assert {i.number for i in paid} == {"A", "B"}
        assert len(await dao.get_user_invoices(test_user.id, limit=1)) == 1

    @pytest.mark.asyncio
    async def test_user_scoped(self, db_session, test_user):
        other = await UserFactory.create(db_session, email="other@user.test")
        await InvoiceFactory.create(db_session, other)

        assert await InvoiceDAO(db_session).get_user_invoices(test_user.id) == []


class TestStatusTotals:
    """Tests for per-status aggregation."""

    @pytest.mark.asyncio
    async def test_counts_and_sums(self, db_session, test_user):
        await InvoiceFactory.create(
            db_session, test_user, number="A", status=InvoiceStatus.PAID, amount=Decimal("100.00")
        )
        await InvoiceFactory.create(
            db_session, test_user, number="B", status=InvoiceStatus.PAID, amount=Decimal("50.50")
        )
        await InvoiceFactory.create(
            db_session, test_user, number="C", status=InvoiceStatus.OVERDUE, amount=Decimal("10")
        )

        totals = await InvoiceDAO(db_session).get_status_totals(test_user.id)

        assert totals["paid"] == (2, Decimal("150.50"))
        assert totals["overdue"][0] == 1
        assert totals["overdue"][1] == Decimal("10")
        assert "draft" not in totals

    @pytest.mark.asyncio
    async def test_empty(self, db_session, test_user):
        assert await InvoiceDAO(db_session).get_status_totals(test_user.id) == {}
