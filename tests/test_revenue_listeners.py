# tests/test_revenue_listeners.py
"""
Tests for RevenueEvent immutability.

Recorded amount and kind never change; status follows the external
approval flow and may change freely.

Run:
    pytest tests/test_revenue_listeners.py -v
"""
from decimal import Decimal

import pytest

from models import RevenueEvent, ImmutableRecordError


class TestRevenueImmutability:

    def test_amount_change_rejected(self, session, add_revenue):
        """
        TEST: UPDATE of amount raises ImmutableRecordError and nothing is written.
        """
        event = add_revenue("100.00", status="pending")
        eventID = event.eventID

        event.amount = Decimal("1.00")
        with pytest.raises(ImmutableRecordError):
            session.commit()
        session.rollback()

        stored = session.query(RevenueEvent).filter_by(eventID=eventID).one()
        assert stored.amount == Decimal("100.00")

    def test_kind_change_rejected(self, session, add_revenue):
        event = add_revenue("100.00", kind="topup")

        event.kind = "product_sale"
        with pytest.raises(ImmutableRecordError, match="kind"):
            session.commit()
        session.rollback()

    def test_status_change_allowed(self, session, add_revenue):
        event = add_revenue("100.00", status="pending")

        event.status = "approved"
        session.commit()

        stored = session.query(RevenueEvent).filter_by(eventID=event.eventID).one()
        assert stored.status == "approved"
        assert stored.amount == Decimal("100.00")

    def test_reference_code_change_allowed(self, session, add_revenue):
        event = add_revenue("100.00")

        event.referenceCode = "GCASH-123"
        session.commit()

        assert event.referenceCode == "GCASH-123"
