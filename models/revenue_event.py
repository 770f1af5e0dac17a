"""
RevenueEvent model - one recorded payment that feeds the commission split.
amount and kind are immutable once recorded (see models/listeners/revenue_listeners.py).
"""
from enum import Enum
from sqlalchemy import Column, Integer, String, DECIMAL
from models.base import Base, AuditMixin


class RevenueKind(Enum):
    """Kind of payment that produced revenue."""
    SUBSCRIPTION = "subscription"
    TOPUP = "topup"
    PRODUCT_SALE = "product_sale"
    AI_CREDIT_PURCHASE = "ai_credit_purchase"


class RevenueEvent(Base, AuditMixin):
    __tablename__ = 'revenue_events'

    eventID = Column(Integer, primary_key=True, autoincrement=True)
    userID = Column(Integer, nullable=True, index=True)

    amount = Column(DECIMAL(12, 2), nullable=False)
    kind = Column(String(30), nullable=False, index=True)  # RevenueKind value

    # pending, approved, completed, rejected, cancelled (approval flow is external)
    status = Column(String(20), default="pending", index=True)

    referenceCode = Column(String, nullable=True)  # payment reference from the store

    def __repr__(self):
        return f"<RevenueEvent(eventID={self.eventID}, kind={self.kind}, amount={self.amount}, status={self.status})>"


class ImmutableRecordError(Exception):
    """Raised when a recorded revenue event's amount or kind is modified."""
    pass
