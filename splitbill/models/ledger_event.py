"""Ledger audit event model"""
from sqlalchemy import JSON, Column, DateTime, Integer, String

from splitbill.database import Base
from splitbill.models.bill import utcnow
from splitbill.models.types import MinorUnits

BILL_CREATED = "bill_created"
PAYMENT_RECORDED = "payment_recorded"


class LedgerEvent(Base):
    """Append-only audit record of a ledger mutation"""

    __tablename__ = "ledger_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(64), nullable=False)
    bill_index = Column(Integer, nullable=False, index=True)
    address = Column(String(255), nullable=True)
    amount = Column(MinorUnits, nullable=True)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<LedgerEvent(type={self.type}, bill_index={self.bill_index})>"
