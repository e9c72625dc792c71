"""Bill model"""
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, Integer, String, CheckConstraint
from sqlalchemy.orm import relationship
import enum

from splitbill.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BillStatus(str, enum.Enum):
    """Derived payment state of a bill"""
    CREATED = "CREATED"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    FULLY_SETTLED = "FULLY_SETTLED"


class Bill(Base):
    """Append-only ledger entry for one shared bill"""

    __tablename__ = "bills"

    id = Column(Integer, primary_key=True, autoincrement=True)
    bill_index = Column(Integer, unique=True, nullable=False, index=True)
    creditor_address = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Constraints
    __table_args__ = (
        CheckConstraint('bill_index >= 0', name='check_bill_index_non_negative'),
    )

    # Relationships
    shares = relationship(
        "BillShare",
        back_populates="bill",
        order_by="BillShare.position",
        cascade="all, delete-orphan",
    )

    @property
    def total(self) -> int:
        """Sum of all owed amounts, in minor units"""
        return sum((share.amount for share in self.shares), 0)

    @property
    def status(self) -> BillStatus:
        """Lifecycle state derived from the paid flags"""
        if all(share.paid for share in self.shares):
            return BillStatus.FULLY_SETTLED
        if any(
            share.paid
            for share in self.shares
            if share.address != self.creditor_address
        ):
            return BillStatus.PARTIALLY_PAID
        return BillStatus.CREATED

    def __repr__(self) -> str:
        return f"<Bill(index={self.bill_index}, participants={len(self.shares)})>"
