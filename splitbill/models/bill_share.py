"""Bill share model"""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from splitbill.database import Base
from splitbill.models.types import MinorUnits


class BillShare(Base):
    """One participant's share of a bill with its payment state"""

    __tablename__ = "bill_shares"

    id = Column(Integer, primary_key=True, autoincrement=True)
    bill_id = Column(Integer, ForeignKey("bills.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    name = Column(String(255), nullable=False)
    # As entered, for display
    display_address = Column(String(255), nullable=False)
    # Canonical lower-case form, used for every comparison
    address = Column(String(255), nullable=False, index=True)
    amount = Column(MinorUnits, nullable=False)
    paid = Column(Boolean, default=False, nullable=False)
    paid_at = Column(DateTime(timezone=True), nullable=True)

    # Constraints
    __table_args__ = (
        UniqueConstraint('bill_id', 'address', name='uq_bill_address'),
        UniqueConstraint('bill_id', 'position', name='uq_bill_position'),
        CheckConstraint('position >= 0', name='check_position_non_negative'),
    )

    # Relationships
    bill = relationship("Bill", back_populates="shares")

    def __repr__(self) -> str:
        return f"<BillShare(bill_id={self.bill_id}, address={self.address}, amount={self.amount}, paid={self.paid})>"
