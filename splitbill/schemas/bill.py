"""Bill schemas"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from splitbill.models.bill import Bill, BillStatus
from splitbill.schemas.common import PaginationMeta
from splitbill.utils.decimal_utils import from_minor_units


def to_decimal(value):
    """Parse a JSON number or numeric string exactly"""
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"{value!r} is not a number")


class BillCreate(BaseModel):
    """
    Schema for creating a bill.

    The three lists are parallel: entry i of each describes participant i.
    Count and positivity rules are enforced by the ledger so that they
    surface as ledger errors rather than schema errors.
    """

    names: List[str]
    addresses: List[str]
    amounts: List[Decimal]
    creditor_address: Optional[str] = Field(default=None, max_length=255)

    @field_validator("amounts", mode="before")
    @classmethod
    def convert_amounts(cls, v):
        """Convert numeric values to Decimal"""
        if not isinstance(v, list):
            return v
        return [to_decimal(amount) for amount in v]

    @field_validator("names", "addresses")
    @classmethod
    def validate_lengths(cls, v):
        """Limit each entry to the column size"""
        for item in v:
            if len(item) > 255:
                raise ValueError("Entries must be at most 255 characters")
        return v


class PaymentCreate(BaseModel):
    """Schema for paying one share of a bill"""

    payer_address: str = Field(..., min_length=1, max_length=255)
    amount: Decimal

    @field_validator("amount", mode="before")
    @classmethod
    def convert_amount(cls, v):
        """Convert amount to Decimal"""
        return to_decimal(v)


class BillResponse(BaseModel):
    """Complete bill response schema"""

    index: int
    names: List[str]
    addresses: List[str]
    amounts: List[Decimal]
    paid_flags: List[bool]
    total: Decimal
    creditor_address: str
    status: BillStatus
    created_at: datetime

    @classmethod
    def from_bill(cls, bill: Bill, decimal_places: int) -> "BillResponse":
        """
        Build the response from a bill with shares loaded.

        Args:
            bill: Bill model
            decimal_places: Minor-unit digits used to render amounts
        """
        creditor = next(
            (s.display_address for s in bill.shares if s.address == bill.creditor_address),
            bill.creditor_address,
        )
        return cls(
            index=bill.bill_index,
            names=[share.name for share in bill.shares],
            addresses=[share.display_address for share in bill.shares],
            amounts=[from_minor_units(share.amount, decimal_places) for share in bill.shares],
            paid_flags=[share.paid for share in bill.shares],
            total=from_minor_units(bill.total, decimal_places),
            creditor_address=creditor,
            status=bill.status,
            created_at=bill.created_at,
        )


class BillCountResponse(BaseModel):
    """Number of bills in the ledger"""

    count: int


class BillListResponse(BaseModel):
    """Response schema for bill list"""

    items: List[BillResponse]
    pagination: PaginationMeta
