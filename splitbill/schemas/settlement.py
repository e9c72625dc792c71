"""Settlement schemas"""
from decimal import Decimal
from typing import List

from pydantic import BaseModel

from splitbill.models.bill import BillStatus


class SettlementItem(BaseModel):
    """One outstanding transfer: from owes to this amount"""
    from_address: str
    from_name: str
    to_address: str
    to_name: str
    amount: Decimal


class SettlementListResponse(BaseModel):
    """Settlements of one bill"""
    bill_index: int
    status: BillStatus
    settlements: List[SettlementItem]
