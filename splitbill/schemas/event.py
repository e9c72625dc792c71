"""Ledger event schemas"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class LedgerEventResponse(BaseModel):
    """Audit record of a ledger mutation"""
    type: str
    bill_index: int
    address: Optional[str] = None
    amount: Optional[Decimal] = None
    data: Dict[str, Any]
    created_at: datetime


class LedgerEventListResponse(BaseModel):
    """Audit trail of a bill"""
    events: List[LedgerEventResponse]
