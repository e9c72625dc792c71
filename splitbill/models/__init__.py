"""SQLAlchemy models"""
from splitbill.models.bill import Bill, BillStatus
from splitbill.models.bill_share import BillShare
from splitbill.models.ledger_event import LedgerEvent

__all__ = ["Bill", "BillShare", "BillStatus", "LedgerEvent"]
