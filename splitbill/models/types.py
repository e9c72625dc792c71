"""Custom column types"""
from sqlalchemy import String
from sqlalchemy.types import TypeDecorator

from splitbill.utils.decimal_utils import MAX_AMOUNT_DIGITS


class MinorUnits(TypeDecorator):
    """
    Non-negative integer amount stored as decimal text.

    Minor units of 18-decimal currencies overflow BIGINT, and SQLite
    degrades large NUMERIC values to floats, so the digits are kept
    verbatim and converted back to int on load.
    """

    impl = String(MAX_AMOUNT_DIGITS)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(int(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)
