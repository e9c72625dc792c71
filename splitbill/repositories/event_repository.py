"""Ledger event data access"""
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from splitbill.models.ledger_event import LedgerEvent


class EventRepository:
    """Repository for LedgerEvent database operations"""

    @staticmethod
    async def create(db: AsyncSession, event: LedgerEvent) -> LedgerEvent:
        """
        Append an event. Does not commit.

        Args:
            db: Database session
            event: LedgerEvent to store

        Returns:
            Stored event
        """
        db.add(event)
        await db.flush()
        return event

    @staticmethod
    async def get_by_bill(db: AsyncSession, bill_index: int) -> List[LedgerEvent]:
        """
        Get all events of a bill in the order they were recorded.

        Args:
            db: Database session
            bill_index: Ledger index

        Returns:
            List of events
        """
        result = await db.execute(
            select(LedgerEvent)
            .where(LedgerEvent.bill_index == bill_index)
            .order_by(LedgerEvent.id.asc())
        )
        return list(result.scalars().all())
