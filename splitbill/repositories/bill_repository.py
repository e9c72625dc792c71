"""Bill data access"""

from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from splitbill.models.bill import Bill


class BillRepository:
    """Repository for Bill database operations"""

    @staticmethod
    async def create(db: AsyncSession, bill: Bill) -> Bill:
        """
        Create a new bill together with its shares.

        Args:
            db: Database session
            bill: Bill object (with shares attached) to create

        Returns:
            Created bill
        """
        db.add(bill)
        await db.flush()
        return bill

    @staticmethod
    async def get_by_index(db: AsyncSession, bill_index: int) -> Optional[Bill]:
        """
        Get bill by ledger index with all shares eagerly loaded.

        Always re-reads rows from the database, so the returned shares are
        a single consistent snapshot rather than stale identity-map state.

        Args:
            db: Database session
            bill_index: Ledger index

        Returns:
            Bill if found, None otherwise
        """
        result = await db.execute(
            select(Bill)
            .where(Bill.bill_index == bill_index)
            .options(selectinload(Bill.shares))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def count(db: AsyncSession) -> int:
        """
        Count bills in the ledger.

        Args:
            db: Database session

        Returns:
            Number of bills
        """
        result = await db.execute(select(func.count(Bill.id)))
        return result.scalar_one()

    @staticmethod
    async def list_bills(
        db: AsyncSession, skip: int = 0, limit: int = 20
    ) -> List[Bill]:
        """
        Get bills in ledger order.

        Args:
            db: Database session
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            List of bills with shares loaded
        """
        query = (
            select(Bill)
            .order_by(Bill.bill_index.asc())
            .offset(skip)
            .limit(limit)
            .options(selectinload(Bill.shares))
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def get_latest(db: AsyncSession) -> Optional[Bill]:
        """
        Get the most recently created bill.

        Args:
            db: Database session

        Returns:
            Latest bill if the ledger is not empty, None otherwise
        """
        result = await db.execute(
            select(Bill)
            .order_by(Bill.bill_index.desc())
            .limit(1)
            .options(selectinload(Bill.shares))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
