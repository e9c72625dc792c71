"""Bill share data access"""
from datetime import datetime, timezone

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from splitbill.models.bill_share import BillShare


class ShareRepository:
    """Repository for BillShare database operations"""

    @staticmethod
    async def mark_paid(db: AsyncSession, share_id: int) -> bool:
        """
        Flip a share to paid if it is still unpaid.

        The update is conditional on paid = false, so of two writers racing
        on the same share only one sees an affected row.

        Args:
            db: Database session
            share_id: BillShare primary key

        Returns:
            True if this call marked the share paid, False if it already was
        """
        result = await db.execute(
            update(BillShare)
            .where(BillShare.id == share_id, BillShare.paid.is_(False))
            .values(paid=True, paid_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        await db.flush()
        return result.rowcount == 1
