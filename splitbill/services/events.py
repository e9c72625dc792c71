"""Ledger events: audit log plus in-process observers"""
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from splitbill.models.ledger_event import (BILL_CREATED, PAYMENT_RECORDED,
                                           LedgerEvent)
from splitbill.repositories.event_repository import EventRepository

logger = logging.getLogger(__name__)

Observer = Callable[[LedgerEvent], Awaitable[None]]


class LedgerEvents:
    """
    Records ledger mutations and notifies subscribers.

    record() writes the audit row inside the caller's transaction.
    Observers are notified only by publish(), which callers invoke after
    the transaction has committed, so nobody sees an event that was
    rolled back.
    """

    _observers: Dict[str, List[Observer]] = {}

    @classmethod
    def subscribe(cls, event_type: str, observer: Observer) -> None:
        """
        Register an async callback for an event type.

        Args:
            event_type: BILL_CREATED or PAYMENT_RECORDED
            observer: Coroutine function receiving the LedgerEvent
        """
        cls._observers.setdefault(event_type, []).append(observer)

    @classmethod
    def unsubscribe(cls, event_type: str, observer: Observer) -> None:
        """Remove a previously registered callback"""
        observers = cls._observers.get(event_type, [])
        if observer in observers:
            observers.remove(observer)

    @staticmethod
    async def record(
        db: AsyncSession,
        *,
        type: str,
        bill_index: int,
        address: Optional[str] = None,
        amount: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> LedgerEvent:
        """
        Append an audit event in the current transaction. Does not commit.

        Args:
            db: Database session
            type: Event type constant
            bill_index: Ledger index the event belongs to
            address: Canonical participant address, if any
            amount: Amount in minor units, if any
            data: Extra JSON payload

        Returns:
            The stored LedgerEvent
        """
        event = LedgerEvent(
            type=type,
            bill_index=bill_index,
            address=address,
            amount=amount,
            data=data or {},
        )
        return await EventRepository.create(db, event)

    @classmethod
    async def publish(cls, event: LedgerEvent) -> None:
        """
        Notify observers of a committed event.

        A failing observer is logged and does not affect the others or the
        already committed ledger state.
        """
        logger.info(
            "ledger event %s bill=%s address=%s amount=%s",
            event.type, event.bill_index, event.address, event.amount,
        )
        for observer in list(cls._observers.get(event.type, [])):
            try:
                await observer(event)
            except Exception:
                logger.exception("Observer %r failed for %s", observer, event.type)


__all__ = ["LedgerEvents", "BILL_CREATED", "PAYMENT_RECORDED"]
