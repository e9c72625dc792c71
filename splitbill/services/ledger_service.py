"""Bill ledger business logic"""
import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from splitbill.core.exceptions import (AlreadyPaidError, AmountMismatchError,
                                       ConflictError,
                                       DuplicateParticipantError,
                                       InvalidAmountError, InvalidBillError,
                                       NotFoundError, UnauthorizedPayerError)
from splitbill.models.bill import Bill
from splitbill.models.bill_share import BillShare
from splitbill.models.ledger_event import LedgerEvent
from splitbill.repositories.bill_repository import BillRepository
from splitbill.repositories.event_repository import EventRepository
from splitbill.repositories.share_repository import ShareRepository
from splitbill.services.bill_locks import BillLocks
from splitbill.services.events import (BILL_CREATED, PAYMENT_RECORDED,
                                       LedgerEvents)
from splitbill.utils.address import canonical_address

logger = logging.getLogger(__name__)

MIN_PARTICIPANTS = 2


class LedgerService:
    """Service for bill ledger operations"""

    @staticmethod
    def validate_participants(
        names: Sequence[str],
        addresses: Sequence[str],
        amounts: Sequence[int],
        creditor_address: Optional[str] = None,
    ) -> str:
        """
        Validate the structure of a new bill.

        Args:
            names: Display names, in participant order
            addresses: Participant addresses, same order
            amounts: Owed amounts in minor units, same order
            creditor_address: Optional fund recipient; defaults to the
                first participant

        Returns:
            Canonical address of the bill's creditor

        Raises:
            InvalidBillError: Count mismatch, fewer than 2 participants,
                blank name or address, or unknown creditor
            InvalidAmountError: If any amount is not strictly positive
            DuplicateParticipantError: If an address repeats in the bill
        """
        if not (len(names) == len(addresses) == len(amounts)):
            raise InvalidBillError(
                "participant count mismatch",
                details={
                    "names": len(names),
                    "addresses": len(addresses),
                    "amounts": len(amounts),
                },
            )
        if len(names) < MIN_PARTICIPANTS:
            raise InvalidBillError("fewer than 2 participants")

        for position, (name, address) in enumerate(zip(names, addresses)):
            if not (name or "").strip():
                raise InvalidBillError(f"Participant {position} has no name")
            if not canonical_address(address):
                raise InvalidBillError(f"Participant {position} has no address")

        for position, amount in enumerate(amounts):
            if isinstance(amount, bool) or not isinstance(amount, int):
                raise InvalidAmountError(
                    f"Amount of participant {position} must be an integer of minor units"
                )
            if amount <= 0:
                raise InvalidAmountError(
                    f"Amount of participant {position} must be positive, got {amount}"
                )

        seen = set()
        for address in addresses:
            canonical = canonical_address(address)
            if canonical in seen:
                raise DuplicateParticipantError(
                    f"Address {address} appears more than once in the bill"
                )
            seen.add(canonical)

        if creditor_address is None:
            return canonical_address(addresses[0])

        creditor = canonical_address(creditor_address)
        if creditor not in seen:
            raise InvalidBillError(
                f"Creditor {creditor_address} is not a participant of the bill"
            )
        return creditor

    @staticmethod
    async def create_bill(
        names: Sequence[str],
        addresses: Sequence[str],
        amounts: Sequence[int],
        db: AsyncSession,
        creditor_address: Optional[str] = None,
    ) -> Bill:
        """
        Append a new bill to the ledger.

        The creditor's own share is recorded as paid: it is the amount
        they fronted. Every other share starts unpaid.

        Args:
            names: Display names, in participant order
            addresses: Participant addresses, same order
            amounts: Owed amounts in minor units, same order
            db: Database session
            creditor_address: Optional fund recipient (default: first participant)

        Returns:
            Created bill with shares

        Raises:
            InvalidBillError, InvalidAmountError, DuplicateParticipantError:
                If validation fails; no bill is created
            ConflictError: If another process took the same ledger index
        """
        creditor = LedgerService.validate_participants(
            names, addresses, amounts, creditor_address
        )

        async with BillLocks.appending():
            bill_index = await BillRepository.count(db)
            created_at = datetime.now(timezone.utc)

            shares = []
            for position, (name, address, amount) in enumerate(
                zip(names, addresses, amounts)
            ):
                is_creditor = canonical_address(address) == creditor
                shares.append(
                    BillShare(
                        position=position,
                        name=name.strip(),
                        display_address=address.strip(),
                        address=canonical_address(address),
                        amount=amount,
                        paid=is_creditor,
                        paid_at=created_at if is_creditor else None,
                    )
                )

            bill = Bill(
                bill_index=bill_index,
                creditor_address=creditor,
                created_at=created_at,
                shares=shares,
            )

            try:
                await BillRepository.create(db, bill)
                event = await LedgerEvents.record(
                    db,
                    type=BILL_CREATED,
                    bill_index=bill_index,
                    address=creditor,
                    amount=bill.total,
                    data={"participants": len(shares)},
                )
                await db.commit()
            except IntegrityError as e:
                await db.rollback()
                logger.warning("Ledger index %s already taken: %s", bill_index, e)
                raise ConflictError(
                    "Another bill was created concurrently, please retry"
                )

        logger.info(
            "Created bill %s with %s participants, total %s",
            bill.bill_index, len(shares), bill.total,
        )
        await LedgerEvents.publish(event)
        return bill

    @staticmethod
    async def pay_share(
        bill_index: int,
        payer_address: str,
        amount_sent: int,
        db: AsyncSession,
    ) -> Bill:
        """
        Record that a participant paid their share in full.

        Args:
            bill_index: Ledger index of the bill
            payer_address: Authenticated address of the payer
            amount_sent: Amount attested as sent, in minor units
            db: Database session

        Returns:
            Bill reflecting the payment

        Raises:
            NotFoundError: If the bill does not exist
            UnauthorizedPayerError: If the payer has no share in the bill
            AlreadyPaidError: If the payer's share is already paid
            AmountMismatchError: If amount_sent differs from the owed amount
        """
        payer = canonical_address(payer_address)

        async with BillLocks.hold(bill_index):
            bill = await BillRepository.get_by_index(db, bill_index)
            if not bill:
                raise NotFoundError(f"Bill {bill_index} not found")

            share = next((s for s in bill.shares if s.address == payer), None)
            if share is None:
                logger.info("Rejected payment on bill %s from non-participant %s", bill_index, payer)
                raise UnauthorizedPayerError(
                    f"Address {payer_address} has no share in bill {bill_index}"
                )
            if share.paid:
                raise AlreadyPaidError(
                    f"Share of {share.name} in bill {bill_index} is already paid"
                )
            if amount_sent != share.amount:
                logger.info(
                    "Rejected payment on bill %s from %s: sent %s, owed %s",
                    bill_index, payer, amount_sent, share.amount,
                )
                raise AmountMismatchError(
                    f"Amount sent ({amount_sent}) must equal amount owed ({share.amount})",
                    details={"owed": share.amount, "sent": amount_sent},
                )

            if not await ShareRepository.mark_paid(db, share.id):
                raise AlreadyPaidError(
                    f"Share of {share.name} in bill {bill_index} is already paid"
                )
            event = await LedgerEvents.record(
                db,
                type=PAYMENT_RECORDED,
                bill_index=bill_index,
                address=payer,
                amount=amount_sent,
                data={"position": share.position},
            )
            await db.commit()

            bill = await BillRepository.get_by_index(db, bill_index)

        logger.info("Recorded payment of %s by %s on bill %s", amount_sent, payer, bill_index)
        await LedgerEvents.publish(event)
        return bill

    @staticmethod
    async def get_bill(bill_index: int, db: AsyncSession) -> Bill:
        """
        Read a consistent snapshot of one bill.

        Raises:
            NotFoundError: If the bill does not exist
        """
        async with BillLocks.hold(bill_index):
            bill = await BillRepository.get_by_index(db, bill_index)

        if not bill:
            raise NotFoundError(f"Bill {bill_index} not found")
        return bill

    @staticmethod
    async def get_bill_count(db: AsyncSession) -> int:
        """Number of bills in the ledger"""
        return await BillRepository.count(db)

    @staticmethod
    async def get_latest_bill(db: AsyncSession) -> Bill:
        """
        Most recently created bill.

        Raises:
            NotFoundError: If the ledger is empty
        """
        bill = await BillRepository.get_latest(db)
        if not bill:
            raise NotFoundError("No bills yet")
        return await LedgerService.get_bill(bill.bill_index, db)

    @staticmethod
    async def list_bills(
        db: AsyncSession, page: int = 1, page_size: int = 20
    ) -> tuple[List[Bill], int]:
        """
        Get bills in ledger order with pagination.

        Args:
            db: Database session
            page: Page number (1-indexed)
            page_size: Items per page

        Returns:
            Tuple of (bills list, total count)
        """
        skip = (page - 1) * page_size
        bills = await BillRepository.list_bills(db, skip=skip, limit=page_size)
        total_count = await BillRepository.count(db)
        return bills, total_count

    @staticmethod
    async def get_bill_events(bill_index: int, db: AsyncSession) -> List[LedgerEvent]:
        """
        Audit trail of a bill.

        Raises:
            NotFoundError: If the bill does not exist
        """
        if not await BillRepository.get_by_index(db, bill_index):
            raise NotFoundError(f"Bill {bill_index} not found")
        return await EventRepository.get_by_bill(db, bill_index)
