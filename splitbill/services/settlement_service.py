"""Settlement calculation for ledger bills"""

import logging
from typing import List, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from splitbill.core.exceptions import SettlementInvariantError
from splitbill.models.bill import Bill
from splitbill.services.ledger_service import LedgerService
from splitbill.services.settlement_engine import Transfer, calculate_transfers

logger = logging.getLogger(__name__)


class NamedTransfer(Transfer):
    """Transfer with participant names resolved for display"""

    from_name: str
    to_name: str


class SettlementService:
    """Service for settlement operations"""

    @staticmethod
    def derive_balances(bill: Bill) -> List[Tuple[str, int]]:
        """
        Signed balance of every participant of a bill.

        Each unpaid share other than the creditor's is a debt to the
        creditor; the creditor is owed the sum of those debts. Paid shares
        contribute nothing.

        Args:
            bill: Bill with shares loaded

        Returns:
            (canonical address, balance) in participant order, minor units

        Raises:
            SettlementInvariantError: If the creditor is not a participant
        """
        addresses = [share.address for share in bill.shares]
        if bill.creditor_address not in addresses:
            raise SettlementInvariantError(
                f"Creditor of bill {bill.bill_index} is not a participant"
            )

        owed_to_creditor = sum(
            share.amount
            for share in bill.shares
            if not share.paid and share.address != bill.creditor_address
        )

        balances: List[Tuple[str, int]] = []
        for share in bill.shares:
            if share.address == bill.creditor_address:
                balances.append((share.address, -owed_to_creditor))
            elif share.paid:
                balances.append((share.address, 0))
            else:
                balances.append((share.address, share.amount))
        return balances

    @staticmethod
    def resolve_names(bill: Bill, transfers: List[Transfer]) -> List[NamedTransfer]:
        """
        Map canonical addresses back to the participants' names and the
        addresses as they were entered.
        """
        participants = {
            share.address: (share.name, share.display_address)
            for share in bill.shares
        }

        named: List[NamedTransfer] = []
        for transfer in transfers:
            from_name, from_address = participants.get(
                transfer.from_address, (transfer.from_address, transfer.from_address)
            )
            to_name, to_address = participants.get(
                transfer.to_address, (transfer.to_address, transfer.to_address)
            )
            named.append(
                NamedTransfer(
                    from_address=from_address,
                    to_address=to_address,
                    amount=transfer.amount,
                    from_name=from_name,
                    to_name=to_name,
                )
            )
        return named

    @staticmethod
    async def settlement_snapshot(
        bill_index: int, db: AsyncSession
    ) -> Tuple[Bill, List[NamedTransfer]]:
        """
        Bill snapshot together with the transfers computed from it.

        Args:
            bill_index: Ledger index
            db: Database session

        Returns:
            Tuple of (bill, transfers in match order with names resolved)

        Raises:
            NotFoundError: If the bill does not exist
            SettlementInvariantError: If the bill's bookkeeping is inconsistent
        """
        bill = await LedgerService.get_bill(bill_index, db)

        try:
            transfers = calculate_transfers(SettlementService.derive_balances(bill))
        except SettlementInvariantError:
            logger.exception("Settlement invariant violated for bill %s", bill_index)
            raise

        return bill, SettlementService.resolve_names(bill, transfers)

    @staticmethod
    async def calculate_settlements(
        bill_index: int, db: AsyncSession
    ) -> List[NamedTransfer]:
        """
        Transfers that would settle every unpaid share of a bill.

        Recomputed from a fresh snapshot on every call; empty once every
        share is paid.
        """
        _, transfers = await SettlementService.settlement_snapshot(bill_index, db)
        return transfers
