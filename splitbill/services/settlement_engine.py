"""Greedy debt netting over signed balances"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from pydantic import BaseModel

from splitbill.core.exceptions import SettlementInvariantError


class Transfer(BaseModel):
    """from_address still owes to_address this many minor units"""

    from_address: str
    to_address: str
    amount: int


@dataclass
class _Outstanding:
    position: int
    address: str
    remaining: int


def _largest(entries: List[_Outstanding]) -> _Outstanding:
    # max() keeps the first of equal keys, i.e. the earliest participant
    return max(entries, key=lambda e: e.remaining)


def calculate_transfers(balances: Sequence[Tuple[str, int]]) -> List[Transfer]:
    """
    Compute the transfers that zero out all balances.

    Args:
        balances: (address, signed balance) in participant order, integer
            minor units. Positive means the participant owes money,
            negative means they are owed money.

    Returns:
        Transfers in the order matches were made; empty if nobody owes

    Raises:
        SettlementInvariantError: If balances do not sum to zero or a
            remainder would go negative
    """
    net = sum(balance for _, balance in balances)
    if net != 0:
        raise SettlementInvariantError(
            f"Balances must sum to zero, got {net}",
            details={"balances": list(balances)},
        )

    debtors = [
        _Outstanding(position, address, balance)
        for position, (address, balance) in enumerate(balances)
        if balance > 0
    ]
    creditors = [
        _Outstanding(position, address, -balance)
        for position, (address, balance) in enumerate(balances)
        if balance < 0
    ]

    transfers: List[Transfer] = []
    while debtors and creditors:
        debtor = _largest(debtors)
        creditor = _largest(creditors)
        amount = min(debtor.remaining, creditor.remaining)

        debtor.remaining -= amount
        creditor.remaining -= amount
        if debtor.remaining < 0 or creditor.remaining < 0:
            raise SettlementInvariantError(
                "Negative remainder while matching "
                f"{debtor.address} -> {creditor.address}"
            )

        transfers.append(
            Transfer(
                from_address=debtor.address,
                to_address=creditor.address,
                amount=amount,
            )
        )

        if debtor.remaining == 0:
            debtors.remove(debtor)
        if creditor.remaining == 0:
            creditors.remove(creditor)

    if debtors or creditors:
        raise SettlementInvariantError("Unmatched balance left after netting")

    return transfers
