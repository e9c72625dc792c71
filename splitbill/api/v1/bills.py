"""Bill endpoints"""
import json
from typing import Optional

from fastapi import APIRouter, Depends, Header, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from splitbill.config import get_settings
from splitbill.database import get_db
from splitbill.schemas.bill import (BillCountResponse, BillCreate,
                                    BillListResponse, BillResponse,
                                    PaymentCreate)
from splitbill.schemas.common import PaginationMeta
from splitbill.schemas.event import (LedgerEventListResponse,
                                     LedgerEventResponse)
from splitbill.schemas.settlement import (SettlementItem,
                                          SettlementListResponse)
from splitbill.services.cache_service import CacheService
from splitbill.services.ledger_service import LedgerService
from splitbill.services.settlement_service import SettlementService
from splitbill.utils.decimal_utils import from_minor_units, to_minor_units

settings = get_settings()

router = APIRouter(prefix="/bills", tags=["Bills"])


@router.post("", response_model=BillResponse, status_code=status.HTTP_201_CREATED)
async def create_bill(
    bill_data: BillCreate,
    db: AsyncSession = Depends(get_db),
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key")
):
    """
    Create a new bill.

    Supports idempotency via the `Idempotency-Key` header: a repeated key
    within IDEMPOTENCY_TTL_SECONDS returns the original response instead of
    appending a second bill.

    Args:
        bill_data: Parallel lists of names, addresses and amounts
        db: Database session
        idempotency_key: Optional idempotency key for preventing duplicates

    Returns:
        Created bill

    Raises:
        400: InvalidBillError / InvalidAmountError
        409: DuplicateParticipantError
    """
    if idempotency_key:
        cache_key = CacheService.idempotency_key("bill", idempotency_key)
        cached_response = await CacheService.get(cache_key)

        if cached_response:
            return BillResponse(**json.loads(cached_response))

    amounts = [
        to_minor_units(amount, settings.amount_decimals)
        for amount in bill_data.amounts
    ]
    bill = await LedgerService.create_bill(
        bill_data.names,
        bill_data.addresses,
        amounts,
        db,
        creditor_address=bill_data.creditor_address,
    )
    response = BillResponse.from_bill(bill, settings.amount_decimals)

    if idempotency_key:
        await CacheService.set(
            cache_key,
            json.dumps(response.model_dump(mode="json")),
        )

    return response


@router.get("", response_model=BillListResponse)
async def list_bills(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    db: AsyncSession = Depends(get_db)
):
    """
    Bill history in ledger order with pagination.

    Args:
        page: Page number (1-indexed)
        page_size: Number of items per page (max 100)
        db: Database session

    Returns:
        Paginated list of bills with metadata
    """
    bills, total_count = await LedgerService.list_bills(db, page=page, page_size=page_size)

    total_pages = (total_count + page_size - 1) // page_size if total_count > 0 else 0

    return BillListResponse(
        items=[BillResponse.from_bill(bill, settings.amount_decimals) for bill in bills],
        pagination=PaginationMeta(
            page=page,
            page_size=page_size,
            total_items=total_count,
            total_pages=total_pages
        )
    )


@router.get("/count", response_model=BillCountResponse)
async def get_bill_count(db: AsyncSession = Depends(get_db)):
    """Number of bills in the ledger"""
    return BillCountResponse(count=await LedgerService.get_bill_count(db))


@router.get("/latest", response_model=BillResponse)
async def get_latest_bill(db: AsyncSession = Depends(get_db)):
    """
    Most recently created bill.

    Raises:
        404: If the ledger is empty
    """
    bill = await LedgerService.get_latest_bill(db)
    return BillResponse.from_bill(bill, settings.amount_decimals)


@router.get("/{bill_index}", response_model=BillResponse)
async def get_bill(
    bill_index: int = Path(..., ge=0, description="Ledger index of the bill"),
    db: AsyncSession = Depends(get_db)
):
    """
    Names, addresses, amounts, paid flags, total and creation time of a bill.

    Raises:
        404: If the bill does not exist
    """
    bill = await LedgerService.get_bill(bill_index, db)
    return BillResponse.from_bill(bill, settings.amount_decimals)


@router.post("/{bill_index}/payments", response_model=BillResponse)
async def pay_share(
    payment: PaymentCreate,
    bill_index: int = Path(..., ge=0, description="Ledger index of the bill"),
    db: AsyncSession = Depends(get_db)
):
    """
    Record payment of the payer's share.

    The payer address is trusted as already authenticated by the
    transaction layer in front of this service.

    Args:
        payment: Payer address and amount sent
        bill_index: Ledger index of the bill
        db: Database session

    Returns:
        Bill after the payment

    Raises:
        404: NotFoundError
        403: UnauthorizedPayerError
        409: AlreadyPaidError
        422: AmountMismatchError
    """
    amount_sent = to_minor_units(payment.amount, settings.amount_decimals)
    bill = await LedgerService.pay_share(bill_index, payment.payer_address, amount_sent, db)
    return BillResponse.from_bill(bill, settings.amount_decimals)


@router.get("/{bill_index}/settlements", response_model=SettlementListResponse)
async def get_settlements(
    bill_index: int = Path(..., ge=0, description="Ledger index of the bill"),
    db: AsyncSession = Depends(get_db)
):
    """
    Transfers that would settle every unpaid share of the bill.

    Empty once the bill is fully settled.

    Raises:
        404: If the bill does not exist
    """
    bill, transfers = await SettlementService.settlement_snapshot(bill_index, db)

    return SettlementListResponse(
        bill_index=bill.bill_index,
        status=bill.status,
        settlements=[
            SettlementItem(
                from_address=transfer.from_address,
                from_name=transfer.from_name,
                to_address=transfer.to_address,
                to_name=transfer.to_name,
                amount=from_minor_units(transfer.amount, settings.amount_decimals),
            )
            for transfer in transfers
        ],
    )


@router.get("/{bill_index}/events", response_model=LedgerEventListResponse)
async def get_bill_events(
    bill_index: int = Path(..., ge=0, description="Ledger index of the bill"),
    db: AsyncSession = Depends(get_db)
):
    """
    Audit trail of the bill: its creation and every recorded payment.

    Raises:
        404: If the bill does not exist
    """
    events = await LedgerService.get_bill_events(bill_index, db)

    return LedgerEventListResponse(
        events=[
            LedgerEventResponse(
                type=event.type,
                bill_index=event.bill_index,
                address=event.address,
                amount=(
                    None if event.amount is None
                    else from_minor_units(event.amount, settings.amount_decimals)
                ),
                data=event.data,
                created_at=event.created_at,
            )
            for event in events
        ]
    )
