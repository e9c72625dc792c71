"""Integration tests for bill API endpoints"""

from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from splitbill.services.bill_locks import BillLocks
from splitbill.services.cache_service import CacheService


async def create(client: AsyncClient, data: dict, **kwargs):
    return await client.post("/api/v1/bills", json=data, **kwargs)


async def bill_count(client: AsyncClient) -> int:
    response = await client.get("/api/v1/bills/count")
    assert response.status_code == 200
    return response.json()["count"]


class TestCreateBill:
    """Test bill creation endpoint"""

    @pytest.mark.asyncio
    async def test_create_bill(self, client: AsyncClient, abc_bill_data: dict):
        """Bill is stored with total, paid flags and first index 0"""
        response = await create(client, abc_bill_data)

        assert response.status_code == 201
        data = response.json()
        assert data["index"] == 0
        assert data["names"] == ["A", "B", "C"]
        assert data["addresses"] == ["0xA", "0xB", "0xC"]
        assert [Decimal(a) for a in data["amounts"]] == [Decimal("100"), Decimal("50"), Decimal("50")]
        assert Decimal(data["total"]) == Decimal("200")
        assert data["paid_flags"] == [True, False, False]
        assert data["creditor_address"] == "0xA"
        assert data["status"] == "CREATED"
        assert data["created_at"]

    @pytest.mark.asyncio
    async def test_indexes_are_sequential(self, client: AsyncClient, abc_bill_data: dict):
        """Each bill gets the next index"""
        first = await create(client, abc_bill_data)
        second = await create(client, abc_bill_data)

        assert first.json()["index"] == 0
        assert second.json()["index"] == 1
        assert await bill_count(client) == 2

    @pytest.mark.asyncio
    async def test_fractional_amounts(self, client: AsyncClient):
        """Ether-style fractional amounts are exact"""
        response = await create(client, {
            "names": ["Alice", "Bob"],
            "addresses": ["0xA11CE", "0xB0B"],
            "amounts": ["0.1", "0.05"],
        })

        assert response.status_code == 201
        assert Decimal(response.json()["total"]) == Decimal("0.15")

    @pytest.mark.asyncio
    async def test_explicit_creditor(self, client: AsyncClient, abc_bill_data: dict):
        """Creditor can be any participant"""
        abc_bill_data["creditor_address"] = "0xc"

        response = await create(client, abc_bill_data)

        assert response.status_code == 201
        assert response.json()["creditor_address"] == "0xC"
        assert response.json()["paid_flags"] == [False, False, True]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "data,status_code,error_type",
        [
            ({"names": ["A"], "addresses": ["0xa"], "amounts": ["1"]}, 400, "InvalidBillError"),
            ({"names": ["A", "B"], "addresses": ["0xa"], "amounts": ["1", "2"]}, 400, "InvalidBillError"),
            ({"names": ["A", "B"], "addresses": ["0xa", "0xb"], "amounts": ["1", "0"]}, 400, "InvalidAmountError"),
            ({"names": ["A", "B"], "addresses": ["0xa", "0xb"], "amounts": ["1", "-3"]}, 400, "InvalidAmountError"),
            ({"names": ["A", "B"], "addresses": ["0xAB", "0xab"], "amounts": ["1", "2"]}, 409, "DuplicateParticipantError"),
            ({"names": ["A", "B"], "addresses": ["0xa", "0xb"], "amounts": ["1", "2"], "creditor_address": "0xc"}, 400, "InvalidBillError"),
            ({"names": ["A", "B"], "addresses": ["0xa", "0xb"], "amounts": ["1", "1E-30"]}, 400, "InvalidAmountError"),
            ({"names": ["A", "B"], "addresses": ["0xa", "0xb"], "amounts": ["1", "1e5000"]}, 400, "InvalidAmountError"),
            ({"names": ["A", "B"], "addresses": ["0xa", "0xb"], "amounts": ["1", "1" * 70 + ".5"]}, 400, "InvalidAmountError"),
        ],
    )
    async def test_invalid_bill_creates_nothing(
        self, client: AsyncClient, data: dict, status_code: int, error_type: str
    ):
        """Rejected creation leaves the ledger unchanged"""
        response = await create(client, data)

        assert response.status_code == status_code
        assert response.json()["error"]["type"] == error_type
        assert await bill_count(client) == 0

    @pytest.mark.asyncio
    async def test_idempotency_key_replays_response(
        self, client: AsyncClient, abc_bill_data: dict, fake_cache: dict
    ):
        """Same Idempotency-Key returns the first bill instead of a new one"""
        headers = {"Idempotency-Key": "create-abc-1"}

        first = await create(client, abc_bill_data, headers=headers)
        second = await create(client, abc_bill_data, headers=headers)

        assert first.status_code == 201
        assert second.status_code == 201
        assert second.json() == first.json()
        assert await bill_count(client) == 1
        assert "idempotency:bill:create-abc-1" in fake_cache


class TestGetBill:
    """Test bill read endpoints"""

    @pytest.mark.asyncio
    async def test_get_bill(self, client: AsyncClient, abc_bill_data: dict):
        """GetBill returns the stored bill"""
        await create(client, abc_bill_data)

        response = await client.get("/api/v1/bills/0")

        assert response.status_code == 200
        assert response.json()["names"] == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_get_bill_not_found(self, client: AsyncClient):
        """Unknown index is a 404"""
        response = await client.get("/api/v1/bills/5")

        assert response.status_code == 404
        assert response.json()["error"]["type"] == "NotFoundError"

    @pytest.mark.asyncio
    async def test_missing_bill_lookups_leave_no_locks(self, client: AsyncClient):
        """Lookups of unknown indexes do not accumulate per-bill locks"""
        for index in range(50):
            response = await client.get(f"/api/v1/bills/{index}")
            assert response.status_code == 404

        assert BillLocks._locks == {}

    @pytest.mark.asyncio
    async def test_negative_index_rejected(self, client: AsyncClient):
        """Indexes start at 0"""
        response = await client.get("/api/v1/bills/-1")

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_count_empty_ledger(self, client: AsyncClient):
        """Empty ledger has zero bills"""
        assert await bill_count(client) == 0

    @pytest.mark.asyncio
    async def test_latest_bill(self, client: AsyncClient, abc_bill_data: dict):
        """Latest is the most recently created bill"""
        await create(client, abc_bill_data)
        abc_bill_data["names"] = ["X", "Y", "Z"]
        await create(client, abc_bill_data)

        response = await client.get("/api/v1/bills/latest")

        assert response.status_code == 200
        assert response.json()["index"] == 1
        assert response.json()["names"] == ["X", "Y", "Z"]

    @pytest.mark.asyncio
    async def test_latest_bill_empty_ledger(self, client: AsyncClient):
        """No latest bill before the first one"""
        response = await client.get("/api/v1/bills/latest")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_list_bills_pagination(self, client: AsyncClient, abc_bill_data: dict):
        """Bills are listed in ledger order with pagination metadata"""
        for _ in range(3):
            await create(client, abc_bill_data)

        response = await client.get("/api/v1/bills", params={"page": 2, "page_size": 2})

        assert response.status_code == 200
        data = response.json()
        assert [item["index"] for item in data["items"]] == [2]
        assert data["pagination"] == {
            "page": 2,
            "page_size": 2,
            "total_items": 3,
            "total_pages": 2,
        }


class TestPayShare:
    """Test payment endpoint"""

    @pytest.mark.asyncio
    async def test_pay_share(self, client: AsyncClient, abc_bill_data: dict):
        """Payment flips only the payer's flag"""
        await create(client, abc_bill_data)

        response = await client.post(
            "/api/v1/bills/0/payments",
            json={"payer_address": "0xb", "amount": "50"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["paid_flags"] == [True, True, False]
        assert data["status"] == "PARTIALLY_PAID"

        bill = (await client.get("/api/v1/bills/0")).json()
        assert bill["paid_flags"] == [True, True, False]
        assert bill["amounts"] == data["amounts"]

    @pytest.mark.asyncio
    async def test_pay_share_twice(self, client: AsyncClient, abc_bill_data: dict):
        """A repeated identical payment is rejected"""
        await create(client, abc_bill_data)
        payment = {"payer_address": "0xB", "amount": "50"}

        first = await client.post("/api/v1/bills/0/payments", json=payment)
        second = await client.post("/api/v1/bills/0/payments", json=payment)

        assert first.status_code == 200
        assert second.status_code == 409
        assert second.json()["error"]["type"] == "AlreadyPaidError"

    @pytest.mark.asyncio
    async def test_pay_wrong_amount(self, client: AsyncClient, abc_bill_data: dict):
        """Amount mismatch leaves the share unpaid"""
        await create(client, abc_bill_data)

        response = await client.post(
            "/api/v1/bills/0/payments",
            json={"payer_address": "0xb", "amount": "49.99"},
        )

        assert response.status_code == 422
        assert response.json()["error"]["type"] == "AmountMismatchError"
        bill = (await client.get("/api/v1/bills/0")).json()
        assert bill["paid_flags"] == [True, False, False]

    @pytest.mark.asyncio
    async def test_pay_unknown_payer(self, client: AsyncClient, abc_bill_data: dict):
        """Non-participants cannot pay"""
        await create(client, abc_bill_data)

        response = await client.post(
            "/api/v1/bills/0/payments",
            json={"payer_address": "0xD", "amount": "50"},
        )

        assert response.status_code == 403
        assert response.json()["error"]["type"] == "UnauthorizedPayerError"

    @pytest.mark.asyncio
    async def test_pay_unknown_bill(self, client: AsyncClient):
        """Paying into a missing bill is a 404"""
        response = await client.post(
            "/api/v1/bills/3/payments",
            json={"payer_address": "0xb", "amount": "50"},
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_pay_missing_payer(self, client: AsyncClient, abc_bill_data: dict):
        """Request validation rejects an empty payer address"""
        await create(client, abc_bill_data)

        response = await client.post(
            "/api/v1/bills/0/payments",
            json={"payer_address": "", "amount": "50"},
        )

        assert response.status_code == 422


class TestSettlements:
    """Test settlement endpoint"""

    @pytest.mark.asyncio
    async def test_fresh_bill_settlements(self, client: AsyncClient, abc_bill_data: dict):
        """Every debtor owes the creditor their share"""
        await create(client, abc_bill_data)

        response = await client.get("/api/v1/bills/0/settlements")

        assert response.status_code == 200
        data = response.json()
        assert data["bill_index"] == 0
        assert data["status"] == "CREATED"
        assert [
            (s["from_name"], s["to_name"], Decimal(s["amount"]))
            for s in data["settlements"]
        ] == [("B", "A", Decimal("50")), ("C", "A", Decimal("50"))]
        assert data["settlements"][0]["from_address"] == "0xB"
        assert data["settlements"][0]["to_address"] == "0xA"

    @pytest.mark.asyncio
    async def test_settlements_idempotent(self, client: AsyncClient, abc_bill_data: dict):
        """Two reads without a payment in between agree"""
        await create(client, abc_bill_data)

        first = await client.get("/api/v1/bills/0/settlements")
        second = await client.get("/api/v1/bills/0/settlements")

        assert first.json() == second.json()

    @pytest.mark.asyncio
    async def test_settlements_not_found(self, client: AsyncClient):
        """Unknown bill is a 404"""
        response = await client.get("/api/v1/bills/0/settlements")

        assert response.status_code == 404


class TestEvents:
    """Test audit log endpoint"""

    @pytest.mark.asyncio
    async def test_events_recorded(self, client: AsyncClient, abc_bill_data: dict):
        """Creation and payments appear in order"""
        await create(client, abc_bill_data)
        await client.post("/api/v1/bills/0/payments", json={"payer_address": "0xc", "amount": "50"})

        response = await client.get("/api/v1/bills/0/events")

        assert response.status_code == 200
        events = response.json()["events"]
        assert [e["type"] for e in events] == ["bill_created", "payment_recorded"]
        assert Decimal(events[0]["amount"]) == Decimal("200")
        assert events[1]["address"] == "0xc"
        assert Decimal(events[1]["amount"]) == Decimal("50")

    @pytest.mark.asyncio
    async def test_rejected_payment_not_recorded(self, client: AsyncClient, abc_bill_data: dict):
        """Failed payments leave no audit row"""
        await create(client, abc_bill_data)
        await client.post("/api/v1/bills/0/payments", json={"payer_address": "0xc", "amount": "1"})

        events = (await client.get("/api/v1/bills/0/events")).json()["events"]

        assert [e["type"] for e in events] == ["bill_created"]

    @pytest.mark.asyncio
    async def test_events_not_found(self, client: AsyncClient):
        """Unknown bill is a 404"""
        response = await client.get("/api/v1/bills/9/events")

        assert response.status_code == 404


class TestRoot:
    """Test service endpoints"""

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        """Health check reports the cache backend"""
        with patch.object(CacheService, "health_check", AsyncMock(return_value=True)):
            response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "redis": "up"}

    @pytest.mark.asyncio
    async def test_health_redis_down(self, client: AsyncClient):
        """Redis outage degrades the service without failing the check"""
        with patch.object(CacheService, "health_check", AsyncMock(return_value=False)):
            response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "degraded", "redis": "down"}
