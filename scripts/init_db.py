"""Create the ledger schema and optionally seed a demo bill"""
import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path to import splitbill modules
sys.path.append(str(Path(__file__).parent.parent))

from splitbill.config import get_settings
from splitbill.database import AsyncSessionLocal, create_tables, engine
from splitbill.services.ledger_service import LedgerService
from splitbill.utils.decimal_utils import to_minor_units

DEMO_BILL = [
    ("Alice", "0xA11CE00000000000000000000000000000000001", "0.10"),
    ("Bob", "0xB0B0000000000000000000000000000000000002", "0.05"),
    ("Carol", "0xCA40100000000000000000000000000000000003", "0.05"),
]


async def seed_demo_bill():
    """Append the demo bill unless the ledger already has bills"""
    settings = get_settings()

    async with AsyncSessionLocal() as session:
        count = await LedgerService.get_bill_count(session)
        if count > 0:
            print(f"  Ledger already holds {count} bills, skipping demo bill")
            return

        names = [name for name, _, _ in DEMO_BILL]
        addresses = [address for _, address, _ in DEMO_BILL]
        amounts = [
            to_minor_units(amount, settings.amount_decimals)
            for _, _, amount in DEMO_BILL
        ]
        bill = await LedgerService.create_bill(names, addresses, amounts, session)
        print(f"  Created demo bill #{bill.bill_index} with {len(bill.shares)} participants")


async def main(seed: bool):
    """Create tables, then seed if asked"""
    print("Creating ledger schema...")

    try:
        await create_tables()
        if seed:
            await seed_demo_bill()
        print("Done.")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed", action="store_true", help="append a demo bill")
    args = parser.parse_args()
    asyncio.run(main(args.seed))
