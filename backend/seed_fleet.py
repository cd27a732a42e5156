"""
Database seeding script for the fleet.

Creates a small set of trucks and drivers, one per pay model, for testing
and development. Trucks and drivers have no API of their own, so trips can
only reference what is seeded here.
"""

import asyncio
import sys
from decimal import Decimal
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from backend.app.db.session import AsyncSessionLocal
from backend.app.models.driver import Driver
from backend.app.models.fleet_enums import DriverPayType, DriverType, TruckType
from backend.app.models.truck import Truck
from sqlalchemy import select


TRUCKS = [
    ("T-101", TruckType.SEVEN_CAR),
    ("T-102", TruckType.NINE_CAR),
    ("T-201", TruckType.ENCLOSED),
]

DRIVERS = [
    ("Alex", "Rivera", DriverType.COMPANY, DriverPayType.PERCENTAGE_OF_CARRIER_PAY, Decimal("30")),
    ("Sam", "Okafor", DriverType.OWNER_OPERATOR, DriverPayType.DISPATCH_FEE_PERCENT, Decimal("10")),
    ("Jordan", "Lee", DriverType.COMPANY, DriverPayType.PER_MILE, Decimal("0.65")),
    ("Casey", "Novak", DriverType.COMPANY, DriverPayType.PER_CAR, Decimal("75")),
]


async def seed_fleet():
    """
    Seed trucks and drivers.

    Skips everything if the first truck already exists.
    """
    async with AsyncSessionLocal() as db:
        print("🌱 Starting fleet seeding...")

        result = await db.execute(
            select(Truck).where(Truck.unit_number == TRUCKS[0][0])
        )
        if result.scalar_one_or_none():
            print("ℹ️  Fleet already seeded, skipping")
            return

        for unit_number, truck_type in TRUCKS:
            db.add(Truck(unit_number=unit_number, truck_type=truck_type))
            print(f"✅ Created truck {unit_number} ({truck_type.value})")

        for first_name, last_name, driver_type, pay_type, pay_rate in DRIVERS:
            db.add(Driver(
                first_name=first_name,
                last_name=last_name,
                driver_type=driver_type,
                pay_type=pay_type,
                pay_rate=pay_rate,
            ))
            print(f"✅ Created driver {first_name} {last_name} ({pay_type.value} @ {pay_rate})")

        await db.commit()

        print("\n🎉 Fleet seeding completed successfully!")
        print(f"\nSeeded {len(TRUCKS)} trucks and {len(DRIVERS)} drivers")


if __name__ == "__main__":
    asyncio.run(seed_fleet())
