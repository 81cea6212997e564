"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 1 administrator  (admin@example.com / admin123)
  - 5 riders         (<name>@example.com / password123)
  - 5 drivers with verified profiles, 4 of them holding a vehicle
  - 6 vehicles (one left available)
  - 5 sample rides across the lifecycle, priced with the fare estimator
"""

import asyncio
from datetime import datetime, timezone

from ridehail.config import settings
from ridehail.domain.entities import Location
from ridehail.domain.enums import (
    DriverStatus,
    PaymentMethod,
    PaymentStatus,
    RideCategory,
    RideStatus,
    UserRole,
    VehicleStatus,
    VehicleType,
)
from ridehail.domain.pricing import FareEstimator
from ridehail.infrastructure.database import async_session_factory, engine
from ridehail.infrastructure.models import (
    DriverProfileModel,
    RideModel,
    UserModel,
    VehicleModel,
)
from ridehail.infrastructure.passwords import hash_password

# Lagos landmarks (approx)
PLACES = {
    "Murtala Muhammed Airport": Location(6.5774, 3.3212),
    "Lekki Phase 1": Location(6.4474, 3.4722),
    "Victoria Island": Location(6.4281, 3.4219),
    "Yaba": Location(6.5095, 3.3711),
    "Ikeja City Mall": Location(6.6018, 3.3515),
    "Surulere": Location(6.5004, 3.3581),
}

RIDERS = [
    {"full_name": "Adaeze Okafor", "email": "adaeze@example.com", "phone": "+2348010000001"},
    {"full_name": "Tunde Bakare", "email": "tunde@example.com", "phone": "+2348010000002"},
    {"full_name": "Ngozi Eze", "email": "ngozi@example.com", "phone": "+2348010000003"},
    {"full_name": "Ibrahim Musa", "email": "ibrahim@example.com", "phone": "+2348010000004"},
    {"full_name": "Funke Adeyemi", "email": "funke@example.com", "phone": "+2348010000005"},
]

DRIVERS = [
    {"full_name": "Emeka Nwosu", "email": "emeka@example.com", "phone": "+2348020000001", "license": "LAG-DRV-0001"},
    {"full_name": "Segun Alabi", "email": "segun@example.com", "phone": "+2348020000002", "license": "LAG-DRV-0002"},
    {"full_name": "Chinedu Obi", "email": "chinedu@example.com", "phone": "+2348020000003", "license": "LAG-DRV-0003"},
    {"full_name": "Bola Ahmed", "email": "bola@example.com", "phone": "+2348020000004", "license": "LAG-DRV-0004"},
    {"full_name": "Kelechi Ude", "email": "kelechi@example.com", "phone": "+2348020000005", "license": "LAG-DRV-0005"},
]

VEHICLES = [
    {"make": "Toyota", "model": "Corolla", "year": 2019, "license_plate": "LND-101AA", "color": "Silver", "vehicle_type": VehicleType.SEDAN},
    {"make": "Honda", "model": "CR-V", "year": 2020, "license_plate": "LND-202BB", "color": "Black", "vehicle_type": VehicleType.SUV},
    {"make": "Bajaj", "model": "Boxer", "year": 2022, "license_plate": "EKY-303CC", "color": "Red", "vehicle_type": VehicleType.MOTORCYCLE},
    {"make": "Toyota", "model": "Camry", "year": 2018, "license_plate": "KJA-404DD", "color": "Blue", "vehicle_type": VehicleType.CAR},
    {"make": "Toyota", "model": "Hiace", "year": 2017, "license_plate": "APP-505EE", "color": "White", "vehicle_type": VehicleType.VAN},
    {"make": "Kia", "model": "Rio", "year": 2021, "license_plate": "FKJ-606FF", "color": "Grey", "vehicle_type": VehicleType.SEDAN},
]


async def seed():
    estimator = FareEstimator(currency=settings.currency)
    now = datetime.now(timezone.utc)

    async with async_session_factory() as session:
        # ── Users ─────────────────────────────────────────────────
        admin = UserModel(
            full_name="Platform Admin",
            email="admin@example.com",
            phone="+2348000000000",
            password_hash=hash_password("admin123"),
            role=UserRole.ADMIN,
        )
        session.add(admin)

        rider_models = [
            UserModel(**r, password_hash=hash_password("password123"), role=UserRole.USER)
            for r in RIDERS
        ]
        driver_users = [
            UserModel(
                full_name=d["full_name"],
                email=d["email"],
                phone=d["phone"],
                password_hash=hash_password("password123"),
                role=UserRole.DRIVER,
            )
            for d in DRIVERS
        ]
        session.add_all(rider_models + driver_users)
        await session.flush()
        print(f"  Created 1 admin, {len(rider_models)} riders, {len(driver_users)} drivers")

        # ── Vehicles ──────────────────────────────────────────────
        vehicle_models = [VehicleModel(**v) for v in VEHICLES]
        session.add_all(vehicle_models)
        await session.flush()
        print(f"  Created {len(vehicle_models)} vehicles")

        # ── Driver profiles (last driver rides a bicycle: no vehicle) ─
        profiles = []
        for i, (user, d) in enumerate(zip(driver_users, DRIVERS)):
            vehicle = vehicle_models[i] if i < 4 else None
            profile = DriverProfileModel(
                user_id=user.id,
                license_number=d["license"],
                address_street=f"{10 + i} Admiralty Way",
                address_city="Lagos",
                vehicle_id=vehicle.id if vehicle else None,
                status=DriverStatus.ACTIVE,
                is_verified=True,
                verified_at=now,
            )
            if vehicle:
                vehicle.status = VehicleStatus.ASSIGNED
            profiles.append(profile)
        session.add_all(profiles)
        await session.flush()
        print(f"  Created {len(profiles)} driver profiles")

        # ── Rides ─────────────────────────────────────────────────
        rides_data = [
            {"rider": 0, "from": "Murtala Muhammed Airport", "to": "Victoria Island",
             "category": RideCategory.CAR, "status": RideStatus.PENDING, "driver": None},
            {"rider": 1, "from": "Yaba", "to": "Surulere",
             "category": RideCategory.MOTORCYCLE, "status": RideStatus.SEARCHING, "driver": None},
            {"rider": 2, "from": "Lekki Phase 1", "to": "Victoria Island",
             "category": RideCategory.CAR, "status": RideStatus.AWAITING_DRIVER_CONFIRMATION, "driver": 0},
            {"rider": 3, "from": "Ikeja City Mall", "to": "Yaba",
             "category": RideCategory.CAR, "status": RideStatus.IN_PROGRESS, "driver": 3},
            {"rider": 4, "from": "Surulere", "to": "Yaba",
             "category": RideCategory.BICYCLE, "status": RideStatus.COMPLETED, "driver": 4},
        ]

        for r in rides_data:
            pickup, destination = PLACES[r["from"]], PLACES[r["to"]]
            quote = estimator.estimate(pickup, destination, r["category"])
            status = r["status"]
            driver = profiles[r["driver"]] if r["driver"] is not None else None
            ride = RideModel(
                rider_id=rider_models[r["rider"]].id,
                driver_id=driver.id if driver else None,
                status=status,
                category=r["category"],
                pickup_address=r["from"],
                pickup_lat=pickup.latitude,
                pickup_lng=pickup.longitude,
                destination_address=r["to"],
                destination_lat=destination.latitude,
                destination_lng=destination.longitude,
                distance_km=round(quote.distance_km, 2),
                estimated_duration_minutes=quote.duration_minutes,
                base_fare=quote.base_fare,
                distance_fare=quote.distance_fare,
                total_fare=quote.total_fare,
                payment_method=PaymentMethod.CASH,
                payment_status=PaymentStatus.PENDING,
                phone_number=RIDERS[r["rider"]]["phone"],
                accepted_at=now if driver else None,
                picked_up_at=now if status in (RideStatus.IN_PROGRESS, RideStatus.COMPLETED) else None,
                started_at=now if status in (RideStatus.IN_PROGRESS, RideStatus.COMPLETED) else None,
                completed_at=now if status == RideStatus.COMPLETED else None,
            )
            if status == RideStatus.COMPLETED:
                ride.rider_rating = 5
                driver.total_trips = 1
                driver.driver_rating = 5.0
            session.add(ride)
        await session.flush()
        print(f"  Created {len(rides_data)} rides")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
