"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 5 sample passengers
  - 10 sample riders (around Algiers and Lakhdaria, two without a position)
  - 6 sample trips (mix of pending, accepted, completed, cancelled)
  - 2 ratings on the completed trips
  - 4 sample promotions (one per eligibility rule, one expired)
"""

import asyncio
from datetime import datetime, timedelta, timezone

from sqlalchemy import text

from src.config import settings
from src.domain.entities import (
    Coordinate,
    Place,
    Promotion,
    PromotionRule,
    RiderProfile,
)
from src.domain.enums import RiderStatus, TripStatus
from src.domain.lifecycle import TripLifecycle
from src.domain.pricing import PricingPolicy
from src.infrastructure.database import async_session_factory, engine
from src.infrastructure.models import RiderModel, UserModel
from src.infrastructure.repositories import (
    PromotionRepository,
    RatingRepository,
    RiderRepository,
    TripRepository,
)

USERS = [
    {"display_name": "Amine Benali", "phone_number": "+213550000001"},
    {"display_name": "Yasmine Haddad", "phone_number": "+213550000002"},
    {"display_name": "Karim Ouali", "phone_number": "+213660000003"},
    {"display_name": "Nour Belkacem", "phone_number": "+213770000004"},
    {"display_name": "Sofiane Mansouri", "phone_number": "+213550000005"},
]

RIDERS = [
    # Algiers centre
    {"name": "Rachid Meziane", "phone": "0551000001", "rating": 4.8, "at": (36.7538, 3.0588), "status": RiderStatus.ONLINE, "plate": "16-1234-01"},
    {"name": "Farid Khelifi", "phone": "0551000002", "rating": 4.6, "at": (36.7650, 3.0470), "status": RiderStatus.ONLINE, "plate": "16-2345-01"},
    {"name": "Hocine Ait Ali", "phone": "0551000003", "rating": None, "at": (36.7372, 3.0865), "status": RiderStatus.ONLINE, "plate": "16-3456-01"},
    {"name": "Mourad Saidi", "phone": "0551000004", "rating": 4.2, "at": (36.7200, 3.1800), "status": RiderStatus.BUSY, "plate": "16-4567-01"},
    # Boumerdes / Lakhdaria
    {"name": "Walid Amrani", "phone": "0661000005", "rating": 4.9, "at": (36.5644, 3.5892), "status": RiderStatus.ONLINE, "plate": "10-5678-01"},
    {"name": "Samir Bouzid", "phone": "0661000006", "rating": 4.4, "at": (36.7664, 3.4772), "status": RiderStatus.ONLINE, "plate": "35-6789-01"},
    {"name": "Nabil Cherif", "phone": "0661000007", "rating": 4.7, "at": (36.5700, 3.6000), "status": RiderStatus.OFFLINE, "plate": "10-7890-01"},
    # Blida
    {"name": "Djamel Ferhat", "phone": "0771000008", "rating": 4.5, "at": (36.4700, 2.8300), "status": RiderStatus.ONLINE, "plate": "09-8901-01"},
    # No reported position yet
    {"name": "Lyes Hamdi", "phone": "0771000009", "rating": 4.5, "at": None, "status": RiderStatus.ONLINE, "plate": "16-9012-01"},
    {"name": "Omar Zerrouki", "phone": "0771000010", "rating": 4.1, "at": None, "status": RiderStatus.ONLINE, "plate": "16-0123-01"},
]

PLACES = {
    "grande_poste": Place(Coordinate(36.7731, 3.0595), "Grande Poste, Alger Centre"),
    "bab_ezzouar": Place(Coordinate(36.7213, 3.1836), "USTHB, Bab Ezzouar"),
    "hydra": Place(Coordinate(36.7417, 3.0325), "Hydra, Alger"),
    "airport": Place(Coordinate(36.6910, 3.2154), "Aéroport Houari Boumediene"),
    "lakhdaria": Place(Coordinate(36.5644, 3.5892), "Centre-ville, Lakhdaria"),
    "bouira": Place(Coordinate(36.3749, 3.9020), "Gare routière, Bouira"),
}

# (user index, rider index, pickup, destination, lifecycle path)
TRIPS = [
    (0, 0, "grande_poste", "bab_ezzouar", [TripStatus.ACCEPTED, TripStatus.IN_PROGRESS, TripStatus.COMPLETED]),
    (0, 1, "hydra", "airport", [TripStatus.ACCEPTED, TripStatus.IN_PROGRESS, TripStatus.COMPLETED]),
    (1, 4, "lakhdaria", "bouira", [TripStatus.ACCEPTED]),
    (2, None, "grande_poste", "hydra", []),
    (3, 2, "bab_ezzouar", "grande_poste", [TripStatus.CANCELLED]),
    (4, 5, "airport", "grande_poste", [TripStatus.ACCEPTED, TripStatus.IN_PROGRESS]),
]


def _promotions(now: datetime) -> list[Promotion]:
    return [
        Promotion(
            title="First Ride Bonus",
            description="20% off your very first trip",
            discount_percentage=20,
            valid_from=now - timedelta(days=30),
            valid_until=now + timedelta(days=60),
            rule=PromotionRule.first_ride_only(),
        ),
        Promotion(
            title="Loyalty Reward",
            description="150 DA off after 10 completed trips",
            discount_amount=150,
            valid_from=now - timedelta(days=30),
            valid_until=now + timedelta(days=90),
            rule=PromotionRule.min_completed(10),
        ),
        Promotion(
            title="Weekend Deal",
            description="10% off every trip this weekend",
            discount_percentage=10,
            valid_from=now - timedelta(days=1),
            valid_until=now + timedelta(days=2),
            rule=PromotionRule.unconditional(),
        ),
        Promotion(
            title="Ramadan Special",
            description="Expired seasonal offer",
            discount_amount=100,
            valid_from=now - timedelta(days=120),
            valid_until=now - timedelta(days=90),
        ),
    ]


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM users"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        now = datetime.now(timezone.utc)

        # ── Users ─────────────────────────────────────────────────────
        user_models = [UserModel(**u) for u in USERS]
        session.add_all(user_models)
        await session.flush()
        print(f"  Created {len(user_models)} users")

        # ── Riders ────────────────────────────────────────────────────
        rider_models = []
        for r in RIDERS:
            m = RiderModel(
                display_name=r["name"],
                phone=r["phone"],
                rating_average=r["rating"],
                status=r["status"],
                vehicle_type="motorcycle",
                license_plate=r["plate"],
            )
            session.add(m)
            rider_models.append((m, r["at"]))
        await session.flush()
        rider_repo = RiderRepository(session)
        for m, at in rider_models:
            if at is not None:
                await rider_repo.update_location(m.id, Coordinate(*at))
        print(f"  Created {len(rider_models)} riders")

        # ── Trips ─────────────────────────────────────────────────────
        lifecycle = TripLifecycle(
            PricingPolicy(
                settings.base_fare_da,
                settings.rate_per_km_da,
                settings.average_speed_kmh,
            )
        )
        trip_repo = TripRepository(session)
        completed = []
        for user_idx, rider_idx, pickup, destination, path in TRIPS:
            rider_id = rider_models[rider_idx][0].id if rider_idx is not None else None
            requested = now - timedelta(hours=len(path) + 1)
            trip = lifecycle.create(
                PLACES[pickup],
                PLACES[destination],
                user_models[user_idx].id,
                rider_id,
                now=requested,
            )
            trip = await trip_repo.create(trip)
            for step, status in enumerate(path, start=1):
                lifecycle.transition(trip, status, now=requested + timedelta(minutes=15 * step))
            await trip_repo.save_transition(trip)
            if trip.status == TripStatus.COMPLETED:
                completed.append(trip)
        print(f"  Created {len(TRIPS)} trips")

        # ── Ratings ───────────────────────────────────────────────────
        rating_repo = RatingRepository(session)
        for trip, stars, comment in zip(completed, (5, 4), ("Rapide et prudent", None)):
            await rating_repo.create(lifecycle.rate(trip, stars, comment, now=now))
        print(f"  Created {len(completed)} ratings")

        # ── Promotions ────────────────────────────────────────────────
        promo_repo = PromotionRepository(session)
        promotions = _promotions(now)
        for p in promotions:
            await promo_repo.create(p)
        print(f"  Created {len(promotions)} promotions")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
