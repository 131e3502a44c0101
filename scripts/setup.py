#!/usr/bin/env python3
"""Setup script for the hotel booking API: migrate, then seed demo data."""

import asyncio
import logging
import sys
from pathlib import Path

import jwt

# Add the server directory to the Python path
server_dir = Path(__file__).parent.parent / "server"
sys.path.insert(0, str(server_dir))

from alembic import command
from alembic.config import Config
from sqlalchemy import func, select

from hotel_booking.core.config import settings
from hotel_booking.core.database import async_session_factory, close_db
from hotel_booking.core.dates import utcnow
from hotel_booking.models import Hotel, HotelStaff, Room, RoomType, StaffRole, User, UserRole

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEMO_USERS = [
    ("demo-customer", "guest@example.com", UserRole.CUSTOMER, None),
    ("demo-admin", "admin@example.com", UserRole.ROOM_ADMIN, None),
    ("demo-front-desk", "desk@example.com", UserRole.CUSTOMER, StaffRole.HOTEL_CASHIER),
]


def run_migrations() -> None:
    """Apply Alembic migrations up to head."""
    alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))
    logger.info("Running database migrations...")
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")


async def create_sample_data() -> None:
    """Create a hotel with a few rooms and one user per role."""
    now = utcnow()

    async with async_session_factory() as db:
        existing = await db.scalar(select(func.count()).select_from(Hotel))
        if existing:
            logger.info("Sample data already exists, skipping...")
            return

        try:
            hotel = Hotel(
                name="Harbour View Hotel",
                city="Lisbon",
                country="Portugal",
                created_at=now,
                updated_at=now,
            )
            db.add(hotel)
            await db.flush()

            for number, room_type, price, occupancy in [
                ("101", RoomType.BUDGET, 6500, 1),
                ("102", RoomType.STANDARD, 10000, 2),
                ("201", RoomType.DELUXE, 18000, 3),
                ("301", RoomType.SUITE, 32000, 4),
            ]:
                db.add(Room(
                    hotel_id=hotel.id,
                    room_number=number,
                    room_type=room_type,
                    base_price=price,
                    max_occupancy=occupancy,
                    created_at=now,
                    updated_at=now,
                ))

            for external_id, email, role, staff_role in DEMO_USERS:
                user = User(external_id=external_id, email=email, role=role, created_at=now)
                db.add(user)
                await db.flush()
                if staff_role:
                    db.add(HotelStaff(user_id=user.id, hotel_id=hotel.id, role=staff_role, assigned_at=now))

            await db.commit()
            logger.info("Sample data created successfully!")

        except Exception as e:
            await db.rollback()
            logger.error(f"Failed to create sample data: {e}")
            raise
        finally:
            await close_db()


def print_demo_tokens() -> None:
    """Print Bearer tokens for the demo identities."""
    for external_id, _, _, _ in DEMO_USERS:
        token = jwt.encode({"sub": external_id}, settings.bearer_token_secret, algorithm="HS256")
        logger.info(f"{external_id}: Bearer {token}")


def main() -> None:
    """Main setup function."""
    logger.info("Starting hotel booking API setup...")

    # env.py drives its own event loop, so migrations run before ours starts
    run_migrations()
    asyncio.run(create_sample_data())
    print_demo_tokens()

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: cd server && uvicorn hotel_booking.main:app --reload")


if __name__ == "__main__":
    main()
