#!/usr/bin/env python3
"""
Database management script.
Creates, drops, resets and seeds the hotel booking database.
"""

import argparse
import asyncio
import logging
import sys
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from app.config import settings
from app.database import engine, AsyncSessionLocal, Base
from app.models.user import User
from app.models.hotel import Hotel

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

DEMO_SELLER_EMAIL = "seller@example.com"
DEMO_SELLER_PASSWORD = "seller123"

DEMO_HOTELS = [
    ("Seaside Guest House", "Lisbon, Portugal", "Quiet rooms two minutes from the beach.", Decimal("120.00"), 2),
    ("Old Town Loft", "Porto, Portugal", "Top floor loft above the river.", Decimal("95.00"), 1),
    ("Mountain Cabin", "Sintra, Portugal", "Wood cabin with a fireplace and a view.", Decimal("150.00"), 4),
]


class DatabaseManager:
    """Runs schema and data commands against one engine."""

    def __init__(self, target_engine: AsyncEngine, session_factory: async_sessionmaker):
        self.engine = target_engine
        self.session_factory = session_factory

    async def create(self) -> None:
        """Create all tables that don't exist yet."""
        import app.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("All tables created")

    async def drop(self) -> None:
        """Drop all tables."""
        import app.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("All tables dropped")

    async def reset(self) -> None:
        """Drop and recreate all tables (development and testing only)."""
        if settings.is_production:
            raise RuntimeError("Database reset is not allowed in production")

        logger.warning("Resetting database - all data will be lost!")
        await self.drop()
        await self.create()
        logger.info("Database reset completed")

    async def seed(self) -> Dict[str, int]:
        """
        Seed a demo seller and a few hotels.
        Does nothing when the demo seller already exists.

        Returns:
            Counts of created users and hotels
        """
        async with self.session_factory() as session:
            try:
                result = await session.execute(select(User).where(User.email == DEMO_SELLER_EMAIL))
                if result.scalar_one_or_none():
                    logger.info("Demo seller already exists, skipping seed")
                    return {"users": 0, "hotels": 0}

                seller = User(
                    name="Demo Seller",
                    email=DEMO_SELLER_EMAIL,
                    hashed_password=User.hash_password(DEMO_SELLER_PASSWORD),
                    is_active=True,
                    stripe_seller={}
                )
                session.add(seller)
                await session.flush()

                today = date.today()
                for title, location, content, price, bed in DEMO_HOTELS:
                    hotel = Hotel(
                        title=title,
                        content=content,
                        location=location,
                        price=price,
                        from_date=today,
                        to_date=today + timedelta(days=180),
                        bed=bed,
                        posted_by_id=seller.id
                    )
                    hotel.validate_all()
                    session.add(hotel)

                await session.commit()
            except Exception as e:
                await session.rollback()
                logger.error(f"Failed to seed database: {e}")
                raise

        logger.info("Database seeded successfully")
        logger.info(f"  Seller: {DEMO_SELLER_EMAIL} / {DEMO_SELLER_PASSWORD}")
        logger.warning("Do not seed demo accounts in production!")
        return {"users": 1, "hotels": len(DEMO_HOTELS)}


def main():
    """Command line interface for database management."""
    parser = argparse.ArgumentParser(description="Hotel booking database management")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("create", help="Create all tables")

    drop_parser = subparsers.add_parser("drop", help="Drop all tables")
    drop_parser.add_argument("--confirm", action="store_true", help="Confirm dropping all data")

    reset_parser = subparsers.add_parser("reset", help="Drop and recreate all tables")
    reset_parser.add_argument("--confirm", action="store_true", help="Confirm database reset")

    subparsers.add_parser("seed", help="Seed a demo seller with hotels")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    manager = DatabaseManager(engine, AsyncSessionLocal)

    try:
        if args.command == "create":
            asyncio.run(manager.create())

        elif args.command in ("drop", "reset"):
            if not args.confirm:
                print(f"Database {args.command} requires --confirm flag")
                return
            asyncio.run(manager.drop() if args.command == "drop" else manager.reset())

        elif args.command == "seed":
            asyncio.run(manager.seed())

    except Exception as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
