"""
Database seeding script.
Creates the tables and loads categories, price ranges and a demo account.
"""

import asyncio
import argparse
import logging
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from realty.config import settings
from realty.database import Database
from realty.models.listing import Category, PriceTier
from realty.models.user import User

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

CATEGORIES = ["House", "Apartment", "Warehouse", "Land", "Cabin"]

PRICE_TIERS = [
    "0 - $10,000 USD",
    "$10,000 - $30,000 USD",
    "$30,000 - $50,000 USD",
    "$50,000 - $75,000 USD",
    "$75,000 - $100,000 USD",
    "$100,000 - $150,000 USD",
    "$150,000 - $200,000 USD",
    "$200,000 - $300,000 USD",
    "$300,000 - $500,000 USD",
    "+ $500,000 USD",
]

DEMO_USER = {
    "name": "Demo Seller",
    "email": "demo@example.com",
    "password": "123456",
}


class SeedManager:
    """Loads reference data into a database."""

    def __init__(self, database: Database):
        self.database = database

    async def seed(self) -> None:
        """Create the tables and insert whatever reference data is missing."""
        await self.database.create_tables()

        async with self.database.session_factory() as session:
            try:
                added = await self._add_missing(session, Category, CATEGORIES)
                added += await self._add_missing(session, PriceTier, PRICE_TIERS)
                added += await self._add_demo_user(session)
                await session.commit()
            except Exception as e:
                await session.rollback()
                logger.error(f"Failed to seed database: {e}")
                raise

        logger.info(f"Database seeded successfully ({added} rows added)")

    async def reset(self) -> None:
        """Drop and recreate every table, then seed."""
        if not settings.is_development and not settings.is_testing:
            raise RuntimeError("Database reset is only allowed in development or test mode")

        logger.warning("Resetting database - all data will be lost!")
        await self.database.drop_tables()
        await self.seed()

    async def _add_missing(self, session: AsyncSession, model, names) -> int:
        result = await session.execute(select(model.name))
        existing = set(result.scalars().all())

        missing = [name for name in names if name not in existing]
        session.add_all(model(name=name) for name in missing)
        logger.info(f"{model.__tablename__}: {len(missing)} added, {len(existing)} already present")
        return len(missing)

    async def _add_demo_user(self, session: AsyncSession) -> int:
        result = await session.execute(select(User).where(User.email == DEMO_USER["email"]))
        if result.scalar_one_or_none():
            logger.info("Demo user already exists, skipping")
            return 0

        user = User(
            name=DEMO_USER["name"],
            email=DEMO_USER["email"],
            confirmed=True,
        )
        user.set_password(DEMO_USER["password"])
        session.add(user)

        logger.info(f"Demo user created: {DEMO_USER['email']} / {DEMO_USER['password']}")
        logger.warning("Remove the demo user in production!")
        return 1


async def run(command: str, database_url: Optional[str] = None) -> None:
    database = Database(database_url or settings.database_url)
    database.connect()
    try:
        manager = SeedManager(database)
        if command == "reset":
            await manager.reset()
        else:
            await manager.seed()
    finally:
        await database.dispose()


def main():
    """Command line interface for seeding."""
    parser = argparse.ArgumentParser(description="Seed the Realty Portal database")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("seed", help="Create tables and load reference data")

    reset_parser = subparsers.add_parser("reset", help="Drop all tables and seed again (development only)")
    reset_parser.add_argument("--confirm", action="store_true", help="Confirm database reset")

    parser.add_argument("--database-url", default=None, help="Override DATABASE_URL")

    args = parser.parse_args()
    command = args.command or "seed"

    if command == "reset" and not args.confirm:
        parser.error("Database reset requires --confirm flag")

    asyncio.run(run(command, args.database_url))


if __name__ == "__main__":
    main()
