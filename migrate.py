#!/usr/bin/env python3
"""
Database management script.
Creates and resets the schema and seeds demo accounts and listings.
"""

import asyncio
import sys
import argparse
import logging
from pathlib import Path

# Add the app directory to the Python path
sys.path.insert(0, str(Path(__file__).parent))

from app.config import settings
from app.database import AsyncSessionLocal, create_tables, drop_tables, close_db_connection
from app.models.user import User, UserRole
from app.repositories.user import UserRepository
from app.services.seed import SeedService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

DEMO_USERS = [
    {"email": "admin@homesphere.in", "name": "HomeSphere Admin", "role": UserRole.ADMIN},
    {"email": "seller@homesphere.in", "name": "Demo Seller", "role": UserRole.SELLER, "phone": "+91 90000 00001"},
    {"email": "buyer@homesphere.in", "name": "Demo Buyer", "role": UserRole.BUYER},
]


class MigrationManager:
    """Manages schema creation and demo data."""

    async def create_schema(self) -> None:
        """Create every table that does not exist yet."""
        await create_tables()
        logger.info("Schema is up to date")

    async def reset_database(self) -> None:
        """Drop and recreate all tables."""
        logger.warning("Resetting database - all data will be lost!")

        if settings.is_production:
            raise RuntimeError("Database reset is not allowed in production")

        await drop_tables()
        await create_tables()
        logger.info("Database reset completed")

    async def seed_database(self) -> None:
        """Create the demo accounts and seed listings for the demo seller."""
        logger.info("Seeding database with demo data")

        async with AsyncSessionLocal() as session:
            user_repo = UserRepository(session)

            users = {}
            for user_data in DEMO_USERS:
                user = await user_repo.get_by_email(user_data["email"])
                if user is None:
                    user = await user_repo.create_user(dict(user_data))
                    logger.info(f"Created {user.role.value} account {user.email}")
                else:
                    logger.info(f"Account {user.email} already exists, skipping")
                users[user.role] = user

            seller: User = users[UserRole.SELLER]
            listings = await SeedService(session).seed_listings(seller)
            logger.info(f"{seller.email} now has {len(listings)} listings")


def main():
    """Main CLI interface for database management."""
    parser = argparse.ArgumentParser(description="Database management")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("create", help="Create all tables")

    reset_parser = subparsers.add_parser("reset", help="Drop and recreate all tables (not in production)")
    reset_parser.add_argument("--confirm", action="store_true", help="Confirm database reset")

    subparsers.add_parser("seed", help="Create demo accounts and listings")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    manager = MigrationManager()

    async def run(coro):
        try:
            await coro
        finally:
            await close_db_connection()

    try:
        if args.command == "create":
            asyncio.run(run(manager.create_schema()))

        elif args.command == "reset":
            if not args.confirm:
                print("Database reset requires --confirm flag")
                return
            asyncio.run(run(manager.reset_database()))

        elif args.command == "seed":
            asyncio.run(run(manager.seed_database()))

    except Exception as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
