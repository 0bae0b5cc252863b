#!/usr/bin/env python3
"""
Database management script.
Creates or drops the schema and checks connectivity against the configured database.
"""

import asyncio
import sys
import argparse
import logging

from app.config import settings
from app.database import Database

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class SchemaManager:
    """Runs schema operations against a database created from settings."""

    def __init__(self, database: Database):
        self.database = database

    async def create_tables(self) -> None:
        logger.info("Creating database tables")
        await self.database.create_tables()

    async def drop_tables(self) -> None:
        """Drop every table. Refused in production."""
        logger.warning("Dropping database tables - all data will be lost!")
        await self.database.drop_tables()

    async def check(self) -> bool:
        """Test connectivity and report the pool state."""
        connected = await self.database.check_connection()
        if connected:
            logger.info(f"Pool status: {self.database.pool_status()}")
        return connected


async def run(command: str) -> bool:
    database = Database.from_settings(settings)
    manager = SchemaManager(database)
    try:
        if command == "create-tables":
            await manager.create_tables()
        elif command == "drop-tables":
            await manager.drop_tables()
        elif command == "check":
            return await manager.check()
        return True
    finally:
        await database.close()


def main():
    """Main CLI interface for schema management."""
    parser = argparse.ArgumentParser(description="Database schema management")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("create-tables", help="Create all tables")

    drop_parser = subparsers.add_parser("drop-tables", help="Drop all tables (not in production)")
    drop_parser.add_argument("--confirm", action="store_true", help="Confirm dropping tables")

    subparsers.add_parser("check", help="Test the database connection")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    if args.command == "drop-tables" and not args.confirm:
        print("Dropping tables requires --confirm flag")
        return

    try:
        ok = asyncio.run(run(args.command))
    except Exception as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)

    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
