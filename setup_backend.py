"""
Infrastructure Setup Script for the Salon Reviews Backend
This script checks the database connections and the sample data.
"""

import asyncio
import logging

from salon.db.mongodb_client import mongo_client
from salon.db.postgres_client import db
from salon.db.redis_client import redis_client

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def check_database_connections():
    """Check if all database connections are working."""
    logger.info("Checking database connections...")

    # Check PostgreSQL
    try:
        with db.get_cursor() as cursor:
            cursor.execute("SELECT 1 AS ok")
            if cursor.fetchone():
                logger.info("✅ PostgreSQL connection: OK")
            else:
                logger.error("❌ PostgreSQL connection: Failed")
                return False
    except Exception as e:
        logger.error(f"❌ PostgreSQL connection error: {e}")
        return False

    # Check Redis
    try:
        redis_client.client.ping()
        logger.info("✅ Redis connection: OK")
    except Exception as e:
        logger.error(f"❌ Redis connection error: {e}")
        return False

    # MongoDB only holds the audit trail, so a failure here is a warning
    try:
        mongo_client.client.admin.command("ping")
        logger.info("✅ MongoDB connection: OK")
    except Exception as e:
        logger.warning(f"⚠️ MongoDB unavailable, moderation audit entries will be skipped: {e}")

    return True


async def check_data_availability():
    """Check if sample data is available."""
    logger.info("Checking data availability...")

    try:
        with db.get_cursor() as cursor:
            cursor.execute("SELECT COUNT(*) FROM users")
            user_count = cursor.fetchone()["count"]
            logger.info(f"👤 Users in database: {user_count}")

            cursor.execute("SELECT status, COUNT(*) FROM reviews GROUP BY status")
            by_status = {row["status"]: row["count"] for row in cursor.fetchall()}
            logger.info(f"⭐ Reviews by status: {by_status or 'none'}")

            if not by_status:
                logger.warning("⚠️ No reviews found. Run the data loader first.")
                return False

    except Exception as e:
        logger.error(f"Error checking data: {e}")
        return False

    return True


async def main():
    """Main setup function."""
    logger.info("🚀 Setting up Salon Reviews Backend...")

    if not await check_database_connections():
        logger.error("❌ Database connection check failed!")
        return False

    if not await check_data_availability():
        logger.warning("⚠️ Data availability check failed!")
        logger.info("💡 To create tables and load sample data, run:")
        logger.info("   python -m salon.loaders.relational_loader")
        return False

    logger.info("✅ Setup complete! Ready to start the server.")
    return True


if __name__ == "__main__":
    asyncio.run(main())
