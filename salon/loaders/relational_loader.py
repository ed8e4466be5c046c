"""Create the review tables and load sample data into PostgreSQL."""

import json
import logging

from salon.config import DATA_DIR
from salon.db.mongodb_client import mongo_client
from salon.db.postgres_client import db
from salon.models.review_documents import ReviewStatus

logger = logging.getLogger(__name__)


class RelationalLoader:
    def __init__(self, data_dir=DATA_DIR):
        self.db = db
        self.data_dir = data_dir

    def _read(self, filename: str) -> list[dict]:
        path = self.data_dir / filename
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    def load_users(self):
        """Load users into PostgreSQL."""
        users = self._read("users.json")

        with self.db.get_cursor() as cursor:
            for user in users:
                data = {
                    "id": user["id"],
                    "name": user["name"],
                    "email": user["email"],
                    "avatar": user.get("avatar"),
                    "provider": user.get("provider", "local"),
                    "verified": user.get("verified", False),
                    "is_admin": user.get("is_admin", False),
                }
                cursor.execute(
                    """
                    INSERT INTO users (id, name, email, avatar, provider, verified, is_admin)
                    VALUES (%(id)s, %(name)s, %(email)s, %(avatar)s, %(provider)s, %(verified)s, %(is_admin)s)
                    ON CONFLICT (id) DO NOTHING;
                    """,
                    data,
                )
        print(f"Loaded {len(users)} users")

    def load_reviews(self):
        """Load reviews and their replies. Users must already exist."""
        reviews = self._read("reviews.json")
        reply_count = 0

        with self.db.get_cursor() as cursor:
            for review in reviews:
                cursor.execute(
                    """
                    INSERT INTO reviews (user_id, rating, comment, status, helpful, created_at)
                    VALUES (%(user_id)s, %(rating)s, %(comment)s, %(status)s, %(helpful)s, COALESCE(%(created_at)s, NOW()))
                    ON CONFLICT (user_id) DO NOTHING
                    RETURNING id;
                    """,
                    {
                        "user_id": review["user_id"],
                        "rating": review["rating"],
                        "comment": review["comment"],
                        "status": review.get("status", ReviewStatus.APPROVED.value),
                        "helpful": review.get("helpful", 0),
                        "created_at": review.get("created_at"),
                    },
                )
                inserted = cursor.fetchone()
                if not inserted:
                    logger.info(f"User {review['user_id']} already has a review, skipping")
                    continue

                for reply in review.get("replies", []):
                    cursor.execute(
                        """
                        INSERT INTO review_replies (review_id, user_id, reply)
                        VALUES (%s, %s, %s);
                        """,
                        (inserted["id"], reply["user_id"], reply["reply"]),
                    )
                    reply_count += 1

        print(f"Loaded {len(reviews)} reviews with {reply_count} replies")

    def load_all(self):
        """Create tables, indexes and load all sample data."""
        print("Creating tables...")
        self.db.create_tables()

        print("Creating audit log indexes...")
        mongo_client.create_indexes()

        print("Loading users...")
        self.load_users()

        print("Loading reviews...")
        self.load_reviews()

        print("Relational data loading complete!")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    loader = RelationalLoader()
    loader.load_all()
