"""MongoDB connection and utilities."""

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

from salon.config import MONGO_CONFIG


class MongoDBClient:
    def __init__(self):
        self.client = MongoClient(MONGO_CONFIG["uri"], serverSelectionTimeoutMS=2000)
        self.db: Database = self.client[MONGO_CONFIG["database"]]

    def get_collection(self, name: str):
        """Get a MongoDB collection."""
        return self.db[name]

    def create_indexes(self):
        """Create necessary indexes."""
        audit_logs = self.db.get_collection("audit_logs")
        audit_logs.create_index([("table_name", ASCENDING), ("record_id", ASCENDING)])
        audit_logs.create_index([("created_at", DESCENDING)])
        audit_logs.create_index("user_id")


# Singleton instance
mongo_client = MongoDBClient()
