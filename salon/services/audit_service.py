"""Best-effort audit trail stored in MongoDB."""

import logging
from typing import Any

from salon.db.mongodb_client import mongo_client
from salon.models.audit_logs import AuditLog

logger = logging.getLogger(__name__)


class AuditService:
    def __init__(self):
        self.collection_name = "audit_logs"

    def record(
        self,
        action: str,
        table_name: str,
        record_id: Any,
        new_values: dict[str, Any] | None = None,
        user_id: str | None = None,
    ) -> bool:
        """
        Write one audit entry.

        Never raises: the audit store being down must not fail the action
        being audited.

        Returns:
            True when the entry was written
        """
        entry = AuditLog(
            user_id=user_id,
            action=action,
            table_name=table_name,
            record_id=str(record_id),
            new_values=new_values or {},
        )

        try:
            collection = mongo_client.get_collection(self.collection_name)
            collection.insert_one(entry.model_dump(exclude={"id"}))
            return True
        except Exception as e:
            logger.warning(f"Audit log write skipped for {action} on {table_name}:{record_id}: {e}")
            return False

    def history(self, table_name: str, record_id: Any, limit: int = 50) -> list[dict[str, Any]]:
        """Most recent audit entries for one record."""
        collection = mongo_client.get_collection(self.collection_name)
        cursor = (
            collection.find({"table_name": table_name, "record_id": str(record_id)})
            .sort("created_at", -1)
            .limit(limit)
        )
        return [AuditLog.model_validate({**doc, "_id": str(doc["_id"])}).model_dump() for doc in cursor]


# Singleton instance
audit_service = AuditService()
