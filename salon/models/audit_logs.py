"""
Pydantic model for MongoDB 'audit_logs' collection.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


class AuditLog(BaseModel):
    id: str | None = Field(None, alias="_id")
    user_id: str | None = None
    action: str
    table_name: str
    record_id: str
    new_values: dict[str, Any] = {}
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
