from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class AuditLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime
    venue_id: str | None
    actor_id: str | None
    action_type: str
    target_type: str
    target_id: str
    summary: str
    diff_json: dict | None
