"""Staff activity log schemas"""

from datetime import datetime
from typing import Optional, List, Any, Dict
from pydantic import BaseModel


class ActivityResponse(BaseModel):
    id: int
    staff_id: Optional[str]
    action_type: str
    entity_type: str
    entity_id: Optional[str]
    details: Optional[Dict[str, Any]]
    created_at: datetime

    # Display fields
    action_display: str
    staff_name: str = ""

    class Config:
        from_attributes = True


class ActivityListResponse(BaseModel):
    data: List[ActivityResponse]
    total: int
    page: int
    limit: int
