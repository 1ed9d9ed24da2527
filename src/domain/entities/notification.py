from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, Field


class Notification(BaseModel):
    """Entry of the bounded user_notifications:{user_id} list"""

    id: str
    user_id: str
    type: str
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime
