from pydantic import BaseModel
from datetime import datetime
from uuid import UUID
from timeclock.models.notification import NotificationType


class NotificationResponse(BaseModel):
    id: UUID
    user_id: UUID
    type: NotificationType
    message: str
    read: bool
    created_at: datetime

    class Config:
        from_attributes = True
