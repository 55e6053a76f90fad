from sqlalchemy import Column, String, ForeignKey, DateTime, Boolean, Enum, Index, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
import enum
from timeclock.core.database import Base


class NotificationType(str, enum.Enum):
    TIME_OFF_REQUEST = "TIME_OFF_REQUEST"
    TIME_OFF_APPROVED = "TIME_OFF_APPROVED"
    TIME_OFF_DENIED = "TIME_OFF_DENIED"
    SHIFT_CHANGE_REQUEST = "SHIFT_CHANGE_REQUEST"
    SHIFT_CHANGE_APPROVED = "SHIFT_CHANGE_APPROVED"
    SHIFT_CHANGE_DENIED = "SHIFT_CHANGE_DENIED"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    type = Column(Enum(NotificationType, name="notificationtype", values_callable=lambda x: [e.value for e in x]), nullable=False)
    message = Column(String(1000), nullable=False)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    user = relationship("User", foreign_keys=[user_id])

    __table_args__ = (
        Index("idx_notifications_user_read", "user_id", "read"),
    )
