"""
Shift Model

A scheduled block of work for one employee. Non-cancelled shifts of the same
user never overlap; the scheduler enforces this on every write path.
"""
import enum
import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Enum, Index, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from timeclock.core.database import Base


class ShiftStatus(str, enum.Enum):
    """Shift status options."""
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Shifts a kiosk clock-in may attach to
CLOCKABLE_SHIFT_STATUSES = [ShiftStatus.SCHEDULED, ShiftStatus.IN_PROGRESS]


class Shift(Base):
    """Individual shift assignment for an employee."""
    __tablename__ = "shifts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(Enum(ShiftStatus, name="shiftstatus", values_callable=lambda x: [e.value for e in x]), nullable=False, default=ShiftStatus.SCHEDULED)
    location = Column(String(255), nullable=True)
    position = Column(String(255), nullable=True)

    created_by_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    user = relationship("User", foreign_keys=[user_id], back_populates="shifts")
    creator = relationship("User", foreign_keys=[created_by_id])
    time_entries = relationship("TimeEntry", back_populates="shift")

    __table_args__ = (
        Index("idx_shifts_user_start", "user_id", "start_time"),
        Index("idx_shifts_status_start", "status", "start_time"),
    )
