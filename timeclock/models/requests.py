"""
Employee requests reviewed by managers: time off and shift changes.

Both share the same lifecycle: PENDING -> APPROVED | DENIED, terminal after review.
"""
from sqlalchemy import Column, String, ForeignKey, DateTime, Date, Enum, Index, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
import enum
from timeclock.core.database import Base


class RequestStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    DENIED = "DENIED"


class TimeOffType(str, enum.Enum):
    VACATION = "VACATION"
    SICK = "SICK"
    PERSONAL = "PERSONAL"
    UNPAID = "UNPAID"
    OTHER = "OTHER"


class TimeOffRequest(Base):
    __tablename__ = "time_off_requests"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    type = Column(Enum(TimeOffType, name="timeofftype", values_callable=lambda x: [e.value for e in x]), nullable=False)
    reason = Column(String(1000), nullable=True)
    status = Column(Enum(RequestStatus, name="requeststatus", values_callable=lambda x: [e.value for e in x]), nullable=False, default=RequestStatus.PENDING)
    reviewed_by_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    manager_notes = Column(String(1000), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    user = relationship("User", foreign_keys=[user_id])
    reviewer = relationship("User", foreign_keys=[reviewed_by_id])

    __table_args__ = (
        Index("idx_time_off_requests_user_status", "user_id", "status"),
        Index("idx_time_off_requests_status_created", "status", "created_at"),
    )


class ShiftChangeRequest(Base):
    __tablename__ = "shift_change_requests"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    original_shift_id = Column(Uuid(as_uuid=True), ForeignKey("shifts.id"), nullable=False, index=True)
    requested_start_time = Column(DateTime, nullable=False)
    requested_end_time = Column(DateTime, nullable=False)
    reason = Column(String(1000), nullable=True)
    status = Column(Enum(RequestStatus, name="requeststatus", values_callable=lambda x: [e.value for e in x]), nullable=False, default=RequestStatus.PENDING)
    reviewed_by_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    manager_notes = Column(String(1000), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    user = relationship("User", foreign_keys=[user_id])
    reviewer = relationship("User", foreign_keys=[reviewed_by_id])
    original_shift = relationship("Shift", foreign_keys=[original_shift_id])

    __table_args__ = (
        Index("idx_shift_change_requests_shift_status", "original_shift_id", "status"),
        Index("idx_shift_change_requests_status_created", "status", "created_at"),
    )
