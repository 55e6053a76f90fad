from sqlalchemy import Column, String, ForeignKey, DateTime, Float, Boolean, Index, Uuid, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from timeclock.core.database import Base


class TimeEntry(Base):
    __tablename__ = "time_entries"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    shift_id = Column(Uuid(as_uuid=True), ForeignKey("shifts.id"), nullable=False, index=True)
    clock_in_time = Column(DateTime, nullable=False)
    clock_out_time = Column(DateTime, nullable=True)
    total_hours = Column(Float, nullable=True)

    # Manager-authored corrections
    manual_entry = Column(Boolean, nullable=False, default=False)
    manual_entry_by_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    manual_entry_note = Column(String(500), nullable=True)

    # Kiosk metadata
    tablet_id = Column(String(100), nullable=True)
    tablet_location = Column(String(255), nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    user = relationship("User", foreign_keys=[user_id], back_populates="time_entries")
    manual_entry_author = relationship("User", foreign_keys=[manual_entry_by_id])
    shift = relationship("Shift", foreign_keys=[shift_id], back_populates="time_entries")

    __table_args__ = (
        # At most one open entry per user.
        Index(
            "uq_time_entries_open_per_user",
            "user_id",
            unique=True,
            postgresql_where=text("clock_out_time IS NULL"),
            sqlite_where=text("clock_out_time IS NULL"),
        ),
        Index("idx_time_entries_clock_in", "clock_in_time"),
        Index("idx_time_entries_user_clock_in", "user_id", "clock_in_time"),
    )

    @property
    def is_open(self) -> bool:
        return self.clock_out_time is None
