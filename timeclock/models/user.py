from sqlalchemy import Column, String, DateTime, Enum, Float, Index, Uuid, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
import enum
from timeclock.core.database import Base


class UserRole(str, enum.Enum):
    EMPLOYEE = "EMPLOYEE"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"


class UserStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


MANAGER_ROLES = [UserRole.MANAGER, UserRole.ADMIN]


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), nullable=False, unique=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(50), nullable=True)
    role = Column(Enum(UserRole, name="userrole", values_callable=lambda x: [e.value for e in x]), nullable=False, default=UserRole.EMPLOYEE)
    status = Column(Enum(UserStatus, name="userstatus", values_callable=lambda x: [e.value for e in x]), nullable=False, default=UserStatus.ACTIVE)
    pin_digest = Column(String(64), nullable=True)
    pin_changed_at = Column(DateTime, nullable=True)
    hourly_rate = Column(Float, nullable=True)  # Falls back to DEFAULT_HOURLY_RATE in labor reports
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    time_entries = relationship("TimeEntry", back_populates="user", foreign_keys="TimeEntry.user_id")
    shifts = relationship("Shift", back_populates="user", foreign_keys="Shift.user_id")

    __table_args__ = (
        # A PIN identifies exactly one active user; enforced by storage, not by a prior read.
        Index(
            "uq_users_active_pin_digest",
            "pin_digest",
            unique=True,
            postgresql_where=text("status = 'ACTIVE' AND pin_digest IS NOT NULL"),
            sqlite_where=text("status = 'ACTIVE' AND pin_digest IS NOT NULL"),
        ),
        Index("idx_users_role_status", "role", "status"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def has_pin(self) -> bool:
        return self.pin_digest is not None
