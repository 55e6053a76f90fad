"""Initial schema

Revision ID: 001
Revises: 
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('role', sa.Enum('EMPLOYEE', 'MANAGER', 'ADMIN', name='userrole'), nullable=False),
        sa.Column('status', sa.Enum('ACTIVE', 'INACTIVE', name='userstatus'), nullable=False),
        sa.Column('pin_digest', sa.String(64), nullable=True),
        sa.Column('pin_changed_at', sa.DateTime(), nullable=True),
        sa.Column('hourly_rate', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('idx_users_role_status', 'users', ['role', 'status'])
    # One active holder per PIN, enforced by storage rather than a prior lookup
    op.create_index(
        'uq_users_active_pin_digest',
        'users',
        ['pin_digest'],
        unique=True,
        postgresql_where=sa.text("status = 'ACTIVE' AND pin_digest IS NOT NULL"),
    )

    # Create shifts table
    op.create_table(
        'shifts',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('user_id', sa.Uuid(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('status', sa.Enum('SCHEDULED', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED', name='shiftstatus'), nullable=False),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('position', sa.String(255), nullable=True),
        sa.Column('created_by_id', sa.Uuid(as_uuid=True), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_shifts_user_id', 'shifts', ['user_id'])
    op.create_index('idx_shifts_user_start', 'shifts', ['user_id', 'start_time'])
    op.create_index('idx_shifts_status_start', 'shifts', ['status', 'start_time'])

    # Create time_entries table
    op.create_table(
        'time_entries',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('user_id', sa.Uuid(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('shift_id', sa.Uuid(as_uuid=True), sa.ForeignKey('shifts.id'), nullable=False),
        sa.Column('clock_in_time', sa.DateTime(), nullable=False),
        sa.Column('clock_out_time', sa.DateTime(), nullable=True),
        sa.Column('total_hours', sa.Float(), nullable=True),
        sa.Column('manual_entry', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('manual_entry_by_id', sa.Uuid(as_uuid=True), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('manual_entry_note', sa.String(500), nullable=True),
        sa.Column('tablet_id', sa.String(100), nullable=True),
        sa.Column('tablet_location', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_time_entries_user_id', 'time_entries', ['user_id'])
    op.create_index('ix_time_entries_shift_id', 'time_entries', ['shift_id'])
    op.create_index('idx_time_entries_clock_in', 'time_entries', ['clock_in_time'])
    op.create_index('idx_time_entries_user_clock_in', 'time_entries', ['user_id', 'clock_in_time'])
    # At most one open entry per user
    op.create_index(
        'uq_time_entries_open_per_user',
        'time_entries',
        ['user_id'],
        unique=True,
        postgresql_where=sa.text('clock_out_time IS NULL'),
    )

    # requeststatus is shared by both request tables
    request_status = postgresql.ENUM('PENDING', 'APPROVED', 'DENIED', name='requeststatus')
    request_status.create(op.get_bind(), checkfirst=True)
    request_status_column = postgresql.ENUM('PENDING', 'APPROVED', 'DENIED', name='requeststatus', create_type=False)

    # Create time_off_requests table
    op.create_table(
        'time_off_requests',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('user_id', sa.Uuid(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('type', sa.Enum('VACATION', 'SICK', 'PERSONAL', 'UNPAID', 'OTHER', name='timeofftype'), nullable=False),
        sa.Column('reason', sa.String(1000), nullable=True),
        sa.Column('status', request_status_column, nullable=False),
        sa.Column('reviewed_by_id', sa.Uuid(as_uuid=True), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('manager_notes', sa.String(1000), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_time_off_requests_user_id', 'time_off_requests', ['user_id'])
    op.create_index('idx_time_off_requests_user_status', 'time_off_requests', ['user_id', 'status'])
    op.create_index('idx_time_off_requests_status_created', 'time_off_requests', ['status', 'created_at'])

    # Create shift_change_requests table
    op.create_table(
        'shift_change_requests',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('user_id', sa.Uuid(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('original_shift_id', sa.Uuid(as_uuid=True), sa.ForeignKey('shifts.id'), nullable=False),
        sa.Column('requested_start_time', sa.DateTime(), nullable=False),
        sa.Column('requested_end_time', sa.DateTime(), nullable=False),
        sa.Column('reason', sa.String(1000), nullable=True),
        sa.Column('status', request_status_column, nullable=False),
        sa.Column('reviewed_by_id', sa.Uuid(as_uuid=True), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('manager_notes', sa.String(1000), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_shift_change_requests_user_id', 'shift_change_requests', ['user_id'])
    op.create_index('ix_shift_change_requests_original_shift_id', 'shift_change_requests', ['original_shift_id'])
    op.create_index('idx_shift_change_requests_shift_status', 'shift_change_requests', ['original_shift_id', 'status'])
    op.create_index('idx_shift_change_requests_status_created', 'shift_change_requests', ['status', 'created_at'])

    # Create notifications table
    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('user_id', sa.Uuid(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column(
            'type',
            sa.Enum(
                'TIME_OFF_REQUEST', 'TIME_OFF_APPROVED', 'TIME_OFF_DENIED',
                'SHIFT_CHANGE_REQUEST', 'SHIFT_CHANGE_APPROVED', 'SHIFT_CHANGE_DENIED',
                name='notificationtype',
            ),
            nullable=False,
        ),
        sa.Column('message', sa.String(1000), nullable=False),
        sa.Column('read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])
    op.create_index('idx_notifications_user_read', 'notifications', ['user_id', 'read'])


def downgrade() -> None:
    op.drop_table('notifications')
    op.drop_table('shift_change_requests')
    op.drop_table('time_off_requests')
    op.drop_table('time_entries')
    op.drop_table('shifts')
    op.drop_table('users')

    # Drop enums
    sa.Enum(name='notificationtype').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='requeststatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='timeofftype').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='shiftstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='userstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='userrole').drop(op.get_bind(), checkfirst=True)
