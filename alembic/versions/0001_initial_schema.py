"""Initial schema: school, staff, students, attendance, homework, audit.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# SQLite only auto-increments INTEGER primary keys
BigIntPK = sa.BigInteger().with_variant(sa.Integer(), 'sqlite')

role_enum = sa.Enum('ADMIN', 'CLASS_INCHARGE', 'SUBJECT_TEACHER', 'STUDENT', name='role')
attendance_status_enum = sa.Enum('PRESENT', 'ABSENT', 'LEAVE', name='attendancestatus')
homework_status_enum = sa.Enum('ASSIGNED', 'CHECKING', 'COMPLETED', name='homeworkstatus')
audit_action_enum = sa.Enum(
    'SCHOOL_SETUP',
    'USER_CREATED',
    'USER_DELETED',
    'USER_LOGIN',
    'PASSWORD_CHANGED',
    'UPLOAD_COMPLETED',
    'MARKS_UPDATED',
    'MANUAL_TOTAL_SET',
    'DATA_CREATED',
    'DATA_UPDATED',
    'DATA_DELETED',
    name='auditaction',
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Create all tables."""
    op.create_table(
        'school_config',
        sa.Column('id', BigIntPK, primary_key=True, autoincrement=True),
        sa.Column('school_name', sa.String(255), nullable=False),
        sa.Column('admin_name', sa.String(255), nullable=False),
        sa.Column('is_setup', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        'users',
        sa.Column('id', BigIntPK, primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('username', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('role', role_enum, nullable=False),
        sa.Column('assigned_class', sa.String(10), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table(
        'teaching_assignments',
        sa.Column('id', BigIntPK, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.BigInteger(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('class_level', sa.String(10), nullable=False),
        sa.Column('subjects', sa.JSON(), nullable=False),
        sa.UniqueConstraint('user_id', 'class_level', name='uq_teaching_assignment_user_class'),
    )
    op.create_index('ix_teaching_assignments_user_id', 'teaching_assignments', ['user_id'])

    op.create_table(
        'students',
        sa.Column('id', BigIntPK, primary_key=True, autoincrement=True),
        sa.Column('roll_no', sa.String(50), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('class_level', sa.String(10), nullable=False),
        sa.Column('marks', sa.JSON(), nullable=False),
        sa.Column('manual_total', sa.Integer(), nullable=True),
        sa.Column('password_hash', sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('class_level', 'roll_no', name='uq_student_class_roll'),
    )
    op.create_index('ix_students_class_level', 'students', ['class_level'])

    op.create_table(
        'attendance_records',
        sa.Column('id', BigIntPK, primary_key=True, autoincrement=True),
        sa.Column('student_id', sa.BigInteger(), sa.ForeignKey('students.id', ondelete='CASCADE'), nullable=False),
        sa.Column('attendance_date', sa.Date(), nullable=False),
        sa.Column('status', attendance_status_enum, nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('student_id', 'attendance_date', name='uq_attendance_student_date'),
    )
    op.create_index('ix_attendance_records_student_id', 'attendance_records', ['student_id'])
    op.create_index('ix_attendance_records_attendance_date', 'attendance_records', ['attendance_date'])

    op.create_table(
        'homework_tasks',
        sa.Column('id', BigIntPK, primary_key=True, autoincrement=True),
        sa.Column('class_level', sa.String(10), nullable=False),
        sa.Column('subject', sa.String(50), nullable=False),
        sa.Column('task_name', sa.String(255), nullable=False),
        sa.Column('assigned_on', sa.Date(), nullable=False),
        sa.Column('status', homework_status_enum, nullable=False),
        sa.Column('non_submitters', sa.JSON(), nullable=False),
        sa.Column('created_by_id', sa.BigInteger(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_homework_tasks_class_level', 'homework_tasks', ['class_level'])

    op.create_table(
        'audit_logs',
        sa.Column('id', BigIntPK, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.BigInteger(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('action', audit_action_enum, nullable=False),
        sa.Column('resource_type', sa.String(100), nullable=False),
        sa.Column('resource_id', sa.String(100), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('extra_data', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.String(50), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_audit_logs_user_id', 'audit_logs', ['user_id'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])
    op.create_index('ix_audit_logs_created_at', 'audit_logs', ['created_at'])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('audit_logs')
    op.drop_table('homework_tasks')
    op.drop_table('attendance_records')
    op.drop_table('students')
    op.drop_table('teaching_assignments')
    op.drop_table('users')
    op.drop_table('school_config')

    bind = op.get_bind()
    for enum in (audit_action_enum, homework_status_enum, attendance_status_enum, role_enum):
        enum.drop(bind, checkfirst=True)
