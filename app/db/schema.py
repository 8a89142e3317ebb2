"""
Table definitions.

Queries elsewhere are raw SQL; these definitions exist so the schema
(including its CHECK / UNIQUE / cascade constraints) can be created on
PostgreSQL in deployment and on SQLite in tests from the same source.

Tables:
- users          : auth identity (email, password hash, signup role)
- profiles       : one row per account, id shared with users
- internships    : postings owned by a company profile
- applications   : student -> internship submissions
- bookmarks      : student saved internships
- messages       : directed notes between profiles
- notifications  : per-user feed entries
- interviews     : meetings tied to one application
"""

from sqlalchemy import (
    MetaData, Table, Column, String, Text, Integer, Boolean, DateTime,
    ForeignKey, CheckConstraint, UniqueConstraint, Index
)

metadata = MetaData()

ROLES = ("student", "company", "admin")
INTERNSHIP_TYPES = ("full-time", "part-time")
INTERNSHIP_STATUSES = ("open", "closed", "draft")
APPLICATION_STATUSES = ("pending", "reviewing", "accepted", "rejected")
MESSAGE_RELATIONS = ("application", "internship", "general")
NOTIFICATION_TYPES = ("application", "message", "status_change", "interview_scheduled")
MEETING_TYPES = ("video", "phone", "in-person")
INTERVIEW_STATUSES = ("scheduled", "completed", "cancelled")


def _in(column: str, values: tuple) -> str:
    return f"{column} IN ({', '.join(repr(v) for v in values)})"


def _fk(target: str) -> ForeignKey:
    return ForeignKey(target, ondelete="CASCADE")


users = Table(
    "users", metadata,
    Column("id", String(36), primary_key=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", String(255), nullable=False),
    Column("role", String(20), nullable=False),
    Column("email_confirmed", Boolean, nullable=False, default=False),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    CheckConstraint(_in("role", ROLES), name="ck_users_role"),
)

profiles = Table(
    "profiles", metadata,
    Column("id", String(36), _fk("users.id"), primary_key=True),
    Column("email", String(255), nullable=False),
    Column("role", String(20), nullable=False),
    Column("full_name", String(200)),
    Column("avatar_url", Text),
    Column("bio", Text),
    Column("location", String(200)),
    # student
    Column("university", String(200)),
    Column("degree", String(200)),
    Column("graduation_year", Integer),
    Column("resume_url", Text),
    # company
    Column("company_name", String(200)),
    Column("company_industry", String(200)),
    Column("company_size", String(50)),
    Column("website", Text),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    CheckConstraint(_in("role", ROLES), name="ck_profiles_role"),
)

internships = Table(
    "internships", metadata,
    Column("id", String(36), primary_key=True),
    Column("company_id", String(36), _fk("profiles.id"), nullable=False),
    Column("title", String(200), nullable=False),
    Column("description", Text, nullable=False),
    Column("requirements", Text, nullable=False),
    Column("location", String(200), nullable=False),
    Column("is_remote", Boolean, nullable=False, default=False),
    Column("type", String(20), nullable=False),
    Column("duration", String(100), nullable=False),
    Column("stipend", String(100)),
    Column("deadline", DateTime(timezone=True)),
    # JSON-encoded ordered list of skill names
    Column("skills", Text, nullable=False, default="[]"),
    Column("status", String(20), nullable=False, default="open"),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    CheckConstraint(_in("type", INTERNSHIP_TYPES), name="ck_internships_type"),
    CheckConstraint(_in("status", INTERNSHIP_STATUSES), name="ck_internships_status"),
    Index("ix_internships_company", "company_id"),
)

applications = Table(
    "applications", metadata,
    Column("id", String(36), primary_key=True),
    Column("internship_id", String(36), _fk("internships.id"), nullable=False),
    Column("student_id", String(36), _fk("profiles.id"), nullable=False),
    Column("cover_letter", Text),
    Column("resume_url", Text),
    Column("status", String(20), nullable=False, default="pending"),
    Column("version", Integer, nullable=False, default=1),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    CheckConstraint(_in("status", APPLICATION_STATUSES), name="ck_applications_status"),
    UniqueConstraint("student_id", "internship_id", name="uq_applications_student_internship"),
)

bookmarks = Table(
    "bookmarks", metadata,
    Column("id", String(36), primary_key=True),
    Column("student_id", String(36), _fk("profiles.id"), nullable=False),
    Column("internship_id", String(36), _fk("internships.id"), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("student_id", "internship_id", name="uq_bookmarks_student_internship"),
)

messages = Table(
    "messages", metadata,
    Column("id", String(36), primary_key=True),
    Column("sender_id", String(36), _fk("profiles.id"), nullable=False),
    Column("recipient_id", String(36), _fk("profiles.id"), nullable=False),
    Column("subject", String(255)),
    Column("message_text", Text, nullable=False),
    Column("related_to", String(20), nullable=False, default="general"),
    Column("related_id", String(36)),
    Column("is_read", Boolean, nullable=False, default=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    CheckConstraint(_in("related_to", MESSAGE_RELATIONS), name="ck_messages_related_to"),
    Index("ix_messages_recipient", "recipient_id"),
)

notifications = Table(
    "notifications", metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(36), _fk("profiles.id"), nullable=False),
    Column("type", String(30), nullable=False),
    Column("related_id", String(36)),
    Column("title", String(255), nullable=False),
    Column("content", Text, nullable=False),
    Column("is_read", Boolean, nullable=False, default=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    CheckConstraint(_in("type", NOTIFICATION_TYPES), name="ck_notifications_type"),
    Index("ix_notifications_user_read", "user_id", "is_read"),
)

interviews = Table(
    "interviews", metadata,
    Column("id", String(36), primary_key=True),
    Column("application_id", String(36), _fk("applications.id"), nullable=False),
    Column("student_id", String(36), _fk("profiles.id"), nullable=False),
    Column("company_id", String(36), _fk("profiles.id"), nullable=False),
    Column("title", String(255), nullable=False),
    Column("start_time", DateTime(timezone=True), nullable=False),
    Column("end_time", DateTime(timezone=True), nullable=False),
    Column("meeting_type", String(20), nullable=False),
    Column("meeting_link", Text),
    Column("description", Text),
    Column("status", String(20), nullable=False, default="scheduled"),
    Column("created_at", DateTime(timezone=True), nullable=False),
    CheckConstraint(_in("meeting_type", MEETING_TYPES), name="ck_interviews_meeting_type"),
    CheckConstraint(_in("status", INTERVIEW_STATUSES), name="ck_interviews_status"),
)


def init_schema(bind) -> None:
    """Create all tables that do not exist yet."""
    metadata.create_all(bind=bind)


def drop_schema(bind) -> None:
    metadata.drop_all(bind=bind)
