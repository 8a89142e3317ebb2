"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from pydantic import BaseModel, EmailStr, Field, TypeAdapter
from typing import Optional, List, Literal, Union, ClassVar, Dict, Annotated
from datetime import datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "student"
    company = "company"
    admin = "admin"


class InternshipType(str, Enum):
    full_time = "full-time"
    part_time = "part-time"


class InternshipStatus(str, Enum):
    open = "open"
    closed = "closed"
    draft = "draft"


class ApplicationStatus(str, Enum):
    pending = "pending"
    reviewing = "reviewing"
    accepted = "accepted"
    rejected = "rejected"


class MessageRelation(str, Enum):
    application = "application"
    internship = "internship"
    general = "general"


class NotificationType(str, Enum):
    application = "application"
    message = "message"
    status_change = "status_change"
    interview_scheduled = "interview_scheduled"


class MeetingType(str, Enum):
    video = "video"
    phone = "phone"
    in_person = "in-person"


class InterviewStatus(str, Enum):
    scheduled = "scheduled"
    completed = "completed"
    cancelled = "cancelled"


# ============================================================
# PROFILES (tagged union on `role`)
# ============================================================

class ProfileBase(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Messaging capabilities, see app.services.permissions.can_message
    messages_anyone: ClassVar[bool] = False
    reachable_by_anyone: ClassVar[bool] = False
    messaging_counterpart: ClassVar[Optional[str]] = None
    messaging_denial: ClassVar[str] = "You are not allowed to message this user"

    # Columns the owner may change through PUT /profiles/me
    editable_fields: ClassVar[tuple] = ("full_name", "avatar_url")


class StudentProfile(ProfileBase):
    role: Literal["student"] = "student"
    bio: Optional[str] = None
    location: Optional[str] = None
    university: Optional[str] = None
    degree: Optional[str] = None
    graduation_year: Optional[int] = None
    resume_url: Optional[str] = None

    messaging_counterpart: ClassVar[Optional[str]] = "company"
    messaging_denial: ClassVar[str] = (
        "You can only message admins or companies whose internships you have applied to. "
        "Apply to an internship first, then message the company."
    )
    editable_fields: ClassVar[tuple] = ProfileBase.editable_fields + (
        "bio", "location", "university", "degree", "graduation_year", "resume_url"
    )


class CompanyProfile(ProfileBase):
    role: Literal["company"] = "company"
    company_name: Optional[str] = None
    company_industry: Optional[str] = None
    company_size: Optional[str] = None
    website: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None

    messaging_counterpart: ClassVar[Optional[str]] = "student"
    messaging_denial: ClassVar[str] = (
        "You can only message admins or students who have applied to your internships"
    )
    editable_fields: ClassVar[tuple] = ProfileBase.editable_fields + (
        "company_name", "company_industry", "company_size", "website", "bio", "location"
    )


class AdminProfile(ProfileBase):
    role: Literal["admin"] = "admin"

    messages_anyone: ClassVar[bool] = True
    reachable_by_anyone: ClassVar[bool] = True


Profile = Annotated[
    Union[StudentProfile, CompanyProfile, AdminProfile],
    Field(discriminator="role")
]

_profile_adapter = TypeAdapter(Profile)


def profile_from_row(row: dict) -> Union[StudentProfile, CompanyProfile, AdminProfile]:
    """Build the matching profile variant from a profiles row; other roles' columns are dropped."""
    return _profile_adapter.validate_python({k: v for k, v in row.items() if v is not None})


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=2, max_length=100)
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    university: Optional[str] = None
    degree: Optional[str] = None
    graduation_year: Optional[int] = Field(None, ge=1950, le=2100)
    resume_url: Optional[str] = None
    company_name: Optional[str] = Field(None, min_length=2, max_length=200)
    company_industry: Optional[str] = None
    company_size: Optional[str] = None
    website: Optional[str] = None


class ProfileSummary(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    role: str
    company_name: Optional[str] = None


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    confirm_password: str
    role: UserRole
    full_name: str = Field(..., min_length=1, max_length=100)
    company_name: Optional[str] = None
    university: Optional[str] = None


class RegisterResponse(BaseModel):
    user_id: str
    role: str
    pending_confirmation: bool
    message: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    role: str


class VerifyEmailRequest(BaseModel):
    token: str


class ResendVerificationRequest(BaseModel):
    email: EmailStr


# ============================================================
# INTERNSHIP SCHEMAS
# ============================================================

class InternshipCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=1)
    requirements: str = ""
    location: str = Field(..., min_length=1)
    is_remote: bool = False
    type: InternshipType = InternshipType.full_time
    duration: str = Field(..., min_length=1)
    stipend: Optional[str] = None
    deadline: Optional[datetime] = None
    skills: List[str] = []
    status: InternshipStatus = InternshipStatus.open


class InternshipUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = None
    requirements: Optional[str] = None
    location: Optional[str] = None
    is_remote: Optional[bool] = None
    type: Optional[InternshipType] = None
    duration: Optional[str] = None
    stipend: Optional[str] = None
    deadline: Optional[datetime] = None
    skills: Optional[List[str]] = None
    status: Optional[InternshipStatus] = None


class InternshipResponse(BaseModel):
    id: str
    company_id: str
    company_name: Optional[str] = None
    title: str
    description: str
    requirements: str
    location: str
    is_remote: bool
    type: str
    duration: str
    stipend: Optional[str] = None
    deadline: Optional[datetime] = None
    skills: List[str] = []
    status: str
    created_at: datetime
    updated_at: datetime


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(BaseModel):
    internship_id: str
    cover_letter: Optional[str] = None


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus
    expected_version: Optional[int] = Field(
        None, description="Reject the write if the row was changed since this version was read"
    )


class ApplicationResponse(BaseModel):
    id: str
    internship_id: str
    internship_title: Optional[str] = None
    company_id: Optional[str] = None
    company_name: Optional[str] = None
    student_id: str
    student_name: Optional[str] = None
    cover_letter: Optional[str] = None
    resume_url: Optional[str] = None
    status: ApplicationStatus
    version: int
    created_at: datetime
    updated_at: datetime


# ============================================================
# INTERVIEW SCHEMAS
# ============================================================

class InterviewCreate(BaseModel):
    application_id: str
    start_time: datetime
    end_time: datetime
    meeting_type: MeetingType = MeetingType.video
    meeting_link: Optional[str] = None
    description: Optional[str] = None
    title: Optional[str] = None


class InterviewStatusUpdate(BaseModel):
    status: InterviewStatus


class InterviewResponse(BaseModel):
    id: str
    application_id: str
    student_id: str
    company_id: str
    title: str
    start_time: datetime
    end_time: datetime
    meeting_type: str
    meeting_link: Optional[str] = None
    description: Optional[str] = None
    status: str
    created_at: datetime


# ============================================================
# BOOKMARK SCHEMAS
# ============================================================

class BookmarkToggle(BaseModel):
    internship_id: str


class BookmarkToggleResponse(BaseModel):
    internship_id: str
    bookmarked: bool


class BookmarkResponse(BaseModel):
    id: str
    internship_id: str
    student_id: str
    created_at: datetime
    internship: Optional[InternshipResponse] = None


# ============================================================
# MESSAGE SCHEMAS
# ============================================================

class MessageCreate(BaseModel):
    recipient_id: str
    subject: Optional[str] = Field(None, max_length=255)
    message_text: str = Field(..., min_length=1)
    related_to: MessageRelation = MessageRelation.general
    related_id: Optional[str] = None


class MessageOut(BaseModel):
    id: str
    sender_id: str
    recipient_id: str
    sender_name: Optional[str] = None
    recipient_name: Optional[str] = None
    subject: Optional[str] = None
    message_text: str
    related_to: str
    related_id: Optional[str] = None
    is_read: bool
    created_at: datetime
    updated_at: datetime


class CanMessageResponse(BaseModel):
    allowed: bool
    reason: Optional[str] = None


# ============================================================
# NOTIFICATION SCHEMAS
# ============================================================

class NotificationResponse(BaseModel):
    id: str
    user_id: str
    type: NotificationType
    related_id: Optional[str] = None
    title: str
    content: str
    is_read: bool
    created_at: datetime


class UnreadCountResponse(BaseModel):
    unread: int


class MarkReadResponse(BaseModel):
    updated: bool


class MarkAllReadResponse(BaseModel):
    updated: int


# ============================================================
# ADMIN SCHEMAS
# ============================================================

class DashboardStats(BaseModel):
    total_students: int
    total_companies: int
    total_internships: int
    active_applications: int


class ApplicationAnalytics(BaseModel):
    total_applications: int
    by_status: Dict[str, int]
    by_date: Dict[str, int]
    by_internship: Dict[str, int]
    by_company: Dict[str, int]


class DeleteProfileResponse(BaseModel):
    profile_id: str
    internships_deleted: int
    applications_deleted: int


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True
