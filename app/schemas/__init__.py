"""
Schemas module - Request/Response schemas for API endpoints.

Everything lives in app.schemas.schemas; profile variants
(StudentProfile, CompanyProfile, AdminProfile) double as the internal
representation of the signed-in user.
"""
