"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from app.api.routes.auth_routes import router as auth_router
from app.api.routes.profile_routes import router as profile_router
from app.api.routes.internship_routes import router as internship_router
from app.api.routes.application_routes import router as application_router
from app.api.routes.interview_routes import router as interview_router
from app.api.routes.bookmark_routes import router as bookmark_router
from app.api.routes.message_routes import router as message_router
from app.api.routes.notification_routes import router as notification_router
from app.api.routes.admin_routes import router as admin_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(profile_router)
api_router.include_router(internship_router)
api_router.include_router(application_router)
api_router.include_router(interview_router)
api_router.include_router(bookmark_router)
api_router.include_router(message_router)
api_router.include_router(notification_router)
api_router.include_router(admin_router)
