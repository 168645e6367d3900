# File: api/routers/all_endpoints.py

from fastapi import APIRouter

from civiclens.api.routers.analytics import analytics
from civiclens.api.routers.auth import login, logout, profile, register
from civiclens.api.routers.notifications import notifications
from civiclens.api.routers.reports import analyze, reports
from civiclens.api.routers.submissions import submissions
from civiclens.api.routers.utility_routes import router as utility_router


# Main router
all_routers = APIRouter()

# Include routers
all_routers.include_router(register.router)
all_routers.include_router(login.router)
all_routers.include_router(logout.router)
all_routers.include_router(profile.router)

all_routers.include_router(analyze.router)
all_routers.include_router(reports.router)
all_routers.include_router(submissions.router)

all_routers.include_router(analytics.router)
all_routers.include_router(notifications.router)

all_routers.include_router(utility_router)
