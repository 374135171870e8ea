"""Main API router aggregating all module routers."""

from fastapi import APIRouter

from edurank.api.v1.endpoints import (
    attendance,
    audit,
    auth,
    dashboard,
    homework,
    marks,
    results,
    setup,
    staff,
    students,
)

api_router = APIRouter()

# School setup (no authentication, one-time)
api_router.include_router(
    setup.router,
    prefix="/setup",
    tags=["Setup"],
)

# Authentication
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["Authentication"],
)

# Staff (administrator only)
api_router.include_router(
    staff.router,
    prefix="/staff",
    tags=["Staff"],
)

# Students
api_router.include_router(
    students.router,
    prefix="/students",
    tags=["Students"],
)

# Subject-wise mark entry
api_router.include_router(
    marks.router,
    prefix="/marks",
    tags=["Marks"],
)

# Ranked results, import and export
api_router.include_router(
    results.router,
    prefix="/results",
    tags=["Results"],
)

# Dashboards
api_router.include_router(
    dashboard.router,
    prefix="/dashboard",
    tags=["Dashboard"],
)

# Attendance
api_router.include_router(
    attendance.router,
    prefix="/attendance",
    tags=["Attendance"],
)

# Homework
api_router.include_router(
    homework.router,
    prefix="/homework",
    tags=["Homework"],
)

# Audit Logs (administrator only)
api_router.include_router(
    audit.router,
    prefix="/audit-logs",
    tags=["Audit Logs"],
)
