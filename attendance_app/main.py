from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .database import engine
from .models import Base
from .api import (
    auth, students, faculty, batches, subjects, attendance, timetable, announcements, notifications, assignments,
    syllabus,
)
from .core.exceptions import register_exception_handlers
from .core.logging_config import setup_logging, get_logger
from .core.middleware import RequestLoggingMiddleware

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_tables:
        # Create database tables
        Base.metadata.create_all(bind=engine)
    logger.info(f"{settings.app_name} v{settings.app_version} started ({settings.environment})")
    yield
    engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Attendance, timetable and coursework backend for a college department",
    version=settings.app_version,
    lifespan=lifespan,
)

# CORS middleware
origins = settings.cors_origin_list
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials="*" not in origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)

# Include routers
app.include_router(auth.router)
app.include_router(students.router)
app.include_router(faculty.router)
app.include_router(batches.router)
app.include_router(subjects.router)
app.include_router(attendance.faculty_router)
app.include_router(attendance.student_router)
app.include_router(attendance.hod_router)
app.include_router(timetable.router)
app.include_router(announcements.router)
app.include_router(notifications.router)
app.include_router(assignments.router)
app.include_router(syllabus.router)


@app.get("/health")
def health_check():
    """Used by the mobile client to validate a configured server address"""
    return {
        "success": True,
        "message": "Server is healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.app_version,
    }
