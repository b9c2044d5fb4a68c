import uvicorn
from attendance_app.config import settings

if __name__ == "__main__":
    # Production configuration
    uvicorn.run(
        "attendance_app.main:app",
        host="0.0.0.0",  # Allow connections from any IP
        port=settings.port,
        reload=False,    # Disable reload in production
        workers=1,        # Single worker for SQLite
        log_level=settings.log_level.lower(),
        access_log=False  # RequestLoggingMiddleware logs requests
    )
