"""Health check endpoints"""
import time
from datetime import datetime

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from airdealer import __version__
from airdealer.database import get_db
from airdealer.utils.jwt_utils import get_private_key

router = APIRouter(prefix="/health", tags=["health"])

STARTUP_TIME = time.time()
SLOW_DATABASE_MS = 1000


@router.get("")
def health_check():
    """Process is up"""
    return {
        "status": "healthy",
        "service": "AirDealer Admin",
        "version": __version__,
        "timestamp": datetime.utcnow().isoformat()
    }


@router.get("/ready")
def readiness_check(db: Session = Depends(get_db)):
    """
    Ready to serve admins: the record store answers and sessions can be signed.

    Returns 503 when either check fails or the database is slow.
    """
    checks = {"database": False, "database_latency_ms": None, "session_keys": False}
    problems = []

    try:
        start = time.time()
        db.execute(text("SELECT 1"))
        checks["database"] = True
        checks["database_latency_ms"] = round((time.time() - start) * 1000, 2)
    except SQLAlchemyError as e:
        problems.append(f"database: {e}")

    try:
        checks["session_keys"] = get_private_key() is not None
    except ValueError as e:
        # malformed JWT_PRIVATE_KEY
        problems.append(f"session keys: {e}")

    if checks["database_latency_ms"] is not None and checks["database_latency_ms"] > SLOW_DATABASE_MS:
        problems.append("database latency is high")

    if problems:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": checks, "problems": problems},
        )

    return {"status": "ready", "checks": checks, "timestamp": datetime.utcnow().isoformat()}


@router.get("/live")
def liveness_check():
    return {
        "status": "alive",
        "uptime_seconds": round(time.time() - STARTUP_TIME, 2),
        "timestamp": datetime.utcnow().isoformat()
    }
