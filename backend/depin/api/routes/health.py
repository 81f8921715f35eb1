"""
Health check endpoints
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from depin.core.config import get_settings
from depin.core.database import get_db
from depin.core.logging_config import LoggingConfig
from depin.services.network_state_manager import NetworkStateManager

logger = LoggingConfig.get_logger(__name__)
router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint

    Returns:
        dict: Health status
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": get_settings().app_name,
    }


@router.get("/health/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """
    Detailed health check with component status

    Returns:
        dict: Health of the database and the network state
    """
    settings = get_settings()
    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": settings.app_name,
        "version": "0.1.0",
        "environment": settings.app_env,
        "components": {},
    }

    try:
        db.execute(text("SELECT 1"))
        health_status["components"]["database"] = {"status": "healthy"}
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        health_status["components"]["database"] = {"status": "unhealthy", "error": str(e)}
        health_status["status"] = "unhealthy"
        return health_status

    state = NetworkStateManager(db).get_state_or_none()
    if state is None:
        health_status["components"]["network"] = {"status": "uninitialized"}
    else:
        health_status["components"]["network"] = {
            "status": "active" if state.is_active else "paused",
            "total_devices": state.total_devices,
        }

    log_counts = LoggingConfig.get_metrics()
    health_status["components"]["logging"] = {
        "counts": log_counts,
        "total": sum(log_counts.values()),
        "levels": LoggingConfig.get_module_levels(),
    }

    return health_status
