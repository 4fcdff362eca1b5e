from datetime import datetime

from fastapi import APIRouter

from variation_stock.readiness import readiness_manager

router = APIRouter()


@router.get("/health")
async def health_check():
    status = readiness_manager.get_status()
    healthy = all(status["services"].values())
    return {
        "status": "healthy" if healthy else "degraded",
        "services": status["services"],
        "timestamp": datetime.utcnow().isoformat()
    }


@router.get("/ready")
async def readiness_check():
    return readiness_manager.get_status()
