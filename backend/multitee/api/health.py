"""
Health Check Endpoints
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from multitee.api.deps import get_network_service
from multitee.services.attestation import AttestationNetworkService

router = APIRouter()


@router.get("/health")
async def health(service: AttestationNetworkService = Depends(get_network_service)):
    """Liveness plus the state of the verification loop and local report"""
    return {
        "status": "healthy" if service.local.available else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "app_id": service.registry.self_id,
        "peers": len(service.registry.peers()),
        "report_available": service.local.available,
        "anomaly_active": service.local.anomaly.active,
        "scheduler_running": service.scheduler.running,
        "cycle_running": service.scheduler.cycle_running,
    }
