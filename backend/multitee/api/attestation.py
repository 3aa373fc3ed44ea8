"""
Local attestation endpoints - queried by peer TEEs
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from multitee.api.deps import get_network_service
from multitee.services.attestation import (
    AttestationNetworkService,
    AttestationReport,
    AttestationReportUnavailableError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/attestation", response_model=AttestationReport)
async def get_attestation(
    service: AttestationNetworkService = Depends(get_network_service),
):
    """
    Return this node's attestation report (or the corrupted one while the
    anomaly toggle is active)
    """
    try:
        return service.local.get_report()
    except AttestationReportUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )


@router.get("/toggle-anomaly")
async def toggle_anomaly(
    service: AttestationNetworkService = Depends(get_network_service),
):
    """Flip the anomaly flag"""
    return {"status": service.local.toggle_anomaly()}
