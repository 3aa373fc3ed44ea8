"""
Verification endpoints - manual cycle trigger
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from multitee.api.deps import get_network_service
from multitee.services.attestation import (
    AttestationNetworkService,
    CycleAlreadyRunningError,
    VerificationBatch,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/run", response_model=VerificationBatch)
async def run_verification_cycle(
    service: AttestationNetworkService = Depends(get_network_service),
):
    """Run a verification cycle now and return its batch"""
    try:
        return await service.scheduler.run_now()
    except CycleAlreadyRunningError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
