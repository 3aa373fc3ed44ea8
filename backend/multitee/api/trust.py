"""
Trust endpoints - trust scores derived from ledger verification counts
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from multitee.api.deps import get_network_service
from multitee.services.attestation import (
    AttestationNetworkService,
    LedgerReadError,
    TrustRecord,
    VerificationEvent,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _ledger_unavailable(e: LedgerReadError) -> HTTPException:
    logger.error(f"Ledger read failed: {e}")
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail="Failed to read verification counts from the ledger",
    )


@router.get("", response_model=List[TrustRecord])
async def list_trust_records(
    service: AttestationNetworkService = Depends(get_network_service),
):
    """Trust score and status for every known node"""
    try:
        return await service.trust_records()
    except LedgerReadError as e:
        raise _ledger_unavailable(e)


@router.get("/events", response_model=List[VerificationEvent])
async def list_verification_events(
    from_block: Optional[int] = Query(None, ge=0),
    service: AttestationNetworkService = Depends(get_network_service),
):
    """Verification events recorded by the ledger"""
    try:
        return await service.verification_events(from_block)
    except LedgerReadError as e:
        raise _ledger_unavailable(e)


@router.get("/{tee_id}", response_model=TrustRecord)
async def get_trust_record(
    tee_id: str,
    service: AttestationNetworkService = Depends(get_network_service),
):
    """Trust score and status for one node"""
    try:
        return await service.trust_record(tee_id)
    except LedgerReadError as e:
        raise _ledger_unavailable(e)
