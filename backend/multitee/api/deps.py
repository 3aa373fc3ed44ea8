"""
Shared FastAPI dependencies
"""

from fastapi import HTTPException, Request, status

from multitee.services.attestation import AttestationNetworkService


def get_network_service(request: Request) -> AttestationNetworkService:
    """Return the service context attached to the application at startup."""
    service = getattr(request.app.state, "network_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Attestation network service is not initialized",
        )
    return service
