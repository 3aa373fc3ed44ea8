"""
API package
"""

from fastapi import APIRouter
from .attestation import router as attestation_router
from .health import router as health_router
from .trust import router as trust_router
from .verification import router as verification_router

# Create main API router
api_router = APIRouter()

# Peer-facing attestation routes (no prefix: peers call {endpoint}/attestation)
api_router.include_router(attestation_router, tags=["attestation"])

# Health routes
api_router.include_router(health_router, tags=["health"])

# Trust score routes
api_router.include_router(trust_router, prefix="/trust", tags=["trust"])

# Verification routes
api_router.include_router(verification_router, prefix="/verification", tags=["verification"])
