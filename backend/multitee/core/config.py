"""
Configuration settings for the attestation node
"""

import os
from typing import List, Optional, Tuple
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = os.getenv("APP_NAME", "multitee")
    APP_HOST: str = os.getenv("APP_HOST", "0.0.0.0")
    APP_PORT: int = int(os.getenv("APP_PORT", "8080"))

    # Identity of this node inside the TEE network (dstack app id)
    APP_ID: str = os.getenv("APP_ID", "")

    # Logging
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Verification cycle
    VERIFICATION_ENABLED: bool = True
    VERIFICATION_INTERVAL_SECONDS: int = int(
        os.getenv("VERIFICATION_INTERVAL_SECONDS", "15")
    )
    # Peers verified at once; 1 verifies them one after another
    VERIFICATION_CONCURRENCY: int = int(os.getenv("VERIFICATION_CONCURRENCY", "1"))
    QUOTE_FETCH_TIMEOUT_SECONDS: float = float(
        os.getenv("QUOTE_FETCH_TIMEOUT_SECONDS", "10")
    )
    VERIFIER_TIMEOUT_SECONDS: float = float(os.getenv("VERIFIER_TIMEOUT_SECONDS", "30"))

    # Intel DCAP quote verification tool
    DCAP_QVL_BINARY: str = os.getenv("DCAP_QVL_BINARY", "dcap-qvl")
    VERIFIER_SUCCESS_MARKER: str = os.getenv("VERIFIER_SUCCESS_MARKER", "Quote verified")

    # Peers: comma-separated "app_id" or "app_id=https://endpoint" entries
    PEER_NODES: str = os.getenv("PEER_NODES", "")
    PEER_ENDPOINT_TEMPLATE: str = os.getenv(
        "PEER_ENDPOINT_TEMPLATE", "https://{app_id}-8080.dstack-prod5.phala.network"
    )

    # Ledger
    LEDGER_BACKEND: str = os.getenv("LEDGER_BACKEND", "web3")
    LEDGER_RPC_URL: Optional[str] = os.getenv("LEDGER_RPC_URL")
    LEDGER_CONTRACT_ADDRESS: Optional[str] = os.getenv("LEDGER_CONTRACT_ADDRESS")
    LEDGER_PRIVATE_KEY: Optional[str] = os.getenv("LEDGER_PRIVATE_KEY")
    LEDGER_TX_TIMEOUT_SECONDS: int = int(os.getenv("LEDGER_TX_TIMEOUT_SECONDS", "120"))

    # Local attestation report (dstack guest agent)
    DSTACK_SOCKET_PATH: str = os.getenv("DSTACK_SOCKET_PATH", "/var/run/tappd.sock")
    REPORT_DATA: str = os.getenv("REPORT_DATA", "user-data")
    REPORT_HASH_ALGORITHM: str = os.getenv("REPORT_HASH_ALGORITHM", "sha256")

    # Trust score boundaries (inclusive lower bounds on the rounded score).
    # 51 reproduces the "> 50" warning band.
    TRUST_SECURE_THRESHOLD: int = int(os.getenv("TRUST_SECURE_THRESHOLD", "75"))
    TRUST_WARNING_THRESHOLD: int = int(os.getenv("TRUST_WARNING_THRESHOLD", "51"))

    # Metrics
    PROMETHEUS_ENABLED: bool = True

    @field_validator("VERIFICATION_ENABLED", "PROMETHEUS_ENABLED", mode="before")
    @classmethod
    def parse_bool(cls, v):
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.lower() in ("true", "1", "yes")
        return bool(v)

    @field_validator("LEDGER_BACKEND")
    @classmethod
    def validate_ledger_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in ("web3", "memory"):
            raise ValueError("LEDGER_BACKEND must be 'web3' or 'memory'")
        return v

    @field_validator("VERIFICATION_INTERVAL_SECONDS", "VERIFICATION_CONCURRENCY")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def validate_trust_thresholds(self) -> "Settings":
        """Both trust boundaries must sit inside 0..100 and stay ordered."""
        for name in ("TRUST_SECURE_THRESHOLD", "TRUST_WARNING_THRESHOLD"):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ValueError(f"{name} must be between 0 and 100, got {value}")
        if self.TRUST_WARNING_THRESHOLD > self.TRUST_SECURE_THRESHOLD:
            raise ValueError(
                "TRUST_WARNING_THRESHOLD must not exceed TRUST_SECURE_THRESHOLD"
            )
        return self

    @model_validator(mode="after")
    def validate_ledger_settings(self) -> "Settings":
        """
        Fail fast when the on-chain ledger is selected without credentials.

        Verification results are worthless if every batch submission fails,
        so a half-configured web3 backend is rejected at startup. Use
        LEDGER_BACKEND=memory for local development.
        """
        if self.LEDGER_BACKEND != "web3":
            return self

        missing = [
            name
            for name in ("LEDGER_RPC_URL", "LEDGER_CONTRACT_ADDRESS", "LEDGER_PRIVATE_KEY")
            if not getattr(self, name)
        ]
        if missing:
            raise ValueError(
                f"LEDGER_BACKEND=web3 requires {', '.join(missing)}. "
                "Set them or switch to LEDGER_BACKEND=memory."
            )
        return self

    def peer_entries(self) -> List[Tuple[str, str]]:
        """Parse PEER_NODES into (app_id, endpoint) pairs, in declaration order."""
        entries = []
        for raw in self.PEER_NODES.split(","):
            raw = raw.strip()
            if not raw:
                continue
            if "=" in raw:
                app_id, endpoint = (part.strip() for part in raw.split("=", 1))
            else:
                app_id = raw
                endpoint = self.PEER_ENDPOINT_TEMPLATE.format(app_id=app_id)
            entries.append((app_id, endpoint.rstrip("/")))
        return entries


# Global settings instance
settings = Settings()
