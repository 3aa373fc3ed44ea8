"""
multitee - mutual remote attestation for TEE networks
"""

__version__ = "0.1.0"
