"""ABI subset of the AttestationVerificationRecord contract used by this node."""

ATTESTATION_VERIFICATION_RECORD_ABI = [
    {
        "type": "function",
        "name": "submitBatchVerifications",
        "inputs": [
            {
                "name": "_verifications",
                "type": "tuple[]",
                "internalType": "struct AttestationVerificationRecord.VerificationInput[]",
                "components": [
                    {"name": "verifierTeeId", "type": "string", "internalType": "string"},
                    {"name": "verifiedTeeId", "type": "string", "internalType": "string"},
                    {"name": "success", "type": "bool", "internalType": "bool"},
                ],
            }
        ],
        "outputs": [{"name": "", "type": "bool", "internalType": "bool"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "getVerificationCounts",
        "inputs": [{"name": "_teeId", "type": "string", "internalType": "string"}],
        "outputs": [
            {"name": "totalVerifications", "type": "uint256", "internalType": "uint256"},
            {"name": "successfulVerifications", "type": "uint256", "internalType": "uint256"},
        ],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "getAllVerificationCounts",
        "inputs": [],
        "outputs": [
            {"name": "teeIds", "type": "string[]", "internalType": "string[]"},
            {"name": "totalVerificationCounts", "type": "uint256[]", "internalType": "uint256[]"},
            {
                "name": "successfulVerificationCounts",
                "type": "uint256[]",
                "internalType": "uint256[]",
            },
        ],
        "stateMutability": "view",
    },
    {
        "type": "event",
        "name": "VerificationSubmitted",
        "inputs": [
            {"name": "verifierTeeId", "type": "string", "indexed": True, "internalType": "string"},
            {"name": "verifiedTeeId", "type": "string", "indexed": True, "internalType": "string"},
            {"name": "success", "type": "bool", "indexed": False, "internalType": "bool"},
        ],
        "anonymous": False,
    },
]
