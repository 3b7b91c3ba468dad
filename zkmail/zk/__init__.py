"""
ZK-SNARK Integration Module
===========================

Allow-list membership proofs for login-notification emails.

Usage:
    from zkmail.zk import EmailProofGenerator, ProofVerifier

    # Generate a proof
    generator = EmailProofGenerator()
    result = await generator.generate(raw_email, ["alice", "bob"])

    # Verify proof
    is_valid = await ProofVerifier().verify(result.proof, result.public_signals)

Version: 0.1.0
"""

from zkmail.zk.backend import (
    ProvingBackend,
    get_proving_backend,
    reset_proving_backend,
    set_proving_backend,
)
from zkmail.zk.commitment import (
    MAX_ALLOWED_USERNAMES,
    MAX_USERNAME_BYTES,
    commit_allow_list,
    commit_username,
    username_to_char_array,
)
from zkmail.zk.inputs import CircuitInput, CircuitInputBuilder
from zkmail.zk.mock import MockProvingBackend
from zkmail.zk.models import (
    AttemptOutcome,
    EmailProofResult,
    PipelineStage,
    ProofBundle,
    ProofMetadata,
    PublicSignals,
    ZKProof,
)
from zkmail.zk.pipeline import run_attempt, run_attempt_from_upload
from zkmail.zk.prover import EmailProofGenerator, generate_email_proof
from zkmail.zk.snarkjs import SnarkjsBackend
from zkmail.zk.verifier import ProofVerifier, verify_proof


__all__ = [
    # Commitments
    "MAX_ALLOWED_USERNAMES",
    "MAX_USERNAME_BYTES",
    "commit_username",
    "commit_allow_list",
    "username_to_char_array",
    # Inputs
    "CircuitInput",
    "CircuitInputBuilder",
    # Backends
    "ProvingBackend",
    "get_proving_backend",
    "set_proving_backend",
    "reset_proving_backend",
    "MockProvingBackend",
    "SnarkjsBackend",
    # Prover
    "EmailProofGenerator",
    "generate_email_proof",
    # Verifier
    "ProofVerifier",
    "verify_proof",
    # Pipeline
    "run_attempt",
    "run_attempt_from_upload",
    # Models
    "ZKProof",
    "PublicSignals",
    "ProofMetadata",
    "ProofBundle",
    "EmailProofResult",
    "AttemptOutcome",
    "PipelineStage",
]
