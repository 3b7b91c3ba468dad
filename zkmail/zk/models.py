"""
ZK-SNARK Data Models
====================

Pydantic models for proofs and proof attempt results.

Version: 0.1.0
"""

import json
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

from zkmail.exceptions import ErrorKind


class ZKProof(BaseModel):
    """
    A zero-knowledge proof.

    Compatible with snarkjs Groth16 proof format.
    """

    # Proof points (G1 and G2 elements)
    pi_a: list[str] = Field(..., description="Proof point A (G1)")
    pi_b: list[list[str]] = Field(..., description="Proof point B (G2)")
    pi_c: list[str] = Field(..., description="Proof point C (G1)")

    # Protocol info
    protocol: str = Field(default="groth16")
    curve: str = Field(default="bn128")

    def to_calldata(self) -> list[int]:
        """Convert to Solidity calldata format (8 uint256)."""
        return [
            int(self.pi_a[0], 0),
            int(self.pi_a[1], 0),
            int(self.pi_b[0][0], 0),
            int(self.pi_b[0][1], 0),
            int(self.pi_b[1][0], 0),
            int(self.pi_b[1][1], 0),
            int(self.pi_c[0], 0),
            int(self.pi_c[1], 0),
        ]

    def to_hex(self) -> str:
        """Convert to hex string for transport."""
        return json.dumps(self.model_dump()).encode().hex()

    @classmethod
    def from_hex(cls, hex_str: str) -> "ZKProof":
        """Create from hex string."""
        data = json.loads(bytes.fromhex(hex_str).decode())
        return cls(**data)


class PublicSignals(BaseModel):
    """Public inputs and outputs from a proof."""

    signals: list[str] = Field(..., description="Public signals as decimal strings")

    @property
    def is_member(self) -> bool:
        """Membership flag (signal 0)."""
        return bool(self.signals) and self.signals[0] == "1"

    @property
    def allowed_hashes(self) -> list[str]:
        """Published commitments, when the circuit exposes them after the flag."""
        return self.signals[1:]

    def to_int_list(self) -> list[int]:
        """Convert to list of integers."""
        return [int(s) for s in self.signals]


class ProofMetadata(BaseModel):
    """Metadata about a generated proof."""

    circuit_name: str
    backend: str
    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    proving_time_ms: int = Field(..., ge=0)


class ProofBundle(BaseModel):
    """Proof with its public signals."""

    proof: ZKProof
    public_signals: PublicSignals
    metadata: ProofMetadata

    @property
    def is_member(self) -> bool:
        return self.public_signals.is_member


class PipelineStage(str, Enum):
    """Stages of one proof attempt. Transitions only move forward."""

    IDLE = "idle"
    AUTHENTICITY_CHECKED = "authenticity_checked"
    USERNAME_EXTRACTED = "username_extracted"
    MEMBERSHIP_PRECHECKED = "membership_prechecked"
    PROOF_GENERATED = "proof_generated"
    VERIFIED = "verified"
    REJECTED = "rejected"
    ERRORED = "errored"


class AttemptOutcome(str, Enum):
    """Final outcome of a proof attempt."""

    PROVED = "proved"
    VERIFIED = "verified"
    REJECTED = "rejected"
    ERRORED = "errored"


class EmailProofResult(BaseModel):
    """
    Caller-facing result of a proof attempt.

    `stage` is the last stage reached before the outcome. The salt and
    the commitments never appear here.
    """

    success: bool
    message: str
    outcome: AttemptOutcome
    stage: PipelineStage = PipelineStage.IDLE
    failure: ErrorKind | None = None

    extracted_username: str | None = None
    dkim_present: bool | None = None
    warning: str | None = None

    proof: ZKProof | None = None
    public_signals: PublicSignals | None = None
    proving_time_ms: int | None = None

    @property
    def verified_username(self) -> str | None:
        """Username the proof was generated for."""
        return self.extracted_username if self.proof is not None else None

    @property
    def is_rejection(self) -> bool:
        """True when the claim is false rather than infrastructure failing."""
        return self.outcome == AttemptOutcome.REJECTED

    @property
    def terminal_stage(self) -> PipelineStage:
        """State machine terminal state for this result."""
        if self.outcome == AttemptOutcome.VERIFIED:
            return PipelineStage.VERIFIED
        if self.outcome == AttemptOutcome.REJECTED:
            return PipelineStage.REJECTED
        if self.outcome == AttemptOutcome.ERRORED:
            return PipelineStage.ERRORED
        return PipelineStage.PROOF_GENERATED
