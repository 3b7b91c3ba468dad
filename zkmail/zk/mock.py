"""
Mock Proving Backend
====================

Deterministic in-process backend for development and testing.

It evaluates the twitter-login relation in Python (the claimed
username's commitment must equal one of the published allowedHashes)
and emits public signals `[isMember, *allowedHashes]`. The "proof"
points are SHA-256 digests binding those signals to a key id, so
verify() rejects any tampered signal. There is no zero-knowledge or
soundness here; never use it in production.

Version: 0.1.0
"""

import asyncio
import hashlib
import json
import time
from typing import Any

from pydantic import ValidationError

from zkmail.config import settings
from zkmail.exceptions import ProofGenerationError
from zkmail.logging import get_logger
from zkmail.zk.backend import ProvingBackend
from zkmail.zk.commitment import MAX_USERNAME_BYTES
from zkmail.zk.inputs import CircuitInput
from zkmail.zk.models import ProofBundle, ProofMetadata, PublicSignals, ZKProof
from zkmail.zk.resources import ArtifactLocation


logger = get_logger(__name__)

MOCK_PROTOCOL = "groth16"
MOCK_CURVE = "bn128"
MOCK_CIRCUIT_NAME = "twitter-login"


class MockProvingBackend(ProvingBackend):
    """
    In-process proving backend.

    Usage:
        backend = MockProvingBackend()
        bundle = await backend.generate("unused.wasm", "unused.zkey", witness)
        assert await backend.verify(backend.verification_key(), bundle.public_signals, bundle.proof)
    """

    def __init__(self, key_id: str | None = None, delay_seconds: float | None = None) -> None:
        """
        Initialize the mock backend.

        Args:
            key_id: Identifier bound into every proof (default from settings)
            delay_seconds: Artificial proving delay
        """
        self.key_id = key_id or settings.prover.mock_key_id
        self.delay_seconds = (
            settings.prover.mock_delay_seconds if delay_seconds is None else delay_seconds
        )
        logger.debug("mock_proving_backend_initialized", key_id=self.key_id)

    @property
    def name(self) -> str:
        return "mock"

    def verification_key(self) -> dict[str, Any]:
        """Verification key document matching this backend's proofs."""
        return {
            "protocol": MOCK_PROTOCOL,
            "curve": MOCK_CURVE,
            "nPublic": 4,
            "mock_key_id": self.key_id,
        }

    def bundled_verification_key(self) -> dict[str, Any]:
        return self.verification_key()

    @staticmethod
    def evaluate(circuit_input: CircuitInput) -> list[str]:
        """Compute the circuit's public signals for a witness."""
        data = [int(b) for b in circuit_input.username][:MAX_USERNAME_BYTES]
        salt = int(circuit_input.salt)
        commitment = sum(byte * (i + 1) for i, byte in enumerate(data)) + salt

        allowed = [int(h) for h in circuit_input.allowed_hashes]
        flag = "1" if commitment in allowed else "0"
        return [flag, *circuit_input.allowed_hashes]

    @staticmethod
    def _digest(key_id: str, label: str, signals: list[str]) -> str:
        payload = f"{key_id}|{label}|{json.dumps(signals)}".encode()
        return str(int.from_bytes(hashlib.sha256(payload).digest(), "big"))

    def _proof_for(self, signals: list[str], key_id: str) -> ZKProof:
        def d(label: str) -> str:
            return self._digest(key_id, label, signals)

        return ZKProof(
            pi_a=[d("a0"), d("a1"), "1"],
            pi_b=[[d("b00"), d("b01")], [d("b10"), d("b11")], ["1", "0"]],
            pi_c=[d("c0"), d("c1"), "1"],
            protocol=MOCK_PROTOCOL,
            curve=MOCK_CURVE,
        )

    async def generate(
        self,
        circuit: ArtifactLocation,
        proving_key: ArtifactLocation,
        witness: dict[str, Any],
    ) -> ProofBundle:
        """Evaluate the relation and emit a binding mock proof."""
        try:
            circuit_input = CircuitInput.from_witness(witness)
            signals = self.evaluate(circuit_input)
        except (KeyError, ValueError, TypeError, ValidationError) as e:
            raise ProofGenerationError(f"Invalid witness: {e}") from e

        start_time = time.time()
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)
        proving_time_ms = int((time.time() - start_time) * 1000)

        logger.info(
            "zk_proof_generated",
            backend=self.name,
            circuit=MOCK_CIRCUIT_NAME,
            proving_time_ms=proving_time_ms,
        )

        return ProofBundle(
            proof=self._proof_for(signals, self.key_id),
            public_signals=PublicSignals(signals=signals),
            metadata=ProofMetadata(
                circuit_name=MOCK_CIRCUIT_NAME,
                backend=self.name,
                proving_time_ms=proving_time_ms,
            ),
        )

    async def verify(
        self,
        verification_key: dict[str, Any],
        public_signals: PublicSignals,
        proof: ZKProof,
    ) -> bool:
        """Recompute the binding digests under the key's id."""
        key_id = verification_key.get("mock_key_id")
        if not key_id:
            return False
        if verification_key.get("protocol") != proof.protocol:
            return False
        if verification_key.get("curve") != proof.curve:
            return False

        expected = self._proof_for(list(public_signals.signals), key_id=key_id)
        is_valid = expected.model_dump() == proof.model_dump()

        logger.info("zk_proof_verified", backend=self.name, valid=is_valid)
        return is_valid
