"""
ZK-SNARK Proof Verification
===========================

Verify membership proofs against a verification key.

verify() is fail-closed: an unreachable or malformed key, or a backend
error, returns False just like an invalid proof. Use
load_verification_key() directly when the distinction matters.

Version: 0.1.0
"""

import time
from typing import Any

import httpx

from zkmail.config import settings
from zkmail.exceptions import ProofVerificationError, ResourceError
from zkmail.logging import get_logger
from zkmail.zk.backend import ProvingBackend, get_proving_backend
from zkmail.zk.models import PublicSignals, ZKProof
from zkmail.zk.resources import ArtifactLocation, fetch_json, resolve_artifact


logger = get_logger(__name__)


class ProofVerifier:
    """
    Proof verifier.

    Usage:
        verifier = ProofVerifier()
        ok = await verifier.verify(proof, public_signals, "https://example.org/vkey.json")
    """

    def __init__(
        self,
        backend: ProvingBackend | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the verifier.

        Args:
            backend: Proving backend (default: configured backend)
            http_client: Client used for URL verification keys
        """
        self.backend = backend or get_proving_backend()
        self._http_client = http_client

    async def load_verification_key(
        self,
        location: ArtifactLocation | None = None,
    ) -> dict[str, Any]:
        """
        Fetch and parse a verification key.

        Raises:
            ProofVerificationError: If the key is unavailable or malformed
        """
        resolved = resolve_artifact(location or settings.prover.verification_key)
        try:
            vkey = await fetch_json(resolved, self._http_client)
        except ResourceError as e:
            raise ProofVerificationError(str(e)) from e

        if not isinstance(vkey, dict):
            raise ProofVerificationError(f"Verification key is not a JSON object: {resolved}")
        return vkey

    async def verify(
        self,
        proof: ZKProof | dict[str, Any],
        public_signals: PublicSignals | list[str],
        verification_key: ArtifactLocation | dict[str, Any] | None = None,
    ) -> bool:
        """
        Verify a proof.

        Args:
            proof: Proof object or its snarkjs JSON
            public_signals: Public signals object or list of decimal strings
            verification_key: Parsed key, key location, or None for the backend's
                bundled key or else the configured key

        Returns:
            True only if the backend accepts the proof
        """
        start_time = time.time()
        try:
            if not isinstance(proof, ZKProof):
                proof = ZKProof(**proof)
            if not isinstance(public_signals, PublicSignals):
                public_signals = PublicSignals(signals=[str(s) for s in public_signals])

            if isinstance(verification_key, dict):
                vkey = verification_key
            elif verification_key is None and self.backend.bundled_verification_key():
                vkey = self.backend.bundled_verification_key()
            else:
                vkey = await self.load_verification_key(verification_key)

            is_valid = await self.backend.verify(vkey, public_signals, proof)
        except Exception as e:
            logger.warning(
                "zk_proof_verification_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        logger.info(
            "zk_proof_checked",
            valid=is_valid,
            verification_time_ms=int((time.time() - start_time) * 1000),
        )
        return bool(is_valid)


async def verify_proof(
    proof: ZKProof | dict[str, Any],
    public_signals: PublicSignals | list[str],
    verification_key: ArtifactLocation | dict[str, Any] | None = None,
    backend: ProvingBackend | None = None,
) -> bool:
    """
    Verify a proof with a one-off verifier.

    Returns:
        True if valid; False on any failure
    """
    verifier = ProofVerifier(backend=backend)
    return await verifier.verify(proof, public_signals, verification_key)
