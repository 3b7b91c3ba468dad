"""
Proving Backend Interface
=========================

Capability interface over the external proving system. The proof
generator and verifier only talk to this interface, so any backend
implementing it (snarkjs, or the deterministic mock) can be swapped in.

Version: 0.1.0
"""

from abc import ABC, abstractmethod
from typing import Any

from zkmail.config import ProverMode, settings
from zkmail.logging import get_logger
from zkmail.zk.models import ProofBundle, PublicSignals, ZKProof
from zkmail.zk.resources import ArtifactLocation

logger = get_logger(__name__)


class ProvingBackend(ABC):
    """
    Abstract base class for proving backends.

    All methods are async; generate() may take seconds and cannot be
    cancelled once started.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend identifier."""
        pass

    @abstractmethod
    async def generate(
        self,
        circuit: ArtifactLocation,
        proving_key: ArtifactLocation,
        witness: dict[str, Any],
    ) -> ProofBundle:
        """
        Produce a proof for a witness.

        Args:
            circuit: Compiled circuit (.wasm) location
            proving_key: Proving key (.zkey) location
            witness: Circuit input signals

        Returns:
            ProofBundle with proof and public signals

        Raises:
            ProofGenerationError: If the backend fails
        """
        pass

    @abstractmethod
    async def verify(
        self,
        verification_key: dict[str, Any],
        public_signals: PublicSignals,
        proof: ZKProof,
    ) -> bool:
        """
        Check a proof against a parsed verification key.

        Returns:
            True if the proof is valid for these public signals
        """
        pass

    def bundled_verification_key(self) -> dict[str, Any] | None:
        """Verification key shipped with the backend itself, if any."""
        return None


# Global backend instance
_backend: ProvingBackend | None = None


def get_proving_backend() -> ProvingBackend:
    """
    Get the configured proving backend instance.

    Returns:
        ProvingBackend instance based on settings
    """
    global _backend

    if _backend is None:
        mode = settings.prover.mode

        if mode == ProverMode.MOCK:
            from zkmail.zk.mock import MockProvingBackend

            _backend = MockProvingBackend()
        elif mode == ProverMode.SNARKJS:
            from zkmail.zk.snarkjs import SnarkjsBackend

            _backend = SnarkjsBackend()
        else:
            raise ValueError(f"Unknown prover mode: {mode}")

        logger.info(
            "proving_backend_initialized",
            mode=mode.value,
        )

    return _backend


def set_proving_backend(backend: ProvingBackend) -> None:
    """
    Set a custom proving backend.

    Args:
        backend: ProvingBackend instance
    """
    global _backend
    _backend = backend
    logger.info(
        "proving_backend_set",
        backend=backend.name,
    )


def reset_proving_backend() -> None:
    """Reset the backend to be re-initialized."""
    global _backend
    _backend = None
