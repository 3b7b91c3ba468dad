"""
snarkjs Backend
===============

Groth16 proving and verification through the snarkjs CLI.

Each call works in its own temporary directory, so concurrent attempts
never share witness or proof files.

Version: 0.1.0
"""

import asyncio
import json
import subprocess
import tempfile
import time
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from zkmail.config import settings
from zkmail.exceptions import ProofGenerationError
from zkmail.logging import get_logger
from zkmail.zk.backend import ProvingBackend
from zkmail.zk.models import ProofBundle, ProofMetadata, PublicSignals, ZKProof
from zkmail.zk.resources import ArtifactLocation, materialize


logger = get_logger(__name__)


class SnarkjsBackend(ProvingBackend):
    """
    Proving backend that shells out to snarkjs.

    Usage:
        backend = SnarkjsBackend()
        bundle = await backend.generate(wasm_path, zkey_path, witness)
    """

    def __init__(
        self,
        command: list[str] | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the backend.

        Args:
            command: snarkjs argv prefix (default from settings, "npx snarkjs")
            timeout: Subprocess timeout in seconds
            http_client: Client used to download URL artifacts
        """
        self.command = command or settings.prover.snarkjs_argv
        self.timeout = timeout or settings.prover.timeout_seconds
        self._http_client = http_client

    @property
    def name(self) -> str:
        return "snarkjs"

    async def _run(self, args: list[str], cwd: Path) -> subprocess.CompletedProcess[str]:
        return await asyncio.to_thread(
            subprocess.run,
            [*self.command, *args],
            capture_output=True,
            text=True,
            cwd=cwd,
            timeout=self.timeout,
        )

    async def generate(
        self,
        circuit: ArtifactLocation,
        proving_key: ArtifactLocation,
        witness: dict[str, Any],
    ) -> ProofBundle:
        """Run `snarkjs groth16 fullprove`."""
        circuit_name = Path(str(circuit)).stem

        with tempfile.TemporaryDirectory(prefix="zkmail-prove-") as tmp:
            work_dir = Path(tmp)
            wasm_path = await materialize(circuit, work_dir, self._http_client)
            zkey_path = await materialize(proving_key, work_dir, self._http_client)

            input_file = work_dir / "input.json"
            proof_file = work_dir / "proof.json"
            public_file = work_dir / "public.json"

            with open(input_file, "w") as f:
                json.dump(witness, f)

            start_time = time.time()
            try:
                result = await self._run(
                    [
                        "groth16",
                        "fullprove",
                        str(input_file),
                        str(wasm_path),
                        str(zkey_path),
                        str(proof_file),
                        str(public_file),
                    ],
                    cwd=work_dir,
                )
            except (OSError, subprocess.TimeoutExpired) as e:
                logger.error("snarkjs_unavailable", error=str(e), circuit=circuit_name)
                raise ProofGenerationError(f"Unable to run snarkjs: {e}") from e

            proving_time_ms = int((time.time() - start_time) * 1000)

            if result.returncode != 0:
                logger.error(
                    "snarkjs_proof_generation_failed",
                    stderr=result.stderr,
                    circuit=circuit_name,
                )
                raise ProofGenerationError(f"Proof generation failed: {result.stderr}")

            try:
                with open(proof_file) as f:
                    proof = ZKProof(**json.load(f))
                with open(public_file) as f:
                    public_signals = PublicSignals(signals=[str(s) for s in json.load(f)])
            except (OSError, ValueError, TypeError, ValidationError) as e:
                raise ProofGenerationError(f"snarkjs produced unreadable output: {e}") from e

        logger.info(
            "zk_proof_generated",
            backend=self.name,
            circuit=circuit_name,
            proving_time_ms=proving_time_ms,
        )

        return ProofBundle(
            proof=proof,
            public_signals=public_signals,
            metadata=ProofMetadata(
                circuit_name=circuit_name,
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
        """Run `snarkjs groth16 verify`."""
        with tempfile.TemporaryDirectory(prefix="zkmail-verify-") as tmp:
            work_dir = Path(tmp)
            vkey_file = work_dir / "verification_key.json"
            public_file = work_dir / "public.json"
            proof_file = work_dir / "proof.json"

            with open(vkey_file, "w") as f:
                json.dump(verification_key, f)
            with open(public_file, "w") as f:
                json.dump(public_signals.signals, f)
            with open(proof_file, "w") as f:
                json.dump(proof.model_dump(), f)

            start_time = time.time()
            try:
                result = await self._run(
                    [
                        "groth16",
                        "verify",
                        str(vkey_file),
                        str(public_file),
                        str(proof_file),
                    ],
                    cwd=work_dir,
                )
            except (OSError, subprocess.TimeoutExpired) as e:
                logger.error("snarkjs_unavailable", error=str(e))
                return False

        verification_time_ms = int((time.time() - start_time) * 1000)
        is_valid = result.returncode == 0 and "OK" in result.stdout

        logger.info(
            "zk_proof_verified",
            backend=self.name,
            valid=is_valid,
            verification_time_ms=verification_time_ms,
        )
        return is_valid
