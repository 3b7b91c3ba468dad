"""
Proof Attempt Pipeline
======================

End-to-end attempt: generate a membership proof from an email, then
verify it.

    IDLE -> AUTHENTICITY_CHECKED -> USERNAME_EXTRACTED
         -> MEMBERSHIP_PRECHECKED -> PROOF_GENERATED
         -> VERIFIED | REJECTED | ERRORED

Nothing is kept between attempts.

Usage:
    from zkmail.zk.pipeline import run_attempt

    result = await run_attempt(raw_email, ["alice", "bob"])
    print(result.outcome, result.message)

Version: 0.1.0
"""

import uuid
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from zkmail.email.authenticity import load_email
from zkmail.exceptions import ErrorKind, FormatError
from zkmail.logging import bound_context, get_logger
from zkmail.zk.backend import ProvingBackend, get_proving_backend
from zkmail.zk.models import AttemptOutcome, EmailProofResult, PipelineStage
from zkmail.zk.prover import EmailProofGenerator
from zkmail.zk.resources import ArtifactLocation
from zkmail.zk.verifier import ProofVerifier


logger = get_logger(__name__)


async def run_attempt(
    email_text: str,
    allowed_usernames: Sequence[str],
    *,
    verify: bool = True,
    verification_key: ArtifactLocation | dict[str, Any] | None = None,
    backend: ProvingBackend | None = None,
    generator: EmailProofGenerator | None = None,
    verifier: ProofVerifier | None = None,
) -> EmailProofResult:
    """
    Run one complete attempt.

    Args:
        email_text: Raw email content
        allowed_usernames: Allow-list snapshot
        verify: Verify the proof after generating it
        verification_key: Parsed key or key location (default from settings)
        backend: Proving backend shared by generator and verifier
        generator: Custom proof generator
        verifier: Custom proof verifier

    Returns:
        EmailProofResult with outcome VERIFIED (or PROVED when verify=False),
        REJECTED or ERRORED
    """
    backend = backend or (generator.backend if generator else get_proving_backend())
    generator = generator or EmailProofGenerator(backend=backend)

    with bound_context(attempt_id=uuid.uuid4().hex):
        result = await generator.generate(email_text, allowed_usernames)
        if not result.success or not verify:
            return result

        verifier = verifier or ProofVerifier(backend=backend)
        is_valid = await verifier.verify(result.proof, result.public_signals, verification_key)

        if not is_valid:
            logger.warning("email_proof_rejected_by_verifier")
            return result.model_copy(
                update={
                    "success": False,
                    "message": "Proof verification failed",
                    "outcome": AttemptOutcome.REJECTED,
                    "failure": ErrorKind.PROOF_VERIFICATION,
                }
            )

        if not result.public_signals.is_member:
            logger.warning("email_proof_attests_non_membership")
            return result.model_copy(
                update={
                    "success": False,
                    "message": "Proof does not attest allow-list membership",
                    "outcome": AttemptOutcome.REJECTED,
                    "failure": ErrorKind.MEMBERSHIP,
                }
            )

        logger.info("email_proof_verified")
        return result.model_copy(
            update={
                "message": f"Verified @{result.extracted_username} is in the allowed list",
                "outcome": AttemptOutcome.VERIFIED,
            }
        )


async def run_attempt_from_upload(
    source: bytes | str | Path,
    allowed_usernames: Sequence[str],
    **kwargs: Any,
) -> EmailProofResult:
    """
    Run an attempt on an uploaded .eml file (bytes or path).

    Unreadable or non-UTF-8 uploads are rejected as FORMAT failures.
    """
    try:
        email_text = await load_email(source)
    except FormatError as e:
        logger.info("email_upload_rejected", error=str(e))
        return EmailProofResult(
            success=False,
            message=str(e),
            outcome=AttemptOutcome.REJECTED,
            stage=PipelineStage.IDLE,
            failure=ErrorKind.FORMAT,
        )

    return await run_attempt(email_text, allowed_usernames, **kwargs)
