"""
Email Membership Proof Generation
=================================

Orchestrates one proof attempt for a login-notification email:

1. origin check (sender domain, DKIM presence)
2. username extraction
3. cleartext allow-list membership check
4. salted commitments and circuit input
5. proof from the proving backend

Membership is checked in the clear before proving, so the proof hides
*which* allow-listed identity matched, not *whether* one did. Every
failure becomes an EmailProofResult; no exception leaves generate().

Version: 0.1.0
"""

import secrets
from collections.abc import Callable, Sequence

from zkmail.config import settings
from zkmail.email.authenticity import AuthenticityReport, EmailAuthenticityChecker
from zkmail.email.extraction import UsernameExtractor
from zkmail.exceptions import (
    ErrorKind,
    ExtractionError,
    MembershipError,
    ShapeError,
    ZkMailError,
)
from zkmail.logging import get_logger
from zkmail.zk.backend import ProvingBackend, get_proving_backend
from zkmail.zk.commitment import MAX_ALLOWED_USERNAMES, MAX_USERNAME_BYTES, username_bytes
from zkmail.zk.inputs import CircuitInputBuilder
from zkmail.zk.models import AttemptOutcome, EmailProofResult, PipelineStage, ProofBundle
from zkmail.zk.resources import ArtifactLocation, resolve_artifact


logger = get_logger(__name__)


def generate_salt() -> int:
    """Draw a fresh salt from the process-wide CSPRNG."""
    return secrets.randbelow(settings.circuit.salt_upper_bound)


def check_circuit_shape(username: str, allowed_usernames: Sequence[str]) -> None:
    """
    Guard the circuit's hard limits before committing.

    The commitment silently ignores bytes past the tenth, so two long
    handles sharing a prefix would commit identically; reject them here.

    Raises:
        ShapeError: Too many allow-listed usernames or one that is too long
    """
    if len(allowed_usernames) > MAX_ALLOWED_USERNAMES:
        raise ShapeError(
            f"Allow-list has {len(allowed_usernames)} usernames, circuit supports at most "
            f"{MAX_ALLOWED_USERNAMES}"
        )

    for name in (username, *allowed_usernames):
        if len(username_bytes(name)) > MAX_USERNAME_BYTES:
            raise ShapeError(
                f"Username is longer than {MAX_USERNAME_BYTES} bytes and cannot be committed"
            )


class EmailProofGenerator:
    """
    Generate allow-list membership proofs from login-notification emails.

    Usage:
        generator = EmailProofGenerator()
        result = await generator.generate(raw_email, ["alice", "bob"])
        if result.success:
            send(result.proof, result.public_signals)
    """

    def __init__(
        self,
        backend: ProvingBackend | None = None,
        checker: EmailAuthenticityChecker | None = None,
        extractor: UsernameExtractor | None = None,
        builder: CircuitInputBuilder | None = None,
        salt_source: Callable[[], int] | None = None,
        circuit_wasm: ArtifactLocation | None = None,
        proving_key: ArtifactLocation | None = None,
    ) -> None:
        """
        Initialize the generator.

        Args:
            backend: Proving backend (default: configured backend)
            checker: Email origin checker
            extractor: Username extractor
            builder: Circuit input builder
            salt_source: Callable returning a fresh salt per attempt
            circuit_wasm: Compiled circuit location (default from settings)
            proving_key: Proving key location (default from settings)
        """
        self.backend = backend or get_proving_backend()
        self.checker = checker or EmailAuthenticityChecker()
        self.extractor = extractor or UsernameExtractor()
        self.builder = builder or CircuitInputBuilder()
        self.salt_source = salt_source or generate_salt
        self.circuit_wasm = resolve_artifact(circuit_wasm or settings.prover.circuit_wasm)
        self.proving_key = resolve_artifact(proving_key or settings.prover.proving_key)

    async def prove_membership(
        self,
        username: str,
        allowed_usernames: Sequence[str],
        salt: int | None = None,
    ) -> ProofBundle:
        """
        Prove that a username commits to one of the allow-list commitments.

        No cleartext membership check is done here; a non-member gets a
        proof whose membership signal is "0".

        Raises:
            ShapeError: Allow-list or username violates circuit limits
            ProofGenerationError: Backend failure
        """
        allowed = tuple(allowed_usernames)
        check_circuit_shape(username, allowed)

        if salt is None:
            salt = self.salt_source()

        circuit_input = self.builder.build(username, allowed, salt)
        logger.debug("circuit_input_built", allowed_count=len(allowed))

        return await self.backend.generate(
            self.circuit_wasm,
            self.proving_key,
            circuit_input.to_witness(),
        )

    async def generate(
        self,
        email_text: str,
        allowed_usernames: Sequence[str],
    ) -> EmailProofResult:
        """
        Run one proof attempt.

        Args:
            email_text: Raw email content
            allowed_usernames: Allow-list snapshot for this attempt

        Returns:
            EmailProofResult with outcome PROVED, REJECTED or ERRORED
        """
        # Snapshot; the caller may mutate its list while we await the backend
        allowed = tuple(allowed_usernames)
        stage = PipelineStage.IDLE
        report: AuthenticityReport | None = None
        username: str | None = None

        try:
            report = self.checker.check(email_text)
            stage = PipelineStage.AUTHENTICITY_CHECKED

            username = self.extractor.extract(report.body)
            if username is None:
                raise ExtractionError("No Twitter username found in email content")
            stage = PipelineStage.USERNAME_EXTRACTED
            logger.info("username_extracted", dkim_present=report.dkim_present)

            if username not in allowed:
                raise MembershipError(
                    f"Username @{username} is not in the allowed list",
                    username=username,
                )
            stage = PipelineStage.MEMBERSHIP_PRECHECKED

            bundle = await self.prove_membership(username, allowed)
            stage = PipelineStage.PROOF_GENERATED

        except ZkMailError as e:
            return self._failure(e, e.kind, stage, report, username)
        except Exception as e:
            logger.exception("email_proof_unexpected_error", stage=stage.value)
            return self._failure(e, ErrorKind.INTERNAL, stage, report, username)

        logger.info(
            "email_proof_generated",
            proving_time_ms=bundle.metadata.proving_time_ms,
            is_member=bundle.is_member,
        )

        return EmailProofResult(
            success=True,
            message=f"Proof generated for @{username}",
            outcome=AttemptOutcome.PROVED,
            stage=stage,
            extracted_username=username,
            dkim_present=report.dkim_present,
            warning=report.warning,
            proof=bundle.proof,
            public_signals=bundle.public_signals,
            proving_time_ms=bundle.metadata.proving_time_ms,
        )

    def _failure(
        self,
        error: Exception,
        kind: ErrorKind,
        stage: PipelineStage,
        report: AuthenticityReport | None,
        username: str | None,
    ) -> EmailProofResult:
        outcome = AttemptOutcome.REJECTED if kind.is_rejection else AttemptOutcome.ERRORED
        message = str(error) if isinstance(error, ZkMailError) else f"Email proof failed: {error}"

        if outcome == AttemptOutcome.REJECTED:
            # Rejection messages can name the claimed username
            logger.info(
                "email_proof_rejected", failure=kind.value, stage=stage.value
            )
        else:
            logger.error(
                "email_proof_errored", failure=kind.value, stage=stage.value, error=message
            )

        return EmailProofResult(
            success=False,
            message=message,
            outcome=outcome,
            stage=stage,
            failure=kind,
            extracted_username=username,
            dkim_present=report.dkim_present if report else None,
            warning=report.warning if report else None,
        )


async def generate_email_proof(
    email_text: str,
    allowed_usernames: Sequence[str],
    backend: ProvingBackend | None = None,
) -> EmailProofResult:
    """Generate a proof with default components."""
    generator = EmailProofGenerator(backend=backend)
    return await generator.generate(email_text, allowed_usernames)
