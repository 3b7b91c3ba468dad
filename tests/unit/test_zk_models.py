"""
Unit Tests for ZK Models
========================

Tests for proof, public signal and result models.
"""

from zkmail.exceptions import ErrorKind
from zkmail.zk.models import (
    AttemptOutcome,
    EmailProofResult,
    PipelineStage,
    ProofBundle,
    ProofMetadata,
    PublicSignals,
    ZKProof,
)


def _proof() -> ZKProof:
    return ZKProof(
        pi_a=["123", "456", "1"],
        pi_b=[["789", "101"], ["112", "131"], ["1", "0"]],
        pi_c=["415", "161", "1"],
    )


class TestZKProof:
    """Tests for ZKProof."""

    def test_defaults(self):
        proof = _proof()

        assert proof.protocol == "groth16"
        assert proof.curve == "bn128"

    def test_to_calldata(self):
        calldata = _proof().to_calldata()

        assert len(calldata) == 8
        assert calldata[0] == 123
        assert calldata[1] == 456
        assert calldata[2] == 789
        assert calldata[-1] == 161

    def test_to_calldata_hex_points(self):
        proof = ZKProof(
            pi_a=["0x1234", "0x5678", "0x1"],
            pi_b=[["0xab", "0xcd"], ["0x99", "0x88"], ["0x1", "0x0"]],
            pi_c=["0x44", "0x55", "0x1"],
        )

        assert proof.to_calldata()[0] == 0x1234

    def test_hex_roundtrip(self):
        original = _proof()

        restored = ZKProof.from_hex(original.to_hex())

        assert restored == original

    def test_snarkjs_extra_fields_ignored(self):
        data = _proof().model_dump()
        data["extra"] = "ignored"

        assert ZKProof(**data) == _proof()


class TestPublicSignals:
    """Tests for PublicSignals."""

    def test_member_flag(self):
        assert PublicSignals(signals=["1", "1000", "2000", "0"]).is_member is True
        assert PublicSignals(signals=["0", "1000", "2000", "0"]).is_member is False

    def test_empty_is_not_member(self):
        assert PublicSignals(signals=[]).is_member is False

    def test_allowed_hashes(self):
        signals = PublicSignals(signals=["1", "1000", "2000", "0"])

        assert signals.allowed_hashes == ["1000", "2000", "0"]
        assert signals.to_int_list() == [1, 1000, 2000, 0]


class TestProofBundle:
    """Tests for ProofBundle."""

    def test_is_member(self):
        bundle = ProofBundle(
            proof=_proof(),
            public_signals=PublicSignals(signals=["1"]),
            metadata=ProofMetadata(circuit_name="twitter-login", backend="mock", proving_time_ms=3),
        )

        assert bundle.is_member is True
        assert bundle.metadata.generated_at is not None


class TestEmailProofResult:
    """Tests for EmailProofResult."""

    def test_rejected_result(self):
        result = EmailProofResult(
            success=False,
            message="Email is not from Twitter/X.com domain",
            outcome=AttemptOutcome.REJECTED,
            failure=ErrorKind.ORIGIN,
        )

        assert result.is_rejection is True
        assert result.terminal_stage == PipelineStage.REJECTED
        assert result.proof is None
        assert result.verified_username is None

    def test_proved_result(self):
        result = EmailProofResult(
            success=True,
            message="ok",
            outcome=AttemptOutcome.PROVED,
            stage=PipelineStage.PROOF_GENERATED,
            extracted_username="alice",
            proof=_proof(),
            public_signals=PublicSignals(signals=["1"]),
        )

        assert result.verified_username == "alice"
        assert result.terminal_stage == PipelineStage.PROOF_GENERATED

    def test_errored_is_not_rejection(self):
        result = EmailProofResult(
            success=False,
            message="boom",
            outcome=AttemptOutcome.ERRORED,
            failure=ErrorKind.PROOF_GENERATION,
        )

        assert result.is_rejection is False
        assert result.terminal_stage == PipelineStage.ERRORED

    def test_result_excludes_witness(self):
        fields = set(EmailProofResult.model_fields)

        assert "salt" not in fields
        assert "allowed_hashes" not in fields


class TestErrorKind:
    """Tests for failure classification."""

    def test_rejections(self):
        for kind in (ErrorKind.FORMAT, ErrorKind.ORIGIN, ErrorKind.EXTRACTION,
                     ErrorKind.MEMBERSHIP, ErrorKind.SHAPE):
            assert kind.is_rejection is True

    def test_errors(self):
        assert ErrorKind.PROOF_GENERATION.is_rejection is False
        assert ErrorKind.INTERNAL.is_rejection is False
