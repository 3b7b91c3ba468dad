"""
Exceptions
==========

Error taxonomy for the email membership proof pipeline.

Components raise these; the proof generator, pipeline and verifier
convert them into result values at their boundaries.

Version: 0.1.0
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Failure categories surfaced in results."""

    FORMAT = "format"
    ORIGIN = "origin"
    EXTRACTION = "extraction"
    MEMBERSHIP = "membership"
    SHAPE = "shape"
    PROOF_GENERATION = "proof_generation"
    PROOF_VERIFICATION = "proof_verification"
    INTERNAL = "internal"

    @property
    def is_rejection(self) -> bool:
        """True when the claim itself is false, not when infrastructure failed."""
        return self in _REJECTION_KINDS


_REJECTION_KINDS = frozenset(
    {
        ErrorKind.FORMAT,
        ErrorKind.ORIGIN,
        ErrorKind.EXTRACTION,
        ErrorKind.MEMBERSHIP,
        ErrorKind.SHAPE,
        ErrorKind.PROOF_VERIFICATION,
    }
)


class ZkMailError(Exception):
    """Base exception for zkmail errors."""

    kind: ErrorKind = ErrorKind.INTERNAL


class FormatError(ZkMailError):
    """Email has no header/body separator or is not valid UTF-8."""

    kind = ErrorKind.FORMAT


class OriginError(ZkMailError):
    """Sender domain is not a trusted login-notification domain."""

    kind = ErrorKind.ORIGIN


class ExtractionError(ZkMailError):
    """No username pattern matched the email body."""

    kind = ErrorKind.EXTRACTION


class MembershipError(ZkMailError):
    """Extracted username is not in the allow-list."""

    kind = ErrorKind.MEMBERSHIP

    def __init__(self, message: str, username: str | None = None) -> None:
        super().__init__(message)
        self.username = username


class ShapeError(ZkMailError):
    """Allow-list, username or salt violates circuit size constraints."""

    kind = ErrorKind.SHAPE


class ProofGenerationError(ZkMailError):
    """Proving backend failed."""

    kind = ErrorKind.PROOF_GENERATION


class ResourceError(ProofGenerationError):
    """Circuit artifact could not be located or fetched."""


class ProofVerificationError(ZkMailError):
    """Verification key could not be fetched or parsed."""

    kind = ErrorKind.PROOF_VERIFICATION
