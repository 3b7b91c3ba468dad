"""
Email Authenticity
==================

Minimal origin checks for login-notification emails.

The checker parses headers, confirms the sender domain and records
whether a DKIM-Signature header is present. It does NOT verify the
signature: a present-but-invalid signature looks the same as a valid
one here, and the result carries a warning saying so.

Version: 0.1.0
"""

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel

from zkmail.config import settings
from zkmail.email.extraction import UsernameExtractor
from zkmail.exceptions import FormatError, OriginError, ZkMailError
from zkmail.logging import get_logger


logger = get_logger(__name__)

HEADER_SEPARATORS = ("\r\n\r\n", "\n\n")

DKIM_HEADER = "dkim-signature"
SENDER_HEADERS = ("from", "return-path")

DKIM_SKIPPED_WARNING = "Email has DKIM signature but verification skipped"
DKIM_MISSING_WARNING = "No DKIM signature found - email authenticity not verified"


@dataclass
class AuthenticityReport:
    """Outcome of a successful authenticity check."""

    headers: dict[str, str]
    body: str
    dkim_present: bool
    domain_verified: bool = True
    matched_domain: str | None = None

    @property
    def warning(self) -> str:
        """Human-readable note on the (unverified) DKIM status."""
        return DKIM_SKIPPED_WARNING if self.dkim_present else DKIM_MISSING_WARNING


class EmailVerificationResult(BaseModel):
    """Combined authenticity and username extraction outcome."""

    success: bool
    extracted_username: str | None = None
    dkim_present: bool | None = None
    warning: str | None = None
    error: str | None = None


def split_email(raw: str) -> tuple[str, str]:
    """
    Split raw email text into header section and body.

    Raises:
        FormatError: If no blank-line separator exists
    """
    for separator in HEADER_SEPARATORS:
        index = raw.find(separator)
        if index != -1:
            return raw[:index], raw[index + len(separator):]

    raise FormatError("Invalid email format: No header/body separator found")


def parse_headers(header_section: str) -> dict[str, str]:
    """
    Parse header lines at the first colon.

    Keys are lower-cased and trimmed, values trimmed. Lines without a
    colon, or starting with one, are skipped. Later duplicates win.
    """
    headers: dict[str, str] = {}
    for line in header_section.replace("\r\n", "\n").split("\n"):
        colon = line.find(":")
        if colon > 0:
            key = line[:colon].strip().lower()
            headers[key] = line[colon + 1:].strip()
    return headers


def matching_sender_domain(headers: dict[str, str], domains: Iterable[str]) -> str | None:
    """Return the first trusted domain found in From or Return-Path."""
    for name in SENDER_HEADERS:
        value = headers.get(name, "").lower()
        for domain in domains:
            if domain.lower() in value:
                return domain
    return None


def is_trusted_sender(headers: dict[str, str], domains: Iterable[str] | None = None) -> bool:
    """Check whether the email claims to come from a trusted domain."""
    if domains is None:
        domains = settings.email.trusted_domains_list
    return matching_sender_domain(headers, domains) is not None


class EmailAuthenticityChecker:
    """
    Parse an email and check its claimed origin.

    Usage:
        checker = EmailAuthenticityChecker()
        report = checker.check(raw_email)
        print(report.dkim_present, report.warning)
    """

    def __init__(self, trusted_domains: Iterable[str] | None = None) -> None:
        if trusted_domains is None:
            trusted_domains = settings.email.trusted_domains_list
        self.trusted_domains = tuple(d.lower() for d in trusted_domains)

    def check(self, raw: str) -> AuthenticityReport:
        """
        Run the origin checks.

        Raises:
            FormatError: No header/body separator
            OriginError: Neither From nor Return-Path names a trusted domain
        """
        header_section, body = split_email(raw)
        headers = parse_headers(header_section)

        domain = matching_sender_domain(headers, self.trusted_domains)
        if domain is None:
            logger.info("email_origin_rejected", header_count=len(headers))
            raise OriginError("Email is not from Twitter/X.com domain")

        dkim_present = DKIM_HEADER in headers
        logger.debug(
            "email_origin_checked",
            matched_domain=domain,
            dkim_present=dkim_present,
        )

        return AuthenticityReport(
            headers=headers,
            body=body,
            dkim_present=dkim_present,
            matched_domain=domain,
        )


def verify_email_authenticity(
    raw: str,
    checker: EmailAuthenticityChecker | None = None,
    extractor: UsernameExtractor | None = None,
) -> EmailVerificationResult:
    """
    Check origin and extract the username without raising.

    Returns:
        EmailVerificationResult; on success `warning` carries the DKIM note.
    """
    checker = checker or EmailAuthenticityChecker()
    extractor = extractor or UsernameExtractor()

    try:
        report = checker.check(raw)
    except ZkMailError as e:
        return EmailVerificationResult(success=False, error=str(e))

    username = extractor.extract(report.body)
    if username is None:
        return EmailVerificationResult(
            success=False,
            dkim_present=report.dkim_present,
            error="No Twitter username found in email content",
        )

    return EmailVerificationResult(
        success=True,
        extracted_username=username,
        dkim_present=report.dkim_present,
        warning=report.warning,
    )


def decode_email(data: bytes) -> str:
    """
    Decode uploaded email bytes as UTF-8.

    Raises:
        FormatError: If the bytes are not valid UTF-8
    """
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise FormatError(f"Email is not valid UTF-8: {e.reason}") from e


async def load_email(source: bytes | str | Path) -> str:
    """
    Read an uploaded email off the event loop.

    Args:
        source: Raw bytes or a path to an .eml file

    Raises:
        FormatError: If the file cannot be read or decoded
    """
    if isinstance(source, bytes):
        return decode_email(source)

    try:
        data = await asyncio.to_thread(Path(source).read_bytes)
    except OSError as e:
        raise FormatError(f"Unable to read email file: {source}") from e

    return decode_email(data)
