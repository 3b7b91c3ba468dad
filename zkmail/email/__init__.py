"""
Email Module
============

Origin checks and username extraction for login-notification emails.

Usage:
    from zkmail.email import EmailAuthenticityChecker, UsernameExtractor

    report = EmailAuthenticityChecker().check(raw_email)
    username = UsernameExtractor().extract(report.body)
"""

from zkmail.email.authenticity import (
    AuthenticityReport,
    EmailAuthenticityChecker,
    EmailVerificationResult,
    is_trusted_sender,
    load_email,
    parse_headers,
    split_email,
    verify_email_authenticity,
)
from zkmail.email.extraction import (
    LOGIN_NOTICE_PATTERNS,
    UsernameExtractor,
    extract_username_from_email,
)


__all__ = [
    # Authenticity
    "AuthenticityReport",
    "EmailAuthenticityChecker",
    "EmailVerificationResult",
    "is_trusted_sender",
    "load_email",
    "parse_headers",
    "split_email",
    "verify_email_authenticity",
    # Extraction
    "LOGIN_NOTICE_PATTERNS",
    "UsernameExtractor",
    "extract_username_from_email",
]
