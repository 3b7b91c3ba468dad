"""
Username Extraction
===================

Pulls the account handle out of a login-notification body.

Patterns are tried in order and the first one that matches wins, so an
earlier pattern takes priority even if a later one matches earlier in the
text.

Version: 0.1.0
"""

import re
from collections.abc import Iterable

from zkmail.exceptions import ExtractionError
from zkmail.logging import get_logger


logger = get_logger(__name__)

# Handles are ASCII word characters; Unicode letters end the match
_FLAGS = re.IGNORECASE | re.ASCII


LOGIN_NOTICE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"We noticed a login to your account @(\w+) from a new device", _FLAGS),
    re.compile(r"Login attempt for @(\w+)", _FLAGS),
    re.compile(r"Sign-in notification for @(\w+)", _FLAGS),
    re.compile(r"New sign-in for your account @(\w+)", _FLAGS),
    re.compile(r"login notice for @(\w+)", _FLAGS),
)


class UsernameExtractor:
    """
    Extract a username from an email body using a fixed priority list.

    Usage:
        extractor = UsernameExtractor()
        username = extractor.extract(body)  # None if nothing matched
    """

    def __init__(self, patterns: Iterable[re.Pattern[str] | str] | None = None) -> None:
        if patterns is None:
            self.patterns = LOGIN_NOTICE_PATTERNS
        else:
            self.patterns = tuple(
                p if isinstance(p, re.Pattern) else re.compile(p, _FLAGS)
                for p in patterns
            )

    def extract(self, body: str) -> str | None:
        """
        Return the handle captured by the first matching pattern.

        Returns:
            The username without the leading "@", or None if no pattern matched.
        """
        for index, pattern in enumerate(self.patterns):
            match = pattern.search(body)
            if match:
                logger.debug("username_pattern_matched", pattern_index=index)
                return match.group(1)

        logger.debug("username_pattern_not_matched", patterns=len(self.patterns))
        return None

    def extract_or_raise(self, body: str) -> str:
        """Like extract(), but raise ExtractionError when nothing matched."""
        username = self.extract(body)
        if username is None:
            raise ExtractionError("No Twitter username found in email content")
        return username


def extract_username_from_email(body: str) -> str | None:
    """Extract a username with the default pattern list."""
    return UsernameExtractor().extract(body)
