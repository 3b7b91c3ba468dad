"""
Username Commitments
====================

Python mirror of the twitter-login circuit's hash gate.

    commit(username, salt) = sum(byte[i] * (i + 1) for i < min(len, 10)) + salt

No modulus is applied, and Python ints are arbitrary precision, so the
result matches the circuit's field arithmetic exactly for the short
handles the circuit accepts. Any change here must be made in the circuit
too, otherwise proofs verify but assert the wrong statement.

Version: 0.1.0
"""

from collections.abc import Sequence

from zkmail.exceptions import ShapeError


# Circuit shape
MAX_ALLOWED_USERNAMES = 3
MAX_USERNAME_BYTES = 10

# Value of an unused allowedHashes slot
EMPTY_SLOT = 0


def username_bytes(username: str) -> bytes:
    """UTF-8 encoding used for all circuit values."""
    return username.encode("utf-8")


def commit_username(username: str, salt: int) -> int:
    """
    Commit to a username with the given salt.

    Only the first MAX_USERNAME_BYTES bytes contribute.

    Raises:
        ShapeError: If salt is negative
    """
    if salt < 0:
        raise ShapeError(f"Salt must be non-negative, got {salt}")

    data = username_bytes(username)[:MAX_USERNAME_BYTES]
    return sum(byte * (i + 1) for i, byte in enumerate(data)) + salt


def username_to_char_array(username: str, max_length: int = MAX_USERNAME_BYTES) -> list[int]:
    """Encode the first max_length bytes, zero-padded to max_length."""
    data = username_bytes(username)[:max_length]
    return list(data) + [0] * (max_length - len(data))


def commit_allow_list(usernames: Sequence[str], salt: int) -> list[int]:
    """
    Commit to every allow-listed username with a shared salt.

    Returns exactly MAX_ALLOWED_USERNAMES values, EMPTY_SLOT-padded.

    Raises:
        ShapeError: More than MAX_ALLOWED_USERNAMES usernames or negative salt
    """
    if len(usernames) > MAX_ALLOWED_USERNAMES:
        raise ShapeError(
            f"Allow-list has {len(usernames)} usernames, circuit supports at most "
            f"{MAX_ALLOWED_USERNAMES}"
        )

    commitments = [commit_username(u, salt) for u in usernames]
    commitments.extend([EMPTY_SLOT] * (MAX_ALLOWED_USERNAMES - len(commitments)))
    return commitments
