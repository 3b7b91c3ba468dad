"""
Circuit Inputs
==============

Shapes commitments, the claimed username and the salt into the
fixed-width witness the twitter-login circuit expects.

Version: 0.1.0
"""

from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, Field

from zkmail.exceptions import ShapeError
from zkmail.zk.commitment import (
    MAX_ALLOWED_USERNAMES,
    MAX_USERNAME_BYTES,
    commit_allow_list,
    username_bytes,
    username_to_char_array,
)


class CircuitInput(BaseModel):
    """
    Witness for the twitter-login circuit.

    All values are decimal strings, as snarkjs expects.
    """

    allowed_hashes: list[str] = Field(
        ...,
        min_length=MAX_ALLOWED_USERNAMES,
        max_length=MAX_ALLOWED_USERNAMES,
    )
    username: list[str] = Field(
        ...,
        min_length=MAX_USERNAME_BYTES,
        max_length=MAX_USERNAME_BYTES,
    )
    username_length: str
    salt: str

    def to_witness(self) -> dict[str, Any]:
        """Convert to the circuit's signal names."""
        return {
            "allowedHashes": self.allowed_hashes,
            "username": self.username,
            "usernameLength": self.username_length,
            "salt": self.salt,
        }

    @classmethod
    def from_witness(cls, witness: dict[str, Any]) -> "CircuitInput":
        """Create from a snarkjs witness dict."""
        return cls(
            allowed_hashes=[str(v) for v in witness["allowedHashes"]],
            username=[str(v) for v in witness["username"]],
            username_length=str(witness["usernameLength"]),
            salt=str(witness["salt"]),
        )


class CircuitInputBuilder:
    """
    Build CircuitInput values.

    Usage:
        builder = CircuitInputBuilder()
        circuit_input = builder.build("alice", ["alice", "bob"], salt=4242)
    """

    def build(
        self,
        username: str,
        allowed_usernames: Sequence[str],
        salt: int,
    ) -> CircuitInput:
        """
        Build the witness for one proof attempt.

        Args:
            username: Claimed username (private input)
            allowed_usernames: Up to three allow-listed usernames
            salt: Shared salt for all commitments

        Raises:
            ShapeError: More than three allow-listed usernames or negative salt
        """
        if salt < 0:
            raise ShapeError(f"Salt must be non-negative, got {salt}")

        commitments = commit_allow_list(allowed_usernames, salt)

        return CircuitInput(
            allowed_hashes=[str(c) for c in commitments],
            username=[str(b) for b in username_to_char_array(username)],
            username_length=str(len(username_bytes(username))),
            salt=str(salt),
        )
