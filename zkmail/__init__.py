"""
zkmail
======

Zero-knowledge allow-list membership proofs for login-notification emails.

Modules:
    - config: Configuration management with Pydantic Settings
    - logging: Structured logging with structlog
    - email: Origin checks and username extraction
    - zk: Commitments, circuit inputs, proving backends, prover and verifier

Version: 0.1.0
"""

__version__ = "0.1.0"

from zkmail.config import settings
from zkmail.logging import get_logger, setup_logging

__all__ = [
    "settings",
    "get_logger",
    "setup_logging",
    "__version__",
]
