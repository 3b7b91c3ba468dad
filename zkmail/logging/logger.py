"""
Logger Implementation
=====================

structlog configuration for zkmail.

Every entry passes through the same processor chain in both output
modes (JSON for production, colored console for development):

    contextvars -> level/name -> timestamp -> service -> redact -> truncate

Redaction keeps the hidden identity out of the logs: salts, witnesses,
usernames, allow-lists and raw email text are replaced wherever they
appear, including inside nested dicts and lists.

Version: 0.1.0
"""

import datetime
import logging
import sys
from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor


if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger


SENSITIVE_KEYS = frozenset(
    {
        "password",
        "secret",
        "token",
        "authorization",
        "private_key",
        "salt",
        "witness",
        "username",
        "allowed_usernames",
        "email_text",
        "raw_email",
    }
)

REDACTED = "***REDACTED***"

# snarkjs stderr can run to megabytes on a malformed witness
MAX_VALUE_LENGTH = 2000

_service_name = "zkmail"


def _is_sensitive(key: str) -> bool:
    key_lower = key.lower()
    return any(s in key_lower for s in SENSITIVE_KEYS)


def _redact(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: REDACTED if _is_sensitive(str(k)) else _redact(v) for k, v in value.items()}
    if type(value) in (list, tuple):
        return type(value)(_redact(v) for v in value)
    return value


def censor_sensitive(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Replace secrets and witness material, at any depth."""
    return _redact(event_dict)


def truncate_long_values(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Clip oversized string values such as subprocess output."""
    for key, value in event_dict.items():
        if isinstance(value, str) and len(value) > MAX_VALUE_LENGTH:
            event_dict[key] = f"{value[:MAX_VALUE_LENGTH]}... [{len(value)} chars]"
    return event_dict


def _add_service_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    event_dict.setdefault("service", _service_name)
    event_dict.setdefault("version", "0.1.0")
    return event_dict


def _add_timestamp(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    event_dict["timestamp"] = datetime.datetime.now(datetime.UTC).isoformat()
    return event_dict


def _build_processors(json_logs: bool) -> tuple[list[Processor], Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        _add_timestamp,
        _add_service_context,
        censor_sensitive,
        truncate_long_values,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_logs:
        processors.append(structlog.processors.format_exc_info)
        return processors, structlog.processors.JSONRenderer()

    processors.append(structlog.dev.set_exc_info)
    # Frame locals hold witness values
    renderer = structlog.dev.ConsoleRenderer(
        colors=True,
        exception_formatter=structlog.dev.RichTracebackFormatter(
            show_locals=False,
            max_frames=10,
        ),
    )
    return processors, renderer


def setup_logging(
    log_level: str = "INFO",
    json_logs: bool = False,
    service_name: str = "zkmail",
) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Emit JSON lines instead of colored console output
        service_name: Value of the `service` field on every entry
    """
    global _service_name
    _service_name = service_name

    level = getattr(logging, log_level.upper())

    for noisy_logger in ["httpx", "httpcore", "asyncio"]:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    shared_processors, renderer = _build_processors(json_logs)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)


def get_logger(name: str | None = None) -> "BoundLogger":
    """
    Get a structured logger.

    Example:
        logger = get_logger(__name__)
        logger.info("zk_proof_generated", circuit="twitter-login", proving_time_ms=1840)
    """
    return structlog.stdlib.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """
    Bind values to every log entry in the current async context.

    Example:
        bind_context(attempt_id="abc123")
        logger.info("email_checked")  # includes attempt_id
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Drop all bound context values."""
    structlog.contextvars.clear_contextvars()


def bound_context(**kwargs: Any) -> AbstractContextManager[None]:
    """
    Bind values for the duration of a block, restoring the previous ones after.

    Values bound by the caller before the block are left in place.

    Example:
        with bound_context(attempt_id="abc123"):
            logger.info("email_checked")  # includes attempt_id
    """
    return structlog.contextvars.bound_contextvars(**kwargs)
