"""
Logging configuration with automatic sensitive data redaction.

The ledger signing key and peer credentials pass through the settings object
and occasionally through log context. Events from structlog loggers and
records from plain stdlib loggers share one formatter, so both are run
through a redaction processor before they are rendered.
"""

import logging
import re
import sys
from typing import Any, Dict, List, Set
import structlog
from structlog.stdlib import LoggerFactory

from multitee.core.config import settings


class SensitiveDataRedactor:
    """
    Redacts sensitive data from log entries.

    Handles:
    - Exact key matches (private_key, password, ...)
    - Pattern-based key matches (contains 'secret', 'token', ...)
    - Nested dictionaries and lists
    - Bearer tokens embedded in free text
    """

    FULLY_REDACTED_KEYS: Set[str] = {
        "password",
        "secret",
        "private_key",
        "privatekey",
        "ledger_private_key",
        "authorization",
        "cookie",
        "mnemonic",
        "seed",
    }

    REDACTED_KEY_PATTERNS: List[str] = [
        "password",
        "secret",
        "token",
        "credential",
        "private_key",
    ]

    VALUE_PATTERNS = {
        "bearer": re.compile(r"Bearer\s+[a-zA-Z0-9._-]+", re.IGNORECASE),
    }

    REDACTED_PLACEHOLDER = "[REDACTED]"

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._fully_redacted_lower = {k.lower() for k in self.FULLY_REDACTED_KEYS}

    def redact(self, data: Any, key: str = None) -> Any:
        """
        Recursively redact sensitive data.

        Args:
            data: The data to redact (can be dict, list, or primitive)
            key: The key name if this data is a value in a dict

        Returns:
            Redacted version of the data
        """
        if not self.enabled or data is None:
            return data

        if key:
            key_lower = key.lower()
            if key_lower in self._fully_redacted_lower:
                return self.REDACTED_PLACEHOLDER
            for pattern in self.REDACTED_KEY_PATTERNS:
                if pattern in key_lower:
                    return self.REDACTED_PLACEHOLDER

        if isinstance(data, dict):
            return {k: self.redact(v, k) for k, v in data.items()}

        if isinstance(data, (list, tuple)):
            return [self.redact(item) for item in data]

        if isinstance(data, str):
            return self._redact_string_value(data)

        return data

    def _redact_string_value(self, value: str) -> str:
        """Check string values for sensitive patterns and redact them."""
        if not value or len(value) < 10:
            return value

        return self.VALUE_PATTERNS["bearer"].sub("Bearer [REDACTED]", value)


def sensitive_data_redactor_processor(
    logger: logging.Logger, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Structlog processor that redacts sensitive data from log events."""
    return _redactor.redact(event_dict)


def build_formatter(json_output: bool = None) -> structlog.stdlib.ProcessorFormatter:
    """
    Formatter for the root handler.

    Records from plain `logging.getLogger` loggers pass through the same
    redaction as structlog events, including values given via `extra=`.
    """
    if json_output is None:
        json_output = settings.LOG_FORMAT == "json"

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.ExtraAdder(),
            structlog.processors.TimeStamper(fmt="iso"),
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            sensitive_data_redactor_processor,
            structlog.processors.JSONRenderer()
            if json_output
            else structlog.dev.ConsoleRenderer(),
        ],
    )


def setup_logging() -> None:
    """Setup structured logging with automatic sensitive data redaction."""

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter())
    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper()))

    # Set specific loggers to reduce noise
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("web3").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger"""
    return structlog.get_logger(name)


_redactor = SensitiveDataRedactor()


def redact_sensitive_data(data: Any) -> Any:
    """
    Manually redact sensitive data from any data structure.

    Example:
        >>> redact_sensitive_data({"private_key": "0xabc", "tee": "node-a"})
        {'private_key': '[REDACTED]', 'tee': 'node-a'}
    """
    return _redactor.redact(data)
