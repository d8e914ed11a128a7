"""Centralized logging configuration for clocktick.

Library code only creates module loggers; applications (or the CLI) call
configure_logging() once at startup.

Logging Levels:
- DEBUG: Key derivation, raw API responses
- INFO: Jobs scheduled and deleted, server lifecycle
- WARNING: Rejected webhooks, transport errors
- ERROR: Handler failures
"""

import logging
import os
import re
from dataclasses import dataclass, field

DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVEL_ENV_VAR = "CLOCKTICK_LOG_LEVEL"

DEFAULT_REDACT_PATTERNS: list[str] = [
    # Bearer tokens in headers
    r"\bBearer\s+([A-Za-z0-9._\-+=/]{8,})",
    # ENV-style assignments: CLOCKTICK_API_KEY=secret or ENCRYPTION_KEY: secret
    r"\b[A-Z0-9_]*(?:KEY|TOKEN|SECRET|PASSWORD)\s*[=:]\s*([^\s\"']{8,})",
    # Encrypted envelopes: base64(iv):base64(ciphertext)
    r"\b([A-Za-z0-9+/]{16}:[A-Za-z0-9+/]{16,}={0,2})",
]


@dataclass
class SecretRedactor:
    """Redacts sensitive information from log messages.

    Matches are replaced with a partially masked version (first and last four
    characters) so distinct secrets stay distinguishable.
    """

    patterns: list[re.Pattern[str]] = field(default_factory=list)
    enabled: bool = True

    def __post_init__(self) -> None:
        if not self.patterns:
            self.patterns = [
                re.compile(p, re.IGNORECASE) for p in DEFAULT_REDACT_PATTERNS
            ]

    def redact(self, text: str) -> str:
        if not self.enabled or not text:
            return text
        result = text
        for pattern in self.patterns:
            result = pattern.sub(self._mask_match, result)
        return result

    def _mask_match(self, match: re.Match[str]) -> str:
        full = match.group(0)
        token = match.group(1) if match.lastindex else full

        if "..." in token:
            return full

        if len(token) < 12:
            return full.replace(token, "***") if token != full else "***"

        masked = f"{token[:4]}...{token[-4:]}"
        return full.replace(token, masked) if token != full else masked


class RedactingFilter(logging.Filter):
    """Rewrites each record's message with secrets masked."""

    def __init__(self, redactor: SecretRedactor | None = None):
        super().__init__()
        self._redactor = redactor or SecretRedactor()

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = self._redactor.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class ComponentFormatter(logging.Formatter):
    """Formatter that extracts component name from logger path.

    - clocktick.router -> router
    - clocktick.server.app -> server
    """

    def format(self, record: logging.LogRecord) -> str:
        parts = record.name.split(".")
        if len(parts) >= 2 and parts[0] == "clocktick":
            record.component = parts[1]
        else:
            record.component = parts[0]
        return super().format(record)


# Third-party loggers that are too noisy at INFO level
NOISY_LOGGERS = [
    "httpx",
    "httpcore",
    "uvicorn.access",
]


def resolve_level(level: str | None = None) -> str:
    """Pick the log level from the argument, the environment, or the default."""
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL)
    level = level.upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        level = DEFAULT_LOG_LEVEL
    return level


def configure_logging(level: str | None = None, use_rich: bool = False) -> None:
    """Configure logging for clocktick.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
            If None, uses CLOCKTICK_LOG_LEVEL env var or INFO.
        use_rich: Use Rich handler for colorful output (server mode).
    """
    log_level = getattr(logging, resolve_level(level))

    console_handler: logging.Handler
    if use_rich:
        from rich.logging import RichHandler

        console_handler = RichHandler(
            rich_tracebacks=False,
            show_path=False,
            show_time=True,
            markup=False,
        )
        console_handler.setFormatter(ComponentFormatter("%(component)s | %(message)s"))
    else:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%H:%M:%S",
            )
        )
    console_handler.addFilter(RedactingFilter())

    logging.basicConfig(
        level=log_level,
        handlers=[console_handler],
        force=True,
    )

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    # Route uvicorn through our handler in server mode
    if use_rich:
        for logger_name in ("uvicorn", "uvicorn.error"):
            uv_logger = logging.getLogger(logger_name)
            uv_logger.handlers = [console_handler]
            uv_logger.propagate = False
