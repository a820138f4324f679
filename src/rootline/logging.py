"""Centralized logging configuration for Rootline.

This module provides a single point of truth for logging setup.
All entry points (CLI, server) should call configure_logging() early.

Logging Levels:
- DEBUG: Store writes, duplicate scoring, state transitions
- INFO: Trees created, people renamed or removed, relationships recorded
- WARNING: Superseded pending actions, unknown pending payloads
- ERROR: Storage failures that stop a batch

Messages are short event names (``person_created``) with details passed
through ``extra``. File logs carry those details as JSON.
"""

import json
import logging
import os
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any, TextIO

# Default retention period for log files
DEFAULT_LOG_RETENTION_DAYS = 7

# Default patterns for actor ids and secrets
DEFAULT_REDACT_PATTERNS: list[str] = [
    # Phone-number actor ids (messaging channels key actors by E.164 number)
    r"(?<![\w.-])(\+?\d{9,15})(?![\w.-])",
    # Bearer tokens in headers
    r"\bBearer\s+([A-Za-z0-9._\-+=]{20,})\b",
    # ENV-style assignments: API_KEY=secret or ACCESS_TOKEN: secret
    r"\b[A-Z0-9_]+(?:KEY|TOKEN|SECRET|PASSWORD)\s*[=:]\s*([^\s\"']{8,})",
    # Generic API key prefixes
    r"\b(sk-[A-Za-z0-9_-]{20,})\b",
]

# Attributes every LogRecord has; anything else came from ``extra``
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "component"}


@dataclass
class ActorRedactor:
    """Masks actor phone numbers and credentials in log output.

    Matches keep their first and last characters so entries from the same
    actor can still be correlated.
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
            masked = f"{token[:2]}...{token[-2:]}" if len(token) >= 8 else "***"
        else:
            masked = f"{token[:4]}...{token[-4:]}"
        return full.replace(token, masked) if token != full else masked


# Module-level redactor instance
_redactor = ActorRedactor()


def configure_redaction(
    enabled: bool = True, extra_patterns: list[str] | None = None
) -> None:
    """Configure redaction for file log entries.

    Args:
        enabled: Whether to enable redaction.
        extra_patterns: Additional regex patterns to mask.
    """
    global _redactor
    patterns = [re.compile(p, re.IGNORECASE) for p in DEFAULT_REDACT_PATTERNS]
    if extra_patterns:
        patterns.extend(re.compile(p, re.IGNORECASE) for p in extra_patterns)
    _redactor = ActorRedactor(patterns=patterns, enabled=enabled)


def prune_old_logs(
    logs_dir: Path,
    retention_days: int = DEFAULT_LOG_RETENTION_DAYS,
    suffix: str = ".jsonl",
) -> int:
    """Delete log files older than retention period.

    Returns:
        Number of files deleted.
    """
    if not logs_dir.exists():
        return 0

    cutoff = datetime.now(UTC) - timedelta(days=retention_days)
    deleted = 0

    for entry in logs_dir.iterdir():
        if not entry.is_file() or entry.suffix != suffix:
            continue
        try:
            mtime = datetime.fromtimestamp(entry.stat().st_mtime, UTC)
            if mtime < cutoff:
                entry.unlink()
                deleted += 1
        except OSError:
            pass  # Ignore errors on individual files

    return deleted


def _component(name: str) -> str:
    parts = name.split(".")
    if len(parts) >= 2 and parts[0] == "rootline":
        return parts[1]
    return parts[0]


def record_extra(record: logging.LogRecord) -> dict[str, Any]:
    """Fields passed to the logging call through ``extra``."""
    return {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS}


class JSONLHandler(logging.Handler):
    """Handler that writes structured log entries to a JSONL file.

    Logs are written to ~/.rootline/logs/YYYY-MM-DD.jsonl with one JSON
    object per line.

    Features:
    - Daily log rotation
    - Actor id and secret redaction
    - Auto-pruning of old logs (default: 7 days retention)
    """

    def __init__(
        self,
        logs_dir: Path,
        retention_days: int = DEFAULT_LOG_RETENTION_DAYS,
    ):
        super().__init__()
        self._logs_dir = logs_dir
        self._logs_dir.mkdir(parents=True, exist_ok=True)
        self._retention_days = retention_days
        self._current_date: str | None = None
        self._file: TextIO | None = None

    def _get_log_file(self) -> TextIO:
        """Get the current log file, rotating daily."""
        today = datetime.now(UTC).strftime("%Y-%m-%d")
        if self._current_date != today or self._file is None:
            if self._file:
                self._file.close()
            self._current_date = today
            log_path = self._logs_dir / f"{today}.jsonl"
            self._file = log_path.open("a", encoding="utf-8")

            # Prune old logs on rotation (once per day)
            prune_old_logs(self._logs_dir, self._retention_days)

        return self._file

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry: dict[str, Any] = {
                "ts": datetime.now(UTC).isoformat(),
                "level": record.levelname,
                "component": _component(record.name),
                "logger": record.name,
                "message": _redactor.redact(record.getMessage()),
            }

            if record.exc_info:
                formatter = self.formatter or logging.Formatter()
                exception_text = formatter.formatException(record.exc_info)
                entry["exception"] = _redactor.redact(exception_text)

            if extra := record_extra(record):
                redacted_str = _redactor.redact(json.dumps(extra, default=str))
                try:
                    entry["extra"] = json.loads(redacted_str)
                except json.JSONDecodeError:
                    # Redaction broke JSON structure - use raw redacted string
                    entry["extra"] = {"_redacted_raw": redacted_str}

            log_file = self._get_log_file()
            log_file.write(json.dumps(entry) + "\n")
            log_file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """Close the log file."""
        if self._file:
            self._file.close()
            self._file = None
        super().close()


class ComponentFormatter(logging.Formatter):
    """Formatter that extracts component name from logger path.

    - rootline.family.processor -> family
    - rootline.store.people -> store
    """

    def format(self, record: logging.LogRecord) -> str:
        record.component = _component(record.name)
        return super().format(record)


# Third-party loggers that are too noisy at INFO level
NOISY_LOGGERS = [
    "sqlalchemy.engine",
    "aiosqlite",
    "httpx",
    "httpcore",
    "uvicorn.access",
]


def configure_logging(
    level: str | None = None,
    use_rich: bool = False,
    log_to_file: bool = False,
    redact_actor_ids: bool = True,
) -> None:
    """Configure logging for Rootline.

    Call this once at application startup (CLI or server).

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
            If None, uses ROOTLINE_LOG_LEVEL env var or INFO.
        use_rich: Use Rich handler for colorful output (server mode).
        log_to_file: Also write logs to JSONL files in ~/.rootline/logs/.
        redact_actor_ids: Mask phone-number actor ids and tokens in file logs.
    """
    from rootline.config.paths import get_logs_path

    if level is None:
        level = os.environ.get("ROOTLINE_LOG_LEVEL", "INFO").upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            level = "INFO"

    log_level = getattr(logging, level)

    handlers: list[logging.Handler] = []

    if use_rich:
        from rich.logging import RichHandler

        console_handler: logging.Handler = RichHandler(
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
    handlers.append(console_handler)

    if log_to_file:
        configure_redaction(enabled=redact_actor_ids)
        file_handler = JSONLHandler(get_logs_path())
        file_handler.setLevel(log_level)
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        handlers=handlers,
        force=True,
    )

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    # Route uvicorn through our handlers in server mode
    if use_rich:
        for logger_name in ("uvicorn", "uvicorn.error"):
            uv_logger = logging.getLogger(logger_name)
            uv_logger.handlers = handlers
            uv_logger.propagate = False
