"""Sanitized logging utilities for the duplicate-detection engine.

Submitter metadata (emails, IP addresses, user tokens) travels through the
engine on every comparison, so every context dict is scrubbed before it
reaches the log output.
"""
import json
import logging
import re
from typing import Any, Optional

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

logger = logging.getLogger('feedback-dedup')

_RE_EMAIL = re.compile(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}')
_RE_IPV4 = re.compile(r'\b(?:\d{1,3}\.){3}\d{1,3}\b')
_RE_IPV6 = re.compile(r'\b(?:[0-9a-fA-F]{1,4}:){7}[0-9a-fA-F]{1,4}\b')
_RE_URL = re.compile(r'https?://[^\s"]+')
_RE_TOKEN = re.compile(r'\b[a-zA-Z0-9_-]{40,}\b')


def configure_logging(level: str = "INFO", fmt: Optional[str] = None) -> None:
    """Apply level and format from settings to the package logger."""
    logger.setLevel(level.upper())
    if fmt:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(logging.Formatter(fmt, datefmt='%Y-%m-%d %H:%M:%S'))


def sanitize_text(text: str) -> str:
    """Remove submitter-identifying information from text.

    Args:
        text: Input text that may contain sensitive data

    Returns:
        Sanitized text with sensitive patterns replaced
    """
    if not text:
        return text

    text = _RE_EMAIL.sub('<email>', text)
    text = _RE_URL.sub('<url>', text)
    text = _RE_IPV4.sub('<ip>', text)
    text = _RE_IPV6.sub('<ip>', text)
    text = _RE_TOKEN.sub('<token>', text)

    return text


def safe_json(obj: Any, max_length: int = 1000) -> str:
    """Safely serialize object to JSON with sensitive data sanitized.

    Args:
        obj: Object to serialize
        max_length: Maximum length of output string

    Returns:
        Sanitized JSON string
    """
    try:
        json_str = json.dumps(obj, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return "<unable to serialize>"

    sanitized = sanitize_text(json_str)
    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length] + "... [truncated]"
    return sanitized


def log_info(message: str, **kwargs) -> None:
    """Log info message with optional sanitized context."""
    if kwargs:
        logger.info(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.info(message)


def log_warning(message: str, **kwargs) -> None:
    """Log warning message with optional sanitized context."""
    if kwargs:
        logger.warning(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.warning(message)


def log_error(message: str, **kwargs) -> None:
    """Log error message with optional sanitized context."""
    if kwargs:
        logger.error(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.error(message)


def log_debug(message: str, **kwargs) -> None:
    """Log debug message with optional sanitized context."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    if kwargs:
        logger.debug(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.debug(message)


def log_duplicate_detection(score: float, existing_id: Any, **kwargs) -> None:
    """Log a positive duplicate verdict.

    Args:
        score: Similarity score of the best hit (0-100)
        existing_id: Id of the existing feedback item
        **kwargs: Additional context
    """
    log_warning("Duplicate detected",
                similarity_score=score,
                existing_feedback=existing_id,
                **kwargs)
