"""Sanitized logging utilities for safetyhub.

Issue titles and source payloads can carry user data (emails, tokens, URLs),
so every piece of keyword context is scrubbed before it reaches a handler.
"""
import json
import logging
import re
from typing import Any, Optional

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

logger = logging.getLogger('safetyhub')


def configure_logging(level: str = "INFO", fmt: Optional[str] = None) -> None:
    """Apply the configured level and format to the safetyhub logger.

    Args:
        level: Logging level name (``DEBUG``, ``INFO`` ...)
        fmt: Optional ``logging`` format string for the root handlers
    """
    logger.setLevel(level.upper())
    if fmt:
        formatter = logging.Formatter(fmt, datefmt='%Y-%m-%d %H:%M:%S')
        for handler in logging.getLogger().handlers:
            handler.setFormatter(formatter)


def sanitize_text(text: str) -> str:
    """Remove sensitive information from text.

    Args:
        text: Input text that may contain sensitive data

    Returns:
        Sanitized text with sensitive patterns replaced
    """
    if not text:
        return text

    text = re.sub(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}', '<email>', text)

    # API keys and tokens
    text = re.sub(r'sk-[a-zA-Z0-9]{20,}', '<api-key>', text)
    text = re.sub(r'ghp_[a-zA-Z0-9]{36}', '<github-token>', text)
    text = re.sub(r'[a-zA-Z0-9]{32,}', '<token>', text)

    text = re.sub(r'https?://[^\s"]+', '<url>', text)

    return text


def safe_json(obj: Any, max_length: int = 1000) -> str:
    """Serialize ``obj`` to JSON with sensitive data sanitized.

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


def _log(level: int, message: str, **kwargs) -> None:
    if not logger.isEnabledFor(level):
        return
    if kwargs:
        logger.log(level, f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.log(level, message)


def log_info(message: str, **kwargs) -> None:
    """Log info message with optional sanitized context."""
    _log(logging.INFO, message, **kwargs)


def log_warning(message: str, **kwargs) -> None:
    """Log warning message with optional sanitized context."""
    _log(logging.WARNING, message, **kwargs)


def log_error(message: str, **kwargs) -> None:
    """Log error message with optional sanitized context."""
    _log(logging.ERROR, message, **kwargs)


def log_debug(message: str, **kwargs) -> None:
    """Log debug message with optional sanitized context."""
    _log(logging.DEBUG, message, **kwargs)


def log_dedup_summary(input_count: int, bucket_count: int, removed_count: int, **kwargs) -> None:
    """Log the outcome of one deduplication pass.

    Args:
        input_count: Number of issues handed to the deduplicator
        bucket_count: Number of distinct deduplication keys seen
        removed_count: Number of duplicate issues filtered out
        **kwargs: Additional context
    """
    log_info("Duplicate issues filtered",
             input_count=input_count,
             bucket_count=bucket_count,
             removed_count=removed_count,
             remaining_count=input_count - removed_count,
             **kwargs)
