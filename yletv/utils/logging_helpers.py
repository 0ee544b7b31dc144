"""
Structured logging helpers for consistent log formatting.

Provides utilities for structured, clean logging without excessive decorative separators.
"""
import logging
from datetime import datetime, timezone
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


def log_refresh_start(logger: logging.Logger) -> None:
    """Log catalog refresh start."""
    logger.info(f"Catalog refresh started at {datetime.now(timezone.utc).isoformat()}")


def log_refresh_end(logger: logging.Logger) -> None:
    """Log catalog refresh end."""
    logger.info(f"Catalog refresh completed at {datetime.now(timezone.utc).isoformat()}")


def log_build_summary(
    logger: logging.Logger,
    channels_count: int,
    programs_count: int,
    dropped_channels: int,
    dropped_programs: int
) -> None:
    """
    Log catalog build summary.

    Args:
        logger: Logger instance
        channels_count: Number of published channels
        programs_count: Number of published programs
        dropped_channels: Number of service entries dropped
        dropped_programs: Number of schedule entries dropped
    """
    logger.info(
        f"Build summary - Channels: {channels_count}, Programs: {programs_count}, "
        f"Dropped channels: {dropped_channels}, Dropped programs: {dropped_programs}"
    )


def sanitize_url_for_logging(url: str, secret_params: tuple[str, ...] = ("app_id", "app_key")) -> str:
    """Remove credentials and API keys from URL for safe logging."""
    if "://" not in url:
        return url
    try:
        parts = urlsplit(url)
    except ValueError:
        return url

    netloc = parts.netloc
    if "@" in netloc:
        netloc = "***:***@" + netloc.split("@", 1)[1]

    query = urlencode(
        [
            (key, "***" if key in secret_params else value)
            for key, value in parse_qsl(parts.query, keep_blank_values=True)
        ],
        safe="*,",
    )
    return urlunsplit((parts.scheme, netloc, parts.path, query, parts.fragment))
