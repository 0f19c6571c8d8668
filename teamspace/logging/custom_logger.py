"""
Custom logger with extra levels: warning, info, request, error, slow, great.

Messages are rendered with a per-level formatter and emitted through the
standard library logger of the same name, so handlers configured by
teamspace.core.logging.setup_logging (and Sentry breadcrumbs) receive them.
"""
import logging
import traceback
from datetime import datetime, timezone
from typing import Dict, Any

from teamspace.core.logging import SENSITIVE_FIELDS
from teamspace.logging.log_levels import LogLevel
from teamspace.logging.formatters import get_formatter_for_level


LOG_LEVEL_MAP = {
    LogLevel.WARNING: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.REQUEST: logging.INFO,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.SLOW: logging.WARNING,
    LogLevel.GREAT: logging.INFO,
}


class CustomLogger:
    """
    Usage:
        logger = CustomLogger("invitations")
        logger.info("Invitation created", invitation_id=123)
        logger.error("Email provider failed", exc_info=True)
        logger.slow("Slow request", duration=5.2, path="/api/organizations")
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(name)

    def _log(
        self,
        level: LogLevel,
        message: str,
        exc_info: bool = False,
        **context: Any
    ) -> None:
        context = self._redact(context)
        log_data = {
            "level": level.value,
            "module": self.name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **context
        }

        if exc_info:
            log_data["traceback"] = self._get_clean_traceback()

        if context:
            details = " ".join(f"{key}={value}" for key, value in context.items())
            message = f"{message} | {details}"

        record = logging.LogRecord(
            name=self.name,
            level=LOG_LEVEL_MAP[level],
            pathname="",
            lineno=0,
            msg=message,
            args=(),
            exc_info=None
        )
        formatted_message = get_formatter_for_level(level).format(record)

        self.logger.log(
            LOG_LEVEL_MAP[level],
            formatted_message,
            extra={"custom_data": log_data},
            exc_info=exc_info
        )

    @staticmethod
    def _redact(context: Dict[str, Any]) -> Dict[str, Any]:
        """Mask credentials and invitation tokens passed as context."""
        return {
            key: "[FILTERED]" if key.lower() in SENSITIVE_FIELDS else value
            for key, value in context.items()
        }

    def _get_clean_traceback(self) -> str:
        """
        Extract the current traceback without duplicated lines or library frames.
        """
        seen = set()
        clean_lines = []

        for line in traceback.format_exc().split('\n'):
            if line.strip() and line not in seen:
                if not any(skip in line for skip in ['/usr/local/lib/python', 'site-packages']):
                    seen.add(line)
                    clean_lines.append(line)

        return '\n'.join(clean_lines)

    def warning(self, message: str, **context: Any) -> None:
        """
        Something deserves attention but is not an error.

        Example:
            logger.warning("Invitation email not delivered", email="bob@x.com")
        """
        self._log(LogLevel.WARNING, message, **context)

    def info(self, message: str, **context: Any) -> None:
        self._log(LogLevel.INFO, message, **context)

    def request(
        self,
        message: str,
        method: str,
        path: str,
        status_code: int,
        duration: float,
        **context: Any
    ) -> None:
        """
        HTTP request log.

        Example:
            logger.request(
                "API request",
                method="POST",
                path="/api/auth/login",
                status_code=200,
                duration=0.152
            )
        """
        self._log(
            LogLevel.REQUEST,
            message,
            method=method,
            path=path,
            status_code=status_code,
            duration=duration,
            **context
        )

    def error(
        self,
        message: str,
        exc_info: bool = True,
        **context: Any
    ) -> None:
        self._log(LogLevel.ERROR, message, exc_info=exc_info, **context)

    def slow(
        self,
        message: str,
        duration: float,
        threshold: float = 1.0,
        **context: Any
    ) -> None:
        self._log(
            LogLevel.SLOW,
            message,
            duration=duration,
            threshold=threshold,
            **context
        )

    def great(self, message: str, **context: Any) -> None:
        """
        Notable success worth highlighting.

        Example:
            logger.great("User joined organization", organization_id=7)
        """
        self._log(LogLevel.GREAT, message, **context)


_loggers: Dict[str, CustomLogger] = {}


def get_logger(name: str) -> CustomLogger:
    """
    Usage:
        from teamspace.logging import get_logger
        logger = get_logger(__name__)
    """
    if name not in _loggers:
        _loggers[name] = CustomLogger(name)
    return _loggers[name]
