"""
Structured logging for directory operations.
Store mutations, sync events and reconciliation runs all go through one logger.
"""

import logging
import os
from typing import Any, Dict, List

# Fields that may carry large or personal payloads
REDACTED_FIELDS = ['photo_url', 'photo', 'payload']


class StructuredLogger:
    """Structured logger for record store and synchronizer operations."""

    def __init__(self, name: str = "staffdir"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        if status in ("failed", "error"):
            self.logger.error(message)
        elif status in ("rejected", "degraded"):
            self.logger.warning(message)
        else:
            self.logger.info(message)

    def log_employee_operation(self, operation: str, backend: str, details: Dict[str, Any] = None, status: str = "success"):
        """Log an employee record operation against a store backend."""
        log_details = {"backend": backend}
        if details:
            log_details.update(sanitize_details(details))

        self.log_operation(f"employee.{operation}", status, log_details)

    def log_sync_event(self, event: str, record_count: int = None, details: Dict[str, Any] = None, status: str = "success"):
        """Log a synchronizer event (seed, refresh, push notification, teardown)."""
        log_details = {}
        if record_count is not None:
            log_details["record_count"] = record_count
        if details:
            log_details.update(details)

        self.log_operation(f"sync.{event}", status, log_details)

    def log_reconciliation(self, groups: int, removed: int, status: str = "success"):
        """Log a duplicate reconciliation run."""
        self.log_operation("dedupe.run", status, {"duplicate_groups": groups, "removed": removed})

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


def sanitize_details(details: Dict[str, Any], redacted_fields: List[str] = None) -> Dict[str, Any]:
    """Redact photo payloads and truncate long values before logging."""
    if redacted_fields is None:
        redacted_fields = REDACTED_FIELDS

    sanitized = {}
    for k, v in details.items():
        if k in redacted_fields:
            sanitized[k] = "[REDACTED]" if v else None
        elif isinstance(v, str) and len(v) > 50:
            sanitized[k] = v[:47] + "..."
        else:
            sanitized[k] = v
    return sanitized


# Global logger instance
logger = StructuredLogger()
