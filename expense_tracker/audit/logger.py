"""
Audit Logger

DESIGN DECISION: Every store mutation and every login/signup attempt is
logged as a structured event. This provides:
1. Traceability of writes
2. Debugging capability when a write fails at the edge
3. A trail of failed logins

The audit logger:
- Is synchronous, like the rest of the core
- Supports correlation IDs to trace related events
- Never receives passwords or hashes
"""

from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditSeverity,
)


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Writes every event to the structured local log. Events are also kept
    in memory (bounded) so the presentation layer can show recent activity.
    """

    def __init__(self, history_size: int = 100):
        self._logger = structlog.get_logger("expense_tracker.audit")
        self._history: deque[AuditEvent] = deque(maxlen=history_size)

    def log(self, event: AuditEvent) -> AuditEvent:
        """Log an audit event and remember it."""
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        self._history.append(event)
        return event

    def recent_events(self, limit: int = 20) -> list[AuditEvent]:
        """Most recent events, newest first."""
        return list(reversed(self._history))[:limit]

    def log_schema_ensured(self, database: str) -> None:
        self.log(AuditEventBuilder.schema_ensured(database))

    def log_expense_added(
        self,
        expense_id: int,
        category: str,
        amount: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a successful expense insert."""
        self.log(AuditEventBuilder.expense_added(
            expense_id=expense_id,
            category=category,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_expense_rejected(
        self,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expense_rejected(
            reason=reason,
            correlation_id=correlation_id,
        ))

    def log_expense_deleted(
        self,
        expense_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expense_deleted(
            expense_id=expense_id,
            correlation_id=correlation_id,
        ))

    def log_user_registered(
        self,
        user_id: int,
        username: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.user_registered(
            user_id=user_id,
            username=username,
            correlation_id=correlation_id,
        ))

    def log_signup_rejected(
        self,
        username: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.signup_rejected(
            username=username,
            reason=reason,
            correlation_id=correlation_id,
        ))

    def log_login(
        self,
        username: str,
        user_id: Optional[int],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a login attempt. user_id is None when the attempt failed."""
        if user_id is None:
            event = AuditEventBuilder.login_failed(
                username=username,
                correlation_id=correlation_id,
            )
        else:
            event = AuditEventBuilder.login_succeeded(
                user_id=user_id,
                username=username,
                correlation_id=correlation_id,
            )
        self.log(event)

    def log_store_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.store_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_hashing_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.hashing_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., a signup attempt).
    Pass it through all subsequent operations.
    """
    return uuid4()
