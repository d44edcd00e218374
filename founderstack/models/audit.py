"""
Audit Models for FounderStack

Every state transition, persistence attempt and suggestion fallback is
recorded as an audit event. This provides:
1. Traceability of what changed and when
2. Diagnostics for ignored intents and corrupt stored state
3. A recent-activity history the view layer can show

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every stage of the intent -> snapshot -> persistence pipeline has its own type.
    """
    # State transitions
    ENTITY_ADDED = "entity_added"
    ENTITY_UPDATED = "entity_updated"
    ENTITY_DELETED = "entity_deleted"
    COMPANY_DELETED = "company_deleted"
    COMPANY_VIEWED = "company_viewed"
    MUTATION_IGNORED = "mutation_ignored"

    # Persistence
    STATE_LOADED = "state_loaded"
    STATE_SEEDED = "state_seeded"
    STATE_CORRUPT = "state_corrupt"
    STATE_RESET = "state_reset"
    SAVE_SUCCEEDED = "save_succeeded"
    SAVE_FAILED = "save_failed"

    # Suggestion service
    SUGGESTION_FALLBACK = "suggestion_fallback"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_kind: Optional[str] = Field(
        default=None,
        description="Collection of the entity (e.g., 'account', 'loan')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )
    company_id: Optional[str] = Field(
        default=None,
        description="Owning company, when there is one"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user intent?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_kind": self.entity_kind,
            "entity_id": self.entity_id,
            "company_id": self.company_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entity_added("account", account.id, company_id)
        event = AuditEventBuilder.save_failed("quota exceeded")
    """

    @staticmethod
    def entity_added(kind: str, entity_id: str, company_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_ADDED,
            entity_kind=kind,
            entity_id=entity_id,
            company_id=company_id,
            description=f"Added {kind} {entity_id}",
            is_user_action=True,
        )

    @staticmethod
    def entity_updated(
        kind: str,
        entity_id: str,
        company_id: Optional[str],
        fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_UPDATED,
            entity_kind=kind,
            entity_id=entity_id,
            company_id=company_id,
            description=f"Updated {kind} {entity_id}",
            details={"fields": fields},
            is_user_action=True,
        )

    @staticmethod
    def entity_deleted(kind: str, entity_id: str, company_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_DELETED,
            entity_kind=kind,
            entity_id=entity_id,
            company_id=company_id,
            description=f"Deleted {kind} {entity_id}",
            is_user_action=True,
        )

    @staticmethod
    def company_deleted(company_id: str, removed: dict[str, int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMPANY_DELETED,
            entity_kind="company",
            entity_id=company_id,
            company_id=company_id,
            description=f"Deleted company {company_id} and its records",
            details={"removed": removed},
            is_user_action=True,
        )

    @staticmethod
    def company_viewed(company_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMPANY_VIEWED,
            severity=AuditSeverity.DEBUG,
            entity_kind="company",
            entity_id=company_id,
            company_id=company_id,
            description=f"Opened company {company_id}",
            is_user_action=True,
        )

    @staticmethod
    def mutation_ignored(intent: str, kind: str, entity_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MUTATION_IGNORED,
            severity=AuditSeverity.DEBUG,
            entity_kind=kind,
            entity_id=entity_id,
            description=f"Ignored {intent} on {kind}: target not found",
            details={"intent": intent},
            is_user_action=True,
        )

    @staticmethod
    def state_loaded(counts: dict[str, int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOADED,
            description="Loaded stored state",
            details={"counts": counts},
        )

    @staticmethod
    def state_seeded(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_SEEDED,
            description="Initialized state with seed data",
            details={"reason": reason},
        )

    @staticmethod
    def state_corrupt(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_CORRUPT,
            severity=AuditSeverity.WARNING,
            description="Stored state could not be read; falling back to seed data",
            error_message=error_message,
        )

    @staticmethod
    def state_reset() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_RESET,
            severity=AuditSeverity.WARNING,
            description="Stored state cleared and replaced with seed data",
            is_user_action=True,
        )

    @staticmethod
    def save_succeeded(saved_at: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_SUCCEEDED,
            severity=AuditSeverity.DEBUG,
            description="State saved",
            details={"saved_at": saved_at},
        )

    @staticmethod
    def save_failed() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            description="State could not be saved; changes are only in memory",
            error_message="save returned False",
        )

    @staticmethod
    def suggestion_fallback(operation: str, error_message: str, quota: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUGGESTION_FALLBACK,
            severity=AuditSeverity.WARNING if quota else AuditSeverity.ERROR,
            entity_kind="suggestion",
            description=f"Suggestion '{operation}' failed; served fallback",
            details={"operation": operation, "quota_exceeded": quota},
            error_message=error_message,
        )
