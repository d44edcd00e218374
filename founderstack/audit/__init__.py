"""Audit logging package."""

from founderstack.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
