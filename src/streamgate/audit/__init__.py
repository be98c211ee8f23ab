"""
Audit logging for streamgate.

Records routing decisions and provider failures as JSON Lines.
"""

from streamgate.audit.logger import AuditLogger, clear_audit_logger, get_audit_logger

__all__ = ["AuditLogger", "get_audit_logger", "clear_audit_logger"]
