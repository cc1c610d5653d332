from .entry import AuditLogEntry

__all__ = ["AuditLogEntry"]
