from hostel_allocation.models.audit.audit_log import AuditLog, AuditLogImmutableError

__all__ = ["AuditLog", "AuditLogImmutableError"]
