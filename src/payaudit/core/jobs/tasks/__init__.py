"""Background job tasks registered in the worker."""

from payaudit.core.jobs.tasks.cleanup import cleanup_audit_logs


__all__ = ["cleanup_audit_logs"]
