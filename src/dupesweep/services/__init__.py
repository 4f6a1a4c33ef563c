"""File removal services."""

from .file_service import SystemFileOps, configure_audit_log

__all__ = ["SystemFileOps", "configure_audit_log"]
