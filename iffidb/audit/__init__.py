"""Audit logging package."""

from iffidb.audit.logger import DEFAULT_CAPACITY, DEFAULT_OPERATOR, AuditLog

__all__ = ["DEFAULT_CAPACITY", "DEFAULT_OPERATOR", "AuditLog"]
