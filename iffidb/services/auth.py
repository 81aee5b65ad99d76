"""
Authentication

Single-profile login: one configured admin account, one session at a time.
This is a stand-in for a real identity provider; the session token is
opaque and checked by nothing.
"""

import asyncio
import secrets
from typing import Optional

from iffidb.audit import AuditLog
from iffidb.config.settings import AuthSettings, LatencySettings
from iffidb.errors import IffiDBError
from iffidb.models.audit import LogAction
from iffidb.models.record import User, UserRole
from iffidb.services.storage import PersistentStore


class AuthError(IffiDBError):
    """Login rejected."""
    pass


class AuthService:
    """Login, logout and the current session."""

    def __init__(
        self,
        store: PersistentStore,
        audit: AuditLog,
        settings: Optional[AuthSettings] = None,
        latency: Optional[LatencySettings] = None,
    ):
        self._store = store
        self._audit = audit
        self._settings = settings or AuthSettings()
        self._latency = latency or LatencySettings()

    async def login(self, email: str, password: str) -> User:
        """
        Start a session for the configured admin.

        Raises:
            AuthError: On any other credential pair. Nothing is persisted.
        """
        if self._latency.login > 0:
            await asyncio.sleep(self._latency.login)

        if email != self._settings.admin_email or password != self._settings.admin_password:
            self._audit.error(f"Failed login attempt for {email}.")
            raise AuthError(
                f"Invalid credentials. (Hint: {self._settings.admin_email} / "
                f"{self._settings.admin_password})"
            )

        user = User(
            id=self._settings.admin_id,
            name=self._settings.admin_name,
            email=email,
            role=UserRole.ADMIN,
            token=f"session-{secrets.token_urlsafe(24)}",
        )
        self._store.save_user(user)
        self._audit.append(LogAction.LOGIN, f"User {email} logged in successfully.")
        return user

    def logout(self) -> None:
        self._audit.append(LogAction.LOGIN, "User logged out.")
        self._store.clear_user()

    def current_user(self) -> Optional[User]:
        return self._store.load_user()
