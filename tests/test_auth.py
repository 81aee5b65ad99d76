"""Tests for the single-profile auth service."""

import pytest

from iffidb.config import AuthSettings
from iffidb.models.audit import LogAction
from iffidb.models.record import UserRole
from iffidb.services import AuthError, AuthService


@pytest.fixture
def auth(store, audit, zero_latency) -> AuthService:
    return AuthService(store, audit, latency=zero_latency)


class TestAuthService:
    """Tests for login, logout and the current session."""

    @pytest.mark.asyncio
    async def test_login_success(self, auth, audit):
        """Test the admin profile and the LOGIN entry."""
        user = await auth.login("iffibaloch334@gmail.com", "admin")

        assert user.role == UserRole.ADMIN
        assert user.name == "Iftikhar Ali"
        assert user.token.startswith("session-")
        assert auth.current_user() == user

        entry = audit.list()[0]
        assert entry.action == LogAction.LOGIN
        assert entry.details == "User iffibaloch334@gmail.com logged in successfully."

    @pytest.mark.asyncio
    async def test_padded_email_is_rejected(self, auth, audit):
        """Test that the email must match exactly."""
        with pytest.raises(AuthError):
            await auth.login("  iffibaloch334@gmail.com ", "admin")

        assert auth.current_user() is None
        entry = audit.list()[0]
        assert entry.action == LogAction.ERROR
        assert entry.details == "Failed login attempt for   iffibaloch334@gmail.com ."

    @pytest.mark.asyncio
    async def test_login_failure(self, auth, audit):
        """Test rejected credentials leave no session."""
        with pytest.raises(AuthError, match="Invalid credentials"):
            await auth.login("iffibaloch334@gmail.com", "wrong")

        assert auth.current_user() is None
        entry = audit.list()[0]
        assert entry.action == LogAction.ERROR
        assert entry.details == "Failed login attempt for iffibaloch334@gmail.com."

    @pytest.mark.asyncio
    async def test_tokens_differ_between_sessions(self, auth):
        """Test that each login issues a new token."""
        first = await auth.login("iffibaloch334@gmail.com", "admin")
        second = await auth.login("iffibaloch334@gmail.com", "admin")
        assert first.token != second.token

    @pytest.mark.asyncio
    async def test_logout(self, auth, audit):
        """Test that logout clears the session and logs it."""
        await auth.login("iffibaloch334@gmail.com", "admin")
        auth.logout()

        assert auth.current_user() is None
        assert audit.list()[0].details == "User logged out."

    @pytest.mark.asyncio
    async def test_configured_credentials(self, store, audit, zero_latency):
        """Test a non-default admin profile."""
        settings = AuthSettings(admin_email="ops@example.com", admin_password="s3cret")
        auth = AuthService(store, audit, settings=settings, latency=zero_latency)

        with pytest.raises(AuthError):
            await auth.login("iffibaloch334@gmail.com", "admin")
        assert (await auth.login("ops@example.com", "s3cret")).email == "ops@example.com"

    def test_no_session_initially(self, auth):
        """Test the current user before any login."""
        assert auth.current_user() is None
