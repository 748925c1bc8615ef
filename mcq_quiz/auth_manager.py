"""
Authentication and user profile operations.

Every coroutine here catches backend failures and returns a result
envelope instead of raising.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .backend_client import AuthCallback, AuthSubscription, BackendClient, BackendError
from .utils import AppError, validate_password

PROFILES_TABLE = "profiles"


class AuthManager:
    """Signs users in and out and manages their profile rows."""

    def __init__(self, client: BackendClient):
        self.client = client
        self.logger = logging.getLogger(__name__)

    async def login_user(self, email: str, password: str) -> Dict[str, Any]:
        """
        Sign in with email and password.

        Returns:
            Dictionary with success status, the signed-in user and error message
        """
        try:
            session = await self.client.sign_in_with_password(email.strip(), password)
            user = session.get("user") or {}
            self.logger.info(f"Login successful: {user.get('email', email.strip())}")
            return {
                'success': True,
                'user': user,
                'error': None
            }
        except BackendError as e:
            self.logger.error(f"Login error: {e}")
            return {
                'success': False,
                'user': None,
                'error': str(e)
            }

    async def register_user(self, email: str, password: str, fullname: str) -> Dict[str, Any]:
        """
        Register a new account; the full name is stored as user metadata.

        Returns:
            Dictionary with success status, the created user and error message
        """
        try:
            if not email or not password or not fullname:
                raise AppError("All fields are required", "VALIDATION_ERROR")

            if not validate_password(password):
                raise AppError("Password must be at least 6 characters", "VALIDATION_ERROR")

            user = await self.client.sign_up(
                email.strip(),
                password,
                metadata={"fullname": fullname.strip()}
            )
            self.logger.info(f"Registration successful: {email.strip()}")
            return {
                'success': True,
                'user': user,
                'error': None
            }
        except (AppError, BackendError) as e:
            self.logger.error(f"Register error: {e}")
            return {
                'success': False,
                'user': None,
                'error': str(e)
            }

    async def logout_user(self) -> Dict[str, Any]:
        try:
            await self.client.sign_out()
            self.logger.info("Logout successful")
            return {
                'success': True,
                'error': None
            }
        except BackendError as e:
            self.logger.error(f"Logout error: {e}")
            return {
                'success': False,
                'error': str(e)
            }

    async def get_current_user(self) -> Optional[Dict[str, Any]]:
        """Return the signed-in user, or None."""
        try:
            return await self.client.get_user()
        except BackendError as e:
            self.logger.error(f"Get user error: {e}")
            return None

    async def get_session(self) -> Optional[Dict[str, Any]]:
        try:
            return await self.client.get_session()
        except BackendError as e:
            self.logger.error(f"Get session error: {e}")
            return None

    async def create_user_profile(self, user_id: str, fullname: str, email: str) -> Dict[str, Any]:
        """Insert a fresh profile row with zero attempts and best score."""
        try:
            data = await self.client.insert(PROFILES_TABLE, [
                {
                    'id': user_id,
                    'fullname': fullname.strip(),
                    'email': email.strip(),
                    'created_at': datetime.now(timezone.utc).isoformat(),
                    'attempts': 0,
                    'best_score': 0
                }
            ])
            self.logger.info(f"Profile created for: {fullname.strip()}")
            return {
                'success': True,
                'data': data,
                'error': None
            }
        except BackendError as e:
            self.logger.error(f"Create profile error: {e}")
            return {
                'success': False,
                'data': None,
                'error': str(e)
            }

    async def get_user_profile(self, user_id: str) -> Dict[str, Any]:
        try:
            data = await self.client.select(
                PROFILES_TABLE,
                filters=[("id", "eq", user_id)],
                single=True
            )
            return {
                'success': True,
                'data': data,
                'error': None
            }
        except BackendError as e:
            self.logger.error(f"Get profile error: {e}")
            return {
                'success': False,
                'data': None,
                'error': str(e)
            }

    async def update_user_profile(self, user_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        try:
            data = await self.client.update(PROFILES_TABLE, updates, [("id", "eq", user_id)])
            self.logger.info("Profile updated")
            return {
                'success': True,
                'data': data,
                'error': None
            }
        except BackendError as e:
            self.logger.error(f"Update profile error: {e}")
            return {
                'success': False,
                'data': None,
                'error': str(e)
            }

    def on_auth_state_change(self, callback: AuthCallback) -> AuthSubscription:
        """Register ``callback(event, session)`` for sign-in and sign-out events."""
        return self.client.on_auth_state_change(callback)
