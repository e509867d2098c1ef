"""
Login checks against the record store.

Passwords are compared in plain text. The bootstrap admin credentials are
a break-glass login: they are always accepted for the admin role, and the
bootstrap account is recreated if it was deleted.
"""

from typing import Optional

from ..models import Role, User
from ..utils.logger import get_logger
from .record_store import RecordStore

logger = get_logger(__name__)


class AuthService:

    def __init__(self, store: RecordStore):
        self.store = store

    def is_break_glass(self, username: str, password: str, role: Role) -> bool:
        return (
            role is Role.ADMIN
            and username == self.store.bootstrap_username
            and password == self.store.bootstrap_password
        )

    def authenticate(self, username: str, password: str, role: Role) -> Optional[User]:
        """Return the matching user, or None. Username and password are case-sensitive."""
        if self.is_break_glass(username, password, role):
            return self._break_glass_login()

        user = self.store.find_user(username)
        if user is None or user.role is not role or user.password != password:
            logger.info("Login failed", username=username, role=role.value)
            return None

        logger.info("Login succeeded", username=username, role=role.value)
        return user

    def _break_glass_login(self) -> User:
        # Security smell kept on purpose: bypasses the stored password.
        username = self.store.bootstrap_username
        password = self.store.bootstrap_password
        existing = self.store.find_user(username)

        if existing is None:
            user = self.store.add_user(username, password, Role.ADMIN)
            logger.warning("Bootstrap admin recreated via break-glass login", username=username)
            return user

        if existing.role is not Role.ADMIN:
            # The bootstrap name was taken by a regular account; the admin session still opens.
            logger.warning("Break-glass login with bootstrap name held by a regular user", username=username)
            return User(username=username, password=password, role=Role.ADMIN)

        logger.warning(
            "Break-glass admin login",
            username=username,
            stored_password_differs=existing.password != password,
        )
        return existing
