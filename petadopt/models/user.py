"""User data models for authentication"""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Role(str, Enum):
    """Account role; the dashboard action set is keyed on it"""
    ADMIN = "admin"
    REGULAR_USER = "user"

    @property
    def label(self) -> str:
        return "Admin" if self is Role.ADMIN else "User"


class User(BaseModel):
    """User account. Passwords are stored in plain text."""
    model_config = ConfigDict(frozen=True)

    username: str
    password: str
    role: Role = Role.REGULAR_USER

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN
