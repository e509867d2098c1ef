"""Record models"""

from .user import Role, User
from .pet import Pet
from .application import Application, ApplicationStatus

__all__ = [
    "Role",
    "User",
    "Pet",
    "Application",
    "ApplicationStatus",
]
