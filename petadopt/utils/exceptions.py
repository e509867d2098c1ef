"""Custom exceptions for the pet adoption system"""

from typing import Optional


class PetAdoptError(Exception):
    """Base exception for PetAdopt"""
    pass


class ValidationFailure(PetAdoptError):
    """A field value failed its validation predicate"""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class DuplicateUsername(ValidationFailure):
    """Username is already taken (usernames are case-sensitive)"""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"Username '{username}' already exists", field="username")


class NotFound(PetAdoptError):
    """A user, pet or application reference did not resolve"""
    pass


class InvalidTransition(PetAdoptError):
    """Application status change that is not Pending -> Approved/Rejected"""
    pass


class PersistenceError(PetAdoptError):
    """Backing file could not be read or written"""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class ConfigError(PetAdoptError):
    """Configuration error"""
    pass
