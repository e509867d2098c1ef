"""Adoption application model"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ApplicationStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class Application(BaseModel):
    """
    Adoption request from a user for a pet, referenced by name.

    Status moves one way only: Pending -> Approved or Pending -> Rejected.
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(gt=0)
    applicant_username: str
    pet_name: str
    status: ApplicationStatus = ApplicationStatus.PENDING

    @property
    def is_pending(self) -> bool:
        return self.status is ApplicationStatus.PENDING
