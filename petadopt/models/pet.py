"""Pet record model"""

from pydantic import BaseModel, ConfigDict, Field


class Pet(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    breed: str
    age: int = Field(ge=0)  # years
    vaccinated: bool = False
    adopted: bool = False

    def describe(self) -> str:
        return f"{self.name} ({self.breed})"
