"""
Pet search criteria.

A closed set of criteria evaluated by ``search``. Results keep the store's
order and are always a new list; the pets passed in are never modified.
"""

from dataclasses import dataclass
from typing import Iterable, List, Union

from ..models import Pet


@dataclass(frozen=True)
class ByName:
    text: str  # case-sensitive substring


@dataclass(frozen=True)
class ByBreed:
    text: str  # case-sensitive substring


@dataclass(frozen=True)
class ByAgeRange:
    min_age: int
    max_age: int  # inclusive


Criterion = Union[ByName, ByBreed, ByAgeRange]


def matches(pet: Pet, criterion: Criterion) -> bool:
    if isinstance(criterion, ByName):
        return criterion.text in pet.name
    if isinstance(criterion, ByBreed):
        return criterion.text in pet.breed
    if isinstance(criterion, ByAgeRange):
        return criterion.min_age <= pet.age <= criterion.max_age
    raise TypeError(f"Unsupported search criterion: {criterion!r}")


def search(pets: Iterable[Pet], criterion: Criterion) -> List[Pet]:
    return [pet for pet in pets if matches(pet, criterion)]
