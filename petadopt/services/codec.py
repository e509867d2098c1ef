"""
Flat-file line format for users, pets and applications.

One record per line, fields joined by commas::

    users.dat          username,password,roleCode      (0 = admin, 1 = user)
    pets.dat           name,breed,age,vaccinated,adopted  (flags are 1/0)
    applications.dat   NEXT_ID:<n>
                       id,username,petName,status

Validated names never contain commas. Passwords are free text, so the user
decoder splits the password out of the middle of the line.
"""

from typing import List, Optional

from pydantic import ValidationError

from ..models import Application, ApplicationStatus, Pet, Role, User

DELIMITER = ","
NEXT_ID_PREFIX = "NEXT_ID:"

_ROLE_CODES = {Role.ADMIN: "0", Role.REGULAR_USER: "1"}
_CODE_ROLES = {code: role for role, code in _ROLE_CODES.items()}
_FLAGS = {"1": True, "0": False}


class MalformedRecord(ValueError):
    """A line could not be decoded into a record"""
    pass


def _flag(value: bool) -> str:
    return "1" if value else "0"


def _parse_flag(value: str, field: str) -> bool:
    try:
        return _FLAGS[value.strip()]
    except KeyError:
        raise MalformedRecord(f"{field} flag must be 1 or 0, got {value!r}")


def _parse_int(value: str, field: str) -> int:
    raw = value.strip()
    if not (raw.isascii() and raw.isdigit()):
        raise MalformedRecord(f"{field} must be a non-negative integer, got {value!r}")
    return int(raw)


def _split(line: str, expected: int) -> List[str]:
    fields = line.split(DELIMITER)
    if len(fields) != expected:
        raise MalformedRecord(f"expected {expected} fields, got {len(fields)}")
    return fields


# ---------------------------------------------------------------- users

def encode_user(user: User) -> str:
    return DELIMITER.join([user.username, user.password, _ROLE_CODES[user.role]])


def decode_user(line: str) -> User:
    head, sep, role_code = line.rpartition(DELIMITER)
    username, sep2, password = head.partition(DELIMITER)
    if not sep or not sep2 or not username:
        raise MalformedRecord("expected username,password,role")
    role = _CODE_ROLES.get(role_code.strip())
    if role is None:
        raise MalformedRecord(f"unknown role code {role_code!r}")
    return User(username=username, password=password, role=role)


# ---------------------------------------------------------------- pets

def encode_pet(pet: Pet) -> str:
    return DELIMITER.join([
        pet.name,
        pet.breed,
        str(pet.age),
        _flag(pet.vaccinated),
        _flag(pet.adopted),
    ])


def decode_pet(line: str) -> Pet:
    name, breed, age, vaccinated, adopted = _split(line, 5)
    if not name or not breed:
        raise MalformedRecord("pet name and breed are required")
    try:
        return Pet(
            name=name,
            breed=breed,
            age=_parse_int(age, "age"),
            vaccinated=_parse_flag(vaccinated, "vaccinated"),
            adopted=_parse_flag(adopted, "adopted"),
        )
    except ValidationError as e:
        raise MalformedRecord(str(e))


# ---------------------------------------------------------------- applications

def encode_next_id(next_id: int) -> str:
    return f"{NEXT_ID_PREFIX}{next_id}"


def decode_next_id(line: str) -> Optional[int]:
    """Counter value from a NEXT_ID header line, None if the line is not one"""
    if not line.startswith(NEXT_ID_PREFIX):
        return None
    return _parse_int(line[len(NEXT_ID_PREFIX):], "NEXT_ID")


def encode_application(application: Application) -> str:
    return DELIMITER.join([
        str(application.id),
        application.applicant_username,
        application.pet_name,
        application.status.value,
    ])


def decode_application(line: str) -> Application:
    app_id, username, pet_name, status = _split(line, 4)
    try:
        parsed_status = ApplicationStatus(status.strip())
    except ValueError:
        raise MalformedRecord(f"unknown application status {status!r}")
    try:
        return Application(
            id=_parse_int(app_id, "id"),
            applicant_username=username,
            pet_name=pet_name,
            status=parsed_status,
        )
    except ValidationError as e:
        raise MalformedRecord(str(e))
