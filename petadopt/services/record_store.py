"""
Record store: users, pets and applications held in memory and persisted
to one flat file per collection.

Every mutation rewrites the affected file immediately. If the write fails
the in-memory collection is left as it was and PersistenceError is raised,
so memory and disk never silently diverge.
"""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, List, Optional, Tuple, TypeVar, Union

from ..core.validators import (
    is_valid_breed,
    is_valid_name,
    is_valid_password,
    is_valid_username,
)
from ..models import Application, ApplicationStatus, Pet, Role, User
from ..utils.exceptions import (
    DuplicateUsername,
    InvalidTransition,
    NotFound,
    PersistenceError,
    ValidationFailure,
)
from ..utils.logger import get_logger
from . import codec

logger = get_logger(__name__)

R = TypeVar("R")

DEMO_PETS = [
    Pet(name="Whiskers", breed="Siamese", age=2, vaccinated=True),
    Pet(name="Rex", breed="Labrador", age=3, vaccinated=True),
]


class RecordStore:
    """Owns the three collections and their backing files"""

    def __init__(
        self,
        data_dir: Union[str, Path] = "data",
        users_file: str = "users.dat",
        pets_file: str = "pets.dat",
        applications_file: str = "applications.dat",
        bootstrap_username: str = "admin",
        bootstrap_password: str = "admin123",
        seed_demo_pets: bool = False,
    ):
        self.data_dir = Path(data_dir)
        self.users_path = self.data_dir / users_file
        self.pets_path = self.data_dir / pets_file
        self.applications_path = self.data_dir / applications_file
        self.bootstrap_username = bootstrap_username
        self.bootstrap_password = bootstrap_password
        self.seed_demo_pets = seed_demo_pets

        self.users: List[User] = []
        self.pets: List[Pet] = []
        self.applications: List[Application] = []
        self.next_application_id = 1
        # Read failures that degraded a collection to empty; shown to the user at startup
        self.load_errors: List[PersistenceError] = []

    # ------------------------------------------------------------------ loading

    def load(self) -> "RecordStore":
        """Load all collections. Seeds the bootstrap admin when no users exist."""
        self.load_errors = []
        pets_existed = self.pets_path.exists()

        self.users = self._load_records(self.users_path, codec.decode_user)
        self.pets = self._load_records(self.pets_path, codec.decode_pet)
        self._load_applications()

        logger.info(
            "Record store loaded",
            data_dir=str(self.data_dir),
            users=len(self.users),
            pets=len(self.pets),
            applications=len(self.applications),
            next_application_id=self.next_application_id,
        )

        if not self.users:
            admin = User(
                username=self.bootstrap_username,
                password=self.bootstrap_password,
                role=Role.ADMIN,
            )
            if self._is_blank(self.users_path):
                self._commit_users([admin])
                logger.info("Seeded default admin user", username=admin.username)
            else:
                # Never overwrite a users file that has content we could not read
                self.users = [admin]
                logger.warning(
                    "No readable users, default admin seeded in memory only",
                    path=str(self.users_path),
                    username=admin.username,
                )

        if self.seed_demo_pets and not pets_existed and not self.pets:
            self._commit_pets(list(DEMO_PETS))
            logger.info("Seeded demo pets", count=len(DEMO_PETS))

        return self

    @staticmethod
    def _is_blank(path: Path) -> bool:
        try:
            return not path.exists() or not path.read_bytes().strip()
        except OSError:
            return False

    def _read_lines(self, path: Path) -> List[Tuple[int, str]]:
        """Numbered lines of the file; a line that is not valid UTF-8 is skipped on its own"""
        if not path.exists():
            return []
        try:
            raw = path.read_bytes()
        except OSError as e:
            error = PersistenceError(f"Failed to read {path}: {e}", path=str(path))
            self.load_errors.append(error)
            logger.error("Failed to read data file, starting empty", path=str(path), error=str(e))
            return []

        lines = []
        for line_no, chunk in enumerate(raw.splitlines(), start=1):
            try:
                lines.append((line_no, chunk.decode("utf-8")))
            except UnicodeDecodeError as e:
                logger.warning("Skipping malformed record", path=str(path), line=line_no, error=str(e))
        return lines

    def _load_records(
        self,
        path: Path,
        decode: Callable[[str], R],
        lines: Optional[List[Tuple[int, str]]] = None,
    ) -> List[R]:
        if lines is None:
            lines = self._read_lines(path)
        records = []
        for line_no, line in lines:
            if not line.strip():
                continue
            try:
                records.append(decode(line))
            except codec.MalformedRecord as e:
                logger.warning("Skipping malformed record", path=str(path), line=line_no, error=str(e))
        return records

    def _load_applications(self) -> None:
        lines = self._read_lines(self.applications_path)
        stored_next_id = None
        if lines:
            try:
                stored_next_id = codec.decode_next_id(lines[0][1])
            except codec.MalformedRecord as e:
                logger.warning("Malformed NEXT_ID header", path=str(self.applications_path), error=str(e))
                lines = lines[1:]
            else:
                if stored_next_id is not None:
                    lines = lines[1:]

        self.applications = self._load_records(self.applications_path, codec.decode_application, lines)

        floor = max((a.id for a in self.applications), default=0) + 1
        if stored_next_id is None or stored_next_id < floor:
            if stored_next_id is not None:
                logger.warning(
                    "NEXT_ID behind stored applications, advancing",
                    stored=stored_next_id,
                    next_id=floor,
                )
            stored_next_id = floor
        self.next_application_id = stored_next_id

    # ------------------------------------------------------------------ saving

    def _atomic_write(self, path: Path, lines: List[str]) -> None:
        """Write the file atomically via a temp file in the same directory"""
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w", dir=str(path.parent), delete=False, encoding="utf-8", newline="\n"
            ) as tf:
                for line in lines:
                    tf.write(line + "\n")
                temp_path = Path(tf.name)
        except OSError as e:
            logger.error("Failed to write data file", path=str(path), error=str(e))
            raise PersistenceError(f"Failed to save {path}: {e}", path=str(path))

        try:
            shutil.move(str(temp_path), str(path))
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            logger.error("Failed to replace data file", path=str(path), error=str(e))
            raise PersistenceError(f"Failed to save {path}: {e}", path=str(path))

    def _commit_users(self, users: List[User]) -> None:
        self._atomic_write(self.users_path, [codec.encode_user(u) for u in users])
        self.users = users

    def _commit_pets(self, pets: List[Pet]) -> None:
        self._atomic_write(self.pets_path, [codec.encode_pet(p) for p in pets])
        self.pets = pets

    def _commit_applications(self, applications: List[Application], next_id: int) -> None:
        lines = [codec.encode_next_id(next_id)]
        lines.extend(codec.encode_application(a) for a in applications)
        self._atomic_write(self.applications_path, lines)
        self.applications = applications
        self.next_application_id = next_id

    # ------------------------------------------------------------------ users

    def get_user(self, username: str) -> User:
        user = self.find_user(username)
        if user is None:
            raise NotFound(f"User '{username}' not found")
        return user

    def find_user(self, username: str) -> Optional[User]:
        for user in self.users:
            if user.username == username:
                return user
        return None

    def list_users(self, sort: bool = False) -> List[User]:
        if sort:
            return sorted(self.users, key=lambda u: u.username)
        return list(self.users)

    def add_user(self, username: str, password: str, role: Role = Role.REGULAR_USER) -> User:
        if not is_valid_username(username):
            raise ValidationFailure(f"Invalid username '{username}'", field="username")
        if not is_valid_password(password):
            raise ValidationFailure("Password must not be empty", field="password")
        if self.find_user(username) is not None:
            raise DuplicateUsername(username)

        user = User(username=username, password=password, role=role)
        self._commit_users(self.users + [user])
        logger.info("User added", username=username, role=role.value)
        return user

    def update_user(
        self,
        username: str,
        new_username: Optional[str] = None,
        new_password: Optional[str] = None,
    ) -> User:
        current = self.get_user(username)
        updates = {}
        if new_username is not None and new_username != username:
            if not is_valid_username(new_username):
                raise ValidationFailure(f"Invalid username '{new_username}'", field="username")
            if self.find_user(new_username) is not None:
                raise DuplicateUsername(new_username)
            updates["username"] = new_username
        if new_password is not None:
            if not is_valid_password(new_password):
                raise ValidationFailure("Password must not be empty", field="password")
            updates["password"] = new_password

        updated = current.model_copy(update=updates)
        self._commit_users([updated if u is current else u for u in self.users])
        logger.info(
            "User updated",
            username=username,
            new_username=updated.username,
            password_changed="password" in updates,
        )
        return updated

    def delete_user(self, username: str) -> User:
        user = self.get_user(username)
        self._commit_users([u for u in self.users if u is not user])
        logger.info("User deleted", username=username, role=user.role.value)
        return user

    # ------------------------------------------------------------------ pets

    def _pet_index(self, index: int) -> int:
        if not isinstance(index, int) or not 0 <= index < len(self.pets):
            raise NotFound(f"No pet at position {index}")
        return index

    def get_pet(self, index: int) -> Pet:
        return self.pets[self._pet_index(index)]

    def find_pet_by_name(self, name: str) -> Optional[Pet]:
        """First pet with exactly this name. Duplicate names resolve to the earliest record."""
        for pet in self.pets:
            if pet.name == name:
                return pet
        return None

    def available_pets(self) -> List[Tuple[int, Pet]]:
        return [(i, p) for i, p in enumerate(self.pets) if not p.adopted]

    def adopted_pets(self) -> List[Pet]:
        return [p for p in self.pets if p.adopted]

    def _check_pet_fields(self, name: Optional[str], breed: Optional[str], age: Optional[int]) -> None:
        if name is not None and not is_valid_name(name):
            raise ValidationFailure(f"Invalid pet name '{name}'", field="name")
        if breed is not None and not is_valid_breed(breed):
            raise ValidationFailure(f"Invalid breed '{breed}'", field="breed")
        if age is not None and (not isinstance(age, int) or age < 0):
            raise ValidationFailure(f"Invalid age {age!r}", field="age")

    def add_pet(self, name: str, breed: str, age: int, vaccinated: bool = False) -> Pet:
        self._check_pet_fields(name, breed, age)
        pet = Pet(name=name, breed=breed, age=age, vaccinated=vaccinated)
        self._commit_pets(self.pets + [pet])
        logger.info("Pet added", name=name, breed=breed, age=age, vaccinated=vaccinated)
        return pet

    def edit_pet(
        self,
        index: int,
        name: Optional[str] = None,
        breed: Optional[str] = None,
        age: Optional[int] = None,
        vaccinated: Optional[bool] = None,
    ) -> Pet:
        index = self._pet_index(index)
        self._check_pet_fields(name, breed, age)
        updates = {
            key: value
            for key, value in (("name", name), ("breed", breed), ("age", age), ("vaccinated", vaccinated))
            if value is not None
        }
        updated = self.pets[index].model_copy(update=updates)
        pets = list(self.pets)
        pets[index] = updated
        self._commit_pets(pets)
        logger.info("Pet updated", index=index, fields=sorted(updates))
        return updated

    def delete_pet(self, index: int) -> Pet:
        """Remove a pet. Applications naming it are kept and become dangling."""
        index = self._pet_index(index)
        pet = self.pets[index]
        self._commit_pets(self.pets[:index] + self.pets[index + 1:])
        logger.info("Pet deleted", index=index, name=pet.name)
        return pet

    # ------------------------------------------------------------------ applications

    def get_application(self, app_id: int) -> Application:
        for application in self.applications:
            if application.id == app_id:
                return application
        raise NotFound(f"Application {app_id} not found")

    def pending_applications(self) -> List[Application]:
        return [a for a in self.applications if a.is_pending]

    def applications_for(self, username: str) -> List[Application]:
        return [a for a in self.applications if a.applicant_username == username]

    def create_application(self, username: str, pet_name: str) -> Application:
        self.get_user(username)
        if self.find_pet_by_name(pet_name) is None:
            raise NotFound(f"Pet '{pet_name}' not found")

        application = Application(
            id=self.next_application_id,
            applicant_username=username,
            pet_name=pet_name,
        )
        self._commit_applications(self.applications + [application], self.next_application_id + 1)
        logger.info("Application created", id=application.id, username=username, pet=pet_name)
        return application

    def process_application(self, app_id: int, approve: bool) -> Application:
        """
        Approve or reject a pending application.

        Approval also marks the first pet named in the application as adopted.
        If that pet no longer exists only the application status changes.
        """
        current = self.get_application(app_id)
        if not current.is_pending:
            raise InvalidTransition(
                f"Application {app_id} is already {current.status.value}"
            )

        status = ApplicationStatus.APPROVED if approve else ApplicationStatus.REJECTED
        updated = current.model_copy(update={"status": status})
        applications = [updated if a is current else a for a in self.applications]

        if not approve:
            self._commit_applications(applications, self.next_application_id)
            logger.info("Application rejected", id=app_id)
            return updated

        previous_pets = self.pets
        pet = self.find_pet_by_name(current.pet_name)
        if pet is not None:
            self._commit_pets([p.model_copy(update={"adopted": True}) if p is pet else p for p in self.pets])
        else:
            logger.warning("Approved application references a missing pet", id=app_id, pet=current.pet_name)

        try:
            self._commit_applications(applications, self.next_application_id)
        except PersistenceError as e:
            if pet is not None:
                # Put the pets file back so both records stay unchanged together
                try:
                    self._commit_pets(previous_pets)
                except PersistenceError as rollback_error:
                    logger.error(
                        "Approval half-applied: pet marked adopted but application still pending",
                        id=app_id,
                        pet=current.pet_name,
                        error=str(e),
                        rollback_error=str(rollback_error),
                    )
                    raise e from rollback_error
            raise

        logger.info("Application approved", id=app_id, pet=current.pet_name, pet_found=pet is not None)
        return updated
