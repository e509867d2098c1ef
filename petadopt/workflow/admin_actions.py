"""Admin dashboard actions"""

from typing import TYPE_CHECKING

from ..core.validators import (
    is_valid_breed,
    is_valid_name,
    is_valid_password,
    is_valid_username,
)
from ..models import Role, User
from ..services.search import ByAgeRange, ByBreed, ByName, search
from .views import applications_table, pets_table, users_table

if TYPE_CHECKING:
    from .engine import WorkflowEngine

MAX_SEARCH_AGE = 30


def add_admin(ctx: "WorkflowEngine") -> None:
    ctx.show_menu("ADD NEW ADMIN", [("0", "Cancel at any prompt")])
    username = ctx.inputs.acquire(
        "Admin username (4-20 chars, case-sensitive): ",
        is_valid_username,
        "Invalid username format",
    )
    if not username.ok:
        return
    if ctx.store.find_user(username.value) is not None:
        ctx.say("Username exists!", "red")
        return

    password = ctx.inputs.read_secret("Password: ")
    if password == "0":
        return
    if not is_valid_password(password):
        ctx.say("Invalid password!", "red")
        return

    ctx.store.add_user(username.value, password, Role.ADMIN)
    ctx.say("Admin added!", "bold green")


# ---------------------------------------------------------------------- users

def manage_users(ctx: "WorkflowEngine") -> None:
    users = ctx.store.list_users(sort=True)
    ctx.show_menu("MANAGE USER ACCOUNTS", [("0", "Back")])
    if not users:
        ctx.say("No users found.")
        return
    ctx.console.print(users_table(users, "Accounts"))

    choice = ctx.choose("Select user to Edit/Delete (0 to cancel): ", 0, len(users))
    if not choice:
        return
    user = users[choice - 1]

    ctx.show_menu(
        f"ACCOUNT: {user.username}",
        [("1", "Edit Username"), ("2", "Edit Password"), ("3", "Delete User"), ("0", "Back")],
    )
    action = ctx.choose("Enter choice: ", 0, 3)
    if action == 1:
        _edit_username(ctx, user)
    elif action == 2:
        _edit_password(ctx, user)
    elif action == 3:
        _delete_user(ctx, user)


def _edit_username(ctx: "WorkflowEngine", user: User) -> None:
    new_name = ctx.inputs.acquire("New username: ", is_valid_username, "Invalid username")
    if not new_name.ok:
        return
    updated = ctx.store.update_user(user.username, new_username=new_name.value)
    if ctx.is_logged_in_as(user):
        ctx.session = updated
    ctx.say("Username updated!", "bold green")


def _edit_password(ctx: "WorkflowEngine", user: User) -> None:
    new_password = ctx.inputs.read_secret("New password (or '0' to cancel): ")
    if new_password == "0":
        return
    if not is_valid_password(new_password):
        ctx.say("Invalid password!", "red")
        return
    updated = ctx.store.update_user(user.username, new_password=new_password)
    if ctx.is_logged_in_as(user):
        ctx.session = updated
    ctx.say("Password updated!", "bold green")


def _delete_user(ctx: "WorkflowEngine", user: User) -> None:
    if ctx.is_logged_in_as(user):
        ctx.say("You cannot delete the account you are logged in with.", "red")
        return
    if not ctx.confirm(f"Delete user '{user.username}'?"):
        return
    ctx.store.delete_user(user.username)
    ctx.say("User deleted!", "bold green")


# ---------------------------------------------------------------------- pets

def manage_pets(ctx: "WorkflowEngine") -> None:
    ctx.show_menu(
        "MANAGE PETS",
        [("1", "Add Pet"), ("2", "Edit Pet"), ("3", "Delete Pet"), ("4", "View All Pets"), ("0", "Back")],
    )
    choice = ctx.choose("Enter choice: ", 0, 4)
    if choice == 1:
        _add_pet(ctx)
    elif choice == 2:
        _edit_pet(ctx)
    elif choice == 3:
        _delete_pet(ctx)
    elif choice == 4:
        _view_all_pets(ctx)


def _ask_vaccinated(ctx: "WorkflowEngine"):
    answer = ctx.choose("Vaccinated? (1=Yes, 0=No): ", 0, 1)
    return None if answer is None else answer == 1


def _add_pet(ctx: "WorkflowEngine") -> None:
    name = ctx.inputs.acquire("Pet name: ", is_valid_name, "Invalid name")
    if not name.ok:
        return
    breed = ctx.inputs.acquire("Breed: ", is_valid_breed, "Invalid breed")
    if not breed.ok:
        return
    age = ctx.inputs.acquire_age("Age (e.g. 2, 3 years, 6 months): ")
    vaccinated = _ask_vaccinated(ctx)
    if vaccinated is None:
        return

    ctx.store.add_pet(name.value, breed.value, age, vaccinated)
    ctx.say("Pet added successfully!", "bold green")


def _pick_pet(ctx: "WorkflowEngine", verb: str):
    """Show all pets and return the chosen store index, or None"""
    pets = ctx.store.pets
    if not pets:
        ctx.say(f"No pets available to {verb}.")
        return None
    ctx.console.print(pets_table(enumerate(pets, 1), "Pets"))
    choice = ctx.choose(f"Select pet to {verb} (0 to cancel): ", 0, len(pets))
    if not choice:
        return None
    return choice - 1


def _edit_pet(ctx: "WorkflowEngine") -> None:
    index = _pick_pet(ctx, "edit")
    if index is None:
        return
    pet = ctx.store.get_pet(index)
    ctx.show_menu(
        f"EDIT {pet.describe()}",
        [
            ("1", f"Name: {pet.name}"),
            ("2", f"Breed: {pet.breed}"),
            ("3", f"Age: {pet.age}"),
            ("4", f"Vaccinated: {'Yes' if pet.vaccinated else 'No'}"),
            ("0", "Back"),
        ],
    )
    field = ctx.choose("Select field to edit: ", 0, 4)
    if field == 1:
        value = ctx.inputs.acquire("New name: ", is_valid_name, "Invalid name")
        if not value.ok:
            return
        ctx.store.edit_pet(index, name=value.value)
    elif field == 2:
        value = ctx.inputs.acquire("New breed: ", is_valid_breed, "Invalid breed")
        if not value.ok:
            return
        ctx.store.edit_pet(index, breed=value.value)
    elif field == 3:
        ctx.store.edit_pet(index, age=ctx.inputs.acquire_age("New age: "))
    elif field == 4:
        vaccinated = _ask_vaccinated(ctx)
        if vaccinated is None:
            return
        ctx.store.edit_pet(index, vaccinated=vaccinated)
    else:
        return
    ctx.say("Pet updated successfully!", "bold green")


def _delete_pet(ctx: "WorkflowEngine") -> None:
    index = _pick_pet(ctx, "delete")
    if index is None:
        return
    pet = ctx.store.get_pet(index)
    if not ctx.confirm(f"Delete {pet.describe()}?"):
        return
    ctx.store.delete_pet(index)
    ctx.say("Pet deleted successfully!", "bold green")


def _view_all_pets(ctx: "WorkflowEngine") -> None:
    if not ctx.store.pets:
        ctx.say("No pets in the system.")
        return
    ctx.console.print(pets_table(enumerate(ctx.store.pets, 1), "All Pets"))


# ---------------------------------------------------------------------- applications

def process_applications(ctx: "WorkflowEngine") -> None:
    ctx.show_menu("PROCESS APPLICATIONS", [("0", "Back")])
    pending = ctx.store.pending_applications()
    if not pending:
        ctx.say("No applications to process.")
        return
    ctx.console.print(applications_table(enumerate(pending, 1), "Pending Applications"))

    choice = ctx.choose("Select application to process (0 to cancel): ", 0, len(pending))
    if not choice:
        return
    application = pending[choice - 1]

    ctx.show_menu(
        f"APPLICATION {application.id}: {application.applicant_username} -> {application.pet_name}",
        [("1", "Approve"), ("2", "Reject"), ("0", "Back")],
    )
    action = ctx.choose("Enter action: ", 0, 2)
    if action == 1:
        pet_on_record = ctx.store.find_pet_by_name(application.pet_name) is not None
        ctx.store.process_application(application.id, approve=True)
        ctx.say("Application approved!", "bold green")
        if not pet_on_record:
            ctx.say(f"No pet named '{application.pet_name}' is on record; only the application was updated.", "yellow")
    elif action == 2:
        ctx.store.process_application(application.id, approve=False)
        ctx.say("Application rejected.", "yellow")


# ---------------------------------------------------------------------- search

def search_pets(ctx: "WorkflowEngine") -> None:
    ctx.show_menu("SEARCH PETS", [("1", "By Name"), ("2", "By Breed"), ("3", "By Age Range"), ("0", "Back")])
    choice = ctx.choose("Enter choice: ", 0, 3)
    if not choice:
        return
    if not ctx.store.pets:
        ctx.say("No pets in the system.")
        return

    if choice == 1:
        text = ctx.inputs.acquire("Enter pet name to search: ", is_valid_name, "Invalid name")
        if not text.ok:
            return
        criterion = ByName(text.value)
    elif choice == 2:
        text = ctx.inputs.acquire("Enter breed to search: ", is_valid_breed, "Invalid breed")
        if not text.ok:
            return
        criterion = ByBreed(text.value)
    else:
        min_age = ctx.choose("Enter minimum age: ", 0, MAX_SEARCH_AGE)
        if min_age is None:
            return
        max_age = ctx.choose("Enter maximum age: ", min_age, MAX_SEARCH_AGE)
        if max_age is None:
            return
        criterion = ByAgeRange(min_age, max_age)

    results = search(ctx.store.pets, criterion)
    if not results:
        ctx.say("No matching pets found.")
        return
    ctx.console.print(pets_table(enumerate(results, 1), "Search Results"))
