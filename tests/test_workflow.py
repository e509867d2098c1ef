"""Scripted end-to-end sessions through the menu state machine"""

import pytest

from petadopt.models import ApplicationStatus, Role
from petadopt.services.record_store import RecordStore
from petadopt.utils.exceptions import NotFound, PersistenceError
from petadopt.workflow import DASHBOARDS, State, WorkflowEngine

from .conftest import output_of


@pytest.fixture
def run_session(make_inputs, console):
    def _run(store, lines, secrets=()):
        inputs, reader, secret_reader = make_inputs(lines, list(secrets))
        engine = WorkflowEngine(store, inputs, console=console, interactive=False)
        engine.run()
        assert reader.lines == [], "script not fully consumed"
        assert secret_reader.lines == []
        return engine
    return _run


def test_dashboard_tables_are_keyed_by_role():
    admin_title, admin_actions = DASHBOARDS[Role.ADMIN]
    user_title, user_actions = DASHBOARDS[Role.REGULAR_USER]
    assert [a.label for a in admin_actions] == [
        "Add Another Admin",
        "Manage User Accounts",
        "Manage Pet Records",
        "Process Applications",
        "Search Pets",
        "Logout",
    ]
    assert [a.label for a in user_actions] == [
        "Browse Pets",
        "Check Application Status",
        "View History",
        "Logout",
    ]
    assert admin_actions[-1].handler is None and user_actions[-1].handler is None


def test_exit_from_main_menu(store, run_session, console):
    engine = run_session(store, ["3"])
    assert engine.state is State.EXIT
    assert "Exiting system" in output_of(console)


def test_exhausted_main_menu_returns_to_main_menu(store, run_session, console):
    run_session(store, ["x", "9", "", "3"])
    assert "Too many failed attempts" in output_of(console)


def test_register_login_and_apply(store_with_pets, run_session, console):
    run_session(
        store_with_pets,
        [
            "2", "alice",           # register
            "1", "2", "alice",      # login as user
            "1", "2",               # browse pets, apply for Rex
            "2",                    # check status
            "4",                    # logout
            "3",                    # exit
        ],
        secrets=["pw", "pw"],
    )

    out = output_of(console)
    assert "Registration successful!" in out
    assert "Login successful!" in out
    assert "submitted for Rex" in out

    restarted = RecordStore(data_dir=store_with_pets.data_dir).load()
    assert restarted.get_user("alice").role is Role.REGULAR_USER
    [application] = restarted.applications
    assert (application.applicant_username, application.pet_name, application.status) == (
        "alice", "Rex", ApplicationStatus.PENDING,
    )


def test_register_duplicate_username_then_back(store, run_session, console):
    run_session(store, ["2", "admin", "0", "3"])
    assert "Username already exists!" in output_of(console)
    assert len(store.users) == 1


def test_register_cancel_with_zero(store, run_session):
    run_session(store, ["2", "0", "3"])
    assert len(store.users) == 1


def test_failed_login_offers_retry(store, run_session, console):
    store.add_user("alice", "pw")
    run_session(
        store,
        ["1", "2", "alice", "1", "alice", "4", "3"],
        secrets=["wrong", "pw"],
    )
    out = output_of(console)
    assert "Invalid credentials or role mismatch." in out
    assert "Login successful!" in out


def test_admin_approves_application(store_with_pets, run_session, console):
    store_with_pets.add_user("alice", "pw")
    store_with_pets.create_application("alice", "Rex")

    run_session(
        store_with_pets,
        [
            "1", "1", "admin",      # admin login (bootstrap)
            "4", "1", "1",          # process first pending application, approve
            "6",                    # logout
            "3",
        ],
        secrets=["admin123"],
    )

    assert "Application approved!" in output_of(console)
    assert store_with_pets.applications[0].status is ApplicationStatus.APPROVED
    assert store_with_pets.find_pet_by_name("Rex").adopted is True
    assert store_with_pets.find_pet_by_name("Whiskers").adopted is False


def test_admin_rejects_application(store_with_pets, run_session):
    store_with_pets.add_user("alice", "pw")
    store_with_pets.create_application("alice", "Rex")

    run_session(store_with_pets, ["1", "1", "admin", "4", "1", "2", "6", "3"], secrets=["admin123"])

    assert store_with_pets.applications[0].status is ApplicationStatus.REJECTED
    assert not any(p.adopted for p in store_with_pets.pets)


def test_admin_adds_pet_with_month_age(store, run_session, console):
    run_session(
        store,
        [
            "1", "1", "admin",
            "3", "1", "Nemo", "Goldfish", "18 months", "0",   # manage pets > add
            "5", "3", "1", "2",                                # search by age 1..2
            "6", "3",
        ],
        secrets=["admin123"],
    )
    [pet] = store.pets
    assert (pet.name, pet.breed, pet.age, pet.vaccinated) == ("Nemo", "Goldfish", 1, False)
    assert "Search Results" in output_of(console)


def test_admin_adds_another_admin(store, run_session):
    run_session(store, ["1", "1", "admin", "1", "boss2", "6", "3"], secrets=["admin123", "pw"])
    assert store.get_user("boss2").role is Role.ADMIN


def test_admin_cannot_delete_own_account(store, run_session, console):
    run_session(store, ["1", "1", "admin", "2", "1", "3", "6", "3"], secrets=["admin123"])
    assert "cannot delete the account you are logged in with" in output_of(console)
    assert store.find_user("admin") is not None


def test_admin_deletes_user(store, run_session):
    store.add_user("alice", "pw")
    # sorted listing: admin, alice
    run_session(store, ["1", "1", "admin", "2", "2", "3", "1", "6", "3"], secrets=["admin123"])
    assert store.find_user("alice") is None


def test_store_errors_return_to_dashboard(store_with_pets, run_session, console, monkeypatch):
    store_with_pets.add_user("alice", "pw")

    def _missing(username, pet_name):
        raise NotFound(f"Pet '{pet_name}' not found")

    monkeypatch.setattr(store_with_pets, "create_application", _missing)
    engine = run_session(store_with_pets, ["1", "2", "alice", "1", "1", "4", "3"], secrets=["pw"])

    assert "Pet 'Whiskers' not found" in output_of(console)
    assert engine.state is State.EXIT


def test_persistence_error_is_reported(store_with_pets, run_session, console, monkeypatch):
    store_with_pets.add_user("alice", "pw")
    store_with_pets.create_application("alice", "Rex")

    def _fail(app_id, approve):
        raise PersistenceError("Failed to save applications.dat: disk full")

    monkeypatch.setattr(store_with_pets, "process_application", _fail)
    run_session(store_with_pets, ["1", "1", "admin", "4", "1", "1", "6", "3"], secrets=["admin123"])

    assert "disk full" in output_of(console)
    assert store_with_pets.applications[0].is_pending


def test_user_history_and_empty_browse(store, run_session, console):
    store.add_user("alice", "pw")
    run_session(store, ["1", "2", "alice", "1", "3", "4", "3"], secrets=["pw"])
    out = output_of(console)
    assert "No pets available for adoption." in out
    assert "No adoption history found." in out


def test_break_glass_admin_keeps_dashboard_after_editing_namesake(store, run_session, console):
    # A regular account holds the bootstrap name; break-glass still opens an admin session
    store.delete_user("admin")
    store.add_user("admin", "pw")

    engine = run_session(
        store,
        [
            "1", "1", "admin",
            "2", "1", "1", "renamed",   # manage users > admin > edit username
            "6",                        # logout from the admin dashboard
            "3",
        ],
        secrets=["admin123"],
    )

    out = output_of(console)
    assert "Username updated!" in out
    assert "USER DASHBOARD" not in out
    assert engine.session is None
    assert store.get_user("renamed").role is Role.REGULAR_USER


def test_admin_password_edit_of_own_account_keeps_session(store, run_session):
    store.add_user("boss1", "pw", Role.ADMIN)
    # sorted listing: admin, boss1
    engine = run_session(
        store,
        ["1", "1", "boss1", "2", "2", "2", "6", "3"],
        secrets=["pw", "newpw"],
    )
    assert store.get_user("boss1").password == "newpw"
    assert engine.state is State.EXIT
