"""Tests for settings loading and application startup"""

import pytest

from petadopt import app as app_module
from petadopt.utils import config as config_module
from petadopt.utils.config import ConfigManager
from petadopt.utils.exceptions import ConfigError


def test_missing_settings_file_uses_defaults(tmp_path):
    settings = ConfigManager(tmp_path / "nope.yaml").load_settings()
    assert settings.storage.users_file == "users.dat"
    assert settings.auth.bootstrap_username == "admin"
    assert settings.input.max_attempts == 3


def test_env_substitution(tmp_path, monkeypatch):
    path = tmp_path / "settings.yaml"
    path.write_text(
        "storage:\n"
        "  data_dir: ${PETADOPT_TEST_DATA:fallback}\n"
        "input:\n"
        "  max_attempts: ${PETADOPT_TEST_ATTEMPTS:4}\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("PETADOPT_TEST_DATA", "/srv/pets")
    monkeypatch.delenv("PETADOPT_TEST_ATTEMPTS", raising=False)

    settings = ConfigManager(path).load_settings()

    assert settings.storage.data_dir == "/srv/pets"
    assert settings.input.max_attempts == 4


@pytest.mark.parametrize(
    "content",
    ["storage: [unclosed\n", "- just\n- a list\n", "input:\n  max_attempts: 0\n"],
)
def test_invalid_settings_raise_config_error(tmp_path, content):
    path = tmp_path / "settings.yaml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        ConfigManager(path).load_settings()


def _write_settings(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(
        f"storage:\n"
        f"  data_dir: {tmp_path / 'data'}\n"
        f"  seed_demo_pets: true\n"
        f"logging:\n"
        f"  file_path: {tmp_path / 'logs' / 'petadopt.log'}\n",
        encoding="utf-8",
    )
    return path


def test_app_initialize_builds_store(tmp_path):
    app = app_module.PetAdoptApp(config_manager=ConfigManager(_write_settings(tmp_path)))
    app.initialize()

    assert app.store.find_user("admin") is not None
    assert [p.name for p in app.store.pets] == ["Whiskers", "Rex"]
    assert (tmp_path / "data" / "users.dat").exists()
    assert app.workflow.store is app.store


def test_main_exits_nonzero_on_bad_config(tmp_path, monkeypatch):
    bad = tmp_path / "settings.yaml"
    bad.write_text("storage: [unclosed\n", encoding="utf-8")
    monkeypatch.setattr(config_module, "SETTINGS_FILE", bad)
    assert app_module.main() == 1


def test_main_exits_zero_on_end_of_input(tmp_path, monkeypatch):
    monkeypatch.setattr(config_module, "SETTINGS_FILE", _write_settings(tmp_path))

    def _eof(self, *args, **kwargs):
        raise EOFError

    monkeypatch.setattr(app_module.Console, "input", _eof)
    assert app_module.main() == 0
