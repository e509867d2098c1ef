"""Shared fixtures: scripted terminal input and isolated record stores"""

import io
from typing import List

import pytest
from rich.console import Console

from petadopt.core.input_engine import InputEngine
from petadopt.services.record_store import RecordStore
from petadopt.utils.logger import setup_logger


class ScriptedReader:
    """Stands in for the terminal: returns queued lines and records every prompt"""

    def __init__(self, lines: List[str] = None):
        self.lines = list(lines or [])
        self.prompts: List[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.lines:
            raise EOFError("scripted input exhausted")
        return self.lines.pop(0)


@pytest.fixture(autouse=True)
def quiet_logging():
    """Drop log output during tests"""
    setup_logger(file_path=None)


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=120, color_system=None, force_terminal=False)


def output_of(console: Console) -> str:
    return console.file.getvalue()


@pytest.fixture
def make_inputs(console):
    def _make(lines=None, secrets=None, max_attempts=3):
        reader = ScriptedReader(lines)
        secret_reader = ScriptedReader(secrets)
        engine = InputEngine(
            console=console,
            reader=reader,
            secret_reader=secret_reader,
            max_attempts=max_attempts,
        )
        return engine, reader, secret_reader
    return _make


@pytest.fixture
def store(tmp_path):
    """Loaded store in a temp directory (bootstrap admin seeded, no pets)"""
    return RecordStore(data_dir=tmp_path).load()


@pytest.fixture
def store_with_pets(store):
    store.add_pet("Whiskers", "Siamese", 2, True)
    store.add_pet("Rex", "Labrador", 3, True)
    return store
