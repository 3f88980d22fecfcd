"""Pytest unit test fixtures."""

import pytest

from basicbot.state.store import MemoryStateStorage, SQLiteStateStorage


@pytest.fixture()
def sqlite_storage(tmp_path):
    return SQLiteStateStorage(tmp_path / "state.db")


@pytest.fixture()
def memory_storage():
    return MemoryStateStorage()
