"""
Shared pytest fixtures for the passvault test suite.

Argon2 runs with 64 MB of memory per derivation in production. The autouse
fixture below drops the cost to the library minimum so tests that derive
many keys stay fast; tests that need the real parameters restore them.
"""

import pytest

from passvault.crypto import CryptoManager


@pytest.fixture(autouse=True)
def fast_kdf(monkeypatch):
    monkeypatch.setattr(CryptoManager, "ARGON2_TIME_COST", 1)
    monkeypatch.setattr(CryptoManager, "ARGON2_MEMORY_COST", 8)
    monkeypatch.setattr(CryptoManager, "ARGON2_PARALLELISM", 1)


@pytest.fixture
def sample_entries():
    from passvault.storage import PasswordEntry

    return [
        PasswordEntry(id=1700000000001, title="Mail", username="alice@example.com",
                      password="hunter2", url="https://mail.example.com", notes="personal"),
        PasswordEntry(id=1700000000002, title="Bank", username="alice",
                      password="p@ss w0rd éè", url="", notes="line1\nline2"),
        PasswordEntry(id=1700000000003, title="", username="", password="", url="", notes=""),
    ]
