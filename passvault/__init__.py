"""
passvault - password-protected encrypted credential vault
Copyright (c) 2025

THREAT MODEL:
The vault file is useless without the master password: entries are sealed
with AES-256-GCM under a key derived by Argon2id, and any wrong password or
tampering is detected. Secrets held in memory while the vault is unlocked are
not protected against code running on the same host.
"""

from .crypto import initialize
from .errors import (
    AuthenticationFailure,
    DecodeFailure,
    DuplicateEntryError,
    InitializationFailure,
    KeyDerivationFailure,
    MalformedEnvelope,
    SerializationFailure,
    VaultError,
)
from .generator import generate_password
from .storage import LoadResult, LoadStatus, PasswordEntry, SaveResult, SaveStatus, Vault

__all__ = [
    "AuthenticationFailure",
    "DecodeFailure",
    "DuplicateEntryError",
    "InitializationFailure",
    "KeyDerivationFailure",
    "LoadResult",
    "LoadStatus",
    "MalformedEnvelope",
    "PasswordEntry",
    "SaveResult",
    "SaveStatus",
    "SerializationFailure",
    "Vault",
    "VaultError",
    "generate_password",
    "initialize",
]
