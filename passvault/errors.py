"""
Exception types raised by the passvault core.

Crypto and envelope code raise these. Vault.save and Vault.load turn them
into explicit result objects; only InitializationFailure escapes that boundary.
"""


class VaultError(Exception):
    """Base class for all passvault errors."""


class InitializationFailure(VaultError):
    """The cryptographic backends failed their startup self-test."""


class KeyDerivationFailure(VaultError):
    """Argon2 could not derive a key, usually because memory ran out."""


class DecodeFailure(VaultError):
    """An envelope could not be turned back into plaintext."""


class AuthenticationFailure(DecodeFailure):
    """Tag verification failed: wrong password or tampered data."""


class MalformedEnvelope(DecodeFailure):
    """The envelope is too short to contain salt, nonce and tag."""


class SerializationFailure(VaultError):
    """Decrypted bytes are not a valid encoding of the entry list."""


class DuplicateEntryError(VaultError, ValueError):
    """An entry with the same identifier is already in the vault."""
