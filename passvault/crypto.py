"""
Cryptographic operations for the password vault.

Argon2id turns the master password into a 256-bit key, and AES-256-GCM
seals the vault contents under that key. Both are deterministic for fixed
inputs; the randomness (salt and nonce) is supplied by the caller.
"""

import os
import logging
from typing import Optional, Union

from argon2 import Type
from argon2.exceptions import HashingError
from argon2.low_level import hash_secret_raw
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from . import config
from .errors import AuthenticationFailure, InitializationFailure, KeyDerivationFailure

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]

_initialized: Optional[bool] = None


class SecretBuffer:
    """
    Mutable holder for a password or key that is zeroed when released.

    Use as a context manager; the buffer is wiped on every exit path,
    including exceptions.
    """

    def __init__(self, data: Union[str, BytesLike]):
        if isinstance(data, str):
            data = data.encode('utf-8')
        self._buf = bytearray(data)

    def __enter__(self) -> bytearray:
        return self._buf

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __len__(self) -> int:
        return len(self._buf)

    def wipe(self) -> None:
        """Overwrite the buffer contents with zeros."""
        CryptoManager.clear_bytes(self._buf)

    @property
    def wiped(self) -> bool:
        return not any(self._buf)


class CryptoManager:
    """Handles all cryptographic operations for the password vault."""

    # Constants
    SALT_SIZE = config.SALT_SIZE
    KEY_SIZE = config.KEY_SIZE
    NONCE_SIZE = config.NONCE_SIZE
    TAG_SIZE = config.TAG_SIZE

    # KDF parameters
    ARGON2_TIME_COST = config.ARGON2_TIME_COST
    ARGON2_MEMORY_COST = config.ARGON2_MEMORY_COST
    ARGON2_PARALLELISM = config.ARGON2_PARALLELISM

    def generate_salt(self) -> bytes:
        """Generate a cryptographically secure random salt."""
        return os.urandom(self.SALT_SIZE)

    def generate_nonce(self) -> bytes:
        """Generate a fresh random nonce for a single encryption."""
        return os.urandom(self.NONCE_SIZE)

    def derive_key(self, password: BytesLike, salt: BytesLike) -> bytes:
        """
        Derive an encryption key from a password using Argon2id.

        Args:
            password: The master password as bytes
            salt: SALT_SIZE bytes read from (or written to) the envelope

        Returns:
            KEY_SIZE-byte encryption key

        Raises:
            KeyDerivationFailure: If Argon2 fails, e.g. it cannot allocate memory
        """
        if len(salt) != self.SALT_SIZE:
            raise ValueError(f"Salt must be {self.SALT_SIZE} bytes, got {len(salt)}")
        try:
            return hash_secret_raw(
                secret=bytes(password),
                salt=bytes(salt),
                time_cost=self.ARGON2_TIME_COST,
                memory_cost=self.ARGON2_MEMORY_COST,
                parallelism=self.ARGON2_PARALLELISM,
                hash_len=self.KEY_SIZE,
                type=Type.ID
            )
        except (HashingError, MemoryError) as e:
            logger.error(f"Key derivation failed: {e}")
            raise KeyDerivationFailure(f"Failed to derive encryption key (out of memory?): {e}") from e

    def seal(self, key: BytesLike, nonce: BytesLike, plaintext: BytesLike) -> bytes:
        """
        Encrypt and authenticate data using AES-256-GCM.

        Args:
            key: KEY_SIZE-byte encryption key
            nonce: NONCE_SIZE-byte nonce, never reused with the same key
            plaintext: Data to encrypt

        Returns:
            Ciphertext with the TAG_SIZE-byte tag appended
        """
        self._check_key_and_nonce(key, nonce)
        return AESGCM(key).encrypt(bytes(nonce), plaintext, None)

    def open(self, key: BytesLike, nonce: BytesLike, sealed: BytesLike) -> bytes:
        """
        Verify and decrypt data sealed by seal().

        The tag is checked (in constant time) before any plaintext is released.

        Raises:
            AuthenticationFailure: If the key, nonce, ciphertext or tag do not match
        """
        self._check_key_and_nonce(key, nonce)
        if len(sealed) < self.TAG_SIZE:
            raise AuthenticationFailure("Sealed data is shorter than the authentication tag")
        try:
            return AESGCM(key).decrypt(bytes(nonce), bytes(sealed), None)
        except InvalidTag as e:
            raise AuthenticationFailure("Authentication tag verification failed") from e

    def _check_key_and_nonce(self, key: BytesLike, nonce: BytesLike) -> None:
        if len(key) != self.KEY_SIZE:
            raise ValueError(f"Key must be {self.KEY_SIZE} bytes, got {len(key)}")
        if len(nonce) != self.NONCE_SIZE:
            raise ValueError(f"Nonce must be {self.NONCE_SIZE} bytes, got {len(nonce)}")

    @staticmethod
    def clear_bytes(data: bytearray) -> None:
        """Overwrite sensitive bytes in place."""
        if isinstance(data, bytearray):
            for i in range(len(data)):
                data[i] = 0


def initialize() -> bool:
    """
    Run a one-time self-test of the Argon2 and AES-GCM backends.

    Must be called once before any key derivation or encryption. The result
    is cached; later calls return it without re-running the test.

    Returns:
        True if both backends work, False otherwise
    """
    global _initialized
    if _initialized is not None:
        return _initialized

    try:
        # Minimal Argon2 cost; only checks that the native library loads and runs.
        hash_secret_raw(
            secret=b"passvault-self-test",
            salt=bytes(config.SALT_SIZE),
            time_cost=1,
            memory_cost=8,
            parallelism=1,
            hash_len=config.KEY_SIZE,
            type=Type.ID
        )
        crypto = CryptoManager()
        key = bytes(config.KEY_SIZE)
        nonce = bytes(config.NONCE_SIZE)
        if crypto.open(key, nonce, crypto.seal(key, nonce, b"")) != b"":
            raise RuntimeError("AES-GCM self-test returned unexpected plaintext")
    except Exception as e:
        logger.critical(f"Failed to initialize the crypto subsystem: {e}", exc_info=True)
        _initialized = False
        return False

    logger.debug("Crypto subsystem initialized.")
    _initialized = True
    return True


def ensure_initialized() -> None:
    """
    Initialize the crypto subsystem if needed.

    Raises:
        InitializationFailure: If the self-test fails. This is fatal.
    """
    if not initialize():
        raise InitializationFailure("Crypto subsystem is unavailable")
