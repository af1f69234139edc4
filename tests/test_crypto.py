"""Tests for key derivation, AES-GCM sealing and secret buffers."""

from unittest import mock

import pytest
from argon2.exceptions import HashingError
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from passvault import config
from passvault import crypto as crypto_mod
from passvault.crypto import CryptoManager, SecretBuffer
from passvault.errors import AuthenticationFailure, InitializationFailure, KeyDerivationFailure


# ── Key derivation ──────────────────────────────────────────────────


class TestDeriveKey:
    """Argon2id password → key derivation."""

    def test_key_length(self):
        key = CryptoManager().derive_key(b"password", bytes(config.SALT_SIZE))
        assert len(key) == config.KEY_SIZE

    def test_deterministic(self):
        crypto = CryptoManager()
        salt = crypto.generate_salt()
        assert crypto.derive_key(b"password", salt) == crypto.derive_key(b"password", salt)

    def test_salt_changes_key(self):
        crypto = CryptoManager()
        key1 = crypto.derive_key(b"password", b"\x00" * config.SALT_SIZE)
        key2 = crypto.derive_key(b"password", b"\x01" * config.SALT_SIZE)
        assert key1 != key2

    def test_password_changes_key(self):
        crypto = CryptoManager()
        salt = crypto.generate_salt()
        assert crypto.derive_key(b"password1", salt) != crypto.derive_key(b"password2", salt)

    def test_accepts_bytearray(self):
        crypto = CryptoManager()
        salt = crypto.generate_salt()
        assert crypto.derive_key(bytearray(b"pw"), bytearray(salt)) == crypto.derive_key(b"pw", salt)

    def test_wrong_salt_length_rejected(self):
        with pytest.raises(ValueError):
            CryptoManager().derive_key(b"password", b"short")

    def test_hashing_error_becomes_key_derivation_failure(self, monkeypatch):
        def exhausted(**kwargs):
            raise HashingError("Memory allocation error")

        monkeypatch.setattr(crypto_mod, "hash_secret_raw", exhausted)
        with pytest.raises(KeyDerivationFailure):
            CryptoManager().derive_key(b"password", bytes(config.SALT_SIZE))

    def test_production_parameters(self, monkeypatch):
        monkeypatch.setattr(CryptoManager, "ARGON2_TIME_COST", config.ARGON2_TIME_COST)
        monkeypatch.setattr(CryptoManager, "ARGON2_MEMORY_COST", config.ARGON2_MEMORY_COST)
        monkeypatch.setattr(CryptoManager, "ARGON2_PARALLELISM", config.ARGON2_PARALLELISM)

        crypto = CryptoManager()
        salt = bytes(range(config.SALT_SIZE))
        key = crypto.derive_key(b"correct-password", salt)
        assert len(key) == config.KEY_SIZE
        assert key == crypto.derive_key(b"correct-password", salt)

    def test_format_constants(self):
        # Changing any of these breaks every existing vault file.
        assert config.SALT_SIZE == 16
        assert config.NONCE_SIZE == 12
        assert config.TAG_SIZE == 16
        assert config.KEY_SIZE == 32
        assert config.ARGON2_TIME_COST == 2
        assert config.ARGON2_MEMORY_COST == 65536
        assert config.ARGON2_PARALLELISM == 1


# ── Seal / open ─────────────────────────────────────────────────────


class TestSealOpen:
    """AES-256-GCM authenticated encryption."""

    KEY = bytes(range(32))
    NONCE = bytes(range(12))

    def test_roundtrip(self):
        crypto = CryptoManager()
        sealed = crypto.seal(self.KEY, self.NONCE, b"secret data")
        assert crypto.open(self.KEY, self.NONCE, sealed) == b"secret data"

    def test_sealed_length(self):
        sealed = CryptoManager().seal(self.KEY, self.NONCE, b"12345")
        assert len(sealed) == 5 + config.TAG_SIZE

    def test_seal_is_deterministic(self):
        crypto = CryptoManager()
        assert crypto.seal(self.KEY, self.NONCE, b"x") == crypto.seal(self.KEY, self.NONCE, b"x")

    def test_empty_plaintext(self):
        crypto = CryptoManager()
        sealed = crypto.seal(self.KEY, self.NONCE, b"")
        assert len(sealed) == config.TAG_SIZE
        assert crypto.open(self.KEY, self.NONCE, sealed) == b""

    def test_wrong_key_fails(self):
        crypto = CryptoManager()
        sealed = crypto.seal(self.KEY, self.NONCE, b"secret")
        wrong_key = bytes([self.KEY[0] ^ 1]) + self.KEY[1:]
        with pytest.raises(AuthenticationFailure):
            crypto.open(wrong_key, self.NONCE, sealed)

    def test_wrong_nonce_fails(self):
        crypto = CryptoManager()
        sealed = crypto.seal(self.KEY, self.NONCE, b"secret")
        wrong_nonce = self.NONCE[:-1] + bytes([self.NONCE[-1] ^ 0x80])
        with pytest.raises(AuthenticationFailure):
            crypto.open(self.KEY, wrong_nonce, sealed)

    def test_tampered_tag_fails(self):
        crypto = CryptoManager()
        sealed = bytearray(crypto.seal(self.KEY, self.NONCE, b"secret"))
        sealed[-1] ^= 0x01
        with pytest.raises(AuthenticationFailure):
            crypto.open(self.KEY, self.NONCE, bytes(sealed))

    def test_shorter_than_tag_fails(self):
        with pytest.raises(AuthenticationFailure):
            CryptoManager().open(self.KEY, self.NONCE, b"\x00" * (config.TAG_SIZE - 1))

    def test_key_buffer_is_not_copied(self):
        crypto = CryptoManager()
        key = bytearray(self.KEY)
        with mock.patch.object(crypto_mod, "AESGCM", wraps=AESGCM) as aesgcm:
            sealed = crypto.seal(key, self.NONCE, bytearray(b"secret"))
            assert crypto.open(key, self.NONCE, sealed) == b"secret"
        assert aesgcm.call_count == 2
        assert all(call.args[0] is key for call in aesgcm.call_args_list)

    def test_bad_key_length_rejected(self):
        with pytest.raises(ValueError):
            CryptoManager().seal(b"short", self.NONCE, b"data")

    def test_bad_nonce_length_rejected(self):
        with pytest.raises(ValueError):
            CryptoManager().seal(self.KEY, b"\x00" * 24, b"data")

    def test_random_salt_and_nonce(self):
        crypto = CryptoManager()
        assert len(crypto.generate_salt()) == config.SALT_SIZE
        assert len(crypto.generate_nonce()) == config.NONCE_SIZE
        assert crypto.generate_salt() != crypto.generate_salt()
        assert crypto.generate_nonce() != crypto.generate_nonce()


# ── SecretBuffer ────────────────────────────────────────────────────


class TestSecretBuffer:
    def test_wiped_on_exit(self):
        buf = SecretBuffer(b"top secret")
        with buf as data:
            assert bytes(data) == b"top secret"
        assert buf.wiped
        assert len(buf) == len(b"top secret")

    def test_wiped_on_exception(self):
        buf = SecretBuffer(b"top secret")
        with pytest.raises(RuntimeError):
            with buf:
                raise RuntimeError("boom")
        assert buf.wiped

    def test_str_is_utf8_encoded(self):
        with SecretBuffer("pässword") as data:
            assert bytes(data) == "pässword".encode("utf-8")

    def test_clear_bytes_ignores_immutable(self):
        data = b"abc"
        CryptoManager.clear_bytes(data)
        assert data == b"abc"


# ── Initialization ──────────────────────────────────────────────────


class TestInitialize:
    def test_initialize_succeeds(self, monkeypatch):
        monkeypatch.setattr(crypto_mod, "_initialized", None)
        assert crypto_mod.initialize() is True
        crypto_mod.ensure_initialized()

    def test_initialize_failure_is_cached(self, monkeypatch):
        monkeypatch.setattr(crypto_mod, "_initialized", None)

        def broken(**kwargs):
            raise HashingError("backend unavailable")

        monkeypatch.setattr(crypto_mod, "hash_secret_raw", broken)
        assert crypto_mod.initialize() is False
        assert crypto_mod._initialized is False
        with pytest.raises(InitializationFailure):
            crypto_mod.ensure_initialized()
