"""
On-disk envelope format for the encrypted vault.

Layout (no header, magic or version field):

    offset 0 .. SALT_SIZE                 salt
    offset SALT_SIZE .. +NONCE_SIZE       nonce
    offset SALT_SIZE + NONCE_SIZE .. EOF  ciphertext || authentication tag

A fresh salt and an independent fresh nonce are drawn for every encode, so
no (key, nonce) pair is ever reused.
"""

import logging
from typing import Optional, Union

from . import config
from .crypto import BytesLike, CryptoManager, SecretBuffer
from .errors import MalformedEnvelope

logger = logging.getLogger(__name__)

SALT_SIZE = config.SALT_SIZE
NONCE_SIZE = config.NONCE_SIZE
TAG_SIZE = config.TAG_SIZE
MIN_ENVELOPE_SIZE = config.MIN_ENVELOPE_SIZE

Password = Union[str, BytesLike]


class EnvelopeCodec:
    """Binds salt, nonce and sealed ciphertext into a single byte string."""

    def __init__(self, crypto: Optional[CryptoManager] = None):
        self.crypto = crypto or CryptoManager()

    def encode(self, plaintext: BytesLike, password: Password) -> bytes:
        """
        Encrypt plaintext under a password.

        Raises:
            KeyDerivationFailure: Propagated unchanged from key derivation
        """
        salt = self.crypto.generate_salt()
        with SecretBuffer(password) as secret:
            with SecretBuffer(self.crypto.derive_key(secret, salt)) as key:
                nonce = self.crypto.generate_nonce()
                sealed = self.crypto.seal(key, nonce, plaintext)
        return salt + nonce + sealed

    def decode(self, envelope: BytesLike, password: Password) -> bytes:
        """
        Decrypt an envelope produced by encode().

        Raises:
            MalformedEnvelope: If the envelope is too short; no key is derived
            KeyDerivationFailure: If Argon2 fails
            AuthenticationFailure: Wrong password or corrupted/tampered data
        """
        if len(envelope) < MIN_ENVELOPE_SIZE:
            logger.warning(f"Decode: Envelope too short ({len(envelope)} bytes)")
            raise MalformedEnvelope(
                f"Envelope is {len(envelope)} bytes, need at least {MIN_ENVELOPE_SIZE}"
            )

        view = memoryview(envelope)
        salt = view[:SALT_SIZE]
        nonce = view[SALT_SIZE:SALT_SIZE + NONCE_SIZE]
        sealed = view[SALT_SIZE + NONCE_SIZE:]

        with SecretBuffer(password) as secret:
            with SecretBuffer(self.crypto.derive_key(secret, salt)) as key:
                return self.crypto.open(key, nonce, sealed)


_default_codec = EnvelopeCodec()


def encode(plaintext: BytesLike, password: Password) -> bytes:
    """Encrypt plaintext with the module-level codec."""
    return _default_codec.encode(plaintext, password)


def decode(envelope: BytesLike, password: Password) -> bytes:
    """Decrypt an envelope with the module-level codec."""
    return _default_codec.decode(envelope, password)
