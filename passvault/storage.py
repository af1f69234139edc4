"""
Storage management for the password vault.

The Vault owns the ordered list of entries in memory and persists it only
when save() is called. Save and load report their outcome as a result object
instead of raising, so callers branch on the status.
"""

import os
import json
import time
import enum
import logging
from dataclasses import dataclass, asdict, field, fields
from typing import Any, Dict, Iterator, List, Optional

from . import config
from . import crypto
from .envelope import EnvelopeCodec, Password
from .errors import (
    DecodeFailure,
    DuplicateEntryError,
    KeyDerivationFailure,
    SerializationFailure,
)
from .utils import PathLike, atomic_write, set_owner_only_permissions

logger = logging.getLogger(__name__)


def _check_field_types(data: Dict[str, Any]) -> None:
    entry_id = data["id"]
    if isinstance(entry_id, bool) or not isinstance(entry_id, int):
        raise SerializationFailure(f"Entry id must be an integer, got {entry_id!r}")
    for name in config.ENTRY_FIELDS[1:]:
        if not isinstance(data[name], str):
            raise SerializationFailure(f"Entry field '{name}' must be a string")


@dataclass
class PasswordEntry:
    """Represents a single password entry."""
    id: int
    title: str
    username: str
    password: str
    url: str = ""
    notes: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PasswordEntry':
        """
        Create from dictionary.

        Raises:
            SerializationFailure: If fields are missing, unexpected or mistyped
        """
        if not isinstance(data, dict):
            raise SerializationFailure(f"Entry must be an object, got {type(data).__name__}")
        expected = set(config.ENTRY_FIELDS)
        actual = set(data)
        if actual != expected:
            missing = sorted(expected - actual)
            extra = sorted(actual - expected)
            raise SerializationFailure(f"Entry fields mismatch (missing={missing}, unexpected={extra})")
        _check_field_types(data)
        return cls(**data)

    def validate(self) -> None:
        """
        Check that the entry can be serialized and read back.

        Raises:
            SerializationFailure: If the id is not an int or a text field is not a str
        """
        _check_field_types(self.to_dict())

    def wipe(self) -> None:
        """Replace every text field so the entry no longer references its secrets."""
        for f in fields(self):
            if f.type is str:
                setattr(self, f.name, "")


class LoadStatus(enum.Enum):
    UNLOCKED = "unlocked"
    NOT_FOUND = "not_found"
    WRONG_PASSWORD_OR_CORRUPT = "wrong_password_or_corrupt"
    SERIALIZATION_FAILURE = "serialization_failure"
    KEY_DERIVATION_FAILURE = "key_derivation_failure"
    IO_ERROR = "io_error"


class SaveStatus(enum.Enum):
    OK = "ok"
    IO_ERROR = "io_error"
    SERIALIZATION_FAILURE = "serialization_failure"
    KEY_DERIVATION_FAILURE = "key_derivation_failure"


@dataclass
class LoadResult:
    status: LoadStatus
    entries: List[PasswordEntry] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.status is LoadStatus.UNLOCKED


@dataclass
class SaveResult:
    status: SaveStatus
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.status is SaveStatus.OK


class Vault:
    """Owns the in-memory password entries and their encrypted persistence."""

    def __init__(self, codec: Optional[EnvelopeCodec] = None):
        self.codec = codec or EnvelopeCodec()
        self._entries: List[PasswordEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PasswordEntry]:
        return iter(list(self._entries))

    # --- CRUD ---

    def get_entries(self) -> List[PasswordEntry]:
        """Get a snapshot of all password entries, in insertion order."""
        return self._entries.copy()

    def add(self, entry: PasswordEntry) -> None:
        """
        Append an entry.

        Raises:
            SerializationFailure: If the id is not an int or a text field is not a str
            DuplicateEntryError: If an entry with the same id exists; edit that
                entry through find_mutable_by_id() instead
        """
        entry.validate()
        if self.find_mutable_by_id(entry.id) is not None:
            raise DuplicateEntryError(f"Entry {entry.id} already exists")
        self._entries.append(entry)

    def create_entry(self, title: str, username: str, password: str,
                     url: str = "", notes: str = "") -> PasswordEntry:
        """Build an entry with a fresh unique id and append it."""
        entry = PasswordEntry(
            id=self._next_id(),
            title=title,
            username=username,
            password=password,
            url=url,
            notes=notes,
        )
        entry.validate()
        self._entries.append(entry)
        return entry

    def delete(self, entry_id: int) -> bool:
        """
        Delete an entry by id.

        Returns:
            True if an entry was removed, False if no entry had that id
        """
        for i, entry in enumerate(self._entries):
            if entry.id == entry_id:
                del self._entries[i]
                return True
        return False

    def find_mutable_by_id(self, entry_id: int) -> Optional[PasswordEntry]:
        """Get the live entry for in-place editing, or None."""
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def clear(self) -> None:
        """Overwrite and drop every entry. Used when locking."""
        for entry in self._entries:
            entry.wipe()
        self._entries.clear()

    def _next_id(self) -> int:
        # Millisecond timestamp, bumped past any id already in use.
        candidate = int(time.time() * 1000)
        taken = {e.id for e in self._entries}
        while candidate in taken:
            candidate += 1
        return candidate

    # --- Serialization ---

    def serialize(self) -> bytes:
        """
        Encode all entries as canonical UTF-8 JSON.

        Raises:
            SerializationFailure: If an entry was edited in place to hold a value
                that deserialize() would reject
        """
        seen = set()
        for entry in self._entries:
            entry.validate()
            if entry.id in seen:
                raise SerializationFailure(f"Duplicate entry id {entry.id}")
            seen.add(entry.id)
        data = {
            'entries': [e.to_dict() for e in self._entries],
            'metadata': {
                'version': config.STORAGE_FORMAT_VERSION,
            }
        }
        return json.dumps(data, indent=config.JSON_INDENT).encode('utf-8')

    @staticmethod
    def deserialize(data: bytes) -> List[PasswordEntry]:
        """
        Decode bytes produced by serialize().

        Raises:
            SerializationFailure: If the bytes are not a valid entry list
        """
        try:
            document = json.loads(bytes(data).decode('utf-8'))
        except (UnicodeDecodeError, ValueError) as e:
            raise SerializationFailure(f"Vault data is not valid JSON: {e}") from e

        if not isinstance(document, dict) or 'entries' not in document or 'metadata' not in document:
            raise SerializationFailure("Vault data is missing 'entries' or 'metadata'")
        metadata = document['metadata']
        version = metadata.get('version') if isinstance(metadata, dict) else None
        if isinstance(version, bool) or version != config.STORAGE_FORMAT_VERSION:
            raise SerializationFailure(f"Unsupported vault format version: {version!r}")
        if not isinstance(document['entries'], list):
            raise SerializationFailure("'entries' must be a list")

        entries = [PasswordEntry.from_dict(e) for e in document['entries']]
        seen = set()
        for entry in entries:
            if entry.id in seen:
                raise SerializationFailure(f"Duplicate entry id {entry.id}")
            seen.add(entry.id)
        return entries

    # --- Persistence ---

    def save(self, filepath: PathLike, master_password: Password) -> SaveResult:
        """
        Encrypt the vault and write it to filepath.

        Raises:
            InitializationFailure: If the crypto subsystem cannot be initialized
        """
        crypto.ensure_initialized()

        try:
            plaintext = bytearray(self.serialize())
        except SerializationFailure as e:
            logger.error(f"Save: Vault entries cannot be serialized: {e}")
            return SaveResult(SaveStatus.SERIALIZATION_FAILURE, error=e)

        try:
            envelope = self.codec.encode(plaintext, master_password)
        except KeyDerivationFailure as e:
            logger.error(f"Save: Key derivation failed for {filepath}: {e}")
            return SaveResult(SaveStatus.KEY_DERIVATION_FAILURE, error=e)
        finally:
            crypto.CryptoManager.clear_bytes(plaintext)

        try:
            atomic_write(filepath, envelope)
        except OSError as e:
            logger.error(f"Error saving vault file {filepath}: {e}", exc_info=True)
            return SaveResult(SaveStatus.IO_ERROR, error=e)

        if not set_owner_only_permissions(filepath):
            logger.warning(f"Failed to set secure file permissions for vault: {filepath}.")

        logger.info(f"Saved {len(self._entries)} entries to {filepath}")
        return SaveResult(SaveStatus.OK)

    def load(self, filepath: PathLike, master_password: Password) -> LoadResult:
        """
        Read, decrypt and parse the vault at filepath.

        The in-memory entries are replaced only on success; on any failure the
        previous contents are left as they were.

        Raises:
            InitializationFailure: If the crypto subsystem cannot be initialized
        """
        crypto.ensure_initialized()

        try:
            with open(filepath, 'rb') as f:
                envelope = f.read()
        except FileNotFoundError as e:
            logger.info(f"Vault file {filepath} not found. A new one will be created on save.")
            return LoadResult(LoadStatus.NOT_FOUND, error=e)
        except OSError as e:
            logger.error(f"Error reading vault file {filepath}: {e}", exc_info=True)
            return LoadResult(LoadStatus.IO_ERROR, error=e)

        try:
            plaintext = bytearray(self.codec.decode(envelope, master_password))
        except KeyDerivationFailure as e:
            logger.error(f"Load: Key derivation failed for {filepath}: {e}")
            return LoadResult(LoadStatus.KEY_DERIVATION_FAILURE, error=e)
        except DecodeFailure as e:
            logger.warning(f"Load: Failed to decrypt {filepath} (wrong password or corrupt file).")
            return LoadResult(LoadStatus.WRONG_PASSWORD_OR_CORRUPT, error=e)

        try:
            entries = self.deserialize(plaintext)
        except SerializationFailure as e:
            logger.error(f"Load: Decrypted vault data is invalid: {e}")
            return LoadResult(LoadStatus.SERIALIZATION_FAILURE, error=e)
        finally:
            crypto.CryptoManager.clear_bytes(plaintext)

        self.clear()
        self._entries = entries
        logger.info(f"Loaded {len(entries)} entries from {filepath}")
        return LoadResult(LoadStatus.UNLOCKED, entries=self.get_entries())


def vault_exists(filepath: PathLike) -> bool:
    """Check whether a vault file is present at filepath."""
    return os.path.isfile(filepath)
