"""
Configuration constants for the passvault core.
"""

# Application Metadata
APP_VERSION = "1.0"  # Use: Current version of the package. Type: str. Range: Semantic versioning string (e.g., "1.0.0")
APP_NAME = "passvault"  # Use: Name of the package, used in log output. Type: str. Range: Any valid string.

# Security Settings
# The sizes and Argon2 costs below are part of the on-disk format. Vaults written
# with one set of values cannot be opened with another.
SALT_SIZE = 16  # Use: Size of the Argon2 salt in bytes, stored at the start of every envelope. Type: int. Range: 16 (libsodium crypto_pwhash_SALTBYTES).
KEY_SIZE = 32  # Use: Size of the derived encryption key in bytes. Corresponds to AES-256. Type: int. Range: 32 bytes.
NONCE_SIZE = 12  # Use: Size of the AES-GCM nonce in bytes, stored after the salt. Type: int. Range: 12 bytes (96 bits) is the recommended size for GCM.
TAG_SIZE = 16  # Use: Size of the AES-GCM authentication tag appended to the ciphertext. Type: int. Range: 16 bytes (128 bits).
MIN_ENVELOPE_SIZE = SALT_SIZE + NONCE_SIZE + TAG_SIZE  # Use: Smallest envelope that can hold a (possibly empty) ciphertext. Type: int. Range: Derived value.
ARGON2_TIME_COST = 2  # Use: Argon2id time cost parameter (iterations). Type: int. Range: 2 matches libsodium's OPSLIMIT_INTERACTIVE.
ARGON2_MEMORY_COST = 65536  # Use: Argon2id memory cost in KiB. Type: int. Range: 65536 (64 MB) matches libsodium's MEMLIMIT_INTERACTIVE.
ARGON2_PARALLELISM = 1  # Use: Argon2id parallelism (lanes). Type: int. Range: 1, as used by libsodium's crypto_pwhash.

# Serialization Settings
STORAGE_FORMAT_VERSION = 1  # Use: Version written into the decrypted JSON metadata. Type: int. Range: Positive integer; loads with any other value are rejected.
ENTRY_FIELDS = ("id", "title", "username", "password", "url", "notes")  # Use: Ordered field names of a serialized password entry. Type: tuple[str]. Range: Fixed.
JSON_INDENT = 4  # Use: Indentation of the serialized JSON plaintext. Type: int. Range: 0 or positive integer.

# Password Generator Settings
PASSWORD_GENERATOR_DEFAULT_LENGTH = 16  # Use: Default length for generated passwords. Type: int. Range: PASSWORD_GENERATOR_MIN_LENGTH to PASSWORD_GENERATOR_MAX_LENGTH.
PASSWORD_GENERATOR_MIN_LENGTH = 8  # Use: Minimum allowed length for generated passwords. Type: int. Range: Positive integer.
PASSWORD_GENERATOR_MAX_LENGTH = 128  # Use: Maximum allowed length for generated passwords. Type: int. Range: Positive integer.
PASSWORD_GENERATOR_AMBIGUOUS_CHARS = "0O1lI"  # Use: Characters considered ambiguous and can be excluded from generated passwords. Type: str. Range: Any string of characters.

# File and Directory Names
CONFIG_DIR_NAME = ".passvault"  # Use: Name of the hidden directory within the user's home directory holding the default vault. Type: str. Range: Any valid directory name.
DEFAULT_VAULT_FILE = "vault.enc"  # Use: Default filename for the encrypted password vault. Type: str. Range: Any valid filename.
TEMP_FILE_SUFFIX = ".tmp"  # Use: Suffix of the temporary file written before atomically replacing the vault. Type: str. Range: Any valid filename suffix.

# Logging Settings
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'  # Use: Format string passed to logging.basicConfig by configure_logging. Type: str. Range: Any valid logging format string.
