"""
Random password generation.
"""

import secrets
import string
from typing import Optional, Tuple

from . import config


def build_charset(uppercase: bool = True, lowercase: bool = True, digits: bool = True,
                  symbols: bool = True, exclude_ambiguous: bool = False) -> str:
    """Build the alphabet for the selected character classes."""
    chars = ""
    if uppercase:
        chars += string.ascii_uppercase
    if lowercase:
        chars += string.ascii_lowercase
    if digits:
        chars += string.digits
    if symbols:
        chars += string.punctuation

    if exclude_ambiguous:
        ambiguous = config.PASSWORD_GENERATOR_AMBIGUOUS_CHARS
        chars = ''.join(c for c in chars if c not in ambiguous)
    return chars


def generate_password(length: int = config.PASSWORD_GENERATOR_DEFAULT_LENGTH,
                      uppercase: bool = True, lowercase: bool = True, digits: bool = True,
                      symbols: bool = True, exclude_ambiguous: bool = False) -> Tuple[Optional[str], str]:
    """
    Generate a password by sampling uniformly from the selected classes.

    Returns:
        (password, error_message); password is None when the options are invalid
    """
    if not config.PASSWORD_GENERATOR_MIN_LENGTH <= length <= config.PASSWORD_GENERATOR_MAX_LENGTH:
        return None, (f"Password length must be between {config.PASSWORD_GENERATOR_MIN_LENGTH} "
                      f"and {config.PASSWORD_GENERATOR_MAX_LENGTH}")

    chars = build_charset(uppercase, lowercase, digits, symbols, exclude_ambiguous)
    if not chars:
        return None, "Select at least one character type"

    return ''.join(secrets.choice(chars) for _ in range(length)), ""
