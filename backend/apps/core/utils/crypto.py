"""
Encryption utilities for sensitive data at rest (bank account numbers).

AES-256-GCM, stored as base64(IV + ciphertext + tag).
"""

import hashlib
import base64
import os
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from django.conf import settings


class EncryptionError(Exception):
    """Custom exception for encryption errors"""
    pass


# Constants for AES-256-GCM
IV_LENGTH = 12  # 96 bits - recommended for GCM
TAG_LENGTH = 16  # 128 bits - authentication tag
KEY_LENGTH = 32  # 256 bits for AES-256


def get_key() -> bytes:
    """
    Ensure the key is 32 bytes for AES-256.
    If the key is not exactly 32 bytes, hash it to create a valid key.
    """
    key = settings.ENCRYPTION_KEY.encode()
    if len(key) != KEY_LENGTH:
        return hashlib.sha256(key).digest()
    return key


def encrypt(text: str) -> str:
    """
    Encrypt a string using AES-256-GCM.

    Args:
        text: The plain text to encrypt

    Returns:
        Base64 encoded IV + ciphertext + tag

    Raises:
        EncryptionError: If input is invalid
    """
    if not isinstance(text, str) or not text:
        raise EncryptionError('Cannot encrypt empty or non-string value')

    iv = os.urandom(IV_LENGTH)
    ciphertext = AESGCM(get_key()).encrypt(iv, text.encode('utf-8'), None)
    return base64.b64encode(iv + ciphertext).decode('ascii')


def decrypt(text: str) -> str:
    """
    Decrypt a string produced by encrypt().

    Raises:
        EncryptionError: If the format is invalid or the integrity check fails
    """
    if not isinstance(text, str) or not text:
        raise EncryptionError('Cannot decrypt empty or non-string value')

    try:
        encrypted_data = base64.b64decode(text, validate=True)
    except (ValueError, TypeError):
        raise EncryptionError('Invalid encrypted text format: not valid base64')

    # IV (12) + at least 1 byte ciphertext + tag (16)
    if len(encrypted_data) < IV_LENGTH + 1 + TAG_LENGTH:
        raise EncryptionError('Invalid encrypted text format: data too short')

    iv = encrypted_data[:IV_LENGTH]
    ciphertext = encrypted_data[IV_LENGTH:]

    try:
        return AESGCM(get_key()).decrypt(iv, ciphertext, None).decode('utf-8')
    except InvalidTag:
        raise EncryptionError('Decryption failed: data integrity check failed (tampered or corrupted)')


def hash_text(text: str) -> str:
    """SHA-256 hex digest, used for one-way token storage."""
    if not isinstance(text, str):
        raise EncryptionError('Input must be a string')
    return hashlib.sha256(text.encode()).hexdigest()


def mask(value: str, visible: int = 4) -> str:
    """Mask all but the last `visible` characters: 'XXXXXX1234'."""
    if not value:
        return ''
    if len(value) <= visible:
        return value
    return 'X' * (len(value) - visible) + value[-visible:]
