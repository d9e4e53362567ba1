"""
Core utility functions.
"""

from .crypto import (
    encrypt,
    decrypt,
    hash_text,
    mask,
    EncryptionError,
)

__all__ = [
    'encrypt',
    'decrypt',
    'hash_text',
    'mask',
    'EncryptionError',
]
