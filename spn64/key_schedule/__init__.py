"""
Key Schedule Package

This package implements the key derivation that folds a passphrase into
the single 64-bit key shared by all rounds of the block cipher.
"""

from .xor_fold import derive_key, generate_key, derive_key_from_password, KEY_SIZE, KDF_DEFAULT_PARAMS

__all__ = ['derive_key', 'generate_key', 'derive_key_from_password', 'KEY_SIZE', 'KDF_DEFAULT_PARAMS']
