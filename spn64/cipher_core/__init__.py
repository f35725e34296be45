"""
Cipher Core Package

This package implements the core of the 64-bit block cipher: the round
engine that encrypts and decrypts single blocks, and the codec that holds
a session's key and tables.
"""

from .block_cipher import (
    BlockCodec, encrypt_block, decrypt_block,
    rotate_block_left, rotate_block_right, BLOCK_SIZE, NUM_ROUNDS,
)

__all__ = [
    'BlockCodec', 'encrypt_block', 'decrypt_block',
    'rotate_block_left', 'rotate_block_right', 'BLOCK_SIZE', 'NUM_ROUNDS',
]
