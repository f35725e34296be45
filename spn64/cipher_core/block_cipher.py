"""
Block Cipher Implementation

This module provides the round engine of the 64-bit SPN block cipher and
the BlockCodec that ties a session's key and substitution tables together.

Each encryption round mixes in the key, substitutes every byte through the
table dedicated to its position, and rotates the whole block one bit to
the left. Decryption runs the exact inverse of each step in reverse order.
"""

import logging
import random
from typing import Optional, Union

from ..key_schedule.xor_fold import KEY_SIZE, derive_key
from ..sbox_gen.table_factory import TableSet, generate_tables

logger = logging.getLogger(__name__)

# Block size in bytes (64 bits)
BLOCK_SIZE = 8

# Number of rounds in each direction
NUM_ROUNDS = 16


def _check_block(block: bytes, name: str) -> bytearray:
    if len(block) != BLOCK_SIZE:
        raise ValueError(f"{name} must be exactly {BLOCK_SIZE} bytes, got {len(block)}")
    return bytearray(block)


def _check_key(key: bytes) -> None:
    if not isinstance(key, (bytes, bytearray, memoryview)):
        raise ValueError(f"Key must be bytes, got {type(key).__name__}")
    if len(key) != KEY_SIZE:
        raise ValueError(f"Key must be exactly {KEY_SIZE} bytes, got {len(key)}")


def mix_key(state: bytearray, key: bytes) -> None:
    """
    XOR every byte of the state with the key byte at the same position.
    """
    for p in range(BLOCK_SIZE):
        state[p] ^= key[p]


def substitute_bytes(state: bytearray, tables: TableSet, inverse: bool = False) -> None:
    """
    Replace each byte with the entry of its position's substitution table.

    Args:
        state: The current state, modified in place
        tables: The session's table set
        inverse: Whether to use the decryption tables
    """
    for p in range(BLOCK_SIZE):
        pair = tables[p]
        table = pair.decrypt if inverse else pair.encrypt
        state[p] = table[state[p]]


def rotate_block_left(state: bytearray) -> None:
    """
    Rotate the whole block left by one bit, byte 0 being most significant.

    The most significant bit of each byte moves into the least significant
    bit of the byte before it; byte 0's wraps around into byte 7.
    """
    carry = [(b & 0x80) >> 7 for b in state]
    for p in range(BLOCK_SIZE):
        state[p] = (state[p] << 1) & 0xFF
    for p in range(BLOCK_SIZE - 1):
        state[p] |= carry[p + 1]
    state[BLOCK_SIZE - 1] |= carry[0]


def rotate_block_right(state: bytearray) -> None:
    """
    Rotate the whole block right by one bit, undoing rotate_block_left.
    """
    carry = [(b & 0x01) << 7 for b in state]
    for p in range(BLOCK_SIZE):
        state[p] >>= 1
    state[0] |= carry[BLOCK_SIZE - 1]
    for p in range(1, BLOCK_SIZE):
        state[p] |= carry[p - 1]


def encrypt_block(plaintext: bytes, tables: TableSet, key: bytes) -> bytes:
    """
    Encrypt a single 8-byte block.

    Args:
        plaintext: The plaintext block to encrypt
        tables: The session's substitution tables
        key: The 8-byte key

    Returns:
        The encrypted ciphertext block
    """
    state = _check_block(plaintext, "Plaintext")
    _check_key(key)

    for _ in range(NUM_ROUNDS):
        mix_key(state, key)
        substitute_bytes(state, tables)
        rotate_block_left(state)

    return bytes(state)


def decrypt_block(ciphertext: bytes, tables: TableSet, key: bytes) -> bytes:
    """
    Decrypt a single 8-byte block.

    Args:
        ciphertext: The ciphertext block to decrypt
        tables: The same substitution tables used for encryption
        key: The same 8-byte key used for encryption

    Returns:
        The decrypted plaintext block
    """
    state = _check_block(ciphertext, "Ciphertext")
    _check_key(key)

    for _ in range(NUM_ROUNDS):
        rotate_block_right(state)
        substitute_bytes(state, tables, inverse=True)
        mix_key(state, key)

    return bytes(state)


class BlockCodec:
    """
    Holds the key and substitution tables of a session and moves short
    messages in and out of single cipher blocks.
    """

    def __init__(self, key: bytes, tables: TableSet):
        _check_key(key)
        if not isinstance(tables, TableSet):
            raise ValueError(f"Tables must be a TableSet, got {type(tables).__name__}")
        self.key = bytes(key)
        self.tables = tables

    @classmethod
    def from_passphrase(cls,
                        passphrase: Union[str, bytes],
                        rng: Optional[random.Random] = None) -> 'BlockCodec':
        """
        Derive the key from a passphrase and generate fresh tables.

        Args:
            passphrase: The passphrase to fold into the key
            rng: Optional random source for table generation
        """
        codec = cls(derive_key(passphrase), generate_tables(rng))
        logger.debug("Created block codec session from passphrase")
        return codec

    @staticmethod
    def load_block(message: Union[str, bytes]) -> bytes:
        """
        Load a message of at most one block, zero-padding it to 8 bytes.

        Raises:
            ValueError: If the message is longer than one block
        """
        if isinstance(message, str):
            message = message.encode('utf-8')
        if len(message) > BLOCK_SIZE:
            raise ValueError(
                f"Message must be at most {BLOCK_SIZE} bytes, got {len(message)}; "
                f"multi-block messages are not supported"
            )
        return bytes(message).ljust(BLOCK_SIZE, b'\x00')

    @staticmethod
    def unload_block(block: bytes) -> bytes:
        """Strip the zero padding added by load_block."""
        return bytes(block).rstrip(b'\x00')

    def encrypt(self, message: Union[str, bytes]) -> bytes:
        return encrypt_block(self.load_block(message), self.tables, self.key)

    def decrypt(self, block: bytes) -> bytes:
        return decrypt_block(block, self.tables, self.key)


def test_block_cipher():
    """
    Self-check of the block cipher.
    """
    codec = BlockCodec.from_passphrase("testkey", random.Random(0))
    plaintext = codec.load_block("plain64!")

    ciphertext = codec.encrypt(plaintext)
    assert ciphertext != plaintext
    assert codec.decrypt(ciphertext) == plaintext

    # Flip a single ciphertext bit and check the damage spreads
    tampered = bytearray(ciphertext)
    tampered[5] ^= 0x40
    recovered = codec.decrypt(bytes(tampered))
    changed = sum(1 for a, b in zip(recovered, plaintext) if a != b)
    print(f"Bytes changed after a one-bit flip: {changed} of {BLOCK_SIZE}")
    assert changed > 1, "Round function does not diffuse"

    print("Block cipher test passed!")


if __name__ == "__main__":
    test_block_cipher()
