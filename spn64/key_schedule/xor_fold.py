"""
XOR-Folding Key Derivation

This module turns an arbitrary-length passphrase into the fixed 64-bit key
used by every round of the block cipher. The key is produced by folding
the passphrase bytes onto an 8-byte accumulator with XOR.
"""

import secrets
from typing import Optional, Tuple, Union

import argon2

# Size of the cipher key in bytes
KEY_SIZE = 8

# Default parameters for the Argon2id-stretched variant
KDF_DEFAULT_PARAMS = {
    'time_cost': 4,       # Number of iterations
    'memory_cost': 65536, # 64 MB
    'parallelism': 4,     # Number of threads
    'salt_len': 16        # Salt size in bytes
}


def _to_bytes(passphrase: Union[str, bytes, bytearray]) -> bytes:
    if isinstance(passphrase, str):
        return passphrase.encode('utf-8')
    return bytes(passphrase)


def derive_key(passphrase: Union[str, bytes, bytearray]) -> bytes:
    """
    Derive the 8-byte cipher key from a passphrase by XOR folding.

    Byte i of the passphrase is XORed into key position i mod 8. The
    empty passphrase yields the all-zero key.

    Args:
        passphrase: The passphrase (str is encoded as UTF-8)

    Returns:
        The derived key as bytes
    """
    key = bytearray(KEY_SIZE)
    for i, value in enumerate(_to_bytes(passphrase)):
        key[i % KEY_SIZE] ^= value
    return bytes(key)


def generate_key(key_size: int = KEY_SIZE) -> bytes:
    """
    Generate a random key.

    Args:
        key_size: Size of the key in bytes (default: 8)

    Returns:
        A random key as bytes
    """
    return secrets.token_bytes(key_size)


def derive_key_from_password(password: Union[str, bytes],
                             salt: Optional[bytes] = None,
                             time_cost: int = KDF_DEFAULT_PARAMS['time_cost'],
                             memory_cost: int = KDF_DEFAULT_PARAMS['memory_cost'],
                             parallelism: int = KDF_DEFAULT_PARAMS['parallelism']) -> Tuple[bytes, bytes]:
    """
    Derive a stretched 8-byte cipher key from a password using Argon2id.

    Unlike derive_key, the result depends on a salt, so the salt must be
    kept alongside anything encrypted under the key.

    Args:
        password: The password to derive the key from
        salt: Optional salt (will be generated if not provided)
        time_cost: Number of iterations
        memory_cost: Memory usage in KiB
        parallelism: Degree of parallelism

    Returns:
        A tuple of (key, salt)
    """
    if salt is None:
        salt = secrets.token_bytes(KDF_DEFAULT_PARAMS['salt_len'])

    key = argon2.low_level.hash_secret_raw(
        secret=_to_bytes(password),
        salt=salt,
        time_cost=time_cost,
        memory_cost=memory_cost,
        parallelism=parallelism,
        hash_len=KEY_SIZE,
        type=argon2.low_level.Type.ID  # Argon2id variant
    )

    return key, salt


def test_key_derivation():
    """
    Self-check of the key derivation.
    """
    key = derive_key("testkey")
    assert key == b"testkey\x00", f"Unexpected key: {key.hex()}"
    assert derive_key("") == bytes(KEY_SIZE)

    # Folding past the first block XORs back onto the start
    assert derive_key(b"\x01" * 9) == b"\x00" + b"\x01" * 7

    assert derive_key("passphrase") != derive_key("passphrasf")

    print("Key derivation test passed!")


if __name__ == "__main__":
    test_key_derivation()
