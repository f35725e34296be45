"""
RC4 Stream Cipher

This module implements the RC4 keystream generator: the key-scheduling
algorithm (KSA) permutes a 256-entry state from the key, and the
pseudo-random generation algorithm (PRGA) emits one keystream byte per
lookup-swap step. Encryption and decryption are the same XOR operation.
"""

from typing import Iterator, Union

STATE_SIZE = 256


class RC4:
    """
    RC4 keystream generator.

    Instances are stateful: every byte drawn advances the keystream, so an
    instance must not be shared between threads.
    """

    def __init__(self, key: Union[str, bytes]):
        """
        Initialize the generator and run the key-scheduling algorithm.

        Args:
            key: The key (str is encoded as UTF-8)
        """
        if isinstance(key, str):
            key = key.encode('utf-8')
        if not key:
            raise ValueError("RC4 key must not be empty")

        self.S = list(range(STATE_SIZE))
        self.i = 0
        self.j = 0

        j = 0
        for i in range(STATE_SIZE):
            j = (j + self.S[i] + key[i % len(key)]) % STATE_SIZE
            self.S[i], self.S[j] = self.S[j], self.S[i]

    def next_byte(self) -> int:
        """Run one PRGA step and return the keystream byte."""
        S = self.S
        self.i = (self.i + 1) % STATE_SIZE
        self.j = (self.j + S[self.i]) % STATE_SIZE
        S[self.i], S[self.j] = S[self.j], S[self.i]
        return S[(S[self.i] + S[self.j]) % STATE_SIZE]

    def keystream(self) -> Iterator[int]:
        while True:
            yield self.next_byte()

    def crypt(self, data: bytes) -> bytes:
        """
        XOR data with the next len(data) keystream bytes.
        """
        return bytes(b ^ self.next_byte() for b in data)


def rc4_crypt(data: bytes, key: Union[str, bytes]) -> bytes:
    """
    Encrypt or decrypt data with a fresh RC4 keystream.

    Args:
        data: Plaintext or ciphertext
        key: The RC4 key

    Returns:
        The ciphertext or plaintext
    """
    return RC4(key).crypt(data)


if __name__ == "__main__":
    message = b"Attack at dawn"
    ciphertext = rc4_crypt(message, b"Secret")
    print(f"Ciphertext: {ciphertext.hex()}")
    assert ciphertext.hex() == "45a01f645fc35b383552544b9bf5"
    assert rc4_crypt(ciphertext, b"Secret") == message
    print("RC4 test passed!")
