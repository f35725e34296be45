import random

import pytest

from spn64.cipher_core import (
    BLOCK_SIZE, NUM_ROUNDS, BlockCodec, decrypt_block, encrypt_block,
    rotate_block_left, rotate_block_right,
)
from spn64.key_schedule import derive_key, generate_key
from spn64.sbox_gen import count_bit_differences, generate_tables, identity_tables

MASK_64 = (1 << 64) - 1


def _rotate_int_left(block: bytes) -> bytes:
    value = int.from_bytes(block, byteorder='big')
    value = ((value << 1) | (value >> 63)) & MASK_64
    return value.to_bytes(BLOCK_SIZE, byteorder='big')


@pytest.fixture
def tables():
    return generate_tables(random.Random(42))


def test_rotate_left_matches_64_bit_rotation():
    rng = random.Random(11)
    for _ in range(50):
        block = bytes(rng.randrange(256) for _ in range(BLOCK_SIZE))
        state = bytearray(block)
        rotate_block_left(state)
        assert bytes(state) == _rotate_int_left(block)


def test_rotate_left_wraps_msb_of_first_byte():
    state = bytearray(b"\x80" + bytes(7))
    rotate_block_left(state)
    assert bytes(state) == bytes(7) + b"\x01"


def test_rotate_right_wraps_lsb_of_last_byte():
    state = bytearray(bytes(7) + b"\x01")
    rotate_block_right(state)
    assert bytes(state) == b"\x80" + bytes(7)


def test_rotate_right_undoes_rotate_left():
    block = bytes([0xd5, 0x6c, 0x00, 0xff, 0x12, 0x34, 0x56, 0x78])
    state = bytearray(block)
    rotate_block_left(state)
    rotate_block_right(state)
    assert bytes(state) == block


def test_rotate_left_full_cycle():
    block = bytes([1, 2, 3, 4, 5, 6, 7, 8])
    state = bytearray(block)
    for i in range(64):
        rotate_block_left(state)
        if i < 63:
            assert bytes(state) != block, f"Cycle closed early after {i + 1} rotations"
    assert bytes(state) == block


def test_round_trip_random_blocks(tables):
    rng = random.Random(5)
    for _ in range(100):
        key = bytes(rng.randrange(256) for _ in range(8))
        block = bytes(rng.randrange(256) for _ in range(BLOCK_SIZE))
        ciphertext = encrypt_block(block, tables, key)
        assert len(ciphertext) == BLOCK_SIZE
        assert decrypt_block(ciphertext, tables, key) == block


def test_round_trip_edge_blocks(tables):
    key = generate_key()
    for block in (bytes(8), b"\xff" * 8, b"\x80" + bytes(7), bytes(7) + b"\x01"):
        assert decrypt_block(encrypt_block(block, tables, key), tables, key) == block


def test_encrypt_changes_block(tables):
    key = derive_key("testkey")
    block = b"plain64!"
    assert encrypt_block(block, tables, key) != block


def test_encrypt_does_not_mutate_input(tables):
    key = derive_key("testkey")
    block = bytearray(b"plain64!")
    encrypt_block(block, tables, key)
    assert block == bytearray(b"plain64!")


def test_identity_tables_scenario():
    key = derive_key("testkey")
    plaintext = bytes([1, 2, 3, 4, 5, 6, 7, 8])
    tables = identity_tables()

    # With no-op substitution the cipher is NUM_ROUNDS of (XOR key, rotate left)
    expected = plaintext
    for _ in range(NUM_ROUNDS):
        expected = _rotate_int_left(bytes(a ^ b for a, b in zip(expected, key)))

    ciphertext = encrypt_block(plaintext, tables, key)
    assert ciphertext == expected
    assert decrypt_block(ciphertext, tables, key) == plaintext


def test_avalanche_on_ciphertext_bit_flip(tables):
    key = derive_key("testkey")
    plaintext = b"plain64!"
    ciphertext = encrypt_block(plaintext, tables, key)

    # Position 0 uses the identity table, so flip bits in the shuffled positions
    for position in range(1, BLOCK_SIZE):
        tampered = bytearray(ciphertext)
        tampered[position] ^= 0x40
        recovered = decrypt_block(bytes(tampered), tables, key)
        changed = sum(1 for a, b in zip(recovered, plaintext) if a != b)
        assert changed > 1, f"Flipping a bit of byte {position} changed only {changed} byte(s)"


def test_avalanche_on_plaintext_bit_flip(tables):
    key = derive_key("testkey")
    plaintext = b"plain64!"
    ciphertext = encrypt_block(plaintext, tables, key)

    flipped = bytearray(plaintext)
    flipped[3] ^= 0x01
    different_bits = count_bit_differences(ciphertext, encrypt_block(bytes(flipped), tables, key))
    assert different_bits > 8, f"Poor avalanche effect: {different_bits} of 64 bits changed"


def test_wrong_key_does_not_decrypt(tables):
    ciphertext = encrypt_block(b"plain64!", tables, derive_key("testkey"))
    assert decrypt_block(ciphertext, tables, derive_key("testkez")) != b"plain64!"


@pytest.mark.parametrize("block", [b"", b"short", b"too long!"])
def test_rejects_wrong_block_length(tables, block):
    key = derive_key("testkey")
    with pytest.raises(ValueError):
        encrypt_block(block, tables, key)
    with pytest.raises(ValueError):
        decrypt_block(block, tables, key)


def test_rejects_wrong_key_length(tables):
    with pytest.raises(ValueError):
        encrypt_block(b"plain64!", tables, b"short")


def test_rejects_str_key(tables):
    with pytest.raises(ValueError):
        encrypt_block(b"plain64!", tables, "8charkey")
    with pytest.raises(ValueError):
        decrypt_block(b"plain64!", tables, "8charkey")


def test_codec_rejects_non_table_set():
    identity = tuple(range(256))
    with pytest.raises(ValueError):
        BlockCodec(derive_key("testkey"), [(identity, identity)] * 8)
    with pytest.raises(ValueError):
        BlockCodec("8charkey", identity_tables())


def test_codec_round_trip():
    codec = BlockCodec.from_passphrase("correct horse", random.Random(9))
    ciphertext = codec.encrypt("hi")
    assert len(ciphertext) == BLOCK_SIZE
    recovered = codec.decrypt(ciphertext)
    assert recovered == b"hi" + bytes(6)
    assert codec.unload_block(recovered) == b"hi"


def test_codec_load_block_pads_short_messages():
    assert BlockCodec.load_block("abc") == b"abc\x00\x00\x00\x00\x00"
    assert BlockCodec.load_block(b"12345678") == b"12345678"


def test_codec_rejects_long_messages():
    with pytest.raises(ValueError):
        BlockCodec.load_block("longer than one block")


def test_codec_shares_tables_across_messages():
    codec = BlockCodec(derive_key("session"), generate_tables(random.Random(1)))
    first = codec.encrypt("one")
    second = codec.encrypt("two")
    assert first != second
    assert codec.unload_block(codec.decrypt(first)) == b"one"
    assert codec.unload_block(codec.decrypt(second)) == b"two"
