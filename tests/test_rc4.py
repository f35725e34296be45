import pytest

from spn64.stream_cipher import RC4, rc4_crypt


@pytest.mark.parametrize("key, plaintext, expected", [
    (b"Key", b"Plaintext", "bbf316e8d940af0ad3"),
    (b"Wiki", b"pedia", "1021bf0420"),
    (b"Secret", b"Attack at dawn", "45a01f645fc35b383552544b9bf5"),
])
def test_known_vectors(key, plaintext, expected):
    assert rc4_crypt(plaintext, key).hex() == expected


def test_decrypt_is_encrypt():
    message = b"park the truck in the little garage"
    ciphertext = rc4_crypt(message, "cardiB")
    assert ciphertext != message
    assert rc4_crypt(ciphertext, "cardiB") == message


def test_wrong_key_does_not_decrypt():
    ciphertext = rc4_crypt(b"WAP", "cardiB")
    assert rc4_crypt(ciphertext, "fardiC") != b"WAP"


def test_keystream_continues_across_calls():
    whole = RC4(b"Key").crypt(b"Plaintext")

    cipher = RC4(b"Key")
    pieces = cipher.crypt(b"Plain") + cipher.crypt(b"text")
    assert pieces == whole


def test_keystream_generator_matches_next_byte():
    stream = RC4(b"Wiki").keystream()
    first = [next(stream) for _ in range(5)]

    cipher = RC4(b"Wiki")
    assert first == [cipher.next_byte() for _ in range(5)]


def test_keystream_reuse_leaks_plaintext_xor():
    # Two messages under one key: ciphertext XOR equals plaintext XOR
    c1 = rc4_crypt(b"ABC", "password")
    c2 = rc4_crypt(b"XYZ", "password")
    assert bytes(a ^ b for a, b in zip(c1, c2)) == bytes(a ^ b for a, b in zip(b"ABC", b"XYZ"))


def test_empty_key_rejected():
    with pytest.raises(ValueError):
        RC4(b"")
