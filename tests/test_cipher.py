from tools.knowledge_base import cipher
from tools.knowledge_base.cipher import NONCE_SIZE

KEY = b"secret-key"


def test_round_trip():
    plaintext = "what is the capital of france|||Paris\n".encode("utf-8")
    assert cipher.decrypt(cipher.encrypt(plaintext, KEY), KEY) == plaintext


def test_round_trip_longer_than_key_and_nonce():
    plaintext = bytes(range(256)) * 3
    assert cipher.decrypt(cipher.encrypt(plaintext, KEY), KEY) == plaintext


def test_output_is_nonce_plus_body():
    plaintext = b"hello world"
    encrypted = cipher.encrypt(plaintext, KEY)

    assert len(encrypted) == NONCE_SIZE + len(plaintext)
    nonce = encrypted[:NONCE_SIZE]
    expected = bytes(
        b ^ KEY[i % len(KEY)] ^ nonce[i % NONCE_SIZE]
        for i, b in enumerate(plaintext)
    )
    assert encrypted[NONCE_SIZE:] == expected


def test_fresh_nonce_per_call():
    plaintext = b"same input every time"
    first = cipher.encrypt(plaintext, KEY)
    second = cipher.encrypt(plaintext, KEY)

    assert first[:NONCE_SIZE] != second[:NONCE_SIZE]
    assert first != second


def test_empty_inputs_give_empty_output():
    assert cipher.encrypt(b"", KEY) == b""
    assert cipher.encrypt(b"data", b"") == b""
    assert cipher.decrypt(b"x" * 40, b"") == b""


def test_decrypt_needs_more_than_a_nonce():
    assert cipher.decrypt(b"", KEY) == b""
    assert cipher.decrypt(b"n" * NONCE_SIZE, KEY) == b""
    assert len(cipher.decrypt(b"n" * (NONCE_SIZE + 1), KEY)) == 1


def test_wrong_key_does_not_recover_plaintext():
    plaintext = b"top secret answer"
    encrypted = cipher.encrypt(plaintext, KEY)
    assert cipher.decrypt(encrypted, b"another-key") != plaintext


def test_legacy_decrypt_is_plain_xor():
    plaintext = b"hi|||hello\n"
    legacy = bytes(b ^ KEY[i % len(KEY)] for i, b in enumerate(plaintext))

    assert cipher.legacy_decrypt(legacy, KEY) == plaintext
    assert cipher.legacy_decrypt(legacy, b"") == b""
