"""
Knowledge Base Cipher
Lightweight XOR stream transform used for the knowledge base file

NOT authenticated encryption: tampering is undetectable and the key is
recoverable from known plaintext. It only keeps the file unreadable to
casual inspection.

Layout written by encrypt():
    nonce (16 random bytes) | body
    body[i] = plaintext[i] ^ key[i % len(key)] ^ nonce[i % 16]

Older files were written without a nonce (plain XOR against the key);
legacy_decrypt() reads those.
"""

import os

NONCE_SIZE = 16


def _xor_stream(data: bytes, key: bytes, nonce: bytes = b"") -> bytes:
    key_len = len(key)
    if not nonce:
        return bytes(b ^ key[i % key_len] for i, b in enumerate(data))
    return bytes(
        b ^ key[i % key_len] ^ nonce[i % NONCE_SIZE]
        for i, b in enumerate(data)
    )


def encrypt(plaintext: bytes, key: bytes) -> bytes:
    """
    Encrypt plaintext with a fresh random nonce.

    Args:
        plaintext: Bytes to transform
        key: Secret key bytes

    Returns:
        nonce + transformed bytes, or b"" when plaintext or key is empty
    """
    if not plaintext or not key:
        return b""

    nonce = os.urandom(NONCE_SIZE)
    return nonce + _xor_stream(plaintext, key, nonce)


def decrypt(ciphertext: bytes, key: bytes) -> bytes:
    """
    Reverse encrypt().

    Returns b"" (no data) when the key is empty or the input is too short
    to hold anything past the nonce.
    """
    if not key or len(ciphertext) <= NONCE_SIZE:
        return b""

    nonce = ciphertext[:NONCE_SIZE]
    return _xor_stream(ciphertext[NONCE_SIZE:], key, nonce)


def legacy_decrypt(ciphertext: bytes, key: bytes) -> bytes:
    """Decode the old nonce-less format (single XOR pass against the key)."""
    if not ciphertext or not key:
        return b""
    return _xor_stream(ciphertext, key)
