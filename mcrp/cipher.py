"""AES-256 in 8-bit cipher feedback (CFB-8) mode, backed by PyCryptodomex.

CFB-8 is a self-synchronizing stream mode: every input byte produces exactly
one output byte, so buffers of any length are transformed without padding and
the ciphertext has the same length as the plaintext.

WARNING: the IV is the first 16 bytes of the key itself rather than an
independent random value, and no authentication tag is produced. This is
intentionally weak and kept only so archives stay readable by existing tools.
Do not reuse this construction elsewhere. A wrong key or a damaged ciphertext
decrypts to garbage without any error.
"""

from __future__ import annotations

from typing import Union

from Cryptodome.Cipher import AES

from .constants import KEY_SIZE, IV_SIZE, CFB_SEGMENT_BITS
from .errors import CipherKeyLengthError


Buffer = Union[bytearray, memoryview]


def check_key(key: bytes) -> bytes:
    """Return ``key`` unchanged if it is usable as both AES-256 key and IV source."""
    if len(key) != KEY_SIZE:
        raise CipherKeyLengthError(f"Key must be exactly {KEY_SIZE} bytes, got {len(key)}")
    return key


def _new_cipher(key: bytes):
    check_key(key)
    # IV derived from the key prefix: required for format compatibility only.
    return AES.new(key, AES.MODE_CFB, iv=key[:IV_SIZE], segment_size=CFB_SEGMENT_BITS)


def encrypt_in_place(buf: Buffer, key: bytes) -> Buffer:
    """Encrypt ``buf`` in place with ``key`` and return it."""
    cipher = _new_cipher(key)
    if len(buf):
        cipher.encrypt(buf, output=buf)
    return buf


def decrypt_in_place(buf: Buffer, key: bytes) -> Buffer:
    """Decrypt ``buf`` in place with ``key`` and return it."""
    cipher = _new_cipher(key)
    if len(buf):
        cipher.decrypt(buf, output=buf)
    return buf


__all__ = [
    "check_key",
    "encrypt_in_place",
    "decrypt_in_place",
]
