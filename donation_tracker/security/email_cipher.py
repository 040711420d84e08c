"""
Reversible encryption for donor email addresses.

AES-256-CBC with PKCS7 padding. The 256-bit key is derived
from EMAIL_ENCRYPTION_SECRET with scrypt and a fixed
application salt; every call draws a fresh 16-byte IV.

Token format: hex(iv) + ":" + hex(ciphertext)

Encrypting the same address twice yields different tokens,
both of which decrypt to the original address.
"""

import logging
import os
from functools import lru_cache

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from donation_tracker.config import get_settings

logger = logging.getLogger(__name__)

KEY_LENGTH = 32
IV_LENGTH = 16
BLOCK_SIZE_BITS = 128

# scrypt cost parameters (N=2^14, r=8, p=1)
SCRYPT_N = 2 ** 14
SCRYPT_R = 8
SCRYPT_P = 1


@lru_cache(maxsize=4)
def derive_key(secret: str, salt: str) -> bytes:
    """
    Derive the AES key from a passphrase.

    scrypt is slow, so the result is cached per
    (secret, salt) pair.
    """
    kdf = Scrypt(
        salt=salt.encode("utf-8"),
        length=KEY_LENGTH,
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
    )
    return kdf.derive(secret.encode("utf-8"))


def _current_key() -> bytes:
    settings = get_settings()
    return derive_key(settings.EMAIL_ENCRYPTION_SECRET, settings.EMAIL_KDF_SALT)


def encrypt_email(email: str | None, key: bytes | None = None) -> str | None:
    """Encrypt an email address. Returns None for empty input."""
    if not email:
        return None

    key = key or _current_key()
    iv = os.urandom(IV_LENGTH)

    padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
    padded = padder.update(email.encode("utf-8")) + padder.finalize()

    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()

    return f"{iv.hex()}:{ciphertext.hex()}"


def decrypt_email(token: str | None, key: bytes | None = None) -> str | None:
    """
    Decrypt a token produced by encrypt_email.

    Any malformed input or decryption failure returns None.
    """
    if not token:
        return None

    iv_hex, sep, ciphertext_hex = token.partition(":")
    if not sep:
        return None

    try:
        iv = bytes.fromhex(iv_hex)
        ciphertext = bytes.fromhex(ciphertext_hex)
        if len(iv) != IV_LENGTH or not ciphertext:
            return None

        key = key or _current_key()
        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()

        unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
        plaintext = unpadder.update(padded) + unpadder.finalize()
        return plaintext.decode("utf-8")
    except ValueError as e:
        # Covers bad hex, bad block length, bad padding and bad UTF-8
        logger.warning("Could not decrypt donor email: %s", type(e).__name__)
        return None
