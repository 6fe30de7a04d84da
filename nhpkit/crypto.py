"""Symmetric encryption, hashing and RSA key helpers."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

_AES_KEY = bytes([55, 74, 102, 112, 49, 46, 35, 41, 33, 105, 106, 73, 50, 49, 50, 51])
_AES_IV = bytes([56, 76, 46, 40, 33, 106, 40, 106, 64, 106, 73, 46, 64, 35, 106, 46])
_BLOCK_SIZE = 16


def _pkcs5_pad(data: bytes, block_size: int) -> bytes:
    padding = block_size - len(data) % block_size
    return data + bytes([padding]) * padding


def _pkcs5_unpad(data: bytes) -> bytes:
    if not data:
        raise ValueError("slice bounds out of range")
    padding = data[-1]
    if len(data) < padding:
        raise ValueError("slice bounds out of range")
    return data[: len(data) - padding]


def _cipher() -> Cipher:
    return Cipher(algorithms.AES(_AES_KEY), modes.CBC(_AES_IV))


def aes_encrypt(text: str) -> str:
    """Encrypt ``text`` with AES-CBC and PKCS#5 padding; return base64."""
    padded = _pkcs5_pad(text.encode("utf-8"), _BLOCK_SIZE)
    encryptor = _cipher().encryptor()
    encrypted = encryptor.update(padded) + encryptor.finalize()
    return base64.b64encode(encrypted).decode("ascii")


def aes_decrypt(text: str) -> str:
    """Decrypt a base64 string produced by :func:`aes_encrypt`.

    Raises ``ValueError`` for invalid base64, a length that is not a whole
    number of blocks, or padding longer than the data.
    """
    try:
        encrypted = base64.b64decode(text, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"invalid base64 input: {exc}") from exc
    if len(encrypted) % _BLOCK_SIZE != 0:
        raise ValueError("input not full blocks")
    decryptor = _cipher().decryptor()
    decrypted = decryptor.update(encrypted) + decryptor.finalize()
    return _pkcs5_unpad(decrypted).decode("utf-8", errors="replace")


def hmac_sha256(key: str, value: str) -> bytes:
    """Return the HMAC-SHA256 digest of ``value`` under ``key``."""
    return hmac.new(key.encode("utf-8"), value.encode("utf-8"), hashlib.sha256).digest()


def md5(value: str) -> str:
    """Return the hex MD5 digest of ``value``."""
    return hashlib.md5(value.encode("utf-8")).hexdigest()


def base64_encode(value: bytes) -> str:
    """Return the standard base64 encoding of ``value``."""
    return base64.b64encode(value).decode("ascii")


def generate_rsa_key(bits: int) -> tuple[str, str]:
    """Generate an RSA key pair as base64 PKCS#1 DER (private, public).

    Returns two empty strings when the key cannot be generated.
    """
    try:
        private_key = rsa.generate_private_key(public_exponent=65537, key_size=bits)
    except (ValueError, TypeError):
        return "", ""
    private_der = private_key.private_bytes(
        serialization.Encoding.DER,
        serialization.PrivateFormat.TraditionalOpenSSL,
        serialization.NoEncryption(),
    )
    public_der = private_key.public_key().public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.PKCS1,
    )
    return base64_encode(private_der), base64_encode(public_der)