"""
AES-256-CBC encryption for partner integration settings.

Values are stored as "<iv hex>:<ciphertext hex>" with PKCS7 padding, one
fresh IV per value.
"""
import math
import os
from typing import Any, Dict, Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from homequote.core.config import settings
from homequote.utils.logging import get_logger

logger = get_logger(__name__)

IV_SIZE = 16


class EncryptionConfigError(RuntimeError):
    """No usable encryption key is configured"""


def _key(key_hex: Optional[str] = None) -> bytes:
    key_hex = key_hex or settings.encryption.key
    if not key_hex:
        raise EncryptionConfigError("encryption.key is not configured")
    return bytes.fromhex(key_hex)


def encrypt(text: str, key_hex: Optional[str] = None) -> str:
    """Encrypt a string; empty input gives an empty string"""
    if not text:
        return ""
    iv = os.urandom(IV_SIZE)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    data = padder.update(text.encode("utf-8")) + padder.finalize()
    encryptor = Cipher(algorithms.AES(_key(key_hex)), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(data) + encryptor.finalize()
    return f"{iv.hex()}:{ciphertext.hex()}"


def decrypt(value: str, key_hex: Optional[str] = None) -> str:
    """Decrypt an "iv:ciphertext" value; malformed or undecryptable input gives an empty string"""
    if not value:
        return ""
    key = _key(key_hex)
    try:
        iv_hex, cipher_hex = value.split(":", 1)
        if not iv_hex or not cipher_hex:
            raise ValueError("Invalid encrypted text format")
        decryptor = Cipher(algorithms.AES(key), modes.CBC(bytes.fromhex(iv_hex))).decryptor()
        data = decryptor.update(bytes.fromhex(cipher_hex)) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        return (unpadder.update(data) + unpadder.finalize()).decode("utf-8")
    except ValueError as e:
        # Wrong key, bad padding, bad hex and bad UTF-8 all land here
        logger.warning(f"[yellow]Decryption failed:[/yellow] {e}")
        return ""


def _to_text(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value
    return None


def _from_text(text: str) -> Any:
    if text in ("true", "false"):
        return text == "true"
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return text
    return number if math.isfinite(number) else text


def encrypt_object(values: Optional[Dict[str, Any]], key_hex: Optional[str] = None) -> Dict[str, str]:
    """Encrypt the string, number and boolean values of a flat settings object"""
    if not isinstance(values, dict):
        return {}
    encrypted = {}
    for name, value in values.items():
        text = _to_text(value)
        if text is not None:
            encrypted[name] = encrypt(text, key_hex)
    return encrypted


def decrypt_object(values: Optional[Dict[str, Any]], key_hex: Optional[str] = None) -> Dict[str, Any]:
    """Decrypt a settings object, restoring booleans and numbers"""
    if not isinstance(values, dict):
        return {}
    decrypted = {}
    for name, value in values.items():
        if not value or not isinstance(value, str):
            continue
        decrypted[name] = _from_text(decrypt(value, key_hex))
    return decrypted
