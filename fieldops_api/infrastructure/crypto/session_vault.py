"""Session vault - AES-256-GCM encryption of automation session state at rest."""
import base64
import binascii
import hashlib
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ...domain.errors import SessionVaultError

IV_LENGTH_BYTES = 12
AUTH_TAG_LENGTH_BYTES = 16
SEGMENT_SEPARATOR = "."


def _derive_key(key: str) -> bytes:
    """Hash the passphrase to a 256-bit cipher key."""
    if not key or not key.strip():
        raise SessionVaultError("SCE session encryption key is required")
    return hashlib.sha256(key.encode("utf-8")).digest()


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64decode(segment: str) -> bytes:
    try:
        return base64.b64decode(segment, validate=True)
    except (binascii.Error, ValueError):
        raise SessionVaultError("Invalid encrypted payload")


def encrypt_session(plaintext: str, key: str) -> str:
    """
    Encrypt session state with a fresh random nonce.

    Returns:
        'ivBase64.authTagBase64.cipherBase64'
    """
    aesgcm = AESGCM(_derive_key(key))
    iv = os.urandom(IV_LENGTH_BYTES)
    sealed = aesgcm.encrypt(iv, plaintext.encode("utf-8"), None)
    # cryptography appends the tag to the ciphertext
    ciphertext, auth_tag = sealed[:-AUTH_TAG_LENGTH_BYTES], sealed[-AUTH_TAG_LENGTH_BYTES:]
    return SEGMENT_SEPARATOR.join((_b64encode(iv), _b64encode(auth_tag), _b64encode(ciphertext)))


def decrypt_session(payload: str, key: str) -> str:
    """
    Decrypt a payload produced by encrypt_session.

    Raises:
        SessionVaultError: On a missing key, malformed payload, wrong IV or
            tag length, or failed authentication
    """
    segments = payload.split(SEGMENT_SEPARATOR) if isinstance(payload, str) else []
    if len(segments) != 3 or not all(segments):
        raise SessionVaultError("Invalid encrypted payload format")

    derived_key = _derive_key(key)
    iv = _b64decode(segments[0])
    auth_tag = _b64decode(segments[1])
    ciphertext = _b64decode(segments[2])

    if len(iv) != IV_LENGTH_BYTES or len(auth_tag) != AUTH_TAG_LENGTH_BYTES:
        raise SessionVaultError("Invalid encrypted payload")

    try:
        plaintext = AESGCM(derived_key).decrypt(iv, ciphertext + auth_tag, None)
    except InvalidTag:
        raise SessionVaultError("Encrypted payload failed authentication")
    return plaintext.decode("utf-8")
