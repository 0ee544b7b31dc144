"""
Stream locator decryption

YLE playout URLs are delivered AES-128/192/256-CBC encrypted and Base64
encoded, with the IV prepended to the ciphertext. The key is the raw UTF-8
secret issued with the API credentials.
"""
import base64
import binascii
import logging

from Crypto.Cipher import AES
from Crypto.Random import get_random_bytes
from Crypto.Util.Padding import pad, unpad

from yletv.exceptions import DecryptionError


logger = logging.getLogger(__name__)

IV_SIZE = AES.block_size
VALID_KEY_SIZES = (16, 24, 32)


def _secret_to_key(secret: str) -> bytes:
    key = secret.encode("utf-8")
    if len(key) not in VALID_KEY_SIZES:
        raise DecryptionError(
            f"Secret must be 16, 24 or 32 bytes of UTF-8, got {len(key)} bytes"
        )
    return key


def decrypt(encoded_locator: str, secret: str) -> str:
    """
    Decrypt an encrypted stream locator into a playable URL

    Args:
        encoded_locator: Base64 of IV (16 bytes) followed by AES-CBC ciphertext;
            embedded whitespace and line breaks are ignored
        secret: Decryption secret, used verbatim as the AES key

    Returns:
        Decrypted URL

    Raises:
        DecryptionError: If the input is not valid Base64, the ciphertext is not
            a positive multiple of the block size, the padding is invalid or the
            plaintext is not valid UTF-8
    """
    key = _secret_to_key(secret)

    try:
        data = base64.b64decode("".join(encoded_locator.split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecryptionError(f"Stream locator is not valid Base64: {exc}") from exc

    iv, ciphertext = data[:IV_SIZE], data[IV_SIZE:]
    if len(iv) < IV_SIZE:
        raise DecryptionError(f"Stream locator too short: {len(data)} bytes")
    if not ciphertext or len(ciphertext) % AES.block_size:
        raise DecryptionError(
            f"Ciphertext length {len(ciphertext)} is not a multiple of {AES.block_size}"
        )

    cipher = AES.new(key, AES.MODE_CBC, iv=iv)
    try:
        plaintext = unpad(cipher.decrypt(ciphertext), AES.block_size, style="pkcs7")
    except ValueError as exc:
        raise DecryptionError(f"Invalid padding after decryption: {exc}") from exc

    try:
        url = plaintext.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecryptionError("Decrypted stream locator is not valid UTF-8") from exc

    logger.debug("Decrypted stream locator (%s bytes)", len(plaintext))
    return url


def encrypt(plaintext: str, secret: str, iv: bytes | None = None) -> str:
    """
    Encrypt a URL into the locator format accepted by decrypt()

    Used to build fixtures and to verify a configured secret.
    """
    key = _secret_to_key(secret)
    if iv is None:
        iv = get_random_bytes(IV_SIZE)
    if len(iv) != IV_SIZE:
        raise ValueError(f"IV must be {IV_SIZE} bytes")

    cipher = AES.new(key, AES.MODE_CBC, iv=iv)
    ciphertext = cipher.encrypt(pad(plaintext.encode("utf-8"), AES.block_size, style="pkcs7"))
    return base64.b64encode(iv + ciphertext).decode("ascii")
