import base64

import pytest

from yletv.exceptions import DecryptionError
from yletv.services.crypto_service import decrypt, encrypt


@pytest.mark.parametrize("plaintext", [
    "https://yletv.example/hls/master.m3u8?token=abc",
    "",
    "a" * 16,
    "https://example.fi/äänitys/ööö.m3u8",
    "x" * 1000,
])
def test_decrypt_recovers_encrypted_plaintext(plaintext, secret):
    locator = encrypt(plaintext, secret, iv=b"\x01" * 16)
    assert decrypt(locator, secret) == plaintext


def test_decrypt_with_random_iv(secret):
    locator = encrypt("https://example.com/a.m3u8", secret)
    assert decrypt(locator, secret) == "https://example.com/a.m3u8"


def test_decrypt_accepts_32_byte_secret():
    key = "k" * 32
    assert decrypt(encrypt("https://example.com", key), key) == "https://example.com"


def test_ciphertext_not_multiple_of_block_size(secret):
    data = base64.b64decode(encrypt("https://example.com/stream", secret))
    truncated = base64.b64encode(data[:-3]).decode("ascii")
    with pytest.raises(DecryptionError, match="multiple"):
        decrypt(truncated, secret)


def test_iv_only_is_rejected(secret):
    locator = base64.b64encode(b"\x00" * 16).decode("ascii")
    with pytest.raises(DecryptionError):
        decrypt(locator, secret)


def test_too_short_for_iv(secret):
    with pytest.raises(DecryptionError, match="too short"):
        decrypt(base64.b64encode(b"short").decode("ascii"), secret)


def test_invalid_base64(secret):
    with pytest.raises(DecryptionError, match="Base64"):
        decrypt("not base64 at all!", secret)


def test_invalid_padding(secret):
    # Flipping the previous block flips the final padding byte out of range
    locator = encrypt("https://example.com", secret, iv=b"\x02" * 16)
    data = bytearray(base64.b64decode(locator))
    data[-17] ^= 0xFF
    with pytest.raises(DecryptionError):
        decrypt(base64.b64encode(bytes(data)).decode("ascii"), secret)


def test_invalid_utf8_plaintext(secret):
    from Crypto.Cipher import AES
    from Crypto.Util.Padding import pad

    iv = b"\x03" * 16
    cipher = AES.new(secret.encode("utf-8"), AES.MODE_CBC, iv=iv)
    ciphertext = cipher.encrypt(pad(b"\xff\xfe\xfd", AES.block_size))
    locator = base64.b64encode(iv + ciphertext).decode("ascii")
    with pytest.raises(DecryptionError, match="UTF-8"):
        decrypt(locator, secret)


def test_secret_with_invalid_key_length():
    with pytest.raises(DecryptionError, match="16, 24 or 32"):
        decrypt(base64.b64encode(b"\x00" * 32).decode("ascii"), "short")


def test_decrypt_ignores_line_breaks_in_locator(secret):
    locator = encrypt("https://example.com/stream/master.m3u8", secret, iv=b"\x04" * 16)
    wrapped = "\n".join(locator[i:i + 16] for i in range(0, len(locator), 16)) + "\r\n"
    assert decrypt(" " + wrapped, secret) == "https://example.com/stream/master.m3u8"
