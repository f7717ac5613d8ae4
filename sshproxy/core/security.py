import re
import time
import base64
import binascii
import hashlib
from typing import Optional

import pyotp

from sshproxy.core.exceptions import InvalidSecretError

TOTP_INTERVAL = 30
TOTP_DIGITS = 6

_BASE32_ALPHABET = re.compile(r"^[A-Z2-7]+$")

# --- TOTP (RFC 6238, SHA-1, 30 second step, 6 digits) ---

def _upper_secret(secret: str) -> str:
    normalized = secret.strip().upper()
    if not normalized:
        raise InvalidSecretError("OTP secret is empty")
    if not _BASE32_ALPHABET.match(normalized):
        raise InvalidSecretError("Failed to decode base32 OTP secret: invalid character")
    # 1, 3 and 6 trailing characters cannot come from whole bytes
    if len(normalized) % 8 in (1, 3, 6):
        raise InvalidSecretError("Failed to decode base32 OTP secret: invalid length")
    return normalized

def base32_decode(secret: str) -> bytes:
    """
    Decode an unpadded base32 secret (RFC 4648). Leftover bits in the last
    character must be zero. Raises InvalidSecretError; the seed itself never
    appears in the message.
    """
    normalized = _upper_secret(secret)
    padding_len = (8 - len(normalized) % 8) % 8
    try:
        decoded = base64.b32decode(normalized + '=' * padding_len)
    except binascii.Error:
        raise InvalidSecretError("Failed to decode base32 OTP secret") from None
    if base64.b32encode(decoded).rstrip(b'=').decode() != normalized:
        raise InvalidSecretError("Failed to decode base32 OTP secret: trailing bits")
    return decoded

def normalize_secret(secret: str) -> str:
    """Upper-cased seed, after checking it decodes as canonical unpadded base32."""
    base32_decode(secret)
    return secret.strip().upper()

def generate_totp(secret: str, timestamp: Optional[float] = None) -> str:
    """
    Generate the TOTP code for the window containing `timestamp`
    (seconds since the Unix epoch, defaults to now).
    """
    normalized = normalize_secret(secret)
    if timestamp is None:
        timestamp = time.time()

    totp = pyotp.TOTP(
        normalized,
        digits=TOTP_DIGITS,
        digest=hashlib.sha1,
        interval=TOTP_INTERVAL
    )
    return totp.at(int(timestamp))

def seconds_remaining(timestamp: Optional[float] = None) -> int:
    if timestamp is None:
        timestamp = time.time()
    return TOTP_INTERVAL - int(timestamp) % TOTP_INTERVAL

def combine_credentials(password: str, totp_code: str) -> str:
    """Password with the one-time code appended, as the service expects."""
    return f"{password}{totp_code}"
