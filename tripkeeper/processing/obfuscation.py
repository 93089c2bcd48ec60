"""
Document image obfuscation

Stored document and visa photos are wrapped as "encrypted:" + base64(payload).
The marker name is historical: this hides the image from casual inspection of
the store and gives no confidentiality to anyone who can read it.
"""

import base64
import binascii
from typing import Optional, Union

from tripkeeper.core.logger import get_logger

logger = get_logger(__name__)

MARKER = "encrypted:"


def is_obfuscated(value: Optional[str]) -> bool:
    return bool(value) and value.startswith(MARKER)


def encode(payload: Union[str, bytes]) -> str:
    """Obfuscate a payload (text is encoded as UTF-8 first)"""
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return MARKER + base64.b64encode(payload).decode("ascii")


def decode_bytes(value: str) -> Optional[bytes]:
    """Reverse encode() to raw bytes

    Unmarked values are returned as their UTF-8 bytes; malformed payloads give None.
    """
    if not is_obfuscated(value):
        return value.encode("utf-8")

    try:
        return base64.b64decode(value[len(MARKER):], validate=True)
    except (binascii.Error, ValueError) as e:
        logger.warning(f"Failed to decode obfuscated payload: {e}")
        return None


def decode(value: str) -> Optional[str]:
    """Reverse encode() for text payloads such as data URLs

    Returns the value unchanged when it carries no marker (plain or legacy
    records) and None when the payload cannot be decoded; callers show a
    "cannot display" state for None.
    """
    if not is_obfuscated(value):
        return value

    raw = decode_bytes(value)
    if raw is None:
        return None

    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        logger.warning(f"Obfuscated payload is not text: {e}")
        return None
