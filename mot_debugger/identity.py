"""MOT Debugger identity codec.

Tracked entities are identified by a 128-bit UUID. This module converts the
various forms that value arrives in (raw 16-byte message arrays, hex strings,
integers) into :class:`uuid.UUID`, and derives the two display forms the
renderer needs:

    to_display_string(uid) -> 32-char lowercase hex, one byte per two digits
    to_display_key(uid)    -> signed 32-bit marker key (collisions tolerated)

``uuid.UUID`` orders by its integer value, which is the total order used for
grouping. The display key is only a drawing address and never used to decide
whether two records belong to the same entity.

License: AGPL-3.0-or-later
"""

import uuid
from typing import Sequence, Union

from .errors import IdentityError

IdentityLike = Union[uuid.UUID, bytes, bytearray, Sequence[int], str, int]

UUID_NUM_BYTES = 16
DISPLAY_STRING_LENGTH = 2 * UUID_NUM_BYTES

_MASK_64 = (1 << 64) - 1
_GOLDEN_RATIO = 0x9E3779B9


def identity_from_bytes(raw: Union[bytes, bytearray, Sequence[int]]) -> uuid.UUID:
    """Build a UUID from its 16 raw bytes (message array form).

    Args:
        raw: bytes or a sequence of 16 integers in [0, 255]

    Raises:
        IdentityError: wrong length or byte value out of range
    """
    try:
        data = bytes(raw)
    except (TypeError, ValueError) as exc:
        raise IdentityError(f"identity bytes are not valid: {exc}") from exc
    if len(data) != UUID_NUM_BYTES:
        raise IdentityError(
            f"identity must be {UUID_NUM_BYTES} bytes, got {len(data)}")
    return uuid.UUID(bytes=data)


def parse_identity(text: str) -> uuid.UUID:
    """Parse a canonical (dashed) or plain 32-hex-digit UUID string."""
    try:
        return uuid.UUID(text.strip())
    except (AttributeError, ValueError) as exc:
        raise IdentityError(f"cannot parse identity {text!r}") from exc


def coerce_identity(value: IdentityLike) -> uuid.UUID:
    """Convert any supported identity representation to ``uuid.UUID``."""
    if isinstance(value, uuid.UUID):
        return value
    if isinstance(value, str):
        return parse_identity(value)
    if isinstance(value, bool):
        raise IdentityError("bool is not an identity")
    if isinstance(value, int):
        if not 0 <= value < (1 << 128):
            raise IdentityError(f"identity {value} does not fit in 128 bits")
        return uuid.UUID(int=value)
    return identity_from_bytes(value)


def to_display_string(identity: uuid.UUID) -> str:
    """Fixed-width hex encoding, two lowercase digits per byte."""
    return identity.bytes.hex()


def to_display_key(identity: uuid.UUID) -> int:
    """Deterministic signed 32-bit key for marker addressing.

    Byte-wise hash_combine fold over the 16 bytes with 64-bit wraparound,
    truncated to the low 32 bits. Does not depend on PYTHONHASHSEED.
    """
    seed = 0
    for byte in identity.bytes:
        seed ^= (byte + _GOLDEN_RATIO + (seed << 6) + (seed >> 2)) & _MASK_64
        seed &= _MASK_64
    key = seed & 0xFFFFFFFF
    if key >= 0x80000000:
        key -= 0x100000000
    return key
