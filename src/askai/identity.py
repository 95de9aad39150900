"""Namespace key derivation.

Hides how one token's locally persisted conversations are kept apart from
another's on a shared device. The key is a 32-bit rolling hash; it is NOT
a security boundary and must never be used as authentication.
"""

from .config import CHATS_KEY_PREFIX, NAMESPACE_PREFIX


def _to_int32(value: int) -> int:
    """Wrap an integer to a signed 32-bit value."""
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _utf16_units(text: str) -> list[int]:
    """Split text into UTF-16 code units (surrogate pairs count as two)."""
    data = text.encode("utf-16-le", "surrogatepass")
    return [int.from_bytes(data[i:i + 2], "little") for i in range(0, len(data), 2)]


def derive_key(token: str | None) -> str | None:
    """Derive a stable namespace key from an opaque auth token.

    Args:
        token: Auth token, or None when not authenticated

    Returns:
        Key of the form ``user_<n>``, or None for an absent/empty token

    Example:
        >>> derive_key("abc")
        'user_96354'
    """
    if not token:
        return None

    h = 0
    for unit in _utf16_units(token):
        h = _to_int32((h << 5) - h + unit)
    return f"{NAMESPACE_PREFIX}{abs(h)}"


def namespace_storage_key(key: str) -> str:
    """Device store key holding the chat list of one namespace."""
    return f"{CHATS_KEY_PREFIX}{key}"
