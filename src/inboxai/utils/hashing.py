"""32-bit rolling string hash shared by cache keys and variant assignment."""

from __future__ import annotations

import struct

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def rolling_hash(text: str) -> int:
    """Signed 32-bit ``h = h * 31 + unit`` over the UTF-16 code units of ``text``.

    Matches what a JavaScript ``charCodeAt`` loop with ``hash | 0`` truncation
    produces, so keys stay stable across client platforms.
    """
    h = 0
    data = text.encode("utf-16-le")
    for (unit,) in struct.iter_unpack("<H", data):
        h = (h * 31 + unit) & 0xFFFFFFFF
    return h - 0x100000000 if h & 0x80000000 else h


def to_base36(value: int) -> str:
    if value < 0:
        return "-" + to_base36(-value)
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36_DIGITS[rem])
    return "".join(reversed(digits))
