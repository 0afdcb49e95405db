# utils/short_code.py
from typing import List

MIN_LENGTH = 4
MAX_LENGTH = 6
SIZE_OFFSET_FACTOR = 1000


def _code_units(text: str) -> List[int]:
    # UTF-16 code units, so non-BMP characters hash the same way printed labels did
    data = text.encode("utf-16-le")
    return [int.from_bytes(data[i:i + 2], "little") for i in range(0, len(data), 2)]


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    if value & 0x80000000:
        return value - 0x100000000
    return value


def string_hash(text: str) -> int:
    """
    Rolling hash h = h * 31 + c over the code units of `text`,
    wrapped to a signed 32-bit integer after each step.
    """
    h = 0
    for unit in _code_units(text):
        h = _to_int32((h << 5) - h + unit)
    return h


def generate_short_code(product_id: str, size: str) -> str:
    """
    Short numeric code printed on the label of one (product, size) pair.

    Example: ("p1", "M") -> "557603"

    The value is never stored, so this must stay byte-for-byte stable:
    changing anything here makes every printed label unreadable.
    """
    if not product_id or not isinstance(product_id, str):
        raise ValueError("product_id must be a non-empty string")
    if not size or not isinstance(size, str):
        raise ValueError("size must be a non-empty string")

    size_units = _code_units(size)
    combined = f"{product_id}:SIZE:{size}:{len(size_units)}"

    # the offset is added after wrapping and is not wrapped again
    h = string_hash(combined) + sum(size_units) * SIZE_OFFSET_FACTOR

    return str(abs(h))[:MAX_LENGTH].zfill(MIN_LENGTH)
