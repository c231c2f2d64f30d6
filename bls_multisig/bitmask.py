"""
Bitmask codec for signer subsets.

A bitmask selects participants by position in the agreed public-key
order.  On the wire it is an ASCII bit-string, most significant bit
first:

    "1101"  →  0b1101 = 13  →  participants {0, 2, 3}

Bit *j* of the integer (counting from the least-significant bit, i.e.
the **rightmost** character) selects participant *j*.  Every signer must
use this orientation; a reversed string selects a different subset.

Parsing is permissive: any character other than ``'1'`` counts as 0, so
``"1x1"`` decodes like ``"101"``.  Existing tooling depends on this.
"""

from __future__ import annotations

from typing import Iterable, List, Union


def decode(bits: str) -> int:
    """Bit-string (MSB first) → integer bitmask.  ``""`` → 0."""
    mask = 0
    width = len(bits)
    for i, ch in enumerate(bits):
        if ch == "1":
            mask |= 1 << (width - 1 - i)
    return mask


def to_bit_string(mask: int, width: int = 0) -> str:
    """Integer bitmask → bit-string, zero-padded on the left to *width*."""
    if mask < 0:
        raise ValueError("bitmask must be non-negative")
    return format(mask, "b").zfill(width)


def as_bitmask(value: Union[int, str]) -> int:
    """Accept an integer mask or a bit-string."""
    if isinstance(value, str):
        return decode(value)
    if value < 0:
        raise ValueError("bitmask must be non-negative")
    return value


def is_selected(mask: int, index: int) -> bool:
    return (mask >> index) & 1 == 1


def selected_indices(mask: int, count: int) -> List[int]:
    """Indices in  [0, count)  whose bit is set, ascending."""
    return [i for i in range(count) if is_selected(mask, i)]


def from_indices(indices: Iterable[int]) -> int:
    mask = 0
    for i in indices:
        if i < 0:
            raise ValueError(f"negative index {i}")
        mask |= 1 << i
    return mask
