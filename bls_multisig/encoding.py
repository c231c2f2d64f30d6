"""
Wire encoding for values crossing the process boundary.

- keys, signatures, membership keys: lowercase hex of the canonical
  marshaled bytes
- anti-rogue coefficients: hex big-integer strings (no padding)
- messages: UTF-8 text by default, or explicit hex / base64 data

Every decoding failure raises ``DecodeError``.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import Optional

from .errors import DecodeError

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]*")


def _strip_hex(value: str) -> str:
    text = value.strip()
    if text[:2].lower() == "0x":
        text = text[2:]
    return text


def decode_hex(value: str, what: str = "value") -> bytes:
    """Hex string → bytes.  Surrounding whitespace and a ``0x`` prefix are ignored."""
    text = _strip_hex(value)
    if not _HEX_DIGITS.fullmatch(text):
        raise DecodeError(f"{what}: invalid hex ({value!r})")
    try:
        return bytes.fromhex(text)
    except ValueError as exc:
        raise DecodeError(f"{what}: invalid hex ({exc})") from exc


def encode_hex(data: bytes) -> str:
    return data.hex()


def encode_coefficient(coefficient: int) -> str:
    return format(coefficient, "x")


def decode_coefficient(value: str) -> int:
    text = _strip_hex(value)
    if not text:
        raise DecodeError("coefficient: empty string")
    if not _HEX_DIGITS.fullmatch(text):
        raise DecodeError(f"coefficient: invalid hex {value!r}")
    return int(text, 16)


def decode_message(
    text: Optional[str] = None,
    data_hex: Optional[str] = None,
    data_base64: Optional[str] = None,
) -> bytes:
    """
    Resolve exactly one message source to bytes.

    *text* is taken as UTF-8; bytes that arrived undecodable on the
    command line (surrogate escapes) pass through unchanged.
    *data_hex* / *data_base64* carry raw bytes.
    """
    given = [s for s in (text, data_hex, data_base64) if s is not None]
    if len(given) != 1:
        raise DecodeError(
            "message: supply exactly one of text, hex or base64 data"
        )
    if data_hex is not None:
        return decode_hex(data_hex, "message")
    if data_base64 is not None:
        try:
            return base64.b64decode(data_base64.strip(), validate=True)
        except binascii.Error as exc:
            raise DecodeError(f"message: invalid base64 ({exc})") from exc
    try:
        return text.encode("utf-8", "surrogateescape")  # type: ignore[union-attr]
    except UnicodeEncodeError as exc:
        raise DecodeError(f"message: not encodable as UTF-8 ({exc.reason})") from exc
