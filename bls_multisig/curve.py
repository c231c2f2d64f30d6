"""
BLS12-381 group elements via ``py_ecc``.

Key and signature types follow the "minimal-pubkey-size" convention of
the IETF BLS draft:

- ``PrivateKey`` — scalar in  [1, r)   (32 bytes big-endian)
- ``PublicKey``  — point in  G1         (48 bytes, compressed)
- ``Signature``  — point in  G2         (96 bytes, compressed)

Membership keys and membership-key parts are ``Signature`` values.

Point arithmetic and (de)compression are delegated to
``py_ecc.optimized_bls12_381`` and ``py_ecc.bls.g2_primitives``.  Every
decoded point is checked to lie in the prime-order subgroup; malformed
encodings raise ``DecodeError``.

Install
-------
    pip install py_ecc>=7.0.0

References
----------
- draft-irtf-cfrg-bls-signature-05   BLS signatures
- draft-irtf-cfrg-pairing-friendly-curves   BLS12-381 parameters
"""

from __future__ import annotations

import secrets
from typing import Optional

from py_ecc.bls import G2Basic
from py_ecc.bls.g2_primitives import (
    G1_to_pubkey,
    G2_to_signature,
    pubkey_to_G1,
    signature_to_G2,
    subgroup_check,
)
from py_ecc.optimized_bls12_381 import (
    G1,
    Z1,
    Z2,
    add,
    curve_order,
    eq,
    is_inf,
    multiply,
)

from .errors import DecodeError

# ── BLS12-381 constants ─────────────────────────────────────────────────
ORDER = curve_order
PRIVATE_KEY_BYTES = 32
PUBLIC_KEY_BYTES = 48
SIGNATURE_BYTES = 96


# ── PrivateKey ──────────────────────────────────────────────────────────
class PrivateKey:
    """Secret scalar  sk ∈ [1, r)."""

    __slots__ = ("_v",)

    def __init__(self, value: int) -> None:
        if not 0 < value < ORDER:
            raise ValueError("private key out of range")
        self._v = value

    # constructors -----------------------------------------------------------
    @classmethod
    def generate(cls, ikm: Optional[bytes] = None) -> PrivateKey:
        """
        Derive a key with the IETF ``KeyGen`` (HKDF-based).

        *ikm* defaults to 32 fresh random bytes.
        """
        if ikm is None:
            ikm = secrets.token_bytes(32)
        return cls(G2Basic.KeyGen(ikm))

    @classmethod
    def from_bytes(cls, data: bytes) -> PrivateKey:
        if len(data) != PRIVATE_KEY_BYTES:
            raise DecodeError(
                f"private key: need {PRIVATE_KEY_BYTES} bytes, got {len(data)}"
            )
        v = int.from_bytes(data, "big")
        if not 0 < v < ORDER:
            raise DecodeError("private key out of range")
        return cls(v)

    # serialisation ----------------------------------------------------------
    def to_bytes(self) -> bytes:
        return self._v.to_bytes(PRIVATE_KEY_BYTES, "big")

    @property
    def value(self) -> int:
        return self._v

    def public_key(self) -> PublicKey:
        return PublicKey(multiply(G1, self._v))

    # comparison / hashing ---------------------------------------------------
    def __eq__(self, o: object) -> bool:
        if isinstance(o, PrivateKey):
            return self._v == o._v
        return False

    def __hash__(self) -> int:
        return hash(self._v)

    def __repr__(self) -> str:
        return "PrivateKey(…)"


# ── group elements ──────────────────────────────────────────────────────
class _GroupElement:
    """
    Immutable wrapper around a projective ``py_ecc`` point.

    Subclasses fix the group (G1 or G2) and its compressed encoding.
    Addition is the group operation; ``int * element`` is scalar
    multiplication modulo the group order.
    """

    __slots__ = ("_pt",)

    SIZE = 0
    _IDENTITY = None

    def __init__(self, point) -> None:
        self._pt = point

    # codec hooks ------------------------------------------------------------
    @staticmethod
    def _compress(point) -> bytes:
        raise NotImplementedError

    @staticmethod
    def _decompress(data: bytes):
        raise NotImplementedError

    # constructors -----------------------------------------------------------
    @classmethod
    def identity(cls):
        """Point at infinity, the seed of every aggregation."""
        return cls(cls._IDENTITY)

    @classmethod
    def from_bytes(cls, data: bytes):
        """Deserialise a compressed point and check subgroup membership."""
        name = cls.__name__
        if len(data) != cls.SIZE:
            raise DecodeError(f"{name}: need {cls.SIZE} bytes, got {len(data)}")
        try:
            point = cls._decompress(bytes(data))
        except ValueError as exc:
            raise DecodeError(f"{name}: {exc}") from exc
        if not subgroup_check(point):
            raise DecodeError(f"{name}: point not in prime-order subgroup")
        return cls(point)

    # serialisation ----------------------------------------------------------
    def to_bytes(self) -> bytes:
        return bytes(self._compress(self._pt))

    @property
    def point(self):
        return self._pt

    def is_zero(self) -> bool:
        return is_inf(self._pt)

    # group operations -------------------------------------------------------
    def __add__(self, o):
        if type(o) is not type(self):
            return NotImplemented
        return type(self)(add(self._pt, o._pt))

    def __rmul__(self, s):
        if isinstance(s, int):
            return type(self)(multiply(self._pt, s % ORDER))
        return NotImplemented

    def __eq__(self, o: object) -> bool:
        if type(o) is not type(self):
            return False
        return eq(self._pt, o._pt)  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash(self.to_bytes())

    def __repr__(self) -> str:
        if self.is_zero():
            return f"{type(self).__name__}(∞)"
        return f"{type(self).__name__}(0x{self.to_bytes()[:8].hex()}…)"


class PublicKey(_GroupElement):
    """Public key  pk = sk · g₁  in G1."""

    __slots__ = ()

    SIZE = PUBLIC_KEY_BYTES
    _IDENTITY = Z1

    @staticmethod
    def _compress(point) -> bytes:
        return G1_to_pubkey(point)

    @staticmethod
    def _decompress(data: bytes):
        return pubkey_to_G1(data)


class Signature(_GroupElement):
    """Signature or membership key in G2."""

    __slots__ = ()

    SIZE = SIGNATURE_BYTES
    _IDENTITY = Z2

    @staticmethod
    def _compress(point) -> bytes:
        return G2_to_signature(point)

    @staticmethod
    def _decompress(data: bytes):
        return signature_to_G2(data)
