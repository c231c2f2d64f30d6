"""
Domain-separated hash functions for bls-multisig.

Three roles need independent hash outputs even when fed identical data:

- **anti-rogue coefficients**  a_i = H_agg(i ‖ pk_i ‖ [pk_0 … pk_{n-1}])
- **message points**  H₀(apk, m) = hash_to_G2(apk ‖ m, DST_sig)
- **membership points**  H₂(apk, i) = hash_to_G2(apk ‖ i, DST_member)

Coefficients use BIP-340 style tagged hashes:

    H_tag(x) = SHA-256( SHA-256(tag) ‖ SHA-256(tag) ‖ x )

Curve points use the IETF hash-to-curve suite implemented by ``py_ecc``
(SSWU, expand_message_xmd with SHA-256).  Message points share the DST of
the ``G2Basic`` ciphersuite, so a member signature's message part is an
ordinary BLS signature over ``apk ‖ m``.
"""

from __future__ import annotations

import hashlib
from typing import Any, Sequence

from py_ecc.bls import G2Basic
from py_ecc.bls.hash_to_curve import hash_to_G2

# ── domain tags ─────────────────────────────────────────────────────────
_TAG_ANTI_ROGUE = b"BLS-MULTISIG/v1/anti-rogue"

DST_SIGNATURE = G2Basic.DST
DST_MEMBERSHIP = b"BLS_MULTISIG_BLS12381G2_XMD:SHA-256_SSWU_RO_MEMBERSHIP_"

INDEX_BYTES = 4
MAX_INDEX = 2 ** (8 * INDEX_BYTES) - 1


# ── internal helpers ────────────────────────────────────────────────────
def _tagged_hasher(tag: bytes):
    """Return a SHA-256 context pre-loaded with the BIP-340 tag prefix."""
    tag_hash = hashlib.sha256(tag).digest()
    h = hashlib.sha256()
    h.update(tag_hash)
    h.update(tag_hash)
    return h


def _encode_item(item: Any) -> bytes:
    """
    Canonical encoding of a protocol element for hashing.

    Length-prefixing is used for variable-length items (bytes, lists)
    to ensure unambiguous parsing.
    """
    if isinstance(item, (bytes, bytearray)):
        return len(item).to_bytes(4, "big") + bytes(item)
    if isinstance(item, int):
        return encode_index(item)
    if isinstance(item, (list, tuple)):
        parts = b"".join(_encode_item(x) for x in item)
        return len(item).to_bytes(4, "big") + parts
    raise TypeError(f"cannot hash {type(item).__name__}")


def tagged_hash(tag: bytes, *args: Any) -> bytes:
    """Compute BIP-340 tagged hash over arbitrary protocol elements."""
    h = _tagged_hasher(tag)
    for a in args:
        h.update(_encode_item(a))
    return h.digest()


def encode_index(index: int) -> bytes:
    """Participant index as 4 big-endian bytes."""
    return index.to_bytes(INDEX_BYTES, "big")


# ── public hash functions ───────────────────────────────────────────────

def hash_anti_rogue(
    index: int,
    key_bytes: bytes,
    all_key_bytes: Sequence[bytes],
) -> int:
    """
    Anti-rogue coefficient  a_i = H_agg(i ‖ pk_i ‖ [pk_0 … pk_{n-1}]).

    Returned as the unreduced 256-bit integer; back-ends reduce it modulo
    their group order when it is used as a scalar.
    """
    digest = tagged_hash(_TAG_ANTI_ROGUE, index, key_bytes, list(all_key_bytes))
    return int.from_bytes(digest, "big")


def bind_message(agg_pub_bytes: bytes, message: bytes) -> bytes:
    """Message actually signed by a member:  apk ‖ m."""
    return agg_pub_bytes + message


def hash_to_message_point(message: bytes):
    """H₀: plain BLS message point in G2."""
    return hash_to_G2(message, DST_SIGNATURE, hashlib.sha256)


def hash_to_index_point(agg_pub_bytes: bytes, index: int):
    """H₂(apk, i): membership point for participant *i* in G2."""
    return hash_to_G2(
        agg_pub_bytes + encode_index(index), DST_MEMBERSHIP, hashlib.sha256,
    )
