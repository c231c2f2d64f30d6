"""
Primitive back-end interface and its BLS12-381 implementation.

The protocol modules (anti-rogue aggregation, membership keys, subset
aggregation, verification) never touch curve coordinates.  They call a
``GroupBackend`` that exposes exactly the primitive operations they
need:

    generate_key_pair, derive_public_key, sign, verify,
    aggregate, scale_public_key, zero_public_key, zero_signature,
    marshal, unmarshal_{private_key,public_key,signature},
    generate_membership_key_part, multisign_verify

``BLS12381Backend`` implements them with ``py_ecc``.  Tests substitute a
toy group to exercise protocol logic without real cryptography.

Multisignature algebra (Boneh-Drijvers-Neven accountable subgroups)
-------------------------------------------------------------------
With  apk = Σ a_i · pk_i  and  H_j = H₂(apk, j):

    membership part   μ_{i→j} = (a_i · sk_i) · H_j
    membership key    mk_j    = Σ_i μ_{i→j}        = sk_agg · H_j
    member signature  s_j     = sk_j · H₀(apk ‖ m) + mk_j
    subset signature  S       = Σ_{j∈T} s_j,   PK = Σ_{j∈T} pk_j

    verify:  e(S, g₁) == e(H₀(apk ‖ m), PK) · e(Σ_{j∈T} H_j, apk)
"""

from __future__ import annotations

import abc
import logging
from typing import Optional, Tuple

from py_ecc.bls import G2Basic
from py_ecc.optimized_bls12_381 import (
    FQ12,
    G1,
    Z2,
    add,
    final_exponentiate,
    multiply,
    neg,
    pairing,
)

from .bitmask import selected_indices
from .curve import ORDER, PrivateKey, PublicKey, Signature
from .encoding import decode_hex
from .hash import (
    bind_message,
    hash_to_index_point,
    hash_to_message_point,
)

logger = logging.getLogger(__name__)


# ── interface ───────────────────────────────────────────────────────────

class GroupBackend(abc.ABC):
    """
    Opaque-element primitive library consumed by the protocol layer.

    Elements are immutable and compare by value.  ``aggregate`` is the
    group operation, shared by public keys and signatures; it must be
    associative and commutative.
    """

    name = "abstract"

    @abc.abstractmethod
    def generate_key_pair(self) -> Tuple[object, object]:
        """Fresh  (private_key, public_key)."""

    @abc.abstractmethod
    def derive_public_key(self, priv):
        """Public key belonging to *priv*."""

    @abc.abstractmethod
    def sign(self, priv, message: bytes):
        """Plain signature over *message*."""

    @abc.abstractmethod
    def verify(self, pub, message: bytes, sig) -> bool:
        """Plain signature check."""

    @abc.abstractmethod
    def aggregate(self, x, y):
        """Group operation on two public keys or two signatures."""

    @abc.abstractmethod
    def scale_public_key(self, pub, coefficient: int):
        """``coefficient · pub``."""

    @abc.abstractmethod
    def zero_public_key(self):
        """Identity public key."""

    @abc.abstractmethod
    def zero_signature(self):
        """Identity signature."""

    @abc.abstractmethod
    def marshal(self, element) -> bytes:
        """Canonical bytes of any key or signature."""

    @abc.abstractmethod
    def unmarshal_private_key(self, data: bytes):
        """Parse a private key, raising ``DecodeError``."""

    @abc.abstractmethod
    def unmarshal_public_key(self, data: bytes):
        """Parse a public key, raising ``DecodeError``."""

    @abc.abstractmethod
    def unmarshal_signature(self, data: bytes):
        """Parse a signature, raising ``DecodeError``."""

    @abc.abstractmethod
    def generate_membership_key_part(
        self, priv, target_index: int, agg_pub, coefficient: int,
    ):
        """Signer's contribution towards membership key *target_index*."""

    @abc.abstractmethod
    def multisign_verify(
        self, subset_sig, full_agg_pub, subset_agg_pub, message: bytes,
        bitmask: int,
    ) -> bool:
        """
        Subset-signature pairing check.

        Must reject an empty bitmask and an identity subset key.
        """

    # ── wire coercion ──────────────────────────────────────────────────

    def as_private_key(self, value):
        """Accept an element, its marshaled bytes, or lowercase hex."""
        if isinstance(value, str):
            value = decode_hex(value, "private key")
        if isinstance(value, (bytes, bytearray)):
            return self.unmarshal_private_key(bytes(value))
        return value

    def as_public_key(self, value):
        if isinstance(value, str):
            value = decode_hex(value, "public key")
        if isinstance(value, (bytes, bytearray)):
            return self.unmarshal_public_key(bytes(value))
        return value

    def as_signature(self, value):
        if isinstance(value, str):
            value = decode_hex(value, "signature")
        if isinstance(value, (bytes, bytearray)):
            return self.unmarshal_signature(bytes(value))
        return value

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


# ── BLS12-381 ───────────────────────────────────────────────────────────

class BLS12381Backend(GroupBackend):
    """``GroupBackend`` over BLS12-381 (pk ∈ G1, signatures ∈ G2)."""

    name = "bls12-381"

    def generate_key_pair(self) -> Tuple[PrivateKey, PublicKey]:
        priv = PrivateKey.generate()
        return priv, priv.public_key()

    def derive_public_key(self, priv: PrivateKey) -> PublicKey:
        return priv.public_key()

    def sign(self, priv: PrivateKey, message: bytes) -> Signature:
        return Signature(multiply(hash_to_message_point(message), priv.value))

    def verify(self, pub: PublicKey, message: bytes, sig: Signature) -> bool:
        return G2Basic.Verify(pub.to_bytes(), message, sig.to_bytes())

    def aggregate(self, x, y):
        if type(x) is not type(y):
            raise TypeError(
                f"cannot aggregate {type(x).__name__} with {type(y).__name__}"
            )
        return x + y

    def scale_public_key(self, pub: PublicKey, coefficient: int) -> PublicKey:
        return coefficient * pub

    def zero_public_key(self) -> PublicKey:
        return PublicKey.identity()

    def zero_signature(self) -> Signature:
        return Signature.identity()

    def marshal(self, element) -> bytes:
        return element.to_bytes()

    def unmarshal_private_key(self, data: bytes) -> PrivateKey:
        return PrivateKey.from_bytes(data)

    def unmarshal_public_key(self, data: bytes) -> PublicKey:
        return PublicKey.from_bytes(data)

    def unmarshal_signature(self, data: bytes) -> Signature:
        return Signature.from_bytes(data)

    def generate_membership_key_part(
        self,
        priv: PrivateKey,
        target_index: int,
        agg_pub: PublicKey,
        coefficient: int,
    ) -> Signature:
        point = hash_to_index_point(agg_pub.to_bytes(), target_index)
        scalar = (priv.value * coefficient) % ORDER
        return Signature(multiply(point, scalar))

    def multisign_verify(
        self,
        subset_sig: Signature,
        full_agg_pub: PublicKey,
        subset_agg_pub: PublicKey,
        message: bytes,
        bitmask: int,
    ) -> bool:
        # An empty subset or an identity subset key makes the check
        # satisfiable without any private key.
        if bitmask == 0 or subset_agg_pub.is_zero():
            logger.debug("rejecting empty subset or identity subset key")
            return False

        apk_bytes = full_agg_pub.to_bytes()
        members = selected_indices(bitmask, bitmask.bit_length())
        logger.debug("pairing check over %d selected members", len(members))

        h_members = Z2
        for j in members:
            h_members = add(h_members, hash_to_index_point(apk_bytes, j))
        h_msg = hash_to_message_point(bind_message(apk_bytes, message))

        product = (
            pairing(subset_sig.point, neg(G1), final_exponentiate=False)
            * pairing(h_msg, subset_agg_pub.point, final_exponentiate=False)
            * pairing(h_members, full_agg_pub.point, final_exponentiate=False)
        )
        return final_exponentiate(product) == FQ12.one()


# ── default instance ────────────────────────────────────────────────────

_default: Optional[GroupBackend] = None


def get_backend(backend: Optional[GroupBackend] = None) -> GroupBackend:
    """Return *backend*, or the shared ``BLS12381Backend`` if None."""
    global _default
    if backend is not None:
        return backend
    if _default is None:
        _default = BLS12381Backend()
    return _default


__all__ = ["GroupBackend", "BLS12381Backend", "get_backend"]
