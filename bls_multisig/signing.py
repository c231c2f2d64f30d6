"""
Plain BLS signing and member signatures.

A **member signature** binds three things: the signer's key, the
message, and the signer's certified membership in the aggregate:

    s_j = sk_j · H₀(apk ‖ m)  +  mk_j

The first term is an ordinary BLS signature over  apk ‖ m,  so the
orchestration needs nothing beyond the back-end's ``sign`` and group
``aggregate``.  Prefixing the aggregate key scopes the signature to one
group: the same key signing the same message under a different
aggregate produces an unrelated value.
"""

from __future__ import annotations

from typing import Optional

from .backend import GroupBackend, get_backend
from .hash import bind_message


def sign(priv, message: bytes, backend: Optional[GroupBackend] = None):
    backend = get_backend(backend)
    return backend.sign(backend.as_private_key(priv), message)


def verify(
    pub,
    message: bytes,
    sig,
    backend: Optional[GroupBackend] = None,
) -> bool:
    """Plain signature check.  Malformed encodings raise ``DecodeError``."""
    backend = get_backend(backend)
    return backend.verify(
        backend.as_public_key(pub), message, backend.as_signature(sig),
    )


def multisign(
    priv,
    message: bytes,
    agg_pub,
    membership_key,
    backend: Optional[GroupBackend] = None,
):
    """
    Member signature over *message* for the group *agg_pub*.

    *membership_key* is this signer's aggregated column from the
    membership round.  The result is what the collector feeds into
    ``multisig.aggregate_signatures`` together with the plain public key.
    """
    backend = get_backend(backend)
    agg_pub = backend.as_public_key(agg_pub)
    membership_key = backend.as_signature(membership_key)
    priv = backend.as_private_key(priv)

    own = backend.sign(priv, bind_message(backend.marshal(agg_pub), message))
    return backend.aggregate(own, membership_key)
