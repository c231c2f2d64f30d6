"""
Error taxonomy for bls-multisig.

Every failure the protocol layer can report is a subclass of
``MultisigError``.  Most also derive from a built-in (``ValueError`` or
``LookupError``) so callers that only care about the broad category can
catch that instead.

A failed cryptographic check is **not** an error: verification routines
return ``False``.  Exceptions are reserved for malformed or inconsistent
input, which fails the same way every time it is supplied.
"""

from __future__ import annotations


class MultisigError(Exception):
    """Base class for all bls-multisig errors."""


class DecodeError(MultisigError, ValueError):
    """Wire bytes, hex, coefficient or message encoding could not be parsed."""


class InputMismatch(MultisigError, ValueError):
    """Public keys and coefficients have different lengths."""


class LengthMismatch(MultisigError, ValueError):
    """Signatures and public keys have different lengths."""


class RaggedMatrix(MultisigError, ValueError):
    """Membership-key matrix is not N x N."""


class InvalidCount(MultisigError, ValueError):
    """A participant / signer count is not positive."""


class InvalidIndex(MultisigError, ValueError):
    """A participant index is out of range."""


class KeyNotFound(MultisigError, LookupError):
    """No private key could be resolved from any configured source."""
