import unittest

from bls_multisig.antirogue import generate_aggregate_public_key
from bls_multisig.bitmask import decode
from bls_multisig.errors import DecodeError, LengthMismatch
from bls_multisig.membership import aggregate_matrix, generate_all_parts
from bls_multisig.multisig import aggregate_signatures, verify_multisig
from bls_multisig.signing import multisign, sign, verify

from .toy_backend import ToyBackend

MESSAGE = b"transfer 1 BTC to Alice"


class MultisigTests(unittest.TestCase):
    def setUp(self):
        b = self.backend = ToyBackend()
        pairs = [b.generate_key_pair() for _ in range(3)]
        self.privs = [p for p, _ in pairs]
        self.pubs = [q for _, q in pairs]

        self.apk, self.coefs = generate_aggregate_public_key(self.pubs, b)
        matrix = [
            generate_all_parts(sk, self.apk, a, 3, b)
            for sk, a in zip(self.privs, self.coefs)
        ]
        self.mks = aggregate_matrix(matrix, backend=b)
        self.sigs = [
            multisign(sk, MESSAGE, self.apk, mk, b)
            for sk, mk in zip(self.privs, self.mks)
        ]

    def test_subset_signature(self):
        b = self.backend
        pub, sig = aggregate_signatures(self.sigs, self.pubs, decode("101"), b)

        self.assertEqual(pub, b.aggregate(self.pubs[0], self.pubs[2]))
        self.assertEqual(sig, b.aggregate(self.sigs[0], self.sigs[2]))
        self.assertTrue(verify_multisig(sig, self.apk, pub, MESSAGE, "101", b))
        self.assertFalse(verify_multisig(sig, self.apk, pub, MESSAGE, "111", b))
        self.assertFalse(verify_multisig(sig, self.apk, pub, MESSAGE, "100", b))
        self.assertFalse(verify_multisig(sig, self.apk, pub, b"other", "101", b))

    def test_every_subset(self):
        b = self.backend
        for mask in range(1, 8):
            pub, sig = aggregate_signatures(self.sigs, self.pubs, mask, b)
            self.assertTrue(verify_multisig(sig, self.apk, pub, MESSAGE, mask, b))

    def test_wire_values(self):
        b = self.backend
        sigs = [b.marshal(s).hex() for s in self.sigs]
        pubs = [b.marshal(p).hex() for p in self.pubs]
        pub, sig = aggregate_signatures(sigs, pubs, "011", b)
        self.assertTrue(verify_multisig(
            b.marshal(sig).hex(), b.marshal(self.apk).hex(),
            b.marshal(pub), MESSAGE, "011", b,
        ))

    def test_plain_signature_does_not_verify_as_member(self):
        b = self.backend
        plain = [sign(sk, MESSAGE, b) for sk in self.privs]
        self.assertTrue(verify(self.pubs[0], MESSAGE, plain[0], b))
        pub, sig = aggregate_signatures(plain, self.pubs, "111", b)
        self.assertFalse(verify_multisig(sig, self.apk, pub, MESSAGE, "111", b))

    def test_member_signature_bound_to_membership_key(self):
        b = self.backend
        forged = multisign(self.privs[0], MESSAGE, self.apk, self.mks[1], b)
        pub, sig = aggregate_signatures(
            [forged, self.sigs[1], self.sigs[2]], self.pubs, "001", b,
        )
        self.assertFalse(verify_multisig(sig, self.apk, pub, MESSAGE, "001", b))

    def test_length_mismatch(self):
        with self.assertRaises(LengthMismatch):
            aggregate_signatures(self.sigs, self.pubs[:2], "111", self.backend)
        # raised before anything is decoded
        with self.assertRaises(LengthMismatch):
            aggregate_signatures(["zz"] * 3, ["zz"] * 2, "111", self.backend)

    def test_high_bits_ignored(self):
        b = self.backend
        with self.assertLogs("bls_multisig.multisig", level="WARNING"):
            pub, sig = aggregate_signatures(self.sigs, self.pubs, "1101", b)
        self.assertEqual(pub, b.aggregate(self.pubs[0], self.pubs[2]))
        self.assertEqual(sig, b.aggregate(self.sigs[0], self.sigs[2]))

    def test_empty_selection(self):
        b = self.backend
        pub, sig = aggregate_signatures(self.sigs, self.pubs, "000", b)
        self.assertEqual(pub, b.zero_public_key())
        self.assertEqual(sig, b.zero_signature())

    def test_empty_subset_never_verifies(self):
        b = self.backend
        pub, sig = aggregate_signatures(self.sigs, self.pubs, "000", b)
        for message in (MESSAGE, b"anything at all"):
            self.assertFalse(verify_multisig(sig, self.apk, pub, message, "000", b))
            self.assertFalse(verify_multisig(sig, self.apk, pub, message, 0, b))

    def test_membership_key_alone_does_not_verify(self):
        # mk_j satisfies the pairing equation when the subset key is zero
        b = self.backend
        for j, mask in enumerate(("001", "010", "100")):
            self.assertFalse(verify_multisig(
                self.mks[j], self.apk, b.zero_public_key(), b"forged", mask, b,
            ))

    def test_malformed_unselected_entry(self):
        b = self.backend
        sigs = [b.marshal(s).hex() for s in self.sigs]
        sigs[1] = "nothex"
        with self.assertRaises(DecodeError):
            aggregate_signatures(sigs, self.pubs, "101", b)

    def test_malformed_verify_input(self):
        b = self.backend
        pub, sig = aggregate_signatures(self.sigs, self.pubs, "101", b)
        with self.assertRaises(DecodeError):
            verify_multisig("zz", self.apk, pub, MESSAGE, "101", b)
        with self.assertRaises(DecodeError):
            verify_multisig(sig, "0011", pub, MESSAGE, "101", b)

    def test_multisign_malformed_inputs(self):
        b = self.backend
        with self.assertRaises(DecodeError):
            multisign(self.privs[0], MESSAGE, "zz", self.mks[0], b)
        with self.assertRaises(DecodeError):
            multisign(self.privs[0], MESSAGE, self.apk, "00", b)

    def test_aggregation_associative_commutative(self):
        b = self.backend
        x, y, z = self.sigs
        left = b.aggregate(b.aggregate(x, y), z)
        right = b.aggregate(x, b.aggregate(y, z))
        swapped = b.aggregate(b.aggregate(x, z), y)
        self.assertEqual(left, right)
        self.assertEqual(left, swapped)


if __name__ == "__main__":
    unittest.main()
