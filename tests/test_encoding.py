import unittest

from bls_multisig.encoding import (
    decode_coefficient,
    decode_hex,
    decode_message,
    encode_coefficient,
    encode_hex,
)
from bls_multisig.errors import DecodeError


class EncodingTests(unittest.TestCase):
    def test_hex(self):
        self.assertEqual(decode_hex("00ff10"), b"\x00\xff\x10")
        self.assertEqual(decode_hex("  0xABcd\n"), b"\xab\xcd")
        self.assertEqual(encode_hex(b"\xab\xcd"), "abcd")

    def test_bad_hex(self):
        for bad in ("zz", "abc", "0xg0", "ab cd", "ab\tcd", "+abc", "0x0x00"):
            with self.assertRaises(DecodeError):
                decode_hex(bad)

    def test_coefficients(self):
        self.assertEqual(encode_coefficient(255), "ff")
        self.assertEqual(decode_coefficient("ff"), 255)
        self.assertEqual(decode_coefficient("0x10"), 16)
        big = 2 ** 255 + 12345
        self.assertEqual(decode_coefficient(encode_coefficient(big)), big)
        for bad in ("", "xyz", "-5", "f_f", "+5", "0x", "1 2"):
            with self.assertRaises(DecodeError):
                decode_coefficient(bad)

    def test_message_sources(self):
        self.assertEqual(decode_message("héllo"), "héllo".encode("utf-8"))
        self.assertEqual(decode_message(data_hex="68656c6c6f"), b"hello")
        self.assertEqual(decode_message(data_base64="aGVsbG8="), b"hello")
        self.assertEqual(decode_message(""), b"")

    def test_message_raw_argv_bytes(self):
        # undecodable argv bytes arrive as surrogate escapes
        self.assertEqual(decode_message("caf\udce9"), b"caf\xe9")
        with self.assertRaises(DecodeError):
            decode_message("\ud800")

    def test_message_source_errors(self):
        with self.assertRaises(DecodeError):
            decode_message()
        with self.assertRaises(DecodeError):
            decode_message("hello", data_hex="00")
        with self.assertRaises(DecodeError):
            decode_message(data_base64="not base64!")
        with self.assertRaises(DecodeError):
            decode_message(data_hex="0g")


if __name__ == "__main__":
    unittest.main()
