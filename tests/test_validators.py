import unittest

from nsqwire.validators import (
    is_integer,
    is_unsigned_integer,
    is_valid_message_id,
    is_valid_name,
)


class IntegerValidatorTestCase(unittest.TestCase):
    def test_is_integer(self):
        for value in (0, 1, -1, 2 ** 70, 3.0, -2.0):
            with self.subTest(f"{value!r} is an integer"):
                self.assertTrue(is_integer(value))

        for value in (1.5, float("inf"), float("-inf"), float("nan"), "1", None, True):
            with self.subTest(f"{value!r} is not an integer"):
                self.assertFalse(is_integer(value))

    def test_is_unsigned_integer(self):
        for value in (0, 1, 100.0):
            with self.subTest(f"{value!r} is unsigned"):
                self.assertTrue(is_unsigned_integer(value))

        for value in (-1, -0.5, 1.5, float("inf"), False):
            with self.subTest(f"{value!r} is not unsigned"):
                self.assertFalse(is_unsigned_integer(value))


class NameValidatorTestCase(unittest.TestCase):
    def test_valid_names(self):
        for name in ("topic.1-A_b", "a", "x" * 64, "abc#ephemeral", "_-."):
            with self.subTest(f"{name!r} is valid"):
                self.assertTrue(is_valid_name(name))

    def test_invalid_names(self):
        invalid = (
            "",
            "a" * 65,
            "abc#ephemera",
            "abc#ephemeralx",
            "#ephemeral",
            "has space",
            "semi;colon",
            "abc\n",
            "café",
            b"topic",
            None,
        )
        for name in invalid:
            with self.subTest(f"{name!r} is invalid"):
                self.assertFalse(is_valid_name(name))

    def test_ephemeral_suffix_counts_towards_length(self):
        self.assertTrue(is_valid_name("a" * 54 + "#ephemeral"))
        self.assertFalse(is_valid_name("a" * 55 + "#ephemeral"))


class MessageIdValidatorTestCase(unittest.TestCase):
    def test_valid_message_ids(self):
        for message_id in (
            "0123456789abcdef",
            "0123456789ABCDEF",
            "0a1B2c3D4e5F6a7B",
            b"0123456789abcdef",
            bytearray(b"fedcba9876543210"),
            memoryview(b"ffffffffffffffff"),
        ):
            with self.subTest(f"{message_id!r} is valid"):
                self.assertTrue(is_valid_message_id(message_id))

    def test_invalid_message_ids(self):
        for message_id in (
            "0123456789abcde",
            "0123456789abcdef0",
            "0123456789abcdeg",
            "0123456789abcde ",
            "０123456789abcde",
            b"\xff" * 16,
            1234567890123456,
            None,
        ):
            with self.subTest(f"{message_id!r} is invalid"):
                self.assertFalse(is_valid_message_id(message_id))


if __name__ == "__main__":
    unittest.main()
