import unittest
from datetime import timedelta

from backend.security import (
    InvalidToken,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


class PasswordTests(unittest.TestCase):
    def test_hash_verifies_only_original_password(self) -> None:
        hashed = hash_password("correct horse")

        self.assertNotEqual(hashed, "correct horse")
        self.assertTrue(verify_password("correct horse", hashed))
        self.assertFalse(verify_password("battery staple", hashed))


class TokenTests(unittest.TestCase):
    def test_round_trip_returns_user_id(self) -> None:
        token = create_access_token(42, "secret")

        self.assertEqual(decode_access_token(token, "secret"), 42)

    def test_wrong_secret_is_invalid(self) -> None:
        token = create_access_token(42, "secret")

        with self.assertRaises(InvalidToken):
            decode_access_token(token, "other")

    def test_expired_token_is_invalid(self) -> None:
        token = create_access_token(42, "secret", expires_in=timedelta(minutes=-1))

        with self.assertRaises(InvalidToken):
            decode_access_token(token, "secret")

    def test_malformed_token_is_invalid(self) -> None:
        with self.assertRaises(InvalidToken):
            decode_access_token("abc.def.ghi", "secret")


if __name__ == "__main__":
    unittest.main()
