import unittest
from unittest.mock import patch

import jwt
from fastapi import HTTPException

from stockledger.config import Settings
from stockledger.core.security import authenticate_request

SECRET = "test-secret-with-enough-bytes-for-hs256"


def _settings(**overrides):
    values = {"API_KEYS": "key-one, key-two", "JWT_SECRET": SECRET}
    values.update(overrides)
    return Settings(**values)


class AuthenticateRequestTest(unittest.TestCase):
    def test_api_key(self):
        with patch("stockledger.core.security.get_settings", return_value=_settings()):
            identity = authenticate_request(api_key="key-two", authorization=None)
        self.assertEqual(identity["auth_type"], "api_key")

    def test_wrong_api_key_is_rejected(self):
        with patch("stockledger.core.security.get_settings", return_value=_settings()):
            with self.assertRaises(HTTPException) as ctx:
                authenticate_request(api_key="nope", authorization=None)
        self.assertEqual(ctx.exception.status_code, 401)

    def test_bearer_jwt(self):
        token = jwt.encode({"sub": "user-1"}, SECRET, algorithm="HS256")
        with patch("stockledger.core.security.get_settings", return_value=_settings()):
            identity = authenticate_request(api_key=None, authorization="Bearer {}".format(token))
        self.assertEqual(identity["auth_type"], "jwt")
        self.assertEqual(identity["subject"], "user-1")

    def test_jwt_signed_with_other_secret(self):
        token = jwt.encode({"sub": "user-1"}, "another-secret-with-enough-bytes-too", algorithm="HS256")
        with patch("stockledger.core.security.get_settings", return_value=_settings()):
            with self.assertRaises(HTTPException) as ctx:
                authenticate_request(api_key=None, authorization="Bearer {}".format(token))
        self.assertEqual(ctx.exception.status_code, 401)

    def test_jwt_without_configured_secret(self):
        token = jwt.encode({"sub": "user-1"}, SECRET, algorithm="HS256")
        with patch("stockledger.core.security.get_settings", return_value=_settings(JWT_SECRET=None)):
            with self.assertRaises(HTTPException) as ctx:
                authenticate_request(api_key=None, authorization="Bearer {}".format(token))
        self.assertEqual(ctx.exception.status_code, 401)

    def test_no_credentials(self):
        with patch("stockledger.core.security.get_settings", return_value=_settings()):
            with self.assertRaises(HTTPException) as ctx:
                authenticate_request(api_key=None, authorization="Basic abc")
        self.assertEqual(ctx.exception.status_code, 401)
        self.assertEqual(ctx.exception.detail, "Authentication required")


if __name__ == "__main__":
    unittest.main()
