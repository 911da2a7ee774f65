import jwt
import pytest

from faststart_api.errors import UnauthorizedError
from faststart_api.services.auth import TOKEN_ISSUER, get_bearer_token, make_jwt, validate_jwt


class TestBearerToken:
    def test_extracts_token(self):
        assert get_bearer_token({"authorization": "Bearer abc.def.ghi"}) == "abc.def.ghi"

    @pytest.mark.parametrize("value", ["", "Bearer", "Bearer   ", "Basic abc", "abc"])
    def test_rejects_malformed(self, value):
        with pytest.raises(UnauthorizedError):
            get_bearer_token({"authorization": value})

    def test_missing_header(self):
        with pytest.raises(UnauthorizedError):
            get_bearer_token({})


class TestJwt:
    def test_round_trip_subject(self):
        assert validate_jwt(make_jwt("user-1", "s3cret"), "s3cret") == "user-1"

    def test_wrong_secret(self):
        with pytest.raises(UnauthorizedError):
            validate_jwt(make_jwt("user-1", "s3cret"), "other")

    def test_expired(self):
        with pytest.raises(UnauthorizedError):
            validate_jwt(make_jwt("user-1", "s3cret", expires_in=-60), "s3cret")

    def test_wrong_issuer(self):
        token = jwt.encode({"iss": "someone-else", "sub": "user-1", "exp": 9999999999}, "s3cret", algorithm="HS256")
        with pytest.raises(UnauthorizedError):
            validate_jwt(token, "s3cret")

    def test_subject_required(self):
        token = jwt.encode({"iss": TOKEN_ISSUER, "exp": 9999999999}, "s3cret", algorithm="HS256")
        with pytest.raises(UnauthorizedError):
            validate_jwt(token, "s3cret")
