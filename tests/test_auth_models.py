# Tests for auth/models.py — JWT payload decoding, Auth record, AuthErr.
# Created: 2026-10-07

import base64
import json

import pytest

from clientlib.auth.models import Auth, AuthErr, parse_jwt


def _b64(data: dict) -> str:
    return base64.urlsafe_b64encode(json.dumps(data).encode()).decode().rstrip("=")


CLAIMS = {
    "exp": 1760000000,
    "iat": 1759990000,
    "auth_time": 1759990000,
    "jti": "jti-1",
    "iss": "https://sso.example.com/realms/app",
    "aud": "mobile",
    "sub": "user-1",
    "typ": "ID",
    "azp": "mobile",
    "sid": "sid-1",
    "at_hash": "hash",
    "acr": "1",
    "email_verified": True,
    "preferred_username": "ada",
    "email": "ada@example.com",
}


def _jwt(claims: dict) -> str:
    return f"{_b64({'alg': 'RS256'})}.{_b64(claims)}.signature"


def _auth(**overrides) -> Auth:
    data = {
        "access_token": "access-1",
        "expires_in": 300,
        "refresh_expires_in": 1800,
        "refresh_token": "refresh-1",
        "token_type": "Bearer",
        "not-before-policy": 0,
        "session_state": "state-1",
        "scope": "openid profile",
    }
    data.update(overrides)
    return Auth.model_validate(data)


class TestParseJwt:
    def test_decodes_payload(self):
        assert json.loads(parse_jwt(_jwt(CLAIMS)))["sub"] == "user-1"

    @pytest.mark.parametrize("payload", [{"a": 1}, {"ab": 12}, {"abc": 123}])
    def test_restores_padding(self, payload):
        assert json.loads(parse_jwt(_jwt(payload))) == payload

    def test_rejects_wrong_part_count(self):
        with pytest.raises(ValueError, match="format"):
            parse_jwt("only.two")

    def test_rejects_impossible_length(self):
        with pytest.raises(ValueError, match="length"):
            parse_jwt("a.abcde.c")


class TestAuth:
    def test_parses_token_endpoint_response(self):
        auth = _auth()
        assert auth.access_token == "access-1"
        assert auth.not_before_policy == 0
        assert auth.id_token is None

    def test_json_uses_wire_names(self):
        data = json.loads(_auth().to_json())
        assert "not-before-policy" in data
        assert Auth.model_validate_json(_auth().to_json()) == _auth()

    def test_ignores_unknown_fields(self):
        assert _auth(extra_field="x").access_token == "access-1"

    def test_oidc_user(self):
        user = _auth(id_token=_jwt(CLAIMS)).oidc_user()
        assert user is not None
        assert user.preferred_username == "ada"
        assert user.email == "ada@example.com"
        assert user.name is None

    def test_oidc_user_without_id_token(self):
        assert _auth().oidc_user() is None

    def test_oidc_user_with_garbage_token(self):
        assert _auth(id_token="not-a-jwt").oidc_user() is None

    def test_oidc_user_with_missing_claims(self):
        assert _auth(id_token=_jwt({"sub": "x"})).oidc_user() is None


class TestAuthErr:
    def test_wire_names(self):
        err = AuthErr.model_validate({"error": "invalid_grant", "error_description": "expired"})
        assert err.err_type == "invalid_grant"
        assert str(err) == "invalid_grant : expired"

    @pytest.mark.parametrize(
        "err_type,expected",
        [("invalid_grant", True), ("invalid_token", True), ("unauthorized_client", False)],
    )
    def test_refresh_token_invalid(self, err_type, expected):
        err = AuthErr(err_type=err_type, description="")
        assert err.is_refresh_token_invalid() is expected

    def test_error_response(self):
        body = AuthErr(err_type="invalid_grant", description="").to_error_response()
        assert body.code == 401
        assert body.status == "UNAUTHORIZED"
        assert body.error.message == "Unauthorized"
