# Tests for credentials.py — Credential pairs, flow variants, PKCE.
# Created: 2026-10-07

import urllib.parse

import pytest

from clientlib.credentials import (
    Credential,
    DirectGrantFlow,
    PkceFlow,
    client_secret_for,
    generate_code_challenge,
    generate_code_verifier,
)


def _cred(value: str) -> Credential:
    return Credential(debug=f"dbg-{value}", release=value)


@pytest.fixture
def pkce_flow():
    return PkceFlow(
        auth_endpoint=_cred("https://sso.example.com/auth"),
        token_endpoint=_cred("https://sso.example.com/token"),
        client_id=_cred("mobile"),
        redirect_url=_cred("app://callback"),
        scope=_cred("openid profile"),
        grant_type=_cred("authorization_code"),
        response_type=_cred("code"),
    )


@pytest.fixture
def direct_flow():
    return DirectGrantFlow(
        token_endpoint=_cred("https://sso.example.com/token"),
        client_id=_cred("backend"),
        client_secret=_cred("s3cret"),
        grant_type=_cred("password"),
    )


class TestCredential:
    def test_release_by_default(self):
        assert Credential(debug="d", release="r").get() == "r"

    def test_debug_build(self, debug_build):
        assert Credential(debug="d", release="r").get() == "d"

    def test_immutable(self):
        cred = Credential(debug="d", release="r")
        with pytest.raises(AttributeError):
            cred.debug = "x"


class TestClientSecret:
    def test_direct_grant_has_secret(self, direct_flow):
        assert client_secret_for(direct_flow) == "s3cret"

    def test_pkce_has_no_secret(self, pkce_flow):
        assert client_secret_for(pkce_flow) is None

    def test_unknown_flow(self):
        with pytest.raises(TypeError):
            client_secret_for(object())


class TestPkce:
    def test_rfc7636_sample(self):
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
        assert generate_code_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"

    def test_verifier_is_urlsafe_without_padding(self):
        verifier = generate_code_verifier()
        assert "=" not in verifier
        assert "+" not in verifier and "/" not in verifier
        # 64 bytes -> 86 base64 chars without padding
        assert len(verifier) == 86

    def test_verifiers_differ(self):
        assert generate_code_verifier() != generate_code_verifier()

    def test_authorization_url(self, pkce_flow):
        url = pkce_flow.authorization_url("challenge123", state="xyz")
        parsed = urllib.parse.urlsplit(url)
        params = dict(urllib.parse.parse_qsl(parsed.query))

        assert url.startswith("https://sso.example.com/auth?")
        assert params["client_id"] == "mobile"
        assert params["redirect_uri"] == "app://callback"
        assert params["code_challenge"] == "challenge123"
        assert params["code_challenge_method"] == "S256"
        assert params["state"] == "xyz"

    def test_authorization_url_without_state(self, pkce_flow):
        assert "state=" not in pkce_flow.authorization_url("c")
