"""
Tests for HMAC-signed state and cookie payloads.
"""

from unittest.mock import patch

import pytest

from auth.signing import SignatureError, create_state, sign_payload, verify_payload, verify_state

SECRET = "unit-test-secret"


class TestSignedPayloads:
    def test_payload_survives_signing(self):
        token = sign_payload({"sid": "abc", "user": {"id": "1"}}, SECRET, 60)
        payload = verify_payload(token, SECRET)
        assert payload["sid"] == "abc"
        assert payload["user"] == {"id": "1"}

    def test_wrong_secret_rejected(self):
        token = sign_payload({"sid": "abc"}, SECRET, 60)
        with pytest.raises(SignatureError):
            verify_payload(token, "other-secret")

    def test_tampered_body_rejected(self):
        token = sign_payload({"sid": "abc"}, SECRET, 60)
        forged = sign_payload({"sid": "xyz"}, SECRET, 60).split(".")[0] + "." + token.split(".")[1]
        with pytest.raises(SignatureError):
            verify_payload(forged, SECRET)

    @pytest.mark.parametrize("token", ["", "no-dot", "!!!.abc", "e30.ünïcode"])
    def test_malformed_tokens_rejected(self, token):
        with pytest.raises(SignatureError):
            verify_payload(token, SECRET)

    def test_expired_token_rejected(self):
        with patch("auth.signing.time.time", return_value=1_000_000):
            token = sign_payload({"sid": "abc"}, SECRET, 60)
        with patch("auth.signing.time.time", return_value=1_000_061):
            with pytest.raises(SignatureError, match="expired"):
                verify_payload(token, SECRET)


class TestOAuthState:
    def test_state_is_bound_to_provider(self):
        state = create_state("google", SECRET, 600)
        verify_state(state, "google", SECRET)
        with pytest.raises(SignatureError):
            verify_state(state, "github", SECRET)

    def test_states_are_unique(self):
        assert create_state("google", SECRET, 600) != create_state("google", SECRET, 600)
