"""Tests for password hashing and session token signing."""

from cloudbook.core.security import (
    PLACEHOLDER_PASSWORD_HASH,
    decode_token,
    hash_password,
    sign_token,
    verify_password,
)


class TestPasswordHashing:
    def test_hash_is_salted_and_not_plaintext(self) -> None:
        first = hash_password("pw123456", iterations=1_000)
        second = hash_password("pw123456", iterations=1_000)
        assert "pw123456" not in first
        assert first != second
        assert first.startswith("pbkdf2_sha256$1000$")

    def test_verify_matches_only_the_original_password(self) -> None:
        stored = hash_password("pw123456", iterations=1_000)
        assert verify_password("pw123456", stored)
        assert not verify_password("pw1234567", stored)

    def test_placeholder_and_garbage_never_verify(self) -> None:
        assert not verify_password("-", PLACEHOLDER_PASSWORD_HASH)
        assert not verify_password("anything", "not-a-hash")
        assert not verify_password("anything", None)


class TestSessionTokens:
    def test_round_trip_carries_claims(self) -> None:
        token = sign_token({"uid": 7, "email": "ann@x.com"}, secret="s3cret", ttl_seconds=60, now=1_000)
        claims = decode_token(token, secret="s3cret", now=1_030)
        assert claims == {"uid": 7, "email": "ann@x.com", "iat": 1_000, "exp": 1_060}

    def test_expired_token_is_rejected(self) -> None:
        token = sign_token({"uid": 7, "email": "ann@x.com"}, secret="s3cret", ttl_seconds=60, now=1_000)
        assert decode_token(token, secret="s3cret", now=1_060) is None

    def test_wrong_key_is_rejected(self) -> None:
        token = sign_token({"uid": 7, "email": "ann@x.com"}, secret="s3cret", ttl_seconds=60)
        assert decode_token(token, secret="other", now=None) is None

    def test_tampered_payload_is_rejected(self) -> None:
        token = sign_token({"uid": 7, "email": "ann@x.com"}, secret="s3cret", ttl_seconds=60)
        forged = sign_token({"uid": 8, "email": "ann@x.com"}, secret="guess", ttl_seconds=60)
        tampered = forged.split(".")[0] + "." + token.split(".")[1]
        assert decode_token(tampered, secret="s3cret") is None

    def test_malformed_tokens_are_rejected(self) -> None:
        for token in ("", "abc", "a.b.c", "!!!.???"):
            assert decode_token(token, secret="s3cret") is None
