from datetime import timedelta

from synergysphere.core import security


def test_password_hash_and_verify():
    hashed = security.get_password_hash("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert security.verify_password("s3cret-pass", hashed)
    assert not security.verify_password("wrong", hashed)


def test_verify_password_rejects_empty_or_malformed_hash():
    assert not security.verify_password("anything", "")
    assert not security.verify_password("anything", "not-a-bcrypt-hash")


def test_long_passwords_are_truncated_consistently():
    long_password = "x" * 100
    hashed = security.get_password_hash(long_password)
    assert security.verify_password("x" * 72, hashed)


def test_access_token_roundtrip():
    token, expire = security.create_access_token({"sub": "42"})
    payload = security.verify_access_token(token)
    assert payload["sub"] == "42"
    assert payload["type"] == "access"
    assert expire is not None


def test_expired_access_token_is_rejected():
    token, _ = security.create_access_token({"sub": "42"}, expires_delta=timedelta(seconds=-1))
    assert security.verify_access_token(token) is None


def test_refresh_token_is_not_an_access_token():
    refresh, _ = security.create_refresh_token({"sub": "42"})
    assert security.verify_access_token(refresh) is None
    assert security.verify_refresh_token(refresh)["sub"] == "42"


def test_refresh_tokens_are_unique():
    first, _ = security.create_refresh_token({"sub": "42"})
    second, _ = security.create_refresh_token({"sub": "42"})
    assert first != second


def test_access_token_is_not_a_refresh_token():
    token, _ = security.create_access_token({"sub": "42"})
    assert security.verify_refresh_token(token) is None
    assert security.verify_access_token("garbage") is None


def test_reset_tokens_are_random():
    assert security.generate_reset_token() != security.generate_reset_token()
