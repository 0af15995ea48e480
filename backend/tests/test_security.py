from journal_api.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_password_hash_roundtrip() -> None:
    hashed = hash_password("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("other-pass", hashed)


def test_verify_password_handles_malformed_hash() -> None:
    assert verify_password("anything", "not-a-bcrypt-hash") is False


def test_long_passwords_are_accepted() -> None:
    password = "x" * 100
    assert verify_password(password, hash_password(password))


def test_access_token_subject() -> None:
    token = create_access_token("42", username="alice")
    assert decode_access_token(token) == "42"


def test_expired_or_tampered_tokens_are_rejected() -> None:
    expired = create_access_token("42", expires_minutes=-1)
    assert decode_access_token(expired) is None
    assert decode_access_token(create_access_token("42") + "x") is None
