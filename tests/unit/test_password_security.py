"""
Unit tests for member password hashing.
"""

from member_service.members import security


def test_hash_and_verify_with_salt() -> None:
    salt = security.generate_salt()
    hashed = security.hash_password("s3cret", salt)

    assert hashed != "s3cret"
    assert security.verify_password("s3cret", salt, hashed)
    assert not security.verify_password("s3cret", security.generate_salt(), hashed)
    assert not security.verify_password("wrong", salt, hashed)


def test_salts_are_unique() -> None:
    assert security.generate_salt() != security.generate_salt()
    assert len(security.generate_salt()) == 32
