"""
Blog Backend — Password Hashing & Token Tests
===============================================
"""

import uuid
from datetime import timedelta

import pytest
from jose import jwt

from app.config import settings
from app.services.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


class TestPasswords:

    def test_hash_is_not_plaintext(self):
        hashed = hash_password("correct-horse-battery")

        assert hashed != "correct-horse-battery"
        assert verify_password("correct-horse-battery", hashed)

    def test_wrong_password(self):
        hashed = hash_password("correct-horse-battery")
        assert not verify_password("wrong-horse", hashed)

    def test_malformed_hash_never_raises(self):
        assert not verify_password("anything", "not-a-hash")
        assert not verify_password("anything", "")

    def test_empty_password_rejected(self):
        with pytest.raises(ValueError):
            hash_password("")


class TestAccessTokens:

    def test_round_trip(self):
        author_id = uuid.uuid4()
        assert decode_access_token(create_access_token(author_id)) == author_id

    def test_expired_token(self):
        token = create_access_token(uuid.uuid4(), expires_delta=timedelta(seconds=-5))
        assert decode_access_token(token) is None

    def test_tampered_signature(self):
        token = create_access_token(uuid.uuid4())
        forged = jwt.encode(jwt.get_unverified_claims(token), "another-key", algorithm="HS256")
        assert decode_access_token(forged) is None

    def test_wrong_token_type(self):
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "type": "refresh"},
            settings.secret_key,
            algorithm=settings.jwt_algorithm,
        )
        assert decode_access_token(token) is None

    def test_non_uuid_subject(self):
        token = jwt.encode(
            {"sub": "admin", "type": "access"},
            settings.secret_key,
            algorithm=settings.jwt_algorithm,
        )
        assert decode_access_token(token) is None

    def test_not_a_token(self):
        assert decode_access_token("definitely not a jwt") is None
