from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import jwt
import pytest
from argon2 import PasswordHasher

from auth import AuthService
from errors import InvalidTokenError, UnauthorizedError
from security import CredentialVerifier, TokenService, issue_token, verify_token
from services import AccountService
from stores import InMemoryStore

pytestmark = pytest.mark.unit

SECRET = "test-secret"
CLAIMS = {"sub": "64b7f0c2a1b2c3d4e5f60718", "email": "jane@example.com", "role": "user"}
ISSUED_AT = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def credentials():
    return CredentialVerifier()


class TestPasswords:
    def test_verify_accepts_matching_password(self, credentials):
        stored = credentials.hash_password("secret")
        assert stored != "secret"
        assert credentials.verify_password("secret", stored) is True

    def test_verify_rejects_wrong_password(self, credentials):
        assert credentials.verify_password("wrong", credentials.hash_password("secret")) is False

    @pytest.mark.parametrize("stored", ["", "not-a-hash", "$argon2id$broken"])
    def test_verify_returns_false_for_malformed_hash(self, credentials, stored):
        assert credentials.verify_password("secret", stored) is False

    def test_missing_hash_still_runs_a_verification(self):
        hasher = Mock(wraps=PasswordHasher())
        credentials = CredentialVerifier(hasher)

        assert credentials.verify_password("no-such-account", "") is False
        assert credentials.verify_password("secret", "") is False
        assert hasher.verify.call_count == 2
        # the placeholder hash is computed once
        assert hasher.hash.call_count == 1


class TestLogin:
    @pytest.fixture
    def hasher(self):
        return Mock(wraps=PasswordHasher())

    @pytest.fixture
    def auth(self, hasher):
        credentials = CredentialVerifier(hasher)
        accounts = AccountService(InMemoryStore("user"), credentials)
        accounts.create({"name": "Jane", "email": "jane@example.com", "password": "secret"})
        return AuthService(accounts, TokenService(SECRET, 60), credentials)

    def test_unknown_email_runs_the_same_verification(self, auth, hasher):
        with pytest.raises(UnauthorizedError) as exc:
            auth.login("ghost@example.com", "secret")
        assert exc.value.message == "Invalid credentials"
        assert hasher.verify.call_count == 1

    def test_wrong_password(self, auth, hasher):
        with pytest.raises(UnauthorizedError) as exc:
            auth.login("jane@example.com", "nope")
        assert exc.value.message == "Invalid credentials"
        assert hasher.verify.call_count == 1

    def test_success_issues_token(self, auth):
        claims = TokenService(SECRET, 60).verify(auth.login(" Jane@Example.com ", "secret"))
        assert claims.email == "jane@example.com"
        assert claims.role == "user"


class TestTokens:
    def test_round_trip_before_expiry(self):
        token = issue_token(CLAIMS, SECRET, 3600, now=ISSUED_AT)
        claims = verify_token(token, SECRET, now=ISSUED_AT + timedelta(minutes=59))

        assert claims.sub == CLAIMS["sub"]
        assert claims.email == CLAIMS["email"]
        assert claims.role == CLAIMS["role"]
        assert claims.exp == int((ISSUED_AT + timedelta(hours=1)).timestamp())

    def test_expired_token_fails(self):
        token = issue_token(CLAIMS, SECRET, 3600, now=ISSUED_AT)
        with pytest.raises(InvalidTokenError):
            verify_token(token, SECRET, now=ISSUED_AT + timedelta(hours=1))

    def test_wrong_secret_fails(self):
        token = issue_token(CLAIMS, SECRET, 3600, now=ISSUED_AT)
        with pytest.raises(InvalidTokenError):
            verify_token(token, "other-secret", now=ISSUED_AT)

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_malformed_token_fails(self, token):
        with pytest.raises(InvalidTokenError):
            verify_token(token, SECRET, now=ISSUED_AT)

    def test_token_without_role_fails(self):
        exp = int((ISSUED_AT + timedelta(hours=1)).timestamp())
        token = jwt.encode({"sub": "x", "email": "x@example.com", "exp": exp}, SECRET, algorithm="HS256")
        with pytest.raises(InvalidTokenError):
            verify_token(token, SECRET, now=ISSUED_AT)

    def test_issue_requires_core_claims(self):
        with pytest.raises(ValueError):
            issue_token({"sub": "x"}, SECRET, 60)

    def test_service_uses_its_clock(self):
        now = {"value": ISSUED_AT}
        service = TokenService(SECRET, 60, clock=lambda: now["value"])
        token = service.issue(CLAIMS)

        assert service.verify(token).role == "user"

        now["value"] = ISSUED_AT + timedelta(seconds=61)
        with pytest.raises(InvalidTokenError):
            service.verify(token)
