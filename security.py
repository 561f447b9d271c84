"""
Password hashing (Argon2) and bearer tokens (HS256 JWT).

Nothing here reads settings or touches the database. CredentialVerifier
and TokenService are built once at startup and handed to the services
that need them.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Mapping, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from errors import InvalidTokenError

JWT_ALGORITHM = "HS256"

CLAIM_SUB = "sub"
CLAIM_EMAIL = "email"
CLAIM_ROLE = "role"
CLAIM_IAT = "iat"
CLAIM_EXP = "exp"

REQUIRED_CLAIMS = (CLAIM_SUB, CLAIM_EMAIL, CLAIM_ROLE)

# Hashed once on first use; never matches a stored credential.
_PLACEHOLDER_PASSWORD = "no-such-account"


# -------------------- Passwords --------------------

class CredentialVerifier:
    """Argon2 hashing and verification, built once and injected where needed."""

    def __init__(self, hasher: Optional[PasswordHasher] = None):
        self._hasher = hasher or PasswordHasher()
        self._placeholder_hash: Optional[str] = None

    def hash_password(self, password: str) -> str:
        return self._hasher.hash(password)

    def verify_password(self, password: str, password_hash: str) -> bool:
        if not password_hash:
            # A missing hash costs one full verification, like a wrong password.
            self._verify(password, self._get_placeholder_hash())
            return False
        return self._verify(password, password_hash)

    def _verify(self, password: str, password_hash: str) -> bool:
        try:
            return self._hasher.verify(password_hash, password)
        except (VerificationError, InvalidHashError):
            return False

    def _get_placeholder_hash(self) -> str:
        if self._placeholder_hash is None:
            self._placeholder_hash = self._hasher.hash(_PLACEHOLDER_PASSWORD)
        return self._placeholder_hash


# -------------------- Tokens --------------------

@dataclass(frozen=True)
class TokenClaims:
    sub: str
    email: str
    role: str
    exp: int

    def to_dict(self) -> Dict[str, Any]:
        return {CLAIM_SUB: self.sub, CLAIM_EMAIL: self.email, CLAIM_ROLE: self.role, CLAIM_EXP: self.exp}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def issue_token(
    claims: Mapping[str, Any],
    secret: str,
    ttl_seconds: int,
    now: Optional[datetime] = None,
) -> str:
    missing = [c for c in REQUIRED_CLAIMS if not claims.get(c)]
    if missing:
        raise ValueError(f"Missing claims: {', '.join(missing)}")

    now = now or _utcnow()
    payload = {
        CLAIM_SUB: str(claims[CLAIM_SUB]),
        CLAIM_EMAIL: claims[CLAIM_EMAIL],
        CLAIM_ROLE: claims[CLAIM_ROLE],
        CLAIM_IAT: int(now.timestamp()),
        CLAIM_EXP: int((now + timedelta(seconds=ttl_seconds)).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def verify_token(token: str, secret: str, now: Optional[datetime] = None) -> TokenClaims:
    # Expiry is checked against `now` below so verification stays a function
    # of (token, secret, now).
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            options={
                "verify_exp": False,
                "verify_iat": False,
                "require": [CLAIM_EXP, *REQUIRED_CLAIMS],
            },
        )
    except jwt.PyJWTError as exc:
        raise InvalidTokenError(str(exc)) from exc

    try:
        exp = int(payload[CLAIM_EXP])
    except (TypeError, ValueError) as exc:
        raise InvalidTokenError("Invalid expiration claim") from exc

    now = now or _utcnow()
    if exp <= int(now.timestamp()):
        raise InvalidTokenError("Token has expired")

    return TokenClaims(
        sub=str(payload[CLAIM_SUB]),
        email=str(payload[CLAIM_EMAIL]),
        role=str(payload[CLAIM_ROLE]),
        exp=exp,
    )


class TokenService:
    def __init__(
        self,
        secret: str,
        ttl_seconds: int,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._secret = secret
        self._ttl_seconds = ttl_seconds
        self._clock = clock

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def issue(self, claims: Mapping[str, Any]) -> str:
        return issue_token(claims, self._secret, self._ttl_seconds, now=self._clock())

    def verify(self, token: str) -> TokenClaims:
        return verify_token(token, self._secret, now=self._clock())
