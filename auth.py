"""
Login and the role gate.

Routes declare the roles they need when they are registered:

    @app.post("/products", dependencies=[Depends(require_roles(Role.ADMIN))])

The gate runs before the route body. A denied request never reaches a
service, so no store is touched.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, FrozenSet, Iterable, Optional

from fastapi import Header, Request

from errors import ForbiddenError, InvalidTokenError, UnauthorizedError
from logger import logger
from security import CredentialVerifier, TokenClaims, TokenService
from services import AccountService

REASON_NO_TOKEN = "no token"
REASON_INVALID_TOKEN = "invalid token"
REASON_INSUFFICIENT_ROLE = "insufficient role"


class GateDecision(str, Enum):
    ALLOWED = "allowed"
    DENIED = "denied"


@dataclass(frozen=True)
class GateResult:
    decision: GateDecision
    reason: Optional[str] = None
    claims: Optional[TokenClaims] = None

    @property
    def allowed(self) -> bool:
        return self.decision is GateDecision.ALLOWED


def extract_bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def evaluate_gate(
    required_roles: Iterable[str],
    authorization: Optional[str],
    tokens: TokenService,
) -> GateResult:
    required = frozenset(str(getattr(r, "value", r)) for r in required_roles)
    if not required:
        return GateResult(GateDecision.ALLOWED)

    token = extract_bearer(authorization)
    if token is None:
        return GateResult(GateDecision.DENIED, REASON_NO_TOKEN)

    try:
        claims = tokens.verify(token)
    except InvalidTokenError:
        return GateResult(GateDecision.DENIED, REASON_INVALID_TOKEN)

    if claims.role not in required:
        return GateResult(GateDecision.DENIED, REASON_INSUFFICIENT_ROLE, claims)

    return GateResult(GateDecision.ALLOWED, claims=claims)


def require_roles(*roles: str) -> Callable[..., Optional[TokenClaims]]:
    required: FrozenSet[str] = frozenset(str(getattr(r, "value", r)) for r in roles)

    def dependency(
        request: Request,
        authorization: Optional[str] = Header(None),
    ) -> Optional[TokenClaims]:
        tokens = request.app.state.container.tokens
        result = evaluate_gate(required, authorization, tokens)
        if not result.allowed:
            logger.warning(
                "Access denied",
                extra={"reason": result.reason, "required_roles": sorted(required)},
            )
            if result.reason == REASON_INSUFFICIENT_ROLE:
                raise ForbiddenError("Insufficient role")
            raise UnauthorizedError("No token provided" if result.reason == REASON_NO_TOKEN else "Invalid token")
        request.state.claims = result.claims
        return result.claims

    return dependency


class AuthService:
    def __init__(self, accounts: AccountService, tokens: TokenService, credentials: CredentialVerifier):
        self._accounts = accounts
        self._tokens = tokens
        self._credentials = credentials

    def login(self, email: str, password: str) -> str:
        account = self._accounts.find_by_email(email)
        password_hash = account.get("password_hash", "") if account else ""
        # Unknown email and wrong password get the same check and the same message.
        verified = self._credentials.verify_password(password, password_hash)
        if not account or not verified:
            logger.info("Login failed")
            raise UnauthorizedError("Invalid credentials")

        return self._tokens.issue(
            {
                "sub": str(account["_id"]),
                "email": account["email"],
                "role": account.get("role", "user"),
            }
        )
