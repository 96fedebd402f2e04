"""
Bearer token authentication.

Participants authenticate with a signed token issued by the identity
provider. The verifier is injected into the application so tests and
deployments can choose how tokens are checked.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import wraps
from typing import Protocol

from aiohttp import web
from jose import JWTError, jwt
from loguru import logger


@dataclass(frozen=True)
class Identity:
    """Verified caller."""

    uid: str
    email: str
    name: str | None = None


class IdentityVerifier(Protocol):
    """Resolves a bearer token to an identity."""

    async def verify(self, token: str) -> Identity | None:
        """Return the identity or None if the token is not valid."""
        ...


class JWTIdentityVerifier:
    """
    Verifies HMAC-signed JWTs.

    Claims: `sub` is the participant id, `email` and `name` are optional.
    """

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        """
        Initialize verifier.

        Args:
            secret: Signing secret (empty rejects every token)
            algorithm: JWT algorithm
        """
        self.secret = secret
        self.algorithm = algorithm

    async def verify(self, token: str) -> Identity | None:
        """Decode and validate a token."""
        if not self.secret or not token:
            return None

        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as e:
            logger.debug("Bearer token rejected", extra={"reason": str(e)})
            return None

        uid = payload.get("sub")
        if not uid:
            return None

        return Identity(
            uid=str(uid),
            email=str(payload.get("email") or ""),
            name=payload.get("name"),
        )


VERIFIER_KEY = web.AppKey("verifier", IdentityVerifier)
ADMIN_EMAILS_KEY = web.AppKey("admin_emails", frozenset)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def bearer_token(request: web.Request) -> str | None:
    """Extract the token from an `Authorization: Bearer ...` header."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def current_identity(request: web.Request) -> Identity:
    """Identity attached by require_auth."""
    return request["identity"]


def require_auth(handler: Handler) -> Handler:
    """Reject requests without a valid bearer token (401)."""

    @wraps(handler)
    async def wrapper(request: web.Request) -> web.StreamResponse:
        token = bearer_token(request)
        identity = None
        if token:
            identity = await request.app[VERIFIER_KEY].verify(token)
        if identity is None:
            return web.json_response({"error": "Unauthorized"}, status=401)

        request["identity"] = identity
        return await handler(request)

    return wrapper


def require_admin(handler: Handler) -> Handler:
    """Reject authenticated callers that are not admins (403)."""

    @wraps(handler)
    async def wrapper(request: web.Request) -> web.StreamResponse:
        identity = current_identity(request)
        if identity.email.lower() not in request.app[ADMIN_EMAILS_KEY]:
            logger.warning(
                "Admin endpoint denied",
                extra={"uid": identity.uid, "path": request.path},
            )
            return web.json_response({"error": "Forbidden"}, status=403)
        return await handler(request)

    return require_auth(wrapper)
