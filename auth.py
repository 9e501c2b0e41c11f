"""
Identity provider adapter and authentication dependencies
"""

import enum
import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Protocol

import httpx
import jwt
from fastapi import Cookie, Depends, Header, HTTPException, Request
from starlette.concurrency import run_in_threadpool
from svix.webhooks import Webhook

from auth_utils import decode_session_token, extract_token, role_from_claims
from config.settings import Settings

logger = logging.getLogger(__name__)

# Timeout for calls to the identity provider's backend API, in seconds
PROVIDER_TIMEOUT = 10.0


class Role(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"

    @classmethod
    def from_claim(cls, value: Optional[str]) -> "Role":
        return cls.ADMIN if value == cls.ADMIN.value else cls.USER


@dataclass(frozen=True)
class Identity:
    user_id: str
    role: Role = Role.USER
    claims: dict = field(default_factory=dict)


class IdentityProvider(Protocol):
    async def verify_session(self, token: str) -> Optional[dict]: ...

    async def get_role(self, user_id: str) -> Optional[str]: ...

    def verify_webhook_signature(self, body: bytes, headers: dict) -> None: ...


class ClerkIdentityProvider:
    """
    Clerk adapter: session JWTs are checked locally (PEM key or JWKS),
    roles come from the user's public metadata through the Backend API,
    and webhooks are verified with Svix.
    """

    def __init__(
        self,
        webhook_secret: Optional[str],
        secret_key: Optional[str] = None,
        api_url: str = "https://api.clerk.com/v1",
        jwt_key: Optional[str] = None,
        jwks_url: Optional[str] = None,
        authorized_parties: Optional[Iterable[str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not webhook_secret:
            raise ValueError("WEBHOOK_SECRET is not found")

        self._webhook = Webhook(webhook_secret)
        self.secret_key = secret_key
        self.api_url = api_url.rstrip("/")
        self.jwt_key = jwt_key
        self.authorized_parties = list(authorized_parties or [])
        self._transport = transport
        self._jwks_client = jwt.PyJWKClient(jwks_url) if jwks_url and not jwt_key else None

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClerkIdentityProvider":
        return cls(
            webhook_secret=settings.webhook_secret,
            secret_key=settings.clerk_secret_key,
            api_url=settings.clerk_api_url,
            jwt_key=settings.clerk_jwt_key,
            jwks_url=settings.clerk_jwks_url,
            authorized_parties=settings.clerk_authorized_parties,
        )

    async def verify_session(self, token: str) -> Optional[dict]:
        key = self.jwt_key
        if key is None:
            if self._jwks_client is None:
                logger.warning("Neither CLERK_JWT_KEY nor CLERK_JWKS_URL is set. Cannot verify sessions.")
                return None
            try:
                # PyJWKClient fetches over blocking urllib
                signing_key = await run_in_threadpool(self._jwks_client.get_signing_key_from_jwt, token)
            except jwt.PyJWTError as e:
                logger.warning(f"Could not resolve session signing key: {e}")
                return None
            key = signing_key.key
        return decode_session_token(token, key, self.authorized_parties)

    async def get_role(self, user_id: str) -> Optional[str]:
        if not user_id:
            return None
        if not self.secret_key:
            logger.warning("CLERK_SECRET_KEY is not set. Cannot fetch user roles.")
            return None

        try:
            async with httpx.AsyncClient(timeout=PROVIDER_TIMEOUT, transport=self._transport) as client:
                response = await client.get(
                    f"{self.api_url}/users/{user_id}",
                    headers={"Authorization": f"Bearer {self.secret_key}"},
                )
        except httpx.HTTPError as e:
            logger.error(f"Error fetching user role: {e}")
            return None

        if response.status_code != 200:
            logger.warning(f"Clerk returned {response.status_code} for user {user_id}")
            return None

        metadata = response.json().get("public_metadata") or {}
        return metadata.get("role")

    def verify_webhook_signature(self, body: bytes, headers: dict) -> None:
        """
        Check the Svix signature only; the caller decodes the body.
        Raises svix.webhooks.WebhookVerificationError when it does not match.
        """
        self._webhook.verify(body, headers)


def get_identity_provider(request: Request) -> IdentityProvider:
    """Dependency returning the provider built at startup."""
    provider = getattr(request.app.state, "identity_provider", None)
    if provider is None:
        raise RuntimeError("Identity provider is not initialized")
    return provider


async def get_current_identity(
    auth_token: Optional[str] = Cookie(None, alias="__session"),
    authorization: Optional[str] = Header(None, alias="Authorization"),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> Identity:
    """
    Dependency resolving the caller from the session cookie (preferred) or
    a Bearer token. Raises 401 if neither yields a valid session.
    """
    token = extract_token(auth_token, authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized")

    claims = await provider.verify_session(token)
    if not claims or not claims.get("sub"):
        raise HTTPException(status_code=401, detail="Unauthorized")

    return Identity(
        user_id=claims["sub"],
        role=Role.from_claim(role_from_claims(claims)),
        claims=claims,
    )


async def require_admin(
    identity: Identity = Depends(get_current_identity),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> Identity:
    """Dependency for admin routes. The role is re-read from the provider."""
    role = Role.from_claim(await provider.get_role(identity.user_id))
    if role is not Role.ADMIN:
        raise HTTPException(status_code=403, detail="Forbidden")
    return replace(identity, role=role)
