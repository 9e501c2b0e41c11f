"""
Authentication utilities: session token verification
"""

import jwt
from typing import Iterable, Optional

# Clerk signs session tokens with RS256
ALGORITHM = "RS256"

# Tolerated clock skew between Clerk and this server, in seconds
LEEWAY_SECONDS = 5


def decode_session_token(
    token: str,
    key,
    authorized_parties: Optional[Iterable[str]] = None,
) -> Optional[dict]:
    """
    Verify a session JWT and return its claims. Returns None if invalid.

    Args:
        token: Raw session token
        key: Public key (PEM string or key object) the token must be signed with
        authorized_parties: If given, the `azp` claim must be one of these
    """
    try:
        payload = jwt.decode(
            token,
            key,
            algorithms=[ALGORITHM],
            leeway=LEEWAY_SECONDS,
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None

    parties = list(authorized_parties or [])
    if parties and payload.get("azp") not in parties:
        return None
    return payload


def role_from_claims(claims: Optional[dict]) -> Optional[str]:
    """Read the role a session carries in its `metadata` custom claim."""
    if not claims:
        return None
    metadata = claims.get("metadata") or {}
    if not isinstance(metadata, dict):
        return None
    return metadata.get("role")


def extract_token(auth_token: Optional[str], authorization: Optional[str]) -> Optional[str]:
    """
    Pick the session token from the `__session` cookie (preferred) or a
    `Bearer` Authorization header.
    """
    if auth_token:
        return auth_token
    if authorization and authorization.startswith("Bearer "):
        return authorization.replace("Bearer ", "", 1).strip() or None
    return None
