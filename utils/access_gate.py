"""
Access control gate: role-based redirects applied before routing.

`decide` is a pure function of (user id, role, path); the middleware only
resolves the session and turns decisions into redirects.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse

from auth import Role
from auth_utils import extract_token, role_from_claims

logger = logging.getLogger(__name__)

PUBLIC_ROUTES = frozenset({"/", "/api/webhook/register", "/sign-in", "/sign-up"})
ADMIN_ROUTE = re.compile(r"^/admin(.*)$")
PROTECTED_ROUTES = (re.compile(r"^/dashboard(.*)$"), re.compile(r"^/forum(.*)$"))
API_ROUTE = re.compile(r"^/(api|trpc)(/.*)?$")
STATIC_FILE = re.compile(
    r"^/_next|\.(?:html?|css|js(?!on)|jpe?g|webp|png|gif|svg|ttf|woff2?|ico|csv|docx?|xlsx?|zip|webmanifest)$"
)

SERVICE_ROUTES = frozenset({"/health"})

USER_HOME = "/dashboard"
ADMIN_HOME = "/admin/dashboard"
ERROR_PAGE = "/error"
SIGN_IN = "sign-in"  # sentinel target, resolved against settings by the middleware


@dataclass(frozen=True)
class GateDecision:
    allow: bool
    redirect_to: Optional[str] = None

    @classmethod
    def proceed(cls) -> "GateDecision":
        return cls(allow=True)

    @classmethod
    def redirect(cls, target: str) -> "GateDecision":
        return cls(allow=False, redirect_to=target)


def is_admin_route(path: str) -> bool:
    return ADMIN_ROUTE.match(path) is not None


def is_protected_route(path: str) -> bool:
    return any(pattern.match(path) for pattern in PROTECTED_ROUTES)


def home_for(role: Role) -> str:
    return ADMIN_HOME if role is Role.ADMIN else USER_HOME


def decide(user_id: Optional[str], role: Optional[Role], path: str) -> GateDecision:
    """
    Decide whether a page request may proceed.

    Rules, first match wins:
    - anonymous on a protected route -> sign in
    - non-admin on an admin route -> user home
    - admin anywhere outside the admin area -> admin home
    - signed in on a public route -> role home
    """
    if not user_id:
        if is_protected_route(path):
            return GateDecision.redirect(SIGN_IN)
        return GateDecision.proceed()

    role = role or Role.USER
    if role is not Role.ADMIN and is_admin_route(path):
        return GateDecision.redirect(USER_HOME)
    if role is Role.ADMIN and not is_admin_route(path):
        return GateDecision.redirect(ADMIN_HOME)
    if path in PUBLIC_ROUTES:
        return GateDecision.redirect(home_for(role))
    return GateDecision.proceed()


class AccessControlMiddleware(BaseHTTPMiddleware):
    """
    Applies `decide` to page requests. API routes pass straight through;
    their handlers answer 401/403 themselves.
    """

    def __init__(self, app, sign_in_url: str = "/sign-in"):
        super().__init__(app)
        self.sign_in_url = sign_in_url

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if API_ROUTE.match(path) or path in SERVICE_ROUTES or STATIC_FILE.search(path):
            return await call_next(request)

        try:
            user_id, role = await self._resolve(request)
        except Exception as e:
            logger.error(f"Error resolving session role: {e}", exc_info=True)
            return RedirectResponse(ERROR_PAGE, status_code=307)

        decision = decide(user_id, role, path)
        if decision.allow:
            return await call_next(request)
        if decision.redirect_to == SIGN_IN:
            target = f"{self.sign_in_url}?redirect_url={quote(str(request.url), safe='')}"
            return RedirectResponse(target, status_code=307)
        return RedirectResponse(decision.redirect_to, status_code=307)

    async def _resolve(self, request: Request):
        token = extract_token(
            request.cookies.get("__session"),
            request.headers.get("authorization"),
        )
        if not token:
            return None, None

        provider = request.app.state.identity_provider
        claims = await provider.verify_session(token)
        if not claims or not claims.get("sub"):
            return None, None
        return claims["sub"], Role.from_claim(role_from_claims(claims))
