"""
Todo Master backend
Personal todo lists, an admin console API and Clerk user provisioning
"""

from pathlib import Path
import logging
import traceback

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from auth import ClerkIdentityProvider
from config.settings import settings
from database import init_db
from routers.admin_router import admin_router
from routers.todos_router import todos_router
from routers.webhook_router import webhook_router
from utils.access_gate import AccessControlMiddleware
from utils.responses import error_response

# Logging setup - write ALL events to /logs/app.log
LOGS_DIR = Path("./logs")
LOGS_DIR.mkdir(exist_ok=True)
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(LOGS_DIR / "app.log"),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Todo Master")


# Uncaught exception middleware - logs all unhandled exceptions and returns 500
class UncaughtExceptionMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Uncaught exception: {e}\n{traceback.format_exc()}")
            return JSONResponse(
                status_code=500,
                content={"ok": False, "error": "Internal Server Error"}
            )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc: StarletteHTTPException):
    return error_response(str(exc.detail), status=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc: RequestValidationError):
    return error_response("Invalid request", status=400)


app.add_middleware(AccessControlMiddleware, sign_in_url=settings.sign_in_url)
app.add_middleware(UncaughtExceptionMiddleware)

# CORS MUST be near the bottom
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# STARTUP
# ============================================================================
@app.on_event("startup")
async def initialize_identity_provider():
    """Build the Clerk adapter. A missing webhook secret aborts startup."""
    try:
        app.state.identity_provider = ClerkIdentityProvider.from_settings(settings)
    except ValueError as e:
        logger.error(f"Identity provider configuration failed: {e}")
        raise RuntimeError(str(e)) from e

    missing = []
    if not settings.clerk_secret_key:
        missing.append("CLERK_SECRET_KEY")
    if not (settings.clerk_jwt_key or settings.clerk_jwks_url):
        missing.append("CLERK_JWT_KEY or CLERK_JWKS_URL")
    if missing:
        logger.warning(f"Startup check: Missing environment variables: {', '.join(missing)}")
    else:
        logger.info("Startup check: All identity provider settings are present")


@app.on_event("startup")
async def initialize_database():
    """Create all tables."""
    try:
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise


# ============================================================================
# INCLUDE ROUTERS
# ============================================================================
app.include_router(admin_router)
app.include_router(webhook_router)
app.include_router(todos_router)


@app.get("/health")
async def health():
    return {"status": "Todo Master backend running"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
