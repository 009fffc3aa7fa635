"""API Gateway - FastAPI application for the device allow-list.

Host-facing endpoints:
    POST /login/enforce
    GET/POST /verify-device

Admin endpoints live under /admin and answer mutations with the
{"success": ..., "data": {"message": ...}} envelope.
"""

import logging, os, threading
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncGenerator, List, Optional
from uuid import uuid4

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from device_guard.api.schemas import (
    AdminMessage,
    AdminResponse,
    DeleteDeviceRequest,
    DeviceListResponse,
    DeviceResponse,
    EnforceLoginRequest,
    ErrorResponse,
    FormTokenResponse,
    LoginOutcomeResponse,
    ResetDevicesRequest,
    SettingsResponse,
    UpdateSettingsRequest,
    VerifyDeviceRequest,
    VerifyDeviceResponse,
)
from device_guard.api.service import DeviceGuardService
from device_guard.common.exceptions import (
    AuthorizationError,
    DeviceGuardException,
    ForgeryTokenError,
    NotFoundError,
    ValidationError,
)
from device_guard.common.logging import configure_logging
from device_guard.core.types import LoginAction, VerificationOutcome, VerificationStatus
from device_guard.data.schemas import Account
from device_guard.devices.identity import ClientTokenStore
from device_guard.enforcement.verification import SessionHost

configure_logging()
logger = logging.getLogger(__name__)

AUTHENTICATED_USER_HEADER = "X-Authenticated-User"
ADMIN_PREFIX = "/admin"


class ServiceManager:
    """Thread-safe service singleton manager."""

    _instance: Optional[DeviceGuardService] = None
    _lock = threading.Lock()
    _initialized = False

    @classmethod
    def get_service(cls) -> DeviceGuardService:
        """Get or create the service instance (thread-safe)."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = DeviceGuardService()
                    cls._initialized = True
                    logger.info("DeviceGuardService initialized")
        return cls._instance

    @classmethod
    def shutdown(cls) -> None:
        """Drop the service instance."""
        with cls._lock:
            if cls._instance is not None:
                cls._instance = None
                cls._initialized = False
                logger.info("DeviceGuardService shutdown complete")


def get_service() -> DeviceGuardService:
    """Get the service instance."""
    return ServiceManager.get_service()


# =============================================================================
# REQUEST ADAPTERS
# =============================================================================

class CookieTokenStore(ClientTokenStore):
    """Device id cookie of the current request.

    A token set during the request is held until `apply` writes it onto
    the outgoing response.
    """

    def __init__(self, request: Request, cookie_name: str):
        self.request = request
        self.cookie_name = cookie_name
        self._pending: Optional[str] = None
        self._max_age: Optional[timedelta] = None

    def get(self) -> Optional[str]:
        if self._pending is not None:
            return self._pending
        return self.request.cookies.get(self.cookie_name)

    def set(self, value: str, max_age: timedelta) -> None:
        self._pending = value
        self._max_age = max_age

    def apply(self, response) -> None:
        if self._pending is None:
            return
        response.set_cookie(
            key=self.cookie_name,
            value=self._pending,
            max_age=int(self._max_age.total_seconds()),
            path="/",
            httponly=True,
            secure=self.request.url.scheme == "https",
            samesite="lax",
        )


class HeaderSessionHost(SessionHost):
    """Session state as reported by the host through a request header."""

    def __init__(self, request: Request):
        self.authenticated_user = request.headers.get(AUTHENTICATED_USER_HEADER)
        self.established_for: Optional[str] = None

    def is_authenticated(self, account: Account) -> bool:
        return self.authenticated_user == account.username

    def establish(self, account: Account) -> None:
        # The host logs the account in when it sees session_established.
        self.established_for = account.username


def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


def current_actor(request: Request, service: DeviceGuardService) -> Optional[Account]:
    """Account named by the host's session header, if any."""
    username = request.headers.get(AUTHENTICATED_USER_HEADER)
    if not username:
        return None
    return service.store.get_by_name(username)


# =============================================================================
# CORS CONFIGURATION
# =============================================================================

def get_cors_origins() -> List[str]:
    """Get allowed CORS origins from environment.

    In production, set DEVICE_GUARD_CORS_ORIGINS to a comma-separated list
    of allowed origins.
    """
    origins_env = os.environ.get("DEVICE_GUARD_CORS_ORIGINS", "")

    if origins_env:
        return [origin.strip() for origin in origins_env.split(",") if origin.strip()]

    if os.environ.get("DEVICE_GUARD_ENVIRONMENT", "development") == "production":
        logger.warning(
            "DEVICE_GUARD_CORS_ORIGINS not set in production. "
            "CORS will be disabled."
        )
        return []

    logger.warning("Running in development mode with permissive CORS (allow_origins=['*'])")
    return ["*"]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info("Device Guard API starting up...")
    get_service()
    logger.info("Device Guard API ready")

    yield

    logger.info("Device Guard API shutting down...")
    ServiceManager.shutdown()


environment = os.environ.get("DEVICE_GUARD_ENVIRONMENT", "development")
enable_docs_default = "false" if environment == "production" else "true"
enable_docs = os.environ.get("DEVICE_GUARD_ENABLE_DOCS", enable_docs_default).lower() == "true"

app = FastAPI(
    title="Device Guard API",
    description="Per-account device allow-list with emailed one-time codes.",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if enable_docs else None,
    redoc_url="/redoc" if enable_docs else None,
)

cors_origins = get_cors_origins()
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["POST", "GET", "PUT"],
        allow_headers=["Content-Type", AUTHENTICATED_USER_HEADER, "X-Request-ID"],
    )


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

def _status_for(exc: DeviceGuardException) -> int:
    if isinstance(exc, (ForgeryTokenError, AuthorizationError)):
        return 403
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ValidationError):
        return 400
    return 500


@app.exception_handler(DeviceGuardException)
async def device_guard_error_handler(request: Request, exc: DeviceGuardException) -> JSONResponse:
    """Map domain errors to JSON responses."""
    request_id = getattr(request.state, "request_id", None)
    status_code = _status_for(exc)
    logger.warning(
        f"{exc.code}: {exc.message}",
        extra={"request_id": request_id, "path": request.url.path},
    )

    if status_code == 500:
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="internal_error",
                message="An unexpected error occurred",
                request_id=request_id,
            ).model_dump(),
        )

    if request.url.path.startswith(ADMIN_PREFIX):
        content = AdminResponse(
            success=False, data=AdminMessage(message=exc.message)
        ).model_dump()
    else:
        content = ErrorResponse(
            error=exc.code.lower(),
            message=exc.message,
            request_id=request_id,
        ).model_dump()
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected errors.

    Logs full exception for debugging but returns sanitized message to client.
    """
    request_id = getattr(request.state, "request_id", None)
    logger.exception(
        "Unexpected error",
        extra={"request_id": request_id, "error_type": type(exc).__name__}
    )
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="internal_error",
            message="An unexpected error occurred",
            request_id=request_id,
        ).model_dump(),
    )


# =============================================================================
# MIDDLEWARE
# =============================================================================

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID to each request for tracing."""
    request_id = f"req_{uuid4().hex[:12]}"
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# =============================================================================
# HOST ENDPOINTS
# =============================================================================

@app.post(
    "/login/enforce",
    response_model=LoginOutcomeResponse,
    responses={
        200: {"description": "Login allowed or redirected to verification", "model": LoginOutcomeResponse},
        403: {"description": "Login rejected", "model": LoginOutcomeResponse},
        404: {"description": "Unknown account", "model": ErrorResponse},
    },
    summary="Enforce the device allow-list on a password-verified login",
)
def enforce_login(
    body: EnforceLoginRequest,
    request: Request,
    service: DeviceGuardService = Depends(get_service),
) -> JSONResponse:
    account = service.store.get_by_name(body.username)
    if account is None:
        raise NotFoundError("Unknown account", details={"username": body.username})

    token_store = CookieTokenStore(request, service.client_token_name)
    outcome = service.enforce_login(
        account,
        body.username,
        token_store,
        user_agent=request.headers.get("user-agent"),
        ip_address=client_ip(request),
    )

    payload = LoginOutcomeResponse(
        outcome=outcome.action.value,
        redirect_to=outcome.url,
        error=outcome.kind.value if outcome.kind else None,
        message=outcome.message,
    )
    status_code = 403 if outcome.action == LoginAction.REJECT else 200
    response = JSONResponse(status_code=status_code, content=payload.model_dump())
    token_store.apply(response)
    return response


def _verification_response(
    outcome: VerificationOutcome,
    username: str,
    service: DeviceGuardService,
    session: HeaderSessionHost,
) -> VerifyDeviceResponse:
    form_token = None
    if outcome.status in (VerificationStatus.FORM, VerificationStatus.RETRY):
        form_token = service.verification.form_token(username)
    return VerifyDeviceResponse(
        status=outcome.status.value,
        redirect_to=outcome.redirect_to,
        form_token=form_token,
        error=outcome.error,
        session_established=session.established_for is not None,
    )


@app.get("/verify-device", response_model=VerifyDeviceResponse)
def open_verification(
    request: Request,
    log: str = Query(default=""),
    service: DeviceGuardService = Depends(get_service),
) -> VerifyDeviceResponse:
    """State of the verification page for the username in `log`."""
    token_store = CookieTokenStore(request, service.client_token_name)
    session = HeaderSessionHost(request)
    outcome = service.verification.open(log, token_store, session)
    return _verification_response(outcome, log, service, session)


@app.post(
    "/verify-device",
    response_model=VerifyDeviceResponse,
    responses={403: {"description": "Invalid form token", "model": ErrorResponse}},
)
def submit_verification(
    body: VerifyDeviceRequest,
    request: Request,
    service: DeviceGuardService = Depends(get_service),
) -> VerifyDeviceResponse:
    token_store = CookieTokenStore(request, service.client_token_name)
    session = HeaderSessionHost(request)
    outcome = service.verification.submit(
        body.log, body.code, body.form_token, token_store, session
    )
    return _verification_response(outcome, body.log, service, session)


# =============================================================================
# ADMIN ENDPOINTS
# =============================================================================

@app.get("/admin/form-token", response_model=FormTokenResponse)
def issue_form_token(
    request: Request,
    action: str = Query(...),
    service: DeviceGuardService = Depends(get_service),
) -> FormTokenResponse:
    actor = current_actor(request, service)
    return FormTokenResponse(action=action, form_token=service.admin.form_token(actor, action))


@app.get("/admin/accounts/{account_id}/devices", response_model=DeviceListResponse)
def list_devices(
    account_id: str,
    request: Request,
    service: DeviceGuardService = Depends(get_service),
) -> DeviceListResponse:
    actor = current_actor(request, service)
    devices = service.admin.list_devices(actor, account_id)
    return DeviceListResponse(
        account_id=account_id,
        devices=[DeviceResponse(**record.model_dump(mode="json")) for record in devices],
    )


@app.post("/admin/devices/delete", response_model=AdminResponse)
def delete_device(
    body: DeleteDeviceRequest,
    request: Request,
    service: DeviceGuardService = Depends(get_service),
) -> AdminResponse:
    actor = current_actor(request, service)
    result = service.admin.remove_device(
        actor, body.account_id, body.device_id, body.form_token
    )
    return AdminResponse(success=result.success, data=AdminMessage(message=result.message))


@app.post("/admin/accounts/{account_id}/reset-devices", response_model=AdminResponse)
def reset_devices(
    account_id: str,
    body: ResetDevicesRequest,
    request: Request,
    service: DeviceGuardService = Depends(get_service),
) -> AdminResponse:
    actor = current_actor(request, service)
    result = service.admin.reset_devices(actor, account_id, body.form_token)
    return AdminResponse(success=result.success, data=AdminMessage(message=result.message))


@app.get("/admin/settings", response_model=SettingsResponse)
def get_settings(
    request: Request,
    service: DeviceGuardService = Depends(get_service),
) -> SettingsResponse:
    actor = current_actor(request, service)
    return SettingsResponse(device_limit=service.admin.get_device_limit(actor))


@app.put("/admin/settings", response_model=AdminResponse)
def update_settings(
    body: UpdateSettingsRequest,
    request: Request,
    service: DeviceGuardService = Depends(get_service),
) -> AdminResponse:
    actor = current_actor(request, service)
    result = service.admin.update_device_limit(actor, body.device_limit, body.form_token)
    return AdminResponse(success=result.success, data=AdminMessage(message=result.message))


# =============================================================================
# PROBES
# =============================================================================

@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy", "service": "device-guard"}


@app.get("/ready")
async def readiness_check() -> dict:
    """Readiness check endpoint.

    Returns 503 until the service singleton is initialized.
    """
    if not ServiceManager._initialized:
        raise HTTPException(status_code=503, detail="not_ready")
    return {"status": "ready", "service": "device-guard"}


# =============================================================================
# DEVELOPMENT SERVER
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "device_guard.api.gateway:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
