"""
FastAPI application for Port Sentry.

Routes are thin: they validate input, check the session and hand off to the
port control engine.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import NoReturn

from fastapi import FastAPI, Depends, HTTPException, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

from . import __version__
from .auth import SessionGate, SessionIdentity, get_current_session, get_session_gate
from .config import settings, warn_insecure_defaults
from .inventory import (
    ExecutionError,
    OperationError,
    PortControlEngine,
    PrivilegeRequiredError,
)
from .schemas import (
    LoginRequest,
    LoginResponse,
    SessionResponse,
    PortResponse,
    PortListResponse,
    ProcessActionRequest,
    ProcessActionResponse,
    ServiceRestartRequest,
    ServiceRestartResponse,
    PortBlockRequest,
    PortBlockResponse,
)

logger = logging.getLogger(__name__)

REQUIRED_TOOLS = ("ss", "iptables", "systemctl", "kill")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    warn_insecure_defaults(settings)

    runner = app.state.engine.runner
    for tool in REQUIRED_TOOLS:
        if not runner.command_exists(tool):
            logger.warning(f"{tool} not found on PATH")
    if not runner.has_elevated_privileges():
        logger.warning("Not running as root: port listing and all actions will be refused")
    print(f"✓ {settings.app_name} {__version__} started ({settings.environment})")
    print("✓ API docs available at http://localhost:8000/docs")

    yield

    print(f"✓ {settings.app_name} stopped")


app = FastAPI(
    title=settings.app_name,
    description="Inspect listening ports and take corrective action on the local host",
    version=__version__,
    lifespan=lifespan,
)

# Created once per process and reached through dependencies
app.state.session_gate = SessionGate.from_settings(settings)
app.state.engine = PortControlEngine()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_engine(request: Request) -> PortControlEngine:
    """Return the engine created at startup."""
    return request.app.state.engine


def raise_for_engine_error(e: Exception) -> NoReturn:
    """Translate an engine failure into a single HTTP error."""
    if isinstance(e, PrivilegeRequiredError):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


# ============================================================================
# Authentication Endpoints
# ============================================================================


@app.post("/api/auth/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    response: Response,
    gate: SessionGate = Depends(get_session_gate),
):
    """
    Login endpoint.
    Sets the session cookie and also returns the token for bearer use.
    """
    if not gate.verify_credentials(request.username, request.password):
        logger.warning(f"Failed login attempt for user {request.username!r}")
        # Slow down brute force attempts
        await asyncio.sleep(settings.login_failure_delay_seconds)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password"
        )

    token = gate.issue(request.username)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=gate.max_age_seconds,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    return LoginResponse(
        success=True, message="Login successful", redirect="/dashboard", access_token=token
    )


@app.post("/api/auth/logout", response_model=LoginResponse)
async def logout(response: Response):
    """Delete the session cookie."""
    response.delete_cookie(
        key=settings.session_cookie_name, path="/", httponly=True, samesite="lax"
    )
    return LoginResponse(success=True, message="Logout successful", redirect="/login")


@app.get("/api/auth/me", response_model=SessionResponse)
async def get_current_session_info(session: SessionIdentity = Depends(get_current_session)):
    """Get current session information."""
    return SessionResponse(
        username=session.username,
        session_id=session.session_id,
        expires_at=session.expires_at,
    )


# ============================================================================
# Port Endpoints
# ============================================================================


@app.get("/api/ports", response_model=PortListResponse)
async def list_ports(
    session: SessionIdentity = Depends(get_current_session),
    engine: PortControlEngine = Depends(get_engine),
):
    """Get all listening ports with process, service and block status."""
    try:
        ports = await run_in_threadpool(engine.list_inventory)
    except (PrivilegeRequiredError, ExecutionError) as e:
        raise_for_engine_error(e)

    return PortListResponse(
        ports=[PortResponse.model_validate(p) for p in ports],
        timestamp=int(time.time() * 1000),
        total_ports=len(ports),
    )


@app.post("/api/ports/kill", response_model=ProcessActionResponse)
async def kill_process(
    request: ProcessActionRequest,
    session: SessionIdentity = Depends(get_current_session),
    engine: PortControlEngine = Depends(get_engine),
):
    """Terminate a process by PID."""
    try:
        await run_in_threadpool(engine.kill_process, request.pid)
    except (PrivilegeRequiredError, OperationError, ExecutionError) as e:
        raise_for_engine_error(e)

    return ProcessActionResponse(
        success=True,
        message=f"Process {request.pid} has been terminated",
        pid=request.pid,
        port=request.port,
    )


@app.post("/api/ports/restart", response_model=ServiceRestartResponse)
async def restart_service(
    request: ServiceRestartRequest,
    session: SessionIdentity = Depends(get_current_session),
    engine: PortControlEngine = Depends(get_engine),
):
    """Restart a systemd service."""
    try:
        await run_in_threadpool(engine.restart_service, request.service_name)
    except (PrivilegeRequiredError, OperationError, ExecutionError) as e:
        raise_for_engine_error(e)

    return ServiceRestartResponse(
        success=True,
        message=f"Service {request.service_name} has been restarted",
        service_name=request.service_name,
    )


@app.post("/api/ports/block", response_model=PortBlockResponse)
async def block_port(
    request: PortBlockRequest,
    session: SessionIdentity = Depends(get_current_session),
    engine: PortControlEngine = Depends(get_engine),
):
    """Block a port with an iptables DROP rule."""
    try:
        await run_in_threadpool(engine.block_port, request.port, request.protocol)
    except (PrivilegeRequiredError, OperationError, ExecutionError) as e:
        raise_for_engine_error(e)

    return PortBlockResponse(
        success=True,
        message=f"Port {request.port} ({request.protocol}) has been blocked",
        port=request.port,
        protocol=request.protocol,
        is_blocked=True,
    )


@app.post("/api/ports/unblock", response_model=PortBlockResponse)
async def unblock_port(
    request: PortBlockRequest,
    session: SessionIdentity = Depends(get_current_session),
    engine: PortControlEngine = Depends(get_engine),
):
    """Unblock a port by removing its iptables DROP rule."""
    try:
        await run_in_threadpool(engine.unblock_port, request.port, request.protocol)
    except (PrivilegeRequiredError, OperationError, ExecutionError) as e:
        raise_for_engine_error(e)

    return PortBlockResponse(
        success=True,
        message=f"Port {request.port} ({request.protocol}) has been unblocked",
        port=request.port,
        protocol=request.protocol,
        is_blocked=False,
    )


# ============================================================================
# Health Endpoint
# ============================================================================


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "port-sentry-api", "version": __version__}


def run():
    """Console entry point."""
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
