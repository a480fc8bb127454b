"""
Authorization Service Server

Builds the FastAPI application: stores, lifecycle manager, guards,
the sub-admin router and the error handlers that render AuthzError.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .channels.subadmin_router import create_subadmin_router
from .config.schema import AppConfig, LoggingConfig, StorageConfig
from .core.auth.context import PrincipalHeaderMiddleware
from .core.auth.guards import PermissionGuards
from .core.auth.lifecycle import GrantLifecycleManager
from .core.errors import AuthzError, StoreError
from .data.repos.grants import GrantRepository
from .data.repos.principals import PrincipalRepository

logger = logging.getLogger(__name__)


def configure_logging(config: LoggingConfig, debug: bool = False) -> None:
    """Configure root and audit logging."""
    logging.basicConfig(
        level=logging.DEBUG if debug else getattr(logging, config.level, logging.INFO),
        format=config.format,
    )
    logging.getLogger("jobboard_authz.audit").setLevel(
        getattr(logging, config.audit_level, logging.INFO)
    )


def create_store_client(storage: StorageConfig) -> Any:
    """
    Create the database client for the configured store.

    Returns None for the in-memory store.
    """
    if storage.is_memory:
        logger.warning("Using in-memory store; grants are lost on restart")
        return None

    if storage.type == "supabase":
        if not storage.url or not storage.key:
            raise ValueError("Supabase storage requires 'url' and 'key'")
        from supabase import create_client

        logger.info(f"Connecting to Supabase at {storage.url}")
        return create_client(storage.url, storage.key)

    raise ValueError(f"Unknown storage type: {storage.type}")


async def handle_authz_error(request: Request, exc: AuthzError) -> JSONResponse:
    """Render domain errors as the service's JSON envelope."""
    if isinstance(exc, StoreError):
        # Full detail stays in the server log
        logger.error(
            f"Store error on {request.method} {request.url.path}: {exc}",
            exc_info=exc.__cause__ or exc,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.message},
        )

    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message, **exc.details},
    )


VALIDATION_MESSAGES = {
    ("body", "userId", "missing"): "User ID is required",
    ("body", "userId", None): "Invalid user ID",
    ("body", "isActive", None): "isActive must be true or false",
    ("query", "isActive", None): "isActive must be true or false",
    ("path", "grant_id", None): "Invalid sub-admin ID",
}


def _validation_message(error: dict) -> str:
    loc = error.get("loc", ())
    source = loc[0] if loc else None
    field = loc[1] if len(loc) > 1 else None
    for key in ((source, field, error.get("type")), (source, field, None)):
        if key in VALIDATION_MESSAGES:
            return VALIDATION_MESSAGES[key]
    if source == "body" and field is None:
        return "Request body must be a JSON object"
    return f"Invalid {field or source}: {error.get('msg', 'invalid value')}"


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request parsing failures as 400 in the service's JSON envelope."""
    errors = exc.errors()
    message = _validation_message(errors[0]) if errors else "Invalid request"
    logger.info(f"Rejected request {request.method} {request.url.path}: {message}")
    return JSONResponse(status_code=400, content={"success": False, "message": message})


def create_app(
    config: Optional[AppConfig] = None,
    grants: Optional[GrantRepository] = None,
    principals: Optional[PrincipalRepository] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config: Service configuration (defaults to AppConfig())
        grants: Grant repository (defaults to one built from config.storage)
        principals: Principal repository (defaults to one built from config.storage)
    """
    config = config or AppConfig()

    if grants is None or principals is None:
        client = create_store_client(config.storage)
        grants = grants or GrantRepository(client)
        principals = principals or PrincipalRepository(client)

    lifecycle = GrantLifecycleManager(grants, principals)
    guards = PermissionGuards(grants)

    app = FastAPI(
        title=config.name,
        description=config.description,
        version=config.version or __version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if config.auth.trust_headers:
        logger.warning(
            "Trusting principal identity from request headers; do not enable in production"
        )
        app.add_middleware(
            PrincipalHeaderMiddleware,
            id_header=config.auth.principal_header,
            role_header=config.auth.role_header,
        )

    app.add_exception_handler(AuthzError, handle_authz_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    app.state.config = config
    app.state.grants = grants
    app.state.principals = principals
    app.state.lifecycle = lifecycle
    app.state.guards = guards

    app.include_router(
        create_subadmin_router(lifecycle, guards),
        prefix=config.server.api_prefix,
    )

    @app.get("/health")
    async def health():
        return {"status": "ok", "service": config.name, "version": config.version}

    return app


async def run_server(config: AppConfig, host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Serve the application with uvicorn until interrupted."""
    app = create_app(config)
    host = host or config.server.host
    port = port or config.server.port

    logger.info(f"Authorization service started on http://{host}:{port}")
    logger.info(f"  Sub-admins: http://{host}:{port}{config.server.api_prefix}/sub-admins")

    server_config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level=config.logging.level.lower(),
    )
    server = uvicorn.Server(server_config)
    await server.serve()
