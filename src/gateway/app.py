"""FastAPI application factory for the RBAC surface.

- /healthz: unguarded
- /api/v1/rbac/*: role introspection (src.gateway.api.rbac)
- /api/v1/admin/*: guarded by RBACMiddleware path rules
- Platform errors render as {error, message}: 401 / 403 / 500

The role itself is placed on request.state.role by the upstream auth
layer; this app never authenticates.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from src.gateway.api.rbac import create_rbac_router
from src.gateway.middleware.rbac import RBACMiddleware
from src.infra.auth.policy import RbacPolicy, load_policy_from_env
from src.shared.errors import AuthenticationError, AuthorizationError, DigiComplyError

logger = logging.getLogger(__name__)


def create_app(
    *,
    policy: RbacPolicy | None = None,
    route_rules: Mapping[str, tuple[str, ...]] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        policy: RBAC policy to enforce. Falls back to RBAC_POLICY_FILE,
            then to the built-in default policy.
        route_rules: Path prefix -> permissions (any-of) for the guard.

    Returns:
        Configured FastAPI application.
    """
    active_policy = policy or load_policy_from_env()

    app = FastAPI(
        title="DigiComply RBAC",
        description="Role-based access control for the compliance platform",
        version="0.1.0",
    )
    app.state.rbac_policy = active_policy
    guard = RBACMiddleware(policy=active_policy, route_rules=route_rules)
    app.state.rbac_guard = guard

    # -- Error handlers --

    @app.exception_handler(AuthenticationError)
    async def _auth_error(_: Request, exc: AuthenticationError) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content={"error": exc.code, "message": str(exc)},
        )

    @app.exception_handler(AuthorizationError)
    async def _authz_error(_: Request, exc: AuthorizationError) -> JSONResponse:
        return JSONResponse(
            status_code=403,
            content={"error": exc.code, "message": str(exc)},
        )

    @app.exception_handler(DigiComplyError)
    async def _platform_error(_: Request, exc: DigiComplyError) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content={"error": exc.code, "message": str(exc)},
        )

    # -- RBAC guard --

    @app.middleware("http")
    async def rbac_middleware(request: Request, call_next: Any) -> Response:
        return await guard(request, call_next)

    # -- Routes --

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(create_rbac_router(policy=active_policy))

    logger.info("RBAC app assembled: %d routes mounted", len(app.routes))
    return app
