"""RBAC request guard.

- Role comes from request.state.role (set by the upstream auth layer) and
  is normalised through the legacy role adapter
- Path-prefix rules: a guarded prefix needs ANY of its permissions
- No usable role on a guarded path -> 401, missing permission -> 403
- Route-level FastAPI dependencies mirror the server guards:
  require_role / require_minimum_role / require_permission /
  require_all_permissions

Default rule:
  /api/v1/admin/ -> system:view_settings
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from fastapi import Request  # noqa: TC002 -- resolved at runtime by FastAPI
from fastapi.responses import JSONResponse, Response

from src.infra.auth.legacy import map_legacy_role
from src.infra.auth.permissions import SystemPermission
from src.infra.auth.policy import DEFAULT_POLICY, RbacPolicy
from src.infra.auth.roles import Role  # noqa: TC001 -- resolved at runtime by FastAPI
from src.shared.errors import AuthenticationError, AuthorizationError
from src.shared.logging.error_handler import log_access_denied

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

DEFAULT_ROUTE_RULES: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "/api/v1/admin/": (SystemPermission.VIEW_SETTINGS,),
    }
)


def role_from_request(request: Request) -> Role | None:
    """Canonical role carried by the request, or None."""
    raw = getattr(request.state, "role", None)
    if raw is None:
        return None
    return map_legacy_role(raw)


def policy_from_request(request: Request) -> RbacPolicy:
    return getattr(request.app.state, "rbac_policy", None) or DEFAULT_POLICY


def _log_denial(request: Request, exc: Exception, role: Role | None) -> None:
    log_access_denied(
        logger,
        exc,
        path=request.url.path,
        role=role,
        request_id=request.headers.get("x-request-id", ""),
        tenant_id=request.headers.get("x-tenant-id", ""),
    )


class RBACMiddleware:
    """Enforce role-based access control on guarded path prefixes.

    Can be used as a standalone checker (check_access) or as an HTTP
    middleware callable.
    """

    def __init__(
        self,
        *,
        policy: RbacPolicy | None = None,
        route_rules: Mapping[str, tuple[str, ...]] | None = None,
    ) -> None:
        self._policy = policy or DEFAULT_POLICY
        rules = DEFAULT_ROUTE_RULES if route_rules is None else route_rules
        # Longest prefix wins.
        self._rules = tuple(
            sorted(
                ((prefix, tuple(str(p) for p in perms)) for prefix, perms in rules.items()),
                key=lambda rule: len(rule[0]),
                reverse=True,
            )
        )

    @property
    def policy(self) -> RbacPolicy:
        return self._policy

    async def __call__(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        path = request.url.path
        role = role_from_request(request)

        try:
            self.check_access(path=path, role=role)
        except AuthenticationError as exc:
            return JSONResponse(
                status_code=401,
                content={"error": exc.code, "message": str(exc)},
            )
        except AuthorizationError as exc:
            _log_denial(request, exc, role)
            return JSONResponse(
                status_code=403,
                content={"error": exc.code, "message": str(exc)},
            )

        return await call_next(request)

    def match_rule(self, path: str) -> tuple[str, ...] | None:
        """Permissions guarding *path*, or None if the path is unguarded."""
        for prefix, permissions in self._rules:
            if path.startswith(prefix):
                return permissions
        return None

    def check_access(self, *, path: str, role: Role | str | None) -> None:
        """Check access. Raises AuthenticationError / AuthorizationError."""
        required = self.match_rule(path)
        if required is None:
            return
        if role is None:
            raise AuthenticationError("Role required for this path")
        if not self._policy.has_any_permission(role, required):
            raise AuthorizationError(" | ".join(required))


# -- Route-level dependencies --


def _require_role_present(request: Request) -> Role:
    role = role_from_request(request)
    if role is None:
        raise AuthenticationError("Role required")
    return role


def current_role(request: Request) -> Role:
    """Dependency: the caller's canonical role (401 if absent)."""
    return _require_role_present(request)


def require_role(*allowed: str) -> Callable[[Request], Role]:
    """Dependency factory: caller's role must be one of *allowed*."""
    allowed_set = frozenset(str(r) for r in allowed)

    def _dependency(request: Request) -> Role:
        role = _require_role_present(request)
        if role not in allowed_set:
            exc = AuthorizationError(f"role in {sorted(allowed_set)}")
            _log_denial(request, exc, role)
            raise exc
        return role

    return _dependency


def require_minimum_role(minimum: str) -> Callable[[Request], Role]:
    """Dependency factory: caller's level must be >= that of *minimum*."""

    def _dependency(request: Request) -> Role:
        role = _require_role_present(request)
        if not policy_from_request(request).has_equal_or_higher_role(role, minimum):
            exc = AuthorizationError(f"role >= {minimum}")
            _log_denial(request, exc, role)
            raise exc
        return role

    return _dependency


def require_permission(*permissions: str) -> Callable[[Request], Role]:
    """Dependency factory: caller needs ANY of *permissions*."""
    required = tuple(str(p) for p in permissions)

    def _dependency(request: Request) -> Role:
        role = _require_role_present(request)
        if not policy_from_request(request).has_any_permission(role, required):
            exc = AuthorizationError(" | ".join(required))
            _log_denial(request, exc, role)
            raise exc
        return role

    return _dependency


def require_all_permissions(*permissions: str) -> Callable[[Request], Role]:
    """Dependency factory: caller needs EVERY one of *permissions*."""
    required = tuple(str(p) for p in permissions)

    def _dependency(request: Request) -> Role:
        role = _require_role_present(request)
        if not policy_from_request(request).has_all_permissions(role, required):
            exc = AuthorizationError(" & ".join(required))
            _log_denial(request, exc, role)
            raise exc
        return role

    return _dependency
