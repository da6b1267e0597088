"""RBAC API -- role introspection for UI gating and administration.

- GET /api/v1/rbac/me -> caller's role, level, permissions, capabilities
- GET /api/v1/rbac/roles -> role catalog ordered by hierarchy level
- GET /api/v1/admin/rbac/roles/{role} -> one role's permission set
  (behind the admin path guard)
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from src.gateway.middleware.rbac import current_role
from src.infra.auth.capabilities import get_role_capabilities
from src.infra.auth.legacy import resolve_role
from src.infra.auth.policy import RbacPolicy  # noqa: TC001 -- closure type only
from src.infra.auth.roles import Role

logger = logging.getLogger(__name__)


class RoleSummaryResponse(BaseModel):
    role: str
    display_name: str
    level: int
    is_admin: bool


class RoleListResponse(BaseModel):
    roles: list[RoleSummaryResponse]
    total: int


class RolePermissionsResponse(RoleSummaryResponse):
    permissions: list[str]


class MyAccessResponse(RolePermissionsResponse):
    capabilities: dict[str, dict[str, bool]]


def create_rbac_router(*, policy: RbacPolicy) -> APIRouter:
    """Create RBAC API router bound to *policy*."""
    router = APIRouter(tags=["rbac"])

    def _summary(role: Role) -> RoleSummaryResponse:
        return RoleSummaryResponse(
            role=str(role),
            display_name=policy.get_role_display_name(role),
            level=policy.get_role_level(role),
            is_admin=policy.is_admin_role(role),
        )

    @router.get("/api/v1/rbac/me", response_model=MyAccessResponse)
    async def my_access(role: Role = Depends(current_role)) -> MyAccessResponse:  # noqa: B008
        """The caller's effective access, for client-side UI gating."""
        return MyAccessResponse(
            **_summary(role).model_dump(),
            permissions=sorted(policy.get_role_permissions(role)),
            capabilities=get_role_capabilities(role, policy=policy).to_dict(),
        )

    @router.get("/api/v1/rbac/roles", response_model=RoleListResponse)
    async def list_roles() -> RoleListResponse:
        roles = sorted(Role, key=policy.get_role_level, reverse=True)
        return RoleListResponse(roles=[_summary(r) for r in roles], total=len(roles))

    @router.get("/api/v1/admin/rbac/roles/{role_name}", response_model=RolePermissionsResponse)
    async def role_permissions(role_name: str) -> RolePermissionsResponse:
        role = resolve_role(role_name)
        if role is None:
            raise HTTPException(status_code=404, detail=f"Unknown role: {role_name}")
        return RolePermissionsResponse(
            **_summary(role).model_dump(),
            permissions=sorted(policy.get_role_permissions(role)),
        )

    return router
