"""Shared fakes for testing without unittest.mock.

- Role groups used across parametrized tests
- make_policy: a real RbacPolicy built from a small fixture table
- install_role_header: stand-in for the upstream auth layer that puts the
  caller's role on request.state
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from src.infra.auth.policy import DEFAULT_POLICY, RbacPolicy
from src.infra.auth.roles import Role

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from fastapi import FastAPI

ROLE_HEADER = "x-test-role"

STAFF_ROLES = tuple(r for r in Role if r not in (Role.AGENT, Role.CLIENT))
NON_ADMIN_ROLES = tuple(r for r in Role if r not in (Role.SUPER_ADMIN, Role.ADMIN))


def make_policy(
    *,
    overrides: Mapping[str, Iterable[str]] | None = None,
    levels: Mapping[str, int] | None = None,
    validate: bool = True,
) -> RbacPolicy:
    """Default policy with some role entries / levels replaced."""
    role_permissions = dict(DEFAULT_POLICY.role_permissions)
    role_permissions.update({r: frozenset(p) for r, p in (overrides or {}).items()})
    hierarchy = dict(DEFAULT_POLICY.hierarchy)
    hierarchy.update(levels or {})
    return RbacPolicy.create(
        hierarchy=hierarchy,
        role_permissions=role_permissions,
        display_names=DEFAULT_POLICY.display_names,
        validate=validate,
    )


def install_role_header(app: FastAPI) -> None:
    """Copy the X-Test-Role header onto request.state.role (outermost middleware)."""

    @app.middleware("http")
    async def _role_from_header(request: Any, call_next: Any) -> Any:
        raw = request.headers.get(ROLE_HEADER)
        if raw is not None:
            request.state.role = raw
        return await call_next(request)


__all__ = [
    "NON_ADMIN_ROLES",
    "ROLE_HEADER",
    "STAFF_ROLES",
    "install_role_header",
    "make_policy",
]
