"""RBAC request guard tests.

Validates:
- Admin API returns 403 (AuthorizationError) for non-admin roles
- Admin API allows super_admin and admin
- Missing or unrecognised role on a guarded path is 401
- Unguarded paths pass for every role
- Route-level dependencies: require_role / require_minimum_role /
  require_permission / require_all_permissions
"""

from __future__ import annotations

import logging

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from src.gateway.app import create_app
from src.gateway.middleware.rbac import (
    DEFAULT_ROUTE_RULES,
    RBACMiddleware,
    require_all_permissions,
    require_minimum_role,
    require_permission,
    require_role,
)
from src.infra.auth.permissions import Permissions
from src.infra.auth.roles import Role
from src.shared.errors import AuthenticationError, AuthorizationError
from tests.fakes import NON_ADMIN_ROLES, ROLE_HEADER, install_role_header, make_policy

P = Permissions


@pytest.mark.unit
class TestRBACMiddleware:
    """Enforce role-based access on guarded path prefixes."""

    @pytest.fixture
    def rbac(self) -> RBACMiddleware:
        return RBACMiddleware()

    def test_default_rule_guards_admin_prefix(self, rbac: RBACMiddleware) -> None:
        assert DEFAULT_ROUTE_RULES == {"/api/v1/admin/": (P.SYSTEM.VIEW_SETTINGS,)}
        assert rbac.match_rule("/api/v1/admin/users") == ("system:view_settings",)
        assert rbac.match_rule("/api/v1/services") is None

    def test_default_rules_read_only(self) -> None:
        with pytest.raises(TypeError):
            DEFAULT_ROUTE_RULES["/api/v1/"] = ()  # type: ignore[index]

    @pytest.mark.smoke
    @pytest.mark.parametrize("role", NON_ADMIN_ROLES)
    def test_admin_api_denied_for_non_admin(self, rbac: RBACMiddleware, role: Role) -> None:
        with pytest.raises(AuthorizationError):
            rbac.check_access(path="/api/v1/admin/users", role=role)

    @pytest.mark.smoke
    @pytest.mark.parametrize("role", [Role.SUPER_ADMIN, Role.ADMIN])
    def test_admin_api_allowed_for_admins(self, rbac: RBACMiddleware, role: Role) -> None:
        rbac.check_access(path="/api/v1/admin/users", role=role)

    @pytest.mark.parametrize("role", list(Role))
    def test_regular_api_allowed(self, rbac: RBACMiddleware, role: Role) -> None:
        rbac.check_access(path="/api/v1/services", role=role)

    def test_regular_api_allowed_without_role(self, rbac: RBACMiddleware) -> None:
        rbac.check_access(path="/api/v1/services", role=None)

    def test_missing_role_on_guarded_path(self, rbac: RBACMiddleware) -> None:
        with pytest.raises(AuthenticationError):
            rbac.check_access(path="/api/v1/admin/settings", role=None)

    def test_unknown_role_denied(self, rbac: RBACMiddleware) -> None:
        with pytest.raises(AuthorizationError):
            rbac.check_access(path="/api/v1/admin/settings", role="intern")

    def test_error_includes_required_permission(self, rbac: RBACMiddleware) -> None:
        with pytest.raises(AuthorizationError) as exc_info:
            rbac.check_access(path="/api/v1/admin/settings", role=Role.CLIENT)
        assert "system:view_settings" in str(exc_info.value)
        assert exc_info.value.code == "AUTH_DENIED"

    def test_longest_prefix_wins(self) -> None:
        rbac = RBACMiddleware(
            route_rules={
                "/api/v1/": (P.AUTH.LOGIN,),
                "/api/v1/payments/": (P.PAYMENTS.VIEW_ALL, P.PAYMENTS.VIEW_OWN),
                "/api/v1/payments/refunds/": (P.PAYMENTS.REFUND,),
            }
        )
        assert rbac.match_rule("/api/v1/payments/refunds/42") == ("payments:refund",)
        assert rbac.match_rule("/api/v1/payments/42") == ("payments:view_all", "payments:view_own")
        assert rbac.match_rule("/api/v1/leads") == ("auth:login",)
        assert rbac.match_rule("/healthz") is None

    def test_rule_needs_any_listed_permission(self) -> None:
        rbac = RBACMiddleware(
            route_rules={"/api/v1/payments/": (P.PAYMENTS.VIEW_ALL, P.PAYMENTS.VIEW_OWN)}
        )
        # client only holds view_own
        rbac.check_access(path="/api/v1/payments/1", role=Role.CLIENT)
        with pytest.raises(AuthorizationError) as exc_info:
            rbac.check_access(path="/api/v1/payments/1", role=Role.HR_MANAGER)
        assert "payments:view_all | payments:view_own" in str(exc_info.value)

    def test_empty_rules_guard_nothing(self) -> None:
        rbac = RBACMiddleware(route_rules={})
        rbac.check_access(path="/api/v1/admin/users", role=None)

    def test_uses_injected_policy(self) -> None:
        policy = make_policy(overrides={Role.HR_MANAGER: {P.AUTH.LOGIN, P.SYSTEM.VIEW_SETTINGS}})
        rbac = RBACMiddleware(policy=policy)
        assert rbac.policy is policy
        rbac.check_access(path="/api/v1/admin/users", role=Role.HR_MANAGER)


@pytest.fixture()
def guarded_client() -> TestClient:
    app = create_app()

    @app.get("/api/v1/admin/ping")
    async def admin_ping() -> dict[str, str]:
        return {"pong": "admin"}

    @app.get("/api/v1/services")
    async def list_services() -> list[str]:
        return []

    @app.get("/api/v1/team", dependencies=[Depends(require_role(Role.OPS_MANAGER, Role.OPS_LEAD))])
    async def team() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/api/v1/reports", dependencies=[Depends(require_minimum_role(Role.OPS_MANAGER))])
    async def reports() -> dict[str, bool]:
        return {"ok": True}

    @app.get(
        "/api/v1/payments",
        dependencies=[Depends(require_permission(P.PAYMENTS.VIEW_ALL, P.PAYMENTS.VIEW_OWN))],
    )
    async def payments() -> dict[str, bool]:
        return {"ok": True}

    @app.post(
        "/api/v1/payments/refund",
        dependencies=[Depends(require_all_permissions(P.PAYMENTS.VIEW_ALL, P.PAYMENTS.REFUND))],
    )
    async def refund() -> dict[str, bool]:
        return {"ok": True}

    install_role_header(app)
    return TestClient(app)


def _as(role: str) -> dict[str, str]:
    return {ROLE_HEADER: role}


@pytest.mark.unit
class TestGuardOverHTTP:
    """RBACMiddleware mounted by create_app."""

    @pytest.mark.smoke
    def test_admin_allowed(self, guarded_client: TestClient) -> None:
        resp = guarded_client.get("/api/v1/admin/ping", headers=_as("admin"))
        assert resp.status_code == 200
        assert resp.json() == {"pong": "admin"}

    def test_client_forbidden(self, guarded_client: TestClient) -> None:
        resp = guarded_client.get("/api/v1/admin/ping", headers=_as("client"))
        assert resp.status_code == 403
        assert resp.json()["error"] == "AUTH_DENIED"
        assert "system:view_settings" in resp.json()["message"]

    def test_no_role_is_401(self, guarded_client: TestClient) -> None:
        resp = guarded_client.get("/api/v1/admin/ping")
        assert resp.status_code == 401
        assert resp.json()["error"] == "AUTH_FAILED"

    def test_unrecognised_spelling_is_401(self, guarded_client: TestClient) -> None:
        resp = guarded_client.get("/api/v1/admin/ping", headers=_as("intern"))
        assert resp.status_code == 401

    def test_legacy_spelling_normalised(self, guarded_client: TestClient) -> None:
        resp = guarded_client.get("/api/v1/admin/ping", headers=_as("Administrator"))
        assert resp.status_code == 200

    def test_unguarded_path_open(self, guarded_client: TestClient) -> None:
        assert guarded_client.get("/api/v1/services").status_code == 200

    def test_denial_logged_as_warning(
        self, guarded_client: TestClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="src.gateway.middleware.rbac"):
            guarded_client.get(
                "/api/v1/admin/ping",
                headers={**_as("sales_executive"), "x-request-id": "req-1", "x-tenant-id": "t-9"},
            )
        records = [r for r in caplog.records if r.getMessage() == "structured_error"]
        assert len(records) == 1
        payload = records[0].structured_error
        assert records[0].levelno == logging.WARNING
        assert payload["error_code"] == "AUTH_DENIED"
        assert payload["request_id"] == "req-1"
        assert payload["tenant_id"] == "t-9"
        assert payload["role"] == "sales_executive"
        assert payload["context"] == {
            "path": "/api/v1/admin/ping",
            "required": "system:view_settings",
        }
        assert payload["stack_trace"] == ""


@pytest.mark.unit
class TestRouteDependencies:
    @pytest.mark.parametrize("role,status", [("ops_manager", 200), ("ops_lead", 200), ("admin", 403)])
    def test_require_role(self, guarded_client: TestClient, role: str, status: int) -> None:
        assert guarded_client.get("/api/v1/team", headers=_as(role)).status_code == status

    @pytest.mark.parametrize(
        "role,status",
        [("super_admin", 200), ("sales_manager", 200), ("ops_manager", 200), ("hr_manager", 403)],
    )
    def test_require_minimum_role(self, guarded_client: TestClient, role: str, status: int) -> None:
        assert guarded_client.get("/api/v1/reports", headers=_as(role)).status_code == status

    @pytest.mark.parametrize(
        "role,status", [("client", 200), ("accountant", 200), ("hr_manager", 403)]
    )
    def test_require_permission_any_of(
        self, guarded_client: TestClient, role: str, status: int
    ) -> None:
        assert guarded_client.get("/api/v1/payments", headers=_as(role)).status_code == status

    def test_require_all_permissions(self, guarded_client: TestClient) -> None:
        ok = guarded_client.post("/api/v1/payments/refund", headers=_as("accountant"))
        assert ok.status_code == 200
        resp = guarded_client.post("/api/v1/payments/refund", headers=_as("sales_manager"))
        assert resp.status_code == 403
        assert "payments:view_all & payments:refund" in resp.json()["message"]

    def test_dependency_without_role_is_401(self, guarded_client: TestClient) -> None:
        resp = guarded_client.get("/api/v1/payments")
        assert resp.status_code == 401
        assert resp.json()["error"] == "AUTH_FAILED"
