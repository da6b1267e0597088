"""RBAC policy: immutable role/permission configuration plus pure queries.

- One RbacPolicy is built at startup (DEFAULT_POLICY, or a YAML override)
- Every query is total: unknown roles, unknown tokens, None or non-string
  input all resolve to "no permission" / level 0 / "User", never an error
- Only policy construction (validate / load) raises, and only with
  PolicyConfigurationError
- hasAny over nothing is False, hasAll over nothing is True

Module-level functions delegate to DEFAULT_POLICY unless ``policy=`` is
given, so tests and tenants can substitute their own policy.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any
from uuid import UUID  # noqa: TC003 -- used at runtime in dataclass fields

import yaml

from src.infra.auth.matrix import ROLE_PERMISSION_MATRIX, all_of
from src.infra.auth.permissions import (
    ALL_PERMISSIONS,
    CATEGORY_BY_RESOURCE,
    ServicePermission,
    WorkflowPermission,
)
from src.infra.auth.roles import (
    ADMIN_ROLES,
    DEFAULT_DISPLAY_NAME,
    DELEGATED_ROLES,
    ROLE_DISPLAY_NAMES,
    ROLE_HIERARCHY,
    UNKNOWN_ROLE_LEVEL,
    Role,
)
from src.shared.errors import PolicyConfigurationError

logger = logging.getLogger(__name__)

POLICY_FILE_ENV = "RBAC_POLICY_FILE"

_SERVICE_MUTATIONS = (
    ServicePermission.CREATE,
    ServicePermission.UPDATE,
    ServicePermission.DELETE,
)
_WORKFLOW_MUTATIONS = (
    WorkflowPermission.CREATE,
    WorkflowPermission.UPDATE,
    WorkflowPermission.DELETE,
    WorkflowPermission.MANAGE_TEMPLATES,
)


def _role_key(role: object) -> str | None:
    return role if isinstance(role, str) else None


def _tokens(permissions: object) -> tuple[object, ...] | None:
    """Normalise a permission list argument; None means "unusable input"."""
    if isinstance(permissions, str):
        return (permissions,)
    if isinstance(permissions, Iterable):
        return tuple(permissions)
    return None


@dataclass(frozen=True)
class PermissionCheckResult:
    """Result of a permission check, with context for audit consumers."""

    allowed: bool
    role: str | None
    required: str
    has_permissions: frozenset[str]
    user_id: UUID | None = None


@dataclass(frozen=True)
class RbacPolicy:
    """Immutable policy set. Build with ``RbacPolicy.create``."""

    hierarchy: Mapping[str, int]
    role_permissions: Mapping[str, frozenset[str]]
    display_names: Mapping[str, str] = field(default_factory=dict)
    admin_roles: frozenset[str] = ADMIN_ROLES
    delegated_roles: frozenset[str] = DELEGATED_ROLES

    @classmethod
    def create(
        cls,
        *,
        hierarchy: Mapping[str, int],
        role_permissions: Mapping[str, Iterable[str]],
        display_names: Mapping[str, str] | None = None,
        admin_roles: Iterable[str] = ADMIN_ROLES,
        delegated_roles: Iterable[str] = DELEGATED_ROLES,
        validate: bool = True,
    ) -> RbacPolicy:
        """Freeze the given tables into a policy, validating by default."""
        policy = cls(
            hierarchy=MappingProxyType({str(r): int(v) for r, v in hierarchy.items()}),
            role_permissions=MappingProxyType(
                {str(r): frozenset(str(p) for p in perms) for r, perms in role_permissions.items()}
            ),
            display_names=MappingProxyType(
                {str(r): str(n) for r, n in (display_names or {}).items()}
            ),
            admin_roles=frozenset(str(r) for r in admin_roles),
            delegated_roles=frozenset(str(r) for r in delegated_roles),
        )
        if validate:
            policy.validate()
        return policy

    # -- Structural validation (load time only) --

    def defects(self) -> list[str]:
        """Return every configuration defect; empty when the policy is sound."""
        found: list[str] = []
        for role in Role:
            if role not in self.hierarchy:
                found.append(f"role {role} has no hierarchy level")
            elif self.hierarchy[role] < 0:
                found.append(f"role {role} has negative level {self.hierarchy[role]}")
            if role not in self.role_permissions:
                found.append(f"role {role} has no permission entry")

        for role, perms in self.role_permissions.items():
            unknown = sorted(perms - ALL_PERMISSIONS)
            if unknown:
                found.append(f"role {role} grants unknown permissions {unknown}")

        top = self.role_permissions.get(Role.SUPER_ADMIN, frozenset())
        for role, perms in self.role_permissions.items():
            if role == Role.SUPER_ADMIN:
                continue
            if not perms < top:
                missing = sorted(perms - top)
                found.append(
                    f"super_admin is not a strict superset of {role}"
                    + (f" (missing {missing})" if missing else "")
                )
        return found

    def validate(self) -> None:
        """Raise PolicyConfigurationError if any defect is present."""
        found = self.defects()
        if found:
            raise PolicyConfigurationError(found)

    # -- Permission queries --

    def get_role_permissions(self, role: object) -> frozenset[str]:
        key = _role_key(role)
        if key is None:
            return frozenset()
        return self.role_permissions.get(key, frozenset())

    def has_permission(self, role: object, permission: object) -> bool:
        if not isinstance(permission, str):
            return False
        return permission in self.get_role_permissions(role)

    def has_any_permission(self, role: object, permissions: object) -> bool:
        tokens = _tokens(permissions)
        if tokens is None:
            return False
        return any(self.has_permission(role, p) for p in tokens)

    def has_all_permissions(self, role: object, permissions: object) -> bool:
        tokens = _tokens(permissions)
        if tokens is None:
            return False
        return all(self.has_permission(role, p) for p in tokens)

    def get_permissions_for_roles(self, roles: object) -> frozenset[str]:
        """Union of the permission sets of *roles*."""
        if isinstance(roles, str):
            roles = (roles,)
        if not isinstance(roles, Iterable):
            return frozenset()
        union: set[str] = set()
        for role in roles:
            union |= self.get_role_permissions(role)
        return frozenset(union)

    def check_permission(
        self,
        *,
        role: object,
        required: object,
        user_id: UUID | None = None,
        extra_permissions: Iterable[str] | None = None,
    ) -> PermissionCheckResult:
        """Check *required* against the role's set plus per-user extras."""
        extras = frozenset(p for p in (extra_permissions or ()) if isinstance(p, str))
        effective = self.get_role_permissions(role) | extras
        token = str(required) if isinstance(required, str) else ""
        return PermissionCheckResult(
            allowed=bool(token) and token in effective,
            role=_role_key(role),
            required=token,
            has_permissions=effective,
            user_id=user_id,
        )

    # -- Hierarchy & classification --

    def get_role_level(self, role: object) -> int:
        key = _role_key(role)
        if key is None:
            return UNKNOWN_ROLE_LEVEL
        return self.hierarchy.get(key, UNKNOWN_ROLE_LEVEL)

    def has_equal_or_higher_role(self, candidate: object, required: object) -> bool:
        return self.get_role_level(candidate) >= self.get_role_level(required)

    def is_admin_role(self, role: object) -> bool:
        key = _role_key(role)
        return key is not None and key in self.admin_roles

    def can_manage_services(self, role: object) -> bool:
        return self.has_any_permission(role, _SERVICE_MUTATIONS)

    def can_manage_workflows(self, role: object) -> bool:
        return self.has_any_permission(role, _WORKFLOW_MUTATIONS)

    def can_manage_user(self, manager_role: object, target_role: object) -> bool:
        """Super admin manages everyone; admin manages delegated roles only."""
        manager = _role_key(manager_role)
        target = _role_key(target_role)
        if manager == Role.SUPER_ADMIN:
            return True
        if manager == Role.ADMIN:
            return target is not None and target in self.delegated_roles
        return False

    def get_manageable_roles(self, manager_role: object) -> frozenset[str]:
        """Roles *manager_role* may create or manage; empty for non-admins."""
        manager = _role_key(manager_role)
        if manager == Role.SUPER_ADMIN:
            return self.admin_roles | self.delegated_roles
        if manager == Role.ADMIN:
            return self.delegated_roles
        return frozenset()

    def get_role_display_name(self, role: object) -> str:
        key = _role_key(role)
        if key is None:
            return DEFAULT_DISPLAY_NAME
        return self.display_names.get(key, DEFAULT_DISPLAY_NAME)


DEFAULT_POLICY: RbacPolicy = RbacPolicy.create(
    hierarchy=ROLE_HIERARCHY,
    role_permissions=ROLE_PERMISSION_MATRIX,
    display_names=ROLE_DISPLAY_NAMES,
)


# -- Loading overrides --


def _expand_entry(entry: Any, *, role: str, defects: list[str]) -> frozenset[str]:
    """Expand one YAML permission entry; ``"<resource>:*"`` names a category."""
    if not isinstance(entry, str):
        defects.append(f"role {role} has non-string permission entry {entry!r}")
        return frozenset()
    resource, _, action = entry.partition(":")
    if action == "*":
        category = CATEGORY_BY_RESOURCE.get(resource)
        if category is None:
            defects.append(f"role {role} names unknown category {resource!r}")
            return frozenset()
        return all_of(category)
    if entry not in ALL_PERMISSIONS:
        defects.append(f"role {role} grants unknown permission {entry!r}")
        return frozenset()
    return frozenset({entry})


def policy_from_mapping(data: Mapping[str, Any], *, base: RbacPolicy | None = None) -> RbacPolicy:
    """Build a policy by overlaying *data* onto *base* (default DEFAULT_POLICY).

    Recognised keys: ``hierarchy`` (role -> level), ``display_names``
    (role -> label) and ``roles`` (role -> list of permissions, replacing
    that role's entry). Role names must be canonical.
    """
    base = base or DEFAULT_POLICY
    known_roles = {str(r) for r in Role}
    defects: list[str] = []

    def _section(name: str) -> Mapping[str, Any]:
        section = data.get(name) or {}
        if not isinstance(section, Mapping):
            defects.append(f"section {name!r} must be a mapping")
            return {}
        for role in section:
            if role not in known_roles:
                defects.append(f"section {name!r} names unknown role {role!r}")
        return {k: v for k, v in section.items() if k in known_roles}

    hierarchy = dict(base.hierarchy)
    for role, level in _section("hierarchy").items():
        if isinstance(level, bool) or not isinstance(level, int):
            defects.append(f"role {role} level must be an integer, got {level!r}")
            continue
        hierarchy[role] = level

    display_names = dict(base.display_names)
    for role, label in _section("display_names").items():
        if not isinstance(label, str) or not label.strip():
            defects.append(
                f"role {role} display name must be a non-empty string, got {label!r}"
            )
            continue
        display_names[role] = label

    role_permissions: dict[str, frozenset[str]] = dict(base.role_permissions)
    for role, entries in _section("roles").items():
        if not isinstance(entries, list):
            defects.append(f"role {role} permissions must be a list")
            continue
        expanded: set[str] = set()
        for entry in entries:
            expanded |= _expand_entry(entry, role=role, defects=defects)
        role_permissions[role] = frozenset(expanded)

    if defects:
        raise PolicyConfigurationError(defects)

    return RbacPolicy.create(
        hierarchy=hierarchy,
        role_permissions=role_permissions,
        display_names=display_names,
        admin_roles=base.admin_roles,
        delegated_roles=base.delegated_roles,
    )


def load_policy_file(path: Path) -> RbacPolicy:
    """Load and validate a YAML policy override file."""
    if not path.exists():
        raise PolicyConfigurationError([f"policy file {path} not found"])
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (yaml.YAMLError, UnicodeDecodeError) as exc:
        raise PolicyConfigurationError([f"policy file {path} is not valid YAML: {exc}"]) from exc
    if not isinstance(data, Mapping):
        raise PolicyConfigurationError([f"policy file {path} must contain a mapping"])
    policy = policy_from_mapping(data)
    logger.info("Loaded RBAC policy overrides from %s", path)
    return policy


def load_policy_from_env() -> RbacPolicy:
    """Return the policy named by RBAC_POLICY_FILE, or DEFAULT_POLICY."""
    raw = os.environ.get(POLICY_FILE_ENV, "").strip()
    if not raw:
        return DEFAULT_POLICY
    return load_policy_file(Path(raw))


# -- Module-level query surface --


def _resolve(policy: RbacPolicy | None) -> RbacPolicy:
    return policy if policy is not None else DEFAULT_POLICY


def get_role_permissions(role: object, *, policy: RbacPolicy | None = None) -> frozenset[str]:
    """Return the permission set for *role* (empty for unknown roles)."""
    return _resolve(policy).get_role_permissions(role)


def has_permission(role: object, permission: object, *, policy: RbacPolicy | None = None) -> bool:
    """Check if a role holds a specific permission."""
    return _resolve(policy).has_permission(role, permission)


def has_any_permission(
    role: object, permissions: object, *, policy: RbacPolicy | None = None
) -> bool:
    """Check if a role holds at least one of *permissions*."""
    return _resolve(policy).has_any_permission(role, permissions)


def has_all_permissions(
    role: object, permissions: object, *, policy: RbacPolicy | None = None
) -> bool:
    """Check if a role holds every one of *permissions*."""
    return _resolve(policy).has_all_permissions(role, permissions)


def get_permissions_for_roles(roles: object, *, policy: RbacPolicy | None = None) -> frozenset[str]:
    return _resolve(policy).get_permissions_for_roles(roles)


def check_permission(
    *,
    role: object,
    required: object,
    user_id: UUID | None = None,
    extra_permissions: Iterable[str] | None = None,
    policy: RbacPolicy | None = None,
) -> PermissionCheckResult:
    return _resolve(policy).check_permission(
        role=role, required=required, user_id=user_id, extra_permissions=extra_permissions
    )


def get_role_level(role: object, *, policy: RbacPolicy | None = None) -> int:
    return _resolve(policy).get_role_level(role)


def has_equal_or_higher_role(
    candidate: object, required: object, *, policy: RbacPolicy | None = None
) -> bool:
    return _resolve(policy).has_equal_or_higher_role(candidate, required)


def is_admin_role(role: object, *, policy: RbacPolicy | None = None) -> bool:
    return _resolve(policy).is_admin_role(role)


def can_manage_services(role: object, *, policy: RbacPolicy | None = None) -> bool:
    return _resolve(policy).can_manage_services(role)


def can_manage_workflows(role: object, *, policy: RbacPolicy | None = None) -> bool:
    return _resolve(policy).can_manage_workflows(role)


def can_manage_user(
    manager_role: object, target_role: object, *, policy: RbacPolicy | None = None
) -> bool:
    return _resolve(policy).can_manage_user(manager_role, target_role)


def get_manageable_roles(
    manager_role: object, *, policy: RbacPolicy | None = None
) -> frozenset[str]:
    return _resolve(policy).get_manageable_roles(manager_role)


def get_role_display_name(role: object, *, policy: RbacPolicy | None = None) -> str:
    return _resolve(policy).get_role_display_name(role)
