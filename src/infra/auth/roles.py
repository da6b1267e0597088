"""Role registry: the closed set of platform roles and their hierarchy.

- 14 roles, defined at import time only (no dynamic role creation)
- Hierarchy levels are compared with >= / > only; gaps are intentional
- Unknown roles resolve to level 0 and the generic "User" label
"""

from __future__ import annotations

from enum import StrEnum, unique
from types import MappingProxyType


@unique
class Role(StrEnum):
    """Canonical platform roles."""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    SALES_MANAGER = "sales_manager"
    SALES_EXECUTIVE = "sales_executive"
    OPS_MANAGER = "ops_manager"
    OPS_EXECUTIVE = "ops_executive"
    OPS_LEAD = "ops_lead"
    CUSTOMER_SERVICE = "customer_service"
    QC_EXECUTIVE = "qc_executive"
    ACCOUNTANT = "accountant"
    COMPLIANCE_OFFICER = "compliance_officer"
    HR_MANAGER = "hr_manager"
    AGENT = "agent"
    CLIENT = "client"


UNKNOWN_ROLE_LEVEL = 0
DEFAULT_DISPLAY_NAME = "User"

# Higher = more privilege. Managers outrank their executives.
ROLE_HIERARCHY: MappingProxyType[str, int] = MappingProxyType(
    {
        Role.SUPER_ADMIN: 100,
        Role.ADMIN: 90,
        Role.SALES_MANAGER: 85,
        Role.OPS_MANAGER: 80,
        Role.HR_MANAGER: 78,
        Role.COMPLIANCE_OFFICER: 75,
        Role.SALES_EXECUTIVE: 70,
        Role.OPS_EXECUTIVE: 68,
        Role.OPS_LEAD: 65,
        Role.CUSTOMER_SERVICE: 60,
        Role.QC_EXECUTIVE: 55,
        Role.ACCOUNTANT: 50,
        Role.AGENT: 40,
        Role.CLIENT: 10,
    }
)

ROLE_DISPLAY_NAMES: MappingProxyType[str, str] = MappingProxyType(
    {
        Role.SUPER_ADMIN: "Super Administrator",
        Role.ADMIN: "Administrator",
        Role.SALES_MANAGER: "Sales Manager",
        Role.SALES_EXECUTIVE: "Sales Executive",
        Role.OPS_MANAGER: "Operations Manager",
        Role.OPS_EXECUTIVE: "Operations Executive",
        Role.OPS_LEAD: "Operations Lead",
        Role.CUSTOMER_SERVICE: "Customer Service",
        Role.QC_EXECUTIVE: "QC Executive",
        Role.ACCOUNTANT: "Accountant",
        Role.COMPLIANCE_OFFICER: "Compliance Officer",
        Role.HR_MANAGER: "HR Manager",
        Role.AGENT: "Agent/Partner",
        Role.CLIENT: "Client",
    }
)

# Only super_admin manages these.
ADMIN_ROLES: frozenset[str] = frozenset({Role.SUPER_ADMIN, Role.ADMIN})

# Roles an admin may manage on behalf of super_admin.
DELEGATED_ROLES: frozenset[str] = frozenset(Role) - ADMIN_ROLES
