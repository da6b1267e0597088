"""Legacy role spellings -> canonical Role.

Applied where an external user record's role field is ingested. The table
is the complete, auditable list of accepted historical spellings; anything
else resolves to None (no role, so no permissions).

Only role names are translated. The old boolean permission table's
semantics (e.g. SALES.canViewLeads) are intentionally not reproduced.
"""

from __future__ import annotations

import logging
import re
from types import MappingProxyType

from src.infra.auth.roles import Role

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[\s\-/]+")

LEGACY_ROLE_MAP: MappingProxyType[str, Role] = MappingProxyType(
    {
        # Old coarse six-role scheme
        "administrator": Role.ADMIN,
        "superadmin": Role.SUPER_ADMIN,
        "sales": Role.SALES_EXECUTIVE,
        "operations": Role.OPS_EXECUTIVE,
        "finance": Role.ACCOUNTANT,
        "partner": Role.AGENT,
        "customer": Role.CLIENT,
        # Historical spellings seen in user records
        "operations_manager": Role.OPS_MANAGER,
        "operations_executive": Role.OPS_EXECUTIVE,
        "operations_lead": Role.OPS_LEAD,
        "ops_exec": Role.OPS_EXECUTIVE,
        "service_executive": Role.OPS_EXECUTIVE,
        "quality_reviewer": Role.QC_EXECUTIVE,
        "qc": Role.QC_EXECUTIVE,
        "support": Role.CUSTOMER_SERVICE,
        "hr": Role.HR_MANAGER,
        "compliance": Role.COMPLIANCE_OFFICER,
        "agent_partner": Role.AGENT,
        "user": Role.CLIENT,
    }
)


def _normalise(raw: str) -> str:
    return _SEPARATORS.sub("_", raw.strip().lower())


def resolve_role(role_str: object) -> Role | None:
    """Parse a canonical role string, returning None if invalid."""
    if not isinstance(role_str, str):
        return None
    try:
        return Role(role_str)
    except ValueError:
        return None


def map_legacy_role(raw: object) -> Role | None:
    """Translate any accepted spelling (canonical or legacy) to a Role.

    Case-insensitive; spaces, hyphens and slashes are read as underscores.
    """
    if not isinstance(raw, str):
        return None
    key = _normalise(raw)
    role = resolve_role(key) or LEGACY_ROLE_MAP.get(key)
    if role is None:
        logger.warning("Unrecognised role spelling %r; treating as no role", raw)
    return role
