"""Role -> permission matrix built by composing catalog categories.

Entries are derived (whole categories, category minus exclusions, plus
explicit grants) rather than hand-listed, so adding a permission to a
category flows to every role that holds the whole category.

LAW: the matrix is frozen after import. Changes are code changes.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from src.infra.auth.permissions import (
    PERMISSION_CATEGORIES,
    AgentPermission,
    AnalyticsPermission,
    AuthPermission,
    ClientPermission,
    CompliancePermission,
    DocumentPermission,
    HRPermission,
    LeadPermission,
    PaymentPermission,
    PermissionCategory,
    ProposalPermission,
    QCPermission,
    ReferralPermission,
    ServicePermission,
    ServiceRequestPermission,
    SystemPermission,
    TaskPermission,
    UserPermission,
    WorkflowPermission,
)
from src.infra.auth.roles import Role


def all_of(category: PermissionCategory, *, exclude: Iterable[str] = ()) -> frozenset[str]:
    """Every permission of *category*, minus *exclude*."""
    excluded = {str(p) for p in exclude}
    return frozenset(str(p) for p in category if str(p) not in excluded)


def grants(*parts: Iterable[str]) -> frozenset[str]:
    """Union of category sets and individual permissions."""
    result: set[str] = set()
    for part in parts:
        result.update(str(p) for p in part)
    return frozenset(result)


def _everything() -> frozenset[str]:
    return grants(*(all_of(category) for category in PERMISSION_CATEGORIES))


def _admin() -> frozenset[str]:
    # Super admin minus user deletion and the tenant/backup system controls.
    return _everything() - {
        UserPermission.DELETE,
        SystemPermission.MANAGE_TENANTS,
        SystemPermission.BACKUP_RESTORE,
    }


def _sales_manager() -> frozenset[str]:
    return grants(
        all_of(AuthPermission),
        all_of(LeadPermission),
        all_of(ProposalPermission),
        [
            UserPermission.VIEW,
            ClientPermission.VIEW_ALL,
            ClientPermission.CREATE,
            ClientPermission.UPDATE,
            ServicePermission.VIEW,
            ServiceRequestPermission.VIEW_ALL,
            ServiceRequestPermission.CREATE,
            DocumentPermission.VIEW_ALL,
            DocumentPermission.UPLOAD,
            DocumentPermission.DOWNLOAD,
            PaymentPermission.VIEW_ALL,
            AnalyticsPermission.VIEW_BASIC,
            AnalyticsPermission.VIEW_ADVANCED,
            AgentPermission.VIEW_ALL,
            ReferralPermission.VIEW_ALL,
            ReferralPermission.MANAGE_REWARDS,
        ],
    )


def _sales_executive() -> frozenset[str]:
    return grants(
        all_of(AuthPermission),
        [
            ClientPermission.VIEW_ALL,
            ClientPermission.CREATE,
            ClientPermission.UPDATE,
            ServicePermission.VIEW,
            ServiceRequestPermission.VIEW_ASSIGNED,
            ServiceRequestPermission.CREATE,
            LeadPermission.VIEW_OWN,
            LeadPermission.VIEW_TEAM,
            LeadPermission.CREATE,
            LeadPermission.UPDATE,
            LeadPermission.CONVERT,
            ProposalPermission.VIEW_OWN,
            ProposalPermission.CREATE,
            ProposalPermission.UPDATE,
            ProposalPermission.SEND,
            DocumentPermission.VIEW_ALL,
            DocumentPermission.UPLOAD,
            DocumentPermission.DOWNLOAD,
            AnalyticsPermission.VIEW_BASIC,
            ReferralPermission.VIEW_OWN,
            ReferralPermission.CREATE,
        ],
    )


def _ops_manager() -> frozenset[str]:
    return grants(
        all_of(AuthPermission),
        all_of(ServiceRequestPermission),
        all_of(TaskPermission),
        all_of(CompliancePermission),
        all_of(QCPermission),
        [
            UserPermission.VIEW,
            ClientPermission.VIEW_ALL,
            ClientPermission.UPDATE,
            ServicePermission.VIEW,
            WorkflowPermission.VIEW,
            DocumentPermission.VIEW_ALL,
            DocumentPermission.UPLOAD,
            DocumentPermission.DOWNLOAD,
            DocumentPermission.VERIFY,
            AnalyticsPermission.VIEW_BASIC,
            AnalyticsPermission.VIEW_ADVANCED,
        ],
    )


def _ops_executive() -> frozenset[str]:
    return grants(
        all_of(AuthPermission),
        [
            ClientPermission.VIEW_ALL,
            ServicePermission.VIEW,
            WorkflowPermission.VIEW,
            ServiceRequestPermission.VIEW_ASSIGNED,
            ServiceRequestPermission.UPDATE,
            ServiceRequestPermission.CHANGE_STATUS,
            TaskPermission.VIEW_OWN,
            TaskPermission.VIEW_TEAM,
            TaskPermission.UPDATE,
            TaskPermission.COMPLETE,
            DocumentPermission.VIEW_ALL,
            DocumentPermission.UPLOAD,
            DocumentPermission.DOWNLOAD,
            DocumentPermission.VERIFY,
            CompliancePermission.VIEW_ALL,
            CompliancePermission.UPDATE_STATUS,
            QCPermission.VIEW,
            QCPermission.REVIEW,
        ],
    )


def _ops_lead() -> frozenset[str]:
    # Ops executive plus team-level assignment authority.
    return grants(
        _ops_executive(),
        [
            ServiceRequestPermission.VIEW_ALL,
            ServiceRequestPermission.ASSIGN,
            TaskPermission.CREATE,
            TaskPermission.ASSIGN,
            AnalyticsPermission.VIEW_BASIC,
        ],
    )


def _customer_service() -> frozenset[str]:
    return grants(
        all_of(AuthPermission),
        [
            ClientPermission.VIEW_ALL,
            ClientPermission.UPDATE,
            ServicePermission.VIEW,
            ServiceRequestPermission.VIEW_ALL,
            ServiceRequestPermission.CREATE,
            ServiceRequestPermission.UPDATE,
            ServiceRequestPermission.CHANGE_STATUS,
            TaskPermission.VIEW_OWN,
            TaskPermission.UPDATE,
            TaskPermission.COMPLETE,
            DocumentPermission.VIEW_ALL,
            DocumentPermission.UPLOAD,
            DocumentPermission.DOWNLOAD,
            CompliancePermission.VIEW_ALL,
        ],
    )


def _qc_executive() -> frozenset[str]:
    return grants(
        all_of(AuthPermission),
        all_of(QCPermission),
        [
            ClientPermission.VIEW_ALL,
            ServicePermission.VIEW,
            ServiceRequestPermission.VIEW_ALL,
            ServiceRequestPermission.CHANGE_STATUS,
            TaskPermission.VIEW_ALL,
            DocumentPermission.VIEW_ALL,
            DocumentPermission.DOWNLOAD,
            DocumentPermission.VERIFY,
        ],
    )


def _accountant() -> frozenset[str]:
    return grants(
        all_of(AuthPermission),
        all_of(PaymentPermission),
        [
            ClientPermission.VIEW_ALL,
            ServicePermission.VIEW,
            ServiceRequestPermission.VIEW_ALL,
            DocumentPermission.VIEW_ALL,
            DocumentPermission.DOWNLOAD,
            AnalyticsPermission.VIEW_BASIC,
            AnalyticsPermission.VIEW_ADVANCED,
            AnalyticsPermission.EXPORT,
        ],
    )


def _compliance_officer() -> frozenset[str]:
    return grants(
        all_of(AuthPermission),
        all_of(CompliancePermission),
        [
            ClientPermission.VIEW_ALL,
            ClientPermission.VIEW_COMPLIANCE,
            ServicePermission.VIEW,
            ServiceRequestPermission.VIEW_ALL,
            DocumentPermission.VIEW_ALL,
            DocumentPermission.DOWNLOAD,
            DocumentPermission.VERIFY,
            AnalyticsPermission.VIEW_BASIC,
            AnalyticsPermission.VIEW_ADVANCED,
            AnalyticsPermission.EXPORT,
        ],
    )


def _hr_manager() -> frozenset[str]:
    return grants(
        all_of(AuthPermission),
        all_of(HRPermission),
        [
            UserPermission.VIEW,
            UserPermission.VIEW_ALL,
            AnalyticsPermission.VIEW_BASIC,
            AnalyticsPermission.VIEW_ADVANCED,
            DocumentPermission.VIEW_ALL,
            DocumentPermission.UPLOAD,
            DocumentPermission.DOWNLOAD,
        ],
    )


def _agent() -> frozenset[str]:
    return grants(
        all_of(AuthPermission),
        [
            ClientPermission.VIEW_OWN,
            ClientPermission.CREATE,
            ServicePermission.VIEW,
            ServiceRequestPermission.VIEW_OWN,
            LeadPermission.VIEW_OWN,
            LeadPermission.CREATE,
            LeadPermission.UPDATE,
            ProposalPermission.VIEW_OWN,
            ProposalPermission.CREATE,
            ProposalPermission.UPDATE,
            ProposalPermission.SEND,
            DocumentPermission.VIEW_OWN,
            DocumentPermission.UPLOAD,
            DocumentPermission.DOWNLOAD,
            AgentPermission.VIEW_OWN,
            AgentPermission.VIEW_PERFORMANCE,
            ReferralPermission.VIEW_OWN,
            ReferralPermission.CREATE,
            ReferralPermission.TRACK,
            AnalyticsPermission.VIEW_BASIC,
        ],
    )


def _client() -> frozenset[str]:
    return grants(
        all_of(AuthPermission),
        [
            ClientPermission.VIEW_OWN,
            ServicePermission.VIEW,
            ServiceRequestPermission.VIEW_OWN,
            ServiceRequestPermission.CREATE,
            TaskPermission.VIEW_OWN,
            DocumentPermission.VIEW_OWN,
            DocumentPermission.UPLOAD,
            DocumentPermission.DOWNLOAD,
            PaymentPermission.VIEW_OWN,
            PaymentPermission.CREATE,
            CompliancePermission.VIEW_OWN,
            ReferralPermission.VIEW_OWN,
            ReferralPermission.CREATE,
            AnalyticsPermission.VIEW_BASIC,
        ],
    )


def build_role_permission_matrix() -> Mapping[str, frozenset[str]]:
    """Build the read-only role -> permission-set mapping."""
    return MappingProxyType(
        {
            Role.SUPER_ADMIN: _everything(),
            Role.ADMIN: _admin(),
            Role.SALES_MANAGER: _sales_manager(),
            Role.SALES_EXECUTIVE: _sales_executive(),
            Role.OPS_MANAGER: _ops_manager(),
            Role.OPS_EXECUTIVE: _ops_executive(),
            Role.OPS_LEAD: _ops_lead(),
            Role.CUSTOMER_SERVICE: _customer_service(),
            Role.QC_EXECUTIVE: _qc_executive(),
            Role.ACCOUNTANT: _accountant(),
            Role.COMPLIANCE_OFFICER: _compliance_officer(),
            Role.HR_MANAGER: _hr_manager(),
            Role.AGENT: _agent(),
            Role.CLIENT: _client(),
        }
    )


ROLE_PERMISSION_MATRIX: Mapping[str, frozenset[str]] = build_role_permission_matrix()
