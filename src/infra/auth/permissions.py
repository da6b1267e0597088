"""Permission catalog: every recognised ``<resource>:<action>`` token.

Each resource category is its own StrEnum so members compare equal to
their token strings. ``Permissions`` groups the categories so call sites
read ``Permissions.SERVICES.CREATE``; a misspelt member fails at import
time instead of silently matching nothing.
"""

from __future__ import annotations

from enum import StrEnum, unique


@unique
class AuthPermission(StrEnum):
    LOGIN = "auth:login"
    LOGOUT = "auth:logout"
    REGISTER = "auth:register"
    REFRESH = "auth:refresh"
    RESET_PASSWORD = "auth:reset_password"


@unique
class UserPermission(StrEnum):
    VIEW = "users:view"
    VIEW_ALL = "users:view_all"
    CREATE = "users:create"
    UPDATE = "users:update"
    DELETE = "users:delete"
    ASSIGN_ROLES = "users:assign_roles"
    MANAGE_PERMISSIONS = "users:manage_permissions"
    VIEW_AUDIT_LOGS = "users:view_audit_logs"


@unique
class ClientPermission(StrEnum):
    VIEW_OWN = "clients:view_own"
    VIEW_ALL = "clients:view_all"
    CREATE = "clients:create"
    UPDATE = "clients:update"
    DELETE = "clients:delete"
    MANAGE_DOCUMENTS = "clients:manage_documents"
    VIEW_COMPLIANCE = "clients:view_compliance"


@unique
class ServicePermission(StrEnum):
    VIEW = "services:view"
    CREATE = "services:create"
    UPDATE = "services:update"
    DELETE = "services:delete"
    CONFIGURE = "services:configure"
    MANAGE_PRICING = "services:manage_pricing"
    MANAGE_SLA = "services:manage_sla"
    BULK_OPERATIONS = "services:bulk_operations"


@unique
class WorkflowPermission(StrEnum):
    VIEW = "workflows:view"
    CREATE = "workflows:create"
    UPDATE = "workflows:update"
    DELETE = "workflows:delete"
    MANAGE_TEMPLATES = "workflows:manage_templates"
    IMPORT = "workflows:import"
    EXPORT = "workflows:export"


@unique
class BlueprintPermission(StrEnum):
    VIEW = "blueprints:view"
    CREATE = "blueprints:create"
    UPDATE = "blueprints:update"
    DELETE = "blueprints:delete"
    PUBLISH = "blueprints:publish"
    ARCHIVE = "blueprints:archive"


@unique
class ServiceRequestPermission(StrEnum):
    VIEW_OWN = "service_requests:view_own"
    VIEW_ASSIGNED = "service_requests:view_assigned"
    VIEW_ALL = "service_requests:view_all"
    CREATE = "service_requests:create"
    UPDATE = "service_requests:update"
    DELETE = "service_requests:delete"
    ASSIGN = "service_requests:assign"
    CHANGE_STATUS = "service_requests:change_status"
    ESCALATE = "service_requests:escalate"


@unique
class TaskPermission(StrEnum):
    VIEW_OWN = "tasks:view_own"
    VIEW_TEAM = "tasks:view_team"
    VIEW_ALL = "tasks:view_all"
    CREATE = "tasks:create"
    UPDATE = "tasks:update"
    DELETE = "tasks:delete"
    ASSIGN = "tasks:assign"
    COMPLETE = "tasks:complete"
    REASSIGN = "tasks:reassign"


@unique
class LeadPermission(StrEnum):
    VIEW_OWN = "leads:view_own"
    VIEW_TEAM = "leads:view_team"
    VIEW_ALL = "leads:view_all"
    CREATE = "leads:create"
    UPDATE = "leads:update"
    DELETE = "leads:delete"
    CONVERT = "leads:convert"
    ASSIGN = "leads:assign"


@unique
class ProposalPermission(StrEnum):
    VIEW_OWN = "proposals:view_own"
    VIEW_ALL = "proposals:view_all"
    CREATE = "proposals:create"
    UPDATE = "proposals:update"
    DELETE = "proposals:delete"
    SEND = "proposals:send"
    APPROVE = "proposals:approve"


@unique
class DocumentPermission(StrEnum):
    VIEW_OWN = "documents:view_own"
    VIEW_ALL = "documents:view_all"
    UPLOAD = "documents:upload"
    DOWNLOAD = "documents:download"
    DELETE = "documents:delete"
    VERIFY = "documents:verify"
    SHARE = "documents:share"


@unique
class PaymentPermission(StrEnum):
    VIEW_OWN = "payments:view_own"
    VIEW_ALL = "payments:view_all"
    CREATE = "payments:create"
    PROCESS = "payments:process"
    REFUND = "payments:refund"
    MANAGE_INVOICES = "payments:manage_invoices"
    VIEW_REPORTS = "payments:view_reports"


@unique
class CompliancePermission(StrEnum):
    VIEW_OWN = "compliance:view_own"
    VIEW_ALL = "compliance:view_all"
    MANAGE = "compliance:manage"
    UPDATE_STATUS = "compliance:update_status"
    GENERATE_REPORTS = "compliance:generate_reports"
    CONFIGURE_ALERTS = "compliance:configure_alerts"


@unique
class QCPermission(StrEnum):
    VIEW = "qc:view"
    REVIEW = "qc:review"
    APPROVE = "qc:approve"
    REJECT = "qc:reject"
    HANDOFF = "qc:handoff"
    VIEW_METRICS = "qc:view_metrics"


@unique
class AgentPermission(StrEnum):
    VIEW_OWN = "agents:view_own"
    VIEW_ALL = "agents:view_all"
    CREATE = "agents:create"
    UPDATE = "agents:update"
    DELETE = "agents:delete"
    MANAGE_COMMISSIONS = "agents:manage_commissions"
    VIEW_PERFORMANCE = "agents:view_performance"


@unique
class HRPermission(StrEnum):
    VIEW_EMPLOYEES = "hr:view_employees"
    MANAGE_EMPLOYEES = "hr:manage_employees"
    VIEW_ATTENDANCE = "hr:view_attendance"
    MANAGE_ATTENDANCE = "hr:manage_attendance"
    VIEW_PAYROLL = "hr:view_payroll"
    MANAGE_PAYROLL = "hr:manage_payroll"
    VIEW_PERFORMANCE = "hr:view_performance"
    MANAGE_PERFORMANCE = "hr:manage_performance"


@unique
class AnalyticsPermission(StrEnum):
    VIEW_BASIC = "analytics:view_basic"
    VIEW_ADVANCED = "analytics:view_advanced"
    VIEW_EXECUTIVE = "analytics:view_executive"
    EXPORT = "analytics:export"
    CONFIGURE_DASHBOARDS = "analytics:configure_dashboards"


@unique
class SystemPermission(StrEnum):
    VIEW_SETTINGS = "system:view_settings"
    MANAGE_SETTINGS = "system:manage_settings"
    VIEW_AUDIT_LOGS = "system:view_audit_logs"
    MANAGE_INTEGRATIONS = "system:manage_integrations"
    MANAGE_API_KEYS = "system:manage_api_keys"
    MANAGE_WEBHOOKS = "system:manage_webhooks"
    MANAGE_TENANTS = "system:manage_tenants"
    BACKUP_RESTORE = "system:backup_restore"


@unique
class ReferralPermission(StrEnum):
    VIEW_OWN = "referrals:view_own"
    VIEW_ALL = "referrals:view_all"
    CREATE = "referrals:create"
    TRACK = "referrals:track"
    MANAGE_REWARDS = "referrals:manage_rewards"


class Permissions:
    """Namespace over the category enums."""

    AUTH = AuthPermission
    USERS = UserPermission
    CLIENTS = ClientPermission
    SERVICES = ServicePermission
    WORKFLOWS = WorkflowPermission
    BLUEPRINTS = BlueprintPermission
    SERVICE_REQUESTS = ServiceRequestPermission
    TASKS = TaskPermission
    LEADS = LeadPermission
    PROPOSALS = ProposalPermission
    DOCUMENTS = DocumentPermission
    PAYMENTS = PaymentPermission
    COMPLIANCE = CompliancePermission
    QC = QCPermission
    AGENTS = AgentPermission
    HR = HRPermission
    ANALYTICS = AnalyticsPermission
    SYSTEM = SystemPermission
    REFERRALS = ReferralPermission


PermissionCategory = type[StrEnum]

PERMISSION_CATEGORIES: tuple[PermissionCategory, ...] = (
    AuthPermission,
    UserPermission,
    ClientPermission,
    ServicePermission,
    WorkflowPermission,
    BlueprintPermission,
    ServiceRequestPermission,
    TaskPermission,
    LeadPermission,
    ProposalPermission,
    DocumentPermission,
    PaymentPermission,
    CompliancePermission,
    QCPermission,
    AgentPermission,
    HRPermission,
    AnalyticsPermission,
    SystemPermission,
    ReferralPermission,
)

# Resource prefix ("services") -> category enum.
CATEGORY_BY_RESOURCE: dict[str, PermissionCategory] = {
    next(iter(category)).value.split(":", 1)[0]: category for category in PERMISSION_CATEGORIES
}

ALL_PERMISSIONS: frozenset[str] = frozenset(
    str(member) for category in PERMISSION_CATEGORIES for member in category
)


def is_known_permission(token: object) -> bool:
    """True if *token* is a catalog permission. Never raises."""
    return isinstance(token, str) and token in ALL_PERMISSIONS
