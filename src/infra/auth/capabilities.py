"""Capability matrix: per-resource CRUD (+ extras) flags derived from a role.

Capabilities are a view over RbacPolicy.has_permission, recomputed on each
call; they are never stored separately from the role-permission matrix.
``to_dict`` renders the camelCase shape the web client consumes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from src.infra.auth.permissions import Permissions
from src.infra.auth.policy import DEFAULT_POLICY, RbacPolicy


@dataclass(frozen=True)
class ResourceCapability:
    create: bool
    read: bool
    update: bool
    delete: bool


@dataclass(frozen=True)
class ServiceCapability(ResourceCapability):
    configure: bool
    manage_workflows: bool


@dataclass(frozen=True)
class WorkflowCapability(ResourceCapability):
    import_: bool
    export: bool


@dataclass(frozen=True)
class BlueprintCapability(ResourceCapability):
    publish: bool


@dataclass(frozen=True)
class UserCapability(ResourceCapability):
    assign_roles: bool


@dataclass(frozen=True)
class TaskCapability(ResourceCapability):
    assign: bool


@dataclass(frozen=True)
class ServiceRequestCapability(ResourceCapability):
    assign: bool
    escalate: bool


@dataclass(frozen=True)
class LeadCapability(ResourceCapability):
    convert: bool
    assign: bool


@dataclass(frozen=True)
class ProposalCapability(ResourceCapability):
    approve: bool


@dataclass(frozen=True)
class DocumentCapability(ResourceCapability):
    verify: bool


@dataclass(frozen=True)
class PaymentCapability(ResourceCapability):
    refund: bool


@dataclass(frozen=True)
class AgentCapability(ResourceCapability):
    manage_commissions: bool


# Python field name -> wire key, where they differ.
_WIRE_KEYS = {
    "manage_workflows": "manageWorkflows",
    "import_": "import",
    "assign_roles": "assignRoles",
    "manage_commissions": "manageCommissions",
    "service_requests": "serviceRequests",
}


def _wire(obj: Any) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for name, value in vars(obj).items():
        key = _WIRE_KEYS.get(name, name)
        out[key] = _wire(value) if isinstance(value, ResourceCapability) else value
    return out


@dataclass(frozen=True)
class RoleCapabilities:
    """Everything a role may do, grouped by resource."""

    services: ServiceCapability
    workflows: WorkflowCapability
    blueprints: BlueprintCapability
    users: UserCapability
    clients: ResourceCapability
    tasks: TaskCapability
    service_requests: ServiceRequestCapability
    leads: LeadCapability
    proposals: ProposalCapability
    documents: DocumentCapability
    payments: PaymentCapability
    agents: AgentCapability

    def to_dict(self) -> dict[str, Any]:
        """camelCase dict for JSON responses."""
        return _wire(self)


def get_role_capabilities(role: object, *, policy: RbacPolicy | None = None) -> RoleCapabilities:
    """Resolve the capability object for *role*. Unknown roles get all-False."""
    policy = policy or DEFAULT_POLICY

    def can(*permissions: str) -> bool:
        # OR across variants, e.g. view_own / view_all
        return any(policy.has_permission(role, p) for p in permissions)

    p = Permissions
    return RoleCapabilities(
        services=ServiceCapability(
            create=can(p.SERVICES.CREATE),
            read=can(p.SERVICES.VIEW),
            update=can(p.SERVICES.UPDATE),
            delete=can(p.SERVICES.DELETE),
            configure=can(p.SERVICES.CONFIGURE),
            manage_workflows=can(p.WORKFLOWS.MANAGE_TEMPLATES),
        ),
        workflows=WorkflowCapability(
            create=can(p.WORKFLOWS.CREATE),
            read=can(p.WORKFLOWS.VIEW),
            update=can(p.WORKFLOWS.UPDATE),
            delete=can(p.WORKFLOWS.DELETE),
            import_=can(p.WORKFLOWS.IMPORT),
            export=can(p.WORKFLOWS.EXPORT),
        ),
        blueprints=BlueprintCapability(
            create=can(p.BLUEPRINTS.CREATE),
            read=can(p.BLUEPRINTS.VIEW),
            update=can(p.BLUEPRINTS.UPDATE),
            delete=can(p.BLUEPRINTS.DELETE),
            publish=can(p.BLUEPRINTS.PUBLISH),
        ),
        users=UserCapability(
            create=can(p.USERS.CREATE),
            read=can(p.USERS.VIEW, p.USERS.VIEW_ALL),
            update=can(p.USERS.UPDATE),
            delete=can(p.USERS.DELETE),
            assign_roles=can(p.USERS.ASSIGN_ROLES),
        ),
        clients=ResourceCapability(
            create=can(p.CLIENTS.CREATE),
            read=can(p.CLIENTS.VIEW_OWN, p.CLIENTS.VIEW_ALL),
            update=can(p.CLIENTS.UPDATE),
            delete=can(p.CLIENTS.DELETE),
        ),
        tasks=TaskCapability(
            create=can(p.TASKS.CREATE),
            read=can(p.TASKS.VIEW_OWN, p.TASKS.VIEW_ALL),
            update=can(p.TASKS.UPDATE),
            delete=can(p.TASKS.DELETE),
            assign=can(p.TASKS.ASSIGN),
        ),
        service_requests=ServiceRequestCapability(
            create=can(p.SERVICE_REQUESTS.CREATE),
            read=can(p.SERVICE_REQUESTS.VIEW_OWN, p.SERVICE_REQUESTS.VIEW_ALL),
            update=can(p.SERVICE_REQUESTS.UPDATE),
            delete=can(p.SERVICE_REQUESTS.DELETE),
            assign=can(p.SERVICE_REQUESTS.ASSIGN),
            escalate=can(p.SERVICE_REQUESTS.ESCALATE),
        ),
        leads=LeadCapability(
            create=can(p.LEADS.CREATE),
            read=can(p.LEADS.VIEW_OWN, p.LEADS.VIEW_ALL),
            update=can(p.LEADS.UPDATE),
            delete=can(p.LEADS.DELETE),
            convert=can(p.LEADS.CONVERT),
            assign=can(p.LEADS.ASSIGN),
        ),
        proposals=ProposalCapability(
            create=can(p.PROPOSALS.CREATE),
            read=can(p.PROPOSALS.VIEW_OWN, p.PROPOSALS.VIEW_ALL),
            update=can(p.PROPOSALS.UPDATE),
            delete=can(p.PROPOSALS.DELETE),
            approve=can(p.PROPOSALS.APPROVE),
        ),
        documents=DocumentCapability(
            # Uploading a new version is the only way to change a document.
            create=can(p.DOCUMENTS.UPLOAD),
            read=can(p.DOCUMENTS.VIEW_OWN, p.DOCUMENTS.VIEW_ALL),
            update=can(p.DOCUMENTS.UPLOAD),
            delete=can(p.DOCUMENTS.DELETE),
            verify=can(p.DOCUMENTS.VERIFY),
        ),
        payments=PaymentCapability(
            create=can(p.PAYMENTS.CREATE),
            read=can(p.PAYMENTS.VIEW_OWN, p.PAYMENTS.VIEW_ALL),
            update=can(p.PAYMENTS.PROCESS),
            delete=False,  # payments are never deleted
            refund=can(p.PAYMENTS.REFUND),
        ),
        agents=AgentCapability(
            create=can(p.AGENTS.CREATE),
            read=can(p.AGENTS.VIEW_OWN, p.AGENTS.VIEW_ALL),
            update=can(p.AGENTS.UPDATE),
            delete=can(p.AGENTS.DELETE),
            manage_commissions=can(p.AGENTS.MANAGE_COMMISSIONS),
        ),
    )
