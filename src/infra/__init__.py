"""Infrastructure layer package.

Holds the RBAC policy core (src.infra.auth): role registry, permission
catalog, role-permission matrix, policy queries and capability resolver.
The gateway layer consumes it; nothing here imports from the gateway.
"""
