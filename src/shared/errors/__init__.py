"""Unified error hierarchy for the DigiComply RBAC core.

All platform errors inherit from DigiComplyError. Permission queries never
raise; these types are used at policy load time and by the request guard.
"""

from __future__ import annotations


class DigiComplyError(Exception):
    """Base error for all DigiComply exceptions."""

    def __init__(self, message: str, code: str = "DIGICOMPLY_ERROR") -> None:
        self.code = code
        super().__init__(message)


# -- Auth errors (raised by the gateway guard) --


class AuthenticationError(DigiComplyError):
    """No usable identity on the request (missing or unrecognised role)."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, code="AUTH_FAILED")


class AuthorizationError(DigiComplyError):
    """Authorization denied (insufficient permissions)."""

    def __init__(self, required_permission: str = "") -> None:
        msg = (
            f"Permission denied: {required_permission}"
            if required_permission
            else "Permission denied"
        )
        self.required_permission = required_permission
        super().__init__(msg, code="AUTH_DENIED")


# -- Configuration errors --


class PolicyConfigurationError(DigiComplyError):
    """An RBAC policy failed structural validation when it was built."""

    def __init__(self, defects: list[str]) -> None:
        self.defects = list(defects)
        summary = "; ".join(self.defects) if self.defects else "unknown defect"
        super().__init__(f"Invalid RBAC policy: {summary}", code="POLICY_CONFIG")


__all__ = [
    "AuthenticationError",
    "AuthorizationError",
    "DigiComplyError",
    "PolicyConfigurationError",
]
