"""Structured error logging for the RBAC core.

Two kinds of records are emitted, both under the ``structured_error``
message with the payload in ``extra``:

- access denials from the gateway guard (WARNING, no stack trace), carrying
  the caller's role, the request path and the permission(s) it lacked
- policy load failures (ERROR), carrying every validation defect

Context values under credential-like keys are masked before logging.
"""

from __future__ import annotations

import logging
import traceback
from dataclasses import asdict, dataclass, field
from typing import Any

REDACTED = "[REDACTED]"

_SENSITIVE_KEYS = frozenset(
    {
        "api_key",
        "authorization",
        "cookie",
        "credential",
        "password",
        "secret",
        "session_token",
        "token",
    }
)


@dataclass(frozen=True)
class StructuredError:
    """One loggable error record."""

    error_code: str
    message: str
    stack_trace: str = ""
    role: str = ""
    tenant_id: str = ""
    request_id: str = ""
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["context"] = _redact_sensitive(d["context"])
        return d


def _redact(value: Any) -> Any:
    if isinstance(value, dict):
        return _redact_sensitive(value)
    if isinstance(value, list):
        return [_redact(v) for v in value]
    return value


def _redact_sensitive(data: dict[str, Any]) -> dict[str, Any]:
    """Mask credential-like keys at any depth (dicts and lists of dicts)."""
    return {
        key: REDACTED if str(key).lower() in _SENSITIVE_KEYS else _redact(value)
        for key, value in data.items()
    }


def create_structured_error(
    exc: Exception,
    *,
    error_code: str = "",
    role: str = "",
    tenant_id: str = "",
    request_id: str = "",
    context: dict[str, Any] | None = None,
    include_stack: bool = True,
) -> StructuredError:
    """Build a StructuredError from *exc*.

    ``exc.code`` (set on every DigiComplyError) is the error code unless
    *error_code* overrides it; otherwise the exception class name is used.
    """
    stack = ""
    if include_stack:
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return StructuredError(
        error_code=error_code or getattr(exc, "code", type(exc).__name__),
        message=str(exc),
        stack_trace=stack,
        role=role,
        tenant_id=tenant_id,
        request_id=request_id,
        context=context or {},
    )


def log_structured_error(
    logger: logging.Logger,
    exc: Exception,
    *,
    level: int = logging.ERROR,
    **fields: Any,
) -> StructuredError:
    """Log *exc* as a structured record and return it.

    *fields* are passed through to create_structured_error.
    """
    structured = create_structured_error(exc, **fields)
    logger.log(level, "structured_error", extra={"structured_error": structured.to_dict()})
    return structured


def log_access_denied(
    logger: logging.Logger,
    exc: Exception,
    *,
    path: str,
    role: str | None,
    tenant_id: str = "",
    request_id: str = "",
) -> StructuredError:
    """WARNING record for a refused request. Denials are expected; no stack."""
    context: dict[str, Any] = {"path": path}
    required = getattr(exc, "required_permission", "")
    if required:
        context["required"] = required
    return log_structured_error(
        logger,
        exc,
        level=logging.WARNING,
        role=str(role or ""),
        tenant_id=tenant_id,
        request_id=request_id,
        context=context,
        include_stack=False,
    )


def log_policy_error(logger: logging.Logger, exc: Exception, *, source: str) -> StructuredError:
    """ERROR record for a policy that failed to load or validate."""
    return log_structured_error(
        logger,
        exc,
        context={"source": source, "defects": list(getattr(exc, "defects", []))},
        include_stack=False,
    )
