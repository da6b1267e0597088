"""Application composition root.

- Reads configuration from environment variables (RBAC_POLICY_FILE, LOG_LEVEL)
- Builds the RBAC policy once at startup
- Mounts the gateway app

Entry point: uvicorn src.main:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI  # noqa: TC002

from src.gateway.app import create_app
from src.infra.auth.policy import POLICY_FILE_ENV, load_policy_from_env
from src.shared.errors import PolicyConfigurationError
from src.shared.logging.error_handler import log_policy_error

logger = logging.getLogger(__name__)


def build_app() -> FastAPI:
    """Single composition root: configure logging, load policy, build app."""
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    try:
        policy = load_policy_from_env()
    except PolicyConfigurationError as exc:
        log_policy_error(logger, exc, source=os.environ.get(POLICY_FILE_ENV, ""))
        raise
    application = create_app(policy=policy)
    logger.info(
        "DigiComply RBAC app assembled: %d roles, %d routes",
        len(policy.role_permissions),
        len(application.routes),
    )
    return application


app = build_app()
