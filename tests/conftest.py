"""Root conftest - shared fixtures for all test layers.

Markers:
    @pytest.mark.unit   - No external deps
    @pytest.mark.smoke  - Fast subset
"""

from __future__ import annotations

from uuid import UUID, uuid4

import pytest

from src.infra.auth.policy import DEFAULT_POLICY, RbacPolicy


@pytest.fixture
def sample_user_id() -> UUID:
    return uuid4()


@pytest.fixture
def policy() -> RbacPolicy:
    return DEFAULT_POLICY


@pytest.fixture(autouse=True)
def _no_policy_file(monkeypatch: pytest.MonkeyPatch) -> None:
    """Tests never pick up a developer's RBAC_POLICY_FILE."""
    monkeypatch.delenv("RBAC_POLICY_FILE", raising=False)
