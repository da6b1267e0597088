"""Composition root: build_app wires the policy from the environment."""

from __future__ import annotations

import logging

import pytest

from src.infra.auth.policy import DEFAULT_POLICY
from src.main import build_app
from src.shared.errors import PolicyConfigurationError


@pytest.mark.unit
class TestBuildApp:
    def test_default_policy(self) -> None:
        app = build_app()
        assert app.state.rbac_policy is DEFAULT_POLICY

    def test_policy_file(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "rbac.yaml"
        path.write_text("hierarchy:\n  client: 12\n")
        monkeypatch.setenv("RBAC_POLICY_FILE", str(path))
        app = build_app()
        assert app.state.rbac_policy.get_role_level("client") == 12

    def test_invalid_policy_logged_and_raised(
        self, tmp_path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("roles:\n  intern: ['auth:*']\n")
        monkeypatch.setenv("RBAC_POLICY_FILE", str(path))
        with caplog.at_level(logging.ERROR, logger="src.main"), pytest.raises(
            PolicyConfigurationError
        ):
            build_app()
        payload = caplog.records[-1].structured_error
        assert payload["error_code"] == "POLICY_CONFIG"
        assert payload["context"]["source"] == str(path)

    def test_malformed_policy_file_logged_and_raised(
        self, tmp_path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("roles: [unclosed\n")
        monkeypatch.setenv("RBAC_POLICY_FILE", str(path))
        with caplog.at_level(logging.ERROR, logger="src.main"), pytest.raises(
            PolicyConfigurationError, match="not valid YAML"
        ):
            build_app()
        assert caplog.records[-1].structured_error["error_code"] == "POLICY_CONFIG"
