"""Tests for config.py: defaults, environment variable overrides and YAML loading."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from kcp_dynamic.config import ClientConfig, load_client_config


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "dynamic-client.yaml"
    path.write_text(content)
    return path


class TestClientConfig:
    def test_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = ClientConfig()
        assert config.kubeconfig_context is None
        assert config.host is None
        assert config.request_timeout == 30.0
        assert config.timeout == 30.0

    def test_env_override(self) -> None:
        with patch.dict(os.environ, {"KCP_DYNAMIC_REQUEST_TIMEOUT": "7.5"}):
            config = ClientConfig()
        assert config.request_timeout == 7.5

    @pytest.mark.parametrize("value", [0.0, -1.0])
    def test_non_positive_timeout_disables_deadline(self, value: float) -> None:
        assert ClientConfig(request_timeout=value).timeout is None

    def test_frozen(self) -> None:
        config = ClientConfig()
        with pytest.raises(AttributeError):
            config.host = "https://elsewhere"  # type: ignore[misc]


class TestLoadClientConfig:
    def test_full_file(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            "client:\n  context: kcp-admin\n  host: https://kcp.example:6443\n  request_timeout: 15\n",
        )
        config = load_client_config(path)
        assert config == ClientConfig(
            kubeconfig_context="kcp-admin", host="https://kcp.example:6443", request_timeout=15.0
        )

    def test_omitted_fields_keep_defaults(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "client:\n  context: kcp-admin\n")
        with patch.dict(os.environ, {}, clear=True):
            config = load_client_config(path)
        assert config.host is None
        assert config.request_timeout == 30.0

    def test_path_from_env(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "client:\n  host: https://from-env\n")
        with patch.dict(os.environ, {"KCP_DYNAMIC_CONFIG": str(path)}):
            config = load_client_config()
        assert config.host == "https://from-env"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="KCP_DYNAMIC_CONFIG"):
            load_client_config(tmp_path / "absent.yaml")

    @pytest.mark.parametrize("content", ["", "other: {}\n", "- a\n- b\n"])
    def test_missing_client_key(self, tmp_path: Path, content: str) -> None:
        with pytest.raises(ValueError, match="top-level 'client' key"):
            load_client_config(_write(tmp_path, content))

    def test_client_not_a_mapping(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="must be a mapping"):
            load_client_config(_write(tmp_path, "client: kcp\n"))

    def test_unknown_fields(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="unknown fields: retries"):
            load_client_config(_write(tmp_path, "client:\n  retries: 3\n"))

    def test_bad_timeout(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="must be a number"):
            load_client_config(_write(tmp_path, "client:\n  request_timeout: soon\n"))
