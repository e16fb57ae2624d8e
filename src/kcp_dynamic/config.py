"""Client configuration with environment variable overrides and YAML loading."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_FILE = "dynamic-client.yaml"

_KNOWN_FIELDS = ("context", "host", "request_timeout")


@dataclass(frozen=True)
class ClientConfig:
    """How to reach the API server and how long to wait for it.

    ``request_timeout`` is a connect and read deadline in seconds applied to
    every call that does not pass its own; zero or less disables it.
    """

    kubeconfig_context: str | None = None
    host: str | None = None
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("KCP_DYNAMIC_REQUEST_TIMEOUT", "30"))
    )

    @property
    def timeout(self) -> float | None:
        return self.request_timeout if self.request_timeout > 0 else None


def _load_client_config(path: Path) -> ClientConfig:
    """Parse a YAML client configuration file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        The parsed ClientConfig. Omitted fields keep their defaults.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        ValueError: If the file content is malformed.
    """
    if not path.exists():
        msg = (
            f"Client configuration file not found: {path}. "
            "Create it or set KCP_DYNAMIC_CONFIG to point to your config file."
        )
        raise FileNotFoundError(msg)

    raw = yaml.safe_load(path.read_text())

    if not isinstance(raw, dict) or "client" not in raw:
        msg = f"Client config file {path} must contain a top-level 'client' key."
        raise ValueError(msg)

    entry: Any = raw["client"]
    if not isinstance(entry, dict):
        msg = f"'client' in {path} must be a mapping, got {type(entry).__name__}."
        raise ValueError(msg)

    unknown = sorted(set(entry) - set(_KNOWN_FIELDS))
    if unknown:
        msg = f"Client config file {path} has unknown fields: {', '.join(unknown)}."
        raise ValueError(msg)

    kwargs: dict[str, Any] = {}
    if entry.get("context") is not None:
        kwargs["kubeconfig_context"] = str(entry["context"])
    if entry.get("host") is not None:
        kwargs["host"] = str(entry["host"])
    if entry.get("request_timeout") is not None:
        try:
            kwargs["request_timeout"] = float(entry["request_timeout"])
        except (TypeError, ValueError):
            msg = f"request_timeout in {path} must be a number, got {entry['request_timeout']!r}."
            raise ValueError(msg) from None
    return ClientConfig(**kwargs)


def load_client_config(path: Path | None = None) -> ClientConfig:
    """Load client configuration from YAML.

    Reads ``path`` when given, else the file named by ``KCP_DYNAMIC_CONFIG``,
    defaulting to ``dynamic-client.yaml`` in the current working directory.
    """
    if path is None:
        path = Path(os.environ.get("KCP_DYNAMIC_CONFIG", DEFAULT_CONFIG_FILE))
    return _load_client_config(path)
